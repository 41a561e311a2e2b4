"""pagechain exception hierarchy."""

from __future__ import annotations

from typing import Any


class PageChainError(Exception):
    """Base exception for all pagechain errors."""


class SerializationError(PageChainError):
    """Raised when a function or argument cannot be turned into page source text.

    Raised synchronously by the builder method that received the value, never
    later when the queue drains.

    Attributes:
        value: The offending function or argument.
        reason: Short description of why it could not be serialized.
    """

    def __init__(self, value: Any, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Cannot serialize {type(value).__name__} for the page: {reason}")


class ActionError(PageChainError):
    """Raised when a queued action fails while the queue is draining.

    Attributes:
        action_name: Name of the failing action (e.g. ``goto``).
        position: Zero-based position of the action within the drain.
        cause: The exception raised by the underlying session call.
    """

    def __init__(self, action_name: str, position: int, cause: BaseException) -> None:
        self.action_name = action_name
        self.position = position
        self.cause = cause
        super().__init__(f"Action #{position} ({action_name}) failed: {cause}")


class SequenceAbortedError(PageChainError):
    """Set on the pending result of an action that never completed.

    Actions queued behind a failed action are discarded; any value they
    would have produced is rejected with this error.  The same happens to
    the running action and everything behind it when the drain itself is
    cancelled.

    Attributes:
        action_name: The action whose result is rejected.
        failed_action: The action that stopped the drain.
        cancelled: ``True`` if the drain was cancelled rather than failed.
    """

    def __init__(self, action_name: str, failed_action: str, cancelled: bool = False) -> None:
        self.action_name = action_name
        self.failed_action = failed_action
        self.cancelled = cancelled
        if cancelled:
            message = f"Action {action_name} did not complete because the drain was cancelled during {failed_action}"
        else:
            message = f"Action {action_name} was not run because {failed_action} failed earlier in the chain"
        super().__init__(message)


class ChainScriptError(PageChainError):
    """Raised when a chain script file cannot be loaded."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid chain script {path}: {reason}")
