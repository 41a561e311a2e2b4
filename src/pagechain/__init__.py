"""pagechain: fluent, deferred command queues over a Playwright page."""

from __future__ import annotations

from pagechain.exceptions import (
    ActionError,
    PageChainError,
    SequenceAbortedError,
    SerializationError,
)
from pagechain.page import ChainState, Page
from pagechain.queue import Action, ActionQueue, PendingResult
from pagechain.runner import SessionRunner
from pagechain.serializer import UNDEFINED, JSFunction, to_expression

try:
    from importlib.metadata import version

    __version__ = version("pagechain")
except Exception:
    __version__ = "0.0.0"

__all__ = [
    "UNDEFINED",
    "Action",
    "ActionError",
    "ActionQueue",
    "ChainState",
    "JSFunction",
    "Page",
    "PageChainError",
    "PendingResult",
    "SequenceAbortedError",
    "SerializationError",
    "SessionRunner",
    "to_expression",
]
