"""Deferred action queue.

An ``Action`` is a named async thunk bound to nothing until the runner hands
it the session.  Actions are appended in call order and consumed strictly
head-to-tail; once handed out by ``drain()`` an action is gone from the queue,
so it can never run twice.

Value-producing actions carry a ``PendingResult``, an awaitable settled by
the action when it runs.  A ``PendingResult`` does not need a running event
loop to be created, so chains can be built from plain synchronous code.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable, Generator, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

ActionThunk = Callable[[Any], Awaitable[Any]]


class PendingResult(Generic[T]):
    """Value of one queued action, available once that action has run.

    Await it to get the value (or the error the action failed with)::

        title = page.evaluate_with_return("document.title")
        await page.run()
        print(await title)

    Awaiting before the queue drains simply waits; it never triggers the
    drain by itself.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._done = False
        self._value: T | None = None
        self._exception: BaseException | None = None
        self._future: asyncio.Future[T] | None = None

    def __repr__(self) -> str:
        if not self._done:
            state = "pending"
        elif self._exception is not None:
            state = f"failed: {self._exception!r}"
        else:
            state = f"value={self._value!r}"
        return f"<PendingResult {self.name} {state}>"

    def done(self) -> bool:
        """Return ``True`` once the owning action has settled this result."""
        return self._done

    def result(self) -> T:
        """Return the value, or raise the action's error.

        Raises:
            asyncio.InvalidStateError: If the action has not run yet.
        """
        if not self._done:
            raise asyncio.InvalidStateError(f"Result of {self.name} is not available yet")
        if self._exception is not None:
            raise self._exception
        return self._value  # type: ignore[return-value]

    def exception(self) -> BaseException | None:
        if not self._done:
            raise asyncio.InvalidStateError(f"Result of {self.name} is not available yet")
        return self._exception

    def set_result(self, value: T) -> None:
        self._settle()
        self._value = value
        if self._future is not None and not self._future.done():
            self._future.set_result(value)

    def set_exception(self, exc: BaseException) -> None:
        self._settle()
        self._exception = exc
        if self._future is not None and not self._future.done():
            self._future.set_exception(exc)

    def _settle(self) -> None:
        if self._done:
            raise asyncio.InvalidStateError(f"Result of {self.name} was already settled")
        self._done = True

    async def _wait(self) -> T:
        if not self._done:
            if self._future is None:
                self._future = asyncio.get_running_loop().create_future()
            # Shield so a cancelled waiter does not cancel the shared future.
            await asyncio.shield(self._future)
        return self.result()

    def __await__(self) -> Generator[Any, None, T]:
        return self._wait().__await__()


@dataclass(frozen=True, slots=True)
class Action:
    """One deferred unit of work.

    Attributes:
        name: Label used in logs and errors (usually the builder method name).
        thunk: Coroutine function receiving the session handle.
        result: Pending result this action settles, for value-producing calls.
    """

    name: str
    thunk: ActionThunk
    result: PendingResult[Any] | None = None

    async def __call__(self, session: Any) -> Any:
        value = await self.thunk(session)
        if self.result is not None:
            self.result.set_result(value)
        return value

    def reject(self, exc: BaseException) -> None:
        """Fail this action's pending result, if it has one still open."""
        if self.result is not None and not self.result.done():
            self.result.set_exception(exc)


class ActionQueue:
    """FIFO of ``Action`` objects.

    ``append`` adds to the tail; ``drain`` is the only way to take actions
    out.  Interior elements are never exposed.
    """

    def __init__(self) -> None:
        self._actions: deque[Action] = deque()

    def __len__(self) -> int:
        return len(self._actions)

    def __repr__(self) -> str:
        return f"<ActionQueue pending={len(self._actions)}>"

    def append(self, action: Action) -> Action:
        self._actions.append(action)
        logger.debug("Queued %s (%d pending)", action.name, len(self._actions))
        return action

    def drain(self) -> Iterator[Action]:
        """Yield actions head-to-tail, removing each before it is yielded.

        Actions appended while the iteration is in progress are yielded
        after the ones already queued.
        """
        while self._actions:
            yield self._actions.popleft()

    def discard(self) -> list[Action]:
        """Remove and return every action still queued."""
        dropped = list(self._actions)
        self._actions.clear()
        return dropped
