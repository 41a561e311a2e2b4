"""Unit tests for pagechain.queue: actions, pending results, and the FIFO."""

from __future__ import annotations

import asyncio

import pytest

from pagechain.queue import Action, ActionQueue, PendingResult


def _noop_action(name: str) -> Action:
    async def _thunk(session: object) -> None:
        return None

    return Action(name, _thunk)


# ---------------------------------------------------------------------------
# ActionQueue
# ---------------------------------------------------------------------------


class TestActionQueue:
    """FIFO semantics."""

    def test_new_queue_is_empty(self) -> None:
        queue = ActionQueue()
        assert len(queue) == 0
        assert list(queue.drain()) == []

    def test_drain_yields_in_append_order(self) -> None:
        queue = ActionQueue()
        for name in ("a", "b", "c"):
            queue.append(_noop_action(name))
        assert [a.name for a in queue.drain()] == ["a", "b", "c"]

    def test_drain_consumes(self) -> None:
        queue = ActionQueue()
        queue.append(_noop_action("a"))
        list(queue.drain())
        assert len(queue) == 0
        assert list(queue.drain()) == []

    def test_action_removed_before_it_is_yielded(self) -> None:
        queue = ActionQueue()
        queue.append(_noop_action("a"))
        queue.append(_noop_action("b"))
        drain = queue.drain()
        next(drain)
        assert len(queue) == 1

    def test_appends_during_drain_come_last(self) -> None:
        queue = ActionQueue()
        queue.append(_noop_action("a"))
        queue.append(_noop_action("b"))
        seen = []
        for action in queue.drain():
            seen.append(action.name)
            if action.name == "a":
                queue.append(_noop_action("c"))
        assert seen == ["a", "b", "c"]

    def test_duplicates_are_kept(self) -> None:
        queue = ActionQueue()
        action = _noop_action("same")
        queue.append(action)
        queue.append(action)
        assert len(queue) == 2

    def test_discard_returns_remaining(self) -> None:
        queue = ActionQueue()
        queue.append(_noop_action("a"))
        queue.append(_noop_action("b"))
        dropped = queue.discard()
        assert [a.name for a in dropped] == ["a", "b"]
        assert len(queue) == 0


# ---------------------------------------------------------------------------
# Action
# ---------------------------------------------------------------------------


class TestAction:
    """Invoking a single action."""

    @pytest.mark.anyio
    async def test_call_passes_session(self) -> None:
        received = []

        async def _thunk(session: object) -> str:
            received.append(session)
            return "ok"

        session = object()
        assert await Action("lookup", _thunk)(session) == "ok"
        assert received == [session]

    @pytest.mark.anyio
    async def test_call_settles_pending_result(self) -> None:
        async def _thunk(session: object) -> int:
            return 42

        result: PendingResult[int] = PendingResult("answer")
        await Action("answer", _thunk, result)(None)
        assert result.done()
        assert result.result() == 42

    def test_reject_without_result_is_noop(self) -> None:
        _noop_action("plain").reject(RuntimeError("x"))

    def test_reject_settles_open_result_once(self) -> None:
        result: PendingResult[None] = PendingResult("r")
        action = Action("r", _noop_action("r").thunk, result)
        first = RuntimeError("first")
        action.reject(first)
        action.reject(RuntimeError("second"))
        assert result.exception() is first


# ---------------------------------------------------------------------------
# PendingResult
# ---------------------------------------------------------------------------


class TestPendingResult:
    """Awaitable results settled by their action."""

    def test_created_without_event_loop(self) -> None:
        result: PendingResult[int] = PendingResult("sync")
        assert not result.done()

    def test_result_before_settled_raises(self) -> None:
        result: PendingResult[int] = PendingResult("early")
        with pytest.raises(asyncio.InvalidStateError):
            result.result()

    def test_double_settle_raises(self) -> None:
        result: PendingResult[int] = PendingResult("twice")
        result.set_result(1)
        with pytest.raises(asyncio.InvalidStateError):
            result.set_result(2)

    def test_repr_shows_state(self) -> None:
        result: PendingResult[int] = PendingResult("r")
        assert "pending" in repr(result)
        result.set_result(7)
        assert "value=7" in repr(result)

    @pytest.mark.anyio
    async def test_await_after_settle(self) -> None:
        result: PendingResult[str] = PendingResult("title")
        result.set_result("Example")
        assert await result == "Example"

    @pytest.mark.anyio
    async def test_await_waits_until_settled(self) -> None:
        result: PendingResult[str] = PendingResult("later")

        async def settle_after_delay() -> None:
            await asyncio.sleep(0.01)
            result.set_result("done")

        task = asyncio.ensure_future(settle_after_delay())
        assert await result == "done"
        await task

    @pytest.mark.anyio
    async def test_await_raises_exception(self) -> None:
        result: PendingResult[str] = PendingResult("broken")
        result.set_exception(ValueError("nope"))
        with pytest.raises(ValueError, match="nope"):
            await result

    @pytest.mark.anyio
    async def test_pending_exception_reaches_waiter(self) -> None:
        result: PendingResult[str] = PendingResult("broken-later")

        async def fail_after_delay() -> None:
            await asyncio.sleep(0.01)
            result.set_exception(KeyError("gone"))

        task = asyncio.ensure_future(fail_after_delay())
        with pytest.raises(KeyError):
            await result
        await task

    @pytest.mark.anyio
    async def test_cancelled_waiter_does_not_cancel_result(self) -> None:
        result: PendingResult[int] = PendingResult("shared")
        waiter = asyncio.ensure_future(result._wait())
        await asyncio.sleep(0)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter
        result.set_result(5)
        assert await result == 5
