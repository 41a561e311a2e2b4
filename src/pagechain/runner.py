"""Session runner: drain an ``ActionQueue`` against a live page, one action at a time.

Contract:

* Actions run strictly in queue order; the next one starts only after the
  current one has fully settled.
* The first failure halts the drain.  It is raised as ``ActionError`` and,
  for a value-producing action, also set on that action's pending result.
* Actions still queued behind the failure never run.  They are removed from
  the queue and their pending results are rejected with
  ``SequenceAbortedError``.
* Cancelling the drain (e.g. ``asyncio.wait_for`` timing out) halts it the
  same way: the running action and everything behind it are dropped and
  rejected with ``SequenceAbortedError``, then the cancellation propagates.
* Draining an empty queue returns immediately without touching the session.
* Nothing is retried.  Re-append and re-run to try again.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from pagechain.exceptions import ActionError, SequenceAbortedError
from pagechain.queue import Action, ActionQueue

logger = logging.getLogger(__name__)


class SessionRunner:
    """Executes queued actions sequentially against a session handle."""

    async def run(self, queue: ActionQueue, session: Any) -> int:
        """Drain *queue* against *session*.

        Args:
            queue: The queue to consume.
            session: Session handle passed to every action (a Playwright page).

        Returns:
            Number of actions executed.

        Raises:
            ActionError: If an action fails.  Nothing after it runs.
            asyncio.CancelledError: If the drain is cancelled.  Nothing
                after the interrupted action runs.
        """
        executed = 0
        start = time.monotonic()

        for position, action in enumerate(queue.drain()):
            logger.debug("Running action #%d: %s", position, action.name)
            try:
                await action(session)
            except asyncio.CancelledError:
                action.reject(SequenceAbortedError(action.name, action.name, cancelled=True))
                dropped = self._abort(queue, action, cancelled=True)
                logger.warning(
                    "Drain cancelled during action #%d (%s); %d queued action(s) dropped",
                    position,
                    action.name,
                    len(dropped),
                )
                raise
            except Exception as exc:
                error = ActionError(action.name, position, exc)
                action.reject(error)
                dropped = self._abort(queue, action)
                logger.warning(
                    "Action #%d (%s) failed: %s; %d queued action(s) dropped",
                    position,
                    action.name,
                    exc,
                    len(dropped),
                )
                raise error from exc
            executed += 1

        if executed:
            logger.debug("Drained %d action(s) in %.2fs", executed, time.monotonic() - start)
        return executed

    @staticmethod
    def _abort(queue: ActionQueue, halted: Action, cancelled: bool = False) -> list[Action]:
        """Drop everything still queued and reject its pending results."""
        dropped = queue.discard()
        for skipped in dropped:
            skipped.reject(SequenceAbortedError(skipped.name, halted.name, cancelled=cancelled))
        return dropped
