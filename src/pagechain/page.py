"""Fluent builder over a Playwright page.

Every method appends exactly one action to the builder's queue and returns
the builder, so calls chain::

    async with Page.launch() as page:
        title = (
            page.goto("https://example.com")
            .wait_for_element("h1", timeout=5_000)
            .save_screenshot("example.png")
            .evaluate_with_return("document.title")
        )
        await page.run()
        print(await title)

``evaluate_with_return`` is the one exception: it returns a
``PendingResult`` instead of the builder.  Nothing touches the browser
until ``run()`` (or ``await page``) drains the queue.  If an action fails,
the drain halts there; see ``pagechain.runner``.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import AsyncIterator, Generator
from contextlib import asynccontextmanager
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pagechain.exceptions import PageChainError
from pagechain.queue import Action, ActionQueue, ActionThunk, PendingResult
from pagechain.runner import SessionRunner
from pagechain.serializer import PageScript, to_expression

if TYPE_CHECKING:
    from playwright.async_api import Page as PlaywrightPage

    from pagechain.settings.config import Settings

logger = logging.getLogger(__name__)


class ChainState(str, Enum):
    """Lifecycle of a builder's queue."""

    BUILDING = "building"
    DRAINING = "draining"
    DONE = "done"


class Page:
    """Chainable, deferred command queue bound to one Playwright page.

    Args:
        session: The live Playwright ``Page``.  The builder owns it; actions
            only borrow it while they run.
        runner: Runner used to drain the queue (mainly for tests).
    """

    def __init__(self, session: PlaywrightPage, runner: SessionRunner | None = None) -> None:
        self.session = session
        self._queue = ActionQueue()
        self._runner = runner or SessionRunner()
        self._headers: dict[str, str] = {}
        self._state = ChainState.BUILDING

    def __repr__(self) -> str:
        return f"<Page state={self._state.value} pending={len(self._queue)}>"

    @classmethod
    @asynccontextmanager
    async def launch(cls, settings: Settings | None = None) -> AsyncIterator[Page]:
        """Open a fresh browser session and yield a builder bound to it."""
        from pagechain.browser.session import open_session

        async with open_session(settings) as session:
            yield cls(session)

    @property
    def state(self) -> ChainState:
        return self._state

    @property
    def pending(self) -> int:
        """Number of actions queued and not yet run."""
        return len(self._queue)

    # ------------------------------------------------------------------
    # Draining
    # ------------------------------------------------------------------

    async def run(self) -> int:
        """Run every queued action in order.

        Returns:
            Number of actions executed.

        Raises:
            ActionError: If an action fails; later actions are dropped.
            PageChainError: If this builder is already draining.
        """
        if self._state is ChainState.DRAINING:
            raise PageChainError("Chain is already draining; await the running drain instead")
        self._state = ChainState.DRAINING
        try:
            return await self._runner.run(self._queue, self.session)
        finally:
            self._state = ChainState.DONE

    async def _run_and_return(self) -> Page:
        await self.run()
        return self

    def __await__(self) -> Generator[Any, None, Page]:
        return self._run_and_return().__await__()

    def _push(self, name: str, thunk: ActionThunk, result: PendingResult[Any] | None = None) -> Page:
        self._queue.append(Action(name, thunk, result))
        if self._state is ChainState.DONE:
            self._state = ChainState.BUILDING
        return self

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def goto(self, url: str) -> Page:
        return self._push("goto", lambda page: page.goto(url))

    def close_page(self) -> Page:
        return self._push("close_page", lambda page: page.close())

    def back(self, **options: Any) -> Page:
        """Go back in history.  *options* are Playwright navigation options
        (``timeout``, ``wait_until``)."""
        return self._push("back", lambda page: page.go_back(**options))

    def forward(self, **options: Any) -> Page:
        return self._push("forward", lambda page: page.go_forward(**options))

    def refresh(self, **options: Any) -> Page:
        return self._push("refresh", lambda page: page.reload(**options))

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def with_user_agent(self, user_agent: str) -> Page:
        return self._push("with_user_agent", self._header_setter("User-Agent", user_agent))

    def with_auth(self, username: str, password: str) -> Page:
        """Send HTTP Basic credentials with every request from this page.

        The ``Authorization`` header is sent up front on every request to
        every origin, third-party subresources included, not only in answer
        to a 401 challenge.  To answer challenges only, set
        ``browser.http_username`` / ``browser.http_password`` in settings;
        ``open_session`` then passes them as context-level
        ``http_credentials``.
        """
        token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        return self._push("with_auth", self._header_setter("Authorization", f"Basic {token}"))

    def _header_setter(self, header: str, value: str) -> ActionThunk:
        # Playwright replaces the whole header set on each call, so merge.
        async def _set(page: PlaywrightPage) -> None:
            self._headers[header] = value
            await page.set_extra_http_headers(dict(self._headers))

        return _set

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------

    def save_screenshot(self, path: str | Path, **options: Any) -> Page:
        """Write a screenshot to *path*, creating its directory when the action runs."""
        return self._push("save_screenshot", self._capture("screenshot", path, options))

    def save_pdf(self, path: str | Path, **options: Any) -> Page:
        """Print the page to PDF (Chromium headless only)."""
        return self._push("save_pdf", self._capture("pdf", path, options))

    @staticmethod
    def _capture(method: str, path: str | Path, options: dict[str, Any]) -> ActionThunk:
        async def _save(page: PlaywrightPage) -> None:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            await getattr(page, method)(**{**options, "path": path})

        return _save

    # ------------------------------------------------------------------
    # Waiting
    #
    # ``timeout`` is in milliseconds.  ``None`` leaves the session's default
    # timeout in force; it does not mean "wait forever" (pass 0 for that).
    # ------------------------------------------------------------------

    def wait_for_navigation(self, timeout: float | None = None) -> Page:
        """Wait for the next main-frame navigation and its ``load`` event."""

        async def _wait(page: PlaywrightPage) -> None:
            await page.wait_for_event(
                "framenavigated",
                predicate=lambda frame: frame == page.main_frame,
                timeout=timeout,
            )
            await page.wait_for_load_state("load", timeout=timeout)

        return self._push("wait_for_navigation", _wait)

    def wait_for_element(self, selector: str, timeout: float | None = None) -> Page:
        return self._push("wait_for_element", lambda page: page.wait_for_selector(selector, timeout=timeout))

    def wait_for_evaluation(self, fn: PageScript, *args: Any, timeout: float | None = None) -> Page:
        """Wait until *fn* (applied to *args*) returns a truthy value in the page.

        Raises:
            SerializationError: Immediately, if *fn* or *args* cannot be serialized.
        """
        expression = to_expression(fn, *args)
        return self._push(
            "wait_for_evaluation",
            lambda page: page.wait_for_function(expression, timeout=timeout),
        )

    # ------------------------------------------------------------------
    # Scripts
    # ------------------------------------------------------------------

    def evaluate(self, fn: PageScript, *args: Any) -> Page:
        """Run a script in the page and discard its result.

        *fn* is either page source text or a ``JSFunction`` called with
        *args*.  The function does not close over anything on this side;
        pass what it needs as *args*.

        Raises:
            SerializationError: Immediately, if *fn* or *args* cannot be serialized.
        """
        expression = to_expression(fn, *args)
        return self._push("evaluate", lambda page: page.evaluate(expression))

    def evaluate_with_return(self, fn: PageScript, *args: Any) -> PendingResult[Any]:
        """Run a script in the page and capture its value.

        Returns:
            A ``PendingResult`` settled with the evaluated value when this
            action runs, or with the error if it (or an earlier action) fails.

        Raises:
            SerializationError: Immediately, if *fn* or *args* cannot be serialized.
        """
        expression = to_expression(fn, *args)
        result: PendingResult[Any] = PendingResult("evaluate_with_return")
        self._push("evaluate_with_return", lambda page: page.evaluate(expression), result)
        return result
