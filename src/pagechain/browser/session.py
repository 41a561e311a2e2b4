"""Launch a Playwright Chromium session configured from settings."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from playwright.async_api import async_playwright

if TYPE_CHECKING:
    from playwright.async_api import Page

    from pagechain.settings.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class BrowserProfile:
    """Playwright launch + context arguments for a single session."""

    # Arguments for pw.chromium.launch()
    launch_args: dict[str, Any] = field(default_factory=dict)

    # Arguments for browser.new_context()
    context_args: dict[str, Any] = field(default_factory=dict)


def build_browser_profile(settings: Settings) -> BrowserProfile:
    """Translate ``settings.browser`` into Playwright keyword arguments."""
    browser = settings.browser
    profile = BrowserProfile()

    profile.launch_args["headless"] = browser.headless
    profile.launch_args["chromium_sandbox"] = browser.sandbox
    if browser.channel:
        profile.launch_args["channel"] = browser.channel

    profile.context_args["viewport"] = {
        "width": browser.viewport_width,
        "height": browser.viewport_height,
    }
    if browser.user_agent:
        profile.context_args["user_agent"] = browser.user_agent
    if browser.http_username:
        profile.context_args["http_credentials"] = {
            "username": browser.http_username,
            "password": browser.http_password,
        }

    return profile


@asynccontextmanager
async def open_session(settings: Settings | None = None) -> AsyncIterator[Page]:
    """Start Playwright, open one page, and close everything on exit.

    Requires ``playwright install chromium`` to have been run at least once.

    Args:
        settings: Settings to use; defaults to ``get_settings()``.

    Yields:
        A Playwright ``Page`` with the configured default timeouts applied.
    """
    if settings is None:
        from pagechain.settings import get_settings

        settings = get_settings()

    profile = build_browser_profile(settings)

    async with async_playwright() as pw:
        browser = await pw.chromium.launch(**profile.launch_args)
        try:
            context = await browser.new_context(**profile.context_args)
            page = await context.new_page()
            page.set_default_timeout(settings.browser.timeout_ms)
            page.set_default_navigation_timeout(settings.browser.navigation_timeout_ms)
            logger.debug(
                "Browser session opened (headless=%s, timeout=%dms)",
                settings.browser.headless,
                settings.browser.timeout_ms,
            )
            yield page
        finally:
            await browser.close()
            logger.debug("Browser session closed")
