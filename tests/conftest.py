"""pagechain test configuration: shared fixtures for unit tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest


# ---------------------------------------------------------------------------
# Async backend
# ---------------------------------------------------------------------------


@pytest.fixture()
def anyio_backend() -> str:
    """Pending results are built on asyncio futures."""
    return "asyncio"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear the settings LRU cache between tests."""
    from pagechain.settings.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Mock Playwright page
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_page():
    """Return an ``AsyncMock`` standing in for a Playwright async ``Page``.

    Every coroutine method (``goto``, ``evaluate``, ...) records its calls;
    ``evaluate`` returns ``None`` unless a test sets ``return_value``.
    """
    page = AsyncMock()
    page.main_frame = MagicMock(name="main_frame")
    page.set_default_timeout = MagicMock()
    page.set_default_navigation_timeout = MagicMock()
    page.evaluate.return_value = None
    return page


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that require a real browser")
