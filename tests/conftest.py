"""Pytest configuration and fixtures for shopbridge.

Remote endpoints are simulated with httpx.MockTransport; nothing here
touches the network. Sleeps are replaced by a recorder so backoff and
polling delays can be asserted without waiting.
"""

import pytest

from shopbridge.core.config import Settings, get_settings


class SleepRecorder:
    """Awaitable stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


@pytest.fixture
def sleep() -> SleepRecorder:
    """Recording sleep; inspect .calls after the operation."""
    return SleepRecorder()


@pytest.fixture
def platform_settings() -> Settings:
    """Settings for the platform backend with test credentials."""
    return Settings(
        _env_file=None,
        storage_backend="platform",
        shop_domain="test-shop.myshopify.com",
        platform_access_token="shpat_test",
        api_key="test-api-key",
        api_secret="test-api-secret",
    )


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Ensure no test sees settings cached by another."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
