"""Pytest configuration shared across the suite."""

import os

import pytest

_DEFAULT_ENV_VARS = {
    "TELEGRAM_BOT_TOKEN": "123456:test-token",
    "OPENSERV_API_KEY": "test-openserv-key",
    "WORKSPACE_ID": "42",
}

for key, value in _DEFAULT_ENV_VARS.items():
    os.environ.setdefault(key, value)


@pytest.fixture
def anyio_backend() -> str:
    """Run AnyIO-powered tests against asyncio only."""
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Fresh settings, sessions and tracked workflows for every test."""
    from cryptoverifier.config import get_settings
    from cryptoverifier.services.tracker import get_workflow_tracker
    from cryptoverifier.telegram_bot.context import get_session_store

    get_settings.cache_clear()
    get_session_store().clear()
    get_workflow_tracker().clear()
    yield
    get_settings.cache_clear()
