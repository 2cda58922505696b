"""Shared pytest fixtures."""

import pytest

from tracker.logging.context import clear_log_context

ENV_VARS = (
    "DATABASE_URL",
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "BATCH_ACTOR_ID",
    "LOG_LEVEL",
    "ENVIRONMENT",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Clear environment variables read by the config loader."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_log_context():
    """Keep run/page fields from leaking between tests."""
    clear_log_context()
    yield
    clear_log_context()
