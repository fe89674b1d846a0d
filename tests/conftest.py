"""Shared fixtures for the clean-framework test suite."""

from __future__ import annotations

import logging
import os

import pytest
import structlog

from clean_framework.core.config import Settings
from clean_framework.features.greeting import build_container
from clean_framework.providers.container import ProvidersContainer


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def fast_settings() -> Settings:
    """Settings with short delays so timing tests stay quick."""
    return Settings(
        debounce={"duration_seconds": 0.05},
        demo={
            "ticks": 3,
            "tick_interval_seconds": 0.02,
            "greeting_delay_seconds": 0.01,
        },
    )


# ---------------------------------------------------------------------------
# Container
# ---------------------------------------------------------------------------

@pytest.fixture
def greeting_container(fast_settings: Settings) -> ProvidersContainer:
    """Greeting feature wired on a fresh container (not yet resolved)."""
    return build_container(fast_settings)


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CLEAN_FRAMEWORK_* variables from the host out of Settings()."""
    for key in list(os.environ):
        if key.startswith("CLEAN_FRAMEWORK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo setup_logging() so handlers never outlive a captured stream."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
