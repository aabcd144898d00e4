"""
Pytest Configuration and Fixtures for SphereGrid Core Tests
===========================================================

Purpose
-------
Centralized fixtures for the SphereGrid test suite: a virtual-time scheduler,
an in-memory activity signal source, guard callback mocks and a clean
ConfigManager per test.

Responsibilities
----------------
- Force the testing environment before any SphereGrid module is imported
- Reset ConfigManager state between tests (overrides never leak)
- Provide deterministic time via ManualScheduler

Non-Responsibilities
--------------------
- Test implementation (delegated to test files)
- Production configuration (test-specific only)

Architecture Notes
------------------
- Everything is a unit test: no network, no database, no real clock except
  in the asyncio scheduler tests
- Guard callbacks are children of one parent Mock so call order across
  callbacks can be asserted through ``mock_calls``
"""

from __future__ import annotations

import os

# Must be set before spheregrid.core.config is imported (Config validates on import)
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from typing import Generator

import pytest

from spheregrid.core.config import Config, ConfigManager
from spheregrid.core.timing import ManualScheduler
from spheregrid.modules.session.guard import GuardConfig, SessionGuard
from spheregrid.modules.session.signals import InMemorySignalSource


# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def config_manager() -> Generator[type, None, None]:
    """
    Fresh ConfigManager backed by the repository's config/ directory.

    Scope: function (overrides applied in one test never reach another)
    """
    ConfigManager.reset()
    ConfigManager.initialize(config_dir=Config.CONFIG_DIR, force=True)
    yield ConfigManager
    ConfigManager.reset()


# ============================================================================
# SESSION GUARD FIXTURES
# ============================================================================


@pytest.fixture
def manual_scheduler() -> ManualScheduler:
    """Virtual clock starting at 0 ms."""
    return ManualScheduler()


@pytest.fixture
def signal_source() -> InMemorySignalSource:
    """Visible work surface with no subscribers."""
    return InMemorySignalSource()


@pytest.fixture
def guard_callbacks(mocker):
    """
    The four guard callbacks as children of one parent mock.

    Usage:
        guard_callbacks.mock_calls == [call.on_idle_detected("user_idle")]
    """
    return mocker.Mock(name="guard_callbacks")


@pytest.fixture
def guard_config() -> GuardConfig:
    """Default thresholds: 5 min idle, 60 s hidden, 10 min focus, 30 s poll and grace."""
    return GuardConfig()


@pytest.fixture
def make_guard(signal_source, manual_scheduler, guard_callbacks, guard_config):
    """Factory building a SessionGuard wired to the shared fixtures."""

    def _make(**overrides) -> SessionGuard:
        kwargs = {
            "on_idle_detected": guard_callbacks.on_idle_detected,
            "on_idle_confirmed": guard_callbacks.on_idle_confirmed,
            "on_idle_resolved": guard_callbacks.on_idle_resolved,
            "on_auto_pause": guard_callbacks.on_auto_pause,
            "config": guard_config,
            "session_id": "s-test",
        }
        kwargs.update(overrides)
        signals = kwargs.pop("signals", signal_source)
        return SessionGuard(signals, manual_scheduler, **kwargs)

    return _make
