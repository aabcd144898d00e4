"""
Session module: focus-session activity guarding.

- **signals**: activity/visibility source abstraction
- **guard**: idle and hidden-surface watchdog with auto-pause
- **controller**: owns the live session, its guard and the final award
"""

from spheregrid.modules.session.controller import (
    SessionListener,
    SessionSummary,
    WorkSessionController,
)
from spheregrid.modules.session.guard import GuardConfig, GuardState, SessionGuard
from spheregrid.modules.session.signals import (
    ActivityKind,
    ActivitySignalSource,
    InMemorySignalSource,
    Subscription,
)

__all__ = [
    "ActivityKind",
    "ActivitySignalSource",
    "InMemorySignalSource",
    "Subscription",
    "GuardConfig",
    "GuardState",
    "SessionGuard",
    "SessionListener",
    "SessionSummary",
    "WorkSessionController",
]
