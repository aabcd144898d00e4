"""
SessionGuard: idle and hidden-surface detection for a running focus session.

Purpose
-------
Watch a work session for two kinds of absence and pause it automatically:

- **user_idle**: no activity for ``idle_timeout_ms``. The user is first asked
  (``on_idle_detected``) and gets ``grace_period_ms`` to answer before the
  session is auto-paused.
- **tab_hidden**: the work surface stayed hidden longer than
  ``tab_hidden_timeout_ms``. No prompt; the session is auto-paused directly.

Also answers whether a finished session was long enough to count as a
qualified focus session.

State Machine
-------------
    STOPPED ──start──▶ RUNNING ──idle poll──▶ IDLE_SUSPECTED
       ▲                │  ▲                     │       │
       │              pause └──confirm/activity──┘     grace expiry,
      stop              ▼                               no activity
       │             PAUSED ──resume──▶ RUNNING           ▼
       │                                             AUTO_PAUSED ──resume──▶ RUNNING
    destroy (from anywhere) ──▶ DESTROYED (terminal)

Design Notes
------------
- Time and timers come from an injected ``Scheduler``; activity and
  visibility come from an injected ``ActivitySignalSource``.
- Every handler is short and synchronous and touches only guard state.
- Auto-pause fires ``on_idle_confirmed(reason)`` then ``on_auto_pause(reason)``
  exactly once per episode; the guard is already AUTO_PAUSED when they run.
- Callback exceptions propagate to whatever drove the event (a signal
  emission or a scheduler tick). State changes before the callbacks run, so
  if ``on_idle_confirmed`` raises, ``on_auto_pause`` is never called and the
  guard stays AUTO_PAUSED without notifying its owner.

Usage
-----
    guard = SessionGuard(
        signals,
        scheduler,
        on_idle_detected=ui.ask_still_there,
        on_idle_confirmed=ui.close_prompt,
        on_idle_resolved=ui.close_prompt,
        on_auto_pause=controller.handle_auto_pause,
    )
    guard.start()
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional

from spheregrid.core.config.manager import ConfigManager
from spheregrid.core.logging.logger import get_logger
from spheregrid.core.timing.scheduler import ScheduledTask, Scheduler
from spheregrid.modules.session.signals import ActivityKind, ActivitySignalSource, Subscription
from spheregrid.modules.shared import constants as C
from spheregrid.modules.shared.exceptions import InvalidArgumentError, InvalidOperationError
from spheregrid.modules.shared.validators import (
    validate_callable,
    validate_non_negative_number,
    validate_positive_number,
)

logger = get_logger(__name__)


# ============================================================================
# Configuration
# ============================================================================


@dataclass(frozen=True)
class GuardConfig:
    """
    Guard thresholds, all in milliseconds.

    Attributes
    ----------
    idle_timeout_ms : float
        Inactivity before the user is asked whether they are still there
    tab_hidden_timeout_ms : float
        Hidden time after which the session is auto-paused
    min_focus_chunk_ms : float
        Minimum active duration of a qualified focus session
    idle_check_interval_ms : float
        Period of the idle poll
    grace_period_ms : float
        Time the user has to answer the idle prompt
    """

    idle_timeout_ms: float = C.IDLE_TIMEOUT_MS
    tab_hidden_timeout_ms: float = C.TAB_HIDDEN_TIMEOUT_MS
    min_focus_chunk_ms: float = C.MIN_FOCUS_CHUNK_MS
    idle_check_interval_ms: float = C.IDLE_CHECK_INTERVAL_MS
    grace_period_ms: float = C.GRACE_PERIOD_MS

    def __post_init__(self) -> None:
        for f in fields(self):
            validate_positive_number(getattr(self, f.name), f.name)

    def merged(self, overrides: Optional[Mapping[str, Any]] = None) -> "GuardConfig":
        """Return a copy with ``overrides`` applied; unknown keys are rejected."""
        if not overrides:
            return self
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise InvalidArgumentError("config", f"unknown guard settings {sorted(unknown)}", overrides)
        return replace(self, **dict(overrides))

    @classmethod
    def from_config(cls, overrides: Optional[Mapping[str, Any]] = None) -> "GuardConfig":
        """Build from ``session_guard.*`` keys, then apply ``overrides``."""
        defaults = cls()
        configured = {
            f.name: ConfigManager.get(f"session_guard.{f.name}", getattr(defaults, f.name))
            for f in fields(cls)
        }
        return cls(**configured).merged(overrides)


class GuardState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    IDLE_SUSPECTED = "idle_suspected"
    PAUSED = "paused"
    AUTO_PAUSED = "auto_paused"
    DESTROYED = "destroyed"


_WATCHING = (GuardState.RUNNING, GuardState.IDLE_SUSPECTED)


# ============================================================================
# Guard
# ============================================================================


class SessionGuard:
    """
    Idle/hidden watchdog for one work session.

    Parameters
    ----------
    signals:
        Activity and visibility source; subscribed on construction.
    scheduler:
        Clock and timers.
    on_idle_detected:
        ``(reason)``; user looks idle, prompt them.
    on_idle_confirmed:
        ``(reason)``; the absence is confirmed and an auto-pause follows.
    on_idle_resolved:
        ``()``; the user came back during the grace period.
    on_auto_pause:
        ``(reason)``; the guard paused itself.
    config:
        Thresholds; defaults to ``GuardConfig()``.
    session_id:
        Only used to label log lines.

    Raises
    ------
    InvalidArgumentError
        If a callback is missing or not callable.
    """

    def __init__(
        self,
        signals: ActivitySignalSource,
        scheduler: Scheduler,
        *,
        on_idle_detected: Optional[Callable[[str], None]] = None,
        on_idle_confirmed: Optional[Callable[[str], None]] = None,
        on_idle_resolved: Optional[Callable[[], None]] = None,
        on_auto_pause: Optional[Callable[[str], None]] = None,
        config: Optional[GuardConfig] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self._on_idle_detected = validate_callable(on_idle_detected, "on_idle_detected")
        self._on_idle_confirmed = validate_callable(on_idle_confirmed, "on_idle_confirmed")
        self._on_idle_resolved = validate_callable(on_idle_resolved, "on_idle_resolved")
        self._on_auto_pause = validate_callable(on_auto_pause, "on_auto_pause")

        self._signals = signals
        self._scheduler = scheduler
        self._config = config or GuardConfig()
        self._session_id = session_id

        self._state = GuardState.STOPPED
        self._last_activity_ms = scheduler.now_ms()
        self._hidden_since_ms: Optional[float] = (
            scheduler.now_ms() if signals.is_hidden() else None
        )
        self._idle_detected_ms: Optional[float] = None
        self._active_since_detection = False

        self._poll_task: Optional[ScheduledTask] = None
        self._grace_task: Optional[ScheduledTask] = None
        self._subscriptions: List[Subscription] = [
            signals.subscribe_activity(self._handle_activity),
            signals.subscribe_visibility(self._handle_visibility),
        ]

    # ========================================================================
    # Introspection
    # ========================================================================

    @property
    def state(self) -> GuardState:
        return self._state

    @property
    def config(self) -> GuardConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        return self._state in _WATCHING

    def time_since_activity_ms(self) -> float:
        return self._scheduler.now_ms() - self._last_activity_ms

    def is_qualified_focus_session(self, duration_ms: float) -> bool:
        """True when ``duration_ms`` reaches the minimum focus chunk."""
        validate_non_negative_number(duration_ms, "duration_ms")
        return duration_ms >= self._config.min_focus_chunk_ms

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def start(self) -> None:
        """Begin watching. No-op while already watching."""
        self._ensure_alive("guard.start")
        if self._state in _WATCHING:
            return
        self._activate("start")

    def resume(self) -> None:
        """Resume after a manual or automatic pause. No-op while watching."""
        self._ensure_alive("guard.resume")
        if self._state in _WATCHING:
            return
        self._activate("resume")

    def pause(self) -> None:
        """Manual pause: stop polling and drop any pending idle prompt."""
        if self._state not in _WATCHING:
            return
        self._cancel_timers()
        self._end_idle_episode()
        self._state = GuardState.PAUSED
        self._log_transition("pause")

    def stop(self) -> None:
        """Cancel all timers; the guard can be started again."""
        if self._state in (GuardState.STOPPED, GuardState.DESTROYED):
            return
        self._cancel_timers()
        self._end_idle_episode()
        self._state = GuardState.STOPPED
        self._log_transition("stop")

    def destroy(self) -> None:
        """Stop and detach from the signal source. Terminal."""
        if self._state is GuardState.DESTROYED:
            return
        self._cancel_timers()
        self._end_idle_episode()
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions.clear()
        self._state = GuardState.DESTROYED
        self._log_transition("destroy")

    def confirm_active(self) -> None:
        """
        User answered the idle prompt (or otherwise proved presence).

        Inside an idle episode this cancels the grace timer and fires
        ``on_idle_resolved``; otherwise it only refreshes activity.
        """
        if self._state not in _WATCHING:
            return
        self._last_activity_ms = self._scheduler.now_ms()
        if self._state is GuardState.IDLE_SUSPECTED:
            self._resolve_idle()

    # ========================================================================
    # Signal handlers
    # ========================================================================

    def _handle_activity(self, kind: ActivityKind) -> None:
        if self._state not in _WATCHING:
            return
        self._last_activity_ms = self._scheduler.now_ms()
        if self._state is GuardState.IDLE_SUSPECTED:
            self._active_since_detection = True

    def _handle_visibility(self, hidden: bool) -> None:
        now = self._scheduler.now_ms()
        if hidden:
            if self._hidden_since_ms is None:
                self._hidden_since_ms = now
            return

        hidden_since = self._hidden_since_ms
        self._hidden_since_ms = None
        if self._state in _WATCHING:
            self._last_activity_ms = now
            if self._state is GuardState.IDLE_SUSPECTED:
                self._active_since_detection = True
            if hidden_since is not None and now - hidden_since > self._config.tab_hidden_timeout_ms:
                self._auto_pause(C.REASON_TAB_HIDDEN)

    # ========================================================================
    # Timer handlers
    # ========================================================================

    def _poll(self) -> None:
        if self._state not in _WATCHING:
            return
        now = self._scheduler.now_ms()

        if (
            self._signals.is_hidden()
            and self._hidden_since_ms is not None
            and now - self._hidden_since_ms > self._config.tab_hidden_timeout_ms
        ):
            self._auto_pause(C.REASON_TAB_HIDDEN)
            return

        if self._state is GuardState.RUNNING and now - self._last_activity_ms > self._config.idle_timeout_ms:
            self._detect_idle(now)

    def _grace_expired(self) -> None:
        self._grace_task = None
        if self._state is not GuardState.IDLE_SUSPECTED:
            return
        if self._active_since_detection:
            self._resolve_idle()
        else:
            self._auto_pause(C.REASON_USER_IDLE)

    # ========================================================================
    # Transitions
    # ========================================================================

    def _activate(self, operation: str) -> None:
        now = self._scheduler.now_ms()
        self._state = GuardState.RUNNING
        self._last_activity_ms = now
        self._hidden_since_ms = now if self._signals.is_hidden() else None
        self._end_idle_episode()
        self._poll_task = self._scheduler.call_every(self._config.idle_check_interval_ms, self._poll)
        self._log_transition(operation)

    def _detect_idle(self, now: float) -> None:
        self._state = GuardState.IDLE_SUSPECTED
        self._idle_detected_ms = now
        self._active_since_detection = False
        self._grace_task = self._scheduler.call_later(self._config.grace_period_ms, self._grace_expired)
        logger.info(
            "Idle suspected",
            extra={
                "session_id": self._session_id,
                "idle_ms": now - self._last_activity_ms,
                "grace_period_ms": self._config.grace_period_ms,
            },
        )
        self._on_idle_detected(C.REASON_USER_IDLE)

    def _resolve_idle(self) -> None:
        self._cancel_grace()
        self._end_idle_episode()
        self._state = GuardState.RUNNING
        self._log_transition("idle_resolved")
        self._on_idle_resolved()

    def _auto_pause(self, reason: str) -> None:
        if self._state not in _WATCHING:
            return
        self._cancel_timers()
        self._end_idle_episode()
        self._state = GuardState.AUTO_PAUSED
        logger.info(
            "Session auto-paused",
            extra={
                "session_id": self._session_id,
                "reason": reason,
                "since_activity_ms": self.time_since_activity_ms(),
            },
        )
        self._on_idle_confirmed(reason)
        self._on_auto_pause(reason)

    # ========================================================================
    # Helpers
    # ========================================================================

    def _ensure_alive(self, action: str) -> None:
        if self._state is GuardState.DESTROYED:
            raise InvalidOperationError(action, "guard has been destroyed")

    def _end_idle_episode(self) -> None:
        self._idle_detected_ms = None
        self._active_since_detection = False

    def _cancel_grace(self) -> None:
        if self._grace_task is not None:
            self._grace_task.cancel()
            self._grace_task = None

    def _cancel_timers(self) -> None:
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None
        self._cancel_grace()

    def _log_transition(self, operation: str) -> None:
        logger.debug(
            "Guard transition",
            extra={
                "session_id": self._session_id,
                "guard_operation": operation,
                "state": self._state.value,
            },
        )
