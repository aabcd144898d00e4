"""
WorkSessionController: owns the live work session and its guard.

Purpose
-------
Tie a ``WorkSession`` entity to a ``SessionGuard`` so that manual controls,
guard-initiated auto-pauses and the final XP award all go through one place.

Responsibilities
----------------
- Hold at most one live guard; starting a new session destroys the old guard
  before the new one is built
- Keep the session's status and active-time ledger in step with the guard
- Forward guard notifications to an optional ``SessionListener`` (UI hooks)
- Produce a ``SessionSummary`` with the qualified flag and XP earned

Non-Responsibilities
--------------------
- Persisting sessions or XP (the caller stores the summary)
- Applying XP to a profile (see ProgressionService.award_xp)

Usage
-----
    controller = WorkSessionController(signals, AsyncioScheduler())
    controller.start_session("s-42", task_id="t-7")
    ...
    summary = controller.finish(difficulty="intermediate", streak_days=3)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from spheregrid.core.logging.logger import LogContext, get_logger
from spheregrid.core.timing.scheduler import Scheduler
from spheregrid.domain.models.base import DomainEvent
from spheregrid.domain.models.progress import XPEconomy
from spheregrid.domain.models.session import SessionStatus, WorkSession
from spheregrid.modules.session.guard import GuardConfig, SessionGuard
from spheregrid.modules.session.signals import ActivitySignalSource
from spheregrid.modules.shared.exceptions import InvalidOperationError
from spheregrid.modules.shared.formulas import xp_for_session

logger = get_logger(__name__)

MS_PER_MINUTE = 60_000


class SessionListener:
    """
    Receives guard notifications for the current session.

    Override only what you need; every hook defaults to a no-op.
    """

    def on_idle_detected(self, session: WorkSession, reason: str) -> None:
        pass

    def on_idle_confirmed(self, session: WorkSession, reason: str) -> None:
        pass

    def on_idle_resolved(self, session: WorkSession) -> None:
        pass

    def on_auto_pause(self, session: WorkSession, reason: str) -> None:
        pass


@dataclass(frozen=True)
class SessionSummary:
    """Outcome of a finished session."""

    session_id: str
    task_id: Optional[str]
    node_id: Optional[str]
    active_ms: float
    qualified: bool
    xp_earned: int
    pause_count: int
    auto_pause_count: int
    events: List[DomainEvent] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "task_id": self.task_id,
            "node_id": self.node_id,
            "active_ms": self.active_ms,
            "qualified": self.qualified,
            "xp_earned": self.xp_earned,
            "pause_count": self.pause_count,
            "auto_pause_count": self.auto_pause_count,
        }


class WorkSessionController:
    """
    Drives one work session at a time.

    Parameters
    ----------
    signals:
        Activity/visibility source shared by every guard this controller builds.
    scheduler:
        Clock and timers.
    config:
        Guard thresholds; defaults to ``GuardConfig.from_config()``.
    listener:
        Optional receiver for guard notifications.
    economy:
        XP economy for the session award; defaults to ``XPEconomy.from_config()``.
    """

    def __init__(
        self,
        signals: ActivitySignalSource,
        scheduler: Scheduler,
        config: Optional[GuardConfig] = None,
        listener: Optional[SessionListener] = None,
        economy: Optional[XPEconomy] = None,
    ) -> None:
        self._signals = signals
        self._scheduler = scheduler
        self._config = config or GuardConfig.from_config()
        self._listener = listener or SessionListener()
        self._economy = economy or XPEconomy.from_config()

        self._session: Optional[WorkSession] = None
        self._guard: Optional[SessionGuard] = None

    # ========================================================================
    # Introspection
    # ========================================================================

    @property
    def session(self) -> Optional[WorkSession]:
        return self._session

    @property
    def guard(self) -> Optional[SessionGuard]:
        return self._guard

    @property
    def has_active_session(self) -> bool:
        return self._session is not None and not self._session.is_completed

    # ========================================================================
    # Session lifecycle
    # ========================================================================

    def start_session(
        self,
        session_id: str,
        task_id: Optional[str] = None,
        node_id: Optional[str] = None,
    ) -> WorkSession:
        """
        Start a new session, replacing any current one.

        The previous guard is destroyed before the new one subscribes, so two
        guards never watch the same signals.
        """
        with LogContext(session_id=session_id, task_id=task_id, component="session", operation="start_session"):
            if self._guard is not None:
                logger.warning(
                    "Replacing live session guard",
                    extra={"previous_session_id": self._session.id if self._session else None},
                )
                self._guard.destroy()
                self._guard = None

            session = WorkSession(session_id, task_id=task_id, node_id=node_id)
            guard = SessionGuard(
                self._signals,
                self._scheduler,
                on_idle_detected=self._handle_idle_detected,
                on_idle_confirmed=self._handle_idle_confirmed,
                on_idle_resolved=self._handle_idle_resolved,
                on_auto_pause=self._handle_auto_pause,
                config=self._config,
                session_id=session_id,
            )

            self._session = session
            self._guard = guard
            session.start(self._scheduler.now_ms())
            guard.start()

            logger.info("Work session started", extra={"node_id": node_id})
            return session

    def pause(self) -> None:
        session, guard = self._require_live("pause")
        with LogContext(session_id=session.id, component="session", operation="pause"):
            session.pause(self._scheduler.now_ms())
            guard.pause()
            logger.info("Work session paused", extra={"active_ms": session.active_ms()})

    def resume(self) -> None:
        session, guard = self._require_live("resume")
        with LogContext(session_id=session.id, component="session", operation="resume"):
            session.resume(self._scheduler.now_ms())
            guard.resume()
            logger.info("Work session resumed", extra={"active_ms": session.active_ms()})

    def confirm_active(self) -> None:
        _, guard = self._require_live("confirm_active")
        guard.confirm_active()

    def finish(self, difficulty: Optional[str] = None, streak_days: int = 0) -> SessionSummary:
        """
        Complete the session and compute its reward.

        XP is only earned when active time reaches the minimum focus chunk.

        Raises
        ------
        InvalidOperationError
            If there is no live session.
        InvalidArgumentError
            If ``difficulty`` or ``streak_days`` is invalid; the session
            stays live in that case.
        """
        session, guard = self._require_live("finish")
        with LogContext(session_id=session.id, component="session", operation="finish"):
            now = self._scheduler.now_ms()
            active_ms = session.active_ms(now)
            qualified = guard.is_qualified_focus_session(active_ms)
            xp = xp_for_session(
                active_ms / MS_PER_MINUTE,
                difficulty=difficulty,
                streak_days=streak_days,
                economy=self._economy,
            )
            xp_earned = xp if qualified else 0

            session.complete(now)
            guard.destroy()
            self._guard = None

            summary = SessionSummary(
                session_id=session.id,
                task_id=session.task_id,
                node_id=session.node_id,
                active_ms=session.active_ms(),
                qualified=qualified,
                xp_earned=xp_earned,
                pause_count=session.pause_count,
                auto_pause_count=session.auto_pause_count,
                events=session.clear_domain_events(),
            )
            logger.info("Work session finished", extra=summary.to_dict())
            return summary

    def teardown(self) -> None:
        """Destroy the guard without completing the session. Idempotent."""
        if self._guard is None:
            return
        self._guard.destroy()
        self._guard = None
        logger.debug(
            "Session controller torn down",
            extra={"session_id": self._session.id if self._session else None},
        )

    # ========================================================================
    # Guard callbacks
    # ========================================================================

    def _handle_idle_detected(self, reason: str) -> None:
        self._listener.on_idle_detected(self._session, reason)

    def _handle_idle_confirmed(self, reason: str) -> None:
        self._listener.on_idle_confirmed(self._session, reason)

    def _handle_idle_resolved(self) -> None:
        self._listener.on_idle_resolved(self._session)

    def _handle_auto_pause(self, reason: str) -> None:
        session = self._session
        if session is not None and session.status is SessionStatus.RUNNING:
            session.auto_pause(self._scheduler.now_ms(), reason)
        self._listener.on_auto_pause(session, reason)

    # ========================================================================
    # Helpers
    # ========================================================================

    def _require_live(self, action: str) -> Tuple[WorkSession, SessionGuard]:
        if self._session is None or self._guard is None or self._session.is_completed:
            raise InvalidOperationError(f"session.{action}", "no live work session")
        return self._session, self._guard
