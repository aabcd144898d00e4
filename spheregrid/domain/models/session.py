"""
Work Session Domain Model for SphereGrid.

Purpose
-------
Entity tracking one timed focus session: its lifecycle status and the
active time accumulated across running segments.

Responsibilities
----------------
- Enforce legal status transitions
- Accumulate active milliseconds per running segment
- Record why the session was last auto-paused
- Emit domain events for each transition

Non-Responsibilities
--------------------
- Detecting idleness (handled by the session guard)
- Awarding XP (handled by the controller via formulas)
- Reading clocks: every transition takes ``now_ms`` from the caller

Status Transitions
------------------
    pending ──start──▶ running ◀──resume── paused / auto_paused
                         │ ├──pause──────▶ paused
                         │ └──auto_pause─▶ auto_paused
                         └──complete (from any non-completed status)─▶ completed
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from spheregrid.domain.models.base import Entity, validate_not_empty
from spheregrid.modules.shared.exceptions import InvalidOperationError
from spheregrid.modules.shared.validators import validate_non_negative_number


class SessionStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    PAUSED = "paused"
    AUTO_PAUSED = "auto_paused"
    COMPLETED = "completed"


class WorkSession(Entity):
    """
    A focus session and its active-time ledger.

    Domain Events
    -------------
    - session.started
    - session.paused
    - session.auto_paused
    - session.resumed
    - session.completed
    """

    def __init__(
        self,
        session_id: str,
        task_id: Optional[str] = None,
        node_id: Optional[str] = None,
    ) -> None:
        validate_not_empty(session_id, "session_id")
        super().__init__(session_id)

        self.task_id = task_id
        self.node_id = node_id

        self._status = SessionStatus.PENDING
        self._active_ms: float = 0
        self._segment_started_ms: Optional[float] = None
        self._pause_count = 0
        self._auto_pause_count = 0
        self._last_auto_pause_reason: Optional[str] = None

    # ========================================================================
    # PROPERTIES
    # ========================================================================

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def pause_count(self) -> int:
        return self._pause_count

    @property
    def auto_pause_count(self) -> int:
        return self._auto_pause_count

    @property
    def last_auto_pause_reason(self) -> Optional[str]:
        return self._last_auto_pause_reason

    @property
    def is_running(self) -> bool:
        return self._status is SessionStatus.RUNNING

    @property
    def is_completed(self) -> bool:
        return self._status is SessionStatus.COMPLETED

    def active_ms(self, now_ms: Optional[float] = None) -> float:
        """
        Active time so far; pass ``now_ms`` to include the open segment.
        """
        if self._segment_started_ms is None or now_ms is None:
            return self._active_ms
        return self._active_ms + max(0, now_ms - self._segment_started_ms)

    # ========================================================================
    # TRANSITIONS
    # ========================================================================

    def start(self, now_ms: float) -> None:
        self._require(SessionStatus.PENDING, action="start")
        self._open_segment(now_ms)
        self._status = SessionStatus.RUNNING
        self.add_domain_event("session.started", self._payload())

    def pause(self, now_ms: float) -> None:
        self._require(SessionStatus.RUNNING, action="pause")
        self._close_segment(now_ms)
        self._status = SessionStatus.PAUSED
        self._pause_count += 1
        self.add_domain_event("session.paused", self._payload())

    def auto_pause(self, now_ms: float, reason: str) -> None:
        """
        Guard-initiated pause.

        Parameters
        ----------
        now_ms : float
            Current scheduler time
        reason : str
            "user_idle" or "tab_hidden"
        """
        self._require(SessionStatus.RUNNING, action="auto_pause")
        validate_not_empty(reason, "reason")
        self._close_segment(now_ms)
        self._status = SessionStatus.AUTO_PAUSED
        self._auto_pause_count += 1
        self._last_auto_pause_reason = reason
        self.add_domain_event("session.auto_paused", {**self._payload(), "reason": reason})

    def resume(self, now_ms: float) -> None:
        self._require(SessionStatus.PAUSED, SessionStatus.AUTO_PAUSED, action="resume")
        resumed_from = self._status
        self._open_segment(now_ms)
        self._status = SessionStatus.RUNNING
        self.add_domain_event(
            "session.resumed", {**self._payload(), "resumed_from": resumed_from.value}
        )

    def complete(self, now_ms: float) -> None:
        if self._status is SessionStatus.COMPLETED:
            raise InvalidOperationError("session.complete", "session already completed")
        if self._segment_started_ms is not None:
            self._close_segment(now_ms)
        self._status = SessionStatus.COMPLETED
        self.add_domain_event("session.completed", self._payload())

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _require(self, *allowed: SessionStatus, action: str) -> None:
        if self._status not in allowed:
            raise InvalidOperationError(
                f"session.{action}",
                f"not allowed while {self._status.value}",
            )

    def _open_segment(self, now_ms: float) -> None:
        validate_non_negative_number(now_ms, "now_ms")
        self._segment_started_ms = now_ms

    def _close_segment(self, now_ms: float) -> None:
        validate_non_negative_number(now_ms, "now_ms")
        self._active_ms = self.active_ms(now_ms)
        self._segment_started_ms = None

    def _payload(self) -> Dict[str, Any]:
        return {
            "session_id": self.id,
            "task_id": self.task_id,
            "node_id": self.node_id,
            "status": self._status.value,
            "active_ms": self._active_ms,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self._payload(),
            "pause_count": self._pause_count,
            "auto_pause_count": self._auto_pause_count,
            "last_auto_pause_reason": self._last_auto_pause_reason,
        }
