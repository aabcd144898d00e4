"""
Scheduler: timer abstraction for SphereGrid.

Purpose
-------
Give time-driven components (the session guard's idle poll and grace timer)
a clock and one-shot/repeating timers they do not own, so the same code runs
on an asyncio event loop in production and on virtual time in tests.

Responsibilities
----------------
- Report the current time in milliseconds
- Schedule one-shot (``call_later``) and repeating (``call_every``) callbacks
- Hand back a cancellable ``ScheduledTask`` whose ``cancel()`` is idempotent

Implementations
---------------
- AsyncioScheduler: backed by ``loop.call_later`` on the running loop
- ManualScheduler: virtual clock advanced explicitly with ``advance(ms)``

Design Notes
------------
- Callbacks are plain synchronous callables; they run on the loop thread
  (asyncio) or inside ``advance()`` (manual).
- Repeating tasks are re-armed before the callback runs, so a callback may
  cancel its own task.
- ManualScheduler lets callback exceptions propagate out of ``advance()``.
  On asyncio they reach the loop's exception handler.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

Callback = Callable[[], None]


# ============================================================================
# Task Handles
# ============================================================================


class ScheduledTask:
    """Handle to a scheduled callback."""

    def __init__(self, callback: Callback, interval_ms: Optional[float] = None) -> None:
        self._callback = callback
        self._interval_ms = interval_ms
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def repeating(self) -> bool:
        return self._interval_ms is not None

    def cancel(self) -> None:
        """Stop the task from firing again. Safe to call more than once."""
        if self._cancelled:
            return
        self._cancelled = True
        self._on_cancel()

    def _on_cancel(self) -> None:
        """Hook for implementations holding a backend handle."""


class _AsyncioTask(ScheduledTask):
    def __init__(self, callback: Callback, interval_ms: Optional[float] = None) -> None:
        super().__init__(callback, interval_ms)
        self.handle: Optional[asyncio.TimerHandle] = None

    def _on_cancel(self) -> None:
        if self.handle is not None:
            self.handle.cancel()
            self.handle = None


class _ManualTask(ScheduledTask):
    def __init__(self, callback: Callback, due_ms: float, interval_ms: Optional[float] = None) -> None:
        super().__init__(callback, interval_ms)
        self.due_ms = due_ms


# ============================================================================
# Scheduler Interface
# ============================================================================


class Scheduler(ABC):
    """Clock plus one-shot and repeating timers, all in milliseconds."""

    @abstractmethod
    def now_ms(self) -> float:
        """Current time in milliseconds on this scheduler's clock."""

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callback) -> ScheduledTask:
        """Run ``callback`` once after ``delay_ms``."""

    @abstractmethod
    def call_every(self, interval_ms: float, callback: Callback) -> ScheduledTask:
        """Run ``callback`` every ``interval_ms``, first run one interval from now."""

    @staticmethod
    def _check_delay(delay_ms: float, name: str, allow_zero: bool = True) -> None:
        from spheregrid.modules.shared.validators import (
            validate_non_negative_number,
            validate_positive_number,
        )

        if allow_zero:
            validate_non_negative_number(delay_ms, name)
        else:
            validate_positive_number(delay_ms, name)


# ============================================================================
# asyncio Implementation
# ============================================================================


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by an asyncio event loop.

    Parameters
    ----------
    loop:
        Loop to schedule on; defaults to the running loop at call time.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def now_ms(self) -> float:
        return self.loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callback) -> ScheduledTask:
        self._check_delay(delay_ms, "delay_ms")
        task = _AsyncioTask(callback)

        def _fire() -> None:
            task.handle = None
            if not task.cancelled:
                callback()

        task.handle = self.loop.call_later(delay_ms / 1000.0, _fire)
        return task

    def call_every(self, interval_ms: float, callback: Callback) -> ScheduledTask:
        self._check_delay(interval_ms, "interval_ms", allow_zero=False)
        task = _AsyncioTask(callback, interval_ms)
        loop = self.loop

        def _fire() -> None:
            if task.cancelled:
                return
            task.handle = loop.call_later(interval_ms / 1000.0, _fire)
            callback()

        task.handle = loop.call_later(interval_ms / 1000.0, _fire)
        return task


# ============================================================================
# Manual (virtual time) Implementation
# ============================================================================


class ManualScheduler(Scheduler):
    """
    Deterministic scheduler driven by ``advance()``.

    Usage
    -----
    >>> scheduler = ManualScheduler()
    >>> fired = []
    >>> _ = scheduler.call_later(1_000, lambda: fired.append(scheduler.now_ms()))
    >>> scheduler.advance(1_000)
    >>> fired
    [1000.0]
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now_ms = float(start_ms)
        self._queue: List[Tuple[float, int, _ManualTask]] = []
        self._sequence = itertools.count()

    def now_ms(self) -> float:
        return self._now_ms

    def call_later(self, delay_ms: float, callback: Callback) -> ScheduledTask:
        self._check_delay(delay_ms, "delay_ms")
        task = _ManualTask(callback, self._now_ms + delay_ms)
        self._push(task)
        return task

    def call_every(self, interval_ms: float, callback: Callback) -> ScheduledTask:
        self._check_delay(interval_ms, "interval_ms", allow_zero=False)
        task = _ManualTask(callback, self._now_ms + interval_ms, interval_ms)
        self._push(task)
        return task

    def advance(self, ms: float) -> None:
        """
        Move the clock forward, firing due callbacks in due-time order.

        Callbacks scheduled while advancing fire too if they fall due before
        the target time. The clock reads each task's due time while it runs.
        """
        self._check_delay(ms, "ms")
        target = self._now_ms + ms

        while self._queue and self._queue[0][0] <= target:
            due_ms, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self._now_ms = due_ms
            if task.repeating:
                task.due_ms = due_ms + task._interval_ms
                self._push(task)
            task._callback()

        self._now_ms = target

    def pending_count(self) -> int:
        """Number of live (not cancelled) tasks still queued."""
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def _push(self, task: _ManualTask) -> None:
        heapq.heappush(self._queue, (task.due_ms, next(self._sequence), task))
