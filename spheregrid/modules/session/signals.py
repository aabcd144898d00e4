"""
Activity signals for the session guard.

Purpose
-------
Abstract the host's user-activity and visibility notifications (pointer,
keyboard, scroll and touch input; the work surface being hidden or shown)
behind a small subscription interface, so the guard never touches a UI
toolkit directly.

Responsibilities
----------------
- Define the ``ActivitySignalSource`` contract the guard subscribes to
- Provide ``InMemorySignalSource``, which hosts (and tests) drive by pushing
  events in
- Hand out cancellable ``Subscription`` handles; ``cancel()`` is idempotent

Design Notes
------------
- Visibility handlers fire only when the hidden flag actually changes.
- Handlers run synchronously on the caller's stack; exceptions propagate to
  whoever emitted the event.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, List, Optional

from spheregrid.core.logging.logger import get_logger
from spheregrid.modules.shared.validators import validate_callable

logger = get_logger(__name__)

ActivityHandler = Callable[["ActivityKind"], None]
VisibilityHandler = Callable[[bool], None]


class ActivityKind(str, Enum):
    """Kinds of user input that count as activity."""

    POINTER = "pointer"
    KEYBOARD = "keyboard"
    SCROLL = "scroll"
    TOUCH = "touch"


class Subscription:
    """Handle returned by ``subscribe_*``; ``cancel()`` detaches the handler."""

    def __init__(self, detach: Callable[[], None]) -> None:
        self._detach: Optional[Callable[[], None]] = detach

    @property
    def active(self) -> bool:
        return self._detach is not None

    def cancel(self) -> None:
        detach, self._detach = self._detach, None
        if detach is not None:
            detach()


class ActivitySignalSource(ABC):
    """Source of user-activity and visibility events."""

    @abstractmethod
    def subscribe_activity(self, handler: ActivityHandler) -> Subscription:
        """Call ``handler(kind)`` on every activity event."""

    @abstractmethod
    def subscribe_visibility(self, handler: VisibilityHandler) -> Subscription:
        """Call ``handler(hidden)`` whenever visibility changes."""

    @abstractmethod
    def is_hidden(self) -> bool:
        """Whether the work surface is currently hidden."""


class InMemorySignalSource(ActivitySignalSource):
    """
    Signal source driven by explicit calls.

    Usage
    -----
    >>> source = InMemorySignalSource()
    >>> sub = source.subscribe_visibility(lambda hidden: print("hidden" if hidden else "shown"))
    >>> source.set_hidden(True)
    hidden
    >>> sub.cancel()
    """

    def __init__(self, hidden: bool = False) -> None:
        self._hidden = bool(hidden)
        self._activity_handlers: List[ActivityHandler] = []
        self._visibility_handlers: List[VisibilityHandler] = []

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe_activity(self, handler: ActivityHandler) -> Subscription:
        validate_callable(handler, "handler")
        self._activity_handlers.append(handler)
        return Subscription(lambda: self._remove(self._activity_handlers, handler))

    def subscribe_visibility(self, handler: VisibilityHandler) -> Subscription:
        validate_callable(handler, "handler")
        self._visibility_handlers.append(handler)
        return Subscription(lambda: self._remove(self._visibility_handlers, handler))

    def is_hidden(self) -> bool:
        return self._hidden

    @property
    def subscriber_count(self) -> int:
        return len(self._activity_handlers) + len(self._visibility_handlers)

    # ------------------------------------------------------------------
    # Host-side event injection
    # ------------------------------------------------------------------

    def emit_activity(self, kind: ActivityKind = ActivityKind.POINTER) -> None:
        kind = ActivityKind(kind)
        for handler in list(self._activity_handlers):
            handler(kind)

    def set_hidden(self, hidden: bool) -> None:
        hidden = bool(hidden)
        if hidden == self._hidden:
            return
        self._hidden = hidden
        logger.debug("Visibility changed", extra={"hidden": hidden})
        for handler in list(self._visibility_handlers):
            handler(hidden)

    @staticmethod
    def _remove(handlers: list, handler: Callable) -> None:
        if handler in handlers:
            handlers.remove(handler)
