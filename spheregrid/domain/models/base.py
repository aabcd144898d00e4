"""
Base domain model classes for SphereGrid.

Purpose
-------
Provide foundational abstractions for rich domain models that encapsulate
business rules, validation and state transitions.

Responsibilities
----------------
- Define base Entity class with identity and equality semantics
- Define base ValueObject class for immutable value types
- Define base AggregateRoot class for consistency boundaries
- Provide small validation helpers for model invariants
- Track domain events raised by state transitions

Non-Responsibilities
--------------------
- Persistence (owned by the host application)
- Publishing events (callers drain ``clear_domain_events()``)
- Service orchestration (handled by the service layer)

Design Patterns
---------------
- **Entity**: Objects with identity that persist over time
- **Value Object**: Immutable objects defined by their attributes
- **Aggregate Root**: Consistency boundary for domain operations
- **Domain Events**: Communicate state changes to other parts of the system

Usage Example
-------------
>>> class Streak(Entity):
...     def __init__(self, user_id: str, days: int):
...         super().__init__(user_id)
...         self.days = days
...
...     def extend(self) -> None:
...         self.days += 1
...         self.add_domain_event("streak.extended", {
...             "user_id": self.id,
...             "days": self.days,
...         })
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Hashable, List

from spheregrid.modules.shared.exceptions import InvalidArgumentError


# ============================================================================
# DOMAIN EVENTS
# ============================================================================


@dataclass
class DomainEvent:
    """
    Represents a domain event that has occurred.

    Attributes
    ----------
    event_name : str
        Event name (e.g., "progress.leveled_up")
    payload : Dict[str, Any]
        Event payload with relevant data
    occurred_at : datetime
        When the event occurred (UTC)
    """

    event_name: str
    payload: Dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# ============================================================================
# VALUE OBJECT
# ============================================================================


class ValueObject(ABC):
    """
    Base class for immutable value objects.

    Value objects are defined by their attributes, not by identity. Most
    subclasses are frozen dataclasses, which supply their own ``__eq__`` and
    ``__hash__``; the fallbacks here cover hand-written ones.

    Usage
    -----
    Subclasses should:
    1. Define all attributes at construction
    2. Implement _validate() to enforce invariants
    3. Return new instances instead of mutating
    """

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.__dict__.items())))

    def _validate(self) -> None:
        """
        Validate invariants.

        Subclasses override this and raise `InvalidArgumentError` on violation.
        """


# ============================================================================
# ENTITY
# ============================================================================


class Entity(ABC):
    """
    Base class for entities with identity.

    Two entities with the same ID are the same entity, even if their
    attributes differ. Entities collect domain events until drained.
    """

    def __init__(self, entity_id: Hashable) -> None:
        """
        Initialize entity with identity.

        Parameters
        ----------
        entity_id : Hashable
            Unique identifier for this entity
        """
        self._id = entity_id
        self._domain_events: List[DomainEvent] = []

    @property
    def id(self) -> Hashable:
        """Get entity ID (immutable)."""
        return self._id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return False
        return type(self) is type(other) and self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))

    def add_domain_event(self, event_name: str, payload: Dict[str, Any]) -> None:
        """
        Record a domain event.

        Parameters
        ----------
        event_name : str
            Event name (e.g., "session.auto_paused")
        payload : Dict[str, Any]
            Event payload with relevant data
        """
        self._domain_events.append(DomainEvent(event_name=event_name, payload=payload))

    def clear_domain_events(self) -> List[DomainEvent]:
        """
        Clear and return all domain events.

        Returns
        -------
        List[DomainEvent]
            All domain events that occurred since last clear
        """
        events = self._domain_events.copy()
        self._domain_events.clear()
        return events

    def get_pending_events(self) -> List[DomainEvent]:
        """Get domain events without clearing them."""
        return self._domain_events.copy()


# ============================================================================
# AGGREGATE ROOT
# ============================================================================


class AggregateRoot(Entity):
    """
    Base class for aggregate roots.

    The aggregate root is the only entry point for changes to the aggregate
    and the only place its invariants are enforced.
    """


# ============================================================================
# DOMAIN MODEL VALIDATION
# ============================================================================


def validate_not_empty(value: Any, field_name: str) -> None:
    """
    Validate that a string is not empty.

    Raises
    ------
    InvalidArgumentError
        If value is not a string, empty or whitespace-only
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(field_name, "cannot be empty", value)
