"""
Domain models package for SphereGrid.

Purpose
-------
Rich domain models with business logic: balance value objects, the
progress aggregate and the work session entity.

Base Classes
------------
- Entity: Objects with identity
- ValueObject: Immutable value types
- AggregateRoot: Consistency boundaries
- DomainEvent: State change notifications
"""

from .base import (
    AggregateRoot,
    DomainEvent,
    Entity,
    ValueObject,
    validate_not_empty,
)
from .progress import (
    DEFAULT_CURVE,
    DEFAULT_ECONOMY,
    DEFAULT_RANK_LADDER,
    ProgressionCurve,
    ProgressProfile,
    RankLadder,
    XPEconomy,
)
from .session import SessionStatus, WorkSession

__all__ = [
    # Base classes
    "Entity",
    "ValueObject",
    "AggregateRoot",
    "DomainEvent",
    # Validators
    "validate_not_empty",
    # Progression
    "ProgressionCurve",
    "RankLadder",
    "XPEconomy",
    "ProgressProfile",
    "DEFAULT_CURVE",
    "DEFAULT_RANK_LADDER",
    "DEFAULT_ECONOMY",
    # Sessions
    "SessionStatus",
    "WorkSession",
]
