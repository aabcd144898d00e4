"""
SphereGrid Shared Module

Purpose
-------
Domain-level foundations used by every feature module:
- Domain exceptions
- Base service pattern
- Balance constants and progression formulas
- Input validators raising structured errors

Architecture
------------
- BaseService: Foundation for service classes (logging, config)
- Domain exceptions: Structured, serializable errors
- Formulas: Pure progression and XP award calculations
- Validators: Raise `InvalidArgumentError` instead of clamping
- Constants: Built-in balance defaults

Usage
-----
    from spheregrid.modules.shared import (
        InvalidArgumentError,
        get_remaining_xp,
        xp_for_session,
    )
"""

from __future__ import annotations

from .base_service import BaseService
from .exceptions import (
    ErrorSeverity,
    InvalidArgumentError,
    InvalidOperationError,
    SphereGridDomainException,
)
from .formulas import (
    LevelProgress,
    get_level_from_total_xp,
    get_remaining_xp,
    rank_for_level,
    round_half_up,
    total_xp_to_reach,
    xp_for_level,
    xp_for_session,
    xp_for_task,
)

__all__ = [
    # Base patterns
    "BaseService",
    # Exceptions
    "ErrorSeverity",
    "SphereGridDomainException",
    "InvalidArgumentError",
    "InvalidOperationError",
    # Formulas
    "LevelProgress",
    "round_half_up",
    "xp_for_level",
    "total_xp_to_reach",
    "get_level_from_total_xp",
    "get_remaining_xp",
    "rank_for_level",
    "xp_for_session",
    "xp_for_task",
]
