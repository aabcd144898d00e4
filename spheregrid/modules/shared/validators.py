"""
SphereGrid Domain Validators

Purpose
-------
Validation utilities for XP totals, levels, durations and callbacks. These
validators raise `InvalidArgumentError` when validation fails so callers get
a structured, loggable error instead of a silently clamped value.

Design Notes
------------
Validators:
- Accept the value and the argument name
- Raise `InvalidArgumentError` on failure
- Return the (normalized) value on success so they compose in expressions
- Reject ``bool`` wherever a number is expected

Usage
-----
    from spheregrid.modules.shared.validators import validate_level

    validate_level(3)    # returns 3
    validate_level(0)    # raises InvalidArgumentError
"""

from __future__ import annotations

import math
from numbers import Integral, Real
from typing import Any, Callable, Optional

from .exceptions import InvalidArgumentError


def validate_level(level: Any, name: str = "level", max_level: Optional[int] = None) -> int:
    """
    Validate a level number.

    Args:
        level: Candidate level
        name: Argument name for the error message
        max_level: Optional inclusive upper bound

    Returns:
        The level unchanged.

    Raises:
        InvalidArgumentError: If level is not an int, is a bool, is below 1,
            or exceeds ``max_level``.
    """
    if isinstance(level, bool) or not isinstance(level, int):
        raise InvalidArgumentError(name, "must be an integer", level)
    if level < 1:
        raise InvalidArgumentError(name, "must be >= 1", level)
    if max_level is not None and level > max_level:
        raise InvalidArgumentError(name, f"exceeds max level {max_level}", level)
    return level


def validate_non_negative_number(value: Any, name: str) -> float:
    """
    Validate a finite, non-negative real number (XP totals, durations).

    Raises:
        InvalidArgumentError: If value is non-numeric, a bool, NaN, infinite
            or negative.
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidArgumentError(name, "must be a number", value)
    # ints are unbounded; only non-integral values can be NaN or infinite
    if not isinstance(value, Integral) and (math.isnan(value) or math.isinf(value)):
        raise InvalidArgumentError(name, "must be finite", value)
    if value < 0:
        raise InvalidArgumentError(name, "must be non-negative", value)
    return value


def validate_positive_number(value: Any, name: str) -> float:
    """Validate a finite number strictly greater than zero."""
    validate_non_negative_number(value, name)
    if value == 0:
        raise InvalidArgumentError(name, "must be positive", value)
    return value


def validate_positive_int(value: Any, name: str) -> int:
    """Validate an integer strictly greater than zero (bool rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(name, "must be an integer", value)
    if value <= 0:
        raise InvalidArgumentError(name, "must be positive", value)
    return value


def validate_non_negative_int(value: Any, name: str) -> int:
    """Validate an integer greater than or equal to zero (bool rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(name, "must be an integer", value)
    if value < 0:
        raise InvalidArgumentError(name, "must be non-negative", value)
    return value


def validate_callable(value: Any, name: str) -> Callable[..., Any]:
    """
    Validate that a callback was supplied and can be called.

    Raises:
        InvalidArgumentError: If value is None or not callable.
    """
    if value is None:
        raise InvalidArgumentError(name, "callback is required", value)
    if not callable(value):
        raise InvalidArgumentError(name, "must be callable", value)
    return value


def validate_choice(value: Any, name: str, choices: Any) -> Any:
    """Validate membership in a fixed set of allowed keys."""
    if value not in choices:
        raise InvalidArgumentError(
            name, f"must be one of {sorted(choices)}", value
        )
    return value
