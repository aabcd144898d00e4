"""
Domain exceptions for SphereGrid.

Purpose
-------
Define the structured exception hierarchy raised by the progression engine,
the session guard and the services built on them. Hosts translate these into
user-facing messages; the core never renders them.

Design Notes
------------
- All domain exceptions inherit from `SphereGridDomainException`.
- Each exception carries:
  - `message`: human-readable description
  - `details`: additional structured context (dict-like)
  - `severity`: `ErrorSeverity` value for logging/alerting
  - `is_retryable`: whether the operation can be retried
  - `error_code`: short, stable identifier for programmatic use
- `InvalidArgumentError` is also a `ValueError` so generic callers can catch
  it without importing this module.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

class ErrorSeverity(Enum):
    """Error severity levels for logging and alerting."""

    DEBUG = "debug"
    INFO = "info"  # Expected rejection (bad input, wrong state)
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

class SphereGridDomainException(Exception):
    """
    Base exception for all SphereGrid domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error (dict-like)
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling

    Example:
        >>> raise SphereGridDomainException(
        ...     "Curve rejected",
        ...     {"growth": 0.5}
        ... )
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )

class InvalidArgumentError(SphereGridDomainException, ValueError):
    """
    Raised when an input violates a documented precondition.

    Negative or non-finite XP totals, levels below 1, non-callable guard
    callbacks and invalid curve parameters all land here. Inputs are never
    silently clamped.

    Args:
        field: Name of the offending argument
        reason: Explanation of why the value was rejected
        value: The rejected value (kept in details as its repr)
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, field: str, reason: str, value: Any = None) -> None:
        self.field = field
        self.reason = reason
        self.value = value
        super().__init__(
            f"Invalid argument '{field}': {reason}",
            details={
                "field": field,
                "reason": reason,
                "value": repr(value),
            },
            error_code=f"INVALID_{field.upper()}",
        )

class InvalidOperationError(SphereGridDomainException):
    """
    Raised when an operation is not allowed in the current state.

    Args:
        action: Description of the attempted action
        reason: Explanation of why it's not allowed

    Example:
        >>> raise InvalidOperationError(
        ...     "guard.start",
        ...     "guard has been destroyed"
        ... )
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, action: str, reason: str) -> None:
        self.action = action
        self.reason = reason
        super().__init__(
            f"Invalid operation '{action}': {reason}",
            details={
                "action": action,
                "reason": reason,
            },
            error_code="INVALID_OPERATION",
        )


__all__ = [
    "ErrorSeverity",
    "SphereGridDomainException",
    "InvalidArgumentError",
    "InvalidOperationError",
]
