"""
Unit tests for the structured domain exceptions.
"""

import pytest

from spheregrid.modules.shared.exceptions import (
    ErrorSeverity,
    InvalidArgumentError,
    InvalidOperationError,
    SphereGridDomainException,
)


@pytest.mark.unit
class TestInvalidArgumentError:
    """Test the single invalid-argument kind."""

    def test_fields(self):
        error = InvalidArgumentError("total_xp", "must be non-negative", -5)

        assert error.field == "total_xp"
        assert error.error_code == "INVALID_TOTAL_XP"
        assert error.details == {"field": "total_xp", "reason": "must be non-negative", "value": "-5"}
        assert error.severity is ErrorSeverity.INFO

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            raise InvalidArgumentError("level", "must be >= 1", 0)

    def test_str(self):
        error = InvalidArgumentError("level", "must be >= 1", 0)

        assert str(error).startswith("[INVALID_LEVEL] Invalid argument 'level': must be >= 1")

    def test_to_dict(self):
        data = InvalidArgumentError("growth", "must be >= 1", 0.5).to_dict()

        assert data["error_type"] == "InvalidArgumentError"
        assert data["severity"] == "info"
        assert data["is_retryable"] is False


@pytest.mark.unit
class TestInvalidOperationError:
    def test_message(self):
        error = InvalidOperationError("guard.start", "guard has been destroyed")

        assert error.action == "guard.start"
        assert error.message == "Invalid operation 'guard.start': guard has been destroyed"
        assert error.error_code == "INVALID_OPERATION"


@pytest.mark.unit
class TestBaseException:
    """Test defaults and serialization of the base class."""

    def test_defaults(self):
        error = SphereGridDomainException("clock went backwards")

        assert error.severity is ErrorSeverity.ERROR
        assert error.is_retryable is False
        assert error.error_code == "SphereGridDomainException"
        assert str(error) == "[SphereGridDomainException] clock went backwards"

    def test_explicit_fields(self):
        error = SphereGridDomainException(
            "clock skew",
            {"skew_ms": 250},
            severity=ErrorSeverity.CRITICAL,
            is_retryable=True,
        )

        assert error.to_dict() == {
            "error_type": "SphereGridDomainException",
            "error_code": "SphereGridDomainException",
            "message": "clock skew",
            "details": {"skew_ms": 250},
            "severity": "critical",
            "is_retryable": True,
        }
