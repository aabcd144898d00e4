"""
Base Service Foundation

Purpose
-------
Provides the foundational class for SphereGrid domain services. Services
orchestrate domain models, resolve balance configuration and log the
operations they perform.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Safe config access with required-key checks
- Uniform operation/error log lines

What this class does NOT do:
- Hold business rules (those live on the domain models and formulas)
- Persist anything

Usage
-----
    class ProgressionService(BaseService):
        def __init__(self, config_manager=ConfigManager, logger=None):
            super().__init__(config_manager, logger or get_logger(__name__))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Type

from spheregrid.core.config.errors import ConfigValidationError

if TYPE_CHECKING:
    from logging import Logger

    from spheregrid.core.config.manager import ConfigManager


class BaseService:
    """
    Base class for domain services.

    Args:
        config_manager: Configuration manager (class or compatible object)
        logger: Structured logger instance
    """

    def __init__(self, config_manager: Type[ConfigManager], logger: Logger) -> None:
        self._config = config_manager
        self.log = logger

    def get_config(
        self, key: str, default: Optional[Any] = None, required: bool = False
    ) -> Any:
        """
        Safely retrieve configuration value.

        Raises:
            ConfigValidationError: If required=True and key is missing
        """
        value = self._config.get(key, default)
        if required and value is None:
            raise ConfigValidationError(f"Required configuration key '{key}' is missing", key=key)
        return value

    def log_operation(self, operation: str, **context: Any) -> None:
        """Log a service operation with structured context."""
        self.log.info(
            f"Service operation: {operation}",
            extra={"service_operation": operation, **context},
        )

    def log_error(self, operation: str, error: Exception, **context: Any) -> None:
        """Log a service error with full context."""
        details = error.to_dict() if hasattr(error, "to_dict") else {}
        self.log.error(
            f"Service error during {operation}: {error}",
            extra={
                "service_operation": operation,
                "error_type": type(error).__name__,
                "error_details": details,
                **context,
            },
        )
