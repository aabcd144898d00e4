"""
Configuration errors for SphereGrid.

Raised by ConfigManager and by services reading required keys. Balance
values that parse but are out of range are not config errors; the value
objects reject those with ``InvalidArgumentError``.

Hierarchy
---------
ConfigError
├── ConfigValidationError      malformed key, shape-changing override, missing required key
└── ConfigInitializationError  config path unusable at startup
"""

from typing import Optional


class ConfigError(Exception):
    """
    Base for configuration failures.

    ``key`` is the dot-notation key involved, when there is one.
    """

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class ConfigValidationError(ConfigError):
    """A key or override was rejected."""


class ConfigInitializationError(ConfigError):
    """
    ConfigManager could not start.

    Example
    -------
    >>> try:
    ...     ConfigManager.initialize(config_dir=Path("progression.yaml"))
    ... except ConfigInitializationError as e:
    ...     logger.critical(f"Cannot start - config init failed: {e}")
    """


__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ConfigInitializationError",
]
