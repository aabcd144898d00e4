"""
Static configuration management for SphereGrid.

Purpose
-------
Environment-driven settings read once at startup: the deployment
environment, logging switches and the two directories the core touches
(YAML balance files and the daily log file).

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Parse booleans and paths without ever raising on bad input
- Validate critical settings on import

Non-Responsibilities
--------------------
- Balance configuration (progression curve, guard timeouts; handled by
  ConfigManager)
- Secrets management (none are needed by the core)

Architecture Notes
------------------
- Singleton pattern via class methods (no instantiation)
- Auto-loads on module import via Config.validate()
- Unparsable values fall back to their default and are collected in
  ``Config.load_warnings``

Environment Variables
---------------------
All optional (with defaults):
- ENVIRONMENT: Environment type (default: development)
- DEBUG: Debug mode flag (default: False)
- LOG_LEVEL: Logging level (default: INFO)
- LOG_JSON: Force JSON console logs (default: production only)
- LOG_COLORS: Colored console logs in dev TTYs (default: True)
- LOG_FILE_ENABLED: Write the daily JSON log file (default: True)
- LOGS_DIR: Directory for the daily log file (default: <project>/logs)
- CONFIG_DIR: Directory scanned for YAML balance files (default: <project>/config)
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

load_dotenv()

_TRUE_VALUES = frozenset({"true", "yes", "1", "on"})
_FALSE_VALUES = frozenset({"false", "no", "0", "off"})
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Environment(Enum):
    """Deployment environments the core recognizes."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse an environment name, falling back to development.

        Example
        -------
        >>> Environment.from_string("Production") is Environment.PRODUCTION
        True
        >>> Environment.from_string("qa") is Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            # Structured logger is not initialized yet during bootstrap
            logging.warning(f"Unknown environment '{value}', defaulting to development")
            return cls.DEVELOPMENT


class Config:
    """
    Centralized static configuration for the SphereGrid core.

    Usage
    -----
    >>> Config.load()
    >>> Config.is_production()
    False
    """

    _validated: bool = False
    load_warnings: Dict[str, str] = {}

    ENVIRONMENT: str = Environment.DEVELOPMENT.value
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None
    LOG_COLORS: bool = True
    LOG_FILE_ENABLED: bool = True

    PROJECT_ROOT = Path(__file__).resolve().parents[3]
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    CONFIG_DIR: Path = PROJECT_ROOT / "config"

    # =========================================================================
    # Parsers
    # =========================================================================

    @classmethod
    def _warn(cls, key: str, message: str) -> None:
        cls.load_warnings[key] = message
        logging.warning(message)

    @classmethod
    def _safe_bool(cls, key: str, default: Optional[bool]) -> Optional[bool]:
        """
        Read a boolean flag (true/false, yes/no, 1/0, on/off).

        Example
        -------
        >>> Config._safe_bool("SPHEREGRID_UNSET_FLAG", False)
        False
        """
        raw_value = os.getenv(key)
        if raw_value is None:
            return default

        normalized = raw_value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False

        cls._warn(key, f"{key}='{raw_value}' is not a valid boolean, using default {default}")
        return default

    @classmethod
    def _safe_str(cls, key: str, default: str) -> str:
        value = os.getenv(key, "").strip()
        return value or default

    @classmethod
    def _safe_path(cls, key: str, default: Path) -> Path:
        """Directory path from the environment; relative paths resolve from cwd."""
        return Path(cls._safe_str(key, str(default))).expanduser().resolve()

    # =========================================================================
    # Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """
        Read every setting from the environment.

        Called on module import; call again to pick up environment changes.
        """
        cls.load_warnings = {}

        cls.ENVIRONMENT = Environment.from_string(
            cls._safe_str("ENVIRONMENT", Environment.DEVELOPMENT.value)
        ).value
        cls.DEBUG = bool(cls._safe_bool("DEBUG", False))
        cls.LOG_JSON = cls._safe_bool("LOG_JSON", None)
        cls.LOG_COLORS = bool(cls._safe_bool("LOG_COLORS", True))
        cls.LOG_FILE_ENABLED = bool(cls._safe_bool("LOG_FILE_ENABLED", True))

        level = cls._safe_str("LOG_LEVEL", "INFO").upper()
        if level not in _LOG_LEVELS:
            cls._warn("LOG_LEVEL", f"Invalid LOG_LEVEL '{level}', using INFO")
            level = "INFO"
        cls.LOG_LEVEL = level

        cls.LOGS_DIR = cls._safe_path("LOGS_DIR", cls.PROJECT_ROOT / "logs")
        cls.CONFIG_DIR = cls._safe_path("CONFIG_DIR", cls.PROJECT_ROOT / "config")

    @classmethod
    def validate(cls) -> None:
        """Load once and flag settings that are legal but suspicious."""
        if cls._validated:
            return

        cls.load()
        if cls.is_production() and cls.DEBUG:
            logging.getLogger(__name__).warning("DEBUG mode enabled in production!")

        cls._validated = True

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT == Environment.PRODUCTION.value


Config.validate()
