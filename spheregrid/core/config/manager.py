"""
ConfigManager: YAML-backed balance configuration access for SphereGrid.

Purpose
-------
- Provide hierarchical, dot-notation access to tunable balance values
  (progression curve, rank ladder, XP economy, session guard timeouts).
- Back configuration with YAML files plus in-process overrides.
- Allow runtime tuning without redeploys.

Responsibilities
----------------
- Load and deep-merge every YAML file found under ``Config.CONFIG_DIR``.
- Overlay runtime overrides on top of YAML defaults.
- Serve reads from an in-memory cache.
- Reject overrides that would change the shape of the configuration tree.

Key Design Decisions
--------------------
- YAML is the single source for **defaults**; overrides live in memory only.
- Call sites pass their own built-in fallback (``get(key, default)``), so the
  core keeps working with no ``config/`` directory at all.
- Unreadable YAML files are logged and skipped; one bad file never prevents
  the rest of the configuration from loading.

Dependencies
------------
- PyYAML (``yaml.safe_load``)
- ``spheregrid.core.config.config.Config`` for the config directory
- ``spheregrid.core.logging.logger.get_logger`` for structured logging
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional

import yaml

from spheregrid.core.config.config import Config
from spheregrid.core.config.errors import ConfigInitializationError, ConfigValidationError
from spheregrid.core.logging.logger import get_logger

logger = get_logger(__name__)


__all__ = ["ConfigManager"]


class ConfigManager:
    """
    Balance configuration with YAML defaults and runtime overrides.

    Examples
    --------
    >>> ConfigManager.initialize()
    >>> ConfigManager.get("progression.growth", 1.35)
    1.35
    >>> ConfigManager.override("session_guard.idle_timeout_ms", 120_000)
    """

    _defaults: Dict[str, Any] = {}
    _overrides: Dict[str, Any] = {}
    _cache: Dict[str, Any] = {}
    _initialized: bool = False
    _yaml_files_loaded: int = 0
    _config_dir: Optional[Path] = None

    # =========================================================================
    # YAML LOADING & DEFAULTS
    # =========================================================================

    @staticmethod
    def _deep_merge_dict(
        target: MutableMapping[str, Any],
        source: MutableMapping[str, Any],
    ) -> None:
        """Recursively merge `source` into `target` (in-place)."""
        for key, value in source.items():
            if (
                isinstance(value, dict)
                and isinstance(target.get(key), dict)
            ):
                ConfigManager._deep_merge_dict(
                    target[key], value  # type: ignore[index]
                )
            else:
                target[key] = copy.deepcopy(value)

    @classmethod
    def _load_yaml_configs(cls, config_dir: Path) -> None:
        """
        Recursively load all YAML config files from `config_dir` into `_defaults`.

        Files are merged in sorted path order so later files win on conflicts.
        """
        cls._defaults = {}
        cls._yaml_files_loaded = 0

        if not config_dir.exists():
            logger.warning(
                "Config directory not found; using built-in defaults only",
                extra={"config_dir": str(config_dir)},
            )
            return

        if not config_dir.is_dir():
            raise ConfigInitializationError(
                f"Config path is not a directory: {config_dir}"
            )

        yaml_files = sorted(
            list(config_dir.rglob("*.yaml")) + list(config_dir.rglob("*.yml"))
        )
        if not yaml_files:
            logger.info(
                "No YAML config files discovered; using built-in defaults only",
                extra={"config_dir": str(config_dir)},
            )
            return

        for yaml_file in yaml_files:
            relative = str(yaml_file.relative_to(config_dir))
            try:
                with yaml_file.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle)
            except (OSError, yaml.YAMLError) as exc:
                logger.warning(
                    "Failed to load YAML config",
                    extra={
                        "file": relative,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                )
                continue

            if isinstance(data, dict):
                cls._deep_merge_dict(cls._defaults, data)
                cls._yaml_files_loaded += 1
                logger.debug("Loaded YAML config", extra={"file": relative})
            elif data is not None:
                logger.warning(
                    "Ignoring non-dict YAML root object",
                    extra={"file": relative, "root_type": type(data).__name__},
                )

        logger.info(
            "YAML configs loaded",
            extra={
                "yaml_file_count": cls._yaml_files_loaded,
                "top_level_keys": sorted(cls._defaults.keys()),
            },
        )

    @classmethod
    def _rebuild_cache(cls) -> None:
        cache: Dict[str, Any] = copy.deepcopy(cls._defaults)
        cls._deep_merge_dict(cache, cls._overrides)
        cls._cache = cache

    # =========================================================================
    # INITIALIZATION
    # =========================================================================

    @classmethod
    def initialize(cls, config_dir: Optional[Path] = None, force: bool = False) -> None:
        """
        Load YAML defaults and apply overrides (idempotent unless ``force``).

        Parameters
        ----------
        config_dir:
            Directory to scan; defaults to ``Config.CONFIG_DIR``.
        force:
            Reload even when already initialized.
        """
        if cls._initialized and not force:
            return

        directory = Path(config_dir) if config_dir is not None else Config.CONFIG_DIR
        cls._config_dir = directory
        cls._load_yaml_configs(directory)
        cls._rebuild_cache()
        cls._initialized = True

    @classmethod
    def reset(cls) -> None:
        """
        Drop defaults, overrides and cache, and reset initialization status.

        Intended for testing and controlled maintenance operations.
        """
        cls._defaults = {}
        cls._overrides = {}
        cls._cache = {}
        cls._initialized = False
        cls._yaml_files_loaded = 0
        cls._config_dir = None
        logger.debug("ConfigManager state reset")

    # =========================================================================
    # READS
    # =========================================================================

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value by dot-notation path.

        Examples
        --------
        >>> base_xp = ConfigManager.get("progression.base_xp", 100)
        >>> grace = ConfigManager.get("session_guard.grace_period_ms", 30_000)
        """
        if not cls._initialized:
            cls.initialize()

        value: Any = cls._cache
        for part in key.split("."):
            if not isinstance(value, dict):
                return default
            value = value.get(part)
            if value is None:
                return default
        return copy.deepcopy(value)

    @classmethod
    def get_section(cls, key: str) -> Dict[str, Any]:
        """Return a nested section as a dict (empty when missing or scalar)."""
        value = cls.get(key, {})
        return value if isinstance(value, dict) else {}

    @classmethod
    def get_all_keys(cls) -> List[str]:
        """Return all top-level configuration keys currently in cache."""
        if not cls._initialized:
            cls.initialize()
        return sorted(cls._cache.keys())

    # =========================================================================
    # WRITES
    # =========================================================================

    @classmethod
    def override(cls, key: str, value: Any) -> None:
        """
        Override a configuration value at runtime.

        Raises
        ------
        ConfigValidationError
            If the key is malformed, or the override would replace a section
            with a scalar (or a scalar with a section).
        """
        if not cls._initialized:
            cls.initialize()

        parts = key.split(".") if key else []
        if not parts or any(not part for part in parts):
            raise ConfigValidationError(f"Invalid configuration key: {key!r}", key=key)

        existing = cls.get(key)
        if existing is not None and isinstance(existing, dict) != isinstance(value, dict):
            raise ConfigValidationError(
                f"Override for {key!r} changes its shape "
                f"({type(existing).__name__} -> {type(value).__name__})",
                key=key,
            )

        node: Dict[str, Any] = cls._overrides
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = copy.deepcopy(value)

        cls._rebuild_cache()
        logger.info(
            "Configuration override applied",
            extra={"config_key": key, "value_type": type(value).__name__},
        )

    # =========================================================================
    # HEALTH
    # =========================================================================

    @classmethod
    def health_snapshot(cls) -> Dict[str, Any]:
        """Return a compact snapshot of the manager state."""
        return {
            "initialized": cls._initialized,
            "config_dir": str(cls._config_dir) if cls._config_dir else None,
            "yaml_files_loaded": cls._yaml_files_loaded,
            "cached_keys": len(cls._cache),
            "override_keys": sorted(cls._overrides.keys()),
        }
