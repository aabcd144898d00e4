"""
Unit tests for environment-driven static configuration.
"""

import pytest

from spheregrid.core.config import Config, Environment

_SETTINGS = (
    "ENVIRONMENT",
    "DEBUG",
    "LOG_LEVEL",
    "LOG_JSON",
    "LOG_COLORS",
    "LOG_FILE_ENABLED",
    "LOGS_DIR",
    "CONFIG_DIR",
    "load_warnings",
)


@pytest.fixture
def restore_config(monkeypatch):
    """Put every Config attribute back after the test reloads it."""
    for name in _SETTINGS:
        monkeypatch.setattr(Config, name, getattr(Config, name))
    return monkeypatch


@pytest.mark.unit
class TestEnvironment:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("production", Environment.PRODUCTION),
            (" Testing ", Environment.TESTING),
            ("qa", Environment.DEVELOPMENT),
        ],
    )
    def test_from_string(self, raw, expected):
        assert Environment.from_string(raw) is expected


@pytest.mark.unit
class TestConfigLoad:
    """Test reading settings from the environment."""

    def test_reads_environment(self, restore_config, tmp_path):
        # Arrange
        restore_config.setenv("ENVIRONMENT", "production")
        restore_config.setenv("DEBUG", "yes")
        restore_config.setenv("LOG_JSON", "off")
        restore_config.setenv("LOG_LEVEL", "debug")
        restore_config.setenv("CONFIG_DIR", str(tmp_path))

        # Act
        Config.load()

        # Assert
        assert Config.is_production()
        assert Config.DEBUG is True
        assert Config.LOG_JSON is False
        assert Config.LOG_LEVEL == "DEBUG"
        assert Config.CONFIG_DIR == tmp_path.resolve()
        assert Config.load_warnings == {}

    def test_unset_values_use_defaults(self, restore_config):
        for name in ("ENVIRONMENT", "DEBUG", "LOG_JSON", "LOG_LEVEL", "CONFIG_DIR"):
            restore_config.delenv(name, raising=False)

        Config.load()

        assert Config.ENVIRONMENT == "development"
        assert Config.DEBUG is False
        assert Config.LOG_JSON is None
        assert Config.LOG_LEVEL == "INFO"
        assert Config.CONFIG_DIR == (Config.PROJECT_ROOT / "config").resolve()

    def test_blank_value_uses_default(self, restore_config):
        restore_config.setenv("ENVIRONMENT", "   ")

        Config.load()

        assert Config.ENVIRONMENT == "development"

    def test_unparsable_boolean_falls_back(self, restore_config):
        restore_config.setenv("LOG_COLORS", "maybe")

        Config.load()

        assert Config.LOG_COLORS is True
        assert "LOG_COLORS" in Config.load_warnings

    def test_unknown_log_level_falls_back(self, restore_config):
        restore_config.setenv("LOG_LEVEL", "chatty")

        Config.load()

        assert Config.LOG_LEVEL == "INFO"
        assert "LOG_LEVEL" in Config.load_warnings
