"""Unit tests for settings and logging configuration"""

import json
import logging

import pytest

from cascade_auth.config.logging import JsonFormatter, configure_logging
from cascade_auth.config.settings import Settings, get_settings

pytestmark = pytest.mark.unit


class TestSettings:
    """Test environment-driven settings"""

    def test_defaults(self):
        """Happy path: defaults without environment"""
        settings = Settings()

        assert settings.auth_drivers == {}
        assert settings.auth_capabilities == {}
        assert settings.password_letters == 6
        assert settings.password_digits == 2
        assert settings.log_format == "text"

    def test_json_environment(self, monkeypatch):
        """Happy path: complex values parsed from JSON env vars, order kept"""
        monkeypatch.setenv("AUTH_DRIVERS", '{"z": "pkg.mod:Z", "a": "pkg.mod:A"}')
        monkeypatch.setenv("AUTH_CAPABILITIES", '{"list": [], "add": ["a"]}')
        monkeypatch.setenv("PASSWORD_LETTERS", "8")

        settings = Settings()

        assert list(settings.auth_drivers) == ["z", "a"]
        assert settings.auth_capabilities == {"list": [], "add": ["a"]}
        assert settings.password_letters == 8

    def test_get_settings_cached(self):
        """Test get_settings returns the same instance"""
        assert get_settings() is get_settings()


class TestConfigureLogging:
    """Test root logger configuration"""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_text_format(self):
        """Happy path: text formatter at configured level"""
        configure_logging(Settings(log_level="debug", log_format="text"))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_json_format(self):
        """Happy path: JSON formatter emits one object per record"""
        configure_logging(Settings(log_format="json"))

        formatter = logging.getLogger().handlers[0].formatter
        record = logging.LogRecord("cascade_auth", logging.INFO, __file__, 1, "hello %s", ("x",), None)
        entry = json.loads(formatter.format(record))

        assert isinstance(formatter, JsonFormatter)
        assert entry["message"] == "hello x"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "cascade_auth"

    def test_unknown_format_raises(self):
        """Bad input: unknown log format raises ValueError"""
        with pytest.raises(ValueError, match="Unknown log_format"):
            configure_logging(Settings(log_format="xml"))
