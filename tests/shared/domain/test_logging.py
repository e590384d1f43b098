"""Tests for logging configuration."""

import logging
import logging.handlers

import pytest
import structlog
from shared.config import override_settings
from shared.logging import configure_logging, get_log_level


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestLogLevel:
    def test_explicit_level_wins(self):
        override_settings(log_level="error", protean_env="development")
        assert get_log_level() == "ERROR"

    @pytest.mark.parametrize(
        ("env", "level"),
        [("production", "INFO"), ("development", "DEBUG"), ("test", "WARNING"), ("sandbox", "INFO")],
    )
    def test_default_per_environment(self, env, level):
        override_settings(log_level=None, protean_env=env)
        assert get_log_level() == level


class TestConfigureLogging:
    def test_console_only_without_log_file(self):
        override_settings(log_level="INFO", log_file=None, protean_env="development")

        configure_logging()

        (handler,) = logging.getLogger().handlers
        assert isinstance(handler, logging.StreamHandler)
        assert logging.getLogger("protean").level == logging.WARNING

    def test_log_file_adds_rotating_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "tillpoint.log"
        override_settings(log_level="INFO", log_file=str(log_file), protean_env="development")

        configure_logging()

        rotating = [h for h in logging.getLogger().handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(rotating) == 1
        assert log_file.parent.is_dir()
        rotating[0].close()

    def test_production_renders_json(self):
        override_settings(log_level="INFO", log_file=None, protean_env="production")

        configure_logging()

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_development_renders_console(self):
        override_settings(log_level="INFO", log_file=None, protean_env="development")

        configure_logging()

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
