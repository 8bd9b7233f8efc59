"""
Test configuration selection and logging setup
"""
import importlib
import logging

import pytest

from quizplay import config
from quizplay.utils.logging_config import configure_logging


@pytest.fixture
def reload_config(monkeypatch):
    """Re-read the config module under patched environment variables."""

    def reload(**environ):
        for name, value in environ.items():
            monkeypatch.setenv(name, value)
        return importlib.reload(config)

    yield reload
    monkeypatch.undo()
    importlib.reload(config)


class TestConfig:
    """Test environment-driven config selection"""

    def test_named_environments(self):
        assert config.get_config("development") is config.DevelopmentConfig
        assert config.get_config(" Production ") is config.ProductionConfig

    def test_unknown_environment_falls_back(self):
        assert config.get_config("staging") is config.Config

    def test_environment_variable(self, monkeypatch):
        monkeypatch.setenv("QUIZPLAY_ENV", "development")

        assert config.get_config() is config.DevelopmentConfig

    def test_default_log_levels(self, reload_config, monkeypatch):
        monkeypatch.delenv("QUIZPLAY_LOG_LEVEL", raising=False)
        module = reload_config()

        assert module.Config.LOG_LEVEL == "INFO"
        assert module.DevelopmentConfig.LOG_LEVEL == "DEBUG"
        assert module.ProductionConfig.LOG_LEVEL == "WARNING"

    def test_log_level_override_applies_to_every_environment(self, reload_config):
        module = reload_config(QUIZPLAY_LOG_LEVEL="error")

        assert module.DevelopmentConfig.LOG_LEVEL == "ERROR"
        assert module.ProductionConfig.LOG_LEVEL == "ERROR"


class TestLogging:
    def test_returns_package_logger(self):
        logger = configure_logging("warning")

        assert logger.name == "quizplay"
        assert logging.getLogger("urllib3").level >= logging.INFO
