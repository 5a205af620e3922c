"""Unit tests for sql_interrogator.config."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from sql_interrogator.config import (
    InterrogatorEnv,
    Settings,
    configure_logging,
    load_settings,
)
from sql_interrogator.parser.normalizer import PreprocessConfig
from sql_interrogator.telemetry.json_formatter import JSONFormatter

# ---------------------------------------------------------------------------
# Settings - default values
# ---------------------------------------------------------------------------


class TestSettingsDefaults:
    def test_default_env(self):
        assert Settings().env == InterrogatorEnv.DEV

    def test_default_debug(self):
        assert Settings().debug is False

    def test_default_logging(self):
        settings = Settings()
        assert settings.log_level == "WARNING"
        assert settings.structured_logging is False

    def test_default_preprocessing(self):
        settings = Settings()
        assert settings.strip_comments is True
        assert settings.strip_use_statements is True
        assert settings.strip_ctes is True

    def test_default_profile_max_results(self):
        assert Settings().profile_max_results == 100


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------


class TestSettingsEnvOverrides:
    def test_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SQLI_ENV", "prod")
        assert Settings().env == InterrogatorEnv.PROD

    def test_debug(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SQLI_DEBUG", "true")
        assert Settings().debug is True

    def test_log_level_is_upper_cased(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SQLI_LOG_LEVEL", "debug")
        assert Settings().log_level == "DEBUG"

    def test_case_insensitive_names(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("sqli_strip_ctes", "false")
        assert Settings().strip_ctes is False

    def test_profile_max_results(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SQLI_PROFILE_MAX_RESULTS", "7")
        assert Settings().profile_max_results == 7


class TestSettingsValidation:
    def test_unknown_log_level(self):
        with pytest.raises(ValidationError, match="log_level"):
            Settings(log_level="LOUD")

    def test_profile_max_results_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(profile_max_results=0)

    def test_unknown_env(self):
        with pytest.raises(ValidationError):
            Settings(env="qa")


# ---------------------------------------------------------------------------
# Derived configuration
# ---------------------------------------------------------------------------


class TestPreprocessConfig:
    def test_defaults(self):
        assert Settings().preprocess_config() == PreprocessConfig()

    def test_reflects_settings(self):
        config = Settings(strip_comments=False, strip_ctes=False).preprocess_config()
        assert config.strip_comments is False
        assert config.strip_use_statements is True
        assert config.strip_ctes is False


class TestLoadSettings:
    def test_overrides(self):
        settings = load_settings(env="staging", log_level="info")
        assert settings.env == InterrogatorEnv.STAGING
        assert settings.log_level == "INFO"

    def test_debug_logs_environment(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.INFO, logger="sql_interrogator.config"):
            load_settings(debug=True)
        assert "Loaded settings for environment: dev" in caplog.text


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    def test_structured_logging_installs_json_handler(self, restore_root_logger: logging.Logger):
        configure_logging(Settings(structured_logging=True, log_level="INFO"))
        handlers = restore_root_logger.handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, JSONFormatter)
        assert restore_root_logger.level == logging.INFO

    def test_plain_logging_sets_level(self, restore_root_logger: logging.Logger):
        configure_logging(Settings(log_level="ERROR"))
        assert restore_root_logger.level == logging.ERROR

    def test_debug_forces_debug_level(self, restore_root_logger: logging.Logger):
        configure_logging(Settings(debug=True, log_level="ERROR"))
        assert restore_root_logger.level == logging.DEBUG
