"""Interrogator configuration loaded from environment variables."""

from __future__ import annotations

import logging
import sys
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sql_interrogator.parser.normalizer import PreprocessConfig
from sql_interrogator.telemetry.json_formatter import JSONFormatter

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class InterrogatorEnv(str, Enum):
    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Settings loaded from environment variables with the SQLI_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="SQLI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    env: InterrogatorEnv = InterrogatorEnv.DEV
    debug: bool = False

    # Logging
    log_level: str = "WARNING"
    structured_logging: bool = False

    # Preprocessing
    strip_comments: bool = True
    strip_use_statements: bool = True
    strip_ctes: bool = True

    # Profiling
    profile_max_results: int = Field(default=100, ge=1)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalise_log_level(cls, v: str) -> str:
        level = str(v).strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}; got {v!r}")
        return level

    def preprocess_config(self) -> PreprocessConfig:
        """Return the normaliser options selected by these settings."""
        return PreprocessConfig(
            strip_comments=self.strip_comments,
            strip_use_statements=self.strip_use_statements,
            strip_ctes=self.strip_ctes,
        )


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    settings = Settings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info("Loaded settings for environment: %s", settings.env.value)

    return settings


def configure_logging(settings: Settings) -> None:
    """Install a root handler according to *settings*.

    Structured logging replaces any existing root handlers with a single
    stderr handler using :class:`JSONFormatter`.  Otherwise
    ``logging.basicConfig`` installs a plain timestamped format.
    """
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level)
    root = logging.getLogger()

    if settings.structured_logging:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JSONFormatter())
        root.handlers.clear()
        root.addHandler(handler)
        root.setLevel(level)
        return

    logging.basicConfig(level=level, format=_PLAIN_FORMAT, stream=sys.stderr)
    root.setLevel(level)
