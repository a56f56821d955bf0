"""Runtime configuration — env-driven, immutable.

Centralized config using pydantic-settings.  Values come from (highest
priority first) explicit overrides passed by the CLI, ``MONOCLE_*``
environment variables, and a ``.env`` file in the working directory.  The
CircleCI token is read from the conventional ``CIRCLECI_TOKEN`` variable,
then from ``MONOCLE_CIRCLE_TOKEN``; no other spelling is accepted.

The configuration is constructed once at startup by ``load_config`` and
passed to every component that needs it.  There is no module-level
singleton.

Examples
--------
Override via environment::

    export CIRCLECI_TOKEN=abc123
    export MONOCLE_UPDATE_INTERVAL=1m
    export MONOCLE_ON_FETCH_ERROR=propagate
"""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from monocle.core.durations import parse_duration

DEFAULT_CIRCLE_HOST = "https://circleci.com"
DEFAULT_PAGE_SIZE = 30
MAX_PAGE_SIZE = 100  # CircleCI v1.1 rejects larger limits
# Longest wait threading.Event.wait accepts on this platform.
MAX_UPDATE_INTERVAL = timedelta(seconds=threading.TIMEOUT_MAX)


class ConfigError(ValueError):
    """Raised when the configuration is missing or malformed.

    Fatal at startup: the CLI reports it and exits non-zero before any
    terminal setup or network traffic happens.
    """


class FetchErrorPolicy(str, Enum):
    """What the build fetcher does when a CircleCI query fails."""

    DEGRADE = "degrade"  # log and return an empty build list
    PROPAGATE = "propagate"  # raise FetchError to the coordinator


class MonocleConfig(BaseSettings):
    """Immutable settings for one dashboard session."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MONOCLE_",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    circle_token: str = Field(
        default="",
        validation_alias=AliasChoices("CIRCLECI_TOKEN", "MONOCLE_CIRCLE_TOKEN"),
        repr=False,
    )
    update_interval: timedelta = timedelta(seconds=30)
    circle_host: str = DEFAULT_CIRCLE_HOST
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    on_fetch_error: FetchErrorPolicy = FetchErrorPolicy.DEGRADE
    request_timeout: float = Field(default=30.0, gt=0)

    # Logging never goes to the terminal the dashboard draws on.
    log_level: str = "INFO"
    log_file: Path | None = None

    @field_validator("update_interval", mode="before")
    @classmethod
    def _parse_interval(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return parse_duration(value)
            except ValueError as exc:
                raise ValueError(
                    f"parsing {value} as duration failed: {exc}"
                ) from exc
        return value

    @field_validator("update_interval")
    @classmethod
    def _interval_positive(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("update interval must be positive")
        if value > MAX_UPDATE_INTERVAL:
            raise ValueError(
                f"update interval must not exceed {MAX_UPDATE_INTERVAL.total_seconds():.0f}s"
            )
        return value

    @field_validator("circle_host")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def api_base_url(self) -> str:
        """Root of the CircleCI v1.1 REST API for the configured host."""
        return f"{self.circle_host}/api/v1.1"

    @property
    def interval_seconds(self) -> float:
        return self.update_interval.total_seconds()


def load_config(**overrides: Any) -> MonocleConfig:
    """Build the session configuration, failing fast on bad input.

    ``None`` overrides are dropped so unset CLI flags fall through to the
    environment and the defaults.

    Raises
    ------
    ConfigError
        If a setting fails validation or no CircleCI token is available.
    """
    explicit = {key: value for key, value in overrides.items() if value is not None}
    if "circle_token" in explicit:
        # Under its alias so the flag replaces, rather than sits beside, the env value.
        explicit["CIRCLECI_TOKEN"] = explicit.pop("circle_token")
    try:
        config = MonocleConfig(**explicit)
    except ValidationError as exc:
        raise ConfigError(_describe(exc)) from exc

    if not config.circle_token:
        raise ConfigError(
            "a circleci token is required (--circle-token or CIRCLECI_TOKEN)"
        )
    return config


def _describe(exc: ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(loc) for loc in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)
