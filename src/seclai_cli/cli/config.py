"""Configuration helpers for the seclai CLI."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from seclai_cli.client import API_KEY_ENV_VAR
from seclai_cli.errors import SeclaiConfigurationError

API_URL_ENV_VAR = "SECLAI_API_URL"
TIMEOUT_ENV_VAR = "SECLAI_TIMEOUT"
LOG_LEVEL_ENV_VAR = "SECLAI_LOG_LEVEL"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class CLIConfig:
    api_url: str | None = None
    timeout: float | None = None
    log_level: str | None = None
    api_key: str | None = None


class ConfigError(SeclaiConfigurationError):
    """Raised when CLI environment settings are invalid."""


def _optional(environ: Mapping[str, str], name: str) -> str | None:
    raw = environ.get(name)
    if raw is None:
        return None
    return raw.strip() or None


def _to_timeout(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise ConfigError(f"{TIMEOUT_ENV_VAR} must be a number of seconds") from exc
    if parsed <= 0:
        raise ConfigError(f"{TIMEOUT_ENV_VAR} must be greater than zero")
    return parsed


def load_cli_config(environ: Mapping[str, str] | None = None) -> CLIConfig:
    source = os.environ if environ is None else environ

    api_url = _optional(source, API_URL_ENV_VAR)
    if api_url is not None and not api_url.startswith(("http://", "https://")):
        raise ConfigError(f"{API_URL_ENV_VAR} must be an http(s) URL")

    raw_timeout = _optional(source, TIMEOUT_ENV_VAR)
    timeout = _to_timeout(raw_timeout) if raw_timeout is not None else None

    log_level = _optional(source, LOG_LEVEL_ENV_VAR)
    if log_level is not None:
        log_level = log_level.upper()
        if log_level not in _LOG_LEVELS:
            raise ConfigError(
                f"{LOG_LEVEL_ENV_VAR} must be one of: {', '.join(sorted(_LOG_LEVELS))}"
            )

    return CLIConfig(
        api_url=api_url,
        timeout=timeout,
        log_level=log_level,
        api_key=_optional(source, API_KEY_ENV_VAR),
    )


def configure_logging(config: CLIConfig, stream) -> None:
    """Send package log records to ``stream`` when a log level is configured."""
    package_logger = logging.getLogger("seclai_cli")
    package_logger.handlers.clear()
    if config.log_level is None:
        package_logger.addHandler(logging.NullHandler())
        return
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    package_logger.setLevel(config.log_level)
    package_logger.addHandler(handler)
