"""Seclai CLI public surface."""

from seclai_cli.client import (
    API_KEY_ENV_VAR,
    DEFAULT_API_URL,
    STREAMING_CAPABILITY,
    SeclaiClient,
)
from seclai_cli.errors import (
    SeclaiAPIStatusError,
    SeclaiAPIValidationError,
    SeclaiConfigurationError,
    SeclaiConnectionError,
    SeclaiError,
    SeclaiStreamError,
    SeclaiTimeoutError,
)
from seclai_cli.streaming import ServerSentEvent, iter_sse_events, wait_for_terminal_event

__all__ = [
    "SeclaiClient",
    "API_KEY_ENV_VAR",
    "DEFAULT_API_URL",
    "STREAMING_CAPABILITY",
    "SeclaiError",
    "SeclaiConfigurationError",
    "SeclaiConnectionError",
    "SeclaiAPIStatusError",
    "SeclaiAPIValidationError",
    "SeclaiStreamError",
    "SeclaiTimeoutError",
    "ServerSentEvent",
    "iter_sse_events",
    "wait_for_terminal_event",
]
