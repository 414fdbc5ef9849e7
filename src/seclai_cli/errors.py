"""Client error types."""

from __future__ import annotations


class SeclaiError(RuntimeError):
    """Base client error."""


class SeclaiConfigurationError(SeclaiError):
    """Client settings are missing or invalid."""


class SeclaiConnectionError(SeclaiError):
    """API could not be reached."""


class SeclaiAPIStatusError(SeclaiError):
    """API returned an HTTP error response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        method: str,
        url: str,
        response_text: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.method = method
        self.url = url
        self.response_text = response_text


class SeclaiAPIValidationError(SeclaiAPIStatusError):
    """API rejected the request body with field-level validation detail."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        method: str,
        url: str,
        response_text: str | None = None,
        validation_error: object | None = None,
    ) -> None:
        super().__init__(
            message,
            status_code=status_code,
            method=method,
            url=url,
            response_text=response_text,
        )
        self.validation_error = validation_error


class SeclaiStreamError(SeclaiError):
    """Agent run stream failed or ended without a terminal event."""

    def __init__(self, message: str, *, event: object | None = None) -> None:
        super().__init__(message)
        self.event = event


class SeclaiTimeoutError(SeclaiError):
    """Timed out waiting for an agent run to finish."""
