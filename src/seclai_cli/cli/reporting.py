"""Error reports for the seclai CLI.

Every failure raised while running a command is turned into exactly one of
the report variants below and written to the error stream. Rendering never
raises, so the caller can always set the exit code afterwards.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Union

from seclai_cli.cli.runtime import CLIRuntime
from seclai_cli.errors import (
    SeclaiAPIStatusError,
    SeclaiAPIValidationError,
    SeclaiConfigurationError,
)

_SENSITIVE_FIELDS = (
    "api_key",
    "apikey",
    "x-api-key",
    "authorization",
    "secret",
    "token",
)


@dataclass(frozen=True)
class ValidationReport:
    name: str
    message: str
    status_code: int
    url: str
    response_text: str | None
    validation_error: object


@dataclass(frozen=True)
class StatusReport:
    name: str
    message: str
    status_code: int
    url: str
    response_text: str | None


@dataclass(frozen=True)
class ConfigurationReport:
    name: str
    message: str


@dataclass(frozen=True)
class GenericReport:
    name: str
    message: str


@dataclass(frozen=True)
class OpaqueReport:
    text: str


ErrorReport = Union[
    ValidationReport,
    StatusReport,
    ConfigurationReport,
    GenericReport,
    OpaqueReport,
]


def sanitize_error_text(value: str) -> str:
    redacted = value
    for field in _SENSITIVE_FIELDS:
        redacted = re.sub(
            rf"(?i)({re.escape(field)}\"?\s*[=:]\s*\"?)([^,\s\"&]+)",
            r"\1[REDACTED]",
            redacted,
        )
    redacted = re.sub(
        r"(?i)([?&](?:secret|token|api_key)=)([^&\s]+)",
        r"\1[REDACTED]",
        redacted,
    )
    return redacted


def classify_error(err: object) -> ErrorReport:
    if not isinstance(err, BaseException):
        return OpaqueReport(text=str(err))

    name = type(err).__name__
    message = str(err)
    if isinstance(err, SeclaiAPIValidationError) and err.validation_error is not None:
        return ValidationReport(
            name=name,
            message=message,
            status_code=err.status_code,
            url=err.url,
            response_text=err.response_text,
            validation_error=err.validation_error,
        )
    if isinstance(err, SeclaiAPIStatusError):
        return StatusReport(
            name=name,
            message=message,
            status_code=err.status_code,
            url=err.url,
            response_text=err.response_text,
        )
    if isinstance(err, SeclaiConfigurationError):
        return ConfigurationReport(name=name, message=message)
    return GenericReport(name=name, message=message)


def _status_lines(report: ValidationReport | StatusReport) -> list[str]:
    lines = [
        f"{report.name}: {sanitize_error_text(report.message)}",
        f"status: {report.status_code}",
        f"url: {sanitize_error_text(report.url)}",
    ]
    if report.response_text:
        lines.append(f"response: {sanitize_error_text(report.response_text)}")
    return lines


def render_error_report(report: ErrorReport) -> str:
    if isinstance(report, ValidationReport):
        lines = _status_lines(report)
        detail = json.dumps({"validationError": report.validation_error}, indent=2, default=str)
        lines.append(detail)
    elif isinstance(report, StatusReport):
        lines = _status_lines(report)
    elif isinstance(report, (ConfigurationReport, GenericReport)):
        lines = [f"{report.name}: {sanitize_error_text(report.message)}"]
    else:
        lines = [report.text]
    return "\n".join(lines) + "\n"


def print_error(runtime: CLIRuntime, err: object) -> None:
    runtime.write_err(render_error_report(classify_error(err)))
