"""Request body and upload payload helpers for the seclai CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from seclai_cli.cli.runtime import CLIRuntime

STDIN_MARKER = "-"


class InputError(ValueError):
    """Raised when local command input is missing or invalid."""


class InputConflictError(InputError):
    """Raised when more than one input source is given."""


class MissingInputError(InputError):
    """Raised when no input source is given."""


class JSONInputError(InputError):
    """Raised when input text is not valid JSON."""


def _parse_json(text: str, *, source: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise JSONInputError(f"invalid JSON in {source}: {exc}") from exc


def read_json_input(
    runtime: CLIRuntime,
    *,
    json_text: str | None = None,
    json_file: str | None = None,
) -> Any:
    if json_text is not None and json_file is not None:
        raise InputConflictError("Provide only one of --json or --json-file")

    if json_file is not None:
        if json_file == STDIN_MARKER:
            return _parse_json(runtime.read_stdin(), source="stdin")
        text = Path(json_file).read_text(encoding="utf-8")
        return _parse_json(text, source=json_file)

    if json_text is not None:
        if json_text == STDIN_MARKER:
            return _parse_json(runtime.read_stdin(), source="stdin")
        return _parse_json(json_text, source="--json")

    raise MissingInputError("Missing JSON input. Provide --json or --json-file.")


def read_json_object(text: str, *, option: str) -> dict[str, Any]:
    value = _parse_json(text, source=option)
    if not isinstance(value, dict):
        raise JSONInputError(f"{option} must be a JSON object")
    return value


def read_file_bytes(path: str) -> bytes:
    return Path(path).read_bytes()
