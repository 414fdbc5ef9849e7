"""Server-sent event reader for streaming agent runs."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Iterable, Iterator

from seclai_cli.errors import SeclaiStreamError, SeclaiTimeoutError

logger = logging.getLogger(__name__)

DONE_EVENT = "done"
ERROR_EVENT = "error"


@dataclass(frozen=True)
class ServerSentEvent:
    event: str = "message"
    data: str = ""
    id: str | None = None


def iter_sse_events(
    lines: Iterable[str],
    *,
    deadline: float | None = None,
) -> Iterator[ServerSentEvent]:
    """Group decoded stream lines into events.

    Follows the text/event-stream line format: ``field: value`` lines build an
    event, a blank line dispatches it, lines starting with ``:`` are comments.
    Events without any ``data`` line are dropped. The last ``id`` carries over
    to later events.

    ``deadline`` is a ``time.monotonic()`` value checked on every line, so
    heartbeat comments cannot hold the wait open past it.
    """
    event_type = ""
    data_lines: list[str] = []
    event_id: str | None = None

    for raw in lines:
        _check_deadline(deadline)
        line = raw.rstrip("\r")
        if not line:
            if data_lines:
                yield ServerSentEvent(
                    event=event_type or "message",
                    data="\n".join(data_lines),
                    id=event_id,
                )
            event_type = ""
            data_lines = []
            continue
        if line.startswith(":"):
            continue

        field, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]
        if field == "event":
            event_type = value
        elif field == "data":
            data_lines.append(value)
        elif field == "id":
            event_id = value

    if data_lines:
        yield ServerSentEvent(
            event=event_type or "message",
            data="\n".join(data_lines),
            id=event_id,
        )


def _check_deadline(deadline: float | None) -> None:
    if deadline is not None and time.monotonic() > deadline:
        raise SeclaiTimeoutError("timed out waiting for agent run to finish")


def _decode_data(event: ServerSentEvent) -> object:
    try:
        return json.loads(event.data)
    except json.JSONDecodeError:
        return event.data


def wait_for_terminal_event(
    events: Iterable[ServerSentEvent],
    *,
    deadline: float | None = None,
) -> object:
    """Consume events until the run finishes and return the final payload.

    ``deadline`` is a ``time.monotonic()`` value checked after every event.
    """
    for event in events:
        logger.debug("stream event: %s", event.event)
        _check_deadline(deadline)
        if event.event == DONE_EVENT:
            return _decode_data(event)
        if event.event == ERROR_EVENT:
            payload = _decode_data(event)
            message = payload.get("message") if isinstance(payload, dict) else None
            raise SeclaiStreamError(
                f"agent run failed: {message or event.data}",
                event=payload,
            )
    raise SeclaiStreamError("agent run stream ended before a terminal event")
