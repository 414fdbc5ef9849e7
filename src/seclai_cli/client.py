"""Typed client for Seclai API endpoints."""

from __future__ import annotations

import json
import logging
import mimetypes
import os
import time
from dataclasses import dataclass
from typing import Any, ClassVar
from urllib.parse import quote

from seclai_cli.errors import (
    SeclaiAPIStatusError,
    SeclaiAPIValidationError,
    SeclaiConfigurationError,
    SeclaiConnectionError,
    SeclaiTimeoutError,
)
from seclai_cli.streaming import iter_sse_events, wait_for_terminal_event

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "SECLAI_API_KEY"
DEFAULT_API_URL = "https://seclai.com/api"
DEFAULT_UPLOAD_NAME = "upload"
STREAMING_CAPABILITY = "streaming-agent-runs"


def _segment(value: str) -> str:
    return quote(str(value), safe="")


@dataclass
class SeclaiClient:
    api_key: str | None = None
    base_url: str = DEFAULT_API_URL
    timeout: float = 30.0
    retries: int = 0

    capabilities: ClassVar[frozenset[str]] = frozenset({STREAMING_CAPABILITY})

    def __post_init__(self) -> None:
        if self.api_key is None:
            env_api_key = os.getenv(API_KEY_ENV_VAR)
            self.api_key = env_api_key.strip() or None if env_api_key else None
        elif not self.api_key.strip():
            self.api_key = None
        if self.api_key is None:
            raise SeclaiConfigurationError(
                f"Missing API key. Pass --api-key or set {API_KEY_ENV_VAR}."
            )

        try:
            import requests
            from requests.adapters import HTTPAdapter
            from urllib3.util.retry import Retry
        except Exception as exc:  # pragma: no cover
            raise SeclaiConnectionError(f"requests stack unavailable: {exc}") from exc

        self._requests = requests
        self._session = requests.Session()
        retry = Retry(
            total=max(0, int(self.retries)),
            connect=max(0, int(self.retries)),
            read=max(0, int(self.retries)),
            status=max(0, int(self.retries)),
            status_forcelist=(429, 500, 502, 503, 504),
            backoff_factor=0.2,
            allowed_methods=("GET",),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _headers(self, **extra: str) -> dict[str, str]:
        headers = {"x-api-key": str(self.api_key)}
        headers.update(extra)
        return headers

    def _raise_for_status(self, method: str, url: str, response: Any) -> None:
        if response.status_code < 400:
            return

        response_text = getattr(response, "text", None) or None
        try:
            body = response.json()
        except ValueError:
            body = None
        detail = body.get("detail") if isinstance(body, dict) else None
        reason = detail if isinstance(detail, str) else getattr(response, "reason", None)
        message = f"request failed: {response.status_code} {reason or 'error'}"
        logger.debug("%s %s -> %s", method, url, response.status_code)

        if response.status_code == 422 and isinstance(body, dict) and "detail" in body:
            raise SeclaiAPIValidationError(
                f"request failed: {response.status_code} validation error",
                status_code=response.status_code,
                method=method,
                url=url,
                response_text=response_text,
                validation_error=detail,
            )
        raise SeclaiAPIStatusError(
            message,
            status_code=response.status_code,
            method=method,
            url=url,
            response_text=response_text,
        )

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_payload: object | None = None,
        files: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
    ) -> Any:
        url = self._url(path)
        query = {key: value for key, value in (params or {}).items() if value is not None}
        logger.debug("%s %s", method, url)
        try:
            response = self._session.request(
                method,
                url,
                params=query or None,
                json=json_payload,
                files=files,
                data=data,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except self._requests.exceptions.Timeout as exc:
            raise SeclaiTimeoutError(f"request timed out: {method} {url}") from exc
        except self._requests.exceptions.RequestException as exc:
            raise SeclaiConnectionError(str(exc)) from exc

        self._raise_for_status(method, url, response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _upload(
        self,
        path: str,
        *,
        file: bytes,
        title: str | None,
        metadata: dict[str, Any] | None,
        file_name: str | None,
        mime_type: str | None,
    ) -> Any:
        name = file_name or DEFAULT_UPLOAD_NAME
        content_type = mime_type or mimetypes.guess_type(name)[0] or "application/octet-stream"
        form: dict[str, str] = {}
        if title is not None:
            form["title"] = title
        if metadata is not None:
            form["metadata"] = json.dumps(metadata)
        return self._request(
            "POST",
            path,
            files={"file": (name, file, content_type)},
            data=form or None,
        )

    def _run_path(self, run_id: str, agent_id: str | None) -> str:
        if agent_id is None:
            return f"/agents/runs/{_segment(run_id)}"
        return f"/agents/{_segment(agent_id)}/runs/{_segment(run_id)}"

    def list_sources(
        self,
        *,
        page: int | None = None,
        limit: int | None = None,
        sort: str | None = None,
        order: str | None = None,
        account_id: str | None = None,
    ) -> Any:
        params = {
            "page": page,
            "limit": limit,
            "sort": sort,
            "order": order,
            "account_id": account_id,
        }
        return self._request("GET", "/sources/", params=params)

    def upload_file_to_source(
        self,
        source_connection_id: str,
        *,
        file: bytes,
        title: str | None = None,
        metadata: dict[str, Any] | None = None,
        file_name: str | None = None,
        mime_type: str | None = None,
    ) -> Any:
        return self._upload(
            f"/sources/{_segment(source_connection_id)}/upload",
            file=file,
            title=title,
            metadata=metadata,
            file_name=file_name,
            mime_type=mime_type,
        )

    def upload_file_to_content(
        self,
        content_version_id: str,
        *,
        file: bytes,
        title: str | None = None,
        metadata: dict[str, Any] | None = None,
        file_name: str | None = None,
        mime_type: str | None = None,
    ) -> Any:
        return self._upload(
            f"/contents/{_segment(content_version_id)}/upload",
            file=file,
            title=title,
            metadata=metadata,
            file_name=file_name,
            mime_type=mime_type,
        )

    def run_agent(self, agent_id: str, body: object) -> Any:
        return self._request("POST", f"/agents/{_segment(agent_id)}/runs", json_payload=body)

    def run_streaming_agent_and_wait(
        self,
        agent_id: str,
        body: object,
        *,
        timeout_ms: int | None = None,
    ) -> Any:
        """Start an agent run over the SSE endpoint and block until it finishes.

        Without ``timeout_ms`` the wait is unbounded. The timeout only stops
        this client from waiting; the run keeps going server-side.
        """
        deadline: float | None = None
        read_timeout: float | None = None
        if timeout_ms is not None:
            if timeout_ms <= 0:
                raise SeclaiTimeoutError(f"timeout_ms must be positive, got {timeout_ms}")
            read_timeout = timeout_ms / 1000.0
            deadline = time.monotonic() + read_timeout

        url = self._url(f"/agents/{_segment(agent_id)}/runs/stream")
        logger.debug("POST %s (stream)", url)
        try:
            response = self._session.request(
                "POST",
                url,
                json=body,
                headers=self._headers(accept="text/event-stream"),
                timeout=(self.timeout, read_timeout),
                stream=True,
            )
        except self._requests.exceptions.Timeout as exc:
            raise SeclaiTimeoutError("timed out waiting for agent run to finish") from exc
        except self._requests.exceptions.RequestException as exc:
            raise SeclaiConnectionError(str(exc)) from exc

        try:
            self._raise_for_status("POST", url, response)
            response.encoding = "utf-8"
            lines = response.iter_lines(decode_unicode=True)
            events = iter_sse_events(lines, deadline=deadline)
            return wait_for_terminal_event(events, deadline=deadline)
        except self._requests.exceptions.RequestException as exc:
            if deadline is not None and time.monotonic() >= deadline:
                raise SeclaiTimeoutError("timed out waiting for agent run to finish") from exc
            raise SeclaiConnectionError(f"agent run stream interrupted: {exc}") from exc
        finally:
            response.close()

    def list_agent_runs(
        self,
        agent_id: str,
        *,
        page: int | None = None,
        limit: int | None = None,
    ) -> Any:
        return self._request(
            "GET",
            f"/agents/{_segment(agent_id)}/runs",
            params={"page": page, "limit": limit},
        )

    def get_agent_run(
        self,
        run_id: str,
        *,
        agent_id: str | None = None,
        include_step_outputs: bool | None = None,
    ) -> Any:
        params = {"include_step_outputs": "true" if include_step_outputs else None}
        return self._request("GET", self._run_path(run_id, agent_id), params=params)

    def delete_agent_run(self, run_id: str, *, agent_id: str | None = None) -> Any:
        return self._request("DELETE", self._run_path(run_id, agent_id))

    def get_content_detail(
        self,
        content_version_id: str,
        *,
        start: int | None = None,
        end: int | None = None,
    ) -> Any:
        return self._request(
            "GET",
            f"/contents/{_segment(content_version_id)}",
            params={"start": start, "end": end},
        )

    def delete_content(self, content_version_id: str) -> None:
        self._request("DELETE", f"/contents/{_segment(content_version_id)}")

    def list_content_embeddings(
        self,
        content_version_id: str,
        *,
        page: int | None = None,
        limit: int | None = None,
    ) -> Any:
        return self._request(
            "GET",
            f"/contents/{_segment(content_version_id)}/embeddings",
            params={"page": page, "limit": limit},
        )


__all__ = ["SeclaiClient", "STREAMING_CAPABILITY", "DEFAULT_API_URL", "API_KEY_ENV_VAR"]
