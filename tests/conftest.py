"""Shared fixtures for seclai CLI tests."""

from __future__ import annotations

import functools
import io
from dataclasses import dataclass, field
from typing import Any

import pytest

from seclai_cli.cli.main import run_cli
from seclai_cli.cli.runtime import CLIRuntime
from seclai_cli.client import STREAMING_CAPABILITY


@dataclass
class FakeBackend:
    instances: list["FakeClient"] = field(default_factory=list)
    results: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, BaseException] = field(default_factory=dict)
    capabilities: frozenset[str] = frozenset({STREAMING_CAPABILITY})

    @property
    def calls(self) -> list[tuple[str, tuple, dict]]:
        return [call for instance in self.instances for call in instance.calls]


class FakeClient:
    def __init__(self, backend: FakeBackend, **kwargs: Any) -> None:
        self.backend = backend
        self.kwargs = kwargs
        self.calls: list[tuple[str, tuple, dict]] = []
        self.capabilities = backend.capabilities
        backend.instances.append(self)

    def _call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        self.calls.append((name, args, kwargs))
        if name in self.backend.errors:
            raise self.backend.errors[name]
        return self.backend.results.get(name, {"ok": True})

    def list_sources(self, **kwargs):
        return self._call("list_sources", **kwargs)

    def upload_file_to_source(self, source_connection_id, **kwargs):
        return self._call("upload_file_to_source", source_connection_id, **kwargs)

    def upload_file_to_content(self, content_version_id, **kwargs):
        return self._call("upload_file_to_content", content_version_id, **kwargs)

    def run_agent(self, agent_id, body):
        return self._call("run_agent", agent_id, body)

    def run_streaming_agent_and_wait(self, agent_id, body, **kwargs):
        return self._call("run_streaming_agent_and_wait", agent_id, body, **kwargs)

    def list_agent_runs(self, agent_id, **kwargs):
        return self._call("list_agent_runs", agent_id, **kwargs)

    def get_agent_run(self, run_id, **kwargs):
        return self._call("get_agent_run", run_id, **kwargs)

    def delete_agent_run(self, run_id, **kwargs):
        return self._call("delete_agent_run", run_id, **kwargs)

    def get_content_detail(self, content_version_id, **kwargs):
        return self._call("get_content_detail", content_version_id, **kwargs)

    def delete_content(self, content_version_id):
        self._call("delete_content", content_version_id)

    def list_content_embeddings(self, content_version_id, **kwargs):
        return self._call("list_content_embeddings", content_version_id, **kwargs)


@dataclass
class CLIResult:
    exit_code: int
    stdout: str
    stderr: str


@pytest.fixture
def backend(monkeypatch) -> FakeBackend:
    fake = FakeBackend()
    monkeypatch.setattr("seclai_cli.cli.main.SeclaiClient", functools.partial(FakeClient, fake))
    return fake


@pytest.fixture
def invoke():
    def _invoke(
        argv: list[str],
        *,
        stdin: str = "",
        environ: dict[str, str] | None = None,
    ) -> CLIResult:
        runtime = CLIRuntime(
            stdin=io.StringIO(stdin),
            stdout=io.StringIO(),
            stderr=io.StringIO(),
        )
        rc = run_cli(argv, runtime, environ={} if environ is None else environ)
        assert runtime.exit_code == rc
        return CLIResult(
            exit_code=rc,
            stdout=runtime.stdout.getvalue(),
            stderr=runtime.stderr.getvalue(),
        )

    return _invoke
