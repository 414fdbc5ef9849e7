from __future__ import annotations

import io
import json

from seclai_cli.cli.config import ConfigError
from seclai_cli.cli.reporting import (
    ConfigurationReport,
    GenericReport,
    OpaqueReport,
    StatusReport,
    ValidationReport,
    classify_error,
    print_error,
    render_error_report,
    sanitize_error_text,
)
from seclai_cli.cli.runtime import CLIRuntime
from seclai_cli.errors import (
    SeclaiAPIStatusError,
    SeclaiAPIValidationError,
    SeclaiConfigurationError,
    SeclaiTimeoutError,
)


def _status_error(**overrides) -> SeclaiAPIStatusError:
    kwargs = {
        "status_code": 404,
        "method": "GET",
        "url": "https://example.invalid/api/contents/cv_1",
        "response_text": '{"detail":"not found"}',
    }
    kwargs.update(overrides)
    return SeclaiAPIStatusError("request failed: 404 not found", **kwargs)


def test_classify_status_error() -> None:
    report = classify_error(_status_error())

    assert report == StatusReport(
        name="SeclaiAPIStatusError",
        message="request failed: 404 not found",
        status_code=404,
        url="https://example.invalid/api/contents/cv_1",
        response_text='{"detail":"not found"}',
    )


def test_classify_validation_error() -> None:
    err = SeclaiAPIValidationError(
        "request failed: 422 validation error",
        status_code=422,
        method="POST",
        url="https://example.invalid/api/agents/a/runs",
        response_text=None,
        validation_error=[{"msg": "field required"}],
    )

    report = classify_error(err)

    assert isinstance(report, ValidationReport)
    assert report.validation_error == [{"msg": "field required"}]


def test_validation_error_without_detail_is_status_report() -> None:
    err = SeclaiAPIValidationError(
        "request failed: 422 validation error",
        status_code=422,
        method="POST",
        url="https://example.invalid/api/agents/a/runs",
    )

    assert isinstance(classify_error(err), StatusReport)


def test_classify_configuration_errors() -> None:
    assert classify_error(SeclaiConfigurationError("Missing API key")) == ConfigurationReport(
        name="SeclaiConfigurationError",
        message="Missing API key",
    )
    assert isinstance(classify_error(ConfigError("bad")), ConfigurationReport)


def test_classify_generic_and_opaque_values() -> None:
    assert classify_error(SeclaiTimeoutError("too slow")) == GenericReport(
        name="SeclaiTimeoutError",
        message="too slow",
    )
    assert classify_error(ValueError("nope")) == GenericReport(name="ValueError", message="nope")
    assert classify_error({"weird": 1}) == OpaqueReport(text="{'weird': 1}")


def test_render_status_report_skips_empty_response() -> None:
    rendered = render_error_report(classify_error(_status_error(response_text=None)))

    assert rendered == (
        "SeclaiAPIStatusError: request failed: 404 not found\n"
        "status: 404\n"
        "url: https://example.invalid/api/contents/cv_1\n"
    )


def test_render_validation_report_appends_pretty_detail() -> None:
    report = ValidationReport(
        name="SeclaiAPIValidationError",
        message="request failed: 422 validation error",
        status_code=422,
        url="https://example.invalid/api/x",
        response_text='{"detail":[]}',
        validation_error={"field": "input"},
    )

    rendered = render_error_report(report)

    head, _, tail = rendered.partition("response: {\"detail\":[]}\n")
    assert head.endswith("url: https://example.invalid/api/x\n")
    assert tail == '{\n  "validationError": {\n    "field": "input"\n  }\n}\n'
    assert json.loads(tail) == {"validationError": {"field": "input"}}


def test_render_opaque_report() -> None:
    assert render_error_report(OpaqueReport(text="boom")) == "boom\n"


def test_sanitize_redacts_api_keys() -> None:
    text = sanitize_error_text("url=https://x.test/?api_key=abc123&page=1 x-api-key: sk_live_9")

    assert "abc123" not in text
    assert "sk_live_9" not in text
    assert "page=1" in text
    assert "[REDACTED]" in text


def test_print_error_writes_to_error_stream_only() -> None:
    runtime = CLIRuntime(stdin=io.StringIO(), stdout=io.StringIO(), stderr=io.StringIO())

    print_error(runtime, RuntimeError("kaput"))

    assert runtime.stderr.getvalue() == "RuntimeError: kaput\n"
    assert runtime.stdout.getvalue() == ""
    assert runtime.exit_code == 0
