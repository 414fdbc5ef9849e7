"""Command-line interface for seclai."""

from __future__ import annotations

import argparse
import functools
import json
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from typing import Any, Mapping, Sequence

from seclai_cli.cli.config import CLIConfig, configure_logging, load_cli_config
from seclai_cli.cli.inputs import read_file_bytes, read_json_input, read_json_object
from seclai_cli.cli.reporting import print_error
from seclai_cli.cli.runtime import CLIRuntime, default_runtime
from seclai_cli.client import API_KEY_ENV_VAR, STREAMING_CAPABILITY, SeclaiClient
from seclai_cli.errors import SeclaiConfigurationError

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class ParserExit(Exception):
    """Raised instead of ``SystemExit`` when argparse finishes early."""

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


class UnsupportedOperationError(RuntimeError):
    """Raised when the installed client lacks an optional operation."""


class _CLIParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, runtime: CLIRuntime, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._runtime = runtime

    def add_subparsers(self, **kwargs: Any):
        kwargs.setdefault("parser_class", functools.partial(_CLIParser, runtime=self._runtime))
        return super().add_subparsers(**kwargs)

    def _print_message(self, message: str, file=None) -> None:
        if not message:
            return
        if file is sys.stderr:
            self._runtime.write_err(message)
        else:
            self._runtime.write_out(message)

    def exit(self, status: int = 0, message: str | None = None):
        if message:
            self._print_message(message, sys.stderr)
        raise ParserExit(status)


def _cli_version() -> str:
    try:
        return pkg_version("seclai-cli")
    except PackageNotFoundError:
        return "0.0.0"


def _supplied(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _positive_int(value: str) -> int:
    parsed = int(value)
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return parsed


def _add_int_option(
    parser: argparse.ArgumentParser,
    flag: str,
    help_text: str,
    *,
    positive: bool = False,
) -> None:
    parser.add_argument(
        flag,
        type=_positive_int if positive else int,
        default=None,
        metavar="<n>",
        help=help_text,
    )


def _add_paging_options(parser: argparse.ArgumentParser) -> None:
    _add_int_option(parser, "--page", "Page number")
    _add_int_option(parser, "--limit", "Page size")


def _add_upload_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--file", required=True, metavar="<path>", help="Path to local file")
    parser.add_argument("--title", default=None, help="Optional title")
    parser.add_argument(
        "--metadata",
        default=None,
        metavar="<json>",
        help="Metadata as a JSON object",
    )
    parser.add_argument(
        "--file-name",
        default=None,
        metavar="<name>",
        help="Filename to send with the upload",
    )
    parser.add_argument("--mime-type", default=None, metavar="<type>", help="MIME type")


def _add_group(sub, name: str, *, help_text: str, aliases: Sequence[str] = ()):
    group = sub.add_parser(name, aliases=list(aliases), help=help_text, description=help_text)
    group.set_defaults(help_parser=group)
    return group.add_subparsers(title="commands", metavar="<command>")


def _build_client(args: argparse.Namespace, config: CLIConfig) -> SeclaiClient:
    api_key = args.api_key if args.api_key is not None else config.api_key
    if api_key is None or not api_key.strip():
        raise SeclaiConfigurationError(
            f"Missing API key. Pass --api-key or set {API_KEY_ENV_VAR}."
        )
    kwargs: dict[str, Any] = {"api_key": api_key}
    if config.api_url is not None:
        kwargs["base_url"] = config.api_url
    if config.timeout is not None:
        kwargs["timeout"] = config.timeout
    return SeclaiClient(**kwargs)


def _upload_kwargs(args: argparse.Namespace) -> dict[str, Any]:
    metadata = None
    if args.metadata is not None:
        metadata = read_json_object(args.metadata, option="--metadata")
    return _supplied(
        title=args.title,
        metadata=metadata,
        file_name=args.file_name,
        mime_type=args.mime_type,
    )


def _run_sources_list(args, *, runtime: CLIRuntime, config: CLIConfig) -> Any:
    client = _build_client(args, config)
    return client.list_sources(
        **_supplied(
            page=args.page,
            limit=args.limit,
            sort=args.sort,
            order=args.order,
            account_id=args.account_id,
        )
    )


def _run_sources_upload(args, *, runtime: CLIRuntime, config: CLIConfig) -> Any:
    options = _upload_kwargs(args)
    payload = read_file_bytes(args.file)
    client = _build_client(args, config)
    return client.upload_file_to_source(args.source_connection_id, file=payload, **options)


def _run_agents_run(args, *, runtime: CLIRuntime, config: CLIConfig) -> Any:
    body = read_json_input(runtime, json_text=args.json, json_file=args.json_file)
    client = _build_client(args, config)
    if not args.stream:
        return client.run_agent(args.agent_id, body)
    if STREAMING_CAPABILITY not in client.capabilities:
        raise UnsupportedOperationError(
            "This client does not support streaming agent runs. "
            "Upgrade seclai-cli to a version that includes run_streaming_agent_and_wait."
        )
    return client.run_streaming_agent_and_wait(
        args.agent_id,
        body,
        **_supplied(timeout_ms=args.timeout_ms),
    )


def _run_runs_list(args, *, runtime: CLIRuntime, config: CLIConfig) -> Any:
    client = _build_client(args, config)
    return client.list_agent_runs(args.agent_id, **_supplied(page=args.page, limit=args.limit))


def _run_runs_get(args, *, runtime: CLIRuntime, config: CLIConfig) -> Any:
    client = _build_client(args, config)
    return client.get_agent_run(
        args.run_id,
        **_supplied(
            agent_id=args.agent_id,
            include_step_outputs=True if args.include_step_outputs else None,
        ),
    )


def _run_runs_delete(args, *, runtime: CLIRuntime, config: CLIConfig) -> Any:
    client = _build_client(args, config)
    result = client.delete_agent_run(args.run_id, **_supplied(agent_id=args.agent_id))
    return result if result is not None else {"ok": True}


def _run_contents_get(args, *, runtime: CLIRuntime, config: CLIConfig) -> Any:
    client = _build_client(args, config)
    return client.get_content_detail(
        args.content_version_id,
        **_supplied(start=args.start, end=args.end),
    )


def _run_contents_delete(args, *, runtime: CLIRuntime, config: CLIConfig) -> Any:
    client = _build_client(args, config)
    client.delete_content(args.content_version_id)
    return {"ok": True}


def _run_contents_embeddings(args, *, runtime: CLIRuntime, config: CLIConfig) -> Any:
    client = _build_client(args, config)
    return client.list_content_embeddings(
        args.content_version_id,
        **_supplied(page=args.page, limit=args.limit),
    )


def _run_contents_upload(args, *, runtime: CLIRuntime, config: CLIConfig) -> Any:
    options = _upload_kwargs(args)
    payload = read_file_bytes(args.file)
    client = _build_client(args, config)
    return client.upload_file_to_content(args.content_version_id, file=payload, **options)


def _add_content_version_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("content_version_id", metavar="contentVersionId", help="Content version id")


def _add_run_get(sub, *, with_agent: bool) -> None:
    get = sub.add_parser("get", help="Get a specific agent run")
    if with_agent:
        get.add_argument("agent_id", metavar="agentId", help="Agent id")
    else:
        get.set_defaults(agent_id=None)
    get.add_argument("run_id", metavar="runId", help="Run id")
    get.add_argument(
        "--include-step-outputs",
        action="store_true",
        help="Include the output of every step in the run",
    )
    get.set_defaults(handler=_run_runs_get)


def _add_run_delete(sub, *, with_agent: bool) -> None:
    delete = sub.add_parser("delete", help="Cancel/delete a specific agent run")
    if with_agent:
        delete.add_argument("agent_id", metavar="agentId", help="Agent id")
    else:
        delete.set_defaults(agent_id=None)
    delete.add_argument("run_id", metavar="runId", help="Run id")
    delete.set_defaults(handler=_run_runs_delete)


def _build_parser(runtime: CLIRuntime) -> argparse.ArgumentParser:
    cli_version = _cli_version()
    parser = _CLIParser(
        prog="seclai",
        description=f"Seclai Command Line Interface (v{cli_version})",
        runtime=runtime,
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=cli_version,
        help="Output the version",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        metavar="<key>",
        help="API key (defaults to SECLAI_API_KEY)",
    )
    parser.set_defaults(handler=None, help_parser=parser)

    sub = parser.add_subparsers(title="commands", metavar="<command>")

    sources_sub = _add_group(sub, "sources", help_text="Manage sources", aliases=("source",))
    sources_list = sources_sub.add_parser("list", help="List sources")
    _add_paging_options(sources_list)
    sources_list.add_argument("--sort", default=None, metavar="<field>", help="Sort field")
    sources_list.add_argument("--order", default=None, choices=("asc", "desc"), help="Sort order")
    sources_list.add_argument(
        "--account-id",
        default=None,
        metavar="<id>",
        help="Filter by account id",
    )
    sources_list.set_defaults(handler=_run_sources_list)

    sources_upload = sources_sub.add_parser("upload", help="Upload a file to a source connection")
    sources_upload.add_argument(
        "source_connection_id",
        metavar="sourceConnectionId",
        help="Source connection id",
    )
    _add_upload_options(sources_upload)
    sources_upload.set_defaults(handler=_run_sources_upload)

    agents_sub = _add_group(
        sub,
        "agents",
        help_text="Run agents and manage runs",
        aliases=("agent",),
    )
    agents_run = agents_sub.add_parser("run", help="Run an agent")
    agents_run.add_argument("agent_id", metavar="agentId", help="Agent id")
    agents_run.add_argument(
        "--json",
        default=None,
        metavar="<json>",
        help="Request body JSON (string or '-')",
    )
    agents_run.add_argument(
        "--json-file",
        default=None,
        metavar="<path>",
        help="Request body JSON file path (or '-')",
    )
    agents_run.add_argument(
        "--stream",
        action="store_true",
        help="Use streaming SSE endpoint and wait for completion",
    )
    _add_int_option(
        agents_run,
        "--timeout-ms",
        "Client-side timeout in milliseconds",
        positive=True,
    )
    agents_run.set_defaults(handler=_run_agents_run)

    agent_runs_sub = _add_group(agents_sub, "runs", help_text="Manage agent runs")
    agent_runs_list = agent_runs_sub.add_parser("list", help="List runs for an agent")
    agent_runs_list.add_argument("agent_id", metavar="agentId", help="Agent id")
    _add_paging_options(agent_runs_list)
    agent_runs_list.set_defaults(handler=_run_runs_list)
    _add_run_get(agent_runs_sub, with_agent=True)
    _add_run_delete(agent_runs_sub, with_agent=True)

    runs_sub = _add_group(sub, "runs", help_text="Inspect agent runs by run id")
    _add_run_get(runs_sub, with_agent=False)
    _add_run_delete(runs_sub, with_agent=False)

    contents_sub = _add_group(
        sub,
        "contents",
        help_text="Inspect content and embeddings",
        aliases=("content",),
    )
    contents_get = contents_sub.add_parser("get", help="Get content detail")
    _add_content_version_argument(contents_get)
    _add_int_option(contents_get, "--start", "Start offset")
    _add_int_option(contents_get, "--end", "End offset")
    contents_get.set_defaults(handler=_run_contents_get)

    contents_delete = contents_sub.add_parser("delete", help="Delete a content version")
    _add_content_version_argument(contents_delete)
    contents_delete.set_defaults(handler=_run_contents_delete)

    contents_embeddings = contents_sub.add_parser(
        "embeddings",
        help="List embeddings for a content version",
    )
    _add_content_version_argument(contents_embeddings)
    _add_paging_options(contents_embeddings)
    contents_embeddings.set_defaults(handler=_run_contents_embeddings)

    contents_upload = contents_sub.add_parser(
        "upload",
        help="Replace a content version with a new file",
    )
    _add_content_version_argument(contents_upload)
    _add_upload_options(contents_upload)
    contents_upload.set_defaults(handler=_run_contents_upload)

    return parser


def _format_json(value: Any) -> str:
    return json.dumps(value, indent=2) + "\n"


def _execute(
    args: argparse.Namespace,
    runtime: CLIRuntime,
    environ: Mapping[str, str] | None,
) -> None:
    try:
        config = load_cli_config(environ)
        configure_logging(config, runtime.stderr)
        result = args.handler(args, runtime=runtime, config=config)
        output = _format_json(result)
    except Exception as exc:
        print_error(runtime, exc)
        runtime.set_exit_code(EXIT_FAILURE)
        return
    runtime.write_out(output)


def run_cli(
    argv: Sequence[str] | None,
    runtime: CLIRuntime,
    *,
    environ: Mapping[str, str] | None = None,
) -> int:
    parser = _build_parser(runtime)
    parser_code = EXIT_SUCCESS
    try:
        args = parser.parse_args(argv)
    except ParserExit as exc:
        parser_code = exc.status
    else:
        if args.handler is None:
            args.help_parser.print_help()
        else:
            _execute(args, runtime, environ)

    final_code = runtime.exit_code if runtime.exit_code != EXIT_SUCCESS else parser_code
    runtime.set_exit_code(final_code)
    return final_code


def main(argv: Sequence[str] | None = None) -> int:
    return run_cli(argv, default_runtime())
