#!/usr/bin/env python3
"""Render the --help output of every seclai command into one HTML page."""

from __future__ import annotations

import argparse
import html
import io
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from seclai_cli.cli.main import _cli_version, run_cli  # noqa: E402
from seclai_cli.cli.runtime import CLIRuntime  # noqa: E402

SECTIONS = [
    ("Overview", []),
    ("sources", ["sources"]),
    ("sources list", ["sources", "list"]),
    ("sources upload", ["sources", "upload"]),
    ("agents", ["agents"]),
    ("agents run", ["agents", "run"]),
    ("agents runs", ["agents", "runs"]),
    ("agents runs list", ["agents", "runs", "list"]),
    ("agents runs get", ["agents", "runs", "get"]),
    ("agents runs delete", ["agents", "runs", "delete"]),
    ("runs", ["runs"]),
    ("runs get", ["runs", "get"]),
    ("runs delete", ["runs", "delete"]),
    ("contents", ["contents"]),
    ("contents get", ["contents", "get"]),
    ("contents delete", ["contents", "delete"]),
    ("contents embeddings", ["contents", "embeddings"]),
    ("contents upload", ["contents", "upload"]),
]


def render_help(path: list[str]) -> str:
    out = io.StringIO()
    runtime = CLIRuntime(stdin=io.StringIO(), stdout=out, stderr=io.StringIO())
    rc = run_cli([*path, "--help"], runtime)
    if rc != 0:
        raise RuntimeError(f"help for {' '.join(path) or 'seclai'} exited with {rc}")
    return out.getvalue()


def render_page(version: str) -> str:
    sections = []
    for title, path in SECTIONS:
        sections.append(
            f"<section>\n<h2>{html.escape(title)}</h2>\n"
            f"<pre><code>{html.escape(render_help(path))}</code></pre>\n</section>"
        )
    body = "\n".join(sections)
    return (
        "<!doctype html>\n<html lang=\"en\">\n<head>\n<meta charset=\"utf-8\">\n"
        f"<title>Seclai CLI {html.escape(version)}</title>\n</head>\n<body>\n"
        f"<h1>Seclai CLI {html.escape(version)}</h1>\n{body}\n</body>\n</html>\n"
    )


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--out-dir", default=str(ROOT / "build" / "docs"))
    args = parser.parse_args()

    version = os.getenv("VERSION") or _cli_version()
    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    index_path = out_dir / "index.html"
    index_path.write_text(render_page(version), encoding="utf-8")
    print(f"wrote {index_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
