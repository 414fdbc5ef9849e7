#!/usr/bin/env python3
"""Parse every ``seclai`` example in the docs against the real command tree."""

from __future__ import annotations

import argparse
import io
import re
import shlex
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from seclai_cli.cli.main import ParserExit, _build_parser  # noqa: E402
from seclai_cli.cli.runtime import CLIRuntime  # noqa: E402

_BASH_BLOCK = re.compile(r"```bash\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def _snippets(text: str) -> list[str]:
    return [
        line.strip()
        for block in _BASH_BLOCK.findall(text)
        for line in block.splitlines()
        if line.strip().startswith("seclai ")
    ]


def _is_template(argv: list[str]) -> bool:
    return any(token.startswith("<") and token.endswith(">") for token in argv)


def _check_file(path: Path, cli_parser: argparse.ArgumentParser) -> tuple[int, list[str]]:
    if not path.exists():
        return 0, [f"{path}: not found"]

    snippets = _snippets(path.read_text(encoding="utf-8"))
    problems: list[str] = []
    for snippet in snippets:
        argv = shlex.split(snippet)[1:]
        if _is_template(argv):
            continue
        try:
            cli_parser.parse_args(argv)
        except ParserExit as exc:
            if exc.status != 0:
                problems.append(f"{path.name}: invalid command snippet: {snippet}")
    return len(snippets), problems


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--paths",
        nargs="+",
        type=Path,
        default=[Path("README.md")],
        help="Markdown files to validate (relative to the repo root)",
    )
    args = parser.parse_args()

    runtime = CLIRuntime(stdin=io.StringIO(), stdout=io.StringIO(), stderr=io.StringIO())
    cli_parser = _build_parser(runtime)
    checked = 0
    errors: list[str] = []
    for path in args.paths:
        count, problems = _check_file(ROOT / path, cli_parser)
        checked += count
        errors.extend(problems)

    if errors:
        print("doc command validation failed:")
        for item in errors:
            print(f"- {item}")
        return 1

    print(f"doc command validation passed ({checked} command snippets)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
