"""Process I/O bundle for the seclai CLI."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TextIO


@dataclass
class CLIRuntime:
    """Standard streams and exit code for one invocation.

    Command handlers only talk to the process through this object, so tests
    can pass ``io.StringIO`` streams instead of the real ones.
    """

    stdin: TextIO
    stdout: TextIO
    stderr: TextIO
    exit_code: int = 0

    def read_stdin(self) -> str:
        return self.stdin.read()

    def write_out(self, text: str) -> None:
        self.stdout.write(text)

    def write_err(self, text: str) -> None:
        self.stderr.write(text)

    def set_exit_code(self, code: int) -> None:
        self.exit_code = code


def default_runtime() -> CLIRuntime:
    return CLIRuntime(stdin=sys.stdin, stdout=sys.stdout, stderr=sys.stderr)
