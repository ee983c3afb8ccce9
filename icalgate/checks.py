"""Invokable checks wrapping opaque external programs.

Every external tool the harness depends on (the test suite, the linter, the
format checker and the synthetic fixture generator) is driven through the
same small interface: invoke it, then read its exit status and output.
Gates and the generator treat a check as data and never know what
program sits behind it.
"""

from __future__ import annotations

import dataclasses
import logging
import pathlib
import subprocess
from collections.abc import Sequence
from typing import Protocol

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "Check",
    "CheckResult",
    "CommandCheck",
    "LAUNCH_FAILURE_STATUS",
]

# Exit status reported when a command could not be started at all, matching
# the shell convention for "command not found".
LAUNCH_FAILURE_STATUS = 127


@dataclasses.dataclass(frozen=True)
class CheckResult:
    """The outcome of invoking a check.

    Output streams are kept as raw bytes so that a document written to
    standard output can be stored verbatim, line endings included.
    """

    exit_status: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def passed(self) -> bool:
        """Return True if the check reported success."""
        return self.exit_status == 0

    @property
    def output(self) -> str:
        """Standard output decoded for display."""
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def diagnostic(self) -> str:
        """Standard error decoded for display."""
        return self.stderr.decode("utf-8", errors="replace")


class Check(Protocol):
    """A capability that can be invoked to produce a pass/fail result."""

    name: str

    def invoke(self) -> CheckResult:
        """Run the check to completion and return its result."""


@dataclasses.dataclass
class CommandCheck:
    """A check that runs an external command and waits for it to exit.

    The full standard output and standard error are captured. No timeout
    is applied, a command that hangs will hang the caller.
    """

    name: str
    command: Sequence[str]
    cwd: pathlib.Path | None = None

    def invoke(self) -> CheckResult:
        """Run the command and return its exit status and output."""
        _LOGGER.debug("Running %s: %s", self.name, " ".join(self.command))
        try:
            proc = subprocess.run(
                list(self.command),
                cwd=self.cwd,
                capture_output=True,
                check=False,
            )
        except OSError as err:
            _LOGGER.debug("Unable to start %s: %s", self.name, err)
            return CheckResult(
                exit_status=LAUNCH_FAILURE_STATUS,
                stderr=f"Unable to run {self.command[0]}: {err}".encode(),
            )
        _LOGGER.debug("%s exited with status %s", self.name, proc.returncode)
        return CheckResult(
            exit_status=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
        )
