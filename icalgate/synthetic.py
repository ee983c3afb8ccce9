"""Library for producing the synthetic fixture written fresh on every run.

The synthetic fixture is a lightweight fuzz input: an external generator is
invoked once per run and whatever it writes to standard output becomes the
fixture, replacing the previous run's document. It is never treated as
cached.
"""

from __future__ import annotations

import logging
import pathlib
import sys

from pydantic import BaseModel, Field, field_validator

from .checks import Check, CommandCheck
from .exceptions import GeneratorError

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "GENERATED_FILENAME",
    "SyntheticFixture",
    "SyntheticFixtureGenerator",
]

GENERATED_FILENAME = "generated.ical"
SEED_ARG = "--seed"


def _default_command() -> list[str]:
    return [sys.executable, "-m", "icalgate.random_calendar"]


class SyntheticFixture(BaseModel):
    """The generated-per-run calendar document."""

    local_path: str = GENERATED_FILENAME
    """Path of the document relative to the fixture directory."""

    command: list[str] = Field(default_factory=_default_command)
    """The generator invocation; it must write one document to stdout."""

    seed: int | None = None
    """When set, passed to the generator as `--seed` for a reproducible run."""

    @field_validator("command")
    @classmethod
    def _validate_command(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("Generator command must not be empty")
        return value

    def invocation(self) -> list[str]:
        """Return the full generator command line."""
        if self.seed is None:
            return list(self.command)
        return [*self.command, SEED_ARG, str(self.seed)]


class SyntheticFixtureGenerator:
    """Writes the output of the generator into the fixture directory."""

    def __init__(
        self,
        root: pathlib.Path,
        fixture: SyntheticFixture | None = None,
        check: Check | None = None,
    ) -> None:
        """Initialize SyntheticFixtureGenerator.

        The `check` overrides the command built from the fixture, which is
        mostly useful for tests.
        """
        self._root = root
        self._fixture = fixture or SyntheticFixture()
        self._check = check or CommandCheck(
            name="generator", command=self._fixture.invocation()
        )

    @property
    def path(self) -> pathlib.Path:
        """Return the location the fixture is written to."""
        return self._root / self._fixture.local_path

    def generate(self, output_path: pathlib.Path | None = None) -> pathlib.Path:
        """Invoke the generator and overwrite the fixture with its output.

        Raises a `GeneratorError` if the generator fails or writes nothing.
        """
        target = output_path or self.path
        if self._fixture.seed is not None:
            _LOGGER.info(
                "Generating synthetic fixture with seed %s", self._fixture.seed
            )
        else:
            _LOGGER.info("Generating synthetic fixture")

        result = self._check.invoke()
        if not result.passed:
            raise GeneratorError(
                f"exited with status {result.exit_status}",
                diagnostic=result.diagnostic,
            )
        if not result.stdout:
            raise GeneratorError("produced no output", diagnostic=result.diagnostic)

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(result.stdout)
        _LOGGER.debug("Wrote %s bytes to %s", len(result.stdout), target)
        return target
