"""Library for running the ordered sequence of release gates.

A gate is one pass/fail verification stage, such as running the test suite
or a linter. Gates run one at a time in their declared order and the first
failing gate stops the run. The cheapest and most important signal comes
first: tests run before lint, and lint before the format check, so a
functional regression is never hidden behind a formatting complaint.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import pathlib
import sys
from collections.abc import Sequence

from .checks import Check, CheckResult, CommandCheck
from .exceptions import GateFailure

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "GateRunner",
    "GateState",
    "GateStep",
    "default_gates",
]


class GateState(str, enum.Enum):
    """The state of a gate run."""

    IDLE = "idle"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"


@dataclasses.dataclass(frozen=True)
class GateStep:
    """One verification stage of the release pipeline."""

    name: str
    check: Check
    order: int
    required: bool = True


def _sorted_steps(steps: Sequence[GateStep]) -> list[GateStep]:
    """Return the steps in execution order, rejecting ambiguous sequences."""
    names: set[str] = set()
    orders: set[int] = set()
    for step in steps:
        if step.name in names:
            raise ValueError(f"Duplicate gate name '{step.name}'")
        if step.order in orders:
            raise ValueError(f"Gate '{step.name}' reuses order {step.order}")
        names.add(step.name)
        orders.add(step.order)
    return sorted(steps, key=lambda step: step.order)


class GateRunner:
    """Runs gates in order and stops at the first required failure."""

    def __init__(self) -> None:
        """Initialize GateRunner."""
        self._state = GateState.IDLE
        self._current_step: GateStep | None = None
        self._results: dict[str, CheckResult] = {}

    @property
    def state(self) -> GateState:
        """Return the state of the most recent run."""
        return self._state

    @property
    def current_step(self) -> GateStep | None:
        """Return the step that is running, or that ended the run."""
        return self._current_step

    @property
    def results(self) -> dict[str, CheckResult]:
        """Return the results of the steps executed so far, by name."""
        return dict(self._results)

    def run(self, steps: Sequence[GateStep]) -> None:
        """Run every step in order, raising `GateFailure` on the first failure.

        A failing step that is not required is logged and the run continues.
        """
        ordered = _sorted_steps(steps)
        self._results = {}
        for step in ordered:
            self._state = GateState.RUNNING
            self._current_step = step
            _LOGGER.info("Running gate '%s'", step.name)
            result = step.check.invoke()
            self._results[step.name] = result
            if result.passed:
                _LOGGER.info("Gate '%s' passed", step.name)
                continue
            if not step.required:
                _LOGGER.warning(
                    "Optional gate '%s' failed with exit status %s",
                    step.name,
                    result.exit_status,
                )
                continue
            self._state = GateState.FAILED
            raise GateFailure(
                step.name,
                result.exit_status,
                _diagnostic_output(result),
            )
        self._state = GateState.PASSED
        _LOGGER.info("All %s gates passed", len(ordered))


def _diagnostic_output(result: CheckResult) -> str:
    """Return everything the tool reported, stdout first."""
    return "".join(part for part in (result.output, result.diagnostic) if part)


def default_gates(
    corpus_dir: pathlib.Path, project_dir: pathlib.Path | None = None
) -> list[GateStep]:
    """Return the reference gates: tests, then lint, then format check."""
    python = sys.executable
    return [
        GateStep(
            name="tests",
            check=CommandCheck(
                name="tests",
                command=[python, "-m", "pytest", "--corpus-dir", str(corpus_dir)],
                cwd=project_dir,
            ),
            order=1,
        ),
        GateStep(
            name="lint",
            check=CommandCheck(
                name="lint",
                command=[python, "-m", "pylint", "icalgate"],
                cwd=project_dir,
            ),
            order=2,
        ),
        GateStep(
            name="format",
            check=CommandCheck(
                name="format",
                command=[python, "-m", "black", "--check", "."],
                cwd=project_dir,
            ),
            order=3,
        ),
    ]
