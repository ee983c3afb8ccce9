"""Test fixtures."""

from __future__ import annotations

from collections.abc import Callable
import dataclasses
import json
import pathlib
from typing import Any

from pydantic_core import to_jsonable_python
import pytest

from icalgate.checks import CheckResult

DEFAULT_CORPUS_DIR = "private-test-icals"


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add the option selecting the fixture corpus under test."""
    parser.addoption(
        "--corpus-dir",
        action="store",
        default=DEFAULT_CORPUS_DIR,
        help="Directory of calendar fixtures checked by test_private_corpus.py",
    )


def _omit_empty(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _omit_empty(v) for (k, v) in value.items() if v}
    if isinstance(value, list):
        return [_omit_empty(v) for v in value]
    return value


class DataclassEncoder(json.JSONEncoder):
    """Class that can dump data classes as dict for comparison to expected values."""

    def default(self, o: Any) -> Any:
        if dataclasses.is_dataclass(o) and not isinstance(o, type):
            return _omit_empty(dataclasses.asdict(o))
        return to_jsonable_python(o)


@pytest.fixture
def json_encoder() -> json.JSONEncoder:
    """Fixture that creates a json encoder."""
    return DataclassEncoder()


@pytest.fixture
def fixture_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Fixture for a cache directory that does not exist yet."""
    return tmp_path / "private-test-icals"


@dataclasses.dataclass
class FakeCheck:
    """A check that returns a canned result and records each invocation."""

    name: str
    result: CheckResult
    calls: list[str]

    def invoke(self) -> CheckResult:
        self.calls.append(self.name)
        return self.result


@pytest.fixture
def invocations() -> list[str]:
    """Fixture recording the names of checks in the order they were invoked."""
    return []


@pytest.fixture
def make_check(invocations: list[str]) -> Callable[..., FakeCheck]:
    """Fixture that creates fake checks sharing one invocation log."""

    def _make(
        name: str, exit_status: int = 0, stdout: bytes = b"", stderr: bytes = b""
    ) -> FakeCheck:
        return FakeCheck(
            name=name,
            result=CheckResult(exit_status=exit_status, stdout=stdout, stderr=stderr),
            calls=invocations,
        )

    return _make
