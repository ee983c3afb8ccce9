"""Tests for the synthetic fixture generator."""

from collections.abc import Callable
import dataclasses
import pathlib
import sys
from typing import Any

import pydantic
import pytest

from icalgate.checks import CheckResult
from icalgate.corpus import check_file
from icalgate.exceptions import GeneratorError
from icalgate.synthetic import (
    GENERATED_FILENAME,
    SyntheticFixture,
    SyntheticFixtureGenerator,
)


@dataclasses.dataclass
class SequenceCheck:
    """A check that writes a different document on each invocation."""

    name: str = "generator"
    count: int = 0

    def invoke(self) -> CheckResult:
        self.count += 1
        content = f"BEGIN:VCALENDAR\r\nX-RUN:{self.count}\r\nEND:VCALENDAR\r\n"
        return CheckResult(exit_status=0, stdout=content.encode())


def test_default_fixture() -> None:
    """Test the default generator invocation is unseeded."""
    fixture = SyntheticFixture()
    assert fixture.local_path == GENERATED_FILENAME
    assert fixture.invocation() == [sys.executable, "-m", "icalgate.random_calendar"]


def test_seeded_invocation() -> None:
    """Test a seed is passed to the generator."""
    fixture = SyntheticFixture(command=["gen"], seed=42)
    assert fixture.invocation() == ["gen", "--seed", "42"]


def test_empty_command() -> None:
    """Test the generator command is required."""
    with pytest.raises(pydantic.ValidationError):
        SyntheticFixture(command=[])


def test_always_refreshed(fixture_dir: pathlib.Path) -> None:
    """Test the fixture always holds the most recent output."""
    generator = SyntheticFixtureGenerator(fixture_dir, check=SequenceCheck())

    path = generator.generate()
    assert path == fixture_dir / GENERATED_FILENAME
    assert b"X-RUN:1" in path.read_bytes()

    generator.generate()
    assert b"X-RUN:2" in path.read_bytes()
    assert b"X-RUN:1" not in path.read_bytes()


def test_output_path(tmp_path: pathlib.Path) -> None:
    """Test writing to an explicit path."""
    generator = SyntheticFixtureGenerator(tmp_path, check=SequenceCheck())
    target = tmp_path / "other" / "fuzz.ics"
    assert generator.generate(target) == target
    assert target.read_bytes().startswith(b"BEGIN:VCALENDAR\r\n")


def test_generator_fails(
    fixture_dir: pathlib.Path, make_check: Callable[..., Any]
) -> None:
    """Test a failing generator is reported with its diagnostic."""
    check = make_check("generator", exit_status=2, stderr=b"panicked")
    generator = SyntheticFixtureGenerator(fixture_dir, check=check)
    with pytest.raises(GeneratorError, match="status 2") as exc_info:
        generator.generate()
    assert exc_info.value.diagnostic == "panicked"
    assert not generator.path.exists()


def test_generator_without_output(
    fixture_dir: pathlib.Path, make_check: Callable[..., Any]
) -> None:
    """Test a generator that writes nothing is a failure."""
    generator = SyntheticFixtureGenerator(fixture_dir, check=make_check("generator"))
    with pytest.raises(GeneratorError, match="no output"):
        generator.generate()


def test_generator_not_found(fixture_dir: pathlib.Path) -> None:
    """Test a generator that can not be started."""
    fixture = SyntheticFixture(command=[str(fixture_dir / "missing-generator")])
    with pytest.raises(GeneratorError, match="status 127"):
        SyntheticFixtureGenerator(fixture_dir, fixture).generate()


def test_command_receives_seed(fixture_dir: pathlib.Path) -> None:
    """Test the seed reaches the external program."""
    script = "import sys; sys.stdout.write(' '.join(sys.argv[1:]))"
    fixture = SyntheticFixture(command=[sys.executable, "-c", script], seed=7)
    path = SyntheticFixtureGenerator(fixture_dir, fixture).generate()
    assert path.read_text() == "--seed 7"


def test_random_calendar_program(fixture_dir: pathlib.Path) -> None:
    """Test the bundled program is reproducible and produces a valid corpus file."""
    generator = SyntheticFixtureGenerator(fixture_dir, SyntheticFixture(seed=3))
    path = generator.generate()
    first = path.read_bytes()
    assert check_file(path)

    generator.generate()
    assert path.read_bytes() == first
