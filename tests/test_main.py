"""Tests for the command line entry point."""

import pathlib
from unittest.mock import patch

import pytest

from icalgate.__main__ import EXIT_FAILURE, EXIT_USAGE, exit_status, main
from icalgate.exceptions import (
    CorpusError,
    FetchError,
    GateFailure,
    GeneratorError,
    HarnessError,
)
from icalgate.fixtures import DEFAULT_SOURCES
from icalgate.release import HarnessConfig


@pytest.mark.parametrize(
    ("err", "expected"),
    [
        (GateFailure("tests", 3, ""), 3),
        (GateFailure("format", 1, ""), 1),
        (GateFailure("lint", -9, ""), EXIT_FAILURE),
        (FetchError(DEFAULT_SOURCES[0], "404 Not Found"), EXIT_FAILURE),
        (GeneratorError("exited with status 101"), EXIT_FAILURE),
        (CorpusError("generated.ical: mismatch"), EXIT_FAILURE),
    ],
)
def test_exit_status(err: HarnessError, expected: int) -> None:
    """Test the exit status reported for each kind of failure."""
    assert exit_status(err) == expected


def test_success(tmp_path: pathlib.Path) -> None:
    """Test a passing run exits zero and passes arguments through."""
    argv = [
        "--fixture-dir",
        str(tmp_path / "fixtures"),
        "--project-dir",
        str(tmp_path),
        "--seed",
        "9",
    ]
    with patch("icalgate.__main__.run_release") as mock_run:
        assert main(argv) == 0
    mock_run.assert_called_once()
    config = mock_run.call_args.args[0]
    assert isinstance(config, HarnessConfig)
    assert config.fixture_dir == tmp_path / "fixtures"
    assert config.project_dir == tmp_path
    assert config.synthetic.seed == 9


def test_gate_failure(capsys: pytest.CaptureFixture[str]) -> None:
    """Test a failing gate sets the exit status and forwards its output."""
    failure = GateFailure("lint", 16, "icalgate/gates.py:1:0: C0114\n")
    with patch("icalgate.__main__.run_release", side_effect=failure):
        assert main([]) == 16
    assert "icalgate/gates.py:1:0: C0114" in capsys.readouterr().err


def test_generator_failure(capsys: pytest.CaptureFixture[str]) -> None:
    """Test a failing generator forwards its diagnostic."""
    failure = GeneratorError("exited with status 101", diagnostic="panicked\n")
    with patch("icalgate.__main__.run_release", side_effect=failure):
        assert main([]) == EXIT_FAILURE
    assert "panicked" in capsys.readouterr().err


def test_fetch_failure() -> None:
    """Test a fetch failure is a generic failure."""
    failure = FetchError(DEFAULT_SOURCES[1], "connection refused")
    with patch("icalgate.__main__.run_release", side_effect=failure):
        assert main([]) == EXIT_FAILURE


def test_invalid_seed() -> None:
    """Test argument errors exit before doing any work."""
    with patch("icalgate.__main__.run_release") as mock_run:
        with pytest.raises(SystemExit) as exc_info:
            main(["--seed", "not-a-number"])
    assert exc_info.value.code == EXIT_USAGE
    mock_run.assert_not_called()


@pytest.mark.parametrize(
    ("failure", "expected"),
    [
        (GateFailure("format", 1, ""), 1),
        (GeneratorError("produced no output"), EXIT_FAILURE),
        (CorpusError("generated.ical: mismatch"), EXIT_FAILURE),
    ],
)
def test_failure_without_diagnostic(
    capsys: pytest.CaptureFixture[str], failure: HarnessError, expected: int
) -> None:
    """Test failures that carry no tool output only log the error."""
    with patch("icalgate.__main__.run_release", side_effect=failure):
        assert main([]) == expected
    assert capsys.readouterr().err == ""
