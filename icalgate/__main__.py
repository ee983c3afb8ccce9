"""Command line entry point for the release gate.

Exits with status 0 only when the fixtures were populated and every gate
passed. When a gate fails the harness exits with that gate's exit status.
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from .exceptions import GateFailure, GeneratorError, HarnessError
from .release import DEFAULT_FIXTURE_DIR, HarnessConfig, run_release
from .synthetic import SyntheticFixture

_LOGGER = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_USAGE = 2


def create_parser() -> argparse.ArgumentParser:
    """Create the command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="icalgate",
        description=(
            "Populate the calendar fixture corpus, generate a synthetic "
            "fixture and run the release gates."
        ),
    )
    parser.add_argument(
        "--fixture-dir",
        type=pathlib.Path,
        default=DEFAULT_FIXTURE_DIR,
        help="Directory of cached and generated fixtures (default: %(default)s)",
    )
    parser.add_argument(
        "--project-dir",
        type=pathlib.Path,
        default=pathlib.Path("."),
        help="Directory the gate commands run in (default: %(default)s)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the synthetic fixture generator",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def exit_status(err: HarnessError) -> int:
    """Return the process exit status to report for a failed run."""
    if isinstance(err, GateFailure) and err.exit_status > 0:
        return err.exit_status
    return EXIT_FAILURE


def main(argv: Sequence[str] | None = None) -> int:
    """Run the release gate and return the process exit status."""
    args = create_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = HarnessConfig(
            fixture_dir=args.fixture_dir,
            project_dir=args.project_dir,
            synthetic=SyntheticFixture(seed=args.seed),
        )
    except ValidationError as err:
        _LOGGER.error("Invalid configuration: %s", err)
        return EXIT_USAGE

    try:
        run_release(config)
    except GateFailure as err:
        _LOGGER.error("%s", err)
        sys.stderr.write(err.diagnostic_output)
        return exit_status(err)
    except GeneratorError as err:
        _LOGGER.error("%s", err)
        sys.stderr.write(err.diagnostic or "")
        return exit_status(err)
    except HarnessError as err:
        _LOGGER.error("%s", err)
        return exit_status(err)
    return 0


if __name__ == "__main__":
    sys.exit(main())
