"""Exceptions for the icalgate release harness."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .fixtures import FixtureSource


class HarnessError(Exception):
    """Base exception for all errors that fail a release run."""


class FetchError(HarnessError):
    """Exception raised when a declared fixture source could not be retrieved.

    The 'source' attribute is the FixtureSource that failed and 'cause' is
    a human-readable description of the underlying transport or status error.
    """

    def __init__(self, source: FixtureSource, cause: str) -> None:
        """Initialize FetchError."""
        super().__init__(f"Failed to fetch fixture '{source.name}': {cause}")
        self.source = source
        self.cause = cause


class GeneratorError(HarnessError):
    """Exception raised when the synthetic fixture generator fails."""

    def __init__(self, cause: str, *, diagnostic: str | None = None) -> None:
        """Initialize GeneratorError."""
        super().__init__(f"Synthetic fixture generator failed: {cause}")
        self.cause = cause
        self.diagnostic = diagnostic


class GateFailure(HarnessError):
    """Exception raised by the first failing verification gate.

    The 'diagnostic_output' is the text the external tool reported, passed
    through without reformatting.
    """

    def __init__(
        self, step_name: str, exit_status: int, diagnostic_output: str
    ) -> None:
        """Initialize GateFailure."""
        super().__init__(f"Gate '{step_name}' failed with exit status {exit_status}")
        self.step_name = step_name
        self.exit_status = exit_status
        self.diagnostic_output = diagnostic_output


class CorpusError(HarnessError):
    """Exception raised when a corpus document fails to parse or round trip."""


class CalendarParseError(CorpusError):
    """Exception raised when parsing an ical string.

    The 'message' attribute contains a human-readable message about the
    error that occurred. The 'detailed_error' attribute can provide additional
    information about the error, such as the offending content line.
    """

    def __init__(self, message: str, *, detailed_error: str | None = None) -> None:
        """Initialize the CalendarParseError with a message."""
        super().__init__(message)
        self.message = message
        self.detailed_error = detailed_error
