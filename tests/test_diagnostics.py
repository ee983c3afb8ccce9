"""Tests for diagnostics."""

import textwrap

from icalgate.diagnostics import first_difference, redact_ics

ICS = textwrap.dedent(
    """\
    BEGIN:VCALENDAR
    PRODID:-//example//1.2.3
    BEGIN:VEVENT
    DTSTART;TZID=Europe/Berlin:20230101T100000
    SUMMARY:Private appointment
    ATTENDEE;CN=Someone:mailto:someone@example.com
    END:VEVENT
    END:VCALENDAR
    """
)


def test_empty() -> None:
    """Test redaction of an empty ics file."""
    assert list(redact_ics("")) == []
    assert list(redact_ics("\n")) == []


def test_redact_ics() -> None:
    """Test that only structural content lines are kept."""
    assert list(redact_ics(ICS)) == [
        "BEGIN:VCALENDAR",
        "PRODID:-//example//1.2.3",
        "BEGIN:VEVENT",
        "DTSTART;TZID=Europe/Berlin:20230101T100000",
        "SUMMARY:***",
        "ATTENDEE:***",
        "END:VEVENT",
        "END:VCALENDAR",
    ]


def test_redact_max_contentlines() -> None:
    """Test that output is truncated."""
    assert list(redact_ics(ICS, max_contentlines=2)) == [
        "BEGIN:VCALENDAR",
        "PRODID:-//example//1.2.3",
    ]


def test_redact_line_without_delimiter() -> None:
    """Test that a line that is not a content line is fully redacted."""
    assert list(redact_ics("garbage\r\n")) == ["***"]


def test_first_difference() -> None:
    """Test the first differing line is reported redacted."""
    assert first_difference(ICS, ICS) is None
    changed = ICS.replace("Private appointment", "Other")
    assert first_difference(ICS, changed) == (5, "SUMMARY:***", "SUMMARY:***")
    truncated = "\n".join(ICS.splitlines()[:-1])
    assert first_difference(ICS, truncated) == (8, "END:VCALENDAR", "")
