"""Library for reporting on corpus documents without leaking their contents.

Real-world fixtures are captured from external providers and are kept in a
private directory, so any content that ends up in a failure report is
redacted down to the structural content lines.
"""

from __future__ import annotations

from collections.abc import Generator
import itertools

__all__ = [
    "redact_ics",
    "first_difference",
]


COMPONENT_ALLOWLIST = {
    "BEGIN",
    "END",
    "DTSTAMP",
    "CREATED",
    "LAST-MODIFIED",
    "DTSTART",
    "DTEND",
    "RRULE",
    "PRODID",
    "VERSION",
}
REDACT = "***"
MAX_CONTENTLINES = 5000


def component_sep(contentline: str) -> int:
    """Return the property name end index in the string, or -1."""
    colon = contentline.find(":")
    semi = contentline.find(";")
    if colon > -1 and semi > -1:
        return min(colon, semi)
    if colon > -1:
        return colon
    return semi


def redact_contentline(contentline: str, component_allowlist: set[str]) -> str:
    """Return a redacted version of an ics content line."""
    if (i := component_sep(contentline)) > -1:
        component = contentline[0:i]
        if component.upper() in component_allowlist:
            return contentline
        return f"{component}:{REDACT}"
    return REDACT


def redact_ics(
    ics: str,
    max_contentlines: int = MAX_CONTENTLINES,
    component_allowlist: set[str] | None = None,
) -> Generator[str, None, None]:
    """Generate redacted ics file contents one line at a time."""
    contentlines = ics.splitlines()
    for contentline in itertools.islice(contentlines, max_contentlines):
        if contentline:
            yield redact_contentline(
                contentline, component_allowlist or COMPONENT_ALLOWLIST
            )


def first_difference(expected: str, actual: str) -> tuple[int, str, str] | None:
    """Return the first differing line of two documents, redacted.

    The result is the 1-based line number and the redacted expected and
    actual lines, or None when the documents have the same lines.
    """
    expected_lines = expected.splitlines()
    actual_lines = actual.splitlines()
    pairs = itertools.zip_longest(expected_lines, actual_lines, fillvalue="")
    for lineno, (left, right) in enumerate(pairs, start=1):
        if left != right:
            return (
                lineno,
                redact_contentline(left, COMPONENT_ALLOWLIST) if left else "",
                redact_contentline(right, COMPONENT_ALLOWLIST) if right else "",
            )
    return None
