"""Checks that corpus documents parse without crashing or losing data.

A document passes when it parses, and encoding the result then parsing it
again produces exactly the same components. The second parse catches any
content the parser accepted but could not represent.
"""

from __future__ import annotations

import logging
import pathlib

from .diagnostics import COMPONENT_ALLOWLIST, first_difference, redact_contentline
from .exceptions import CalendarParseError, CorpusError
from .parsing.component import ParsedComponent, encode_content, parse_content

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "CORPUS_SUFFIXES",
    "check_document",
    "check_file",
    "corpus_files",
]

CORPUS_SUFFIXES = (".ics", ".ical")


def check_document(content: str) -> list[ParsedComponent]:
    """Parse a document and verify that it survives an encode/parse round trip.

    Returns the parsed components. Raises CorpusError on failure.
    """
    components = parse_content(content)
    if not components:
        raise CorpusError("Document does not contain any components")

    encoded = encode_content(components)
    try:
        reparsed = parse_content(encoded)
    except CalendarParseError as err:
        raise CorpusError(
            f"Encoded document could not be parsed again: {err.detailed_error or err}"
        ) from err

    if reparsed != components:
        diff = first_difference(encoded, encode_content(reparsed))
        if diff is None:
            raise CorpusError("Document changed when parsed a second time")
        lineno, expected, actual = diff
        raise CorpusError(
            f"Document changed when parsed a second time at line {lineno}: "
            f"expected '{expected}' got '{actual}'"
        )
    return components


def check_file(path: pathlib.Path) -> list[ParsedComponent]:
    """Check a single corpus file."""
    _LOGGER.debug("Checking corpus file %s", path)
    # Some providers prefix their feeds with a byte order mark
    try:
        content = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as err:
        raise CorpusError(
            f"{path.name}: not valid utf-8 at byte {err.start}: {err.reason}"
        ) from err
    try:
        return check_document(content)
    except CalendarParseError as err:
        detail = redact_contentline(err.detailed_error or "", COMPONENT_ALLOWLIST)
        raise CorpusError(
            f"Failed to parse {path.name}: {err.message} ({detail})"
        ) from err
    except CorpusError as err:
        raise CorpusError(f"{path.name}: {err}") from err


def corpus_files(directory: pathlib.Path) -> list[pathlib.Path]:
    """Return the calendar documents in the corpus directory, sorted by path.

    Sub-directories are searched too, since fixtures may be cached under a
    nested path.
    """
    if not directory.is_dir():
        return []
    return sorted(
        path
        for path in directory.rglob("*")
        if path.is_file() and path.suffix.lower() in CORPUS_SUFFIXES
    )
