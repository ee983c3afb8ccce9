"""Library for handling rfc5545 components.

An iCalendar object consists of one or more components, that may have
properties or sub-components. An example of a component might be the
calendar itself, an event, a to-do, a journal entry, timezone info, etc.

Components created here have no semantic meaning. Names of components and
properties are case-insensitive in rfc5545, so they are normalized to lower
case when parsed and upper case when encoded.
"""

from __future__ import annotations

import re
from collections.abc import Generator
from dataclasses import dataclass, field

from icalgate.exceptions import CalendarParseError

from .const import (
    ATTR_BEGIN,
    ATTR_BEGIN_LOWER,
    ATTR_END,
    ATTR_END_LOWER,
    FOLD,
    FOLD_INDENT,
    FOLD_LEN,
    LINE_SEP,
)
from .property import ParsedProperty, parse_contentlines

FOLD_RE = re.compile(FOLD, flags=re.MULTILINE)
LINES_RE = re.compile(r"\r?\n")


@dataclass
class ParsedComponent:
    """An rfc5545 component."""

    name: str
    properties: list[ParsedProperty] = field(default_factory=list)
    components: list[ParsedComponent] = field(default_factory=list)

    def contentlines(self) -> Generator[str, None, None]:
        """Encode a component as folded rfc5545 content lines."""
        name = self.name.upper()
        yield from fold(f"{ATTR_BEGIN}:{name}")
        for prop in self.properties:
            yield from fold(prop.ics())
        for component in self.components:
            yield from component.contentlines()
        yield from fold(f"{ATTR_END}:{name}")

    def ics(self) -> str:
        """Encode a component as rfc5545 text."""
        return LINE_SEP.join(self.contentlines())


def fold(contentline: str) -> list[str]:
    """Split a content line into lines no longer than 75 octets.

    Continuation lines start with a single space which counts towards the
    length of the line. A multi-octet character is never split.
    """
    size = len(contentline.encode("utf-8"))
    if size <= FOLD_LEN:
        return [contentline]
    if size == len(contentline):
        # ASCII only, so characters and octets line up
        step = FOLD_LEN - len(FOLD_INDENT)
        rest = contentline[FOLD_LEN:]
        return [contentline[:FOLD_LEN]] + [
            FOLD_INDENT + rest[i : i + step] for i in range(0, len(rest), step)
        ]

    lines: list[str] = []
    current: list[str] = []
    length = 0
    for char in contentline:
        octets = len(char.encode("utf-8"))
        if length + octets > FOLD_LEN:
            lines.append("".join(current))
            current = [FOLD_INDENT]
            length = len(FOLD_INDENT)
        current.append(char)
        length += octets
    lines.append("".join(current))
    return lines


def parse_content(content: str) -> list[ParsedComponent]:
    """Parse content into raw components.

    This includes all necessary unfolding of long lines into full properties.

    This walks through each line and uses a stack to associate properties
    with the current component. Every property must belong to a component
    and every component must be closed by a matching END.
    """
    lines = unfolded_lines(content)
    properties = parse_contentlines(lines)

    stack: list[ParsedComponent] = [ParsedComponent(name="stream")]
    for prop in properties:
        if prop.name == ATTR_BEGIN_LOWER:
            stack.append(ParsedComponent(name=prop.value.lower()))
        elif prop.name == ATTR_END_LOWER:
            if len(stack) == 1:
                raise CalendarParseError(
                    f"Unexpected '{ATTR_END}:{prop.value}' outside of a component"
                )
            component = stack.pop()
            if prop.value.lower() != component.name:
                raise CalendarParseError(
                    f"Unexpected '{ATTR_END}:{prop.value}', "
                    f"expected {ATTR_END}:{component.name.upper()}"
                )
            stack[-1].components.append(component)
        elif len(stack) == 1:
            raise CalendarParseError(
                f"Property '{prop.name.upper()}' is outside of a component",
                detailed_error=prop.ics(),
            )
        else:
            stack[-1].properties.append(prop)

    if len(stack) > 1:
        raise CalendarParseError(
            f"Unexpected end of content, expected {ATTR_END}:{stack[-1].name.upper()}"
        )
    return stack[0].components


def encode_content(components: list[ParsedComponent]) -> str:
    """Encode a set of parsed components into content."""
    return LINE_SEP.join([component.ics() for component in components])


def unfolded_lines(content: str) -> Generator[str, None, None]:
    """Read content and unfold lines."""
    content = FOLD_RE.sub("", content)
    yield from LINES_RE.split(content)
