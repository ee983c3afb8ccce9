"""Library for handling rfc5545 properties and parameters.

A property is the definition of an individual attribute describing a
calendar object or a calendar component. A property is also really
just a "contentline", however properties in this file are the
output of the parser and are provided in the context of where
they live on a component hierarchy.

This parser does not attempt to interpret the meaning of properties or their
value types. It only needs to be strict enough that a document which parses
once will parse again to the same structure after being encoded.

For example, given a content line of:

  DUE;VALUE=DATE:20070501

This library would create a ParsedProperty with this structure:

  ParsedProperty(
    name='due',
    value='20070501',
    params=[
        ParsedPropertyParameter(
            name='VALUE',
            values=['DATE']
        )
    ]
  }
"""

from __future__ import annotations

import re
from collections.abc import Generator, Iterable, Sequence
from dataclasses import dataclass

from icalgate.exceptions import CalendarParseError

# Characters that should be encoded in quotes
_UNSAFE_CHAR_RE = re.compile(r"[,:;]")
_RE_CONTROL_CHARS = re.compile("[\x00-\x08\x0a-\x1f\x7f]")
_RE_NAME = re.compile("[A-Z0-9-]+")
_NAME_DELIMITERS = (";", ":")
_PARAM_DELIMITERS = (",", ";", ":")
_QUOTE = '"'


def _find_first(
    line: str, chars: Sequence[str], start: int | None = None
) -> int | None:
    """Find the earliest occurrence of any of the given characters in the line."""
    earliest: int | None = None
    for char in chars:
        pos = line.find(char, start)
        if pos != -1 and (earliest is None or pos < earliest):
            earliest = pos
    return earliest


@dataclass
class ParsedPropertyParameter:
    """An rfc5545 property parameter."""

    name: str
    values: list[str]


@dataclass
class ParsedProperty:
    """An rfc5545 property."""

    name: str
    value: str
    params: list[ParsedPropertyParameter] | None = None

    def get_parameter_values(self, name: str) -> list[str]:
        """Return the list of property parameter values."""
        if not self.params:
            return []
        for param in self.params:
            if param.name.lower() == name.lower():
                return param.values
        return []

    def ics(self) -> str:
        """Encode a ParsedProperty into the serialized format."""
        result = [self.name.upper()]
        if self.params:
            result.append(";")
            result_params = []
            for parameter in self.params:
                result_param_values = []
                for value in parameter.values:
                    # Property parameters with values contain a colon, semicolon,
                    # or a comma character must be placed in quoted text
                    if _UNSAFE_CHAR_RE.search(value):
                        result_param_values.append(f'"{value}"')
                    else:
                        result_param_values.append(value)
                values = ",".join(result_param_values)
                result_params.append(f"{parameter.name.upper()}={values}")
            result.append(";".join(result_params))
        result.append(":")
        result.append(self.value)
        return "".join(result)

    @classmethod
    def from_ics(cls, contentline: str) -> ParsedProperty:
        """Decode a ParsedProperty from an rfc5545 iCalendar content line.

        Will raise a CalendarParseError on failure.
        """
        return _parse_line(contentline)


def _parse_params(line: str, pos: int) -> tuple[list[ParsedPropertyParameter], int]:
    """Parse the parameters of a line starting after the first ';'.

    Returns the parameters and the position just after the ':' that
    starts the property value.
    """
    line_len = len(line)
    params: list[ParsedPropertyParameter] = []
    while pos < line_len:
        if (param_name_end_pos := line.find("=", pos)) == -1:
            raise CalendarParseError(
                f"Invalid parameter format: missing '=' after parameter name part '{line[pos:]}'",
                detailed_error=line,
            )
        param_name = line[pos:param_name_end_pos]
        pos = param_name_end_pos + 1

        # One or more comma-separated param-values
        param_values: list[str] = []
        delimiter: str | None = None
        while delimiter is None or delimiter == ",":
            if pos >= line_len:
                raise CalendarParseError(
                    "Unexpected end of line. Expected parameter value or delimiter.",
                    detailed_error=line,
                )
            if line[pos] == _QUOTE:
                if (end_quote_pos := line.find(_QUOTE, pos + 1)) == -1:
                    raise CalendarParseError(
                        "Unexpected end of line: unclosed quoted parameter value.",
                        detailed_error=line,
                    )
                param_value = line[pos + 1 : end_quote_pos]
                pos = end_quote_pos + 1
            else:
                if (end_pos := _find_first(line, _PARAM_DELIMITERS, pos)) is None:
                    raise CalendarParseError(
                        "Unexpected end of line: missing parameter value delimiter.",
                        detailed_error=line,
                    )
                param_value = line[pos:end_pos]
                pos = end_pos
            param_values.append(param_value)

            if pos >= line_len:
                raise CalendarParseError(
                    f"Unexpected end of line after parameter value '{param_value}'",
                    detailed_error=line,
                )
            if (delimiter := line[pos]) not in _PARAM_DELIMITERS:
                raise CalendarParseError(
                    f"Expected {_PARAM_DELIMITERS} after parameter value, got '{delimiter}'",
                    detailed_error=line,
                )
            pos += 1

        params.append(
            ParsedPropertyParameter(name=param_name.upper(), values=param_values)
        )
        if delimiter == ":":
            return params, pos

    raise CalendarParseError(
        "Unexpected end of line: missing ':' before property value",
        detailed_error=line,
    )


def _parse_line(line: str) -> ParsedProperty:
    """Parse a single property line."""
    if (name_end_pos := _find_first(line, _NAME_DELIMITERS)) is None:
        raise CalendarParseError(
            f"Invalid property line, expected {_NAME_DELIMITERS} after property name",
            detailed_error=line,
        )
    property_name = line[0:name_end_pos].upper()
    pos = name_end_pos + 1

    params: list[ParsedPropertyParameter] = []
    if line[name_end_pos] == ";":
        params, pos = _parse_params(line, pos)

    if not _RE_NAME.fullmatch(property_name):
        raise CalendarParseError(
            f"Invalid property name '{property_name}'", detailed_error=line
        )
    for param in params:
        if not _RE_NAME.fullmatch(param.name):
            raise CalendarParseError(
                f"Invalid parameter name '{param.name}'", detailed_error=line
            )
        for value in param.values:
            if _QUOTE in value:
                raise CalendarParseError(
                    f"Parameter value '{value}' for parameter '{param.name}' is improperly quoted",
                    detailed_error=line,
                )
            if _RE_CONTROL_CHARS.search(value):
                raise CalendarParseError(
                    f"Invalid parameter value '{value}' for parameter '{param.name}'",
                    detailed_error=line,
                )

    property_value = line[pos:]
    if _RE_CONTROL_CHARS.search(property_value):
        raise CalendarParseError(
            "Property value contains control characters",
            detailed_error=line,
        )

    return ParsedProperty(
        name=property_name.lower(),
        value=property_value,
        params=params if params else None,
    )


def parse_contentlines(
    contentlines: Iterable[str],
) -> Generator[ParsedProperty, None, None]:
    """Parse a contentlines into ParsedProperty objects."""
    for contentline in contentlines:
        if not contentline:
            continue
        try:
            yield ParsedProperty.from_ics(contentline)
        except CalendarParseError as err:
            raise CalendarParseError(
                "Failed to parse calendar contents", detailed_error=str(err)
            ) from err
