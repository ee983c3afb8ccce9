"""Program that writes one random rfc5545 calendar document to stdout.

The document is structurally valid (every component is closed, names use
the allowed characters, parameter values are quoted when needed) but has
random component and property names, random parameters and long values so
that it exercises unfolding, folding and parameter handling.

Usage:
```
python -m icalgate.random_calendar [--seed N] > generated.ical
```

The same seed always produces the same document.
"""

from __future__ import annotations

import argparse
import dataclasses
import random
import string
import sys
from collections.abc import Sequence

from .parsing.component import ParsedComponent
from .parsing.const import ATTR_BEGIN, ATTR_END, LINE_SEP
from .parsing.property import ParsedProperty, ParsedPropertyParameter

__all__ = [
    "ComponentDistribution",
    "generate_calendar",
    "main",
]

NAME_ALPHABET = string.ascii_letters + string.digits + "-"
VALUE_ALPHABET = string.ascii_letters + string.digits
RESERVED_NAMES = {ATTR_BEGIN, ATTR_END}
CALENDAR = "vcalendar"


@dataclasses.dataclass
class TextDistribution:
    """Random strings drawn from an alphabet."""

    alphabet: str
    length: range = range(1, 200)

    def sample(self, rng: random.Random) -> str:
        return "".join(rng.choices(self.alphabet, k=rng.choice(self.length)))


def _names() -> TextDistribution:
    return TextDistribution(NAME_ALPHABET)


def _values() -> TextDistribution:
    return TextDistribution(VALUE_ALPHABET)


@dataclasses.dataclass
class ParameterDistribution:
    """Random property parameters with one or more values."""

    name: TextDistribution = dataclasses.field(default_factory=_names)
    value_count: range = range(1, 10)
    value: TextDistribution = dataclasses.field(default_factory=_values)

    def sample(self, rng: random.Random) -> ParsedPropertyParameter:
        return ParsedPropertyParameter(
            name=self.name.sample(rng).upper(),
            values=[
                self.value.sample(rng) for _ in range(rng.choice(self.value_count))
            ],
        )


@dataclasses.dataclass
class PropertyDistribution:
    """Random properties, never named like a component delimiter."""

    name: TextDistribution = dataclasses.field(default_factory=_names)
    value: TextDistribution = dataclasses.field(default_factory=_values)
    param_count: range = range(0, 10)
    param: ParameterDistribution = dataclasses.field(
        default_factory=ParameterDistribution
    )

    def sample(self, rng: random.Random) -> ParsedProperty:
        while (name := self.name.sample(rng)).upper() in RESERVED_NAMES:
            pass
        params = [self.param.sample(rng) for _ in range(rng.choice(self.param_count))]
        return ParsedProperty(
            name=name.lower(),
            value=self.value.sample(rng),
            params=params or None,
        )


@dataclasses.dataclass
class ComponentDistribution:
    """Random components with random properties and sub-components."""

    name: TextDistribution = dataclasses.field(default_factory=_names)
    property_count: range = range(0, 10)
    prop: PropertyDistribution = dataclasses.field(default_factory=PropertyDistribution)
    component_count: range = range(0, 1)
    component: ComponentDistribution | None = None

    def sample(self, rng: random.Random) -> ParsedComponent:
        properties = [
            self.prop.sample(rng) for _ in range(rng.choice(self.property_count))
        ]
        components = []
        if self.component is not None:
            components = [
                self.component.sample(rng)
                for _ in range(rng.choice(self.component_count))
            ]
        return ParsedComponent(
            name=self.name.sample(rng).lower(),
            properties=properties,
            components=components,
        )


def default_distribution() -> ComponentDistribution:
    """Return the distribution of a calendar with two levels of sub-components."""
    return ComponentDistribution(
        component_count=range(0, 100),
        component=ComponentDistribution(
            component_count=range(0, 10),
            component=ComponentDistribution(),
        ),
    )


def generate_calendar(
    rng: random.Random, distribution: ComponentDistribution | None = None
) -> ParsedComponent:
    """Return a random calendar component."""
    calendar = (distribution or default_distribution()).sample(rng)
    calendar.name = CALENDAR
    return calendar


def main(argv: Sequence[str] | None = None) -> int:
    """Write a random calendar to stdout."""
    parser = argparse.ArgumentParser(
        prog="python -m icalgate.random_calendar",
        description="Write a random iCalendar document to stdout.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random number generator, for a reproducible document",
    )
    args = parser.parse_args(argv)

    calendar = generate_calendar(random.Random(args.seed))
    sys.stdout.buffer.write((calendar.ics() + LINE_SEP).encode("utf-8"))
    sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
