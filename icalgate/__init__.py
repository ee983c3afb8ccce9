"""A release gate for an rfc5545 iCalendar parsing library.

A release run populates a cache of real-world calendar documents, writes
one freshly generated random document next to them, and then runs the test
suite, lint and format check in that order, stopping at the first failure.
"""

__all__ = [
    "checks",
    "corpus",
    "diagnostics",
    "exceptions",
    "fixtures",
    "gates",
    "parsing",
    "random_calendar",
    "release",
    "synthetic",
]
