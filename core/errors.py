"""
core/errors.py
────────────────────────────────────────────────────────────────────────
Typed failures raised by the calculators.

Only *structural* problems raise (a date in the wrong order, a height that
cannot be divided by).  A ratio that cannot be computed is not an error:
it comes back as `core.common.Undefined`.
"""

from __future__ import annotations


class MetricsError(Exception):
    """Base class for every failure raised inside `core`."""


class InvalidDate(MetricsError):
    """A reference date precedes the date it is compared against."""


class MalformedRecord(MetricsError):
    """A record carries a value no metric can be derived from."""


class DivisionByZero(MalformedRecord, ZeroDivisionError):
    """A mandatory denominator (e.g. height) is zero or negative."""
