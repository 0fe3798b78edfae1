"""
core/common.py
────────────────────────────────────────────────────────────────────────
Small building blocks shared by every calculator:

* `Undefined`      – explicit "could not compute" result (never zero)
* `round2()`       – fixed-point rounding to two fraction digits
* `safe_ratio()`   – division that yields `Undefined` on a 0/absent denominator
* `group_by()`     – subject → date-ordered list of records
* `Observation`    – one dated numeric value, the unit of every series
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Callable, Hashable, Iterable, TypeVar, Union

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

_CENT = Decimal("0.01")


class UndefinedReason(str, Enum):
    division_by_zero = "division_by_zero"
    missing_value = "missing_value"
    missing_baseline = "missing_baseline"
    unknown_goal_type = "unknown_goal_type"


@dataclass(frozen=True)
class Undefined:
    """Result of a computation whose inputs do not allow a number."""

    reason: UndefinedReason = UndefinedReason.missing_value

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Undefined({self.reason.value})"


DIVISION_BY_ZERO = Undefined(UndefinedReason.division_by_zero)
MISSING_VALUE = Undefined(UndefinedReason.missing_value)
MISSING_BASELINE = Undefined(UndefinedReason.missing_baseline)
UNKNOWN_GOAL_TYPE = Undefined(UndefinedReason.unknown_goal_type)

# a number, or the reason it could not be computed
Metric = Union[Decimal, Undefined]


def is_undefined(value: object) -> bool:
    return isinstance(value, Undefined)


def to_decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # go through str() so 77.8 stays 77.8 and not 77.799999…
        return Decimal(str(value))
    return Decimal(value)  # type: ignore[arg-type]


def round2(value: object) -> Decimal:
    """Round half away from zero to 2 decimals, as SQL ROUND() on DECIMAL does."""
    return to_decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def safe_ratio(numerator: object, denominator: object) -> Metric:
    """`numerator / denominator`, or `Undefined` when either side is absent or
    the denominator is zero (SQL `x / NULLIF(y, 0)`)."""
    if numerator is None or denominator is None:
        return MISSING_VALUE
    den = to_decimal(denominator)
    if den == 0:
        return DIVISION_BY_ZERO
    return to_decimal(numerator) / den


def percent(numerator: object, denominator: object) -> Metric:
    ratio = safe_ratio(numerator, denominator)
    if is_undefined(ratio):
        return ratio
    return round2(ratio * 100)


@dataclass(frozen=True)
class Observation:
    """One dated value of a series; `record_id` breaks same-date ties."""

    on: date
    value: Decimal | None
    record_id: int = 0

    @property
    def order_key(self) -> tuple[date, int]:
        return self.on, self.record_id


def group_by(
    records: Iterable[T],
    key: Callable[[T], K],
    order: Callable[[T], object] | None = None,
) -> dict[K, list[T]]:
    """Bucket `records` per `key`; each bucket sorted by `order` when given."""
    buckets: dict[K, list[T]] = defaultdict(list)
    for rec in records:
        buckets[key(rec)].append(rec)
    if order is not None:
        for items in buckets.values():
            items.sort(key=order)  # type: ignore[arg-type]
    return dict(buckets)
