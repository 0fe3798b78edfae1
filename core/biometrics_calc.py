"""
core/biometrics_calc.py
────────────────────────────────────────────────────────────────────────
Derived metrics over users and their dated biometric records:

1. age (whole years) and BMI
2. first / latest record per user
3. lag-by-one trend of any numeric series
4. resting heart-rate drop between the first and the latest record
5. population aggregates (gender split, mean body fat per gender)

Every function is pure: records in, values out.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from core.common import (
    MISSING_VALUE,
    Metric,
    Observation,
    group_by,
    percent,
    round2,
    to_decimal,
)
from core.errors import DivisionByZero, InvalidDate, MalformedRecord
from core.models import BiometricRecord, User

_LOG = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────
#  Age / BMI
# ──────────────────────────────────────────────────────────────────────
def compute_age(birth_date: date, as_of: date) -> int:
    """Whole years elapsed between `birth_date` and `as_of` (floor)."""
    if birth_date > as_of:
        raise InvalidDate(f"birth date {birth_date} is after {as_of}")
    had_birthday = (as_of.month, as_of.day) >= (birth_date.month, birth_date.day)
    return as_of.year - birth_date.year - (0 if had_birthday else 1)


def compute_bmi(height_cm: Decimal | float | None, weight_kg: Decimal | float | None) -> Metric:
    """weight / (height/100)², rounded to 2 decimals."""
    if height_cm is not None and to_decimal(height_cm) <= 0:
        raise DivisionByZero(f"height must be positive, got {height_cm}")
    if weight_kg is None or height_cm is None:
        return MISSING_VALUE
    metres = to_decimal(height_cm) / 100
    return round2(to_decimal(weight_kg) / (metres * metres))


# ──────────────────────────────────────────────────────────────────────
#  First / latest record
# ──────────────────────────────────────────────────────────────────────
def latest_record(records: Iterable[BiometricRecord]) -> BiometricRecord | None:
    """Maximum record_date; same-day ties go to the highest id."""
    return max(records, key=lambda r: r.order_key, default=None)


def earliest_record(records: Iterable[BiometricRecord]) -> BiometricRecord | None:
    """Minimum record_date; same-day ties go to the lowest id."""
    return min(records, key=lambda r: r.order_key, default=None)


# ──────────────────────────────────────────────────────────────────────
#  Trend
# ──────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class TrendPoint:
    on: date
    value: Decimal | None
    delta: Decimal | None      # None for the first point


def trend(observations: Sequence[Observation]) -> list[TrendPoint]:
    """
    Change of each value against the previous *row* (not the previous
    calendar day), so gaps between dates do not matter.  A missing value
    makes both its own delta and the next one None.
    """
    points: list[TrendPoint] = []
    previous: Observation | None = None
    for obs in sorted(observations, key=lambda o: o.order_key):
        delta = None
        if previous is not None and previous.value is not None and obs.value is not None:
            delta = round2(obs.value - previous.value)
        points.append(TrendPoint(obs.on, obs.value, delta))
        previous = obs
    return points


def observations(records: Iterable[BiometricRecord], metric: str) -> list[Observation]:
    """Project one biometric column into an ordered series."""
    if metric not in BiometricRecord.model_fields or metric in ("id", "user_id", "record_date"):
        raise MalformedRecord(f"unknown biometric metric {metric!r}")
    return [
        Observation(r.record_date, getattr(r, metric), r.id)
        for r in sorted(records, key=lambda r: r.order_key)
    ]


def metric_trend(records: Iterable[BiometricRecord], metric: str) -> list[TrendPoint]:
    return trend(observations(records, metric))


# ──────────────────────────────────────────────────────────────────────
#  Heart-rate drop
# ──────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class HeartRateDrop:
    qualifies: bool
    earliest: BiometricRecord | None
    latest: BiometricRecord | None
    drop_bpm: Metric
    span_days: int


def heart_rate_drop(
    records: Sequence[BiometricRecord],
    min_span_days: int,
    min_drop_bpm: Decimal | float,
) -> HeartRateDrop:
    """
    Compare the globally earliest and latest record of ONE user.  Qualifies
    when the span is at least `min_span_days` and the resting rate fell by
    strictly more than `min_drop_bpm`.
    """
    if len({r.user_id for r in records}) > 1:
        raise MalformedRecord("heart_rate_drop expects the records of a single user")

    first, last = earliest_record(records), latest_record(records)
    if first is None or last is None:
        return HeartRateDrop(False, None, None, MISSING_VALUE, 0)

    span = (last.record_date - first.record_date).days
    if first.resting_heart_rate is None or last.resting_heart_rate is None:
        return HeartRateDrop(False, first, last, MISSING_VALUE, span)

    drop = round2(first.resting_heart_rate - last.resting_heart_rate)
    if first.id == last.id or span == 0:
        # one reading is not a drop, whatever the thresholds
        return HeartRateDrop(False, first, last, drop, span)
    qualifies = span >= min_span_days and drop > to_decimal(min_drop_bpm)
    return HeartRateDrop(qualifies, first, last, drop, span)


# ──────────────────────────────────────────────────────────────────────
#  Population aggregates
# ──────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class GenderShare:
    gender: str | None
    user_count: int
    percentage: Metric


def gender_distribution(users: Sequence[User]) -> list[GenderShare]:
    counts = Counter(u.gender for u in users)
    total = len(users)
    return [
        GenderShare(gender, n, percent(n, total))
        for gender, n in sorted(counts.items(), key=lambda kv: (kv[0] is not None, kv[0] or ""))
    ]


def body_fat_by_gender(
    users: Iterable[User], records: Iterable[BiometricRecord]
) -> dict[str | None, Metric]:
    """Mean body-fat % over *all* records (not just the latest) per gender."""
    gender_of = {u.id: u.gender for u in users}
    per_gender = group_by(
        (r for r in records if r.user_id in gender_of),
        key=lambda r: gender_of[r.user_id],
    )
    out: dict[str | None, Metric] = {}
    for gender, recs in per_gender.items():
        values = [r.body_fat_percent for r in recs if r.body_fat_percent is not None]
        out[gender] = round2(sum(values, Decimal(0)) / len(values)) if values else MISSING_VALUE
    _LOG.debug("body fat averaged for %d gender group(s)", len(out))
    return out
