"""
core/workout_stats.py
────────────────────────────────────────────────────────────────────────
Workout-side calculators.

Responsibilities
----------------
1.   `weekly_workout_consistency()` – ISO-8601 week buckets, count weeks
     above a per-week threshold.
2.   `progression_between_first_and_last()` – first vs latest value for
     every (subject, exercise) series, with absolute and % change.
3.   `percent_improvement()` – thresholded version of the same ratio.
4.   `workouts_per_week()` – frequency over a goal window.
5.   `most_frequent()` – top-N by count with a deterministic tie-break.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Hashable, Iterable, Mapping, Sequence, TypeVar

from core.common import (
    DIVISION_BY_ZERO,
    Metric,
    Observation,
    group_by,
    is_undefined,
    percent,
    round2,
    safe_ratio,
    to_decimal,
)
from core.errors import InvalidDate, MalformedRecord
from core.models import ExerciseType, Workout, WorkoutExercise

_LOG = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


# ─────────────────────────── consistency ─────────────────────────── #
def iso_week(day: date) -> tuple[int, int]:
    """(ISO year, ISO week).  29 Dec 2025 is week 1 of 2026, not week 53 of 2025."""
    iso = day.isocalendar()
    return iso[0], iso[1]


def weekly_counts(workouts: Iterable[Workout]) -> Counter[tuple[int, int]]:
    return Counter(iso_week(w.workout_date) for w in workouts)


@dataclass(frozen=True)
class WeeklySummary:
    active_weeks: int
    qualifying_weeks: int
    max_weekly_workouts: int


def weekly_summary(workouts: Iterable[Workout], min_per_week: int) -> WeeklySummary:
    counts = weekly_counts(workouts)
    return WeeklySummary(
        active_weeks=len(counts),
        qualifying_weeks=sum(1 for n in counts.values() if n > min_per_week),
        max_weekly_workouts=max(counts.values(), default=0),
    )


def weekly_workout_consistency(
    workouts: Iterable[Workout], min_per_week: int, min_weeks: int
) -> bool:
    """True when at least `min_weeks` ISO weeks hold MORE than `min_per_week` workouts."""
    return weekly_summary(workouts, min_per_week).qualifying_weeks >= min_weeks


# ─────────────────────────── progression ─────────────────────────── #
@dataclass(frozen=True)
class Progression:
    first_date: date
    first: Decimal
    last_date: date
    last: Decimal
    delta: Decimal
    percent_delta: Metric      # Undefined when first == 0
    days: int


def progression(series: Sequence[Observation]) -> Progression | None:
    values = [o for o in series if o.value is not None]
    if not values:
        return None
    first = min(values, key=lambda o: o.order_key)
    last = max(values, key=lambda o: o.order_key)
    change = last.value - first.value  # type: ignore[operator]
    return Progression(
        first_date=first.on,
        first=first.value,  # type: ignore[arg-type]
        last_date=last.on,
        last=last.value,  # type: ignore[arg-type]
        delta=round2(change),
        percent_delta=percent(change, first.value),
        days=(last.on - first.on).days,
    )


def progression_between_first_and_last(
    series: Mapping[K, Sequence[Observation]],
) -> dict[K, Progression]:
    """First vs latest observation for every key; empty series are skipped."""
    out: dict[K, Progression] = {}
    for key, obs in series.items():
        prog = progression(obs)
        if prog is not None:
            out[key] = prog
    return out


def percent_improvement(
    early: Observation,
    late: Observation,
    min_span_days: int,
    min_percent: Decimal | float,
) -> bool:
    """`(late - early) / early > min_percent/100` over at least `min_span_days`."""
    if late.on < early.on:
        raise InvalidDate(f"late observation {late.on} precedes early {early.on}")
    if early.value is None or late.value is None:
        return False
    ratio = safe_ratio(late.value - early.value, early.value)
    if is_undefined(ratio):
        return False
    return (late.on - early.on).days >= min_span_days and ratio * 100 > to_decimal(min_percent)


def exercise_series(
    workouts: Iterable[Workout],
    exercise_types: Iterable[ExerciseType],
    value: Callable[[WorkoutExercise], Decimal | None],
    include: Callable[[ExerciseType], bool] = lambda _t: True,
) -> dict[tuple[int, str], list[Observation]]:
    """
    (user_id, exercise name) → dated observations.  Rows whose value is None
    are left out, like `WHERE weight_kg IS NOT NULL`.
    """
    types = {t.id: t for t in exercise_types}
    rows: list[tuple[tuple[int, str], Observation]] = []
    for w in workouts:
        for ex in w.exercises:
            etype = types.get(ex.exercise_type_id)
            if etype is None:
                raise MalformedRecord(
                    f"workout exercise {ex.id} references unknown type {ex.exercise_type_id}"
                )
            v = value(ex)
            if v is None or not include(etype):
                continue
            rows.append(((w.user_id, etype.name), Observation(w.workout_date, v, ex.id)))

    grouped = group_by(rows, key=lambda r: r[0], order=lambda r: r[1].order_key)
    return {k: [obs for _, obs in items] for k, items in grouped.items()}


# ─────────────────────────── frequency ──────────────────────────── #
def workouts_within(workouts: Iterable[Workout], start: date, end: date) -> list[Workout]:
    """Workouts dated in [start, end], both ends inclusive."""
    return [w for w in workouts if start <= w.workout_date <= end]


def duration_weeks(start: date, end: date) -> Decimal:
    if end < start:
        raise InvalidDate(f"window end {end} precedes start {start}")
    return Decimal((end - start).days) / 7


def workouts_per_week(workouts: Sequence[Workout], weeks: Decimal | float) -> Metric:
    """count / weeks; `Undefined` for a zero-length window."""
    weeks = to_decimal(weeks)
    if weeks == 0:
        return DIVISION_BY_ZERO
    return round2(len(workouts) / weeks)


# ─────────────────────────── top-N ───────────────────────────────── #
@dataclass(frozen=True)
class Frequency:
    key: Hashable
    count: int


def _natural(key: object) -> object:
    # None sorts before every value, component by component
    if isinstance(key, tuple):
        return tuple(_natural(k) for k in key)
    return (key is not None, key if key is not None else "")


def most_frequent(
    records: Iterable[T], key_fn: Callable[[T], K], top_n: int | None = None
) -> list[Frequency]:
    """
    Count records per key, highest count first.  Equal counts are ordered
    by the key itself, ascending, so repeated runs return the same list.
    """
    if top_n is not None and top_n < 0:
        raise ValueError("top_n must be >= 0")
    counts = Counter(key_fn(r) for r in records)
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], _natural(kv[0])))
    if top_n is not None:
        ranked = ranked[:top_n]
    _LOG.debug("most_frequent: %d distinct key(s), returning %d", len(counts), len(ranked))
    return [Frequency(k, n) for k, n in ranked]
