# tests/test_workout_stats.py
from __future__ import annotations

import random
from datetime import date, timedelta
from decimal import Decimal as D

import pytest

from core.common import DIVISION_BY_ZERO, Observation, is_undefined
from core.errors import InvalidDate, MalformedRecord
from core.models import FoodItem, Workout, WorkoutExercise
from core.workout_stats import (
    duration_weeks,
    exercise_series,
    iso_week,
    most_frequent,
    percent_improvement,
    progression_between_first_and_last,
    weekly_summary,
    weekly_workout_consistency,
    workouts_per_week,
    workouts_within,
)
from scripts.demo_data import EXERCISE_TYPES, WORKOUTS

MONDAY = date(2024, 3, 4)


def _workouts(days: list[date]) -> list[Workout]:
    return [Workout(id=i, user_id=1, workout_date=d) for i, d in enumerate(days, start=1)]


def _week(start: date, n: int) -> list[date]:
    return [start + timedelta(days=i) for i in range(n)]


# ── ISO weeks / consistency ─────────────────────────────────────────
def test_iso_week_across_year_boundary():
    assert iso_week(date(2025, 12, 29)) == (2026, 1)
    assert iso_week(date(2021, 1, 3)) == (2020, 53)


def test_consistency_needs_more_than_min_per_week():
    five_five = _workouts(_week(MONDAY, 5) + _week(MONDAY + timedelta(weeks=1), 5))
    four_four = _workouts(_week(MONDAY, 4) + _week(MONDAY + timedelta(weeks=1), 4))
    assert weekly_workout_consistency(five_five, min_per_week=4, min_weeks=2)
    assert not weekly_workout_consistency(four_four, min_per_week=4, min_weeks=2)


def test_consistency_counts_only_qualifying_weeks():
    # one busy week + one light week
    ws = _workouts(_week(MONDAY, 5) + [MONDAY + timedelta(weeks=1)])
    summary = weekly_summary(ws, min_per_week=4)
    assert (summary.active_weeks, summary.qualifying_weeks, summary.max_weekly_workouts) == (2, 1, 5)
    assert not weekly_workout_consistency(ws, 4, 2)


def test_week_spanning_new_year_is_one_week():
    # Mon 29 Dec 2025 .. Fri 2 Jan 2026 all sit in ISO week 2026-W01
    ws = _workouts(_week(date(2025, 12, 29), 5))
    assert weekly_summary(ws, 4).qualifying_weeks == 1
    assert weekly_workout_consistency(ws, min_per_week=4, min_weeks=1)


# ── progression ─────────────────────────────────────────────────────
def test_progression_first_and_last_per_key():
    series = {
        (1, "Deadlift"): [
            Observation(MONDAY + timedelta(days=14), D("70"), 2),
            Observation(MONDAY, D("60"), 1),
            Observation(MONDAY + timedelta(days=28), D("75"), 3),
        ],
        (2, "Deadlift"): [],
    }
    out = progression_between_first_and_last(series)
    assert list(out) == [(1, "Deadlift")]
    prog = out[(1, "Deadlift")]
    assert (prog.first, prog.last) == (D("60"), D("75"))
    assert prog.delta == D("15.00")
    assert prog.percent_delta == D("25.00")
    assert prog.days == 28


def test_progression_from_zero_is_undefined_not_error():
    out = progression_between_first_and_last(
        {"k": [Observation(MONDAY, D("0"), 1), Observation(MONDAY + timedelta(days=7), D("10"), 2)]}
    )
    assert out["k"].delta == D("10.00")
    assert out["k"].percent_delta == DIVISION_BY_ZERO


def test_exercise_series_from_demo_workouts():
    series = exercise_series(
        WORKOUTS, EXERCISE_TYPES,
        value=lambda ex: ex.weight_kg,
        include=lambda t: t.category == "Strength",
    )
    # push-ups carry no weight and drop out
    assert list(series) == [(1, "Deadlift")]
    assert series[(1, "Deadlift")][0].value == D("70.0")


def test_exercise_series_unknown_type():
    w = Workout(id=1, user_id=1, workout_date=MONDAY, exercises=(
        WorkoutExercise(id=1, workout_id=1, exercise_type_id=99, weight_kg=D("10")),
    ))
    with pytest.raises(MalformedRecord):
        exercise_series([w], EXERCISE_TYPES, value=lambda ex: ex.weight_kg)


# ── percent improvement ─────────────────────────────────────────────
EARLY = Observation(MONDAY, D("30"), 1)


@pytest.mark.parametrize(
    "late_value, days, expected",
    [
        ("40", 91, True),     # +33 %
        ("40", 60, False),    # span too short
        ("36", 91, False),    # exactly +20 % is not more than 20 %
        ("36.01", 91, True),
        ("25", 120, False),
    ],
)
def test_percent_improvement(late_value, days, expected):
    late = Observation(MONDAY + timedelta(days=days), D(late_value), 2)
    assert percent_improvement(EARLY, late, min_span_days=90, min_percent=20) is expected


def test_percent_improvement_from_zero_never_qualifies():
    late = Observation(MONDAY + timedelta(days=100), D("10"), 2)
    assert not percent_improvement(Observation(MONDAY, D("0"), 1), late, 90, 20)


def test_percent_improvement_rejects_reversed_dates():
    with pytest.raises(InvalidDate):
        percent_improvement(Observation(MONDAY, D("30"), 2), Observation(MONDAY - timedelta(days=1), D("40"), 1), 0, 0)


# ── workouts per week ───────────────────────────────────────────────
def test_workouts_per_week_over_goal_window():
    start, end = MONDAY, MONDAY + timedelta(days=91)
    ws = _workouts([start + timedelta(days=7 * i) for i in range(13)] + [end + timedelta(days=1)])
    window = workouts_within(ws, start, end)
    assert len(window) == 13
    assert workouts_per_week(window, duration_weeks(start, end)) == D("1.00")


def test_workouts_within_is_inclusive():
    ws = _workouts([MONDAY, MONDAY + timedelta(days=3)])
    assert len(workouts_within(ws, MONDAY, MONDAY + timedelta(days=3))) == 2


def test_zero_week_window_is_undefined():
    assert duration_weeks(MONDAY, MONDAY) == 0
    assert is_undefined(workouts_per_week(_workouts([MONDAY]), duration_weeks(MONDAY, MONDAY)))


def test_duration_weeks_rejects_reversed_window():
    with pytest.raises(InvalidDate):
        duration_weeks(MONDAY, MONDAY - timedelta(days=1))


# ── most frequent ───────────────────────────────────────────────────
NAMES = ["Protein Powder", "Almonds", "Chicken", "Almonds", "Protein Powder"]


def test_most_frequent_ties_break_on_key():
    expected = [("Almonds", 2), ("Protein Powder", 2), ("Chicken", 1)]
    for _ in range(5):
        shuffled = random.sample(NAMES, len(NAMES))
        got = most_frequent(shuffled, key_fn=lambda n: n)
        assert [(f.key, f.count) for f in got] == expected


def test_most_frequent_top_n():
    assert [f.key for f in most_frequent(NAMES, lambda n: n, top_n=2)] == ["Almonds", "Protein Powder"]
    assert most_frequent(NAMES, lambda n: n, top_n=0) == []
    with pytest.raises(ValueError):
        most_frequent(NAMES, lambda n: n, top_n=-1)


def test_most_frequent_none_component_sorts_first():
    foods = [
        FoodItem(id=1, name="Oats", brand="Quaker"),
        FoodItem(id=2, name="Oats", brand=None),
        FoodItem(id=3, name="Brown Rice", brand="Uncle Ben's"),
    ]
    got = most_frequent(foods, key_fn=lambda f: (f.name, f.brand))
    assert [f.key for f in got] == [("Brown Rice", "Uncle Ben's"), ("Oats", None), ("Oats", "Quaker")]
