# tests/test_goal_progress.py
from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal as D

import pytest

from core.common import (
    DIVISION_BY_ZERO,
    MISSING_BASELINE,
    MISSING_VALUE,
    UNKNOWN_GOAL_TYPE,
    is_undefined,
)
from core.errors import InvalidDate
from core.goal_progress import (
    WorkoutLossPoint,
    baseline_for,
    goal_progress,
    pearson,
    weight_loss_completion,
    workout_loss_point,
)
from core.models import ENDURANCE, MUSCLE_GAIN, WEIGHT_LOSS, BiometricRecord, Goal
from scripts.demo_data import BIOMETRICS, GOALS, WORKOUTS

START = date(2023, 10, 1)
BASELINE = BIOMETRICS[0]          # johndoe, 2023-10-01, 78.5 kg / 35.2 kg / 62 bpm
WEIGHT_GOAL, MUSCLE_GOAL, ENDURANCE_GOAL, EVENT_GOAL = GOALS


def _goal(goal_type: str = WEIGHT_LOSS, **kw) -> Goal:
    data = dict(id=99, user_id=1, goal_type=goal_type, target_value=D("75.0"),
                target_date=date(2023, 12, 31), current_value=D("78.5"), start_date=START)
    data.update(kw)
    return Goal(**data)


# ── progress ────────────────────────────────────────────────────────
def test_weight_loss_starts_at_zero():
    assert goal_progress(WEIGHT_GOAL, BASELINE) == D("0.00")


def test_weight_loss_partway():
    assert goal_progress(_goal(current_value=D("77.8")), BASELINE) == D("20.00")


def test_muscle_gain_uses_muscle_baseline():
    assert goal_progress(MUSCLE_GOAL, BASELINE) == D("10.71")   # 0.3 / 2.8


def test_endurance_uses_heart_rate_baseline():
    goal = _goal(ENDURANCE, target_value=D("52"), current_value=D("57"))
    assert goal_progress(goal, BASELINE) == D("50.00")           # (57-62)/(52-62)


@pytest.mark.parametrize("goal_type", [WEIGHT_LOSS, MUSCLE_GAIN, ENDURANCE])
def test_missing_baseline_is_undefined_for_every_type(goal_type):
    assert goal_progress(_goal(goal_type), None) == MISSING_BASELINE
    other_day = BASELINE.model_copy(update={"record_date": START + timedelta(days=1)})
    assert goal_progress(_goal(goal_type), other_day) == MISSING_BASELINE


def test_demo_endurance_goal_has_no_baseline():
    ref = baseline_for(ENDURANCE_GOAL, BIOMETRICS)
    assert ref is None
    assert goal_progress(ENDURANCE_GOAL, ref) == MISSING_BASELINE


def test_unknown_goal_type_is_undefined():
    assert goal_progress(EVENT_GOAL, baseline_for(EVENT_GOAL, BIOMETRICS)) == UNKNOWN_GOAL_TYPE


def test_target_equal_to_baseline_is_undefined():
    assert goal_progress(_goal(target_value=D("78.5")), BASELINE) == DIVISION_BY_ZERO


def test_missing_current_value_is_undefined():
    assert goal_progress(_goal(current_value=None), BASELINE) == MISSING_VALUE


def test_baseline_column_missing_is_undefined():
    bare = BiometricRecord(id=50, user_id=1, record_date=START)
    assert is_undefined(goal_progress(_goal(), bare))


def test_reversed_goal_dates_raise():
    with pytest.raises(InvalidDate):
        goal_progress(_goal(target_date=START - timedelta(days=1)), BASELINE)


def test_baseline_for_matches_exact_date_and_owner():
    assert baseline_for(WEIGHT_GOAL, BIOMETRICS) is BASELINE
    assert baseline_for(_goal(user_id=3), BIOMETRICS).user_id == 3
    assert baseline_for(_goal(start_date=date(2023, 10, 2)), BIOMETRICS) is None


# ── weight-loss completion ──────────────────────────────────────────
def test_weight_loss_completion():
    done = weight_loss_completion(_goal(current_value=D("75.7")), BASELINE)
    assert (done.target_loss, done.achieved_loss, done.completion_percentage) == (
        D("3.50"), D("2.80"), D("80.00")
    )


def test_weight_loss_completion_other_type():
    assert weight_loss_completion(MUSCLE_GOAL, BASELINE) == UNKNOWN_GOAL_TYPE


# ── correlation ─────────────────────────────────────────────────────
def test_workout_loss_point_for_demo_goal():
    point = workout_loss_point(WEIGHT_GOAL, BASELINE, WORKOUTS)
    assert point.total_workouts == 2           # 2 and 4 Oct
    assert point.workouts_per_week == D("0.15")  # 2 / 13 weeks
    assert point.weight_loss == D("0.00")


def _point(i: int, per_week: str, loss: str) -> WorkoutLossPoint:
    return WorkoutLossPoint(goal_id=i, user_id=i, total_workouts=0,
                            workouts_per_week=D(per_week), weight_loss=D(loss))


def test_pearson_perfect_line():
    pts = [_point(1, "1", "1"), _point(2, "2", "2"), _point(3, "3", "3")]
    assert pearson(pts) == D("1.00")


def test_pearson_needs_two_points_and_spread():
    assert pearson([_point(1, "1", "1")]) == MISSING_VALUE
    assert pearson([_point(1, "2", "1"), _point(2, "2", "3")]) == DIVISION_BY_ZERO
