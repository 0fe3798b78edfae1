"""
core/goal_progress.py
────────────────────────────────────────────────────────────────────────
Goal completion percentages.

The baseline of a goal is the biometric record dated *exactly* on the
goal's start_date.  No nearest-date fallback: without it the progress is
`Undefined(missing_baseline)`.

    Weight Loss : (start_weight  - current) / (start_weight  - target) × 100
    Muscle Gain : (current - start_muscle) / (target - start_muscle)  × 100
    Endurance   : (current - start_hr)     / (target - start_hr)      × 100
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Iterable, Sequence

import numpy as np

from core.common import (
    DIVISION_BY_ZERO,
    MISSING_BASELINE,
    MISSING_VALUE,
    UNKNOWN_GOAL_TYPE,
    Metric,
    Undefined,
    is_undefined,
    percent,
    round2,
    safe_ratio,
    to_decimal,
)
from core.models import ENDURANCE, MUSCLE_GAIN, WEIGHT_LOSS, BiometricRecord, Goal, Workout
from core.workout_stats import duration_weeks, workouts_per_week, workouts_within

_LOG = logging.getLogger(__name__)


def _lost(base: Decimal, goal: Goal) -> Metric:
    return percent(base - goal.current_value, base - goal.target_value)  # type: ignore[operator]


def _lost_ratio(base: Decimal, goal: Goal) -> Metric:
    ratio = safe_ratio(base - goal.current_value, base - goal.target_value)  # type: ignore[operator]
    return ratio if is_undefined(ratio) else ratio * 100


def _gained(base: Decimal, goal: Goal) -> Metric:
    return percent(goal.current_value - base, goal.target_value - base)  # type: ignore[operator]


# goal_type → (baseline column, formula)
_FORMULAS: dict[str, tuple[str, Callable[[Decimal, Goal], Metric]]] = {
    WEIGHT_LOSS: ("weight_kg", _lost),
    MUSCLE_GAIN: ("muscle_mass_kg", _gained),
    ENDURANCE: ("resting_heart_rate", _gained),
}


def baseline_for(goal: Goal, records: Iterable[BiometricRecord]) -> BiometricRecord | None:
    """The goal owner's record on goal.start_date (highest id if several)."""
    same_day = [
        r for r in records if r.user_id == goal.user_id and r.record_date == goal.start_date
    ]
    return max(same_day, key=lambda r: r.id, default=None)


def _is_baseline(goal: Goal, ref: BiometricRecord | None) -> bool:
    return ref is not None and ref.user_id == goal.user_id and ref.record_date == goal.start_date


def goal_progress(goal: Goal, reference: BiometricRecord | None) -> Metric:
    """Completion percentage (2 decimals) or the reason it is undefined."""
    goal.check_dates()
    if goal.goal_type not in _FORMULAS:
        return UNKNOWN_GOAL_TYPE
    if not _is_baseline(goal, reference):
        return MISSING_BASELINE
    if goal.current_value is None or goal.target_value is None:
        return MISSING_VALUE

    column, formula = _FORMULAS[goal.goal_type]
    base = getattr(reference, column)
    if base is None:
        return MISSING_VALUE
    return formula(base, goal)


# ──────────────────────────── weight loss ────────────────────────── #
@dataclass(frozen=True)
class WeightLossCompletion:
    goal_id: int
    user_id: int
    start_weight: Decimal
    target_loss: Decimal
    achieved_loss: Decimal
    completion_percentage: Metric
    completion_ratio: Metric       # unrounded, ×100


def weight_loss_completion(
    goal: Goal, reference: BiometricRecord | None
) -> WeightLossCompletion | Undefined:
    goal.check_dates()
    if goal.goal_type != WEIGHT_LOSS:
        return UNKNOWN_GOAL_TYPE
    if not _is_baseline(goal, reference) or reference.weight_kg is None:  # type: ignore[union-attr]
        return MISSING_BASELINE
    if goal.current_value is None or goal.target_value is None:
        return MISSING_VALUE

    start = reference.weight_kg  # type: ignore[union-attr]
    return WeightLossCompletion(
        goal_id=goal.id,
        user_id=goal.user_id,
        start_weight=start,
        target_loss=round2(start - goal.target_value),
        achieved_loss=round2(start - goal.current_value),
        completion_percentage=_lost(start, goal),
        completion_ratio=_lost_ratio(start, goal),
    )


# ──────────────────────────── correlation ────────────────────────── #
@dataclass(frozen=True)
class WorkoutLossPoint:
    goal_id: int
    user_id: int
    total_workouts: int
    workouts_per_week: Metric
    weight_loss: Decimal


def workout_loss_point(
    goal: Goal, reference: BiometricRecord | None, workouts: Sequence[Workout]
) -> WorkoutLossPoint | Undefined:
    """Workouts per week inside [start_date, target_date] vs the weight lost so far."""
    completion = weight_loss_completion(goal, reference)
    if is_undefined(completion):
        return completion  # type: ignore[return-value]

    window = workouts_within(
        (w for w in workouts if w.user_id == goal.user_id), goal.start_date, goal.target_date
    )
    return WorkoutLossPoint(
        goal_id=goal.id,
        user_id=goal.user_id,
        total_workouts=len(window),
        workouts_per_week=workouts_per_week(window, duration_weeks(goal.start_date, goal.target_date)),
        weight_loss=completion.achieved_loss,  # type: ignore[union-attr]
    )


def pearson(points: Sequence[WorkoutLossPoint]) -> Metric:
    """
    Pearson r between workouts/week and weight lost.  Needs two defined
    points and some spread on both axes, otherwise `Undefined`.
    """
    pairs = [(p.workouts_per_week, p.weight_loss) for p in points if not is_undefined(p.workouts_per_week)]
    if len(pairs) < 2:
        return MISSING_VALUE

    x = np.array([float(a) for a, _ in pairs])
    y = np.array([float(b) for _, b in pairs])
    if np.std(x) == 0 or np.std(y) == 0:
        return DIVISION_BY_ZERO

    r = float(np.corrcoef(x, y)[0, 1])
    _LOG.debug("pearson over %d point(s): %.4f", len(pairs), r)
    return round2(to_decimal(r))
