"""
core/reports.py
────────────────────────────────────────────────────────────────────────
Batch reports over an in-memory `ProgressDataset`.

Each report walks its subjects (users, goals, …) one by one.  A subject
that raises a `MetricsError` is logged, recorded in `ReportResult.errors`
and skipped; the rest of the run carries on.

All public I/O happens through the report functions below, or through
`run_all()` which produces every report in one pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from functools import cached_property
from typing import Any, Callable, Iterable, TypeVar

from core import biometrics_calc as bio
from core import goal_progress as gp
from core import nutrition_summary as ns
from core import workout_stats as ws
from core.common import Undefined, group_by, is_undefined, percent
from core.errors import MalformedRecord, MetricsError
from core.models import (
    WEIGHT_LOSS,
    BiometricRecord,
    ExerciseType,
    FoodItem,
    Goal,
    Meal,
    User,
    Workout,
)

_LOG = logging.getLogger(__name__)

S = TypeVar("S")

STRENGTH = "Strength"
RUNNING = "Running"


# ──────────────────────────────────────────────────────────────────────
#  Containers
# ──────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ProgressDataset:
    """Everything the reports read, already fetched from the store."""

    users: tuple[User, ...] = ()
    biometrics: tuple[BiometricRecord, ...] = ()
    exercise_types: tuple[ExerciseType, ...] = ()
    workouts: tuple[Workout, ...] = ()
    food_items: tuple[FoodItem, ...] = ()
    meals: tuple[Meal, ...] = ()
    goals: tuple[Goal, ...] = ()

    @cached_property
    def users_by_id(self) -> dict[int, User]:
        return {u.id: u for u in self.users}

    @cached_property
    def foods_by_id(self) -> dict[int, FoodItem]:
        return {f.id: f for f in self.food_items}

    @cached_property
    def biometrics_by_user(self) -> dict[int, list[BiometricRecord]]:
        return group_by(self.biometrics, key=lambda r: r.user_id, order=lambda r: r.order_key)

    @cached_property
    def workouts_by_user(self) -> dict[int, list[Workout]]:
        return group_by(self.workouts, key=lambda w: w.user_id, order=lambda w: (w.workout_date, w.id))

    def username(self, user_id: int) -> str | None:
        user = self.users_by_id.get(user_id)
        return user.username if user else None


@dataclass(frozen=True)
class SubjectError:
    subject: str
    error: str
    message: str


@dataclass
class ReportResult:
    name: str
    rows: list[dict[str, Any]] = field(default_factory=list)
    errors: list[SubjectError] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)

    def collect(self, subjects: Iterable[S], fn: Callable[[S], dict[str, Any] | None]) -> None:
        """Run `fn` per subject; MetricsError → error record, None → no row."""
        for subject in subjects:
            try:
                row = fn(subject)
            except MetricsError as exc:
                _LOG.warning("%s: subject %s skipped (%s: %s)",
                             self.name, subject, type(exc).__name__, exc)
                self.errors.append(SubjectError(str(subject), type(exc).__name__, str(exc)))
                continue
            if row is not None:
                self.rows.append(row)


def plain(value: Any) -> Any:
    """Undefined → None, recursively, for JSON output."""
    if isinstance(value, Undefined):
        return None
    if isinstance(value, dict):
        return {k: plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [plain(v) for v in value]
    return value


def _reason(value: Any) -> str | None:
    return value.reason.value if isinstance(value, Undefined) else None


def _desc_metric(value: Any) -> tuple[int, Decimal]:
    # defined values first, largest first
    return (1, Decimal(0)) if is_undefined(value) else (0, -value)


# ──────────────────────────────────────────────────────────────────────
#  Biometric reports
# ──────────────────────────────────────────────────────────────────────
def user_age_bmi(ds: ProgressDataset, as_of: date) -> ReportResult:
    """Age today and BMI from the most recent weight record."""
    result = ReportResult("user_age_bmi")

    def _row(user_id: int) -> dict[str, Any] | None:
        user = ds.users_by_id.get(user_id)
        latest = bio.latest_record(ds.biometrics_by_user.get(user_id, []))
        if user is None or latest is None:
            return None
        bmi = bio.compute_bmi(user.height_cm, latest.weight_kg)
        return {
            "user_id": user.id,
            "username": user.username,
            "gender": user.gender,
            "age": bio.compute_age(user.birth_date, as_of) if user.birth_date else None,
            "height_cm": user.height_cm,
            "record_date": latest.record_date,
            "weight_kg": latest.weight_kg,
            "bmi": bmi,
            "bmi_undefined_reason": _reason(bmi),
        }

    result.collect(sorted(ds.users_by_id), _row)
    return result


def gender_distribution(ds: ProgressDataset) -> ReportResult:
    result = ReportResult("gender_distribution")
    result.rows = [
        {"gender": s.gender, "user_count": s.user_count, "percentage": s.percentage}
        for s in bio.gender_distribution(ds.users)
    ]
    return result


def weight_trend(ds: ProgressDataset, user_id: int) -> ReportResult:
    """Weight per record with the change against the previous record."""
    result = ReportResult("weight_trend")
    records = ds.biometrics_by_user.get(user_id, [])
    result.rows = [
        {"user_id": user_id, "username": ds.username(user_id),
         "record_date": p.on, "weight_kg": p.value, "weight_change": p.delta}
        for p in bio.metric_trend(records, "weight_kg")
    ]
    return result


def heart_rate_drops(
    ds: ProgressDataset, min_span_days: int = 30, min_drop_bpm: Decimal | float = 5
) -> ReportResult:
    result = ReportResult("heart_rate_drops")

    def _row(user_id: int) -> dict[str, Any] | None:
        hr = bio.heart_rate_drop(ds.biometrics_by_user[user_id], min_span_days, min_drop_bpm)
        if not hr.qualifies:
            return None
        return {
            "user_id": user_id,
            "username": ds.username(user_id),
            "start_date": hr.earliest.record_date,  # type: ignore[union-attr]
            "starting_hr": hr.earliest.resting_heart_rate,  # type: ignore[union-attr]
            "end_date": hr.latest.record_date,  # type: ignore[union-attr]
            "ending_hr": hr.latest.resting_heart_rate,  # type: ignore[union-attr]
            "hr_drop": hr.drop_bpm,
            "days_tracked": hr.span_days,
        }

    result.collect(sorted(ds.biometrics_by_user), _row)
    return result


def body_fat_by_gender(ds: ProgressDataset) -> ReportResult:
    result = ReportResult("body_fat_by_gender")
    averages = bio.body_fat_by_gender(ds.users, ds.biometrics)
    result.rows = [
        {"gender": g, "avg_body_fat_percent": v}
        for g, v in sorted(averages.items(), key=lambda kv: (kv[0] is not None, kv[0] or ""))
    ]
    return result


# ──────────────────────────────────────────────────────────────────────
#  Workout reports
# ──────────────────────────────────────────────────────────────────────
def popular_exercises(ds: ProgressDataset, top_n: int = 3) -> ReportResult:
    result = ReportResult("popular_exercises")
    types = {t.id: t for t in ds.exercise_types}
    used: list[ExerciseType] = []

    def _check(workout: Workout) -> None:
        found = []
        for ex in workout.exercises:
            if ex.exercise_type_id not in types:
                raise MalformedRecord(
                    f"workout exercise {ex.id} references unknown type {ex.exercise_type_id}"
                )
            found.append(types[ex.exercise_type_id])
        used.extend(found)

    result.collect(ds.workouts, _check)
    result.rows = [
        {"exercise_name": f.key[0], "category": f.key[1], "usage_count": f.count}
        for f in ws.most_frequent(used, key_fn=lambda t: (t.name, t.category), top_n=top_n)
    ]
    return result


def consistent_users(
    ds: ProgressDataset, min_per_week: int = 4, min_weeks: int = 2
) -> ReportResult:
    result = ReportResult("consistent_users")

    def _row(user_id: int) -> dict[str, Any] | None:
        workouts = ds.workouts_by_user[user_id]
        if not ws.weekly_workout_consistency(workouts, min_per_week, min_weeks):
            return None
        summary = ws.weekly_summary(workouts, min_per_week)
        return {
            "user_id": user_id,
            "username": ds.username(user_id),
            "active_weeks": summary.active_weeks,
            "qualifying_weeks": summary.qualifying_weeks,
            "max_weekly_workouts": summary.max_weekly_workouts,
        }

    result.collect(sorted(ds.workouts_by_user), _row)
    result.rows.sort(key=lambda r: (-r["active_weeks"], r["user_id"]))
    return result


def strength_progression(ds: ProgressDataset) -> ReportResult:
    """First vs latest weight lifted per (user, strength exercise)."""
    result = ReportResult("strength_progression")
    found: list[dict[str, Any]] = []

    def _rows(user_id: int) -> None:
        series = ws.exercise_series(
            ds.workouts_by_user[user_id],
            ds.exercise_types,
            value=lambda ex: ex.weight_kg,
            include=lambda t: t.category == STRENGTH,
        )
        for (uid, name), prog in ws.progression_between_first_and_last(series).items():
            found.append({
                "user_id": uid,
                "username": ds.username(uid),
                "exercise_name": name,
                "first_date": prog.first_date,
                "first_weight": prog.first,
                "latest_date": prog.last_date,
                "latest_weight": prog.last,
                "progress_kg": prog.delta,
                "progress_percent": prog.percent_delta,
                "time_period_days": prog.days,
            })

    result.collect(sorted(ds.workouts_by_user), _rows)
    result.rows = sorted(found, key=lambda r: (_desc_metric(r["progress_percent"]),
                                               r["user_id"], r["exercise_name"]))
    return result


def running_improvement(
    ds: ProgressDataset, min_span_days: int = 90, min_percent: Decimal | float = 20
) -> ReportResult:
    result = ReportResult("running_improvement")

    def _row(user_id: int) -> dict[str, Any] | None:
        series = ws.exercise_series(
            ds.workouts_by_user[user_id],
            ds.exercise_types,
            value=lambda ex: ex.duration_minutes,
            include=lambda t: t.name == RUNNING,
        ).get((user_id, RUNNING))
        if not series:
            return None
        early, late = series[0], series[-1]
        if not ws.percent_improvement(early, late, min_span_days, min_percent):
            return None
        return {
            "user_id": user_id,
            "username": ds.username(user_id),
            "start_date": early.on,
            "start_duration": early.value,
            "end_date": late.on,
            "end_duration": late.value,
            "percent_improvement": percent(late.value - early.value, early.value),  # type: ignore[operator]
        }

    result.collect(sorted(ds.workouts_by_user), _row)
    return result


# ──────────────────────────────────────────────────────────────────────
#  Nutrition reports
# ──────────────────────────────────────────────────────────────────────
def meal_breakdown(ds: ProgressDataset, user_id: int) -> ReportResult:
    result = ReportResult("meal_breakdown")
    meals = [m for m in ds.meals if m.user_id == user_id]

    def _row(b: ns.MealBreakdown) -> dict[str, Any]:
        return {k: getattr(b, k) for k in b.__dataclass_fields__}

    try:
        breakdown = ns.meal_breakdown(meals, ds.foods_by_id)
    except MetricsError as exc:
        _LOG.warning("meal_breakdown: user %s skipped (%s)", user_id, exc)
        result.errors.append(SubjectError(str(user_id), type(exc).__name__, str(exc)))
        return result
    result.collect(breakdown, _row)
    return result


def popular_foods(ds: ProgressDataset, top_n: int = 3) -> ReportResult:
    result = ReportResult("popular_foods")
    valid: list[Meal] = []

    def _check(meal: Meal) -> None:
        ns.food_frequency([meal], ds.foods_by_id)  # raises on a dangling food id
        valid.append(meal)

    result.collect(ds.meals, _check)
    result.rows = [
        {"food_name": f.key[0], "brand": f.key[1], "times_consumed": f.count}
        for f in ns.food_frequency(valid, ds.foods_by_id, top_n=top_n)
    ]
    return result


def average_daily_calories(ds: ProgressDataset) -> ReportResult:
    result = ReportResult("average_daily_calories")
    result.rows = [
        {"user_id": uid, "username": ds.username(uid), "avg_daily_calories": avg}
        for uid, avg in ns.average_daily_calories(list(ds.meals))
        if uid in ds.users_by_id
    ]
    return result


# ──────────────────────────────────────────────────────────────────────
#  Goal reports
# ──────────────────────────────────────────────────────────────────────
def active_goal_progress(ds: ProgressDataset) -> ReportResult:
    result = ReportResult("active_goal_progress")

    def _row(goal: Goal) -> dict[str, Any]:
        ref = gp.baseline_for(goal, ds.biometrics_by_user.get(goal.user_id, []))
        progress = gp.goal_progress(goal, ref)
        return {
            "goal_id": goal.id,
            "user_id": goal.user_id,
            "username": ds.username(goal.user_id),
            "goal_type": goal.goal_type,
            "target_date": goal.target_date,
            "progress_percent": progress,
            "undefined_reason": _reason(progress),
        }

    result.collect([g for g in ds.goals if g.active], _row)
    return result


def weight_loss_achievers(ds: ProgressDataset, min_percent: Decimal | float = 80) -> ReportResult:
    result = ReportResult("weight_loss_achievers")
    threshold = Decimal(str(min_percent))

    def _row(goal: Goal) -> dict[str, Any] | None:
        ref = gp.baseline_for(goal, ds.biometrics_by_user.get(goal.user_id, []))
        done = gp.weight_loss_completion(goal, ref)
        if is_undefined(done) or is_undefined(done.completion_ratio):  # type: ignore[union-attr]
            return None
        if done.completion_ratio < threshold:  # type: ignore[union-attr,operator]
            return None
        return {
            "goal_id": goal.id,
            "user_id": goal.user_id,
            "username": ds.username(goal.user_id),
            "target_loss": done.target_loss,  # type: ignore[union-attr]
            "achieved_loss": done.achieved_loss,  # type: ignore[union-attr]
            "completion_percentage": done.completion_percentage,  # type: ignore[union-attr]
        }

    result.collect([g for g in ds.goals if g.goal_type == WEIGHT_LOSS], _row)
    return result


def workout_weight_loss_correlation(ds: ProgressDataset) -> ReportResult:
    result = ReportResult("workout_weight_loss_correlation")
    points: list[gp.WorkoutLossPoint] = []

    def _row(goal: Goal) -> dict[str, Any] | None:
        ref = gp.baseline_for(goal, ds.biometrics_by_user.get(goal.user_id, []))
        point = gp.workout_loss_point(goal, ref, ds.workouts_by_user.get(goal.user_id, []))
        if is_undefined(point):
            return None
        points.append(point)  # type: ignore[arg-type]
        return {
            "goal_id": point.goal_id,  # type: ignore[union-attr]
            "user_id": point.user_id,  # type: ignore[union-attr]
            "username": ds.username(point.user_id),  # type: ignore[union-attr]
            "total_workouts": point.total_workouts,  # type: ignore[union-attr]
            "workouts_per_week": point.workouts_per_week,  # type: ignore[union-attr]
            "weight_loss": point.weight_loss,  # type: ignore[union-attr]
        }

    result.collect([g for g in ds.goals if g.goal_type == WEIGHT_LOSS], _row)
    r = gp.pearson(points)
    result.summary = {"pearson_r": r, "pearson_undefined_reason": _reason(r), "points": len(points)}
    return result


# ──────────────────────────────────────────────────────────────────────
#  Everything at once
# ──────────────────────────────────────────────────────────────────────
def run_all(ds: ProgressDataset, as_of: date, cfg: Any) -> dict[str, ReportResult]:
    """
    Every population-level report.  `cfg` carries the thresholds
    (normally `config.settings`).
    """
    reports = [
        user_age_bmi(ds, as_of),
        gender_distribution(ds),
        heart_rate_drops(ds, cfg.hr_min_span_days, cfg.hr_min_drop_bpm),
        body_fat_by_gender(ds),
        popular_exercises(ds, cfg.top_n),
        consistent_users(ds, cfg.consistency_min_per_week, cfg.consistency_min_weeks),
        strength_progression(ds),
        running_improvement(ds, cfg.running_min_span_days, cfg.running_min_percent),
        popular_foods(ds, cfg.top_n),
        average_daily_calories(ds),
        active_goal_progress(ds),
        weight_loss_achievers(ds, cfg.weight_loss_min_percent),
        workout_weight_loss_correlation(ds),
    ]
    failed = sum(len(r.errors) for r in reports)
    _LOG.info("ran %d report(s), %d subject error(s)", len(reports), failed)
    return {r.name: r for r in reports}
