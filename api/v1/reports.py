# api/v1/reports.py
from __future__ import annotations

from datetime import date
from typing import Any, Callable

from fastapi import APIRouter, Depends, HTTPException, status

from config import settings
from core import reports
from core.reports import ProgressDataset, ReportResult
from api.v1.deps import get_dataset, get_user_dataset
from api.v1.schemas import ReportOut

router = APIRouter()

# report name → how to run it with the configured thresholds
_POPULATION: dict[str, Callable[[ProgressDataset, date], ReportResult]] = {
    "age-bmi": lambda ds, as_of: reports.user_age_bmi(ds, as_of),
    "gender-distribution": lambda ds, _: reports.gender_distribution(ds),
    "heart-rate-drops": lambda ds, _: reports.heart_rate_drops(
        ds, settings.hr_min_span_days, settings.hr_min_drop_bpm),
    "body-fat": lambda ds, _: reports.body_fat_by_gender(ds),
    "popular-exercises": lambda ds, _: reports.popular_exercises(ds, settings.top_n),
    "consistent-users": lambda ds, _: reports.consistent_users(
        ds, settings.consistency_min_per_week, settings.consistency_min_weeks),
    "strength-progression": lambda ds, _: reports.strength_progression(ds),
    "running-improvement": lambda ds, _: reports.running_improvement(
        ds, settings.running_min_span_days, settings.running_min_percent),
    "popular-foods": lambda ds, _: reports.popular_foods(ds, settings.top_n),
    "daily-calories": lambda ds, _: reports.average_daily_calories(ds),
    "goal-progress": lambda ds, _: reports.active_goal_progress(ds),
    "weight-loss-achievers": lambda ds, _: reports.weight_loss_achievers(
        ds, settings.weight_loss_min_percent),
    "workout-weight-loss": lambda ds, _: reports.workout_weight_loss_correlation(ds),
}


@router.get("", summary="Names of the population reports")
async def list_reports() -> dict[str, list[str]]:
    return {"reports": sorted(_POPULATION)}


@router.get("/{name}", response_model=ReportOut, status_code=status.HTTP_200_OK)
async def run_report(
    name: str,
    as_of: date | None = None,
    ds: ProgressDataset = Depends(get_dataset),
) -> ReportOut:
    runner = _POPULATION.get(name)
    if runner is None:
        raise HTTPException(status_code=404, detail=f"Unknown report {name!r}")
    return ReportOut.from_result(runner(ds, as_of or date.today()))


# ───────────────────────── per user ─────────────────────────
def _require_user(ds: ProgressDataset, user_id: int) -> None:
    if user_id not in ds.users_by_id:
        raise HTTPException(status_code=404, detail="User not found")


@router.get("/users/{user_id}/weight-trend", response_model=ReportOut)
async def weight_trend(
    user_id: int,
    ds: ProgressDataset = Depends(get_user_dataset),
) -> Any:
    _require_user(ds, user_id)
    return ReportOut.from_result(reports.weight_trend(ds, user_id))


@router.get("/users/{user_id}/meals", response_model=ReportOut)
async def meal_breakdown(
    user_id: int,
    ds: ProgressDataset = Depends(get_user_dataset),
) -> Any:
    _require_user(ds, user_id)
    return ReportOut.from_result(reports.meal_breakdown(ds, user_id))
