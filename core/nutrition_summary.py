"""
core/nutrition_summary.py
────────────────────────────────────────────────────────────────────────
Meal-side aggregates:

* per-meal macro totals rebuilt from its MealFood rows
* per-meal macro breakdown (share of calories from protein / carbs / fat)
* per-day totals and the average daily calorie intake per user
* most consumed food items

Amounts stay `Decimal` end to end; pandas is only used for the grouping
so per-day totals never pick up binary float drift.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

import pandas as pd

from core.common import MISSING_VALUE, Metric, percent, round2
from core.errors import MalformedRecord
from core.models import FoodItem, Meal
from core.workout_stats import Frequency, most_frequent

_LOG = logging.getLogger(__name__)

# kcal per gram
_KCAL = {"protein_g": 4, "carbs_g": 4, "fats_g": 9}
TRACKED = ["total_calories", "protein_g", "carbs_g", "fats_g"]


@dataclass(frozen=True)
class MealTotals:
    total_calories: Decimal
    protein_g: Decimal
    carbs_g: Decimal
    fats_g: Decimal


def meal_totals_from_foods(meal: Meal, foods: Mapping[int, FoodItem]) -> MealTotals:
    """Σ servings × per-serving values over the meal's food rows."""
    kcal = prot = carbs = fats = Decimal(0)
    for mf in meal.foods:
        item = foods.get(mf.food_id)
        if item is None:
            raise MalformedRecord(f"meal {meal.id} references unknown food {mf.food_id}")
        kcal += mf.servings * item.calories_per_serving
        prot += mf.servings * item.protein_g
        carbs += mf.servings * item.carbs_g
        fats += mf.servings * item.fats_g
    return MealTotals(round2(kcal), round2(prot), round2(carbs), round2(fats))


# ──────────────────────────── breakdown ─────────────────────────── #
@dataclass(frozen=True)
class MealBreakdown:
    meal_id: int
    meal_date: date
    meal_time: time | None
    meal_type: str
    total_calories: Decimal | None
    protein_g: Decimal | None
    carbs_g: Decimal | None
    fats_g: Decimal | None
    protein_pct: Metric
    carbs_pct: Metric
    fats_pct: Metric


def _share(grams: Decimal | None, macro: str, kcal: Decimal | None) -> Metric:
    if grams is None:
        return MISSING_VALUE
    return percent(grams * _KCAL[macro], kcal)


def meal_breakdown(
    meals: Iterable[Meal], foods: Mapping[int, FoodItem] | None = None
) -> list[MealBreakdown]:
    """
    Meals in date/time order with their macro split.  When a meal has no
    stored totals and `foods` is given, totals are rebuilt from its foods.
    """
    out: list[MealBreakdown] = []
    ordered = sorted(meals, key=lambda m: (m.meal_date, m.meal_time or time.min, m.id))
    for m in ordered:
        kcal, prot, carbs, fats = m.total_calories, m.protein_g, m.carbs_g, m.fats_g
        if kcal is None and foods is not None and m.foods:
            t = meal_totals_from_foods(m, foods)
            kcal, prot, carbs, fats = t.total_calories, t.protein_g, t.carbs_g, t.fats_g
        out.append(
            MealBreakdown(
                meal_id=m.id,
                meal_date=m.meal_date,
                meal_time=m.meal_time,
                meal_type=m.meal_type,
                total_calories=kcal,
                protein_g=prot,
                carbs_g=carbs,
                fats_g=fats,
                protein_pct=_share(prot, "protein_g", kcal),
                carbs_pct=_share(carbs, "carbs_g", kcal),
                fats_pct=_share(fats, "fats_g", kcal),
            )
        )
    return out


# ──────────────────────────── daily totals ───────────────────────── #
def _decimal_sum(col: pd.Series) -> Decimal | None:
    """SUM() semantics: NULLs skipped, all-NULL → NULL."""
    values = [v for v in col if v is not None and not pd.isna(v)]
    if not values:
        return None
    return sum(values, Decimal(0))


def daily_totals(meals: Sequence[Meal]) -> pd.DataFrame:
    """One row per (user_id, meal_date) with the summed macro columns."""
    if not meals:
        return pd.DataFrame(columns=TRACKED, index=pd.MultiIndex.from_tuples(
            [], names=["user_id", "meal_date"]))

    df = pd.DataFrame(
        [{"user_id": m.user_id, "meal_date": m.meal_date, **{k: getattr(m, k) for k in TRACKED}}
         for m in meals]
    ).astype({k: object for k in TRACKED})
    return df.groupby(["user_id", "meal_date"])[TRACKED].agg(_decimal_sum)


def average_daily_calories(meals: Sequence[Meal]) -> list[tuple[int, Decimal]]:
    """
    Mean of the per-day calorie totals for each user, highest first
    (user id breaks ties).  Days without any calorie figure are ignored.
    """
    daily = daily_totals(meals)
    averages: list[tuple[int, Decimal]] = []
    for user_id, day_totals in daily.groupby(level="user_id")["total_calories"]:
        values = [v for v in day_totals if v is not None and not pd.isna(v)]
        if not values:
            continue
        averages.append((int(user_id), round2(sum(values, Decimal(0)) / len(values))))
    averages.sort(key=lambda kv: (-kv[1], kv[0]))
    _LOG.debug("average daily calories computed for %d user(s)", len(averages))
    return averages


# ──────────────────────────── popularity ─────────────────────────── #
def food_frequency(
    meals: Iterable[Meal], foods: Mapping[int, FoodItem], top_n: int | None = None
) -> list[Frequency]:
    """How often each (name, brand) appears across all meal food rows."""
    rows = []
    for m in meals:
        for mf in m.foods:
            item = foods.get(mf.food_id)
            if item is None:
                raise MalformedRecord(f"meal {m.id} references unknown food {mf.food_id}")
            rows.append(item)
    return most_frequent(rows, key_fn=lambda f: (f.name, f.brand), top_n=top_n)
