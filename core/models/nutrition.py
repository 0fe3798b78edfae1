from __future__ import annotations

from datetime import date, time
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class FoodItem(BaseModel):
    """Nutritional profile of a single serving."""

    id: int
    name: str
    brand: str | None = None
    serving_size: str | None = None
    calories_per_serving: Decimal = Decimal("0")
    protein_g: Decimal = Decimal("0")
    carbs_g: Decimal = Decimal("0")
    fats_g: Decimal = Decimal("0")

    model_config = ConfigDict(frozen=True, from_attributes=True)


class MealFood(BaseModel):
    id: int
    meal_id: int
    food_id: int
    servings: Decimal = Decimal("1")

    model_config = ConfigDict(frozen=True, from_attributes=True)


class Meal(BaseModel):
    id: int
    user_id: int
    meal_date: date
    meal_time: time | None = None
    meal_type: str             # Breakfast / Lunch / Dinner / Snack
    total_calories: Decimal | None = None
    protein_g: Decimal | None = None
    carbs_g: Decimal | None = None
    fats_g: Decimal | None = None
    foods: tuple[MealFood, ...] = ()

    model_config = ConfigDict(frozen=True, from_attributes=True)
