"""
services/db.py
────────────────────────────────────────────────────────────────────────
* Async SQLAlchemy v2 setup
* Models that map to the nine progress-tracking tables
* `load_dataset()` – the read side the report layer depends on
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import date, time
from decimal import Decimal
from typing import AsyncGenerator, AsyncIterator, List

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
    select,
)
from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, relationship, selectinload

from config import settings
from core import models
from core.reports import ProgressDataset

_LOG = logging.getLogger(__name__)

# ───────── connection helper ────────────────────────────────────────
_ENGINE: AsyncEngine | None = None


def _create_engine() -> AsyncEngine:
    if not settings.database_url:
        raise RuntimeError("Set the DATABASE_URL env var")
    return create_async_engine(settings.database_url, pool_pre_ping=True, echo=settings.sql_echo)


async def engine() -> AsyncEngine:
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = _create_engine()
    return _ENGINE


# ───────── declarative base ──────────────────────────────────────────
Base = declarative_base(cls=AsyncAttrs)

# fixed-point, two fraction digits
Money = Numeric(10, 2)

# ───────── models keep the original column names ────────────────────


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column("user_id", Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(100))
    email: Mapped[str | None] = mapped_column(String(255))
    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    birth_date: Mapped[date | None] = mapped_column(Date)
    gender: Mapped[str | None] = mapped_column(String(20))
    height_cm: Mapped[Decimal | None] = mapped_column(Money)


class Biometric(Base):
    __tablename__ = "biometrics"
    __table_args__ = (UniqueConstraint("user_id", "record_date"),)

    id: Mapped[int] = mapped_column("biometric_id", Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.user_id"), index=True)
    record_date: Mapped[date] = mapped_column(Date)
    weight_kg: Mapped[Decimal | None] = mapped_column(Money)
    body_fat_percent: Mapped[Decimal | None] = mapped_column(Money)
    muscle_mass_kg: Mapped[Decimal | None] = mapped_column(Money)
    resting_heart_rate: Mapped[Decimal | None] = mapped_column(Money)


class ExerciseType(Base):
    __tablename__ = "exercise_types"

    id: Mapped[int] = mapped_column("exercise_type_id", Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    category: Mapped[str] = mapped_column(String(50))
    description: Mapped[str | None] = mapped_column(Text)
    calories_burned_per_min: Mapped[Decimal | None] = mapped_column(Money)


class Workout(Base):
    __tablename__ = "workouts"

    id: Mapped[int] = mapped_column("workout_id", Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.user_id"), index=True)
    workout_date: Mapped[date] = mapped_column(Date)
    start_time: Mapped[time | None] = mapped_column(Time)
    end_time: Mapped[time | None] = mapped_column(Time)
    notes: Mapped[str | None] = mapped_column(Text)
    total_calories_burned: Mapped[Decimal | None] = mapped_column(Money)
    perceived_exertion: Mapped[Decimal | None] = mapped_column(Money)

    exercises: Mapped[List["WorkoutExercise"]] = relationship(
        order_by="WorkoutExercise.id", lazy="raise"
    )


class WorkoutExercise(Base):
    __tablename__ = "workout_exercises"

    id: Mapped[int] = mapped_column("workout_exercise_id", Integer, primary_key=True)
    workout_id: Mapped[int] = mapped_column(ForeignKey("workouts.workout_id"), index=True)
    exercise_type_id: Mapped[int] = mapped_column(ForeignKey("exercise_types.exercise_type_id"))
    sets: Mapped[int | None] = mapped_column(Integer)
    reps: Mapped[int | None] = mapped_column(Integer)
    weight_kg: Mapped[Decimal | None] = mapped_column(Money)
    duration_minutes: Mapped[Decimal | None] = mapped_column(Money)
    distance_km: Mapped[Decimal | None] = mapped_column(Money)
    calories_burned: Mapped[Decimal | None] = mapped_column(Money)


class FoodItem(Base):
    __tablename__ = "food_items"

    id: Mapped[int] = mapped_column("food_id", Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    brand: Mapped[str | None] = mapped_column(String(200))
    serving_size: Mapped[str | None] = mapped_column(String(100))
    calories_per_serving: Mapped[Decimal] = mapped_column(Money, default=0)
    protein_g: Mapped[Decimal] = mapped_column(Money, default=0)
    carbs_g: Mapped[Decimal] = mapped_column(Money, default=0)
    fats_g: Mapped[Decimal] = mapped_column(Money, default=0)


class Meal(Base):
    __tablename__ = "meals"

    id: Mapped[int] = mapped_column("meal_id", Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.user_id"), index=True)
    meal_date: Mapped[date] = mapped_column(Date)
    meal_time: Mapped[time | None] = mapped_column(Time)
    meal_type: Mapped[str] = mapped_column(String(30))
    total_calories: Mapped[Decimal | None] = mapped_column(Money)
    protein_g: Mapped[Decimal | None] = mapped_column(Money)
    carbs_g: Mapped[Decimal | None] = mapped_column(Money)
    fats_g: Mapped[Decimal | None] = mapped_column(Money)
    notes: Mapped[str | None] = mapped_column(Text)

    foods: Mapped[List["MealFood"]] = relationship(order_by="MealFood.id", lazy="raise")


class MealFood(Base):
    __tablename__ = "meal_foods"

    id: Mapped[int] = mapped_column("meal_food_id", Integer, primary_key=True)
    meal_id: Mapped[int] = mapped_column(ForeignKey("meals.meal_id"), index=True)
    food_id: Mapped[int] = mapped_column(ForeignKey("food_items.food_id"))
    servings: Mapped[Decimal] = mapped_column(Money, default=1)


class Goal(Base):
    __tablename__ = "goals"

    id: Mapped[int] = mapped_column("goal_id", Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.user_id"), index=True)
    goal_type: Mapped[str] = mapped_column(String(50))
    target_value: Mapped[Decimal | None] = mapped_column(Money)
    target_date: Mapped[date] = mapped_column(Date)
    current_value: Mapped[Decimal | None] = mapped_column(Money)
    start_date: Mapped[date] = mapped_column(Date)
    is_completed: Mapped[bool | None] = mapped_column(Boolean)
    notes: Mapped[str | None] = mapped_column(Text)


# ───────── schema helper ─────────────────────────────────────────────

async def create_tables(eng: AsyncEngine | None = None) -> None:
    eng = eng or await engine()
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ───────── read side ─────────────────────────────────────────────────

async def load_dataset(db: AsyncSession, user_id: int | None = None) -> ProgressDataset:
    """
    Fetch everything the reports need, as immutable core models.
    With `user_id`, only that user's rows (plus every exercise type and
    food item) are loaded.
    """
    def _own(stmt, col):
        return stmt if user_id is None else stmt.where(col == user_id)

    users = await db.scalars(_own(select(User).order_by(User.id), User.id))
    bios = await db.scalars(
        _own(select(Biometric), Biometric.user_id)
        .order_by(Biometric.user_id, Biometric.record_date, Biometric.id)
    )
    types = await db.scalars(select(ExerciseType).order_by(ExerciseType.id))
    workouts = await db.scalars(
        _own(select(Workout), Workout.user_id)
        .options(selectinload(Workout.exercises))
        .order_by(Workout.user_id, Workout.workout_date, Workout.id)
    )
    foods = await db.scalars(select(FoodItem).order_by(FoodItem.id))
    meals = await db.scalars(
        _own(select(Meal), Meal.user_id)
        .options(selectinload(Meal.foods))
        .order_by(Meal.user_id, Meal.meal_date, Meal.meal_time, Meal.id)
    )
    goals = await db.scalars(_own(select(Goal).order_by(Goal.id), Goal.user_id))

    ds = ProgressDataset(
        users=tuple(models.User.model_validate(u) for u in users),
        biometrics=tuple(models.BiometricRecord.model_validate(b) for b in bios),
        exercise_types=tuple(models.ExerciseType.model_validate(t) for t in types),
        workouts=tuple(models.Workout.model_validate(w) for w in workouts),
        food_items=tuple(models.FoodItem.model_validate(f) for f in foods),
        meals=tuple(models.Meal.model_validate(m) for m in meals),
        goals=tuple(models.Goal.model_validate(g) for g in goals),
    )
    _LOG.debug(
        "loaded dataset: %d user(s), %d biometric(s), %d workout(s), %d meal(s), %d goal(s)",
        len(ds.users), len(ds.biometrics), len(ds.workouts), len(ds.meals), len(ds.goals),
    )
    return ds


# ───────── session helper ────────────────────────────────────────────

@asynccontextmanager
async def session_scope(eng: AsyncEngine | None = None) -> AsyncIterator[AsyncSession]:
    eng = eng or await engine()
    async_session = async_sessionmaker(eng, expire_on_commit=False)
    async with async_session() as session:
        yield session


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with session_scope() as session:
        yield session
