from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class ExerciseType(BaseModel):
    id: int
    name: str
    category: str              # Cardio / Strength / Flexibility / …
    description: str | None = None
    calories_burned_per_min: Decimal | None = None

    model_config = ConfigDict(frozen=True, from_attributes=True)


class WorkoutExercise(BaseModel):
    """
    Only one group of fields is meaningful per exercise category:
    sets+reps+weight (Strength), duration (Cardio/Flexibility), distance.
    """

    id: int
    workout_id: int
    exercise_type_id: int
    sets: int | None = None
    reps: int | None = None
    weight_kg: Decimal | None = None
    duration_minutes: Decimal | None = None
    distance_km: Decimal | None = None

    model_config = ConfigDict(frozen=True, from_attributes=True)


class Workout(BaseModel):
    id: int
    user_id: int
    workout_date: date
    start_time: time | None = None
    end_time: time | None = None
    total_calories_burned: Decimal | None = None
    perceived_exertion: Decimal | None = None
    exercises: tuple[WorkoutExercise, ...] = ()

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @property
    def duration_minutes(self) -> int | None:
        if self.start_time is None or self.end_time is None:
            return None
        start = datetime.combine(self.workout_date, self.start_time)
        end = datetime.combine(self.workout_date, self.end_time)
        if end < start:  # finished after midnight
            end += timedelta(days=1)
        return int((end - start).total_seconds() // 60)
