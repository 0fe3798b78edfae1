"""Re-export the entity records for easy imports."""

from .user import User
from .biometric import BiometricRecord
from .workout import ExerciseType, Workout, WorkoutExercise
from .nutrition import FoodItem, Meal, MealFood
from .goal import ENDURANCE, MUSCLE_GAIN, WEIGHT_LOSS, Goal

__all__ = [
    "User",
    "BiometricRecord",
    "ExerciseType",
    "Workout",
    "WorkoutExercise",
    "FoodItem",
    "Meal",
    "MealFood",
    "Goal",
    "WEIGHT_LOSS",
    "MUSCLE_GAIN",
    "ENDURANCE",
]
