"""
The demo rows the project ships with: three users, a fortnight of
biometrics, a handful of workouts, meals and goals.  Used by
`scripts.seed_demo` and by the test-suite.
"""
from __future__ import annotations

from datetime import date, time
from decimal import Decimal as D

from core.models import (
    BiometricRecord,
    ExerciseType,
    FoodItem,
    Goal,
    Meal,
    MealFood,
    User,
    Workout,
    WorkoutExercise,
)
from core.reports import ProgressDataset

USERS = (
    User(id=1, username="johndoe", email="john@example.com", first_name="John",
         last_name="Doe", birth_date=date(1990, 5, 15), gender="Male", height_cm=D("175.26")),
    User(id=2, username="fitjane", email="jane@example.com", first_name="Jane",
         last_name="Smith", birth_date=date(1995, 8, 22), gender="Female", height_cm=D("165.10")),
    User(id=3, username="mikefit", email="mike@example.com", first_name="Michael",
         last_name="Johnson", birth_date=date(1988, 3, 10), gender="Male", height_cm=D("182.88")),
)

BIOMETRICS = (
    BiometricRecord(id=1, user_id=1, record_date=date(2023, 10, 1), weight_kg=D("78.5"),
                    body_fat_percent=D("18.2"), muscle_mass_kg=D("35.2"), resting_heart_rate=D("62")),
    BiometricRecord(id=2, user_id=1, record_date=date(2023, 10, 15), weight_kg=D("77.8"),
                    body_fat_percent=D("17.8"), muscle_mass_kg=D("35.5"), resting_heart_rate=D("60")),
    BiometricRecord(id=3, user_id=2, record_date=date(2023, 10, 1), weight_kg=D("62.3"),
                    body_fat_percent=D("22.5"), muscle_mass_kg=D("27.1"), resting_heart_rate=D("68")),
    BiometricRecord(id=4, user_id=3, record_date=date(2023, 10, 1), weight_kg=D("85.2"),
                    body_fat_percent=D("15.8"), muscle_mass_kg=D("40.1"), resting_heart_rate=D("58")),
)

EXERCISE_TYPES = (
    ExerciseType(id=1, name="Running", category="Cardio",
                 description="Outdoor or treadmill running", calories_burned_per_min=D("10.5")),
    ExerciseType(id=2, name="Deadlift", category="Strength",
                 description="Barbell deadlift", calories_burned_per_min=D("5.2")),
    ExerciseType(id=3, name="Push-ups", category="Strength",
                 description="Bodyweight push-ups", calories_burned_per_min=D("4.8")),
    ExerciseType(id=4, name="Yoga", category="Flexibility",
                 description="Hatha yoga session", calories_burned_per_min=D("3.5")),
    ExerciseType(id=5, name="Cycling", category="Cardio",
                 description="Stationary or outdoor cycling", calories_burned_per_min=D("8.7")),
)

WORKOUTS = (
    Workout(id=1, user_id=1, workout_date=date(2023, 10, 2), start_time=time(7, 30),
            end_time=time(8, 30), total_calories_burned=D("450"), perceived_exertion=D("7"),
            exercises=(
                WorkoutExercise(id=1, workout_id=1, exercise_type_id=1,
                                duration_minutes=D("30"), distance_km=D("315")),
                WorkoutExercise(id=2, workout_id=1, exercise_type_id=5,
                                duration_minutes=D("30"), distance_km=D("261")),
            )),
    Workout(id=2, user_id=1, workout_date=date(2023, 10, 4), start_time=time(18, 0),
            end_time=time(19, 15), total_calories_burned=D("520"), perceived_exertion=D("8"),
            exercises=(
                WorkoutExercise(id=3, workout_id=2, exercise_type_id=2, sets=5, reps=8,
                                weight_kg=D("70.0"), distance_km=D("260")),
                WorkoutExercise(id=4, workout_id=2, exercise_type_id=3, sets=4, reps=15,
                                distance_km=D("115")),
            )),
    Workout(id=3, user_id=2, workout_date=date(2023, 10, 3), start_time=time(6, 45),
            end_time=time(7, 30), total_calories_burned=D("320"), perceived_exertion=D("6"),
            exercises=(
                WorkoutExercise(id=5, workout_id=3, exercise_type_id=4,
                                duration_minutes=D("45"), distance_km=D("157")),
            )),
    Workout(id=4, user_id=3, workout_date=date(2023, 10, 2), start_time=time(12, 0),
            end_time=time(13, 0), total_calories_burned=D("600"), perceived_exertion=D("9"),
            exercises=(
                WorkoutExercise(id=6, workout_id=4, exercise_type_id=1,
                                duration_minutes=D("60"), distance_km=D("630")),
            )),
)

FOOD_ITEMS = (
    FoodItem(id=1, name="Chicken Breast", brand=None, serving_size="100g",
             calories_per_serving=D("165"), protein_g=D("31.0"), carbs_g=D("0.0"), fats_g=D("3.6")),
    FoodItem(id=2, name="Brown Rice", brand="Uncle Ben's", serving_size="1 cup cooked",
             calories_per_serving=D("215"), protein_g=D("5.0"), carbs_g=D("45.0"), fats_g=D("1.8")),
    FoodItem(id=3, name="Almonds", brand="Blue Diamond", serving_size="1 oz (28g)",
             calories_per_serving=D("164"), protein_g=D("6.0"), carbs_g=D("6.0"), fats_g=D("14.0")),
    FoodItem(id=4, name="Protein Powder", brand="Optimum Nutrition", serving_size="1 scoop (32g)",
             calories_per_serving=D("120"), protein_g=D("24.0"), carbs_g=D("3.0"), fats_g=D("1.0")),
)

MEALS = (
    Meal(id=1, user_id=1, meal_date=date(2023, 10, 2), meal_time=time(8, 45), meal_type="Breakfast",
         total_calories=D("420"), protein_g=D("32"), carbs_g=D("45"), fats_g=D("12"),
         foods=(MealFood(id=1, meal_id=1, food_id=4, servings=D("1.5")),
                MealFood(id=2, meal_id=1, food_id=3, servings=D("0.5")))),
    Meal(id=2, user_id=1, meal_date=date(2023, 10, 2), meal_time=time(13, 0), meal_type="Lunch",
         total_calories=D("550"), protein_g=D("40"), carbs_g=D("60"), fats_g=D("15"),
         foods=(MealFood(id=3, meal_id=2, food_id=1, servings=D("2.0")),
                MealFood(id=4, meal_id=2, food_id=2, servings=D("1.0")))),
    Meal(id=3, user_id=2, meal_date=date(2023, 10, 3), meal_time=time(7, 30), meal_type="Breakfast",
         total_calories=D("380"), protein_g=D("25"), carbs_g=D("40"), fats_g=D("10"),
         foods=(MealFood(id=5, meal_id=3, food_id=4, servings=D("1.0")),
                MealFood(id=6, meal_id=3, food_id=3, servings=D("0.3")))),
)

GOALS = (
    Goal(id=1, user_id=1, goal_type="Weight Loss", target_value=D("75.0"),
         target_date=date(2023, 12, 31), current_value=D("78.5"), start_date=date(2023, 10, 1)),
    Goal(id=2, user_id=1, goal_type="Muscle Gain", target_value=D("38.0"),
         target_date=date(2024, 3, 1), current_value=D("35.5"), start_date=date(2023, 10, 1)),
    Goal(id=3, user_id=2, goal_type="Endurance", target_value=D("45.0"),
         target_date=date(2024, 1, 1), current_value=D("30.0"), start_date=date(2023, 9, 15)),
    Goal(id=4, user_id=3, goal_type="Event Training", target_value=None,
         target_date=date(2023, 11, 15), current_value=None, start_date=date(2023, 10, 1)),
)


def demo_dataset() -> ProgressDataset:
    return ProgressDataset(
        users=USERS,
        biometrics=BIOMETRICS,
        exercise_types=EXERCISE_TYPES,
        workouts=WORKOUTS,
        food_items=FOOD_ITEMS,
        meals=MEALS,
        goals=GOALS,
    )
