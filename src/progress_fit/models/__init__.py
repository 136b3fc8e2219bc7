"""Data models for progress-fit."""

from .exercise import Exercise, ExerciseType
from .exercise_set import ExerciseSet
from .nutrition import LogMethod, MealType, NutritionEntry
from .nutrition_metric import NutritionCategory, NutritionMetricType
from .preferences import Preferences, WorkoutSortOption
from .user_profile import FitnessGoal, FitnessLevel, UserProfile
from .workout import TransitionResult, Workout, WorkoutStatus

__all__ = [
    "Exercise",
    "ExerciseSet",
    "ExerciseType",
    "FitnessGoal",
    "FitnessLevel",
    "LogMethod",
    "MealType",
    "NutritionCategory",
    "NutritionEntry",
    "NutritionMetricType",
    "Preferences",
    "TransitionResult",
    "UserProfile",
    "Workout",
    "WorkoutSortOption",
    "WorkoutStatus",
]
