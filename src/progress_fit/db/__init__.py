"""Database layer for progress-fit."""

from .engine import get_data_dir, get_db_path, init_db
from .repositories import (
    NutritionEntryRepository,
    PreferencesRepository,
    UserProfileRepository,
    WorkoutRepository,
)

__all__ = [
    "get_data_dir",
    "get_db_path",
    "init_db",
    "NutritionEntryRepository",
    "PreferencesRepository",
    "UserProfileRepository",
    "WorkoutRepository",
]
