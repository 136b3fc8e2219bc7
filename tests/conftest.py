"""Pytest configuration and fixtures."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio

from progress_fit.clock import FixedClock
from progress_fit.db.engine import init_db
from progress_fit.errors import PersistenceError
from progress_fit.models.exercise import Exercise, ExerciseType
from progress_fit.models.exercise_set import ExerciseSet
from progress_fit.models.nutrition import MealType, NutritionEntry
from progress_fit.models.nutrition_metric import NutritionMetricType
from progress_fit.models.workout import Workout

NOON = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


class InMemoryWorkoutRepository:
    """Stores serialized workouts, so every get returns a fresh copy.

    Set ``fail_saves`` or ``fail_deletes`` to make the next calls raise
    PersistenceError.
    """

    def __init__(self):
        self.rows: dict[str, dict] = {}
        self.fail_saves = False
        self.fail_deletes = False
        self.save_calls = 0

    async def save(self, workout: Workout) -> None:
        self.save_calls += 1
        if self.fail_saves:
            raise PersistenceError("disk full")
        self.rows[workout.id] = workout.to_dict()

    async def get(self, workout_id: str) -> Workout | None:
        data = self.rows.get(workout_id)
        return Workout.from_dict(data) if data else None

    async def list_all(self, profile_id=None, include_templates=True) -> list[Workout]:
        workouts = [Workout.from_dict(d) for d in self.rows.values()]
        if profile_id is not None:
            workouts = [w for w in workouts if w.profile_id == profile_id]
        if not include_templates:
            workouts = [w for w in workouts if not w.is_template]
        return workouts

    async def delete(self, workout_id: str) -> bool:
        if self.fail_deletes:
            raise PersistenceError("database is locked")
        return self.rows.pop(workout_id, None) is not None


class InMemoryNutritionRepository:
    """Nutrition counterpart of InMemoryWorkoutRepository."""

    def __init__(self):
        self.rows: dict[str, dict] = {}
        self.fail_saves = False
        self.fail_deletes = False

    async def save(self, entry: NutritionEntry) -> None:
        if self.fail_saves:
            raise PersistenceError("disk full")
        self.rows[entry.id] = entry.to_dict()

    async def get(self, entry_id: str) -> NutritionEntry | None:
        data = self.rows.get(entry_id)
        return NutritionEntry.from_dict(data) if data else None

    async def list_between(self, start, end, profile_id=None) -> list[NutritionEntry]:
        entries = [NutritionEntry.from_dict(d) for d in self.rows.values()]
        return sorted(
            (
                e for e in entries
                if start.timestamp() <= e.logged_at.timestamp() < end.timestamp()
                and (profile_id is None or e.profile_id == profile_id)
            ),
            key=lambda e: e.logged_at,
        )

    async def list_favorites(self, profile_id=None) -> list[NutritionEntry]:
        return [
            NutritionEntry.from_dict(d)
            for d in self.rows.values()
            if d["is_favorite"] and (profile_id is None or d["profile_id"] == profile_id)
        ]

    async def delete(self, entry_id: str) -> bool:
        if self.fail_deletes:
            raise PersistenceError("database is locked")
        return self.rows.pop(entry_id, None) is not None


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest_asyncio.fixture
async def db_path(temp_db_path):
    """A temporary database with the schema created."""
    await init_db(temp_db_path)
    return temp_db_path


@pytest.fixture
def clock():
    """A clock pinned to 2024-03-15 12:00 UTC."""
    return FixedClock(NOON)


@pytest.fixture
def workout_repo():
    return InMemoryWorkoutRepository()


@pytest.fixture
def nutrition_repo():
    return InMemoryNutritionRepository()


@pytest.fixture
def sample_workout():
    """A planned workout with one resistance and one cardio exercise."""
    bench = Exercise(
        name="Bench Press",
        type=ExerciseType.RESISTANCE,
        category="Chest",
        rest_time=90,
        sets=[ExerciseSet(weight=10, reps=5), ExerciseSet(weight=20, reps=3)],
    )
    run = Exercise(
        name="Treadmill",
        type=ExerciseType.CARDIO,
        sets=[ExerciseSet(duration=600, distance=1.5)],
    )
    return Workout(name="Push Day", notes="Heavy week", exercises=[bench, run])


@pytest.fixture
def sample_entry():
    """A verified lunch entry with a couple of extended nutrients."""
    return NutritionEntry(
        food_name="Chicken Breast",
        brand_name="Farm Fresh",
        serving_size="100g",
        quantity=1.5,
        calories=165,
        protein=31,
        carbohydrates=0,
        fat=3.6,
        sodium=74,
        extended_nutrients={
            NutritionMetricType.ZINC: 1.0,
            NutritionMetricType.CHOLESTEROL: 85,
        },
        meal_type=MealType.LUNCH,
        is_verified=True,
        logged_at=NOON,
    )
