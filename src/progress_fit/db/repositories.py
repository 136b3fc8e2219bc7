"""Data access layer for progress-fit."""

import json
import logging
from datetime import datetime
from pathlib import Path

import aiosqlite

from ..models.exercise import Exercise
from ..models.exercise_set import ExerciseSet
from ..models.nutrition import NutritionEntry
from ..models.preferences import Preferences
from ..models.user_profile import UserProfile
from ..models.workout import Workout
from .engine import connect, get_db_path

logger = logging.getLogger(__name__)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_timestamp(value: str | None) -> datetime | None:
    # SQLite CURRENT_TIMESTAMP uses a space separator, which fromisoformat accepts
    return datetime.fromisoformat(value) if value else None


class UserProfileRepository:
    """Repository for user profiles."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, profile: UserProfile) -> int:
        """Create a new user profile."""
        data = profile.to_dict()
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO user_profiles
                (name, email, age, fitness_goal, fitness_level,
                 subscription_tier, preferred_units)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    data["name"],
                    data["email"],
                    data["age"],
                    data["fitness_goal"],
                    data["fitness_level"],
                    data["subscription_tier"],
                    data["preferred_units"],
                ),
            )
            await db.commit()
            profile.id = cursor.lastrowid
            return cursor.lastrowid

    async def get(self, profile_id: int) -> UserProfile | None:
        """Get a user profile by ID."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM user_profiles WHERE id = ?", (profile_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_profile(row)

    async def get_latest(self) -> UserProfile | None:
        """Get the most recently created/updated profile."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM user_profiles ORDER BY updated_at DESC, id DESC LIMIT 1"
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_profile(row)

    async def list_all(self) -> list[UserProfile]:
        """List all user profiles."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM user_profiles ORDER BY updated_at DESC, id DESC"
            )
            rows = await cursor.fetchall()
            return [self._row_to_profile(row) for row in rows]

    async def update(self, profile: UserProfile) -> None:
        """Update an existing profile."""
        if profile.id is None:
            raise ValueError("Profile must have an ID to update")

        data = profile.to_dict()
        async with connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE user_profiles SET
                    name = ?, email = ?, age = ?, fitness_goal = ?, fitness_level = ?,
                    subscription_tier = ?, preferred_units = ?,
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (
                    data["name"],
                    data["email"],
                    data["age"],
                    data["fitness_goal"],
                    data["fitness_level"],
                    data["subscription_tier"],
                    data["preferred_units"],
                    profile.id,
                ),
            )
            await db.commit()

    async def delete(self, profile_id: int) -> None:
        """Delete a profile along with everything it owns."""
        async with connect(self.db_path) as db:
            await db.execute("DELETE FROM user_profiles WHERE id = ?", (profile_id,))
            await db.commit()

    def _row_to_profile(self, row: aiosqlite.Row) -> UserProfile:
        """Convert a database row to a UserProfile."""
        return UserProfile.from_dict(
            dict(row),
            id=row["id"],
            created_at=_parse_timestamp(row["created_at"]),
            updated_at=_parse_timestamp(row["updated_at"]),
        )


class PreferencesRepository:
    """Repository for per-profile preferences."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def get_by_profile(self, profile_id: int) -> Preferences | None:
        """Get stored preferences for a profile."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM preferences WHERE profile_id = ?", (profile_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_preferences(row)

    async def get_or_default(self, profile_id: int) -> Preferences:
        """Stored preferences, or the defaults if none were saved yet."""
        preferences = await self.get_by_profile(profile_id)
        return preferences or Preferences(profile_id=profile_id)

    async def upsert(self, preferences: Preferences) -> int:
        """Create or update preferences."""
        data = preferences.to_dict()
        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO preferences
                (profile_id, workout_sort_option, primary_metrics,
                 secondary_metrics, timezone)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(profile_id) DO UPDATE SET
                    workout_sort_option = excluded.workout_sort_option,
                    primary_metrics = excluded.primary_metrics,
                    secondary_metrics = excluded.secondary_metrics,
                    timezone = excluded.timezone
                """,
                (
                    data["profile_id"],
                    data["workout_sort_option"],
                    json.dumps(data["primary_metrics"]),
                    json.dumps(data["secondary_metrics"]),
                    data["timezone"],
                ),
            )
            await db.commit()
            cursor = await db.execute(
                "SELECT id FROM preferences WHERE profile_id = ?", (preferences.profile_id,)
            )
            row = await cursor.fetchone()
            preferences.id = row["id"]
            return row["id"]

    async def delete(self, profile_id: int) -> None:
        """Delete preferences for a profile."""
        async with connect(self.db_path) as db:
            await db.execute("DELETE FROM preferences WHERE profile_id = ?", (profile_id,))
            await db.commit()

    def _row_to_preferences(self, row: aiosqlite.Row) -> Preferences:
        """Convert a database row to Preferences."""
        data = {
            "profile_id": row["profile_id"],
            "workout_sort_option": row["workout_sort_option"],
            "timezone": row["timezone"],
        }
        # NULL columns fall back to defaults
        if row["primary_metrics"] is not None:
            data["primary_metrics"] = json.loads(row["primary_metrics"])
        if row["secondary_metrics"] is not None:
            data["secondary_metrics"] = json.loads(row["secondary_metrics"])
        return Preferences.from_dict(data, id=row["id"])


class WorkoutRepository:
    """Repository for workout aggregates.

    A workout is always saved and loaded whole, with its exercises and
    their sets. Deleting a workout cascades to its children.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def save(self, workout: Workout) -> None:
        """Insert or replace the workout and all of its children."""
        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO workouts
                (id, profile_id, name, notes, status, started_at, completed_at,
                 template_id, is_template, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    profile_id = excluded.profile_id,
                    name = excluded.name,
                    notes = excluded.notes,
                    status = excluded.status,
                    started_at = excluded.started_at,
                    completed_at = excluded.completed_at,
                    template_id = excluded.template_id,
                    is_template = excluded.is_template,
                    updated_at = excluded.updated_at
                """,
                (
                    workout.id,
                    workout.profile_id,
                    workout.name,
                    workout.notes,
                    workout.status.value,
                    _iso(workout.started_at),
                    _iso(workout.completed_at),
                    workout.template_id,
                    int(workout.is_template),
                    workout.created_at.isoformat(),
                    _iso(workout.updated_at),
                ),
            )
            # Children are rewritten wholesale; sets go with their exercises
            await db.execute("DELETE FROM exercises WHERE workout_id = ?", (workout.id,))
            for exercise in workout.exercises:
                await self._insert_exercise(db, workout.id, exercise)
            await db.commit()
        logger.debug("Saved workout %s (%d exercises)", workout.id, len(workout.exercises))

    async def _insert_exercise(
        self, db: aiosqlite.Connection, workout_id: str, exercise: Exercise
    ) -> None:
        await db.execute(
            """
            INSERT INTO exercises
            (id, workout_id, position, name, type, category, notes,
             rest_time, last_set_completed_at, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                exercise.id,
                workout_id,
                exercise.order,
                exercise.name,
                exercise.type.value,
                exercise.category,
                exercise.notes,
                exercise.rest_time,
                _iso(exercise.last_set_completed_at),
                exercise.created_at.isoformat(),
            ),
        )
        await db.executemany(
            """
            INSERT INTO exercise_sets
            (id, exercise_id, position, weight, reps, duration, distance,
             target_weight, target_reps, average_heart_rate, calories_burned,
             intensity_level, notes, completed_at, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    s.id,
                    exercise.id,
                    s.order,
                    s.weight,
                    s.reps,
                    s.duration,
                    s.distance,
                    s.target_weight,
                    s.target_reps,
                    s.average_heart_rate,
                    s.calories_burned,
                    s.intensity_level,
                    s.notes,
                    _iso(s.completed_at),
                    s.created_at.isoformat(),
                )
                for s in exercise.sets
            ],
        )

    async def get(self, workout_id: str) -> Workout | None:
        """Load a workout with its exercises and sets."""
        async with connect(self.db_path) as db:
            cursor = await db.execute("SELECT * FROM workouts WHERE id = ?", (workout_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return await self._load(db, row)

    async def list_all(
        self, profile_id: int | None = None, include_templates: bool = True
    ) -> list[Workout]:
        """List workouts in creation order."""
        query = "SELECT * FROM workouts"
        conditions = []
        params: list = []
        if profile_id is not None:
            conditions.append("profile_id = ?")
            params.append(profile_id)
        if not include_templates:
            conditions.append("is_template = 0")
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY created_at"

        async with connect(self.db_path) as db:
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [await self._load(db, row) for row in rows]

    async def delete(self, workout_id: str) -> bool:
        """Delete a workout and its children.

        Returns:
            True if a workout was deleted
        """
        async with connect(self.db_path) as db:
            cursor = await db.execute("DELETE FROM workouts WHERE id = ?", (workout_id,))
            await db.commit()
            return cursor.rowcount > 0

    async def _load(self, db: aiosqlite.Connection, row: aiosqlite.Row) -> Workout:
        """Convert a workout row plus its child rows to a Workout."""
        cursor = await db.execute(
            "SELECT * FROM exercises WHERE workout_id = ? ORDER BY position",
            (row["id"],),
        )
        exercise_rows = await cursor.fetchall()

        exercises = []
        for ex_row in exercise_rows:
            cursor = await db.execute(
                "SELECT * FROM exercise_sets WHERE exercise_id = ? ORDER BY position",
                (ex_row["id"],),
            )
            set_rows = await cursor.fetchall()
            exercise_data = dict(ex_row)
            exercise_data["order"] = ex_row["position"]
            exercise_data["sets"] = [
                {**dict(set_row), "order": set_row["position"]} for set_row in set_rows
            ]
            exercises.append(exercise_data)

        data = dict(row)
        data["is_template"] = bool(row["is_template"])
        data["exercises"] = exercises
        return Workout.from_dict(data)


class NutritionEntryRepository:
    """Repository for logged nutrition entries."""

    _COLUMNS = (
        "id", "profile_id", "food_name", "brand_name", "serving_size", "quantity",
        "logged_at", "logged_ts", "meal_type", "log_method", "calories", "protein",
        "carbohydrates", "fat", "fiber", "sugar", "sodium", "extended_nutrients",
        "food_database_id", "barcode", "ai_confidence", "is_verified", "is_favorite",
        "notes",
    )

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def save(self, entry: NutritionEntry) -> None:
        """Insert or update an entry."""
        data = entry.to_dict()
        data["logged_ts"] = entry.logged_at.timestamp()
        data["extended_nutrients"] = json.dumps(data["extended_nutrients"])
        data["is_verified"] = int(data["is_verified"])
        data["is_favorite"] = int(data["is_favorite"])

        columns = ", ".join(self._COLUMNS)
        placeholders = ", ".join("?" for _ in self._COLUMNS)
        updates = ", ".join(f"{c} = excluded.{c}" for c in self._COLUMNS if c != "id")
        async with connect(self.db_path) as db:
            await db.execute(
                f"""
                INSERT INTO nutrition_entries ({columns})
                VALUES ({placeholders})
                ON CONFLICT(id) DO UPDATE SET {updates}
                """,
                tuple(data[c] for c in self._COLUMNS),
            )
            await db.commit()

    async def get(self, entry_id: str) -> NutritionEntry | None:
        """Get an entry by ID."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM nutrition_entries WHERE id = ?", (entry_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_entry(row)

    async def list_between(
        self,
        start: datetime,
        end: datetime,
        profile_id: int | None = None,
    ) -> list[NutritionEntry]:
        """Entries logged in [start, end), oldest first."""
        query = "SELECT * FROM nutrition_entries WHERE logged_ts >= ? AND logged_ts < ?"
        params: list = [start.timestamp(), end.timestamp()]
        if profile_id is not None:
            query += " AND profile_id = ?"
            params.append(profile_id)
        query += " ORDER BY logged_ts"

        async with connect(self.db_path) as db:
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_entry(row) for row in rows]

    async def list_favorites(self, profile_id: int | None = None) -> list[NutritionEntry]:
        """Favourite entries, most recently logged first."""
        query = "SELECT * FROM nutrition_entries WHERE is_favorite = 1"
        params: list = []
        if profile_id is not None:
            query += " AND profile_id = ?"
            params.append(profile_id)
        query += " ORDER BY logged_ts DESC"

        async with connect(self.db_path) as db:
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_entry(row) for row in rows]

    async def delete(self, entry_id: str) -> bool:
        """Delete an entry.

        Returns:
            True if an entry was deleted
        """
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "DELETE FROM nutrition_entries WHERE id = ?", (entry_id,)
            )
            await db.commit()
            return cursor.rowcount > 0

    def _row_to_entry(self, row: aiosqlite.Row) -> NutritionEntry:
        """Convert a database row to a NutritionEntry."""
        data = dict(row)
        data["extended_nutrients"] = json.loads(row["extended_nutrients"] or "{}")
        data["is_verified"] = bool(row["is_verified"])
        data["is_favorite"] = bool(row["is_favorite"])
        return NutritionEntry.from_dict(data)
