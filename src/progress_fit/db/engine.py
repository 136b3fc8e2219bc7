"""Database engine setup and initialization."""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from ..errors import PersistenceError

logger = logging.getLogger(__name__)

# Default data directory, overridden by PROGRESS_FIT_DATA_DIR
DATA_DIR = Path(__file__).parent.parent.parent.parent / "data"
DATA_DIR_ENV = "PROGRESS_FIT_DATA_DIR"
DB_FILENAME = "progress_fit.db"


def get_data_dir() -> Path:
    """Get the data directory path."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override)
    return DATA_DIR


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / DB_FILENAME


@asynccontextmanager
async def connect(db_path: Path) -> AsyncIterator[aiosqlite.Connection]:
    """Open a connection with foreign keys enforced.

    Any sqlite error raised while the connection is open surfaces as
    PersistenceError.
    """
    try:
        async with aiosqlite.connect(db_path) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys = ON")
            yield db
    except aiosqlite.Error as e:
        logger.error("Database error on %s: %s", db_path, e)
        raise PersistenceError(str(e)) from e


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with connect(db_path) as db:
        # User profiles table
        await db.execute("""
            CREATE TABLE IF NOT EXISTS user_profiles (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                email TEXT DEFAULT '',
                age INTEGER,
                fitness_goal TEXT NOT NULL,
                fitness_level TEXT NOT NULL,
                subscription_tier TEXT NOT NULL DEFAULT 'standard',
                preferred_units TEXT NOT NULL DEFAULT 'metric',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Preferences (one row per profile)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS preferences (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                profile_id INTEGER NOT NULL UNIQUE,
                workout_sort_option TEXT DEFAULT 'off',
                primary_metrics TEXT,
                secondary_metrics TEXT,
                timezone TEXT,
                FOREIGN KEY (profile_id) REFERENCES user_profiles(id) ON DELETE CASCADE
            )
        """)

        # Workout aggregate: workouts -> exercises -> exercise_sets
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workouts (
                id TEXT PRIMARY KEY,
                profile_id INTEGER,
                name TEXT NOT NULL,
                notes TEXT,
                status TEXT NOT NULL DEFAULT 'planned',
                started_at TEXT,
                completed_at TEXT,
                template_id TEXT,
                is_template INTEGER DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT,
                FOREIGN KEY (profile_id) REFERENCES user_profiles(id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS exercises (
                id TEXT PRIMARY KEY,
                workout_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                name TEXT NOT NULL,
                type TEXT NOT NULL,
                category TEXT,
                notes TEXT,
                rest_time REAL DEFAULT 60,
                last_set_completed_at TEXT,
                created_at TEXT NOT NULL,
                FOREIGN KEY (workout_id) REFERENCES workouts(id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS exercise_sets (
                id TEXT PRIMARY KEY,
                exercise_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                weight REAL DEFAULT 0,
                reps INTEGER DEFAULT 0,
                duration REAL DEFAULT 0,
                distance REAL DEFAULT 0,
                target_weight REAL,
                target_reps INTEGER,
                average_heart_rate INTEGER,
                calories_burned REAL,
                intensity_level INTEGER,
                notes TEXT,
                completed_at TEXT,
                created_at TEXT NOT NULL,
                FOREIGN KEY (exercise_id) REFERENCES exercises(id) ON DELETE CASCADE
            )
        """)

        # Nutrition log
        await db.execute("""
            CREATE TABLE IF NOT EXISTS nutrition_entries (
                id TEXT PRIMARY KEY,
                profile_id INTEGER,
                food_name TEXT NOT NULL,
                brand_name TEXT,
                serving_size TEXT NOT NULL,
                quantity REAL NOT NULL,
                logged_at TEXT NOT NULL,
                logged_ts REAL NOT NULL,
                meal_type TEXT NOT NULL,
                log_method TEXT NOT NULL,
                calories REAL NOT NULL,
                protein REAL NOT NULL,
                carbohydrates REAL NOT NULL,
                fat REAL NOT NULL,
                fiber REAL,
                sugar REAL,
                sodium REAL,
                extended_nutrients TEXT DEFAULT '{}',
                food_database_id TEXT,
                barcode TEXT,
                ai_confidence REAL,
                is_verified INTEGER DEFAULT 0,
                is_favorite INTEGER DEFAULT 0,
                notes TEXT,
                FOREIGN KEY (profile_id) REFERENCES user_profiles(id) ON DELETE CASCADE
            )
        """)

        # Create indexes for common queries
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workouts_profile
            ON workouts(profile_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_exercises_workout
            ON exercises(workout_id, position)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_exercise_sets_exercise
            ON exercise_sets(exercise_id, position)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_nutrition_entries_logged
            ON nutrition_entries(logged_ts)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_nutrition_entries_favorite
            ON nutrition_entries(is_favorite)
        """)

        await db.commit()

    logger.debug("Database schema ready at %s", db_path)
