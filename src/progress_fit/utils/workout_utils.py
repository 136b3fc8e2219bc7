"""Utilities for searching and ordering workout lists."""

from ..models.preferences import WorkoutSortOption
from ..models.workout import Workout


def normalize_search_text(text: str) -> str:
    """Lowercase and collapse whitespace for case-insensitive matching."""
    return " ".join(text.casefold().split())


def filter_workouts(workouts: list[Workout], search: str | None) -> list[Workout]:
    """Keep workouts whose name contains the search text.

    Matching ignores case. An empty search keeps everything.
    """
    if not search or not search.strip():
        return list(workouts)
    needle = normalize_search_text(search)
    return [w for w in workouts if needle in normalize_search_text(w.name)]


def _last_used(workout: Workout):
    return workout.updated_at or workout.created_at


def sort_workouts(
    workouts: list[Workout], option: WorkoutSortOption = WorkoutSortOption.OFF
) -> list[Workout]:
    """Order workouts for display.

    OFF keeps the incoming order. Name sorts ignore case. LAST_USED falls
    back to creation time for workouts that were never updated.
    """
    if option == WorkoutSortOption.OFF:
        return list(workouts)
    if option == WorkoutSortOption.A_TO_Z:
        return sorted(workouts, key=lambda w: w.name.casefold())
    if option == WorkoutSortOption.Z_TO_A:
        return sorted(workouts, key=lambda w: w.name.casefold(), reverse=True)
    if option == WorkoutSortOption.OLDEST:
        return sorted(workouts, key=lambda w: w.created_at)
    if option == WorkoutSortOption.NEWEST:
        return sorted(workouts, key=lambda w: w.created_at, reverse=True)
    return sorted(workouts, key=_last_used, reverse=True)


def search_and_sort(
    workouts: list[Workout],
    search: str | None = None,
    option: WorkoutSortOption = WorkoutSortOption.OFF,
) -> list[Workout]:
    """Filter by name, then order."""
    return sort_workouts(filter_workouts(workouts, search), option)
