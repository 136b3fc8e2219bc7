"""Workout service: mutations on workout aggregates, persisted as they happen."""

import asyncio
import logging
import weakref
from collections.abc import Callable

from ..clock import SYSTEM_CLOCK, Clock
from ..db.repositories import WorkoutRepository
from ..errors import NotFoundError, PersistenceError
from ..models.exercise import Exercise, ExerciseType
from ..models.exercise_set import ExerciseSet
from ..models.preferences import WorkoutSortOption
from ..models.workout import TransitionResult, Workout
from ..utils.workout_utils import search_and_sort

logger = logging.getLogger(__name__)


class WorkoutService:
    """Runs workout mutations and keeps the store in step with them.

    Every operation reads the workout from the store first, so changes made
    by another process sharing the database are never overwritten. While a
    caller still holds a workout that matches the stored one, the same
    object is handed out again. Mutations of one workout are serialised by
    a per-workout lock. When a save fails the in-memory change is undone
    before the PersistenceError is re-raised, leaving the aggregate as it
    was.
    """

    def __init__(self, repository: WorkoutRepository, clock: Clock = SYSTEM_CLOCK):
        self.repository = repository
        self.clock = clock
        # Both maps only hold what callers still reference
        self._workouts: weakref.WeakValueDictionary[str, Workout] = (
            weakref.WeakValueDictionary()
        )
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock(self, workout_id: str) -> asyncio.Lock:
        lock = self._locks.get(workout_id)
        if lock is None:
            lock = self._locks[workout_id] = asyncio.Lock()
        return lock

    def _adopt(self, stored: Workout) -> Workout:
        """Return the live instance for a stored workout.

        A cached object that has drifted from the store is replaced.
        """
        cached = self._workouts.get(stored.id)
        if cached is not None and cached.to_dict() == stored.to_dict():
            return cached
        self._workouts[stored.id] = stored
        return stored

    async def _load(self, workout_id: str) -> Workout:
        stored = await self.repository.get(workout_id)
        if stored is None:
            self._workouts.pop(workout_id, None)
            raise NotFoundError(f"Workout {workout_id} not found")
        return self._adopt(stored)

    async def _commit(self, workout: Workout, undo: Callable[[], None]) -> None:
        """Save the workout, undoing the last change if the save fails."""
        previous_updated_at = workout.updated_at
        workout.updated_at = self.clock.now()
        try:
            await self.repository.save(workout)
        except PersistenceError:
            undo()
            workout.updated_at = previous_updated_at
            logger.warning("Save of workout %s failed, change undone", workout.id)
            raise

    @staticmethod
    def _exercise(workout: Workout, exercise_id: str) -> Exercise:
        exercise = workout.exercise_by_id(exercise_id)
        if exercise is None:
            raise NotFoundError(f"Exercise {exercise_id} not found in workout {workout.id}")
        return exercise

    @staticmethod
    def _set(workout: Workout, set_id: str) -> tuple[Exercise, ExerciseSet]:
        found = workout.find_set(set_id)
        if found is None:
            raise NotFoundError(f"Set {set_id} not found in workout {workout.id}")
        return found

    async def create_workout(
        self,
        name: str,
        notes: str | None = None,
        profile_id: int | None = None,
    ) -> Workout:
        """Create and store a new planned workout."""
        workout = Workout(
            name=name,
            notes=notes,
            profile_id=profile_id,
            created_at=self.clock.now(),
        )
        workout.updated_at = workout.created_at
        await self.repository.save(workout)
        self._workouts[workout.id] = workout
        logger.info("Created workout %s (%s)", workout.id, name)
        return workout

    async def get_workout(self, workout_id: str) -> Workout:
        return await self._load(workout_id)

    async def list_workouts(
        self,
        sort: WorkoutSortOption = WorkoutSortOption.OFF,
        search: str | None = None,
        profile_id: int | None = None,
        include_templates: bool = True,
    ) -> list[Workout]:
        """List stored workouts, filtered by name and ordered."""
        stored = await self.repository.list_all(
            profile_id=profile_id, include_templates=include_templates
        )
        workouts = [self._adopt(w) for w in stored]
        return search_and_sort(workouts, search, sort)

    async def add_exercise(
        self,
        workout_id: str,
        name: str,
        type: ExerciseType,
        category: str | None = None,
        notes: str | None = None,
        rest_time: float | None = None,
    ) -> Exercise:
        """Append a new exercise to a workout."""
        async with self._lock(workout_id):
            workout = await self._load(workout_id)
            exercise = Exercise(
                name=name,
                type=type,
                category=category,
                notes=notes,
                rest_time=rest_time if rest_time is not None else type.default_rest_time,
                created_at=self.clock.now(),
            )
            workout.add_exercise(exercise)
            await self._commit(workout, lambda: workout.remove_exercise(exercise))
            return exercise

    async def remove_exercise(self, workout_id: str, exercise_id: str) -> Exercise:
        """Remove an exercise and its sets from a workout."""
        async with self._lock(workout_id):
            workout = await self._load(workout_id)
            exercise = self._exercise(workout, exercise_id)
            index = exercise.order
            workout.remove_exercise(exercise)
            await self._commit(workout, lambda: workout.insert_exercise(index, exercise))
            return exercise

    async def move_exercise(self, workout_id: str, from_index: int, to_index: int) -> Exercise:
        """Reorder an exercise within its workout."""
        async with self._lock(workout_id):
            workout = await self._load(workout_id)
            exercise = workout.move_exercise(from_index, to_index)
            await self._commit(workout, lambda: workout.move_exercise(to_index, from_index))
            return exercise

    async def add_set(
        self,
        workout_id: str,
        exercise_id: str,
        weight: float | None = None,
        reps: int | None = None,
        duration: float | None = None,
        distance: float | None = None,
        notes: str | None = None,
        target_weight: float | None = None,
        target_reps: int | None = None,
    ) -> ExerciseSet:
        """Add a set seeded from the exercise type, with optional overrides."""
        async with self._lock(workout_id):
            workout = await self._load(workout_id)
            exercise = self._exercise(workout, exercise_id)
            exercise_set = exercise.create_default_set(self.clock)
            exercise_set.update(
                weight=weight, reps=reps, duration=duration, distance=distance, notes=notes
            )
            if target_weight is not None or target_reps is not None:
                exercise_set.set_targets(weight=target_weight, reps=target_reps)
            exercise.add_set(exercise_set)
            await self._commit(workout, lambda: exercise.remove_set(exercise_set))
            return exercise_set

    async def update_set(
        self,
        workout_id: str,
        set_id: str,
        weight: float | None = None,
        reps: int | None = None,
        duration: float | None = None,
        distance: float | None = None,
        notes: str | None = None,
    ) -> ExerciseSet:
        """Overwrite the supplied fields of a set."""
        async with self._lock(workout_id):
            workout = await self._load(workout_id)
            _, exercise_set = self._set(workout, set_id)
            before = (
                exercise_set.weight,
                exercise_set.reps,
                exercise_set.duration,
                exercise_set.distance,
                exercise_set.notes,
            )
            exercise_set.update(
                weight=weight, reps=reps, duration=duration, distance=distance, notes=notes
            )

            def undo():
                (
                    exercise_set.weight,
                    exercise_set.reps,
                    exercise_set.duration,
                    exercise_set.distance,
                    exercise_set.notes,
                ) = before

            await self._commit(workout, undo)
            return exercise_set

    async def complete_set(self, workout_id: str, set_id: str) -> ExerciseSet:
        """Mark a set done and start its exercise's rest timer."""
        async with self._lock(workout_id):
            workout = await self._load(workout_id)
            exercise, exercise_set = self._set(workout, set_id)
            previous_completed = exercise_set.completed_at
            previous_rest_start = exercise.last_set_completed_at
            exercise_set.complete(self.clock)

            def undo():
                exercise_set.completed_at = previous_completed
                exercise.last_set_completed_at = previous_rest_start

            await self._commit(workout, undo)
            return exercise_set

    async def reset_set(self, workout_id: str, set_id: str) -> ExerciseSet:
        """Mark a set as not done."""
        async with self._lock(workout_id):
            workout = await self._load(workout_id)
            _, exercise_set = self._set(workout, set_id)
            previous_completed = exercise_set.completed_at
            exercise_set.reset()

            def undo():
                exercise_set.completed_at = previous_completed

            await self._commit(workout, undo)
            return exercise_set

    async def remove_set(self, workout_id: str, set_id: str) -> ExerciseSet:
        """Remove a set; the remaining sets are renumbered."""
        async with self._lock(workout_id):
            workout = await self._load(workout_id)
            exercise, exercise_set = self._set(workout, set_id)
            index = exercise_set.order
            exercise.remove_set(exercise_set)
            await self._commit(workout, lambda: exercise.insert_set(index, exercise_set))
            return exercise_set

    async def _transition(
        self, workout_id: str, action: str, apply: Callable[[Workout], TransitionResult]
    ) -> TransitionResult:
        async with self._lock(workout_id):
            workout = await self._load(workout_id)
            before = (workout.status, workout.started_at, workout.completed_at)
            result = apply(workout)
            if not result.accepted:
                logger.info(
                    "Ignored %s on workout %s in state %s",
                    action,
                    workout_id,
                    result.previous.value,
                )
                return result

            def undo():
                workout.status, workout.started_at, workout.completed_at = before

            await self._commit(workout, undo)
            logger.info(
                "Workout %s: %s -> %s", workout_id, result.previous.value, result.current.value
            )
            return result

    async def start_workout(self, workout_id: str) -> TransitionResult:
        return await self._transition(workout_id, "start", lambda w: w.start(self.clock))

    async def complete_workout(self, workout_id: str) -> TransitionResult:
        return await self._transition(workout_id, "complete", lambda w: w.complete(self.clock))

    async def cancel_workout(self, workout_id: str) -> TransitionResult:
        return await self._transition(workout_id, "cancel", lambda w: w.cancel())

    async def duplicate_as_template(self, workout_id: str, name: str) -> Workout:
        """Store a deep copy of a workout as a new template."""
        async with self._lock(workout_id):
            workout = await self._load(workout_id)
            template = workout.duplicate_as_template(name, self.clock)
        template.updated_at = template.created_at
        await self.repository.save(template)
        self._workouts[template.id] = template
        logger.info("Saved workout %s as template %s", workout_id, template.id)
        return template

    async def delete_workout(self, workout_id: str) -> None:
        """Delete a workout with all of its exercises and sets."""
        async with self._lock(workout_id):
            await self._load(workout_id)
            await self.repository.delete(workout_id)
            self._workouts.pop(workout_id, None)
        logger.info("Deleted workout %s", workout_id)
