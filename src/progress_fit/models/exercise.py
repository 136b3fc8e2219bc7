"""Exercise model: an ordered collection of sets within a workout."""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import uuid4

from ..clock import SYSTEM_CLOCK, Clock
from ..errors import require_non_negative
from .exercise_set import ExerciseSet

if TYPE_CHECKING:
    from .workout import Workout

DEFAULT_REST_TIME = 60.0  # seconds


class ExerciseType(str, Enum):
    """Kind of work an exercise records."""

    RESISTANCE = "resistance"
    CARDIO = "cardio"
    RECOVERY = "recovery"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def default_rest_time(self) -> float:
        """Suggested rest between sets, in seconds."""
        return {
            ExerciseType.RESISTANCE: 90.0,
            ExerciseType.CARDIO: 120.0,
            ExerciseType.RECOVERY: 30.0,
        }[self]


@dataclass(eq=False)
class Exercise:
    """A named exercise with its sets, in workout order.

    Set order is kept as a contiguous 0..n-1 sequence matching list
    position after every add or remove.
    """

    name: str
    type: ExerciseType
    category: str | None = None
    notes: str | None = None
    order: int = 0
    rest_time: float = DEFAULT_REST_TIME  # seconds
    last_set_completed_at: datetime | None = None
    sets: list[ExerciseSet] = field(default_factory=list)
    created_at: datetime = field(default_factory=SYSTEM_CLOCK.now)
    id: str = field(default_factory=lambda: str(uuid4()))
    _workout_ref: weakref.ref | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        require_non_negative("rest_time", self.rest_time)
        # Sets passed to the constructor are adopted in the given order
        initial, self.sets = self.sets, []
        for exercise_set in initial:
            self.add_set(exercise_set)

    @property
    def workout(self) -> Workout | None:
        """The owning workout, if it is still alive."""
        if self._workout_ref is None:
            return None
        return self._workout_ref()

    @workout.setter
    def workout(self, workout: Workout | None) -> None:
        self._workout_ref = weakref.ref(workout) if workout is not None else None

    @property
    def total_volume(self) -> float:
        """Sum of weight x reps. Only resistance exercises have volume."""
        if self.type != ExerciseType.RESISTANCE:
            return 0.0
        return sum(s.weight * s.reps for s in self.sets)

    @property
    def total_duration(self) -> float:
        """Sum of set durations. Only cardio exercises have duration."""
        if self.type != ExerciseType.CARDIO:
            return 0.0
        return sum(s.duration for s in self.sets)

    @property
    def completed_sets_count(self) -> int:
        return sum(1 for s in self.sets if s.is_completed)

    @property
    def is_completed(self) -> bool:
        """True when there is at least one set and every set is done."""
        return bool(self.sets) and all(s.is_completed for s in self.sets)

    def is_in_rest_period(self, clock: Clock = SYSTEM_CLOCK) -> bool:
        if self.last_set_completed_at is None:
            return False
        elapsed = (clock.now() - self.last_set_completed_at).total_seconds()
        return elapsed < self.rest_time

    def remaining_rest_time(self, clock: Clock = SYSTEM_CLOCK) -> float:
        """Seconds of rest left, never negative."""
        if self.last_set_completed_at is None:
            return 0.0
        elapsed = (clock.now() - self.last_set_completed_at).total_seconds()
        return max(0.0, self.rest_time - elapsed)

    def add_set(self, exercise_set: ExerciseSet) -> None:
        """Append a set, giving it the next order value."""
        exercise_set.order = len(self.sets)
        self.sets.append(exercise_set)
        exercise_set.exercise = self

    def insert_set(self, index: int, exercise_set: ExerciseSet) -> None:
        """Put a set back at a given position and renumber."""
        self.sets.insert(index, exercise_set)
        exercise_set.exercise = self
        self._renumber_sets()

    def remove_set(self, exercise_set: ExerciseSet) -> bool:
        """Remove a set by identity and renumber the rest.

        Removing a set that is not part of this exercise does nothing.

        Returns:
            True if the set was removed
        """
        for index, candidate in enumerate(self.sets):
            if candidate is exercise_set:
                del self.sets[index]
                exercise_set.exercise = None
                self._renumber_sets()
                return True
        return False

    def _renumber_sets(self) -> None:
        for index, exercise_set in enumerate(self.sets):
            exercise_set.order = index

    def set_by_id(self, set_id: str) -> ExerciseSet | None:
        return next((s for s in self.sets if s.id == set_id), None)

    def complete_set(self, at: datetime) -> None:
        """Record that a set just finished, starting the rest timer."""
        self.last_set_completed_at = at

    def create_default_set(self, clock: Clock = SYSTEM_CLOCK) -> ExerciseSet:
        """Build (but do not add) a set seeded for this exercise's type."""
        order = len(self.sets)
        created_at = clock.now()
        if self.type == ExerciseType.RESISTANCE:
            return ExerciseSet(weight=0.0, reps=8, order=order, created_at=created_at)
        if self.type == ExerciseType.CARDIO:
            return ExerciseSet(
                duration=300.0, distance=0.0, order=order, created_at=created_at
            )
        return ExerciseSet(duration=60.0, order=order, created_at=created_at)

    def duplicate(self, clock: Clock = SYSTEM_CLOCK) -> Exercise:
        """Deep copy under a new identity with every set reset."""
        new_exercise = Exercise(
            name=self.name,
            type=self.type,
            category=self.category,
            notes=self.notes,
            order=self.order,
            rest_time=self.rest_time,
            created_at=clock.now(),
        )
        for exercise_set in self.sets:
            new_exercise.add_set(exercise_set.duplicate(clock))
        return new_exercise

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "category": self.category,
            "notes": self.notes,
            "order": self.order,
            "rest_time": self.rest_time,
            "last_set_completed_at": (
                self.last_set_completed_at.isoformat()
                if self.last_set_completed_at
                else None
            ),
            "created_at": self.created_at.isoformat(),
            "sets": [s.to_dict() for s in self.sets],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Exercise:
        """Create from dictionary."""
        kwargs = {}
        if data.get("id"):
            kwargs["id"] = data["id"]
        if data.get("created_at"):
            kwargs["created_at"] = datetime.fromisoformat(data["created_at"])
        last_completed = None
        if data.get("last_set_completed_at"):
            last_completed = datetime.fromisoformat(data["last_set_completed_at"])

        sets = sorted(
            (ExerciseSet.from_dict(s) for s in data.get("sets", [])),
            key=lambda s: s.order,
        )
        return cls(
            name=data["name"],
            type=ExerciseType(data["type"]),
            category=data.get("category"),
            notes=data.get("notes"),
            order=data.get("order", 0),
            rest_time=data.get("rest_time", DEFAULT_REST_TIME),
            last_set_completed_at=last_completed,
            sets=sets,
            **kwargs,
        )
