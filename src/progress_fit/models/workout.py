"""Workout model and its lifecycle state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import uuid4

from ..clock import SYSTEM_CLOCK, Clock
from ..errors import require_in_range
from .exercise import Exercise, ExerciseType
from .exercise_set import ExerciseSet


class WorkoutStatus(str, Enum):
    """Workout lifecycle status."""

    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def is_terminal(self) -> bool:
        return self in (WorkoutStatus.COMPLETED, WorkoutStatus.CANCELLED)


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a lifecycle call.

    A refused transition leaves the workout untouched; ``accepted`` is how
    callers tell the two cases apart.
    """

    accepted: bool
    previous: WorkoutStatus
    current: WorkoutStatus

    def __bool__(self) -> bool:
        return self.accepted


@dataclass(eq=False)
class Workout:
    """A workout session or template.

    Lifecycle: planned -> in_progress -> completed | cancelled. Transitions
    from any other state are ignored.
    """

    name: str
    notes: str | None = None
    status: WorkoutStatus = WorkoutStatus.PLANNED
    started_at: datetime | None = None
    completed_at: datetime | None = None
    template_id: str | None = None
    is_template: bool = False
    profile_id: int | None = None
    exercises: list[Exercise] = field(default_factory=list)
    created_at: datetime = field(default_factory=SYSTEM_CLOCK.now)
    updated_at: datetime | None = None
    id: str = field(default_factory=lambda: str(uuid4()))

    def __post_init__(self):
        initial, self.exercises = self.exercises, []
        for exercise in initial:
            self.add_exercise(exercise)

    @property
    def duration(self) -> float | None:
        """Seconds between start and completion, if both happened."""
        if self.started_at is None or self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    @property
    def is_in_progress(self) -> bool:
        return self.status == WorkoutStatus.IN_PROGRESS

    @property
    def is_completed(self) -> bool:
        return self.status == WorkoutStatus.COMPLETED

    @property
    def total_sets(self) -> int:
        return sum(len(ex.sets) for ex in self.exercises)

    @property
    def completed_sets(self) -> int:
        return sum(ex.completed_sets_count for ex in self.exercises)

    @property
    def total_weight(self) -> float:
        """Weight moved across the workout.

        Uses the same rule as Exercise.total_volume, so only resistance
        exercises contribute.
        """
        return sum(ex.total_volume for ex in self.exercises)

    @property
    def completion_percentage(self) -> float:
        """Completed sets as a percentage of all sets (0-100)."""
        total = self.total_sets
        if total == 0:
            return 0.0
        return self.completed_sets / total * 100

    def _transition(
        self, allowed_from: WorkoutStatus, target: WorkoutStatus
    ) -> TransitionResult:
        previous = self.status
        if previous != allowed_from:
            return TransitionResult(accepted=False, previous=previous, current=previous)
        self.status = target
        return TransitionResult(accepted=True, previous=previous, current=target)

    def start(self, clock: Clock = SYSTEM_CLOCK) -> TransitionResult:
        """Begin a planned workout."""
        result = self._transition(WorkoutStatus.PLANNED, WorkoutStatus.IN_PROGRESS)
        if result.accepted:
            self.started_at = clock.now()
        return result

    def complete(self, clock: Clock = SYSTEM_CLOCK) -> TransitionResult:
        """Finish an in-progress workout."""
        result = self._transition(WorkoutStatus.IN_PROGRESS, WorkoutStatus.COMPLETED)
        if result.accepted:
            self.completed_at = clock.now()
        return result

    def cancel(self) -> TransitionResult:
        """Abandon an in-progress workout."""
        return self._transition(WorkoutStatus.IN_PROGRESS, WorkoutStatus.CANCELLED)

    def add_exercise(self, exercise: Exercise) -> None:
        """Append an exercise, giving it the next order value."""
        exercise.order = len(self.exercises)
        self.exercises.append(exercise)
        exercise.workout = self

    def insert_exercise(self, index: int, exercise: Exercise) -> None:
        """Put an exercise back at a given position and renumber."""
        self.exercises.insert(index, exercise)
        exercise.workout = self
        self._renumber_exercises()

    def remove_exercise(self, exercise: Exercise) -> bool:
        """Remove an exercise (and with it its sets) by identity.

        Remaining exercises are renumbered 0..n-1. Removing an exercise
        that is not part of this workout does nothing.

        Returns:
            True if the exercise was removed
        """
        for index, candidate in enumerate(self.exercises):
            if candidate is exercise:
                del self.exercises[index]
                exercise.workout = None
                self._renumber_exercises()
                return True
        return False

    def move_exercise(self, from_index: int, to_index: int) -> Exercise:
        """Move the exercise at ``from_index`` so it ends up at ``to_index``.

        Every exercise is renumbered 0..n-1 afterwards.

        Raises:
            ValidationError: If either index is outside the exercise list
        """
        last = len(self.exercises) - 1
        require_in_range("from_index", from_index, 0, last)
        require_in_range("to_index", to_index, 0, last)
        exercise = self.exercises.pop(from_index)
        self.exercises.insert(to_index, exercise)
        self._renumber_exercises()
        return exercise

    def _renumber_exercises(self) -> None:
        for index, exercise in enumerate(self.exercises):
            exercise.order = index

    def exercise_by_id(self, exercise_id: str) -> Exercise | None:
        return next((ex for ex in self.exercises if ex.id == exercise_id), None)

    def find_set(self, set_id: str) -> tuple[Exercise, ExerciseSet] | None:
        """Locate a set anywhere in the workout."""
        for exercise in self.exercises:
            exercise_set = exercise.set_by_id(set_id)
            if exercise_set is not None:
                return exercise, exercise_set
        return None

    def duplicate_as_template(self, name: str, clock: Clock = SYSTEM_CLOCK) -> Workout:
        """Deep copy into a new template that remembers where it came from."""
        return Workout(
            name=name,
            notes=self.notes,
            is_template=True,
            template_id=self.id,
            profile_id=self.profile_id,
            exercises=[ex.duplicate(clock) for ex in self.exercises],
            created_at=clock.now(),
        )

    def get_status_display(self) -> str:
        return self.status.display_name

    def get_summary(self) -> str:
        """Generate a plain-text summary of the workout."""
        summary = f"Workout: {self.name} [{self.get_status_display()}]\n"
        if self.notes:
            summary += f"Notes: {self.notes}\n"
        summary += f"Sets: {self.completed_sets}/{self.total_sets} completed"
        summary += f" ({self.completion_percentage:.0f}%)\n"
        if self.total_weight:
            summary += f"Total weight: {self.total_weight:g}\n"

        for ex in self.exercises:
            summary += f"\n  {ex.order + 1}. {ex.name} ({ex.type.display_name})\n"
            for s in ex.sets:
                mark = "x" if s.is_completed else " "
                summary += f"     [{mark}] Set {s.order + 1}: {_format_set(ex, s)}\n"

        return summary

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "name": self.name,
            "notes": self.notes,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "template_id": self.template_id,
            "is_template": self.is_template,
            "profile_id": self.profile_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "exercises": [ex.to_dict() for ex in self.exercises],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Workout:
        """Create from dictionary."""
        kwargs = {}
        if data.get("id"):
            kwargs["id"] = data["id"]
        if data.get("created_at"):
            kwargs["created_at"] = datetime.fromisoformat(data["created_at"])

        def parse(key: str) -> datetime | None:
            return datetime.fromisoformat(data[key]) if data.get(key) else None

        exercises = sorted(
            (Exercise.from_dict(ex) for ex in data.get("exercises", [])),
            key=lambda ex: ex.order,
        )
        return cls(
            name=data["name"],
            notes=data.get("notes"),
            status=WorkoutStatus(data.get("status", "planned")),
            started_at=parse("started_at"),
            completed_at=parse("completed_at"),
            template_id=data.get("template_id"),
            is_template=bool(data.get("is_template", False)),
            profile_id=data.get("profile_id"),
            updated_at=parse("updated_at"),
            exercises=exercises,
            **kwargs,
        )


def _format_set(exercise: Exercise, exercise_set: ExerciseSet) -> str:
    if exercise.type == ExerciseType.RESISTANCE:
        return f"{exercise_set.weight:g} x {exercise_set.reps}"
    if exercise_set.distance:
        return f"{exercise_set.formatted_duration}, {exercise_set.distance:g}"
    return exercise_set.formatted_duration
