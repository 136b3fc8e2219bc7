"""Exercise set model: the atomic logged unit of work."""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from ..clock import SYSTEM_CLOCK, Clock
from ..errors import require_in_range, require_non_negative, require_whole_number

if TYPE_CHECKING:
    from .exercise import Exercise

# Progressive overload step for weighted sets (kg, or the user's unit)
PROGRESSIVE_WEIGHT_INCREMENT = 2.5


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass(eq=False)
class ExerciseSet:
    """One set of resistance, cardio or recovery work.

    A set is owned by exactly one Exercise. The link back to that exercise
    is a weak reference: the exercise keeps its sets alive, never the
    other way round.
    """

    weight: float = 0.0
    reps: int = 0
    duration: float = 0.0  # seconds
    distance: float = 0.0
    order: int = 0
    target_weight: float | None = None
    target_reps: int | None = None
    average_heart_rate: int | None = None
    calories_burned: float | None = None
    intensity_level: int | None = None  # 1-10, recovery sets
    notes: str | None = None
    completed_at: datetime | None = None
    created_at: datetime = field(default_factory=SYSTEM_CLOCK.now)
    id: str = field(default_factory=lambda: str(uuid4()))
    _exercise_ref: weakref.ref | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        self._validate(
            weight=self.weight,
            reps=self.reps,
            duration=self.duration,
            distance=self.distance,
            target_weight=self.target_weight,
            target_reps=self.target_reps,
        )
        require_in_range("intensity_level", self.intensity_level, 1, 10)

    @staticmethod
    def _validate(**values: float | None) -> None:
        for name, value in values.items():
            require_non_negative(name, value)
            if name in ("reps", "target_reps"):
                require_whole_number(name, value)

    @property
    def exercise(self) -> Exercise | None:
        """The owning exercise, if it is still alive."""
        if self._exercise_ref is None:
            return None
        return self._exercise_ref()

    @exercise.setter
    def exercise(self, exercise: Exercise | None) -> None:
        self._exercise_ref = weakref.ref(exercise) if exercise is not None else None

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def volume(self) -> float:
        """Weight moved in this set (weight x reps)."""
        return self.weight * self.reps

    @property
    def hit_target(self) -> bool:
        """Whether the logged values met the planned targets.

        A set with no targets always counts as hit.
        """
        if self.target_reps is not None and self.reps < self.target_reps:
            return False
        if self.target_weight is not None and self.weight < self.target_weight:
            return False
        return True

    @property
    def formatted_duration(self) -> str:
        """Duration as MM:SS."""
        minutes, seconds = divmod(int(self.duration), 60)
        return f"{minutes:02d}:{seconds:02d}"

    def complete(self, clock: Clock = SYSTEM_CLOCK) -> datetime:
        """Mark the set as completed and start the parent's rest timer.

        Returns:
            The completion timestamp, shared with the parent exercise
        """
        now = clock.now()
        self.completed_at = now
        exercise = self.exercise
        if exercise is not None:
            exercise.complete_set(now)
        return now

    def reset(self) -> None:
        """Mark the set as not completed. The parent is not notified."""
        self.completed_at = None

    def update(
        self,
        weight: float | None = None,
        reps: int | None = None,
        duration: float | None = None,
        distance: float | None = None,
        notes: str | None = None,
    ) -> None:
        """Overwrite only the fields that were supplied."""
        self._validate(weight=weight, reps=reps, duration=duration, distance=distance)
        if weight is not None:
            self.weight = weight
        if reps is not None:
            self.reps = reps
        if duration is not None:
            self.duration = duration
        if distance is not None:
            self.distance = distance
        if notes is not None:
            self.notes = notes

    def set_targets(self, weight: float | None = None, reps: int | None = None) -> None:
        """Replace the planning targets for this set."""
        self._validate(target_weight=weight, target_reps=reps)
        self.target_weight = weight
        self.target_reps = reps

    def duplicate(self, clock: Clock = SYSTEM_CLOCK) -> ExerciseSet:
        """Copy this set under a new identity, never completed."""
        return ExerciseSet(
            weight=self.weight,
            reps=self.reps,
            duration=self.duration,
            distance=self.distance,
            order=self.order,
            target_weight=self.target_weight,
            target_reps=self.target_reps,
            average_heart_rate=self.average_heart_rate,
            calories_burned=self.calories_burned,
            intensity_level=self.intensity_level,
            notes=self.notes,
            created_at=clock.now(),
        )

    def create_progressive_set(self, clock: Clock = SYSTEM_CLOCK) -> ExerciseSet:
        """Copy this set with a small overload step applied.

        Weighted sets gain PROGRESSIVE_WEIGHT_INCREMENT; bodyweight sets
        gain one rep; anything else is copied unchanged.
        """
        new_set = ExerciseSet(
            weight=self.weight,
            reps=self.reps,
            duration=self.duration,
            distance=self.distance,
            order=self.order,
            created_at=clock.now(),
        )
        if self.weight > 0:
            new_set.weight = self.weight + PROGRESSIVE_WEIGHT_INCREMENT
        elif self.reps > 0:
            new_set.reps = self.reps + 1
        return new_set

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "order": self.order,
            "weight": self.weight,
            "reps": self.reps,
            "duration": self.duration,
            "distance": self.distance,
            "target_weight": self.target_weight,
            "target_reps": self.target_reps,
            "average_heart_rate": self.average_heart_rate,
            "calories_burned": self.calories_burned,
            "intensity_level": self.intensity_level,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ExerciseSet:
        """Create from dictionary."""
        kwargs = {}
        if data.get("id"):
            kwargs["id"] = data["id"]
        if data.get("created_at"):
            kwargs["created_at"] = datetime.fromisoformat(data["created_at"])
        return cls(
            weight=data.get("weight", 0.0),
            reps=data.get("reps", 0),
            duration=data.get("duration", 0.0),
            distance=data.get("distance", 0.0),
            order=data.get("order", 0),
            target_weight=data.get("target_weight"),
            target_reps=data.get("target_reps"),
            average_heart_rate=data.get("average_heart_rate"),
            calories_burned=data.get("calories_burned"),
            intensity_level=data.get("intensity_level"),
            notes=data.get("notes"),
            completed_at=_parse_datetime(data.get("completed_at")),
            **kwargs,
        )
