"""User preferences model."""

from dataclasses import dataclass, field
from datetime import tzinfo
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import ValidationError
from .nutrition_metric import (
    PRIMARY_METRICS,
    SECONDARY_METRICS,
    NutritionMetricType,
    parse_metrics,
)

MAX_SECONDARY_METRICS = 6


def _resolve_zone(name: str | None) -> tzinfo | None:
    if name is None:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError(f"Unknown timezone: {name}") from e


class WorkoutSortOption(str, Enum):
    """Ordering applied to the workout list."""

    OFF = "off"
    A_TO_Z = "a_to_z"
    Z_TO_A = "z_to_a"
    OLDEST = "oldest"
    NEWEST = "newest"
    LAST_USED = "last_used"

    @property
    def display_name(self) -> str:
        return {
            WorkoutSortOption.OFF: "Off",
            WorkoutSortOption.A_TO_Z: "A -> Z",
            WorkoutSortOption.Z_TO_A: "Z -> A",
            WorkoutSortOption.OLDEST: "Oldest",
            WorkoutSortOption.NEWEST: "Newest",
            WorkoutSortOption.LAST_USED: "Last Used",
        }[self]


@dataclass
class Preferences:
    """Per-profile settings.

    Keys and defaults:
        workout_sort_option: "off"
        primary_metrics: calories, protein, carbohydrates, fat
        secondary_metrics: fiber, creatine, zinc, vitamin_d, omega_3,
            magnesium (at most six)
        timezone: None, meaning the system local zone; an IANA name
            otherwise
    """

    profile_id: int | None = None
    workout_sort_option: WorkoutSortOption = WorkoutSortOption.OFF
    primary_metrics: list[NutritionMetricType] = field(
        default_factory=lambda: list(PRIMARY_METRICS)
    )
    secondary_metrics: list[NutritionMetricType] = field(
        default_factory=lambda: list(SECONDARY_METRICS)
    )
    timezone: str | None = None
    id: int | None = None

    def __post_init__(self):
        self._check_secondary(self.secondary_metrics)
        _resolve_zone(self.timezone)

    @staticmethod
    def _check_secondary(metrics: list[NutritionMetricType]) -> None:
        if len(metrics) > MAX_SECONDARY_METRICS:
            raise ValidationError(
                f"At most {MAX_SECONDARY_METRICS} secondary metrics, got {len(metrics)}"
            )

    @property
    def tz(self) -> tzinfo | None:
        """Zone used to bucket entries into days (None = system local)."""
        return _resolve_zone(self.timezone)

    def set_timezone(self, name: str | None) -> None:
        """Use an IANA zone name for day boundaries, or None for system local."""
        _resolve_zone(name)
        self.timezone = name

    def set_secondary_metrics(self, metrics: list[NutritionMetricType]) -> None:
        self._check_secondary(metrics)
        self.secondary_metrics = list(metrics)

    def toggle_secondary_metric(self, metric: NutritionMetricType) -> bool:
        """Select or deselect a secondary metric.

        A selected metric is removed. An unselected one is appended only
        while fewer than six are selected.

        Returns:
            True if the selection changed
        """
        if metric in self.secondary_metrics:
            self.secondary_metrics.remove(metric)
            return True
        if len(self.secondary_metrics) < MAX_SECONDARY_METRICS:
            self.secondary_metrics.append(metric)
            return True
        return False

    def reset_to_defaults(self) -> None:
        self.workout_sort_option = WorkoutSortOption.OFF
        self.primary_metrics = list(PRIMARY_METRICS)
        self.secondary_metrics = list(SECONDARY_METRICS)
        self.timezone = None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "profile_id": self.profile_id,
            "workout_sort_option": self.workout_sort_option.value,
            "primary_metrics": [m.value for m in self.primary_metrics],
            "secondary_metrics": [m.value for m in self.secondary_metrics],
            "timezone": self.timezone,
        }

    @classmethod
    def from_dict(cls, data: dict, id: int | None = None) -> "Preferences":
        """Create from dictionary.

        Missing keys take their defaults; metric names that are no longer
        known are dropped.
        """
        try:
            sort_option = WorkoutSortOption(data.get("workout_sort_option", "off"))
        except ValueError:
            sort_option = WorkoutSortOption.OFF

        primary = data.get("primary_metrics")
        secondary = data.get("secondary_metrics")
        return cls(
            id=id,
            profile_id=data.get("profile_id"),
            workout_sort_option=sort_option,
            primary_metrics=(
                parse_metrics(primary) if primary is not None else list(PRIMARY_METRICS)
            ),
            secondary_metrics=(
                parse_metrics(secondary)[:MAX_SECONDARY_METRICS]
                if secondary is not None
                else list(SECONDARY_METRICS)
            ),
            timezone=data.get("timezone"),
        )

    def get_summary(self) -> str:
        """Generate a summary for display."""
        lines = [f"Workout sort: {self.workout_sort_option.display_name}"]
        lines.append(
            "Primary metrics: " + ", ".join(m.display_name for m in self.primary_metrics)
        )
        lines.append(
            "Secondary metrics: "
            + (", ".join(m.display_name for m in self.secondary_metrics) or "(none)")
        )
        lines.append(f"Timezone: {self.timezone or 'system local'}")
        return "\n".join(lines)
