"""Daily nutrition totals and progress against targets."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, tzinfo

from ..models.nutrition import MealType, NutritionEntry
from ..models.nutrition_metric import NutritionMetricType
from ..models.preferences import Preferences


def entries_for_day(
    entries: Iterable[NutritionEntry], day: date, tz: tzinfo | None = None
) -> list[NutritionEntry]:
    """Entries whose logged time falls on ``day`` in ``tz``.

    ``tz=None`` means the system local zone. Naive timestamps are taken
    to already be in ``tz``.
    """
    return [e for e in entries if e.local_logged_at(tz).date() == day]


def aggregate_daily_totals(
    entries: Iterable[NutritionEntry], day: date, tz: tzinfo | None = None
) -> dict[NutritionMetricType, float]:
    """Sum every metric over the entries logged on a given day.

    The result has a key for every NutritionMetricType; metrics with
    nothing logged are 0.0.
    """
    totals = {metric: 0.0 for metric in NutritionMetricType}
    for entry in entries_for_day(entries, day, tz):
        for metric in NutritionMetricType:
            totals[metric] += entry.total_for(metric)
    return totals


@dataclass(frozen=True)
class MetricProgress:
    """How far a day's intake of one metric is from its daily target."""

    metric: NutritionMetricType
    consumed: float
    target: float

    @property
    def remaining(self) -> float:
        return max(0.0, self.target - self.consumed)

    @property
    def progress(self) -> float:
        """Fraction of the target reached, capped at 1."""
        if self.target <= 0:
            return 0.0
        return min(self.consumed / self.target, 1.0)

    @property
    def display_value(self) -> float:
        # Goals count down; limits count up
        if self.metric.higher_is_better:
            return self.remaining
        return self.consumed

    @property
    def label(self) -> str:
        suffix = "left" if self.metric.higher_is_better else "today"
        return f"{self.metric.display_name} {suffix}"

    def to_dict(self) -> dict:
        return {
            "metric": self.metric.value,
            "label": self.label,
            "unit": self.metric.short_unit,
            "consumed": self.consumed,
            "target": self.target,
            "remaining": self.remaining,
            "progress": self.progress,
            "display_value": self.display_value,
        }


def metric_progress(
    totals: dict[NutritionMetricType, float], metric: NutritionMetricType
) -> MetricProgress:
    return MetricProgress(
        metric=metric,
        consumed=totals.get(metric, 0.0),
        target=metric.recommended_daily_value,
    )


@dataclass
class DailyNutritionSummary:
    """Everything a daily nutrition dashboard needs for one day."""

    day: date
    totals: dict[NutritionMetricType, float]
    primary: list[MetricProgress] = field(default_factory=list)
    secondary: list[MetricProgress] = field(default_factory=list)
    meals: dict[MealType, list[NutritionEntry]] = field(default_factory=dict)

    @property
    def entry_count(self) -> int:
        return sum(len(entries) for entries in self.meals.values())

    def to_dict(self) -> dict:
        return {
            "day": self.day.isoformat(),
            "entry_count": self.entry_count,
            "totals": {m.value: v for m, v in self.totals.items()},
            "primary": [p.to_dict() for p in self.primary],
            "secondary": [p.to_dict() for p in self.secondary],
            "meals": {
                meal.value: [e.to_dict() for e in entries]
                for meal, entries in self.meals.items()
            },
        }


def summarize_day(
    entries: Iterable[NutritionEntry],
    day: date,
    preferences: Preferences,
) -> DailyNutritionSummary:
    """Build the daily summary using the preferred metrics and timezone."""
    tz = preferences.tz
    todays = sorted(entries_for_day(entries, day, tz), key=lambda e: e.logged_at)
    totals = aggregate_daily_totals(todays, day, tz)

    meals: dict[MealType, list[NutritionEntry]] = {}
    for meal_type in MealType:
        in_meal = [e for e in todays if e.meal_type == meal_type]
        if in_meal:
            meals[meal_type] = in_meal

    return DailyNutritionSummary(
        day=day,
        totals=totals,
        primary=[metric_progress(totals, m) for m in preferences.primary_metrics],
        secondary=[metric_progress(totals, m) for m in preferences.secondary_metrics],
        meals=meals,
    )
