"""Nutrition entry model: one logged food intake record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum
from typing import TYPE_CHECKING
from uuid import uuid4

from ..clock import SYSTEM_CLOCK, Clock
from ..errors import ValidationError, require_in_range, require_non_negative
from .nutrition_metric import NutritionMetricType

if TYPE_CHECKING:
    from ..clients.base import FoodFacts

# Entries with AI confidence below this need a human check
VERIFICATION_THRESHOLD = 0.8


class MealType(str, Enum):
    """Which meal an entry belongs to."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def time_range(self) -> str:
        """Typical time window for the meal."""
        return {
            MealType.BREAKFAST: "6:00 - 10:00",
            MealType.LUNCH: "11:00 - 14:00",
            MealType.DINNER: "17:00 - 21:00",
        }.get(self, "Any time")


class LogMethod(str, Enum):
    """How an entry was logged."""

    MANUAL = "manual"
    SEARCH = "search"
    BARCODE = "barcode"
    AI_CAMERA = "ai_camera"
    FAVORITE = "favorite"
    RECENT = "recent"

    @property
    def display_name(self) -> str:
        return {
            LogMethod.MANUAL: "Manual Entry",
            LogMethod.SEARCH: "Food Search",
            LogMethod.BARCODE: "Barcode Scan",
            LogMethod.AI_CAMERA: "AI Camera",
            LogMethod.FAVORITE: "Favorite",
            LogMethod.RECENT: "Recent",
        }[self]

    @property
    def requires_ai(self) -> bool:
        """Whether this method needs the AI subscription tier."""
        return self == LogMethod.AI_CAMERA


_KNOWN_METRICS = {m.value for m in NutritionMetricType}

# Metrics stored in dedicated fields rather than extended_nutrients
_CORE_FIELDS = {
    NutritionMetricType.CALORIES: "calories",
    NutritionMetricType.PROTEIN: "protein",
    NutritionMetricType.CARBOHYDRATES: "carbohydrates",
    NutritionMetricType.FAT: "fat",
    NutritionMetricType.FIBER: "fiber",
    NutritionMetricType.SUGAR: "sugar",
    NutritionMetricType.SODIUM: "sodium",
}


@dataclass(eq=False)
class NutritionEntry:
    """A logged food with per-serving nutrition facts.

    All nutrition values are per serving; totals multiply by quantity.
    Metrics beyond the core macros live in ``extended_nutrients`` keyed by
    NutritionMetricType.
    """

    food_name: str
    serving_size: str
    quantity: float
    calories: float
    protein: float
    carbohydrates: float
    fat: float
    meal_type: MealType = MealType.OTHER
    log_method: LogMethod = LogMethod.MANUAL
    brand_name: str | None = None
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None
    extended_nutrients: dict[NutritionMetricType, float] = field(default_factory=dict)
    food_database_id: str | None = None
    barcode: str | None = None
    ai_confidence: float | None = None
    is_verified: bool = False
    is_favorite: bool = False
    notes: str | None = None
    profile_id: int | None = None
    logged_at: datetime = field(default_factory=SYSTEM_CLOCK.now)
    id: str = field(default_factory=lambda: str(uuid4()))

    def __post_init__(self):
        require_non_negative("quantity", self.quantity)
        require_in_range("ai_confidence", self.ai_confidence, 0.0, 1.0)
        self._validate_nutrition(
            calories=self.calories,
            protein=self.protein,
            carbohydrates=self.carbohydrates,
            fat=self.fat,
            fiber=self.fiber,
            sugar=self.sugar,
            sodium=self.sodium,
        )
        self.extended_nutrients = self._normalize_extended(self.extended_nutrients)

    @staticmethod
    def _validate_nutrition(**values: float | None) -> None:
        for name, value in values.items():
            require_non_negative(name, value)

    @staticmethod
    def _normalize_extended(values: dict) -> dict[NutritionMetricType, float]:
        normalized = {}
        for key, value in values.items():
            if key not in _KNOWN_METRICS:
                raise ValidationError(f"Unknown nutrition metric: {key}")
            metric = NutritionMetricType(key)
            if metric in _CORE_FIELDS:
                raise ValidationError(f"{metric.value} has a dedicated field")
            require_non_negative(metric.value, value)
            normalized[metric] = float(value)
        return normalized

    def per_serving(self, metric: NutritionMetricType) -> float:
        """Per-serving amount of a metric, 0 when unknown."""
        field_name = _CORE_FIELDS.get(metric)
        if field_name is not None:
            return getattr(self, field_name) or 0.0
        return self.extended_nutrients.get(metric, 0.0)

    def total_for(self, metric: NutritionMetricType) -> float:
        """Amount of a metric consumed, accounting for quantity."""
        return self.per_serving(metric) * self.quantity

    @property
    def total_calories(self) -> float:
        return self.calories * self.quantity

    @property
    def total_protein(self) -> float:
        return self.protein * self.quantity

    @property
    def total_carbohydrates(self) -> float:
        return self.carbohydrates * self.quantity

    @property
    def total_fat(self) -> float:
        return self.fat * self.quantity

    @property
    def total_fiber(self) -> float:
        return (self.fiber or 0.0) * self.quantity

    @property
    def total_sugar(self) -> float:
        return (self.sugar or 0.0) * self.quantity

    @property
    def total_sodium(self) -> float:
        return (self.sodium or 0.0) * self.quantity

    @property
    def display_name(self) -> str:
        if self.brand_name:
            return f"{self.food_name} ({self.brand_name})"
        return self.food_name

    @property
    def needs_verification(self) -> bool:
        """True when an AI guess is not confident enough to trust."""
        if self.ai_confidence is None:
            return False
        return self.ai_confidence < VERIFICATION_THRESHOLD

    def local_logged_at(self, tz: tzinfo | None = None) -> datetime:
        """Logged time in the given zone (system local when None).

        Naive timestamps are taken to already be in that zone.
        """
        if self.logged_at.tzinfo is None:
            return self.logged_at
        return self.logged_at.astimezone(tz)

    def is_today(self, clock: Clock = SYSTEM_CLOCK, tz: tzinfo | None = None) -> bool:
        now = clock.now()
        today = (now.astimezone(tz) if now.tzinfo else now).date()
        return self.local_logged_at(tz).date() == today

    def update_quantity(self, quantity: float) -> None:
        require_non_negative("quantity", quantity)
        self.quantity = quantity

    def mark_as_favorite(self) -> None:
        self.is_favorite = True

    def remove_from_favorites(self) -> None:
        self.is_favorite = False

    def update_nutrition(
        self,
        calories: float | None = None,
        protein: float | None = None,
        carbohydrates: float | None = None,
        fat: float | None = None,
        fiber: float | None = None,
        sugar: float | None = None,
        sodium: float | None = None,
        extended: dict | None = None,
    ) -> None:
        """Overwrite only the supplied per-serving values.

        ``extended`` entries are merged into extended_nutrients.
        """
        values = {
            "calories": calories,
            "protein": protein,
            "carbohydrates": carbohydrates,
            "fat": fat,
            "fiber": fiber,
            "sugar": sugar,
            "sodium": sodium,
        }
        self._validate_nutrition(**values)
        merged = self._normalize_extended(extended or {})

        for name, value in values.items():
            if value is not None:
                setattr(self, name, value)
        self.extended_nutrients.update(merged)

    def set_ai_data(self, confidence: float, food_database_id: str | None = None) -> None:
        """Record an AI camera detection."""
        require_in_range("ai_confidence", confidence, 0.0, 1.0)
        self.ai_confidence = confidence
        self.food_database_id = food_database_id
        self.log_method = LogMethod.AI_CAMERA

    def set_barcode_data(self, barcode: str, food_database_id: str) -> None:
        """Record a barcode match. Barcode products count as verified."""
        self.barcode = barcode
        self.food_database_id = food_database_id
        self.log_method = LogMethod.BARCODE
        self.is_verified = True

    def verify(self) -> None:
        self.is_verified = True

    def duplicate(
        self,
        quantity: float | None = None,
        meal_type: MealType | None = None,
        clock: Clock = SYSTEM_CLOCK,
    ) -> NutritionEntry:
        """Log the same food again, as a fresh manual entry."""
        return NutritionEntry(
            food_name=self.food_name,
            serving_size=self.serving_size,
            quantity=self.quantity if quantity is None else quantity,
            calories=self.calories,
            protein=self.protein,
            carbohydrates=self.carbohydrates,
            fat=self.fat,
            meal_type=meal_type or self.meal_type,
            log_method=LogMethod.MANUAL,
            brand_name=self.brand_name,
            fiber=self.fiber,
            sugar=self.sugar,
            sodium=self.sodium,
            extended_nutrients=dict(self.extended_nutrients),
            food_database_id=self.food_database_id,
            is_verified=self.is_verified,
            profile_id=self.profile_id,
            logged_at=clock.now(),
        )

    @classmethod
    def from_food_facts(
        cls,
        facts: FoodFacts,
        quantity: float = 1.0,
        meal_type: MealType = MealType.OTHER,
        log_method: LogMethod = LogMethod.SEARCH,
        clock: Clock = SYSTEM_CLOCK,
    ) -> NutritionEntry:
        """Build an entry from a food-data lookup record."""
        entry = cls(
            food_name=facts.name,
            brand_name=facts.brand,
            serving_size=facts.serving_size,
            quantity=quantity,
            calories=facts.calories or 0.0,
            protein=facts.protein or 0.0,
            carbohydrates=facts.carbohydrates or 0.0,
            fat=facts.fat or 0.0,
            fiber=facts.fiber,
            sugar=facts.sugar,
            sodium=facts.sodium,
            meal_type=meal_type,
            log_method=log_method,
            food_database_id=facts.food_database_id,
            is_verified=facts.is_verified,
            logged_at=clock.now(),
        )
        if facts.barcode and log_method == LogMethod.BARCODE:
            entry.set_barcode_data(facts.barcode, facts.food_database_id or facts.barcode)
        return entry

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "food_name": self.food_name,
            "brand_name": self.brand_name,
            "serving_size": self.serving_size,
            "quantity": self.quantity,
            "logged_at": self.logged_at.isoformat(),
            "meal_type": self.meal_type.value,
            "log_method": self.log_method.value,
            "calories": self.calories,
            "protein": self.protein,
            "carbohydrates": self.carbohydrates,
            "fat": self.fat,
            "fiber": self.fiber,
            "sugar": self.sugar,
            "sodium": self.sodium,
            "extended_nutrients": {
                metric.value: value for metric, value in self.extended_nutrients.items()
            },
            "food_database_id": self.food_database_id,
            "barcode": self.barcode,
            "ai_confidence": self.ai_confidence,
            "is_verified": self.is_verified,
            "is_favorite": self.is_favorite,
            "notes": self.notes,
            "profile_id": self.profile_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> NutritionEntry:
        """Create from dictionary."""
        kwargs = {}
        if data.get("id"):
            kwargs["id"] = data["id"]
        if data.get("logged_at"):
            kwargs["logged_at"] = datetime.fromisoformat(data["logged_at"])
        return cls(
            food_name=data["food_name"],
            brand_name=data.get("brand_name"),
            serving_size=data.get("serving_size", "1 serving"),
            quantity=data.get("quantity", 1.0),
            meal_type=MealType(data.get("meal_type", "other")),
            log_method=LogMethod(data.get("log_method", "manual")),
            calories=data.get("calories", 0.0),
            protein=data.get("protein", 0.0),
            carbohydrates=data.get("carbohydrates", 0.0),
            fat=data.get("fat", 0.0),
            fiber=data.get("fiber"),
            sugar=data.get("sugar"),
            sodium=data.get("sodium"),
            extended_nutrients={
                key: value
                for key, value in (data.get("extended_nutrients") or {}).items()
                if key in _KNOWN_METRICS
            },
            food_database_id=data.get("food_database_id"),
            barcode=data.get("barcode"),
            ai_confidence=data.get("ai_confidence"),
            is_verified=bool(data.get("is_verified", False)),
            is_favorite=bool(data.get("is_favorite", False)),
            notes=data.get("notes"),
            profile_id=data.get("profile_id"),
            **kwargs,
        )
