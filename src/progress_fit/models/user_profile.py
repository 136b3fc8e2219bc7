"""User profile data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class FitnessGoal(str, Enum):
    """Primary fitness goals."""

    WEIGHT_LOSS = "weight_loss"
    MUSCLE_GAIN = "muscle_gain"
    STRENGTH_TRAINING = "strength_training"
    ENDURANCE = "endurance"
    GENERAL_FITNESS = "general_fitness"
    MAINTENANCE = "maintenance"


class FitnessLevel(str, Enum):
    """Training experience level."""

    BEGINNER = "beginner"  # New to regular exercise
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class SubscriptionTier(str, Enum):
    STANDARD = "standard"
    PLUS_AI = "plus_ai"


class UnitSystem(str, Enum):
    """Units used to display weights and heights."""

    METRIC = "metric"
    IMPERIAL = "imperial"

    @property
    def weight_unit(self) -> str:
        return "kg" if self == UnitSystem.METRIC else "lbs"

    @property
    def height_unit(self) -> str:
        return "cm" if self == UnitSystem.METRIC else "ft/in"


@dataclass
class UserProfile:
    """The user who owns workouts and nutrition entries."""

    name: str
    email: str = ""
    age: int | None = None
    fitness_goal: FitnessGoal = FitnessGoal.GENERAL_FITNESS
    fitness_level: FitnessLevel = FitnessLevel.BEGINNER
    subscription_tier: SubscriptionTier = SubscriptionTier.STANDARD
    preferred_units: UnitSystem = UnitSystem.METRIC
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_ai_features(self) -> bool:
        return self.subscription_tier == SubscriptionTier.PLUS_AI

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "name": self.name,
            "email": self.email,
            "age": self.age,
            "fitness_goal": self.fitness_goal.value,
            "fitness_level": self.fitness_level.value,
            "subscription_tier": self.subscription_tier.value,
            "preferred_units": self.preferred_units.value,
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        id: int | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> "UserProfile":
        """Create from dictionary."""
        return cls(
            id=id,
            name=data["name"],
            email=data.get("email", ""),
            age=data.get("age"),
            fitness_goal=FitnessGoal(data.get("fitness_goal", "general_fitness")),
            fitness_level=FitnessLevel(data.get("fitness_level", "beginner")),
            subscription_tier=SubscriptionTier(data.get("subscription_tier", "standard")),
            preferred_units=UnitSystem(data.get("preferred_units", "metric")),
            created_at=created_at,
            updated_at=updated_at,
        )

    def get_summary(self) -> str:
        """Generate a short profile summary."""
        lines = [f"Name: {self.name}"]
        if self.email:
            lines.append(f"Email: {self.email}")
        if self.age:
            lines.append(f"Age: {self.age}")
        lines.append(f"Goal: {self.fitness_goal.value.replace('_', ' ')}")
        lines.append(f"Level: {self.fitness_level.value}")
        lines.append(f"Units: {self.preferred_units.value} ({self.preferred_units.weight_unit})")
        lines.append(f"Plan: {self.subscription_tier.value}")
        return "\n".join(lines)
