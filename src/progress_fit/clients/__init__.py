"""Food-data lookup clients."""

from .base import FoodDataClient, FoodFacts

__all__ = ["FoodDataClient", "FoodFacts"]
