"""Protocol for food-data lookup clients."""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass
class FoodFacts:
    """A nutrition facts record returned by a food database.

    Nutrient values are per serving. Any of them may be missing when the
    source does not report it.
    """

    name: str
    serving_size: str = "100g"
    brand: str | None = None
    calories: float | None = None
    protein: float | None = None
    carbohydrates: float | None = None
    fat: float | None = None
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None
    food_database_id: str | None = None
    barcode: str | None = None
    is_verified: bool = False
    source: str = ""

    @property
    def display_name(self) -> str:
        if self.brand:
            return f"{self.brand} {self.name}"
        return self.name


@runtime_checkable
class FoodDataClient(Protocol):
    """Protocol for food databases (text search and barcode lookup)."""

    @property
    def source_name(self) -> str:
        """Return the name of this data source."""
        ...

    async def search(self, query: str) -> FoodFacts | None:
        """Return the best match for a free-text query, if any."""
        ...

    async def lookup_barcode(self, barcode: str) -> FoodFacts | None:
        """Return the product registered under a barcode, if any."""
        ...
