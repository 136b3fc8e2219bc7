"""Nutrition service: logging, editing and summarising food entries."""

import asyncio
import logging
import weakref
from collections.abc import Callable
from datetime import date, datetime, time, timedelta, tzinfo

from ..clients.base import FoodFacts
from ..clock import SYSTEM_CLOCK, Clock
from ..db.repositories import NutritionEntryRepository
from ..errors import NotFoundError, PersistenceError, ValidationError
from ..models.nutrition import LogMethod, MealType, NutritionEntry
from ..models.nutrition_metric import NutritionMetricType
from ..models.preferences import Preferences
from .nutrition_summary import (
    DailyNutritionSummary,
    aggregate_daily_totals,
    entries_for_day,
    summarize_day,
)

logger = logging.getLogger(__name__)


class NutritionService:
    """Runs nutrition-entry mutations against the store.

    Same contract as the workout service: entries are re-read from the
    store before every change, one lock per entry, and a failed save rolls
    the in-memory entry back before re-raising.
    """

    def __init__(self, repository: NutritionEntryRepository, clock: Clock = SYSTEM_CLOCK):
        self.repository = repository
        self.clock = clock
        self._entries: weakref.WeakValueDictionary[str, NutritionEntry] = (
            weakref.WeakValueDictionary()
        )
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock(self, entry_id: str) -> asyncio.Lock:
        lock = self._locks.get(entry_id)
        if lock is None:
            lock = self._locks[entry_id] = asyncio.Lock()
        return lock

    def _adopt(self, stored: NutritionEntry) -> NutritionEntry:
        cached = self._entries.get(stored.id)
        if cached is not None and cached.to_dict() == stored.to_dict():
            return cached
        self._entries[stored.id] = stored
        return stored

    async def _load(self, entry_id: str) -> NutritionEntry:
        stored = await self.repository.get(entry_id)
        if stored is None:
            self._entries.pop(entry_id, None)
            raise NotFoundError(f"Nutrition entry {entry_id} not found")
        return self._adopt(stored)

    async def _commit(self, entry: NutritionEntry, undo: Callable[[], None]) -> None:
        try:
            await self.repository.save(entry)
        except PersistenceError:
            undo()
            logger.warning("Save of nutrition entry %s failed, change undone", entry.id)
            raise

    async def _add(self, entry: NutritionEntry) -> NutritionEntry:
        await self.repository.save(entry)
        self._entries[entry.id] = entry
        logger.info(
            "Logged %s (%s, %s)", entry.display_name, entry.meal_type.value, entry.log_method.value
        )
        return entry

    async def get_entry(self, entry_id: str) -> NutritionEntry:
        return await self._load(entry_id)

    async def log_manual(
        self,
        food_name: str,
        calories: float,
        protein: float,
        carbohydrates: float,
        fat: float,
        serving_size: str = "1 serving",
        quantity: float = 1.0,
        meal_type: MealType = MealType.OTHER,
        brand_name: str | None = None,
        fiber: float | None = None,
        sugar: float | None = None,
        sodium: float | None = None,
        extended_nutrients: dict[NutritionMetricType, float] | None = None,
        notes: str | None = None,
        profile_id: int | None = None,
    ) -> NutritionEntry:
        """Log a food typed in by hand."""
        entry = NutritionEntry(
            food_name=food_name,
            serving_size=serving_size,
            quantity=quantity,
            calories=calories,
            protein=protein,
            carbohydrates=carbohydrates,
            fat=fat,
            meal_type=meal_type,
            log_method=LogMethod.MANUAL,
            brand_name=brand_name,
            fiber=fiber,
            sugar=sugar,
            sodium=sodium,
            extended_nutrients=extended_nutrients or {},
            notes=notes,
            profile_id=profile_id,
            logged_at=self.clock.now(),
        )
        return await self._add(entry)

    async def log_food_facts(
        self,
        facts: FoodFacts,
        quantity: float = 1.0,
        meal_type: MealType = MealType.OTHER,
        log_method: LogMethod = LogMethod.SEARCH,
        profile_id: int | None = None,
    ) -> NutritionEntry:
        """Log a food-search or barcode lookup result."""
        if log_method.requires_ai:
            raise ValidationError("AI camera detections need a confidence; use log_ai_detection")
        entry = NutritionEntry.from_food_facts(
            facts,
            quantity=quantity,
            meal_type=meal_type,
            log_method=log_method,
            clock=self.clock,
        )
        entry.profile_id = profile_id
        return await self._add(entry)

    async def log_ai_detection(
        self,
        facts: FoodFacts,
        confidence: float,
        quantity: float = 1.0,
        meal_type: MealType = MealType.OTHER,
        profile_id: int | None = None,
    ) -> NutritionEntry:
        """Log a food recognised by the AI camera.

        Detections below the verification threshold are flagged with
        ``needs_verification`` until the user confirms them.
        """
        entry = NutritionEntry.from_food_facts(
            facts,
            quantity=quantity,
            meal_type=meal_type,
            log_method=LogMethod.AI_CAMERA,
            clock=self.clock,
        )
        entry.set_ai_data(confidence, facts.food_database_id)
        entry.profile_id = profile_id
        return await self._add(entry)

    async def log_duplicate(
        self,
        entry_id: str,
        quantity: float | None = None,
        meal_type: MealType | None = None,
    ) -> NutritionEntry:
        """Log a favourite or recent entry again, as of now."""
        source = await self._load(entry_id)
        return await self._add(
            source.duplicate(quantity=quantity, meal_type=meal_type, clock=self.clock)
        )

    async def update_quantity(self, entry_id: str, quantity: float) -> NutritionEntry:
        async with self._lock(entry_id):
            entry = await self._load(entry_id)
            previous = entry.quantity
            entry.update_quantity(quantity)

            def undo():
                entry.quantity = previous

            await self._commit(entry, undo)
            return entry

    async def set_favorite(self, entry_id: str, favorite: bool = True) -> NutritionEntry:
        async with self._lock(entry_id):
            entry = await self._load(entry_id)
            previous = entry.is_favorite
            if favorite:
                entry.mark_as_favorite()
            else:
                entry.remove_from_favorites()

            def undo():
                entry.is_favorite = previous

            await self._commit(entry, undo)
            return entry

    async def verify_entry(self, entry_id: str) -> NutritionEntry:
        async with self._lock(entry_id):
            entry = await self._load(entry_id)
            previous = entry.is_verified
            entry.verify()

            def undo():
                entry.is_verified = previous

            await self._commit(entry, undo)
            return entry

    async def delete_entry(self, entry_id: str) -> None:
        """Delete an entry; it stays logged if the store refuses."""
        async with self._lock(entry_id):
            await self._load(entry_id)
            try:
                await self.repository.delete(entry_id)
            except PersistenceError:
                logger.warning("Delete of nutrition entry %s failed, entry kept", entry_id)
                raise
            self._entries.pop(entry_id, None)
        logger.info("Deleted nutrition entry %s", entry_id)

    async def entries_for_day(
        self, day: date, tz: tzinfo | None = None, profile_id: int | None = None
    ) -> list[NutritionEntry]:
        """Entries logged on a calendar day in ``tz`` (system local when None)."""
        # Query a padded window, then bucket exactly by local date
        start = datetime.combine(day - timedelta(days=1), time.min, tzinfo=tz)
        end = datetime.combine(day + timedelta(days=2), time.min, tzinfo=tz)
        stored = await self.repository.list_between(start, end, profile_id=profile_id)
        entries = [self._adopt(e) for e in stored]
        return entries_for_day(entries, day, tz)

    async def daily_totals(
        self, day: date, tz: tzinfo | None = None, profile_id: int | None = None
    ) -> dict[NutritionMetricType, float]:
        entries = await self.entries_for_day(day, tz, profile_id=profile_id)
        return aggregate_daily_totals(entries, day, tz)

    async def daily_summary(
        self,
        day: date,
        preferences: Preferences,
        profile_id: int | None = None,
    ) -> DailyNutritionSummary:
        entries = await self.entries_for_day(day, preferences.tz, profile_id=profile_id)
        return summarize_day(entries, day, preferences)

    async def list_favorites(self, profile_id: int | None = None) -> list[NutritionEntry]:
        stored = await self.repository.list_favorites(profile_id=profile_id)
        return [self._adopt(e) for e in stored]
