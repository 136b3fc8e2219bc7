"""Nutrition routes."""

from datetime import date

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel

from ...clients.base import FoodFacts
from ...models.nutrition import LogMethod, MealType, NutritionEntry
from ...models.nutrition_metric import NutritionMetricType
from ...models.preferences import Preferences
from ...services.nutrition_service import NutritionService

router = APIRouter(prefix="/nutrition", tags=["nutrition"])


def get_service(request: Request) -> NutritionService:
    """Get the nutrition service from app state."""
    return request.app.state.nutrition_service


class ManualEntry(BaseModel):
    food_name: str
    calories: float
    protein: float
    carbohydrates: float
    fat: float
    serving_size: str = "1 serving"
    quantity: float = 1.0
    meal_type: MealType = MealType.OTHER
    brand_name: str | None = None
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None
    extended_nutrients: dict[NutritionMetricType, float] = {}
    notes: str | None = None
    profile_id: int | None = None


class FoodRecord(BaseModel):
    """A food-data record plus where and how much to log it."""

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
    quantity: float = 1.0
    meal_type: MealType = MealType.OTHER
    profile_id: int | None = None

    def split(self) -> tuple[FoodFacts, dict]:
        data = self.model_dump()
        options = {
            k: data.pop(k)
            for k in ("quantity", "meal_type", "profile_id", "log_method", "confidence")
            if k in data
        }
        return FoodFacts(**data), options


class LookupEntry(FoodRecord):
    """A food-search or barcode result to log."""

    log_method: LogMethod = LogMethod.SEARCH


class DetectionEntry(FoodRecord):
    """A food recognised by the AI camera."""

    confidence: float


class DuplicateEntry(BaseModel):
    quantity: float | None = None
    meal_type: MealType | None = None


class QuantityUpdate(BaseModel):
    quantity: float


class FavoriteUpdate(BaseModel):
    favorite: bool = True


def entry_payload(entry: NutritionEntry) -> dict:
    data = entry.to_dict()
    data["display_name"] = entry.display_name
    data["total_calories"] = entry.total_calories
    data["total_protein"] = entry.total_protein
    data["total_carbohydrates"] = entry.total_carbohydrates
    data["total_fat"] = entry.total_fat
    data["needs_verification"] = entry.needs_verification
    return data


async def _preferences(request: Request, profile_id: int | None) -> Preferences:
    if profile_id is None:
        profile = await request.app.state.profiles.get_latest()
        if profile is None:
            return Preferences()
        profile_id = profile.id
    return await request.app.state.preferences.get_or_default(profile_id)


@router.post("/entries", status_code=201)
async def log_manual(body: ManualEntry, service: NutritionService = Depends(get_service)):
    entry = await service.log_manual(**body.model_dump())
    return entry_payload(entry)


@router.post("/entries/lookup", status_code=201)
async def log_lookup(body: LookupEntry, service: NutritionService = Depends(get_service)):
    """Log a record returned by a food database search or barcode scan."""
    facts, options = body.split()
    entry = await service.log_food_facts(facts, **options)
    return entry_payload(entry)


@router.post("/entries/detections", status_code=201)
async def log_detection(body: DetectionEntry, service: NutritionService = Depends(get_service)):
    facts, options = body.split()
    entry = await service.log_ai_detection(facts, **options)
    return entry_payload(entry)


@router.get("/entries/{entry_id}")
async def get_entry(entry_id: str, service: NutritionService = Depends(get_service)):
    return entry_payload(await service.get_entry(entry_id))


@router.post("/entries/{entry_id}/duplicate", status_code=201)
async def duplicate_entry(
    entry_id: str, body: DuplicateEntry, service: NutritionService = Depends(get_service)
):
    entry = await service.log_duplicate(
        entry_id, quantity=body.quantity, meal_type=body.meal_type
    )
    return entry_payload(entry)


@router.patch("/entries/{entry_id}/quantity")
async def update_quantity(
    entry_id: str, body: QuantityUpdate, service: NutritionService = Depends(get_service)
):
    return entry_payload(await service.update_quantity(entry_id, body.quantity))


@router.put("/entries/{entry_id}/favorite")
async def set_favorite(
    entry_id: str, body: FavoriteUpdate, service: NutritionService = Depends(get_service)
):
    return entry_payload(await service.set_favorite(entry_id, body.favorite))


@router.post("/entries/{entry_id}/verify")
async def verify_entry(entry_id: str, service: NutritionService = Depends(get_service)):
    return entry_payload(await service.verify_entry(entry_id))


@router.delete("/entries/{entry_id}", status_code=204)
async def delete_entry(entry_id: str, service: NutritionService = Depends(get_service)):
    await service.delete_entry(entry_id)
    return Response(status_code=204)


@router.get("/favorites")
async def list_favorites(
    profile_id: int | None = None, service: NutritionService = Depends(get_service)
):
    return [entry_payload(e) for e in await service.list_favorites(profile_id=profile_id)]


@router.get("/days/{day}")
async def daily_summary(
    day: date,
    request: Request,
    profile_id: int | None = None,
    service: NutritionService = Depends(get_service),
):
    """Totals and target progress for one calendar day."""
    preferences = await _preferences(request, profile_id)
    summary = await service.daily_summary(day, preferences, profile_id=profile_id)
    return summary.to_dict()


@router.get("/days/{day}/totals")
async def daily_totals(
    day: date,
    request: Request,
    profile_id: int | None = None,
    service: NutritionService = Depends(get_service),
):
    preferences = await _preferences(request, profile_id)
    totals = await service.daily_totals(day, preferences.tz, profile_id=profile_id)
    return {metric.value: value for metric, value in totals.items()}
