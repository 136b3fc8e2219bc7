"""Tests for nutrition entries and the metric catalogue."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from progress_fit.clients.base import FoodDataClient, FoodFacts
from progress_fit.errors import ValidationError
from progress_fit.models.nutrition import LogMethod, MealType, NutritionEntry
from progress_fit.models.nutrition_metric import (
    METRIC_INFO,
    METRIC_PRESETS,
    NutritionMetricType,
    parse_metrics,
)


def make_entry(**overrides) -> NutritionEntry:
    values = dict(
        food_name="Oats",
        serving_size="40g",
        quantity=1.0,
        calories=150,
        protein=5,
        carbohydrates=27,
        fat=3,
    )
    values.update(overrides)
    return NutritionEntry(**values)


class TestTotals:
    """Per-serving values scale with quantity."""

    def test_totals_multiply_by_quantity(self):
        entry = make_entry(calories=200, quantity=1.5, fiber=4)

        assert entry.total_calories == 300
        assert entry.total_protein == 7.5
        assert entry.total_fiber == 6
        assert entry.total_sugar == 0

    def test_total_for_extended_metric(self, sample_entry):
        assert sample_entry.total_for(NutritionMetricType.ZINC) == 1.5
        assert sample_entry.total_for(NutritionMetricType.SODIUM) == 111
        assert sample_entry.total_for(NutritionMetricType.IRON) == 0

    def test_zero_quantity_is_allowed(self):
        assert make_entry(quantity=0).total_calories == 0

    def test_update_quantity_rejects_negative(self):
        entry = make_entry()
        with pytest.raises(ValidationError):
            entry.update_quantity(-1)
        assert entry.quantity == 1.0

    def test_display_name_includes_brand(self, sample_entry):
        assert sample_entry.display_name == "Chicken Breast (Farm Fresh)"
        assert make_entry().display_name == "Oats"


class TestValidation:
    """Tests for constructor and update validation."""

    def test_negative_calories_rejected(self):
        with pytest.raises(ValidationError):
            make_entry(calories=-10)

    def test_unknown_extended_metric_rejected(self):
        with pytest.raises(ValidationError, match="Unknown nutrition metric"):
            make_entry(extended_nutrients={"unobtainium": 1})

    def test_core_metric_not_allowed_in_extended(self):
        with pytest.raises(ValidationError):
            make_entry(extended_nutrients={NutritionMetricType.PROTEIN: 10})

    def test_extended_accepts_string_keys(self):
        entry = make_entry(extended_nutrients={"creatine": 5})
        assert entry.extended_nutrients == {NutritionMetricType.CREATINE: 5.0}

    def test_update_nutrition_only_touches_supplied_values(self, sample_entry):
        sample_entry.update_nutrition(calories=170, extended={"iron": 0.9})

        assert sample_entry.calories == 170
        assert sample_entry.protein == 31
        assert sample_entry.extended_nutrients[NutritionMetricType.IRON] == 0.9
        assert sample_entry.extended_nutrients[NutritionMetricType.ZINC] == 1.0

    def test_update_nutrition_is_all_or_nothing(self, sample_entry):
        with pytest.raises(ValidationError):
            sample_entry.update_nutrition(calories=170, fat=-1)
        assert sample_entry.calories == 165


class TestLoggingMetadata:
    """Tests for AI, barcode and verification data."""

    def test_needs_verification_below_threshold(self):
        entry = make_entry()
        assert not entry.needs_verification

        entry.set_ai_data(0.79, food_database_id="fdc-1")
        assert entry.needs_verification
        assert entry.log_method == LogMethod.AI_CAMERA

        entry.set_ai_data(0.8)
        assert not entry.needs_verification

    def test_ai_confidence_out_of_range(self):
        with pytest.raises(ValidationError):
            make_entry().set_ai_data(1.5)

    def test_barcode_data_marks_verified(self):
        entry = make_entry()
        entry.set_barcode_data("0123456789012", "off-42")

        assert entry.is_verified
        assert entry.log_method == LogMethod.BARCODE
        assert (entry.barcode, entry.food_database_id) == ("0123456789012", "off-42")

    def test_favorites(self):
        entry = make_entry()
        entry.mark_as_favorite()
        assert entry.is_favorite
        entry.remove_from_favorites()
        assert not entry.is_favorite

    def test_log_method_requires_ai(self):
        assert LogMethod.AI_CAMERA.requires_ai
        assert not LogMethod.MANUAL.requires_ai


class TestDuplication:
    """Tests for logging the same food again."""

    def test_duplicate_is_a_fresh_manual_entry(self, sample_entry, clock):
        sample_entry.mark_as_favorite()
        clock.advance(hours=6)

        copy = sample_entry.duplicate(quantity=2, meal_type=MealType.DINNER, clock=clock)

        assert copy.id != sample_entry.id
        assert copy.logged_at == clock.now()
        assert copy.quantity == 2
        assert copy.meal_type == MealType.DINNER
        assert copy.log_method == LogMethod.MANUAL
        assert not copy.is_favorite
        assert copy.extended_nutrients == sample_entry.extended_nutrients
        assert copy.extended_nutrients is not sample_entry.extended_nutrients

    def test_duplicate_keeps_quantity_and_meal_by_default(self, sample_entry, clock):
        copy = sample_entry.duplicate(clock=clock)
        assert (copy.quantity, copy.meal_type) == (1.5, MealType.LUNCH)


class TestFoodFacts:
    """Tests for entries built from lookup records."""

    def test_from_search_result(self, clock):
        facts = FoodFacts(name="Greek Yogurt", brand="Fage", calories=100, protein=18)

        entry = NutritionEntry.from_food_facts(facts, quantity=2, meal_type=MealType.BREAKFAST, clock=clock)

        assert entry.food_name == "Greek Yogurt"
        assert entry.brand_name == "Fage"
        assert entry.total_protein == 36
        assert entry.carbohydrates == 0
        assert entry.log_method == LogMethod.SEARCH
        assert entry.logged_at == clock.now()

    def test_from_barcode_scan(self, clock):
        facts = FoodFacts(name="Protein Bar", calories=210, barcode="5000", food_database_id="off-5000")

        entry = NutritionEntry.from_food_facts(facts, log_method=LogMethod.BARCODE, clock=clock)

        assert entry.is_verified
        assert entry.barcode == "5000"

    def test_facts_display_name(self):
        assert FoodFacts(name="Oats", brand="Quaker").display_name == "Quaker Oats"

    def test_client_protocol_is_runtime_checkable(self):
        class StaticClient:
            source_name = "static"

            async def search(self, query):
                return FoodFacts(name=query)

            async def lookup_barcode(self, barcode):
                return None

        assert isinstance(StaticClient(), FoodDataClient)


class TestDays:
    """Tests for local day handling."""

    def test_local_logged_at_converts_zone(self):
        entry = make_entry(logged_at=datetime(2024, 3, 15, 2, 0, tzinfo=timezone.utc))
        local = entry.local_logged_at(ZoneInfo("America/New_York"))
        assert local.date().isoformat() == "2024-03-14"

    def test_naive_timestamps_are_taken_as_local(self):
        entry = make_entry(logged_at=datetime(2024, 3, 15, 23, 30))
        assert entry.local_logged_at(ZoneInfo("Asia/Tokyo")) == datetime(2024, 3, 15, 23, 30)

    def test_is_today(self, clock, sample_entry):
        utc = timezone.utc
        assert sample_entry.is_today(clock, utc)
        clock.advance(days=1)
        assert not sample_entry.is_today(clock, utc)


class TestSerialization:
    """Tests for to_dict/from_dict."""

    def test_round_trip(self, sample_entry):
        sample_entry.set_ai_data(0.6)

        restored = NutritionEntry.from_dict(sample_entry.to_dict())

        assert restored.id == sample_entry.id
        assert restored.logged_at == sample_entry.logged_at
        assert restored.extended_nutrients == sample_entry.extended_nutrients
        assert restored.needs_verification

    def test_from_dict_drops_unknown_extended_metrics(self, sample_entry):
        data = sample_entry.to_dict()
        data["extended_nutrients"]["retired_metric"] = 3

        restored = NutritionEntry.from_dict(data)

        assert "retired_metric" not in restored.extended_nutrients
        assert NutritionMetricType.ZINC in restored.extended_nutrients


class TestMetricCatalogue:
    """Tests for metric metadata."""

    def test_every_metric_has_info(self):
        assert set(METRIC_INFO) == set(NutritionMetricType)

    def test_every_preset_fills_the_secondary_page(self):
        assert METRIC_PRESETS
        for metrics in METRIC_PRESETS.values():
            assert len(metrics) == 6
            assert len(set(metrics)) == 6

    def test_limits_are_lower_is_better(self):
        assert not NutritionMetricType.SUGAR.higher_is_better
        assert not NutritionMetricType.SODIUM.higher_is_better
        assert NutritionMetricType.PROTEIN.higher_is_better

    def test_metadata(self):
        assert NutritionMetricType.PROTEIN.recommended_daily_value == 150
        assert NutritionMetricType.SODIUM.unit == "mg"
        assert NutritionMetricType.CALORIES.short_unit == ""
        assert NutritionMetricType.ZINC.is_supplement_friendly

    def test_parse_metrics_skips_unknown(self):
        assert parse_metrics(["zinc", "gone", "protein"]) == [
            NutritionMetricType.ZINC,
            NutritionMetricType.PROTEIN,
        ]
