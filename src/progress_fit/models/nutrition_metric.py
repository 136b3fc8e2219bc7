"""Nutrition metric catalogue: units, daily targets and polarity."""

from dataclasses import dataclass
from enum import Enum


class NutritionCategory(str, Enum):
    """Grouping used when choosing which metrics to track."""

    PRIMARY_MACROS = "primary_macros"
    SECONDARY_MACROS = "secondary_macros"
    VITAMINS = "vitamins"
    MINERALS = "minerals"
    PERFORMANCE = "performance"
    HEALTH = "health"

    @property
    def display_name(self) -> str:
        return {
            NutritionCategory.PRIMARY_MACROS: "Primary Macros",
            NutritionCategory.SECONDARY_MACROS: "Secondary Macros",
            NutritionCategory.VITAMINS: "Vitamins",
            NutritionCategory.MINERALS: "Minerals",
            NutritionCategory.PERFORMANCE: "Performance & Supplements",
            NutritionCategory.HEALTH: "Health Metrics",
        }[self]


class NutritionMetricType(str, Enum):
    """Every nutrient or intake measure an entry can carry."""

    # Primary macros
    CALORIES = "calories"
    PROTEIN = "protein"
    CARBOHYDRATES = "carbohydrates"
    FAT = "fat"

    # Secondary macros
    FIBER = "fiber"
    SUGAR = "sugar"
    SATURATED_FAT = "saturated_fat"
    SODIUM = "sodium"

    # Vitamins
    VITAMIN_A = "vitamin_a"
    VITAMIN_C = "vitamin_c"
    VITAMIN_D = "vitamin_d"
    VITAMIN_E = "vitamin_e"
    VITAMIN_K = "vitamin_k"
    VITAMIN_B6 = "vitamin_b6"
    VITAMIN_B12 = "vitamin_b12"
    FOLATE = "folate"
    THIAMINE = "thiamine"
    RIBOFLAVIN = "riboflavin"
    NIACIN = "niacin"
    BIOTIN = "biotin"
    PANTOTHENIC_ACID = "pantothenic_acid"

    # Minerals
    CALCIUM = "calcium"
    IRON = "iron"
    MAGNESIUM = "magnesium"
    PHOSPHORUS = "phosphorus"
    POTASSIUM = "potassium"
    ZINC = "zinc"
    COPPER = "copper"
    MANGANESE = "manganese"
    SELENIUM = "selenium"
    IODINE = "iodine"
    CHROMIUM = "chromium"
    MOLYBDENUM = "molybdenum"

    # Performance & supplements
    CREATINE = "creatine"
    CAFFEINE = "caffeine"
    OMEGA_3 = "omega_3"
    BETA_ALANINE = "beta_alanine"
    CITRULLINE = "citrulline"
    LEUCINE = "leucine"
    GLUTAMINE = "glutamine"
    TAURINE = "taurine"
    CHOLINE = "choline"
    INOSITOL = "inositol"

    # Health
    CHOLESTEROL = "cholesterol"
    TRANS_FAT = "trans_fat"
    WATER_INTAKE = "water_intake"
    GLYCEMIC_LOAD = "glycemic_load"

    @property
    def info(self) -> "MetricInfo":
        return METRIC_INFO[self]

    @property
    def display_name(self) -> str:
        return self.info.display_name

    @property
    def unit(self) -> str:
        return self.info.unit

    @property
    def short_unit(self) -> str:
        return self.info.short_unit

    @property
    def category(self) -> NutritionCategory:
        return self.info.category

    @property
    def recommended_daily_value(self) -> float:
        return self.info.recommended_daily_value

    @property
    def higher_is_better(self) -> bool:
        return self.info.higher_is_better

    @property
    def is_supplement_friendly(self) -> bool:
        return self.info.supplement_friendly


@dataclass(frozen=True)
class MetricInfo:
    """Static facts about one metric."""

    display_name: str
    unit: str
    category: NutritionCategory
    recommended_daily_value: float
    higher_is_better: bool = True
    supplement_friendly: bool = False
    short_unit_override: str | None = None

    @property
    def short_unit(self) -> str:
        if self.short_unit_override is not None:
            return self.short_unit_override
        return self.unit


M = NutritionMetricType
C = NutritionCategory

# Recommended values are general adult guidelines. For lower-is-better
# metrics the value is a ceiling rather than a goal.
METRIC_INFO: dict[NutritionMetricType, MetricInfo] = {
    M.CALORIES: MetricInfo("Calories", "cal", C.PRIMARY_MACROS, 2000, short_unit_override=""),
    M.PROTEIN: MetricInfo("Protein", "g", C.PRIMARY_MACROS, 150),
    M.CARBOHYDRATES: MetricInfo("Carbs", "g", C.PRIMARY_MACROS, 200),
    M.FAT: MetricInfo("Fat", "g", C.PRIMARY_MACROS, 65),
    M.FIBER: MetricInfo("Fiber", "g", C.SECONDARY_MACROS, 25),
    M.SUGAR: MetricInfo("Sugar", "g", C.SECONDARY_MACROS, 50, higher_is_better=False),
    M.SATURATED_FAT: MetricInfo(
        "Saturated Fat", "g", C.SECONDARY_MACROS, 20, higher_is_better=False
    ),
    M.SODIUM: MetricInfo("Sodium", "mg", C.SECONDARY_MACROS, 2300, higher_is_better=False),
    M.VITAMIN_A: MetricInfo("Vitamin A", "μg RAE", C.VITAMINS, 900, short_unit_override="μg"),
    M.VITAMIN_C: MetricInfo("Vitamin C", "mg", C.VITAMINS, 90),
    M.VITAMIN_D: MetricInfo("Vitamin D", "μg", C.VITAMINS, 20, supplement_friendly=True),
    M.VITAMIN_E: MetricInfo("Vitamin E", "mg", C.VITAMINS, 15),
    M.VITAMIN_K: MetricInfo("Vitamin K", "μg", C.VITAMINS, 120),
    M.VITAMIN_B6: MetricInfo("Vitamin B6", "mg", C.VITAMINS, 1.3),
    M.VITAMIN_B12: MetricInfo("Vitamin B12", "μg", C.VITAMINS, 2.4, supplement_friendly=True),
    M.FOLATE: MetricInfo("Folate", "μg", C.VITAMINS, 400),
    M.THIAMINE: MetricInfo("Thiamine", "mg", C.VITAMINS, 1.2),
    M.RIBOFLAVIN: MetricInfo("Riboflavin", "mg", C.VITAMINS, 1.3),
    M.NIACIN: MetricInfo("Niacin", "mg", C.VITAMINS, 16),
    M.BIOTIN: MetricInfo("Biotin", "μg", C.VITAMINS, 30),
    M.PANTOTHENIC_ACID: MetricInfo("Pantothenic Acid", "mg", C.VITAMINS, 5),
    M.CALCIUM: MetricInfo("Calcium", "mg", C.MINERALS, 1000),
    M.IRON: MetricInfo("Iron", "mg", C.MINERALS, 8, supplement_friendly=True),
    M.MAGNESIUM: MetricInfo("Magnesium", "mg", C.MINERALS, 400, supplement_friendly=True),
    M.PHOSPHORUS: MetricInfo("Phosphorus", "mg", C.MINERALS, 700),
    M.POTASSIUM: MetricInfo("Potassium", "mg", C.MINERALS, 3500),
    M.ZINC: MetricInfo("Zinc", "mg", C.MINERALS, 11, supplement_friendly=True),
    M.COPPER: MetricInfo("Copper", "mg", C.MINERALS, 0.9),
    M.MANGANESE: MetricInfo("Manganese", "mg", C.MINERALS, 2.3),
    M.SELENIUM: MetricInfo("Selenium", "μg", C.MINERALS, 55),
    M.IODINE: MetricInfo("Iodine", "μg", C.MINERALS, 150),
    M.CHROMIUM: MetricInfo("Chromium", "μg", C.MINERALS, 35),
    M.MOLYBDENUM: MetricInfo("Molybdenum", "μg", C.MINERALS, 45),
    M.CREATINE: MetricInfo("Creatine", "g", C.PERFORMANCE, 3, supplement_friendly=True),
    M.CAFFEINE: MetricInfo(
        "Caffeine", "mg", C.PERFORMANCE, 400, higher_is_better=False, supplement_friendly=True
    ),
    M.OMEGA_3: MetricInfo("Omega-3", "g", C.PERFORMANCE, 1.6, supplement_friendly=True),
    M.BETA_ALANINE: MetricInfo("Beta-Alanine", "g", C.PERFORMANCE, 3, supplement_friendly=True),
    M.CITRULLINE: MetricInfo("Citrulline", "g", C.PERFORMANCE, 6, supplement_friendly=True),
    M.LEUCINE: MetricInfo("Leucine", "g", C.PERFORMANCE, 2.5, supplement_friendly=True),
    M.GLUTAMINE: MetricInfo("Glutamine", "g", C.PERFORMANCE, 5, supplement_friendly=True),
    M.TAURINE: MetricInfo("Taurine", "mg", C.PERFORMANCE, 500, supplement_friendly=True),
    M.CHOLINE: MetricInfo("Choline", "mg", C.PERFORMANCE, 550),
    M.INOSITOL: MetricInfo("Inositol", "mg", C.PERFORMANCE, 500),
    M.CHOLESTEROL: MetricInfo(
        "Cholesterol", "mg", C.SECONDARY_MACROS, 300, higher_is_better=False
    ),
    M.TRANS_FAT: MetricInfo("Trans Fat", "g", C.SECONDARY_MACROS, 0, higher_is_better=False),
    M.WATER_INTAKE: MetricInfo("Water", "L", C.HEALTH, 3.7),
    M.GLYCEMIC_LOAD: MetricInfo(
        "Glycemic Load", "GL", C.HEALTH, 100, higher_is_better=False
    ),
}

# Default dashboard pages
PRIMARY_METRICS: list[NutritionMetricType] = [
    M.CALORIES, M.PROTEIN, M.CARBOHYDRATES, M.FAT,
]
SECONDARY_METRICS: list[NutritionMetricType] = [
    M.FIBER, M.CREATINE, M.ZINC, M.VITAMIN_D, M.OMEGA_3, M.MAGNESIUM,
]

# Metrics offered for customisation, by category
METRICS_BY_CATEGORY: dict[NutritionCategory, list[NutritionMetricType]] = {
    C.SECONDARY_MACROS: [M.FIBER, M.SUGAR, M.SATURATED_FAT, M.SODIUM],
    C.VITAMINS: [
        M.VITAMIN_A, M.VITAMIN_C, M.VITAMIN_D, M.VITAMIN_E,
        M.VITAMIN_K, M.VITAMIN_B6, M.VITAMIN_B12, M.FOLATE,
    ],
    C.MINERALS: [
        M.CALCIUM, M.IRON, M.MAGNESIUM, M.PHOSPHORUS,
        M.POTASSIUM, M.ZINC, M.COPPER, M.SELENIUM,
    ],
    C.PERFORMANCE: [
        M.CREATINE, M.CAFFEINE, M.OMEGA_3, M.BETA_ALANINE,
        M.CITRULLINE, M.LEUCINE, M.GLUTAMINE, M.TAURINE,
    ],
    C.HEALTH: [M.WATER_INTAKE, M.CHOLESTEROL, M.CHOLINE, M.INOSITOL],
}

POPULAR_SUPPLEMENTS: list[NutritionMetricType] = [
    M.CREATINE, M.VITAMIN_D, M.OMEGA_3, M.MAGNESIUM,
    M.ZINC, M.VITAMIN_B12, M.IRON, M.CAFFEINE,
]

# Ready-made secondary page selections
METRIC_PRESETS: dict[str, list[NutritionMetricType]] = {
    "Popular Supplements": POPULAR_SUPPLEMENTS[:6],
    "Essential Vitamins": [
        M.VITAMIN_D, M.VITAMIN_C, M.VITAMIN_B12, M.FOLATE, M.VITAMIN_A, M.VITAMIN_E,
    ],
    "Key Minerals": [M.IRON, M.CALCIUM, M.MAGNESIUM, M.ZINC, M.POTASSIUM, M.SELENIUM],
    "Performance Focus": [
        M.CREATINE, M.CAFFEINE, M.BETA_ALANINE, M.CITRULLINE, M.LEUCINE, M.TAURINE,
    ],
    "Heart Health": [M.OMEGA_3, M.POTASSIUM, M.MAGNESIUM, M.FIBER, M.CHOLESTEROL, M.SODIUM],
    "Bone Health": [M.CALCIUM, M.VITAMIN_D, M.MAGNESIUM, M.PHOSPHORUS, M.VITAMIN_K, M.PROTEIN],
}

del M, C


def parse_metrics(values: list[str]) -> list[NutritionMetricType]:
    """Decode stored metric names, dropping any that are no longer known."""
    known = {m.value: m for m in NutritionMetricType}
    return [known[v] for v in values if v in known]
