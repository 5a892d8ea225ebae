"""Domain models for meal logging."""

from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from enum import Enum
from uuid import UUID, uuid4


class MealTime(Enum):
    """Meal-time bucket derived from the hour a meal was eaten."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACKS = "Snacks"


# Half-open [start, end) hour ranges; anything else is a snack.
_MEAL_TIME_HOURS: list[tuple[int, int, MealTime]] = [
    (5, 12, MealTime.BREAKFAST),
    (12, 17, MealTime.LUNCH),
    (17, 21, MealTime.DINNER),
]


def meal_time_for_hour(hour: int) -> MealTime:
    """Return the meal-time bucket for an hour of the day."""
    for start, end, meal_time in _MEAL_TIME_HOURS:
        if start <= hour < end:
            return meal_time
    return MealTime.SNACKS


def local_time(moment: datetime, tz: tzinfo) -> datetime:
    """Return the moment in the caller's timezone; naive values are local."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(tz)


@dataclass(frozen=True)
class MealRecord:
    """A logged meal with absolute nutrition values."""

    id: UUID
    name: str
    calories: float
    protein: float
    carbohydrates: float
    fat: float
    consumed_at: datetime
    serving_size: str = "1 serving"
    user_id: UUID | None = None
    food_id: UUID | None = None
    notes: str | None = None

    def meal_time(self, tz: tzinfo) -> MealTime:
        """Return the bucket of the local hour the meal was eaten."""
        return meal_time_for_hour(local_time(self.consumed_at, tz).hour)


@dataclass(frozen=True)
class NutritionTotals:
    """Summed calories and macros."""

    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0


@dataclass(frozen=True)
class DailyTotals:
    """Totals for one local calendar day."""

    day: date
    totals: NutritionTotals


@dataclass(frozen=True)
class DaySummary:
    """Dashboard view of a single day."""

    day: date
    totals: NutritionTotals
    meals: dict[MealTime, list[MealRecord]]
    calorie_goal: float
    calorie_progress: float
    is_over_goal: bool
    recent: list[MealRecord] = field(default_factory=list)


@dataclass(frozen=True)
class PeriodSummary:
    """Daily totals and per-day averages over a range of days."""

    start: date
    days: int
    daily: list[DailyTotals]
    totals: NutritionTotals
    averages: NutritionTotals
    entry_count: int


@dataclass(frozen=True)
class FoodItem:
    """Packaged or database food with per-100g nutrition facts."""

    name: str
    calories_per_100g: float
    protein_per_100g: float = 0.0
    carbohydrates_per_100g: float = 0.0
    fat_per_100g: float = 0.0
    fiber_per_100g: float | None = None
    sugar_per_100g: float | None = None
    sodium_per_100g: float | None = None
    brand: str | None = None
    barcode: str | None = None
    verified: bool = False
    id: UUID | None = None

    def to_meal_record(
        self,
        consumed_at: datetime,
        grams: float = 100.0,
        user_id: UUID | None = None,
    ) -> MealRecord:
        """Flatten per-100g facts into an absolute meal record."""
        factor = grams / 100
        return MealRecord(
            id=uuid4(),
            name=self.name,
            calories=self.calories_per_100g * factor,
            protein=self.protein_per_100g * factor,
            carbohydrates=self.carbohydrates_per_100g * factor,
            fat=self.fat_per_100g * factor,
            consumed_at=consumed_at,
            serving_size=f"{grams:g}g",
            user_id=user_id,
            food_id=self.id,
        )
