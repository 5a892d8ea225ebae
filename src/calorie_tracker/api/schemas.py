"""Pydantic request models for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, Field

from calorie_tracker.domain.profile import (
    ActivityLevel,
    BodyFatSource,
    Gender,
    GoalType,
    HeightUnit,
    WeightUnit,
)


class ProfileIn(BaseModel):
    """Full profile submitted from the edit form."""

    name: str
    age: int
    weight: float
    height: float
    weight_unit: WeightUnit = WeightUnit.KG
    height_unit: HeightUnit = HeightUnit.CM
    gender: Gender = Gender.MALE
    body_fat_percent: float | None = None
    body_fat_source: BodyFatSource | None = None
    activity_level: ActivityLevel = ActivityLevel.SEDENTARY
    goal_type: GoalType = GoalType.MAINTAIN_WEIGHT
    weekly_weight_change: float = 0.0


class ProfilePatch(BaseModel):
    """Partial profile edit; only set fields are applied."""

    name: str | None = None
    age: int | None = None
    weight: float | None = None
    height: float | None = None
    weight_unit: WeightUnit | None = None
    height_unit: HeightUnit | None = None
    gender: Gender | None = None
    body_fat_percent: float | None = None
    body_fat_source: BodyFatSource | None = None
    activity_level: ActivityLevel | None = None
    goal_type: GoalType | None = None
    weekly_weight_change: float | None = None


class MealIn(BaseModel):
    """Manually entered meal."""

    name: str
    calories: float
    protein: float = 0.0
    carbohydrates: float = 0.0
    fat: float = 0.0
    serving_size: str = "1 serving"
    consumed_at: datetime | None = None
    notes: str | None = None


class BarcodeMealIn(BaseModel):
    """Meal logged from a scanned barcode."""

    barcode: str
    grams: float = 100.0
    consumed_at: datetime | None = None


class AnalyzeIn(BaseModel):
    """Free-text meal description for AI analysis."""

    description: str = Field(min_length=1)


class AnalyzeMealIn(AnalyzeIn):
    """Free-text meal description to analyze and log."""

    name: str | None = None
    consumed_at: datetime | None = None


class MealPatch(BaseModel):
    """Partial edit of a logged meal; only set fields are applied."""

    name: str | None = None
    calories: float | None = None
    protein: float | None = None
    carbohydrates: float | None = None
    fat: float | None = None
    serving_size: str | None = None
    consumed_at: datetime | None = None
    notes: str | None = None


class FoodIn(BaseModel):
    """Custom food with per-100g nutrition facts."""

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
