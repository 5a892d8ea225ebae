"""Models for AI meal analysis and meal plan results."""

from datetime import datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from calorie_tracker.domain.meals import MealRecord, NutritionTotals


class AnalyzedFood(BaseModel):
    """Single food identified in a meal description."""

    name: str
    quantity: str
    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbohydrates: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)


class MealAnalysis(BaseModel):
    """Estimated nutrition for a free-text meal description."""

    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbohydrates: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    fiber: float = Field(default=0.0, ge=0.0)
    confidence: int = Field(ge=0, le=100)
    food_items: list[AnalyzedFood] = Field(default_factory=list)
    assumptions: list[str] = Field(default_factory=list)

    def to_meal_record(
        self,
        name: str,
        consumed_at: datetime,
        user_id: UUID | None = None,
    ) -> MealRecord:
        """Turn the estimate into a loggable meal record."""
        return MealRecord(
            id=uuid4(),
            name=name,
            calories=self.calories,
            protein=self.protein,
            carbohydrates=self.carbohydrates,
            fat=self.fat,
            consumed_at=consumed_at,
            serving_size="1 meal",
            user_id=user_id,
            notes="; ".join(self.assumptions) or None,
        )


class MealPreferences(BaseModel):
    """User preferences that shape a generated meal plan."""

    dietary_restrictions: list[str] = Field(default_factory=list)
    cuisine_preferences: list[str] = Field(default_factory=list)
    complexity: Literal["simple", "moderate", "complex"] = "moderate"
    budget_level: Literal["low", "medium", "high"] = "medium"


class SuggestedMeal(BaseModel):
    """One meal in a generated plan."""

    meal_type: str
    name: str
    description: str
    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbohydrates: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    ingredients: list[str] = Field(default_factory=list)
    instructions: str


class DailyMealPlan(BaseModel):
    """A day of suggested meals."""

    meals: list[SuggestedMeal]

    def totals(self) -> NutritionTotals:
        """Return the summed nutrition of all meals in the plan."""
        return NutritionTotals(
            calories=sum(meal.calories for meal in self.meals),
            protein_g=sum(meal.protein for meal in self.meals),
            carbs_g=sum(meal.carbohydrates for meal in self.meals),
            fat_g=sum(meal.fat for meal in self.meals),
        )
