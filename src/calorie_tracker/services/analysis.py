"""Natural-language meal analysis and meal plan suggestions via an LLM."""

from dataclasses import dataclass
from typing import Protocol

from calorie_tracker.domain.analysis import DailyMealPlan, MealAnalysis, MealPreferences
from calorie_tracker.domain.profile import UserProfile
from calorie_tracker.services.goals import calculate_macro_targets

_NUMBER: dict[str, object] = {"type": "number", "minimum": 0.0}

_FOOD_ITEM_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "quantity": {"type": "string"},
        "calories": _NUMBER,
        "protein": _NUMBER,
        "carbohydrates": _NUMBER,
        "fat": _NUMBER,
    },
    "required": ["name", "quantity", "calories", "protein", "carbohydrates", "fat"],
    "additionalProperties": False,
}

MEAL_ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "calories": _NUMBER,
        "protein": _NUMBER,
        "carbohydrates": _NUMBER,
        "fat": _NUMBER,
        "fiber": _NUMBER,
        "confidence": {"type": "integer", "minimum": 0, "maximum": 100},
        "food_items": {"type": "array", "items": _FOOD_ITEM_SCHEMA},
        "assumptions": {"type": "array", "items": {"type": "string"}},
    },
    "required": [
        "calories",
        "protein",
        "carbohydrates",
        "fat",
        "fiber",
        "confidence",
        "food_items",
        "assumptions",
    ],
    "additionalProperties": False,
}

MEAL_PLAN_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "meals": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "meal_type": {"type": "string"},
                    "name": {"type": "string"},
                    "description": {"type": "string"},
                    "calories": _NUMBER,
                    "protein": _NUMBER,
                    "carbohydrates": _NUMBER,
                    "fat": _NUMBER,
                    "ingredients": {"type": "array", "items": {"type": "string"}},
                    "instructions": {"type": "string"},
                },
                "required": [
                    "meal_type",
                    "name",
                    "description",
                    "calories",
                    "protein",
                    "carbohydrates",
                    "fat",
                    "ingredients",
                    "instructions",
                ],
                "additionalProperties": False,
            },
        }
    },
    "required": ["meals"],
    "additionalProperties": False,
}

MEAL_ANALYSIS_INSTRUCTIONS = (
    "You are a professional nutritionist. Estimate the nutrition of the "
    "described meal using standard food composition data. Be conservative, "
    "assume typical serving sizes unless quantities are given, and list every "
    "assumption about portions or preparation. Confidence (0-100) reflects how "
    "specific the foods and portions in the description are."
)

MEAL_PLAN_INSTRUCTIONS = (
    "You are a certified nutritionist and meal planning expert. Create a "
    "balanced day of meals from whole foods that meets the nutritional "
    "targets and respects the user's preferences and restrictions."
)


class AnalysisClient(Protocol):
    """Interface for LLM calls that return schema-validated JSON."""

    async def complete_json(  # noqa: PLR0913
        self,
        *,
        model: str,
        store: bool,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
    ) -> dict[str, object]:
        """Return the structured JSON output for a prompt."""


@dataclass
class MealAnalysisService:
    """Service that builds prompts and validates structured LLM output."""

    client: AnalysisClient
    model: str
    store: bool = False

    async def analyze_description(self, description: str) -> MealAnalysis:
        """Estimate calories and macros for a free-text meal description."""
        cleaned = description.strip()
        if not cleaned:
            raise ValueError("Meal description is empty")
        raw = await self.client.complete_json(
            model=self.model,
            store=self.store,
            instructions=MEAL_ANALYSIS_INSTRUCTIONS,
            prompt=f'Analyze this meal description:\n"{cleaned}"',
            schema=MEAL_ANALYSIS_SCHEMA,
            schema_name="meal_analysis",
        )
        return MealAnalysis.model_validate(raw)

    async def suggest_meal_plan(
        self, profile: UserProfile, preferences: MealPreferences
    ) -> DailyMealPlan:
        """Generate a day of meals aimed at the profile's goals."""
        raw = await self.client.complete_json(
            model=self.model,
            store=self.store,
            instructions=MEAL_PLAN_INSTRUCTIONS,
            prompt=meal_plan_prompt(profile, preferences),
            schema=MEAL_PLAN_SCHEMA,
            schema_name="daily_meal_plan",
        )
        return DailyMealPlan.model_validate(raw)


def meal_plan_prompt(profile: UserProfile, preferences: MealPreferences) -> str:
    """Render the meal plan request for a profile and its macro targets."""
    macros = calculate_macro_targets(profile, profile.daily_calorie_goal)
    restrictions = ", ".join(preferences.dietary_restrictions) or "none"
    cuisines = ", ".join(preferences.cuisine_preferences) or "any"
    return "\n".join(
        [
            "Create a daily meal plan: breakfast, lunch, dinner and 2 snacks.",
            f"Goal: {profile.goal_type.value}",
            f"Activity level: {profile.activity_level.value}",
            f"Targets: {int(profile.daily_calorie_goal)} kcal, "
            f"{int(macros.protein_g)}g protein, {int(macros.carbs_g)}g carbs, "
            f"{int(macros.fat_g)}g fat",
            f"Dietary restrictions: {restrictions}",
            f"Cuisine preferences: {cuisines}",
            f"Meal complexity: {preferences.complexity}",
            f"Budget level: {preferences.budget_level}",
        ]
    )
