"""Tests for AI meal analysis service."""

import asyncio

import pytest
from pydantic import ValidationError

from calorie_tracker.domain.analysis import MealPreferences
from calorie_tracker.domain.profile import DEFAULT_PROFILE
from calorie_tracker.services.analysis import MealAnalysisService, meal_plan_prompt
from tests.conftest import FakeAnalysisClient


def test_analyze_description_validates_structured_output() -> None:
    client = FakeAnalysisClient()
    service = MealAnalysisService(client=client, model="gpt-4o-mini")

    analysis = asyncio.run(service.analyze_description("  chicken and rice  "))

    assert analysis.calories == 520
    assert analysis.confidence == 80
    assert analysis.food_items[0].name == "grilled chicken"
    assert client.calls[0]["name"] == "meal_analysis"
    assert '"chicken and rice"' in str(client.calls[0]["prompt"])
    assert client.calls[0]["store"] is False


def test_analyze_description_rejects_blank_text() -> None:
    service = MealAnalysisService(client=FakeAnalysisClient(), model="gpt-4o-mini")

    with pytest.raises(ValueError, match="empty"):
        asyncio.run(service.analyze_description("   "))


def test_analyze_description_rejects_out_of_range_confidence() -> None:
    client = FakeAnalysisClient()
    client.payloads["meal_analysis"] = {
        **client.payloads["meal_analysis"],
        "confidence": 140,
    }
    service = MealAnalysisService(client=client, model="gpt-4o-mini")

    with pytest.raises(ValidationError):
        asyncio.run(service.analyze_description("pizza"))


def test_suggest_meal_plan_uses_goal_targets() -> None:
    client = FakeAnalysisClient()
    service = MealAnalysisService(client=client, model="gpt-4o-mini")
    preferences = MealPreferences(dietary_restrictions=["vegetarian"])

    plan = asyncio.run(service.suggest_meal_plan(DEFAULT_PROFILE, preferences))

    assert [meal.name for meal in plan.meals] == ["Oatmeal", "Chicken salad"]
    assert plan.totals().calories == 950
    assert client.calls[0]["name"] == "daily_meal_plan"


def test_meal_plan_prompt_lists_targets_and_preferences() -> None:
    prompt = meal_plan_prompt(
        DEFAULT_PROFILE, MealPreferences(cuisine_preferences=["thai"])
    )

    assert "2000 kcal" in prompt
    assert "Dietary restrictions: none" in prompt
    assert "Cuisine preferences: thai" in prompt
    assert "Goal: maintain weight" in prompt
