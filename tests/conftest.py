"""Shared test fixtures."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from datetime import datetime
from uuid import UUID, uuid4

import pytest

from calorie_tracker.adapters.openfoodfacts_client import ProductLookupClient
from calorie_tracker.config import Settings
from calorie_tracker.containers import AppContainer
from calorie_tracker.domain.meals import FoodItem, MealRecord, MealTime
from calorie_tracker.domain.profile import UserProfile
from calorie_tracker.services.analysis import AnalysisClient, MealAnalysisService
from calorie_tracker.services.barcode import BarcodeService, FoodRepository
from calorie_tracker.services.cache import InMemoryCache
from calorie_tracker.services.meals import MealLogService, MealRepository
from calorie_tracker.services.profiles import ProfileRepository, ProfileService
from calorie_tracker.services.stats import StatsService

USER_ID = UUID("00000000-0000-0000-0000-000000000001")


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[UUID, UserProfile] = field(default_factory=dict)
    fail: bool = False

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        if self.fail:
            raise ConnectionError("supabase unreachable")
        return self.profiles.get(user_id)

    def save_profile(self, user_id: UUID, profile: UserProfile) -> None:
        self.profiles[user_id] = profile

    def delete_profile(self, user_id: UUID) -> None:
        self.profiles.pop(user_id, None)


@dataclass
class InMemoryMealRepository(MealRepository):
    """In-memory meal repository for tests."""

    meals: dict[UUID, MealRecord] = field(default_factory=dict)
    meal_times: dict[UUID, MealTime] = field(default_factory=dict)
    fail: bool = False

    def list_meals(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealRecord]:
        if self.fail:
            raise ConnectionError("supabase unreachable")
        return [
            meal
            for meal in self.meals.values()
            if meal.user_id == user_id and start <= meal.consumed_at < end
        ]

    def get_meal(self, user_id: UUID, meal_id: UUID) -> MealRecord | None:
        meal = self.meals.get(meal_id)
        if meal is None or meal.user_id != user_id:
            return None
        return meal

    def create_meal(
        self, user_id: UUID, record: MealRecord, meal_time: MealTime
    ) -> MealRecord:
        self.meals[record.id] = record
        self.meal_times[record.id] = meal_time
        return record

    def update_meal(
        self, user_id: UUID, record: MealRecord, meal_time: MealTime
    ) -> MealRecord | None:
        if self.get_meal(user_id, record.id) is None:
            return None
        self.meals[record.id] = record
        self.meal_times[record.id] = meal_time
        return record

    def delete_meal(self, user_id: UUID, meal_id: UUID) -> None:
        meal = self.meals.get(meal_id)
        if meal is not None and meal.user_id == user_id:
            del self.meals[meal_id]

    def delete_all_meals(self, user_id: UUID) -> None:
        for meal_id in [k for k, v in self.meals.items() if v.user_id == user_id]:
            del self.meals[meal_id]


@dataclass
class InMemoryFoodRepository(FoodRepository):
    """In-memory food database for tests."""

    foods: list[FoodItem] = field(default_factory=list)
    fail_on_add: bool = False

    def get_by_barcode(self, barcode: str) -> FoodItem | None:
        return next((food for food in self.foods if food.barcode == barcode), None)

    def search(self, query: str, limit: int) -> list[FoodItem]:
        needle = query.lower()
        matches = [
            food
            for food in self.foods
            if needle in food.name.lower() or needle in (food.brand or "").lower()
        ]
        return matches[:limit]

    def add_food(self, food: FoodItem) -> FoodItem:
        if self.fail_on_add:
            raise RuntimeError("Failed to create food entry")
        stored = replace(food, id=uuid4())
        self.foods.append(stored)
        return stored


@dataclass
class FakeProductLookupClient(ProductLookupClient):
    """Fake OpenFoodFacts client keyed by barcode."""

    products: dict[str, dict[str, object]] = field(default_factory=dict)
    requested: list[str] = field(default_factory=list)

    async def get_product(self, barcode: str) -> dict[str, object]:
        self.requested.append(barcode)
        return self.products.get(barcode, {"status": 0})


def off_payload(name: str = "Greek Yogurt", kcal: float = 97.0) -> dict[str, object]:
    return {
        "status": 1,
        "product": {
            "product_name": name,
            "brands": "Fage",
            "nutriments": {
                "energy-kcal_100g": kcal,
                "proteins_100g": 9.0,
                "carbohydrates_100g": 3.9,
                "fat_100g": 5.0,
                "sugars_100g": 3.9,
            },
        },
    }


@dataclass
class FakeAnalysisClient(AnalysisClient):
    """Fake LLM client returning a payload per schema name."""

    payloads: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            "meal_analysis": {
                "calories": 520,
                "protein": 32,
                "carbohydrates": 48,
                "fat": 21,
                "fiber": 6,
                "confidence": 80,
                "food_items": [
                    {
                        "name": "grilled chicken",
                        "quantity": "150g",
                        "calories": 250,
                        "protein": 30,
                        "carbohydrates": 0,
                        "fat": 14,
                    }
                ],
                "assumptions": ["medium portion", "cooked in olive oil"],
            },
            "daily_meal_plan": {
                "meals": [
                    {
                        "meal_type": "breakfast",
                        "name": "Oatmeal",
                        "description": "Oats with berries",
                        "calories": 400,
                        "protein": 15,
                        "carbohydrates": 65,
                        "fat": 8,
                        "ingredients": ["oats", "berries", "milk"],
                        "instructions": "Simmer oats in milk.",
                    },
                    {
                        "meal_type": "lunch",
                        "name": "Chicken salad",
                        "description": "Greens with chicken",
                        "calories": 550,
                        "protein": 45,
                        "carbohydrates": 20,
                        "fat": 30,
                        "ingredients": ["chicken", "lettuce"],
                        "instructions": "Toss together.",
                    },
                ]
            },
        }
    )
    calls: list[dict[str, object]] = field(default_factory=list)

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
        self.calls.append(
            {"model": model, "store": store, "prompt": prompt, "name": schema_name}
        )
        return self.payloads[schema_name]


@pytest.fixture
def captured_logs(
    caplog: pytest.LogCaptureFixture,
) -> Iterator[pytest.LogCaptureFixture]:
    """Capture app logs even after configure_logging disabled propagation."""
    logger = logging.getLogger("calorie_tracker")
    logger.addHandler(caplog.handler)
    caplog.set_level(logging.INFO, logger="calorie_tracker")
    yield caplog
    logger.removeHandler(caplog.handler)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        api_token="api-token",
        openai_api_key="openai-key",
    )


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def meal_repository() -> InMemoryMealRepository:
    return InMemoryMealRepository()


@pytest.fixture
def food_repository() -> InMemoryFoodRepository:
    return InMemoryFoodRepository()


@pytest.fixture
def lookup_client() -> FakeProductLookupClient:
    return FakeProductLookupClient(products={"5201054017395": off_payload()})


@pytest.fixture
def analysis_client() -> FakeAnalysisClient:
    return FakeAnalysisClient()


@pytest.fixture
def meal_log_service(meal_repository: InMemoryMealRepository) -> MealLogService:
    return MealLogService(meal_repository)


@pytest.fixture
def profile_service(
    profile_repository: InMemoryProfileRepository, meal_log_service: MealLogService
) -> ProfileService:
    return ProfileService(profile_repository, meal_log_service)


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    profile_repository: InMemoryProfileRepository,
    meal_repository: InMemoryMealRepository,
    food_repository: InMemoryFoodRepository,
    lookup_client: FakeProductLookupClient,
    analysis_client: FakeAnalysisClient,
) -> AppContainer:
    cache = InMemoryCache()
    meal_log_service = MealLogService(meal_repository, cache)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        profile_service=ProfileService(profile_repository, meal_log_service, cache),
        meal_log_service=meal_log_service,
        stats_service=StatsService(meal_repository),
        barcode_service=BarcodeService(food_repository, lookup_client, cache),
        analysis_service=MealAnalysisService(
            client=analysis_client,
            model=settings.openai_model,
            store=settings.openai_store,
        ),
        close_resources=close_resources,
    )
