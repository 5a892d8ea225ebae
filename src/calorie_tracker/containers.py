"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from calorie_tracker.adapters.openai_analysis_client import OpenAIAnalysisClient
from calorie_tracker.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from calorie_tracker.adapters.supabase_food_repository import SupabaseFoodRepository
from calorie_tracker.adapters.supabase_meal_repository import SupabaseMealRepository
from calorie_tracker.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from calorie_tracker.config import Settings
from calorie_tracker.services.analysis import MealAnalysisService
from calorie_tracker.services.barcode import BarcodeService
from calorie_tracker.services.cache import InMemoryCache
from calorie_tracker.services.meals import MealLogService
from calorie_tracker.services.profiles import ProfileService
from calorie_tracker.services.stats import StatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    profile_service: ProfileService
    meal_log_service: MealLogService
    stats_service: StatsService
    barcode_service: BarcodeService
    analysis_service: MealAnalysisService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    cache = InMemoryCache()
    meal_repository = SupabaseMealRepository(supabase_client)
    meal_log_service = MealLogService(repository=meal_repository, cache=cache)
    profile_service = ProfileService(
        repository=SupabaseProfileRepository(supabase_client),
        meal_log_service=meal_log_service,
        cache=cache,
    )
    stats_service = StatsService(meal_repository)
    lookup_client = HttpxOpenFoodFactsClient.create(
        resolved_settings.openfoodfacts_base_url
    )
    barcode_service = BarcodeService(
        food_repository=SupabaseFoodRepository(supabase_client),
        lookup_client=lookup_client,
        cache=cache,
    )
    openai_client = OpenAIAnalysisClient.create(resolved_settings.openai_api_key)
    analysis_service = MealAnalysisService(
        client=openai_client,
        model=resolved_settings.openai_model,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        await lookup_client.close()
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        profile_service=profile_service,
        meal_log_service=meal_log_service,
        stats_service=stats_service,
        barcode_service=barcode_service,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
