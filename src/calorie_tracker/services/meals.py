"""Meal logging service."""

import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo

from calorie_tracker.domain.analysis import MealAnalysis
from calorie_tracker.domain.meals import FoodItem, MealRecord, MealTime
from calorie_tracker.domain.results import Resolution, ResolutionSource
from calorie_tracker.services.cache import Cache, InMemoryCache

_EDITABLE_FIELDS = frozenset(
    {
        "name",
        "calories",
        "protein",
        "carbohydrates",
        "fat",
        "serving_size",
        "consumed_at",
        "notes",
    }
)

_logger = logging.getLogger(__name__)


class MealValidationError(ValueError):
    """Raised when a meal entry has invalid nutrition values."""


class MealNotFoundError(LookupError):
    """Raised when a meal does not exist for the user."""


class MealRepository(Protocol):
    """Persistence interface for meal records."""

    def list_meals(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealRecord]:
        """Return meals consumed in [start, end) with absolute nutrition values."""

    def get_meal(self, user_id: UUID, meal_id: UUID) -> MealRecord | None:
        """Return one of the user's meals, if present."""

    def create_meal(
        self, user_id: UUID, record: MealRecord, meal_time: MealTime
    ) -> MealRecord:
        """Persist a meal and return the stored record."""

    def update_meal(
        self, user_id: UUID, record: MealRecord, meal_time: MealTime
    ) -> MealRecord | None:
        """Overwrite a stored meal; None when no row matched."""

    def delete_meal(self, user_id: UUID, meal_id: UUID) -> None:
        """Delete a single meal."""

    def delete_all_meals(self, user_id: UUID) -> None:
        """Delete every meal for a user."""


@dataclass
class MealLogService:
    """Service for creating, editing, deleting and loading meal records.

    Meal-time buckets are taken from the caller's local clock, so writes take
    the IANA timezone the meal was logged in.
    """

    repository: MealRepository
    cache: Cache = field(default_factory=InMemoryCache)

    def log_meal(  # noqa: PLR0913
        self,
        user_id: UUID,
        name: str,
        calories: float,
        protein: float = 0.0,
        carbohydrates: float = 0.0,
        fat: float = 0.0,
        serving_size: str = "1 serving",
        consumed_at: datetime | None = None,
        notes: str | None = None,
        timezone_name: str = "UTC",
    ) -> MealRecord:
        """Log a manually entered meal."""
        record = MealRecord(
            id=uuid4(),
            name=name,
            calories=calories,
            protein=protein,
            carbohydrates=carbohydrates,
            fat=fat,
            consumed_at=consumed_at or datetime.now(tz=UTC),
            serving_size=serving_size,
            user_id=user_id,
            notes=notes,
        )
        return self.log_record(user_id, record, timezone_name)

    def log_food_item(
        self,
        user_id: UUID,
        food: FoodItem,
        grams: float = 100.0,
        consumed_at: datetime | None = None,
        timezone_name: str = "UTC",
    ) -> MealRecord:
        """Log a per-100g food item scaled to the eaten grams."""
        if grams <= 0:
            raise MealValidationError("Portion size must be positive")
        record = food.to_meal_record(
            consumed_at=consumed_at or datetime.now(tz=UTC),
            grams=grams,
            user_id=user_id,
        )
        return self.log_record(user_id, record, timezone_name)

    def log_analysis(
        self,
        user_id: UUID,
        analysis: MealAnalysis,
        name: str,
        consumed_at: datetime | None = None,
        timezone_name: str = "UTC",
    ) -> MealRecord:
        """Log an AI meal estimate as-is."""
        record = analysis.to_meal_record(
            name=name,
            consumed_at=consumed_at or datetime.now(tz=UTC),
            user_id=user_id,
        )
        return self.log_record(user_id, record, timezone_name)

    def log_record(
        self, user_id: UUID, record: MealRecord, timezone_name: str = "UTC"
    ) -> MealRecord:
        """Validate and persist a meal record."""
        _validate_record(record)
        stored = self.repository.create_meal(
            user_id,
            replace(record, user_id=user_id),
            record.meal_time(ZoneInfo(timezone_name)),
        )
        self.cache.delete_prefix(_cache_prefix(user_id))
        return stored

    def update_meal(
        self,
        user_id: UUID,
        meal_id: UUID,
        timezone_name: str = "UTC",
        **changes: object,
    ) -> MealRecord:
        """Apply field changes to a logged meal."""
        unknown = sorted(set(changes) - _EDITABLE_FIELDS)
        if unknown:
            raise MealValidationError(f"Fields cannot be edited: {', '.join(unknown)}")
        nulls = sorted(
            name for name, value in changes.items() if value is None and name != "notes"
        )
        if nulls:
            raise MealValidationError(f"Fields cannot be null: {', '.join(nulls)}")
        current = self.repository.get_meal(user_id, meal_id)
        if current is None:
            raise MealNotFoundError(f"Meal {meal_id} not found")
        updated = replace(current, **changes)
        _validate_record(updated)
        stored = self.repository.update_meal(
            user_id, updated, updated.meal_time(ZoneInfo(timezone_name))
        )
        if stored is None:
            raise MealNotFoundError(f"Meal {meal_id} not found")
        self.cache.delete_prefix(_cache_prefix(user_id))
        return stored

    def delete_meal(self, user_id: UUID, meal_id: UUID) -> None:
        """Delete a meal."""
        self.repository.delete_meal(user_id, meal_id)
        self.cache.delete_prefix(_cache_prefix(user_id))

    def delete_all(self, user_id: UUID) -> None:
        """Delete every meal for a user."""
        self.repository.delete_all_meals(user_id)
        self.cache.delete_prefix(_cache_prefix(user_id))

    def list_for_day(
        self, user_id: UUID, day: date, timezone_name: str
    ) -> list[MealRecord]:
        """Return meals consumed on a local calendar day, oldest first."""
        tz = ZoneInfo(timezone_name)
        start = datetime.combine(day, time.min, tzinfo=tz)
        end = start + timedelta(days=1)
        meals = self.repository.list_meals(
            user_id, start.astimezone(UTC), end.astimezone(UTC)
        )
        return sorted(meals, key=lambda meal: meal.consumed_at)

    def resolve_meals_for_day(
        self, user_id: UUID, day: date, timezone_name: str
    ) -> Resolution[list[MealRecord]]:
        """Return a day's meals, falling back to the last cached copy."""
        cache_key = f"{_cache_prefix(user_id)}{day.isoformat()}:{timezone_name}"
        try:
            meals = self.list_for_day(user_id, day, timezone_name)
        except Exception as exc:
            _logger.warning(
                "Meal load failed for user=%s day=%s, using offline data: %s",
                user_id,
                day,
                exc,
            )
            cached = self.cache.get(cache_key)
            if isinstance(cached, list):
                return Resolution(cached, ResolutionSource.CACHE, error=str(exc))
            return Resolution([], ResolutionSource.DEFAULT, error=str(exc))
        self.cache.set(cache_key, meals)
        return Resolution(meals, ResolutionSource.REMOTE)


def _cache_prefix(user_id: UUID) -> str:
    return f"meals:{user_id}:"


def _validate_record(record: MealRecord) -> None:
    if not record.name.strip():
        raise MealValidationError("Meal name is required")
    values = {
        "calories": record.calories,
        "protein": record.protein,
        "carbohydrates": record.carbohydrates,
        "fat": record.fat,
    }
    for label, value in values.items():
        if value < 0:
            raise MealValidationError(f"{label} must not be negative")
