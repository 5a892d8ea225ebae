"""Profile lifecycle: validation, goal recomputation and offline fallback."""

import logging
from dataclasses import dataclass, field, replace
from typing import Protocol
from uuid import UUID

from calorie_tracker.domain.profile import (
    DEFAULT_PROFILE,
    ActivityLevel,
    BodyFatSource,
    GoalReport,
    GoalType,
    UserProfile,
)
from calorie_tracker.domain.results import Resolution, ResolutionSource
from calorie_tracker.services.cache import Cache, InMemoryCache
from calorie_tracker.services.goals import (
    build_goal_report,
    signed_weekly_change,
    with_recomputed_goal,
)
from calorie_tracker.services.meals import MealLogService

MAX_AGE = 150
MAX_BODY_FAT_PERCENT = 100.0

# A null body fat source is derived from body_fat_percent.
_NULLABLE_FIELDS = frozenset({"body_fat_percent", "body_fat_source"})

_logger = logging.getLogger(__name__)


class ProfileValidationError(ValueError):
    """Raised when a profile edit is structurally invalid."""


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the stored profile, if present."""

    def save_profile(self, user_id: UUID, profile: UserProfile) -> None:
        """Insert or update a user's profile."""

    def delete_profile(self, user_id: UUID) -> None:
        """Delete a user's profile."""


def default_profile() -> UserProfile:
    """Return the first-use profile with its goal computed."""
    return with_recomputed_goal(DEFAULT_PROFILE)


def validate_profile(profile: UserProfile) -> None:
    """Reject profiles the goal engine should never see."""
    if not profile.name.strip():
        raise ProfileValidationError("Name is required")
    if not 0 < profile.age < MAX_AGE:
        raise ProfileValidationError("Age must be between 1 and 149")
    if profile.weight <= 0:
        raise ProfileValidationError("Weight must be positive")
    if profile.height <= 0:
        raise ProfileValidationError("Height must be positive")
    body_fat = profile.body_fat_percent
    if body_fat is not None and not 0 < body_fat < MAX_BODY_FAT_PERCENT:
        raise ProfileValidationError("Body fat % must be between 0 and 100")
    if profile.activity_level is ActivityLevel.UNKNOWN:
        raise ProfileValidationError("Choose an activity level")
    if profile.goal_type is GoalType.UNKNOWN:
        raise ProfileValidationError("Choose a goal type")


@dataclass
class ProfileService:
    """Application service for reading and editing user profiles."""

    repository: ProfileRepository
    meal_log_service: MealLogService
    cache: Cache = field(default_factory=InMemoryCache)

    def get_profile(self, user_id: UUID) -> UserProfile:
        """Return the stored profile or the default one."""
        stored = self.repository.get_profile(user_id)
        if stored is None:
            return default_profile()
        self.cache.set(_cache_key(user_id), stored)
        return stored

    def ensure_profile(self, user_id: UUID) -> UserProfile:
        """Return the stored profile, creating the default on first use."""
        stored = self.repository.get_profile(user_id)
        if stored is not None:
            self.cache.set(_cache_key(user_id), stored)
            return stored
        return self.save_profile(user_id, DEFAULT_PROFILE)

    def resolve_profile(self, user_id: UUID) -> Resolution[UserProfile]:
        """Return the profile from storage, the offline cache, or the default."""
        try:
            stored = self.repository.get_profile(user_id)
        except Exception as exc:
            _logger.warning(
                "Profile load failed for user=%s, using offline data: %s", user_id, exc
            )
            cached = self.cache.get(_cache_key(user_id))
            if isinstance(cached, UserProfile):
                return Resolution(cached, ResolutionSource.CACHE, error=str(exc))
            return Resolution(default_profile(), ResolutionSource.DEFAULT, str(exc))
        if stored is None:
            return Resolution(default_profile(), ResolutionSource.DEFAULT)
        self.cache.set(_cache_key(user_id), stored)
        return Resolution(stored, ResolutionSource.REMOTE)

    def save_profile(self, user_id: UUID, profile: UserProfile) -> UserProfile:
        """Validate, recompute the calorie goal and persist a profile."""
        validate_profile(profile)
        normalized = replace(
            profile, weekly_weight_change=signed_weekly_change(profile)
        )
        if normalized.body_fat_percent is None:
            normalized = replace(normalized, body_fat_source=BodyFatSource.UNKNOWN)
        recomputed = with_recomputed_goal(normalized)
        self.cache.set(_cache_key(user_id), recomputed)
        self.repository.save_profile(user_id, recomputed)
        return recomputed

    def update_profile(self, user_id: UUID, **changes: object) -> UserProfile:
        """Apply field changes to the current profile and save it."""
        nulls = sorted(
            name
            for name, value in changes.items()
            if value is None and name not in _NULLABLE_FIELDS
        )
        if nulls:
            raise ProfileValidationError(f"Fields cannot be null: {', '.join(nulls)}")
        if changes.get("body_fat_source", BodyFatSource.UNKNOWN) is None:
            del changes["body_fat_source"]
        current = self.get_profile(user_id)
        if "body_fat_percent" in changes and "body_fat_source" not in changes:
            changes["body_fat_source"] = (
                BodyFatSource.MEASURED
                if changes["body_fat_percent"] is not None
                else BodyFatSource.UNKNOWN
            )
        try:
            updated = replace(current, **changes)
        except TypeError as exc:
            raise ProfileValidationError(str(exc)) from exc
        return self.save_profile(user_id, updated)

    def get_goal_report(
        self, user_id: UUID, *, use_estimated_body_fat: bool = False
    ) -> GoalReport:
        """Return calorie and macro goals for the user's current profile."""
        resolution = self.resolve_profile(user_id)
        return build_goal_report(
            resolution.value, use_estimated_body_fat=use_estimated_body_fat
        )

    def reset_all_data(self, user_id: UUID) -> UserProfile:
        """Delete the user's meals and profile and reinstate the default."""
        self.meal_log_service.delete_all(user_id)
        self.repository.delete_profile(user_id)
        self.cache.delete(_cache_key(user_id))
        _logger.info("Reset profile and meal data for user=%s", user_id)
        return self.save_profile(user_id, DEFAULT_PROFILE)


def _cache_key(user_id: UUID) -> str:
    return f"profile:{user_id}"
