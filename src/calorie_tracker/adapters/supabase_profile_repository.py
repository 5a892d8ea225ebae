"""Supabase repository for user profiles."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from calorie_tracker.domain.profile import (
    UserProfile,
    parse_activity_level,
    parse_body_fat_source,
    parse_gender,
    parse_goal_type,
    parse_height_unit,
    parse_weight_unit,
)
from calorie_tracker.services.profiles import ProfileRepository

_COLUMNS = (
    "user_id, name, age, weight, height, weight_unit, height_unit, gender, "
    "body_fat_percent, body_fat_source, activity_level, goal_type, "
    "weekly_weight_change, daily_calorie_goal"
)


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for user profiles."""

    client: Client

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the stored profile for a user."""
        response = (
            self.client.table("user_profiles")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def save_profile(self, user_id: UUID, profile: UserProfile) -> None:
        """Insert or update the user's profile row."""
        self.client.table("user_profiles").upsert(
            {
                "user_id": str(user_id),
                "name": profile.name,
                "age": profile.age,
                "weight": profile.weight,
                "height": profile.height,
                "weight_unit": profile.weight_unit.value,
                "height_unit": profile.height_unit.value,
                "gender": profile.gender.value,
                "body_fat_percent": profile.body_fat_percent,
                "body_fat_source": profile.body_fat_source.value,
                "activity_level": profile.activity_level.value,
                "goal_type": profile.goal_type.value,
                "weekly_weight_change": profile.weekly_weight_change,
                "daily_calorie_goal": profile.daily_calorie_goal,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()

    def delete_profile(self, user_id: UUID) -> None:
        """Delete the user's profile row."""
        self.client.table("user_profiles").delete().eq(
            "user_id", str(user_id)
        ).execute()


def _parse_profile(row: dict[str, object]) -> UserProfile:
    """Parse a profile row, tolerating legacy codes and missing columns."""
    body_fat = row.get("body_fat_percent")
    return UserProfile(
        name=str(row.get("name") or "User"),
        age=int(row.get("age") or 0),
        weight=float(row.get("weight") or 0.0),
        height=float(row.get("height") or 0.0),
        weight_unit=parse_weight_unit(row.get("weight_unit")),
        height_unit=parse_height_unit(row.get("height_unit")),
        gender=parse_gender(row.get("gender")),
        body_fat_percent=float(body_fat) if body_fat is not None else None,
        body_fat_source=parse_body_fat_source(row.get("body_fat_source")),
        activity_level=parse_activity_level(row.get("activity_level")),
        goal_type=parse_goal_type(row.get("goal_type")),
        weekly_weight_change=float(row.get("weekly_weight_change") or 0.0),
        daily_calorie_goal=float(row.get("daily_calorie_goal") or 2000.0),
    )
