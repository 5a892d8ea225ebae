"""Supabase repository for meal entries."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from calorie_tracker.domain.meals import MealRecord, MealTime
from calorie_tracker.services.meals import MealRepository

_COLUMNS = (
    "id, user_id, food_id, food_name, calories, protein, carbohydrates, fat, "
    "serving_size, serving_quantity, consumed_at, notes"
)

_MEAL_TYPE_CODES = {
    MealTime.BREAKFAST: "breakfast",
    MealTime.LUNCH: "lunch",
    MealTime.DINNER: "dinner",
    MealTime.SNACKS: "snack",
}


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meal entries."""

    client: Client

    def list_meals(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealRecord]:
        """Return meals consumed in [start, end), oldest first."""
        response = (
            self.client.table("meal_entries")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("consumed_at", start.isoformat())
            .lt("consumed_at", end.isoformat())
            .order("consumed_at", desc=False)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]

    def get_meal(self, user_id: UUID, meal_id: UUID) -> MealRecord | None:
        """Fetch one of the user's meal entries by id."""
        response = (
            self.client.table("meal_entries")
            .select(_COLUMNS)
            .eq("id", str(meal_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def create_meal(
        self, user_id: UUID, record: MealRecord, meal_time: MealTime
    ) -> MealRecord:
        """Insert a meal entry and return the stored record."""
        payload = _meal_payload(record, meal_time)
        payload["id"] = str(record.id)
        payload["user_id"] = str(user_id)
        response = self.client.table("meal_entries").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create meal entry")
        return _parse_meal(response.data[0])

    def update_meal(
        self, user_id: UUID, record: MealRecord, meal_time: MealTime
    ) -> MealRecord | None:
        """Overwrite a meal entry; returns None when no row matched."""
        response = (
            self.client.table("meal_entries")
            .update(_meal_payload(record, meal_time))
            .eq("id", str(record.id))
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def delete_meal(self, user_id: UUID, meal_id: UUID) -> None:
        """Delete one of the user's meal entries."""
        self.client.table("meal_entries").delete().eq("id", str(meal_id)).eq(
            "user_id", str(user_id)
        ).execute()

    def delete_all_meals(self, user_id: UUID) -> None:
        """Delete every meal entry for a user."""
        self.client.table("meal_entries").delete().eq(
            "user_id", str(user_id)
        ).execute()


def _meal_payload(record: MealRecord, meal_time: MealTime) -> dict[str, object]:
    return {
        "food_id": str(record.food_id) if record.food_id else None,
        "food_name": record.name,
        "calories": record.calories,
        "protein": record.protein,
        "carbohydrates": record.carbohydrates,
        "fat": record.fat,
        "serving_size": record.serving_size,
        "serving_quantity": 1.0,
        "meal_type": _MEAL_TYPE_CODES[meal_time],
        "consumed_at": record.consumed_at.isoformat(),
        "notes": record.notes,
    }


def _parse_meal(row: dict[str, object]) -> MealRecord:
    # Rows may carry a serving multiplier; records hold absolute values.
    quantity = float(row.get("serving_quantity") or 1.0)
    return MealRecord(
        id=UUID(row["id"]),
        user_id=UUID(row["user_id"]) if row.get("user_id") else None,
        food_id=UUID(row["food_id"]) if row.get("food_id") else None,
        name=str(row.get("food_name", "")),
        calories=float(row.get("calories") or 0.0) * quantity,
        protein=float(row.get("protein") or 0.0) * quantity,
        carbohydrates=float(row.get("carbohydrates") or 0.0) * quantity,
        fat=float(row.get("fat") or 0.0) * quantity,
        serving_size=str(row.get("serving_size") or "1 serving"),
        consumed_at=datetime.fromisoformat(row["consumed_at"]),
        notes=row.get("notes"),
    )
