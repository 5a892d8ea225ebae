"""Supabase repository for the shared food database."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from calorie_tracker.domain.meals import FoodItem
from calorie_tracker.services.barcode import FoodRepository


@dataclass
class SupabaseFoodRepository(FoodRepository):
    """Supabase-backed food database."""

    client: Client

    def get_by_barcode(self, barcode: str) -> FoodItem | None:
        """Return a food by barcode, if present."""
        response = (
            self.client.table("food_database")
            .select("*")
            .eq("barcode", barcode)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def search(self, query: str, limit: int) -> list[FoodItem]:
        """Search foods by name, then by brand."""
        pattern = f"%{query}%"
        response = (
            self.client.table("food_database")
            .select("*")
            .ilike("name", pattern)
            .order("verified", desc=True)
            .limit(limit)
            .execute()
        )
        foods = [_parse_food(row) for row in response.data or []]
        if len(foods) < limit:
            brand_response = (
                self.client.table("food_database")
                .select("*")
                .ilike("brand", pattern)
                .limit(limit)
                .execute()
            )
            seen = {food.id for food in foods}
            foods.extend(
                food
                for food in (_parse_food(row) for row in brand_response.data or [])
                if food.id not in seen
            )
        return foods[:limit]

    def add_food(self, food: FoodItem) -> FoodItem:
        """Insert a food and return it with its database id."""
        response = (
            self.client.table("food_database")
            .insert(
                {
                    "name": food.name,
                    "brand": food.brand,
                    "barcode": food.barcode,
                    "calories_per_100g": food.calories_per_100g,
                    "protein_per_100g": food.protein_per_100g,
                    "carbohydrates_per_100g": food.carbohydrates_per_100g,
                    "fat_per_100g": food.fat_per_100g,
                    "fiber_per_100g": food.fiber_per_100g,
                    "sugar_per_100g": food.sugar_per_100g,
                    "sodium_per_100g": food.sodium_per_100g,
                    "verified": food.verified,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create food entry")
        return _parse_food(response.data[0])


def _optional(row: dict[str, object], key: str) -> float | None:
    value = row.get(key)
    return float(value) if value is not None else None


def _parse_food(row: dict[str, object]) -> FoodItem:
    return FoodItem(
        id=UUID(row["id"]) if row.get("id") else None,
        name=str(row.get("name", "")),
        brand=row.get("brand"),
        barcode=row.get("barcode"),
        calories_per_100g=float(row.get("calories_per_100g") or 0.0),
        protein_per_100g=float(row.get("protein_per_100g") or 0.0),
        carbohydrates_per_100g=float(row.get("carbohydrates_per_100g") or 0.0),
        fat_per_100g=float(row.get("fat_per_100g") or 0.0),
        fiber_per_100g=_optional(row, "fiber_per_100g"),
        sugar_per_100g=_optional(row, "sugar_per_100g"),
        sodium_per_100g=_optional(row, "sodium_per_100g"),
        verified=bool(row.get("verified", False)),
    )
