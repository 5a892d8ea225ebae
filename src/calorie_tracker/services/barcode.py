"""Barcode lookup against the food database and OpenFoodFacts."""

import logging
from dataclasses import dataclass, field, replace
from typing import Protocol

from calorie_tracker.adapters.openfoodfacts_client import ProductLookupClient
from calorie_tracker.domain.meals import FoodItem
from calorie_tracker.services.cache import Cache, InMemoryCache

_BARCODE_LENGTHS = range(8, 15)

_logger = logging.getLogger(__name__)


class InvalidBarcodeError(ValueError):
    """Raised when a barcode is not 8-14 digits."""


class ProductNotFoundError(LookupError):
    """Raised when no source knows a barcode."""


class FoodValidationError(ValueError):
    """Raised when a custom food has invalid nutrition facts."""


class FoodRepository(Protocol):
    """Persistence interface for the shared food database."""

    def get_by_barcode(self, barcode: str) -> FoodItem | None:
        """Return a food by barcode, if present."""

    def search(self, query: str, limit: int) -> list[FoodItem]:
        """Return foods whose name or brand matches the query."""

    def add_food(self, food: FoodItem) -> FoodItem:
        """Insert a food and return the stored row."""


@dataclass
class BarcodeService:
    """Service that resolves barcodes to per-100g food items."""

    food_repository: FoodRepository
    lookup_client: ProductLookupClient
    cache: Cache = field(default_factory=InMemoryCache)
    product_ttl_seconds: int = 86400

    async def lookup(self, barcode: str) -> FoodItem:
        """Return the food for a barcode from the database or OpenFoodFacts."""
        code = normalize_barcode(barcode)
        stored = self.food_repository.get_by_barcode(code)
        if stored is not None:
            return stored

        cache_key = f"off:product:{code}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodItem):
            return cached

        payload = await self.lookup_client.get_product(code)
        food = parse_product(code, payload)
        if food is None:
            raise ProductNotFoundError(f"No product found for barcode {code}")
        self.cache.set(cache_key, food, ttl_seconds=self.product_ttl_seconds)
        _logger.info("Barcode %s resolved from OpenFoodFacts", code)

        try:
            return self.food_repository.add_food(food)
        except Exception:
            _logger.exception("Failed to save barcode %s to food database", code)
            return food

    def add_custom_food(self, food: FoodItem) -> FoodItem:
        """Validate a user-entered food and add it to the food database."""
        if not food.name.strip():
            raise FoodValidationError("Food name is required")
        facts = {
            "calories_per_100g": food.calories_per_100g,
            "protein_per_100g": food.protein_per_100g,
            "carbohydrates_per_100g": food.carbohydrates_per_100g,
            "fat_per_100g": food.fat_per_100g,
            "fiber_per_100g": food.fiber_per_100g,
            "sugar_per_100g": food.sugar_per_100g,
            "sodium_per_100g": food.sodium_per_100g,
        }
        for label, value in facts.items():
            if value is not None and value < 0:
                raise FoodValidationError(f"{label} must not be negative")
        barcode = normalize_barcode(food.barcode) if food.barcode else None
        custom = replace(
            food, name=food.name.strip(), barcode=barcode, verified=False, id=None
        )
        stored = self.food_repository.add_food(custom)
        _logger.info("Added custom food %s", stored.id)
        return stored

    def search(self, query: str, limit: int = 20) -> list[FoodItem]:
        """Search the food database by name or brand."""
        cleaned = query.strip()
        if not cleaned:
            return []
        return self.food_repository.search(cleaned, limit)


def normalize_barcode(barcode: str) -> str:
    """Strip whitespace and check the barcode is 8-14 digits."""
    code = "".join(barcode.split())
    if not code.isdigit() or len(code) not in _BARCODE_LENGTHS:
        raise InvalidBarcodeError(f"Invalid barcode: {barcode!r}")
    return code


def parse_product(barcode: str, payload: dict[str, object]) -> FoodItem | None:
    """Build a food item from an OpenFoodFacts payload."""
    product = payload.get("product")
    if payload.get("status") != 1 or not isinstance(product, dict):
        return None
    nutriments = product.get("nutriments") or {}
    return FoodItem(
        name=str(product.get("product_name") or "Unknown Product"),
        brand=product.get("brands") or None,
        barcode=barcode,
        calories_per_100g=_number(nutriments, "energy-kcal_100g") or 0.0,
        protein_per_100g=_number(nutriments, "proteins_100g") or 0.0,
        carbohydrates_per_100g=_number(nutriments, "carbohydrates_100g") or 0.0,
        fat_per_100g=_number(nutriments, "fat_100g") or 0.0,
        fiber_per_100g=_number(nutriments, "fiber_100g"),
        sugar_per_100g=_number(nutriments, "sugars_100g"),
        sodium_per_100g=_number(nutriments, "sodium_100g"),
        verified=True,
    )


def _number(values: dict[str, object], key: str) -> float | None:
    """Read a numeric nutriment; OpenFoodFacts uses both - and _ spellings."""
    raw = values.get(key)
    if raw is None:
        raw = values.get(key.replace("-", "_"))
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None
