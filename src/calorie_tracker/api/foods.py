"""Food lookup and AI analysis endpoints."""

from fastapi import APIRouter, Depends, Request, status

from calorie_tracker.api.schemas import AnalyzeIn, FoodIn
from calorie_tracker.api.users import require_token
from calorie_tracker.containers import AppContainer
from calorie_tracker.domain.meals import FoodItem

router = APIRouter(tags=["foods"], dependencies=[Depends(require_token)])


@router.get("/foods/barcode/{barcode}")
async def lookup_barcode(barcode: str, request: Request) -> dict[str, object]:
    """Resolve a barcode to per-100g nutrition facts."""
    container: AppContainer = request.app.state.container
    return {"food": await container.barcode_service.lookup(barcode)}


@router.get("/foods/search")
async def search_foods(
    q: str, request: Request, limit: int = 20
) -> dict[str, object]:
    """Search the food database by name or brand."""
    container: AppContainer = request.app.state.container
    return {"foods": container.barcode_service.search(q, limit)}


@router.post("/foods", status_code=status.HTTP_201_CREATED)
async def add_custom_food(payload: FoodIn, request: Request) -> dict[str, object]:
    """Add a user-entered food to the shared food database."""
    container: AppContainer = request.app.state.container
    food = container.barcode_service.add_custom_food(FoodItem(**payload.model_dump()))
    return {"food": food}


@router.post("/analysis")
async def analyze_meal(payload: AnalyzeIn, request: Request) -> dict[str, object]:
    """Estimate a described meal without logging it."""
    container: AppContainer = request.app.state.container
    analysis = await container.analysis_service.analyze_description(
        payload.description
    )
    return {"analysis": analysis}
