"""Per-user API endpoints with token auth."""

from datetime import date
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from calorie_tracker.api.schemas import (
    AnalyzeMealIn,
    BarcodeMealIn,
    MealIn,
    MealPatch,
    ProfileIn,
    ProfilePatch,
)
from calorie_tracker.containers import AppContainer
from calorie_tracker.domain.analysis import MealPreferences
from calorie_tracker.domain.meals import DaySummary
from calorie_tracker.domain.profile import BodyFatSource, UserProfile


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


router = APIRouter(
    prefix="/users/{user_id}", tags=["users"], dependencies=[Depends(require_token)]
)


def _timezone(request: Request, tz: str | None) -> str:
    container: AppContainer = request.app.state.container
    timezone_name = tz or container.settings.default_timezone
    try:
        ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown timezone: {timezone_name}",
        ) from exc
    return timezone_name


@router.get("/profile")
async def get_profile(user_id: UUID, request: Request) -> dict[str, object]:
    """Return the user's profile and where it was loaded from."""
    container: AppContainer = request.app.state.container
    resolution = container.profile_service.resolve_profile(user_id)
    return {"profile": resolution.value, "source": resolution.source.value}


@router.put("/profile")
async def put_profile(
    user_id: UUID, payload: ProfileIn, request: Request
) -> dict[str, object]:
    """Replace the user's profile and recompute the calorie goal."""
    container: AppContainer = request.app.state.container
    values = payload.model_dump()
    if values["body_fat_source"] is None:
        values["body_fat_source"] = (
            BodyFatSource.MEASURED
            if values["body_fat_percent"] is not None
            else BodyFatSource.UNKNOWN
        )
    profile = container.profile_service.save_profile(user_id, UserProfile(**values))
    return {"profile": profile}


@router.patch("/profile")
async def patch_profile(
    user_id: UUID, payload: ProfilePatch, request: Request
) -> dict[str, object]:
    """Apply a partial profile edit."""
    container: AppContainer = request.app.state.container
    profile = container.profile_service.update_profile(
        user_id, **payload.model_dump(exclude_unset=True)
    )
    return {"profile": profile}


@router.post("/reset")
async def reset_data(user_id: UUID, request: Request) -> dict[str, object]:
    """Delete all meals and restore the default profile."""
    container: AppContainer = request.app.state.container
    profile = container.profile_service.reset_all_data(user_id)
    return {"profile": profile}


@router.get("/goals")
async def get_goals(
    user_id: UUID, request: Request, use_estimated_body_fat: bool = False
) -> dict[str, object]:
    """Return BMR, TDEE, calorie goal, macro targets and warnings."""
    container: AppContainer = request.app.state.container
    report = container.profile_service.get_goal_report(
        user_id, use_estimated_body_fat=use_estimated_body_fat
    )
    return {"goals": report}


@router.get("/meals")
async def list_meals(
    user_id: UUID,
    request: Request,
    day: date | None = None,
    tz: str | None = None,
) -> dict[str, object]:
    """Return the meals logged on a local day, today by default."""
    container: AppContainer = request.app.state.container
    timezone_name = _timezone(request, tz)
    resolved_day = day or container.stats_service.today(timezone_name)
    resolution = container.meal_log_service.resolve_meals_for_day(
        user_id, resolved_day, timezone_name
    )
    return {
        "day": resolved_day,
        "meals": resolution.value,
        "source": resolution.source.value,
    }


@router.post("/meals", status_code=status.HTTP_201_CREATED)
async def create_meal(
    user_id: UUID, payload: MealIn, request: Request, tz: str | None = None
) -> dict[str, object]:
    """Log a manually entered meal."""
    container: AppContainer = request.app.state.container
    meal = container.meal_log_service.log_meal(
        user_id, **payload.model_dump(), timezone_name=_timezone(request, tz)
    )
    return {"meal": meal}


@router.patch("/meals/{meal_id}")
async def update_meal(
    user_id: UUID,
    meal_id: UUID,
    payload: MealPatch,
    request: Request,
    tz: str | None = None,
) -> dict[str, object]:
    """Edit a logged meal."""
    container: AppContainer = request.app.state.container
    meal = container.meal_log_service.update_meal(
        user_id,
        meal_id,
        timezone_name=_timezone(request, tz),
        **payload.model_dump(exclude_unset=True),
    )
    return {"meal": meal}


@router.delete("/meals/{meal_id}")
async def delete_meal(user_id: UUID, meal_id: UUID, request: Request) -> dict[str, str]:
    """Delete a logged meal."""
    container: AppContainer = request.app.state.container
    container.meal_log_service.delete_meal(user_id, meal_id)
    return {"status": "ok"}


@router.post("/meals/barcode", status_code=status.HTTP_201_CREATED)
async def log_barcode_meal(
    user_id: UUID, payload: BarcodeMealIn, request: Request, tz: str | None = None
) -> dict[str, object]:
    """Look up a barcode and log the scaled portion."""
    container: AppContainer = request.app.state.container
    timezone_name = _timezone(request, tz)
    food = await container.barcode_service.lookup(payload.barcode)
    meal = container.meal_log_service.log_food_item(
        user_id,
        food,
        grams=payload.grams,
        consumed_at=payload.consumed_at,
        timezone_name=timezone_name,
    )
    return {"food": food, "meal": meal}


@router.post("/meals/analyze", status_code=status.HTTP_201_CREATED)
async def analyze_and_log_meal(
    user_id: UUID, payload: AnalyzeMealIn, request: Request, tz: str | None = None
) -> dict[str, object]:
    """Estimate a described meal with AI and log the estimate."""
    container: AppContainer = request.app.state.container
    timezone_name = _timezone(request, tz)
    analysis = await container.analysis_service.analyze_description(
        payload.description
    )
    meal = container.meal_log_service.log_analysis(
        user_id,
        analysis,
        name=payload.name or payload.description.strip(),
        consumed_at=payload.consumed_at,
        timezone_name=timezone_name,
    )
    return {"analysis": analysis, "meal": meal}


@router.post("/meal-plan")
async def suggest_meal_plan(
    user_id: UUID, preferences: MealPreferences, request: Request
) -> dict[str, object]:
    """Generate a day of meals aimed at the user's goals."""
    container: AppContainer = request.app.state.container
    profile = container.profile_service.resolve_profile(user_id).value
    plan = await container.analysis_service.suggest_meal_plan(profile, preferences)
    return {"plan": plan, "totals": plan.totals()}


@router.get("/summary/day")
async def day_summary(
    user_id: UUID,
    request: Request,
    day: date | None = None,
    tz: str | None = None,
) -> dict[str, object]:
    """Return the dashboard summary for a local day."""
    container: AppContainer = request.app.state.container
    profile = container.profile_service.resolve_profile(user_id).value
    summary = container.stats_service.get_day(
        user_id, _timezone(request, tz), profile.daily_calorie_goal, day
    )
    return {"summary": _day_summary_payload(summary)}


@router.get("/summary/week")
async def week_summary(
    user_id: UUID, request: Request, tz: str | None = None
) -> dict[str, object]:
    """Return week-to-date totals and averages."""
    container: AppContainer = request.app.state.container
    summary = container.stats_service.get_week(user_id, _timezone(request, tz))
    return {"summary": summary}


@router.get("/summary/period")
async def period_summary(
    user_id: UUID,
    request: Request,
    days: int = Query(default=7, ge=1, le=365),
    tz: str | None = None,
) -> dict[str, object]:
    """Return totals and averages for the last N days."""
    container: AppContainer = request.app.state.container
    summary = container.stats_service.get_nutrition_summary(
        user_id, _timezone(request, tz), days
    )
    return {"summary": summary}


@router.get("/streak")
async def streak(
    user_id: UUID, request: Request, tz: str | None = None
) -> dict[str, object]:
    """Return the current daily logging streak."""
    container: AppContainer = request.app.state.container
    timezone_name = _timezone(request, tz)
    return {
        "streak": container.stats_service.get_streak(user_id, timezone_name),
        "total_entries": container.stats_service.count_entries(
            user_id, timezone_name
        ),
    }


def _day_summary_payload(summary: DaySummary) -> dict[str, object]:
    return {
        "day": summary.day,
        "totals": summary.totals,
        "meals": {
            meal_time.value: records for meal_time, records in summary.meals.items()
        },
        "calorie_goal": summary.calorie_goal,
        "calorie_progress": summary.calorie_progress,
        "is_over_goal": summary.is_over_goal,
        "recent": summary.recent,
    }
