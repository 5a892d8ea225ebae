"""Log aggregation: totals, meal-time buckets and streaks over meal records."""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from uuid import UUID
from zoneinfo import ZoneInfo

from calorie_tracker.domain.meals import (
    DailyTotals,
    DaySummary,
    MealRecord,
    MealTime,
    NutritionTotals,
    PeriodSummary,
    local_time,
)
from calorie_tracker.services.meals import MealRepository

MAX_STREAK_DAYS = 365
RECENT_ENTRY_COUNT = 3
HISTORY_WINDOW_DAYS = 365


def local_day(moment: datetime, tz: tzinfo) -> date:
    """Return the local calendar day of a timestamp."""
    return local_time(moment, tz).date()


def aggregate_totals(records: Iterable[MealRecord]) -> NutritionTotals:
    """Sum calories and macros over records."""
    calories = protein = carbs = fat = 0.0
    for record in records:
        calories += record.calories
        protein += record.protein
        carbs += record.carbohydrates
        fat += record.fat
    return NutritionTotals(
        calories=calories, protein_g=protein, carbs_g=carbs, fat_g=fat
    )


def group_by_meal_time(
    records: Iterable[MealRecord], tz: tzinfo = UTC
) -> dict[MealTime, list[MealRecord]]:
    """Bucket records by the local hour they were consumed.

    Every bucket is present, in breakfast-to-snacks order. The date is
    ignored, so callers filter to a single day first.
    """
    groups: dict[MealTime, list[MealRecord]] = {meal_time: [] for meal_time in MealTime}
    for record in records:
        groups[record.meal_time(tz)].append(record)
    return groups


def filter_by_date(
    records: Iterable[MealRecord], day: date, tz: tzinfo = UTC
) -> list[MealRecord]:
    """Return records consumed on a local calendar day."""
    return [record for record in records if local_day(record.consumed_at, tz) == day]


def compute_streak(
    records: Iterable[MealRecord], as_of: date, tz: tzinfo = UTC
) -> int:
    """Count consecutive logged days walking back from as_of, capped at 365."""
    days_with_entries = {local_day(record.consumed_at, tz) for record in records}
    streak = 0
    current = as_of
    while streak < MAX_STREAK_DAYS and current in days_with_entries:
        streak += 1
        current -= timedelta(days=1)
    return streak


def calorie_progress(consumed: float, goal: float) -> float:
    """Return consumed / goal, or 0 when either value is unusable."""
    if not (math.isfinite(consumed) and math.isfinite(goal)) or goal <= 0:
        return 0.0
    return consumed / goal


def summarize_day(
    records: Iterable[MealRecord],
    day: date,
    calorie_goal: float,
    tz: tzinfo = UTC,
) -> DaySummary:
    """Build the dashboard summary for one local day."""
    day_records = sorted(
        filter_by_date(records, day, tz), key=lambda record: record.consumed_at
    )
    totals = aggregate_totals(day_records)
    progress = calorie_progress(totals.calories, calorie_goal)
    return DaySummary(
        day=day,
        totals=totals,
        meals=group_by_meal_time(day_records, tz),
        calorie_goal=calorie_goal,
        calorie_progress=progress,
        is_over_goal=progress > 1.0,
        recent=day_records[-RECENT_ENTRY_COUNT:],
    )


def summarize_period(
    records: Iterable[MealRecord], start: date, days: int, tz: tzinfo = UTC
) -> PeriodSummary:
    """Return daily totals and per-day averages for days starting at start."""
    by_day: dict[date, list[MealRecord]] = {}
    for record in records:
        by_day.setdefault(local_day(record.consumed_at, tz), []).append(record)

    daily = []
    entry_count = 0
    for offset in range(days):
        day = start + timedelta(days=offset)
        day_records = by_day.get(day, [])
        entry_count += len(day_records)
        daily.append(DailyTotals(day=day, totals=aggregate_totals(day_records)))

    totals = NutritionTotals(
        calories=sum(entry.totals.calories for entry in daily),
        protein_g=sum(entry.totals.protein_g for entry in daily),
        carbs_g=sum(entry.totals.carbs_g for entry in daily),
        fat_g=sum(entry.totals.fat_g for entry in daily),
    )
    total_days = max(days, 1)
    return PeriodSummary(
        start=start,
        days=days,
        daily=daily,
        totals=totals,
        averages=NutritionTotals(
            calories=totals.calories / total_days,
            protein_g=totals.protein_g / total_days,
            carbs_g=totals.carbs_g / total_days,
            fat_g=totals.fat_g / total_days,
        ),
        entry_count=entry_count,
    )


@dataclass
class StatsService:
    """Service that loads meal records for a user and aggregates them."""

    repository: MealRepository

    def today(self, timezone_name: str) -> date:
        """Return the current local date in a timezone."""
        return datetime.now(tz=ZoneInfo(timezone_name)).date()

    def get_day(
        self,
        user_id: UUID,
        timezone_name: str,
        calorie_goal: float,
        day: date | None = None,
    ) -> DaySummary:
        """Return the summary for a local day, today by default."""
        tz = ZoneInfo(timezone_name)
        resolved_day = day or self.today(timezone_name)
        start, end = _day_bounds(resolved_day, 1, tz)
        records = self.repository.list_meals(user_id, start, end)
        return summarize_day(records, resolved_day, calorie_goal, tz)

    def get_week(
        self, user_id: UUID, timezone_name: str, today: date | None = None
    ) -> PeriodSummary:
        """Return week-to-date totals and averages, weeks starting Monday."""
        tz = ZoneInfo(timezone_name)
        resolved_today = today or self.today(timezone_name)
        start_day = resolved_today - timedelta(days=resolved_today.weekday())
        start, end = _day_bounds(start_day, 7, tz)
        records = self.repository.list_meals(user_id, start, end)
        return summarize_period(records, start_day, 7, tz)

    def get_nutrition_summary(
        self,
        user_id: UUID,
        timezone_name: str,
        days: int = 7,
        today: date | None = None,
    ) -> PeriodSummary:
        """Return totals and averages for the last `days` days including today."""
        tz = ZoneInfo(timezone_name)
        resolved_today = today or self.today(timezone_name)
        start_day = resolved_today - timedelta(days=days - 1)
        start, end = _day_bounds(start_day, days, tz)
        records = self.repository.list_meals(user_id, start, end)
        return summarize_period(records, start_day, days, tz)

    def get_streak(
        self, user_id: UUID, timezone_name: str, as_of: date | None = None
    ) -> int:
        """Return the current logging streak for a user."""
        tz = ZoneInfo(timezone_name)
        resolved = as_of or self.today(timezone_name)
        start_day = resolved - timedelta(days=MAX_STREAK_DAYS)
        start, end = _day_bounds(start_day, MAX_STREAK_DAYS + 1, tz)
        records = self.repository.list_meals(user_id, start, end)
        return compute_streak(records, resolved, tz)

    def count_entries(
        self, user_id: UUID, timezone_name: str, today: date | None = None
    ) -> int:
        """Return how many meals were logged over the past year."""
        tz = ZoneInfo(timezone_name)
        resolved_today = today or self.today(timezone_name)
        start_day = resolved_today - timedelta(days=HISTORY_WINDOW_DAYS)
        start, end = _day_bounds(start_day, HISTORY_WINDOW_DAYS + 1, tz)
        return len(self.repository.list_meals(user_id, start, end))


def _day_bounds(start_day: date, days: int, tz: tzinfo) -> tuple[datetime, datetime]:
    """Return UTC bounds covering whole local days."""
    start = datetime.combine(start_day, time.min, tzinfo=tz)
    end = datetime.combine(start_day + timedelta(days=days), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)
