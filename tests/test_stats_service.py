"""Tests for log aggregation and the stats service."""

import random
from dataclasses import replace
from datetime import UTC, date, datetime, timedelta
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from calorie_tracker.domain.meals import MealRecord, MealTime, meal_time_for_hour
from calorie_tracker.services.stats import (
    MAX_STREAK_DAYS,
    StatsService,
    aggregate_totals,
    calorie_progress,
    compute_streak,
    filter_by_date,
    group_by_meal_time,
    summarize_day,
    summarize_period,
)
from tests.conftest import USER_ID, InMemoryMealRepository


def _meal(
    consumed_at: datetime,
    calories: float = 100.0,
    protein: float = 10.0,
    carbohydrates: float = 12.0,
    fat: float = 3.0,
    name: str = "Meal",
) -> MealRecord:
    return MealRecord(
        id=uuid4(),
        name=name,
        calories=calories,
        protein=protein,
        carbohydrates=carbohydrates,
        fat=fat,
        consumed_at=consumed_at,
        user_id=USER_ID,
    )


def test_aggregate_totals_of_empty_list_is_zero() -> None:
    totals = aggregate_totals([])

    assert totals.calories == 0
    assert totals.protein_g == 0
    assert totals.carbs_g == 0
    assert totals.fat_g == 0


def test_aggregate_totals_is_partition_independent() -> None:
    rng = random.Random(42)
    base = datetime(2024, 5, 1, tzinfo=UTC)
    records = [
        _meal(
            base,
            calories=rng.randint(0, 900),
            protein=rng.randint(0, 60),
            carbohydrates=rng.randint(0, 120),
            fat=rng.randint(0, 50),
        )
        for _ in range(40)
    ]
    whole = aggregate_totals(records)
    for _ in range(20):
        cut = rng.randint(0, len(records))
        shuffled = rng.sample(records, len(records))
        left = aggregate_totals(shuffled[:cut])
        right = aggregate_totals(shuffled[cut:])

        assert left.calories + right.calories == pytest.approx(whole.calories)
        assert left.protein_g + right.protein_g == pytest.approx(whole.protein_g)
        assert left.carbs_g + right.carbs_g == pytest.approx(whole.carbs_g)
        assert left.fat_g + right.fat_g == pytest.approx(whole.fat_g)


@pytest.mark.parametrize(
    ("hour", "expected"),
    [
        (4, MealTime.SNACKS),
        (5, MealTime.BREAKFAST),
        (11, MealTime.BREAKFAST),
        (12, MealTime.LUNCH),
        (16, MealTime.LUNCH),
        (17, MealTime.DINNER),
        (20, MealTime.DINNER),
        (21, MealTime.SNACKS),
        (0, MealTime.SNACKS),
    ],
)
def test_meal_time_buckets(hour: int, expected: MealTime) -> None:
    assert meal_time_for_hour(hour) is expected


def test_group_by_meal_time_returns_every_bucket_in_order() -> None:
    day = datetime(2024, 5, 1, tzinfo=UTC)
    records = [
        _meal(day.replace(hour=8), name="Eggs"),
        _meal(day.replace(hour=22), name="Popcorn"),
    ]

    groups = group_by_meal_time(records)

    assert list(groups) == [
        MealTime.BREAKFAST,
        MealTime.LUNCH,
        MealTime.DINNER,
        MealTime.SNACKS,
    ]
    assert [meal.name for meal in groups[MealTime.BREAKFAST]] == ["Eggs"]
    assert groups[MealTime.LUNCH] == []
    assert [meal.name for meal in groups[MealTime.SNACKS]] == ["Popcorn"]


def test_grouping_and_day_filter_use_local_time() -> None:
    tz = ZoneInfo("America/New_York")
    # 02:00 UTC on May 2 is 22:00 on May 1 in New York.
    record = _meal(datetime(2024, 5, 2, 2, 0, tzinfo=UTC))

    assert filter_by_date([record], date(2024, 5, 1), tz) == [record]
    assert filter_by_date([record], date(2024, 5, 2), tz) == []
    assert group_by_meal_time([record], tz)[MealTime.SNACKS] == [record]


def test_streak_counts_consecutive_days() -> None:
    today = date(2024, 5, 10)
    records = [
        _meal(datetime(2024, 5, day, 12, tzinfo=UTC)) for day in (10, 9, 8, 6)
    ]

    assert compute_streak(records, today) == 3


def test_streak_is_zero_without_entry_today() -> None:
    records = [_meal(datetime(2024, 5, 9, 12, tzinfo=UTC))]

    assert compute_streak(records, date(2024, 5, 10)) == 0


def test_streak_is_zero_without_any_records() -> None:
    assert compute_streak([], date(2024, 5, 10)) == 0


def test_streak_is_capped() -> None:
    today = date(2024, 5, 10)
    start = datetime(2024, 5, 10, 12, tzinfo=UTC)
    records = [_meal(start - timedelta(days=offset)) for offset in range(400)]

    assert compute_streak(records, today) == MAX_STREAK_DAYS


def test_calorie_progress_guards_bad_goals() -> None:
    assert calorie_progress(1000, 2000) == 0.5
    assert calorie_progress(1000, 0) == 0.0
    assert calorie_progress(1000, -5) == 0.0
    assert calorie_progress(float("nan"), 2000) == 0.0


def test_summarize_day_reports_progress_and_recent_entries() -> None:
    day = datetime(2024, 5, 1, tzinfo=UTC)
    records = [
        _meal(day.replace(hour=8), calories=500, name="Breakfast"),
        _meal(day.replace(hour=13), calories=900, name="Lunch"),
        _meal(day.replace(hour=19), calories=700, name="Dinner"),
        _meal(day.replace(hour=22), calories=300, name="Snack"),
        _meal(day + timedelta(days=1), calories=999, name="Tomorrow"),
    ]

    summary = summarize_day(records, date(2024, 5, 1), 2000.0)

    assert summary.totals.calories == 2400
    assert summary.calorie_progress == pytest.approx(1.2)
    assert summary.is_over_goal is True
    assert [meal.name for meal in summary.recent] == ["Lunch", "Dinner", "Snack"]


def test_summarize_period_includes_empty_days() -> None:
    start = date(2024, 5, 1)
    records = [
        _meal(datetime(2024, 5, 1, 9, tzinfo=UTC), calories=1000),
        _meal(datetime(2024, 5, 3, 9, tzinfo=UTC), calories=2000),
    ]

    summary = summarize_period(records, start, 3)

    assert [entry.totals.calories for entry in summary.daily] == [1000, 0, 2000]
    assert summary.totals.calories == 3000
    assert summary.averages.calories == 1000
    assert summary.entry_count == 2


def test_stats_service_day_and_streak() -> None:
    repository = InMemoryMealRepository()
    for offset in range(3):
        record = _meal(datetime(2024, 5, 10, 8, tzinfo=UTC) - timedelta(days=offset))
        repository.meals[record.id] = record
    other = _meal(datetime(2024, 5, 10, 9, tzinfo=UTC))
    repository.meals[other.id] = replace(other, user_id=uuid4())
    service = StatsService(repository)

    summary = service.get_day(USER_ID, "UTC", 1000.0, date(2024, 5, 10))

    assert summary.totals.calories == 100
    assert summary.meals[MealTime.BREAKFAST][0].calories == 100
    assert service.get_streak(USER_ID, "UTC", as_of=date(2024, 5, 10)) == 3
    assert service.count_entries(USER_ID, "UTC", today=date(2024, 5, 10)) == 3


def test_stats_service_week_starts_monday() -> None:
    repository = InMemoryMealRepository()
    # 2024-05-08 is a Wednesday; the Sunday before is outside the week.
    for day in (5, 6, 8):
        record = _meal(datetime(2024, 5, day, 12, tzinfo=UTC), calories=700)
        repository.meals[record.id] = record
    service = StatsService(repository)

    week = service.get_week(USER_ID, "UTC", today=date(2024, 5, 8))

    assert week.start == date(2024, 5, 6)
    assert week.totals.calories == 1400
    assert week.averages.calories == pytest.approx(200)


def test_stats_service_period_summary() -> None:
    repository = InMemoryMealRepository()
    record = _meal(datetime(2024, 5, 8, 12, tzinfo=UTC), calories=1400)
    repository.meals[record.id] = record
    service = StatsService(repository)

    summary = service.get_nutrition_summary(
        USER_ID, "UTC", days=7, today=date(2024, 5, 8)
    )

    assert summary.start == date(2024, 5, 2)
    assert len(summary.daily) == 7
    assert summary.averages.calories == pytest.approx(200)
