"""Goal engine: calorie and macro targets derived from a user profile.

Every function here is pure. Inputs are never re-validated; degenerate
values fall back to fixed defaults instead of raising, and the only findings
surfaced to callers are advisory warning strings.
"""

import math
from dataclasses import replace

from calorie_tracker.domain.profile import (
    ActivityLevel,
    BodyFatSource,
    Gender,
    GoalReport,
    GoalType,
    HeightUnit,
    MacroTargets,
    UserProfile,
    WeightUnit,
)

KG_PER_LB = 0.453592
CM_PER_INCH = 2.54

FALLBACK_BMR = 1800.0
FALLBACK_LEAN_MASS_KG = 70.0
FALLBACK_CALORIE_GOAL = 2000.0
MIN_CALORIE_GOAL = 1200.0
KCAL_PER_LB_PER_WEEK = 500.0

KCAL_PER_G_PROTEIN = 4.0
KCAL_PER_G_CARBS = 4.0
KCAL_PER_G_FAT = 9.0

MAX_KATCH_BODY_FAT = 70.0
BODY_FAT_ESTIMATE_RANGE = (5.0, 60.0)
BODY_FAT_ACCURATE_RANGE = (10.0, 50.0)
ESSENTIAL_FAT_G_PER_KG = 0.8

_ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
}

_PROTEIN_G_PER_KG_LEAN: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.0,
    ActivityLevel.LIGHTLY_ACTIVE: 1.2,
    ActivityLevel.MODERATELY_ACTIVE: 1.4,
    ActivityLevel.VERY_ACTIVE: 1.6,
}

_CARBS_G_PER_KG_LEAN: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 2.5,
    ActivityLevel.LIGHTLY_ACTIVE: 3.5,
    ActivityLevel.MODERATELY_ACTIVE: 4.5,
    ActivityLevel.VERY_ACTIVE: 6.0,
}

_PROTEIN_GOAL_MULTIPLIERS: dict[GoalType, float] = {
    GoalType.LOSE_WEIGHT: 1.8,
    GoalType.MAINTAIN_WEIGHT: 1.0,
    GoalType.GAIN_WEIGHT: 1.6,
}

_CARBS_GOAL_MULTIPLIERS: dict[GoalType, float] = {
    GoalType.LOSE_WEIGHT: 0.7,
    GoalType.MAINTAIN_WEIGHT: 1.0,
    GoalType.GAIN_WEIGHT: 1.2,
}


def weight_kg(profile: UserProfile) -> float:
    """Return the profile weight in kilograms."""
    if profile.weight_unit is WeightUnit.LB:
        return profile.weight * KG_PER_LB
    return profile.weight


def height_cm(profile: UserProfile) -> float:
    """Return the profile height in centimetres."""
    if profile.height_unit is HeightUnit.INCH:
        return profile.height * CM_PER_INCH
    return profile.height


def signed_weekly_change(profile: UserProfile) -> float:
    """Return the weekly change in lb with its sign taken from the goal type."""
    magnitude = abs(profile.weekly_weight_change)
    if profile.goal_type is GoalType.LOSE_WEIGHT:
        return -magnitude
    if profile.goal_type is GoalType.GAIN_WEIGHT:
        return magnitude
    return 0.0


def estimate_body_fat_percent(profile: UserProfile) -> float | None:
    """Estimate body fat with the Deurenberg formula, clamped to [5, 60].

    Returns None when weight or height is not a positive finite number.
    """
    kg = weight_kg(profile)
    metres = height_cm(profile) / 100
    if not (math.isfinite(kg) and math.isfinite(metres)) or kg <= 0 or metres <= 0:
        return None
    bmi = kg / (metres * metres)
    sex = 1.0 if profile.gender is Gender.MALE else 0.0
    estimate = 1.20 * bmi + 0.23 * profile.age - 10.8 * sex - 5.4
    low, high = BODY_FAT_ESTIMATE_RANGE
    return max(low, min(high, estimate))


def _body_fat_for_bmr(
    profile: UserProfile, use_estimated_body_fat: bool
) -> float | None:
    if profile.body_fat_percent is None:
        if use_estimated_body_fat:
            return estimate_body_fat_percent(profile)
        return None
    estimated = profile.body_fat_source is BodyFatSource.ESTIMATED
    if estimated and not use_estimated_body_fat:
        return None
    return profile.body_fat_percent


def calculate_bmr(
    profile: UserProfile, *, use_estimated_body_fat: bool = False
) -> float:
    """Return basal metabolic rate in kcal/day.

    Katch-McArdle on lean mass when a trusted body-fat percentage is
    available, otherwise a gender-neutral Harris-Benedict variant, otherwise
    a fixed fallback.
    """
    kg = weight_kg(profile)
    cm = height_cm(profile)
    body_fat = _body_fat_for_bmr(profile, use_estimated_body_fat)
    if body_fat is not None and 0 < body_fat < MAX_KATCH_BODY_FAT:
        lean_mass = kg * (1 - body_fat / 100)
        bmr = 370 + 21.6 * lean_mass
    elif kg > 0 and cm > 0:
        bmr = 88.362 + 13.397 * kg + 4.799 * cm - 5.677 * profile.age
    else:
        bmr = FALLBACK_BMR
    if not math.isfinite(bmr):
        return FALLBACK_BMR
    return bmr


def activity_multiplier(level: ActivityLevel) -> float:
    """Return the TDEE multiplier for an activity level."""
    return _ACTIVITY_MULTIPLIERS.get(
        level, _ACTIVITY_MULTIPLIERS[ActivityLevel.SEDENTARY]
    )


def calculate_tdee(
    profile: UserProfile, *, use_estimated_body_fat: bool = False
) -> float:
    """Return total daily energy expenditure in kcal/day."""
    bmr = calculate_bmr(profile, use_estimated_body_fat=use_estimated_body_fat)
    return bmr * activity_multiplier(profile.activity_level)


def calculate_daily_calorie_goal(
    profile: UserProfile,
    *,
    rounded: bool = True,
    use_estimated_body_fat: bool = False,
) -> float:
    """Return the daily calorie goal, never below 1200 kcal."""
    tdee = calculate_tdee(profile, use_estimated_body_fat=use_estimated_body_fat)
    goal = tdee + signed_weekly_change(profile) * KCAL_PER_LB_PER_WEEK
    goal = max(MIN_CALORIE_GOAL, goal)
    if rounded:
        return float(round(goal))
    return goal


def lean_body_mass_kg(profile: UserProfile | None) -> float:
    """Return lean body mass using the Boer formula."""
    if profile is None:
        return FALLBACK_LEAN_MASS_KG
    kg = weight_kg(profile)
    cm = height_cm(profile)
    if profile.gender is Gender.MALE:
        lean_mass = 0.407 * kg + 0.267 * cm - 19.2
    else:
        lean_mass = 0.252 * kg + 0.473 * cm - 48.3
    if not math.isfinite(lean_mass) or lean_mass <= 0:
        return FALLBACK_LEAN_MASS_KG
    return lean_mass


def calculate_macro_targets(
    profile: UserProfile | None, daily_calorie_goal: float | None = None
) -> MacroTargets:
    """Return protein, carb and fat targets in grams.

    Protein and carbs scale with lean body mass, activity and goal; carbs are
    the higher of the lean-mass estimate and 60% of the post-protein
    residual, capped at the whole residual; fat fills what is left but never
    drops below the essential-fat floor. The three values are not
    renormalized to sum back to the calorie goal.
    """
    if profile is None:
        goal = daily_calorie_goal or FALLBACK_CALORIE_GOAL
        return MacroTargets(
            protein_g=goal * 0.25 / KCAL_PER_G_PROTEIN,
            carbs_g=goal * 0.45 / KCAL_PER_G_CARBS,
            fat_g=goal * 0.30 / KCAL_PER_G_FAT,
        )

    goal = (
        daily_calorie_goal
        if daily_calorie_goal is not None
        else calculate_daily_calorie_goal(profile, rounded=False)
    )
    lean_mass = lean_body_mass_kg(profile)
    activity = (
        profile.activity_level
        if profile.activity_level in _PROTEIN_G_PER_KG_LEAN
        else ActivityLevel.SEDENTARY
    )
    goal_type = (
        profile.goal_type
        if profile.goal_type in _PROTEIN_GOAL_MULTIPLIERS
        else GoalType.MAINTAIN_WEIGHT
    )

    protein = (
        lean_mass
        * _PROTEIN_G_PER_KG_LEAN[activity]
        * _PROTEIN_GOAL_MULTIPLIERS[goal_type]
    )
    # Protein calories may not exceed the whole goal.
    protein = max(0.0, min(protein, goal / KCAL_PER_G_PROTEIN))
    remaining = goal - protein * KCAL_PER_G_PROTEIN

    lean_mass_carbs = (
        lean_mass * _CARBS_G_PER_KG_LEAN[activity] * _CARBS_GOAL_MULTIPLIERS[goal_type]
    )
    residual_carbs = 0.6 * remaining / KCAL_PER_G_CARBS
    max_carbs = remaining / KCAL_PER_G_CARBS
    carbs = min(max(lean_mass_carbs, residual_carbs), max_carbs)

    remaining_after_carbs = remaining - carbs * KCAL_PER_G_CARBS
    fat = max(
        lean_mass * ESSENTIAL_FAT_G_PER_KG, remaining_after_carbs / KCAL_PER_G_FAT
    )
    return MacroTargets(protein_g=protein, carbs_g=carbs, fat_g=fat)


def goal_warnings(profile: UserProfile) -> list[str]:
    """Return advisory warnings about the profile's goal inputs."""
    warnings: list[str] = []
    if profile.activity_level is ActivityLevel.UNKNOWN:
        warnings.append("Activity level not recognized; using sedentary.")
    if profile.goal_type is GoalType.UNKNOWN:
        warnings.append("Goal type not recognized; using maintain weight.")

    body_fat = profile.body_fat_percent
    low, high = BODY_FAT_ACCURATE_RANGE
    if body_fat is not None and (body_fat < low or body_fat > high):
        warnings.append("Body fat % should be between 10 and 50 for best accuracy.")

    change = abs(profile.weekly_weight_change)
    if profile.goal_type in {GoalType.LOSE_WEIGHT, GoalType.GAIN_WEIGHT}:
        if change < 0.25:  # noqa: PLR2004
            warnings.append("Weekly change is very small.")
        elif change > 3:  # noqa: PLR2004
            warnings.append(
                "Weekly change is too aggressive (max 3 lbs/week recommended)."
            )
        elif change > 2:  # noqa: PLR2004
            warnings.append("More than 2 lbs/week is not recommended.")
    elif change > 0:
        warnings.append("Weekly change is ignored when maintaining weight.")
    return warnings


def build_goal_report(
    profile: UserProfile, *, use_estimated_body_fat: bool = False
) -> GoalReport:
    """Compute every goal value for a profile."""
    bmr = calculate_bmr(profile, use_estimated_body_fat=use_estimated_body_fat)
    tdee = bmr * activity_multiplier(profile.activity_level)
    precise_goal = calculate_daily_calorie_goal(
        profile, rounded=False, use_estimated_body_fat=use_estimated_body_fat
    )
    return GoalReport(
        bmr=bmr,
        tdee=tdee,
        daily_calorie_goal=float(round(precise_goal)),
        macros=calculate_macro_targets(profile, precise_goal),
        lean_body_mass_kg=lean_body_mass_kg(profile),
        estimated_body_fat_percent=estimate_body_fat_percent(profile),
        warnings=goal_warnings(profile),
    )


def with_recomputed_goal(profile: UserProfile) -> UserProfile:
    """Return a copy of the profile with its daily calorie goal refreshed."""
    return replace(profile, daily_calorie_goal=calculate_daily_calorie_goal(profile))
