"""Domain models for user profiles and nutrition goals."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar

_logger = logging.getLogger(__name__)

_E = TypeVar("_E", bound=Enum)


class ActivityLevel(Enum):
    """Activity level used to scale BMR into TDEE."""

    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightly active"
    MODERATELY_ACTIVE = "moderately active"
    VERY_ACTIVE = "very active"
    UNKNOWN = "unknown"


class GoalType(Enum):
    """Weight-change goal."""

    LOSE_WEIGHT = "lose weight"
    MAINTAIN_WEIGHT = "maintain weight"
    GAIN_WEIGHT = "gain weight"
    UNKNOWN = "unknown"


class Gender(Enum):
    """Sex used by the body composition formulas."""

    MALE = "male"
    FEMALE = "female"


class WeightUnit(Enum):
    """Unit the user entered their weight in."""

    KG = "kg"
    LB = "lb"


class HeightUnit(Enum):
    """Unit the user entered their height in."""

    CM = "cm"
    INCH = "in"


class BodyFatSource(Enum):
    """Where a stored body-fat percentage came from."""

    MEASURED = "measured"
    ESTIMATED = "estimated"
    UNKNOWN = "unknown"


# Keys are letters only, lower case; see _normalize_code.
_ACTIVITY_LEVEL_CODES: dict[str, ActivityLevel] = {
    "sedentary": ActivityLevel.SEDENTARY,
    "lightlyactive": ActivityLevel.LIGHTLY_ACTIVE,
    "moderatelyactive": ActivityLevel.MODERATELY_ACTIVE,
    "veryactive": ActivityLevel.VERY_ACTIVE,
}

_GOAL_TYPE_CODES: dict[str, GoalType] = {
    "loseweight": GoalType.LOSE_WEIGHT,
    "maintainweight": GoalType.MAINTAIN_WEIGHT,
    "gainweight": GoalType.GAIN_WEIGHT,
}

_GENDER_CODES: dict[str, Gender] = {
    "male": Gender.MALE,
    "female": Gender.FEMALE,
}

_WEIGHT_UNIT_CODES: dict[str, WeightUnit] = {
    "kg": WeightUnit.KG,
    "lb": WeightUnit.LB,
    "lbs": WeightUnit.LB,
}

_HEIGHT_UNIT_CODES: dict[str, HeightUnit] = {
    "cm": HeightUnit.CM,
    "in": HeightUnit.INCH,
    "inch": HeightUnit.INCH,
}

_BODY_FAT_SOURCE_CODES: dict[str, BodyFatSource] = {
    "measured": BodyFatSource.MEASURED,
    "estimated": BodyFatSource.ESTIMATED,
    "unknown": BodyFatSource.UNKNOWN,
}


def _normalize_code(raw: object) -> str:
    return "".join(char for char in str(raw).lower() if char.isalpha())


def _parse_code(
    raw: object, table: dict[str, _E], fallback: _E, field_name: str
) -> _E:
    if raw is None:
        return fallback
    parsed = table.get(_normalize_code(raw))
    if parsed is None:
        _logger.warning(
            "Unrecognized %s value %r, using %s", field_name, raw, fallback.value
        )
        return fallback
    return parsed


def parse_activity_level(raw: object) -> ActivityLevel:
    """Parse a persisted activity level, UNKNOWN when unrecognized."""
    return _parse_code(
        raw, _ACTIVITY_LEVEL_CODES, ActivityLevel.UNKNOWN, "activity_level"
    )


def parse_goal_type(raw: object) -> GoalType:
    """Parse a persisted goal type, UNKNOWN when unrecognized."""
    return _parse_code(raw, _GOAL_TYPE_CODES, GoalType.UNKNOWN, "goal_type")


def parse_gender(raw: object) -> Gender:
    """Parse a persisted gender, MALE when unrecognized."""
    return _parse_code(raw, _GENDER_CODES, Gender.MALE, "gender")


def parse_weight_unit(raw: object) -> WeightUnit:
    """Parse a persisted weight unit, KG when unrecognized."""
    return _parse_code(raw, _WEIGHT_UNIT_CODES, WeightUnit.KG, "weight_unit")


def parse_height_unit(raw: object) -> HeightUnit:
    """Parse a persisted height unit, CM when unrecognized."""
    return _parse_code(raw, _HEIGHT_UNIT_CODES, HeightUnit.CM, "height_unit")


def parse_body_fat_source(raw: object) -> BodyFatSource:
    """Parse a persisted body-fat source, UNKNOWN when unrecognized."""
    return _parse_code(
        raw, _BODY_FAT_SOURCE_CODES, BodyFatSource.UNKNOWN, "body_fat_source"
    )


@dataclass(frozen=True)
class UserProfile:
    """Body metrics and goal settings for a user."""

    name: str
    age: int
    weight: float
    height: float
    weight_unit: WeightUnit = WeightUnit.KG
    height_unit: HeightUnit = HeightUnit.CM
    gender: Gender = Gender.MALE
    body_fat_percent: float | None = None
    body_fat_source: BodyFatSource = BodyFatSource.UNKNOWN
    activity_level: ActivityLevel = ActivityLevel.SEDENTARY
    goal_type: GoalType = GoalType.MAINTAIN_WEIGHT
    weekly_weight_change: float = 0.0
    daily_calorie_goal: float = 2000.0


DEFAULT_PROFILE = UserProfile(name="User", age=25, weight=70.0, height=170.0)


@dataclass(frozen=True)
class MacroTargets:
    """Daily macronutrient targets in grams."""

    protein_g: float
    carbs_g: float
    fat_g: float


@dataclass(frozen=True)
class GoalReport:
    """Everything the goal engine derives from a profile."""

    bmr: float
    tdee: float
    daily_calorie_goal: float
    macros: MacroTargets
    lean_body_mass_kg: float
    estimated_body_fat_percent: float | None
    warnings: list[str] = field(default_factory=list)
