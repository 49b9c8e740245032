"""
Daily energy requirements for school-age children.

Reference values are the FAO/WHO moderate-activity energy requirements by
age and sex (https://www.fao.org/4/y5686e/y5686e06.htm), scaled by the
child's weight against the reference weight for the age band.
"""

from __future__ import annotations
import dataclasses as dc
import datetime as dt
from typing import Dict, Optional

from .config import DEFAULT_MEAL_FRACTIONS
from .models import ACTIVITY_LEVELS, MEAL_TYPES, SEXES, ChildProfile, round_half_up

# (age_min, age_max, kcal/day, reference weight kg)
ENERGY_REQUIREMENTS = {
    "male": [
        (4, 5, 1360, 17.7),
        (5, 6, 1467, 19.7),
        (6, 7, 1573, 21.7),
        (7, 8, 1692, 24.0),
        (8, 9, 1830, 26.7),
        (9, 10, 1978, 29.7),
        (10, 11, 2150, 33.3),
        (11, 12, 2341, 37.5),
        (12, 13, 2548, 42.3),
    ],
    "female": [
        (4, 5, 1241, 16.8),
        (5, 6, 1330, 18.6),
        (6, 7, 1428, 20.6),
        (7, 8, 1554, 23.3),
        (8, 9, 1698, 26.6),
        (9, 10, 1854, 30.5),
        (10, 11, 2006, 34.7),
        (11, 12, 2149, 39.2),
        (12, 13, 2276, 43.8),
    ],
}

ACTIVITY_MULTIPLIERS = {"light": 0.85, "moderate": 1.0, "heavy": 1.15}

# kcal per kg when the age falls outside the reference table
WEIGHT_BASED_KCAL = [
    (4, 6, 70.0),
    (6, 9, 62.5),
    (9, 13, 40.0),
]
FALLBACK_KCAL_PER_KG = 50.0

DEFAULT_MACRO_PERCENTAGES = {"protein": 17.5, "carbs": 52.5, "fat": 30.0}
KCAL_PER_GRAM = {"protein": 4, "carbs": 4, "fat": 9}


@dc.dataclass(frozen=True)
class Macros:
    protein_g: float
    carbs_g: float
    fat_g: float


@dc.dataclass(frozen=True)
class NutritionalRequirements:
    daily_calories: int
    per_meal_calories: Dict[str, int]
    macros: Macros                       # for the lunch share
    macro_percentages: Dict[str, float]

    @property
    def lunch_calories(self) -> int:
        return self.per_meal_calories["lunch"]


def calculate_age(birth_date: dt.date, today: Optional[dt.date] = None) -> int:
    today = today or dt.date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def calculate_daily_calories(age: int, sex: str, weight_kg: float, activity_level: str) -> int:
    if sex not in SEXES:
        raise ValueError(f"Unknown sex '{sex}'")
    if activity_level not in ACTIVITY_LEVELS:
        raise ValueError(f"Unknown activity level '{activity_level}'")

    band = next(
        (row for row in ENERGY_REQUIREMENTS[sex] if row[0] <= age < row[1]),
        None,
    )
    if band:
        _, _, kcal, ref_weight = band
        base = kcal * (weight_kg / ref_weight)
    else:
        per_kg = next(
            (k for lo, hi, k in WEIGHT_BASED_KCAL if lo <= age < hi),
            FALLBACK_KCAL_PER_KG,
        )
        base = weight_kg * per_kg

    return round_half_up(base * ACTIVITY_MULTIPLIERS[activity_level])


def calculate_macros(calories: float, percentages: Optional[Dict[str, float]] = None) -> Macros:
    pct = percentages or DEFAULT_MACRO_PERCENTAGES
    return Macros(
        protein_g=round_half_up(calories * pct["protein"] / 100 / KCAL_PER_GRAM["protein"], 1),
        carbs_g=round_half_up(calories * pct["carbs"] / 100 / KCAL_PER_GRAM["carbs"], 1),
        fat_g=round_half_up(calories * pct["fat"] / 100 / KCAL_PER_GRAM["fat"], 1),
    )


def calculate_requirements(
    profile: ChildProfile,
    fractions: Optional[Dict[str, float]] = None,
    today: Optional[dt.date] = None,
) -> NutritionalRequirements:
    fractions = fractions or DEFAULT_MEAL_FRACTIONS
    age = calculate_age(profile.birth_date, today)
    daily = calculate_daily_calories(age, profile.sex, profile.weight_kg, profile.activity_level)
    per_meal = {mt: round_half_up(daily * fractions[mt]) for mt in MEAL_TYPES}

    return NutritionalRequirements(
        daily_calories=daily,
        per_meal_calories=per_meal,
        macros=calculate_macros(per_meal["lunch"]),
        macro_percentages=dict(DEFAULT_MACRO_PERCENTAGES),
    )
