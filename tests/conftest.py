"""
Pytest configuration and shared fixtures.

Catalogs are built in code so tests never depend on the shipped cards,
except where a test says so.
"""

import datetime as dt
import random
from pathlib import Path

import pytest

from lunchbox.catalog import RecipeCatalog
from lunchbox.models import ChildProfile, Ingredient, Nutrition, Preferences, Recipe
from lunchbox.nutrition import Macros, NutritionalRequirements

REPO_ROOT = Path(__file__).resolve().parent.parent
CARDS_DIR = REPO_ROOT / "cards"

MONDAY = dt.date(2026, 10, 19)


def create_test_recipe(
    recipe_id,
    name=None,
    calories=500,
    meal_types=("lunch",),
    cuisine="colombian",
    reheat_rating=4,
    transport_hours=3,
    child_acceptance="high",
    allergens=(),
    tags=(),
    ingredients=(),
    protein_g=20.0,
):
    return Recipe(
        id=recipe_id,
        name=name or recipe_id,
        category="main",
        meal_types=tuple(meal_types),
        cuisine=cuisine,
        reheat_rating=reheat_rating,
        transport_hours=transport_hours,
        child_acceptance=child_acceptance,
        nutrition=Nutrition(
            calories=calories, protein_g=protein_g, carbs_g=60.0, fat_g=15.0,
            fiber_g=4.0, sodium_mg=400,
        ),
        ingredients=tuple(Ingredient(*i) for i in ingredients),
        allergens=tuple(allergens),
        tags=tuple(tags),
    )


def fixed_requirements(daily=2000):
    """Requirement calculator stand-in returning a constant daily target."""
    def calc(profile, *args, **kwargs):
        return NutritionalRequirements(
            daily_calories=daily,
            per_meal_calories={},
            macros=Macros(0, 0, 0),
            macro_percentages={},
        )
    return calc


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def lunch_recipes():
    cuisines = ["colombian", "latin", "international"]
    proteins = ["pollo", "res", "cerdo", "pescado", "huevo", "lentejas", "atún", "camarones"]
    recipes = []
    for i in range(30):
        recipes.append(
            create_test_recipe(
                f"lunch-{i:02d}",
                calories=400 + (i * 10),
                cuisine=cuisines[i % 3],
                tags=(proteins[i % len(proteins)], "arroz"),
                allergens=("maní",) if i % 5 == 0 else (),
                ingredients=[("arroz", 0.5, "taza", "carb"), ("tomate", 1, "unidad", "vegetable")],
            )
        )
    return recipes


@pytest.fixture
def catalog(lunch_recipes):
    breakfasts = [
        create_test_recipe(f"breakfast-{i:02d}", calories=350 + i * 5, meal_types=("breakfast",))
        for i in range(25)
    ]
    return RecipeCatalog(lunch_recipes + breakfasts)


@pytest.fixture
def profile():
    return ChildProfile(
        id="child-1",
        name="Tomás",
        birth_date=dt.date(2018, 3, 14),
        sex="male",
        weight_kg=26.7,
        height_cm=128,
        activity_level="moderate",
        allergies=("Maní",),
        preferences=Preferences(likes=("pollo",), dislikes=("pescado",)),
    )
