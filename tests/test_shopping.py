import datetime as dt

import pytest

from conftest import MONDAY, create_test_recipe
from lunchbox.models import Ingredient, MenuPlan, MenuSlot, Nutrition
from lunchbox.shopping import (
    build_shopping_list,
    consolidate_ingredients,
    format_for_print,
    group_by_category,
    normalize_key,
)


def make_plan(*recipe_portions):
    slots = []
    for i, (recipe, portions) in enumerate(recipe_portions):
        slots.append(MenuSlot(
            date=MONDAY + dt.timedelta(days=i),
            meal_type="lunch",
            recipe=recipe,
            portions=portions,
            nutrition=recipe.nutrition.scaled(portions),
        ))
    return MenuPlan(
        start_date=MONDAY,
        meal_types=("lunch",),
        slots=tuple(slots),
        total=Nutrition.total(s.nutrition for s in slots),
    )


@pytest.fixture
def recipe_a():
    return create_test_recipe("a", name="A", ingredients=[
        ("arroz", 2, "taza", "carb"),
        ("Cebolla", 1, "unidad", "vegetable"),
    ])


@pytest.fixture
def recipe_b():
    return create_test_recipe("b", name="B", ingredients=[
        ("Arroz", 1, "Taza", "carb"),
        ("cebolla", 0.5, "unidad", "other"),
        ("leche", 200, "ml", "dairy"),
    ])


def by_name(entries):
    return {(e.ingredient.lower(), e.unit.lower()): e for e in entries}


def test_same_ingredient_same_unit_merges(recipe_a, recipe_b):
    shopping = build_shopping_list(make_plan((recipe_a, 1), (recipe_b, 1)))
    entries = by_name(shopping.entries)
    rice = entries[("arroz", "taza")]
    assert rice.total_amount == 3
    assert rice.recipes == ["A", "B"]
    assert len(shopping.entries) == 3


def test_first_seen_spelling_and_category_kept(recipe_a, recipe_b):
    entries = by_name(build_shopping_list(make_plan((recipe_a, 1), (recipe_b, 1))).entries)
    onion = entries[("cebolla", "unidad")]
    assert onion.ingredient == "Cebolla"
    assert onion.category == "vegetable"
    assert entries[("arroz", "taza")].unit == "taza"


def test_different_units_never_merge():
    items = [
        (Ingredient("leche", 1, "taza", "dairy"), "A", 1.0),
        (Ingredient("leche", 100, "ml", "dairy"), "B", 1.0),
    ]
    entries = consolidate_ingredients(items)
    assert len(entries) == 2
    assert {e.unit for e in entries} == {"taza", "ml"}


def test_merge_key_is_exact_apart_from_case():
    items = [
        (Ingredient("Arroz", 1, "Taza", "carb"), "A", 1.0),
        (Ingredient("arroz", 1, "taza", "carb"), "B", 1.0),
        (Ingredient("arroz ", 1, "taza", "carb"), "C", 1.0),
    ]
    entries = consolidate_ingredients(items)
    assert [(e.ingredient, e.total_amount) for e in entries] == [("Arroz", 2), ("arroz ", 1)]
    assert normalize_key(" Leche", "ML") == (" leche", "ml")


def test_portions_scale_amounts(recipe_a):
    plan = make_plan((recipe_a, 1.5))
    rice = by_name(build_shopping_list(plan).entries)[("arroz", "taza")]
    assert rice.total_amount == 3.0


def test_recipe_listed_once_per_entry(recipe_a):
    other = create_test_recipe("a2", name="A", ingredients=[("arroz", 1, "taza", "carb")])
    rice = by_name(build_shopping_list(make_plan((recipe_a, 1), (other, 1))).entries)[("arroz", "taza")]
    assert rice.recipes == ["A"]
    assert rice.total_amount == 3


def test_amounts_rounded_to_two_decimals():
    items = [(Ingredient("sal", 0.333, "g", "seasoning"), "A", 1.0)] * 3
    assert consolidate_ingredients(items)[0].total_amount == 1.0
    items = [(Ingredient("sal", 1, "g", "seasoning"), "A", 0.333)]
    assert consolidate_ingredients(items)[0].total_amount == 0.33


def test_group_by_category_partitions(recipe_a, recipe_b):
    shopping = build_shopping_list(make_plan((recipe_a, 1), (recipe_b, 1)))
    groups = group_by_category(shopping.entries)
    assert list(groups) == ["carb", "vegetable", "dairy"]
    assert sum(len(v) for v in groups.values()) == len(shopping.entries)
    assert all(groups.values())


def test_empty_plan_gives_empty_list():
    shopping = build_shopping_list(make_plan())
    assert shopping.entries == []
    assert group_by_category(shopping.entries) == {}


def test_shopping_list_references_plan(recipe_a):
    plan = make_plan((recipe_a, 1))
    shopping = build_shopping_list(plan)
    assert shopping.plan_id == plan.plan_id
    assert shopping.list_id.startswith("shopping_")


def test_print_format(recipe_a, recipe_b):
    text = format_for_print(build_shopping_list(make_plan((recipe_a, 1), (recipe_b, 2))))
    assert text.startswith("SHOPPING LIST")
    assert "CARBOHYDRATES" in text
    assert "DAIRY" in text
    assert "  - arroz: 4 taza" in text
    assert "(for: A, B)" in text
    assert "  - leche: 400 ml" in text
