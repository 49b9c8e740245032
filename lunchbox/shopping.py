from __future__ import annotations
from typing import Dict, Iterable, List, Tuple

from .models import Ingredient, MenuPlan, ShoppingList, ShoppingListEntry, round_half_up

CATEGORY_NAMES: Dict[str, str] = {
    "protein": "Proteins",
    "carb": "Carbohydrates",
    "vegetable": "Vegetables",
    "fruit": "Fruit",
    "dairy": "Dairy",
    "fat": "Fats & oils",
    "seasoning": "Seasonings",
    "other": "Other",
}


def normalize_key(name: str, unit: str) -> Tuple[str, str]:
    return name.lower(), unit.lower()


def consolidate_ingredients(
    items: Iterable[Tuple[Ingredient, str, float]],
) -> List[ShoppingListEntry]:
    """
    Merge (ingredient, recipe name, portions) triples on (name, unit).

    Different units for the same ingredient stay separate entries. The first
    spelling and category seen for a key are kept for display.
    """
    by_key: Dict[Tuple[str, str], ShoppingListEntry] = {}

    for ing, recipe_name, portions in items:
        key = normalize_key(ing.name, ing.unit)
        amount = ing.amount * portions
        entry = by_key.get(key)
        if entry is None:
            by_key[key] = ShoppingListEntry(
                ingredient=ing.name,
                total_amount=amount,
                unit=ing.unit,
                category=ing.category,
                recipes=[recipe_name],
            )
            continue
        entry.total_amount += amount
        if recipe_name not in entry.recipes:
            entry.recipes.append(recipe_name)

    for entry in by_key.values():
        entry.total_amount = round_half_up(entry.total_amount, 2)
    return list(by_key.values())


def build_shopping_list(plan: MenuPlan) -> ShoppingList:
    items = (
        (ing, slot.recipe.name, slot.portions)
        for slot in plan.slots
        for ing in slot.recipe.ingredients
    )
    return ShoppingList(plan_id=plan.plan_id, entries=consolidate_ingredients(items))


def group_by_category(entries: Iterable[ShoppingListEntry]) -> Dict[str, List[ShoppingListEntry]]:
    groups: Dict[str, List[ShoppingListEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.category, []).append(entry)
    return groups


def format_amount(amount: float) -> str:
    return f"{amount:g}"


def format_for_print(shopping_list: ShoppingList) -> str:
    lines = ["SHOPPING LIST", "=" * 40, ""]
    for category, entries in group_by_category(shopping_list.entries).items():
        lines.append(CATEGORY_NAMES.get(category, category).upper())
        lines.append("-" * 30)
        for e in entries:
            lines.append(f"  - {e.ingredient}: {format_amount(e.total_amount)} {e.unit}")
            lines.append(f"    (for: {', '.join(e.recipes)})")
        lines.append("")
    return "\n".join(lines)
