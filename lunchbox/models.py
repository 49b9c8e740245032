"""
Data models for school lunch planning.

Recipes are immutable and shared: a MenuSlot holds a reference to the catalog
Recipe, never a copy. Plans are replaced wholesale rather than edited in place.
"""

from __future__ import annotations
import dataclasses as dc
import datetime as dt
import math
import uuid
from typing import Dict, Iterable, List, Optional, Tuple

MEAL_TYPES: Tuple[str, ...] = (
    "breakfast",
    "morning_snack",
    "lunch",
    "afternoon_snack",
    "dinner",
)

MEAL_TYPE_LABELS: Dict[str, str] = {
    "breakfast": "Breakfast",
    "morning_snack": "Morning snack",
    "lunch": "Lunch",
    "afternoon_snack": "Afternoon snack",
    "dinner": "Dinner",
}

RECIPE_CATEGORIES = ("main", "side", "soup", "dessert", "snack", "breakfast", "beverage")
CUISINES = ("colombian", "latin", "international")
ACCEPTANCE_TIERS = ("high", "medium", "low")
INGREDIENT_CATEGORIES = (
    "protein", "carb", "vegetable", "fruit", "dairy", "fat", "seasoning", "other",
)
SEXES = ("male", "female")
ACTIVITY_LEVELS = ("light", "moderate", "heavy")


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def round_half_up(value: float, digits: int = 0):
    """
    Round with exact halves going up (640.5 -> 641, 10.25 -> 10.3).

    The builtin ``round`` sends halves to the even neighbour, which would
    shift calorie targets and scaled macros by one unit on ties.
    """
    scale = 10 ** digits
    rounded = math.floor(value * scale + 0.5)
    return rounded if digits == 0 else rounded / scale


def parse_date(value) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    return dt.date.fromisoformat(str(value))


# ---------- Nutrition ----------

@dc.dataclass(frozen=True)
class Nutrition:
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float = 0.0
    sodium_mg: float = 0.0

    @staticmethod
    def from_dict(d: Dict) -> "Nutrition":
        return Nutrition(
            calories=float(d.get("calories", 0)),
            protein_g=float(d.get("protein_g", 0)),
            carbs_g=float(d.get("carbs_g", 0)),
            fat_g=float(d.get("fat_g", 0)),
            fiber_g=float(d.get("fiber_g", 0)),
            sodium_mg=float(d.get("sodium_mg", 0)),
        )

    def scaled(self, portions: float) -> "Nutrition":
        """Scale linearly; calories and sodium to integers, the rest to 1 decimal."""
        return Nutrition(
            calories=round_half_up(self.calories * portions),
            protein_g=round_half_up(self.protein_g * portions, 1),
            carbs_g=round_half_up(self.carbs_g * portions, 1),
            fat_g=round_half_up(self.fat_g * portions, 1),
            fiber_g=round_half_up(self.fiber_g * portions, 1),
            sodium_mg=round_half_up(self.sodium_mg * portions),
        )

    @staticmethod
    def total(items: Iterable["Nutrition"]) -> "Nutrition":
        cal = p = c = f = fib = na = 0.0
        for n in items:
            cal += n.calories
            p += n.protein_g
            c += n.carbs_g
            f += n.fat_g
            fib += n.fiber_g
            na += n.sodium_mg
        # float sums drift (0.1 + 0.2); keep totals at the per-slot precision
        return Nutrition(
            calories=round_half_up(cal),
            protein_g=round_half_up(p, 1),
            carbs_g=round_half_up(c, 1),
            fat_g=round_half_up(f, 1),
            fiber_g=round_half_up(fib, 1),
            sodium_mg=round_half_up(na),
        )


# ---------- Recipes ----------

@dc.dataclass(frozen=True)
class Ingredient:
    name: str
    amount: float
    unit: str
    category: str = "other"

    @staticmethod
    def from_dict(d: Dict) -> "Ingredient":
        category = str(d.get("category", "other"))
        if category not in INGREDIENT_CATEGORIES:
            raise ValueError(f"Ingredient {d.get('name')}: unknown category '{category}'")
        return Ingredient(
            name=str(d.get("name")),
            amount=float(d.get("amount", 0)),
            unit=str(d.get("unit", "")),
            category=category,
        )


@dc.dataclass(frozen=True)
class Recipe:
    id: str
    name: str
    category: str
    meal_types: Tuple[str, ...]
    cuisine: str
    reheat_rating: int          # 1..5, how well it survives a lunchbox reheat
    transport_hours: float      # hours it keeps safely in transit
    child_acceptance: str       # high | medium | low
    nutrition: Nutrition        # for `servings` servings
    ingredients: Tuple[Ingredient, ...] = ()
    allergens: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    description: str = ""
    servings: int = 1
    prep_time_min: int = 0
    cook_time_min: int = 0
    instructions: Tuple[str, ...] = ()
    substitutions: Tuple[Tuple[str, str], ...] = ()

    @staticmethod
    def from_dict(d: Dict) -> "Recipe":
        nutrition = Nutrition.from_dict(d.get("nutrition", {}))
        rating = int(d.get("reheat_rating", 0))
        rid = str(d["id"])
        if not 1 <= rating <= 5:
            raise ValueError(f"Recipe {rid}: reheat_rating must be 1..5, got {rating}")
        if nutrition.calories <= 0:
            raise ValueError(f"Recipe {rid}: calories must be positive")
        for mt in d.get("meal_types", []):
            if mt not in MEAL_TYPES:
                raise ValueError(f"Recipe {rid}: unknown meal type '{mt}'")
        category = str(d.get("category", "main"))
        cuisine = str(d.get("cuisine", "international"))
        acceptance = str(d.get("child_acceptance", "medium"))
        # scoring matches these exactly, so "High" would silently score as low
        for field, value, allowed in (
            ("category", category, RECIPE_CATEGORIES),
            ("cuisine", cuisine, CUISINES),
            ("child_acceptance", acceptance, ACCEPTANCE_TIERS),
        ):
            if value not in allowed:
                raise ValueError(
                    f"Recipe {rid}: {field} must be one of {', '.join(allowed)}, got '{value}'"
                )

        ings = tuple(
            Ingredient.from_dict(r) for r in d.get("ingredients", []) if isinstance(r, dict)
        )
        subs = d.get("substitutions") or {}

        return Recipe(
            id=rid,
            name=str(d["name"]),
            description=str(d.get("description", "")),
            category=category,
            meal_types=tuple(d.get("meal_types", [])),
            cuisine=cuisine,
            reheat_rating=rating,
            transport_hours=float(d.get("transport_hours", 0)),
            child_acceptance=acceptance,
            prep_time_min=int(d.get("prep_time_min", 0)),
            cook_time_min=int(d.get("cook_time_min", 0)),
            servings=int(d.get("servings", 1)),
            nutrition=nutrition,
            ingredients=ings,
            instructions=tuple(str(s) for s in d.get("instructions", [])),
            allergens=tuple(str(a) for a in d.get("allergens", [])),
            tags=tuple(str(t) for t in d.get("tags", [])),
            substitutions=tuple((str(k), str(v)) for k, v in subs.items()),
        )


# ---------- Profiles ----------

@dc.dataclass(frozen=True)
class Preferences:
    likes: Tuple[str, ...] = ()
    dislikes: Tuple[str, ...] = ()


@dc.dataclass(frozen=True)
class ChildProfile:
    birth_date: dt.date
    sex: str
    weight_kg: float
    height_cm: float
    activity_level: str = "moderate"
    allergies: Tuple[str, ...] = ()
    preferences: Preferences = Preferences()
    id: str = ""
    name: str = ""

    @staticmethod
    def from_dict(d: Dict) -> "ChildProfile":
        prefs = d.get("preferences", {}) or {}
        return ChildProfile(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            birth_date=parse_date(d["birth_date"]),
            sex=str(d["sex"]),
            weight_kg=float(d["weight_kg"]),
            height_cm=float(d.get("height_cm", 0)),
            activity_level=str(d.get("activity_level", "moderate")),
            allergies=tuple(str(a) for a in d.get("allergies", []) or []),
            preferences=Preferences(
                likes=tuple(str(x) for x in prefs.get("likes", []) or []),
                dislikes=tuple(str(x) for x in prefs.get("dislikes", []) or []),
            ),
        )


# ---------- Menus ----------

@dc.dataclass(frozen=True)
class MenuSlot:
    date: dt.date
    meal_type: str
    recipe: Recipe
    portions: float
    nutrition: Nutrition


@dc.dataclass(frozen=True)
class MenuPlan:
    start_date: dt.date
    meal_types: Tuple[str, ...]
    slots: Tuple[MenuSlot, ...]
    total: Nutrition
    child_id: str = ""
    plan_id: str = dc.field(default_factory=lambda: new_id("menu"))
    created_at: dt.datetime = dc.field(default_factory=dt.datetime.now)

    def find_slot(self, slot_date: dt.date, meal_type: str) -> Optional[int]:
        for i, s in enumerate(self.slots):
            if s.date == slot_date and s.meal_type == meal_type:
                return i
        return None

    def slots_for_day(self, day: dt.date) -> List[MenuSlot]:
        return [s for s in self.slots if s.date == day]

    def dates(self) -> List[dt.date]:
        seen: List[dt.date] = []
        for s in self.slots:
            if s.date not in seen:
                seen.append(s.date)
        return seen


# ---------- Shopping ----------

@dc.dataclass
class ShoppingListEntry:
    ingredient: str
    total_amount: float
    unit: str
    category: str
    recipes: List[str] = dc.field(default_factory=list)


@dc.dataclass
class ShoppingList:
    plan_id: str
    entries: List[ShoppingListEntry]
    list_id: str = dc.field(default_factory=lambda: new_id("shopping"))
    created_at: dt.datetime = dc.field(default_factory=dt.datetime.now)
