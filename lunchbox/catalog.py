from __future__ import annotations
import glob
import os
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

import yaml

from .models import Recipe


# ---------- Loading ----------

def load_cards(cards_dir: str) -> Dict[str, Recipe]:
    """Read every *.yaml / *.yml card in cards_dir. A file holds one card or a list."""
    cards: Dict[str, Recipe] = {}
    for path in sorted(glob.glob(os.path.join(cards_dir, "*.y*ml"))):
        with open(path, "r", encoding="utf-8") as f:
            doc = yaml.safe_load(f)
        if not doc:
            continue
        docs = doc if isinstance(doc, list) else [doc]
        for d in docs:
            recipe = Recipe.from_dict(d)
            if recipe.id in cards:
                print(f"[warn] Duplicate recipe id {recipe.id} in {path}; keeping the later card.")
            cards[recipe.id] = recipe
    return cards


class RecipeCatalog:
    """Read-only recipe collection handed to the planner."""

    def __init__(self, recipes: Iterable[Recipe]):
        self._recipes = tuple(recipes)
        self._by_id = {r.id: r for r in self._recipes}

    @classmethod
    def from_dir(cls, cards_dir: str) -> "RecipeCatalog":
        cards = load_cards(cards_dir)
        print(f"[info] Loaded {len(cards)} recipe cards from {cards_dir}")
        return cls(cards.values())

    def __len__(self) -> int:
        return len(self._recipes)

    def __iter__(self) -> Iterator[Recipe]:
        return iter(self._recipes)

    def all(self) -> List[Recipe]:
        return list(self._recipes)

    def get(self, recipe_id: str) -> Optional[Recipe]:
        return self._by_id.get(recipe_id)

    def search(self, query: str) -> List[Recipe]:
        q = query.lower()
        return [
            r for r in self._recipes
            if q in r.name.lower()
            or q in r.description.lower()
            or any(q in t.lower() for t in r.tags)
        ]

    def by_category(self, category: str) -> List[Recipe]:
        return [r for r in self._recipes if r.category == category]

    def by_cuisine(self, cuisine: str) -> List[Recipe]:
        return [r for r in self._recipes if r.cuisine == cuisine]

    def by_tags(self, tags: Sequence[str]) -> List[Recipe]:
        wanted = [t.lower() for t in tags]
        return [
            r for r in self._recipes
            if any(w in t.lower() for w in wanted for t in r.tags)
        ]


# ---------- Candidate filtering ----------

def filter_by_allergies(recipes: Sequence[Recipe], allergies: Sequence[str]) -> List[Recipe]:
    if not allergies:
        return list(recipes)
    banned = {a.lower() for a in allergies}
    return [r for r in recipes if not any(a.lower() in banned for a in r.allergens)]


def filter_by_reheat_rating(recipes: Sequence[Recipe], min_rating: int) -> List[Recipe]:
    return [r for r in recipes if r.reheat_rating >= min_rating]


def filter_by_meal_type(recipes: Sequence[Recipe], meal_type: str) -> List[Recipe]:
    return [r for r in recipes if meal_type in r.meal_types]


def filter_candidates(
    recipes: Sequence[Recipe],
    allergies: Sequence[str],
    min_rating: int = 3,
    meal_type: Optional[str] = None,
) -> List[Recipe]:
    """Hard constraints only: allergens, reheat rating, meal-type fit."""
    out = filter_by_allergies(recipes, allergies)
    out = filter_by_reheat_rating(out, min_rating)
    if meal_type is not None:
        out = filter_by_meal_type(out, meal_type)
    return out
