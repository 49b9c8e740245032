"""
Greedy stochastic recipe selection for one menu slot.

Every eligible recipe gets a score (reheat quality, child acceptance,
transport time, weekly cuisine/protein variety, likes and dislikes, calorie
distance, plus random jitter). One recipe is then drawn uniformly from the
top-K scorers, so repeated runs give different but still well-scored menus.
"""

from __future__ import annotations
import random
from typing import AbstractSet, Dict, List, Optional, Sequence, Tuple

from .config import PlannerPolicy
from .models import Preferences, Recipe

# Recipe tag -> canonical protein. Exact match on the lowercased tag.
PROTEIN_CATEGORIES: Dict[str, str] = {
    "pollo": "chicken",
    "chicken": "chicken",
    "pechuga": "chicken",
    "res": "beef",
    "carne": "beef",
    "carne molida": "beef",
    "beef": "beef",
    "cerdo": "pork",
    "pork": "pork",
    "pescado": "fish",
    "fish": "fish",
    "tilapia": "fish",
    "salmon": "fish",
    "salmón": "fish",
    "huevo": "egg",
    "egg": "egg",
    "frijol": "legume",
    "frijoles": "legume",
    "lenteja": "legume",
    "lentejas": "legume",
    "garbanzo": "legume",
    "garbanzos": "legume",
    "legumbre": "legume",
    "legume": "legume",
    "atún": "tuna",
    "atun": "tuna",
    "tuna": "tuna",
    "camarón": "shrimp",
    "camaron": "shrimp",
    "camarones": "shrimp",
    "shrimp": "shrimp",
}


class NoCandidatesError(ValueError):
    """No recipe is left for a slot once filters and exclusions apply."""


def primary_protein(recipe: Recipe) -> Optional[str]:
    for tag in recipe.tags:
        protein = PROTEIN_CATEGORIES.get(tag.strip().lower())
        if protein:
            return protein
    return None


def matches_any(tags: Sequence[str], terms: Sequence[str]) -> bool:
    """True if some term is a case-insensitive substring of some tag."""
    lowered = [t.lower() for t in tags]
    return any(term.lower() in tag for term in terms for tag in lowered)


def score_recipe(
    recipe: Recipe,
    target_calories: float,
    preferences: Preferences,
    policy: PlannerPolicy,
    used_cuisines: Optional[AbstractSet[str]] = None,
    used_proteins: Optional[AbstractSet[str]] = None,
    rng=random,
) -> float:
    score = recipe.reheat_rating * policy.reheat_weight

    if recipe.child_acceptance == "high":
        score += policy.high_acceptance_bonus
    elif recipe.child_acceptance == "medium":
        score += policy.medium_acceptance_bonus

    score += recipe.transport_hours * policy.transport_weight

    # variety bonuses only apply while a horizon tracks them
    if used_cuisines is not None and recipe.cuisine not in used_cuisines:
        score += policy.cuisine_bonus
    if used_proteins is not None:
        protein = primary_protein(recipe)
        if protein and protein not in used_proteins:
            score += policy.protein_bonus

    if matches_any(recipe.tags, preferences.likes):
        score += policy.like_bonus
    if matches_any(recipe.tags, preferences.dislikes):
        score -= policy.dislike_penalty

    score -= abs(recipe.nutrition.calories - target_calories) / policy.calorie_divisor

    if policy.jitter > 0:
        score += rng.uniform(0, policy.jitter)

    return score


def rank_candidates(
    pool: Sequence[Recipe],
    target_calories: float,
    preferences: Preferences,
    policy: PlannerPolicy,
    used_cuisines: Optional[AbstractSet[str]] = None,
    used_proteins: Optional[AbstractSet[str]] = None,
    rng=random,
) -> List[Tuple[float, Recipe]]:
    scored = [
        (score_recipe(r, target_calories, preferences, policy, used_cuisines, used_proteins, rng), r)
        for r in pool
    ]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return scored


def select_recipe(
    pool: Sequence[Recipe],
    target_calories: float,
    preferences: Preferences,
    exclude_ids: AbstractSet[str] = frozenset(),
    used_cuisines: Optional[AbstractSet[str]] = None,
    used_proteins: Optional[AbstractSet[str]] = None,
    policy: Optional[PlannerPolicy] = None,
    rng: Optional[random.Random] = None,
) -> Recipe:
    """
    Pick one recipe for a slot.

    Raises NoCandidatesError when nothing is left after removing exclude_ids.
    Pass a seeded random.Random as rng for reproducible picks; otherwise the
    process-wide generator is used.
    """
    policy = policy or PlannerPolicy()
    rnd = rng if rng is not None else random

    available = [r for r in pool if r.id not in exclude_ids]
    if not available:
        raise NoCandidatesError("No suitable recipes available")

    ranked = rank_candidates(
        available, target_calories, preferences, policy, used_cuisines, used_proteins, rnd
    )
    top = ranked[: policy.top_k]
    return rnd.choice(top)[1]
