"""
Menu assembly over a weekday grid.

generate() walks day x meal type, filtering candidates and asking the
selector for one recipe per slot. Recipe identities never repeat inside the
horizon; cuisine and protein variety is tracked per calendar week.
replace_slot() swaps a single slot and leaves every other slot untouched.
"""

from __future__ import annotations
import dataclasses as dc
import datetime as dt
import random
from typing import Callable, List, Optional, Sequence, Set, Tuple

from .catalog import RecipeCatalog, filter_candidates
from .config import PlannerPolicy
from .models import (
    MEAL_TYPES,
    ChildProfile,
    MenuPlan,
    MenuSlot,
    Nutrition,
    Recipe,
    round_half_up,
)
from .nutrition import NutritionalRequirements, calculate_requirements
from .selector import NoCandidatesError, primary_protein, select_recipe

WEEK_DAYS = 5
MONTH_DAYS = 20

RequirementsFn = Callable[..., NutritionalRequirements]


# ---------- Dates ----------

def month_start(start_date: dt.date) -> dt.date:
    """First Monday on or after start_date."""
    return start_date + dt.timedelta(days=(7 - start_date.weekday()) % 7)


def weekday_dates(start_date: dt.date, count: int) -> List[dt.date]:
    dates: List[dt.date] = []
    day = start_date
    while len(dates) < count:
        if day.weekday() < 5:
            dates.append(day)
        day += dt.timedelta(days=1)
    return dates


def normalize_meal_types(meal_types: Sequence[str]) -> Tuple[str, ...]:
    unknown = [mt for mt in meal_types if mt not in MEAL_TYPES]
    if unknown:
        raise ValueError(f"Unknown meal type(s): {', '.join(unknown)}")
    return tuple(mt for mt in MEAL_TYPES if mt in meal_types)


# ---------- Portions ----------

def scale_portions(
    recipe: Recipe,
    target_calories: float,
    min_portions: float = 0.5,
    max_portions: float = 2.0,
) -> Tuple[float, Nutrition]:
    portions = max(min_portions, min(max_portions, target_calories / recipe.nutrition.calories))
    return round_half_up(portions, 2), recipe.nutrition.scaled(portions)


# ---------- Plan checks ----------

def within_calorie_tolerance(slot: MenuSlot, target_calories: float, tolerance: float = 0.1) -> bool:
    low = target_calories * (1 - tolerance)
    high = target_calories * (1 + tolerance)
    return low <= slot.nutrition.calories <= high


def has_no_allergens(recipes: Sequence[Recipe], allergies: Sequence[str]) -> bool:
    banned = {a.lower() for a in allergies}
    return not any(a.lower() in banned for r in recipes for a in r.allergens)


def has_no_repeats(recipes: Sequence[Recipe]) -> bool:
    ids = [r.id for r in recipes]
    return len(set(ids)) == len(ids)


# ---------- Assembler ----------

class MenuAssembler:
    def __init__(
        self,
        catalog: RecipeCatalog,
        policy: Optional[PlannerPolicy] = None,
        requirements: RequirementsFn = calculate_requirements,
        rng: Optional[random.Random] = None,
    ):
        self.catalog = catalog
        self.policy = policy or PlannerPolicy()
        self.requirements = requirements
        self.rng = rng

    def _daily_calories(self, profile: ChildProfile) -> int:
        return self.requirements(profile).daily_calories

    def _candidates(self, profile: ChildProfile, meal_type: str) -> List[Recipe]:
        return filter_candidates(
            self.catalog.all(),
            profile.allergies,
            min_rating=self.policy.min_reheat_rating,
            meal_type=meal_type,
        )

    def _make_slot(self, day: dt.date, meal_type: str, recipe: Recipe, target: float) -> MenuSlot:
        portions, nutrition = scale_portions(
            recipe, target, self.policy.min_portions, self.policy.max_portions
        )
        return MenuSlot(date=day, meal_type=meal_type, recipe=recipe,
                        portions=portions, nutrition=nutrition)

    def generate(
        self,
        profile: ChildProfile,
        start_date: dt.date,
        meal_types: Sequence[str],
        horizon_days: int = WEEK_DAYS,
    ) -> MenuPlan:
        """
        Plan horizon_days weekdays from start_date.

        Horizons longer than one week begin on the first Monday on or after
        start_date. Slots with no remaining candidates are skipped, so the
        plan may hold fewer than horizon_days x len(meal_types) slots.
        """
        selected = normalize_meal_types(meal_types)
        if horizon_days > WEEK_DAYS:
            start_date = month_start(start_date)
        dates = weekday_dates(start_date, horizon_days)

        daily = self._daily_calories(profile)
        targets = {mt: self.policy.target_calories(daily, mt) for mt in selected}
        pools = {mt: self._candidates(profile, mt) for mt in selected}

        slots: List[MenuSlot] = []
        used_ids: Set[str] = set()
        used_cuisines: Set[str] = set()
        used_proteins: Set[str] = set()
        current_week = None
        skipped = 0

        for day in dates:
            week = day.isocalendar()[:2]
            if week != current_week:
                current_week = week
                used_cuisines = set()
                used_proteins = set()

            for mt in selected:
                try:
                    recipe = select_recipe(
                        pools[mt],
                        targets[mt],
                        profile.preferences,
                        exclude_ids=used_ids,
                        used_cuisines=used_cuisines,
                        used_proteins=used_proteins,
                        policy=self.policy,
                        rng=self.rng,
                    )
                except NoCandidatesError:
                    skipped += 1
                    print(f"[warn] No candidates left for {mt} on {day.isoformat()}; skipping slot.")
                    continue

                slots.append(self._make_slot(day, mt, recipe, targets[mt]))
                used_ids.add(recipe.id)
                used_cuisines.add(recipe.cuisine)
                protein = primary_protein(recipe)
                if protein:
                    used_proteins.add(protein)

        if skipped:
            print(f"[info] Plan has {len(slots)} slots; {skipped} skipped for lack of candidates.")

        return MenuPlan(
            start_date=dates[0] if dates else start_date,
            meal_types=selected,
            slots=tuple(slots),
            total=Nutrition.total(s.nutrition for s in slots),
            child_id=profile.id,
        )

    def generate_week(self, profile: ChildProfile, start_date: dt.date,
                      meal_types: Sequence[str] = ("lunch",)) -> MenuPlan:
        return self.generate(profile, start_date, meal_types, WEEK_DAYS)

    def generate_month(self, profile: ChildProfile, start_date: dt.date,
                       meal_types: Sequence[str] = ("lunch",)) -> MenuPlan:
        return self.generate(profile, start_date, meal_types, MONTH_DAYS)

    def replace_slot(
        self,
        plan: MenuPlan,
        slot_date: dt.date,
        meal_type: str,
        profile: ChildProfile,
    ) -> MenuPlan:
        """
        Return a plan with the (slot_date, meal_type) slot re-picked.

        The input plan comes back unchanged when no such slot exists or when no
        other eligible recipe is available.
        """
        idx = plan.find_slot(slot_date, meal_type)
        if idx is None:
            print(f"[warn] No {meal_type} slot on {slot_date.isoformat()}; nothing to replace.")
            return plan

        old = plan.slots[idx]
        # every other slot's recipe stays excluded; the old one only for this pick
        exclude = {s.recipe.id for i, s in enumerate(plan.slots) if i != idx}
        exclude.add(old.recipe.id)

        target = self.policy.target_calories(self._daily_calories(profile), meal_type)
        try:
            recipe = select_recipe(
                self._candidates(profile, meal_type),
                target,
                profile.preferences,
                exclude_ids=exclude,
                policy=self.policy,
                rng=self.rng,
            )
        except NoCandidatesError:
            print(f"[warn] No alternative {meal_type} for {slot_date.isoformat()}; keeping {old.recipe.name}.")
            return plan

        slots = list(plan.slots)
        slots[idx] = self._make_slot(slot_date, meal_type, recipe, target)
        return dc.replace(
            plan,
            slots=tuple(slots),
            total=Nutrition.total(s.nutrition for s in slots),
        )
