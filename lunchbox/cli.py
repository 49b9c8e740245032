#!/usr/bin/env python3
"""
School lunch menu planner

- Reads recipe cards from YAML files (./cards/*.yaml by default)
- Reads one child profile from YAML (--profile)
- Plans a week (5 weekdays) or a month (4 weeks of weekdays, from the
  first Monday on or after --start) for the selected meal types
- Optionally re-picks single slots (--replace DATE:MEAL)
- Outputs:
    - out/menu_plan.csv
    - out/shopping_list.csv
    - out/menu_plan.md
"""

from __future__ import annotations
import argparse
import csv
import datetime as dt
import os
import random
import sys
from typing import Dict, List, Optional, Tuple

import yaml

from .assembler import MONTH_DAYS, WEEK_DAYS, MenuAssembler, normalize_meal_types
from .catalog import RecipeCatalog
from .config import load_policy
from .models import MEAL_TYPE_LABELS, MEAL_TYPES, ChildProfile, MenuPlan, ShoppingList, parse_date
from .nutrition import calculate_requirements
from .shopping import CATEGORY_NAMES, build_shopping_list, format_amount, group_by_category

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


# ---------- Inputs ----------

def load_profile(path: str) -> ChildProfile:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile file {path} must hold a mapping")
    return ChildProfile.from_dict(data)


def parse_replacements(tokens: List[str]) -> List[Tuple[dt.date, str]]:
    out: List[Tuple[dt.date, str]] = []
    for token in tokens:
        if ":" not in token:
            raise ValueError(f"Replacement token must be DATE:MEAL, got {token}")
        day, meal = token.split(":", 1)
        out.append((parse_date(day), meal))
    return out


# ---------- Output Writers ----------

def ensure_dir(p: str) -> None:
    if p:
        os.makedirs(p, exist_ok=True)


def write_csv(path: str, rows: List[Dict]) -> None:
    if not rows:
        return
    ensure_dir(os.path.dirname(path))
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        w.writeheader()
        w.writerows(rows)


def write_menu_csv(path: str, plan: MenuPlan) -> None:
    rows = [
        {
            "date": s.date.isoformat(),
            "day": DAY_NAMES[s.date.weekday()],
            "meal_type": s.meal_type,
            "recipe_id": s.recipe.id,
            "name": s.recipe.name,
            "portions": s.portions,
            "calories": s.nutrition.calories,
            "protein_g": s.nutrition.protein_g,
            "carbs_g": s.nutrition.carbs_g,
            "fat_g": s.nutrition.fat_g,
        }
        for s in plan.slots
    ]
    write_csv(path, rows)


def write_shopping_csv(path: str, shopping: ShoppingList) -> None:
    rows = [
        {
            "category": e.category,
            "ingredient": e.ingredient,
            "amount": e.total_amount,
            "unit": e.unit,
            "recipes": " | ".join(e.recipes),
        }
        for e in shopping.entries
    ]
    write_csv(path, rows)


def write_markdown(path: str, plan: MenuPlan, shopping: ShoppingList, title: str) -> None:
    ensure_dir(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as f:
        f.write(f"# {title}\n\n")
        for day in plan.dates():
            f.write(f"**{DAY_NAMES[day.weekday()]} {day.isoformat()}**\n\n")
            for s in plan.slots_for_day(day):
                f.write(
                    f"- {MEAL_TYPE_LABELS[s.meal_type]}: {s.recipe.name} "
                    f"(x{s.portions}, ~{s.nutrition.calories} kcal)\n"
                )
            f.write("\n")

        t = plan.total
        f.write("## Totals\n\n")
        f.write(
            f"~{t.calories} kcal (P {t.protein_g} g / C {t.carbs_g} g / F {t.fat_g} g, "
            f"fiber {t.fiber_g} g, sodium {t.sodium_mg} mg)\n"
        )

        f.write("\n## Shopping List (by category)\n\n")
        for category, entries in group_by_category(shopping.entries).items():
            f.write(f"### {CATEGORY_NAMES.get(category, category.capitalize())}\n")
            for e in entries:
                f.write(f"- {e.ingredient} — {format_amount(e.total_amount)} {e.unit}\n")
            f.write("\n")


# ---------- Main ----------

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="School lunch menu planner from YAML recipe cards")
    ap.add_argument("--profile", required=True, help="YAML file with the child profile")
    ap.add_argument("--cards_dir", default="./cards", help="Directory with *.yaml recipe cards")
    ap.add_argument("--policy", default=None,
                    help="YAML planner policy (optional). If omitted, tries planner.yaml.")
    ap.add_argument("--start", default=None, help="Start date YYYY-MM-DD (default: today)")
    ap.add_argument("--horizon", choices=["week", "month"], default="week")
    ap.add_argument("--meals", nargs="*", default=["lunch"],
                    help=f"Meal types to plan: {' '.join(MEAL_TYPES)}")
    ap.add_argument("--replace", nargs="*", default=[],
                    help="Re-pick slots after planning: DATE:MEAL ...")
    ap.add_argument("--seed", type=int, default=None,
                    help="RNG seed (omit for different plan each run)")
    ap.add_argument("--out_dir", default="./out", help="Output directory")
    args = ap.parse_args(argv)

    try:
        catalog = RecipeCatalog.from_dir(args.cards_dir)
        policy = load_policy(args.policy)
        profile = load_profile(args.profile)
        meal_types = normalize_meal_types(args.meals)
        replacements = parse_replacements(args.replace)
        start = parse_date(args.start) if args.start else dt.date.today()
    except (OSError, ValueError, KeyError, yaml.YAMLError) as e:
        print(f"[error] {e}")
        return 1

    if not len(catalog):
        print("No recipe cards loaded from", args.cards_dir)
        return 1

    if args.seed is None:
        rng = None
        print("[info] No seed provided. Using the process-wide random source.")
    else:
        rng = random.Random(args.seed)
        print(f"[info] Using fixed seed: {args.seed}")

    req = calculate_requirements(profile, policy.meal_fractions)
    print(
        f"[info] Daily requirement {req.daily_calories} kcal; "
        + ", ".join(f"{mt} {req.per_meal_calories[mt]}" for mt in meal_types)
    )

    assembler = MenuAssembler(catalog, policy, rng=rng)
    days = MONTH_DAYS if args.horizon == "month" else WEEK_DAYS
    plan = assembler.generate(profile, start, meal_types, days)
    for day, meal in replacements:
        plan = assembler.replace_slot(plan, day, meal, profile)

    shopping = build_shopping_list(plan)

    ensure_dir(args.out_dir)
    write_menu_csv(os.path.join(args.out_dir, "menu_plan.csv"), plan)
    write_shopping_csv(os.path.join(args.out_dir, "shopping_list.csv"), shopping)
    title = f"{'Monthly' if args.horizon == 'month' else 'Weekly'} Menu"
    if profile.name:
        title += f" for {profile.name}"
    write_markdown(os.path.join(args.out_dir, "menu_plan.md"), plan, shopping, title)

    print(f"[info] Planned {len(plan.slots)} slots, {len(shopping.entries)} shopping items.")
    print("Outputs written in", args.out_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
