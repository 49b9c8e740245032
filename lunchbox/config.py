from __future__ import annotations
import dataclasses as dc
import os
from typing import Dict, Optional

import yaml

from .models import MEAL_TYPES, round_half_up

POLICY_FILENAME = "planner.yaml"

DEFAULT_MEAL_FRACTIONS: Dict[str, float] = {
    "breakfast": 0.25,
    "morning_snack": 0.10,
    "lunch": 0.35,
    "afternoon_snack": 0.10,
    "dinner": 0.20,
}


@dc.dataclass(frozen=True)
class PlannerPolicy:
    """Tuned planning constants. Defaults match the values the menus were tuned with."""

    min_reheat_rating: int = 3
    # compared for equality but left out of the hash, so policies stay hashable
    meal_fractions: Dict[str, float] = dc.field(
        default_factory=lambda: dict(DEFAULT_MEAL_FRACTIONS), hash=False
    )
    top_k: int = 15
    jitter: float = 40.0
    cuisine_bonus: float = 25.0
    protein_bonus: float = 20.0
    reheat_weight: float = 10.0      # per star
    high_acceptance_bonus: float = 30.0
    medium_acceptance_bonus: float = 15.0
    transport_weight: float = 5.0    # per hour
    like_bonus: float = 20.0
    dislike_penalty: float = 50.0
    calorie_divisor: float = 10.0    # 1 point lost per 10 kcal off target
    min_portions: float = 0.5
    max_portions: float = 2.0

    def target_calories(self, daily_calories: float, meal_type: str) -> int:
        return round_half_up(daily_calories * self.meal_fractions[meal_type])

    def validate(self) -> "PlannerPolicy":
        missing = [mt for mt in MEAL_TYPES if mt not in self.meal_fractions]
        if missing:
            raise ValueError(f"meal_fractions missing: {', '.join(missing)}")
        total = sum(self.meal_fractions[mt] for mt in MEAL_TYPES)
        if abs(total - 1.0) > 0.001:
            raise ValueError(f"meal_fractions must sum to 1.0, got {total:.3f}")
        if self.top_k < 1:
            raise ValueError(f"top_k must be at least 1, got {self.top_k}")
        if not 0 < self.min_portions <= self.max_portions:
            raise ValueError("portion bounds must satisfy 0 < min_portions <= max_portions")
        return self


def policy_from_dict(data: Dict) -> PlannerPolicy:
    base = PlannerPolicy()
    fractions = dict(base.meal_fractions)
    fractions.update({str(k): float(v) for k, v in (data.get("meal_fractions") or {}).items()})

    def num(key: str) -> float:
        return float(data.get(key, getattr(base, key)))

    return PlannerPolicy(
        min_reheat_rating=int(data.get("min_reheat_rating", base.min_reheat_rating)),
        meal_fractions=fractions,
        top_k=int(data.get("top_k", base.top_k)),
        jitter=num("jitter"),
        cuisine_bonus=num("cuisine_bonus"),
        protein_bonus=num("protein_bonus"),
        reheat_weight=num("reheat_weight"),
        high_acceptance_bonus=num("high_acceptance_bonus"),
        medium_acceptance_bonus=num("medium_acceptance_bonus"),
        transport_weight=num("transport_weight"),
        like_bonus=num("like_bonus"),
        dislike_penalty=num("dislike_penalty"),
        calorie_divisor=num("calorie_divisor"),
        min_portions=num("min_portions"),
        max_portions=num("max_portions"),
    ).validate()


def load_policy(path: Optional[str] = None) -> PlannerPolicy:
    """
    Load the planner policy from YAML, or fall back to defaults.

    Priority:
    1. explicit path if provided and exists
    2. planner.yaml in the repository root (next to the package)
    3. planner.yaml in current working directory
    4. Built-in defaults
    """
    cfg_path = None

    if path:
        if os.path.exists(path):
            cfg_path = path
        else:
            print(f"[warn] Policy file '{path}' not found. Using defaults.")
    else:
        pkg_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        cand1 = os.path.join(pkg_root, POLICY_FILENAME)
        cand2 = os.path.join(os.getcwd(), POLICY_FILENAME)
        if os.path.exists(cand1):
            cfg_path = cand1
        elif os.path.exists(cand2):
            cfg_path = cand2

    if not cfg_path:
        print("[info] No planner.yaml found. Using built-in defaults.")
        return PlannerPolicy()

    with open(cfg_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Policy file {cfg_path} must hold a mapping")

    policy = policy_from_dict(data)
    print(
        f"[info] Policy loaded from {cfg_path}: "
        f"reheat ≥{policy.min_reheat_rating}, top-{policy.top_k}, jitter {policy.jitter:g}"
    )
    return policy
