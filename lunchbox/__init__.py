"""School lunch menu planning: recipe selection, menu assembly, shopping lists."""

from .assembler import MONTH_DAYS, WEEK_DAYS, MenuAssembler, scale_portions
from .catalog import RecipeCatalog, filter_candidates, load_cards
from .config import PlannerPolicy, load_policy
from .models import (
    MEAL_TYPES,
    ChildProfile,
    Ingredient,
    MenuPlan,
    MenuSlot,
    Nutrition,
    Preferences,
    Recipe,
    ShoppingList,
    ShoppingListEntry,
)
from .nutrition import NutritionalRequirements, calculate_requirements
from .selector import NoCandidatesError, select_recipe
from .shopping import build_shopping_list, group_by_category

__version__ = "0.1.0"
