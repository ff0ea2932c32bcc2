"""Tests for rule-based fallback suggestions."""

import pytest

from macro_planner.domain.errors import InsufficientBudgetError
from macro_planner.domain.ledger import RemainingBudget
from macro_planner.domain.nutrition import ZERO_MACROS, MacroProfile, MealSlot
from macro_planner.services.fallback import (
    fallback_macros,
    fallback_suggestions,
    normalize_restrictions,
)
from macro_planner.services.validator import validate
from tests.conftest import DAY


def _budget(
    slot: MealSlot, calories: float, protein_g: float, carbs_g: float, fat_g: float
) -> RemainingBudget:
    return RemainingBudget(
        slot=slot,
        calories=calories,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
        target=MacroProfile(calories, protein_g, fat_g, carbs_g),
        consumed=ZERO_MACROS,
    )


def test_fallback_macros_fill_a_consistent_budget() -> None:
    macros = fallback_macros(_budget(MealSlot.LUNCH, 700, 52.5, 70, 21))

    assert macros == MacroProfile(calories=679, protein_g=52.5, fat_g=21, carbs_g=70)


def test_fallback_macros_scale_down_to_the_calorie_limit() -> None:
    budget = _budget(MealSlot.SNACK, 100, 40, 50, 20)

    macros = fallback_macros(budget)

    assert macros.calories <= 100
    assert validate(macros, budget).ok
    assert macros.protein_g < 40


def test_fallback_macros_reject_an_exhausted_macro() -> None:
    with pytest.raises(InsufficientBudgetError) as exc_info:
        fallback_macros(_budget(MealSlot.DINNER, 200, -4.5, 20, 5))

    assert exc_info.value.shortfall == {"protein_g": 4.5}


def test_fallback_suggestions_are_stable_and_within_budget() -> None:
    budget = _budget(MealSlot.DINNER, 600, 45, 60, 18)

    first = fallback_suggestions(budget, DAY, [])
    second = fallback_suggestions(budget, DAY, [])

    assert [item.name for item in first] == [item.name for item in second]
    assert len({item.name for item in first}) == 3
    assert all(item.source == "fallback" for item in first)
    assert all(validate(item, budget).ok for item in first)


def test_fallback_suggestions_respect_restrictions() -> None:
    budget = _budget(MealSlot.LUNCH, 700, 52.5, 70, 21)

    suggestions = fallback_suggestions(budget, DAY, ["Vegan"])

    assert [item.name for item in suggestions] == [
        "Lentil and Rice Bowl",
        "Lentil and Rice Bowl (option 2)",
        "Lentil and Rice Bowl (option 3)",
    ]


def test_unknown_restrictions_are_ignored() -> None:
    assert normalize_restrictions(["vegan", "keto"]) == {
        "vegan",
        "vegetarian",
        "dairy_free",
    }
