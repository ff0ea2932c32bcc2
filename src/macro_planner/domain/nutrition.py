"""Nutrition domain models."""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

GRAM_DECIMALS = 2
GRAM_TOLERANCE = 0.005


class MealSlot(StrEnum):
    """Meal slots of a day, in eating order."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class MacroCategory(StrEnum):
    """Macronutrient categories that can be moved between slots."""

    PROTEIN = "protein"
    CARBS = "carbs"
    FAT = "fat"

    @property
    def field(self) -> str:
        """Name of the gram attribute on a macro profile."""
        return f"{self.value}_g"

    @property
    def kcal_per_gram(self) -> int:
        """Energy density used when recomputing calories."""
        return KCAL_PER_GRAM[self]


KCAL_PER_GRAM = {
    MacroCategory.PROTEIN: 4,
    MacroCategory.CARBS: 4,
    MacroCategory.FAT: 9,
}

MACRO_FIELDS = ("calories", "protein_g", "carbs_g", "fat_g")


@dataclass(frozen=True)
class MacroProfile:
    """Calories and macronutrient grams."""

    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float


ZERO_MACROS = MacroProfile(0.0, 0.0, 0.0, 0.0)


def add_macros(left: MacroProfile, right: MacroProfile) -> MacroProfile:
    """Return the component-wise sum of two profiles."""
    return MacroProfile(
        calories=left.calories + right.calories,
        protein_g=left.protein_g + right.protein_g,
        fat_g=left.fat_g + right.fat_g,
        carbs_g=left.carbs_g + right.carbs_g,
    )


def subtract_macros(left: MacroProfile, right: MacroProfile) -> MacroProfile:
    """Return ``left - right`` component-wise, keeping negative values."""
    return MacroProfile(
        calories=left.calories - right.calories,
        protein_g=left.protein_g - right.protein_g,
        fat_g=left.fat_g - right.fat_g,
        carbs_g=left.carbs_g - right.carbs_g,
    )


def sum_macros(profiles: Iterable[MacroProfile]) -> MacroProfile:
    """Sum an iterable of profiles."""
    total = ZERO_MACROS
    for profile in profiles:
        total = add_macros(total, profile)
    return total


def round_macros(profile: MacroProfile) -> MacroProfile:
    """Round every component to the gram precision."""
    return MacroProfile(
        calories=round_grams(profile.calories),
        protein_g=round_grams(profile.protein_g),
        fat_g=round_grams(profile.fat_g),
        carbs_g=round_grams(profile.carbs_g),
    )


def round_grams(value: float) -> float:
    """Round a gram amount to the stored precision."""
    return round(value, GRAM_DECIMALS)


def floor_grams(value: float) -> float:
    """Round a gram amount down to the stored precision, never above ``value``."""
    scale = 10**GRAM_DECIMALS
    floored = math.floor(value * scale) / scale
    if floored > value:
        floored -= 1 / scale
    return round(floored, GRAM_DECIMALS)


def energy_from_macros(protein_g: float, carbs_g: float, fat_g: float) -> float:
    """Return kcal implied by macro grams (4/4/9)."""
    return (
        protein_g * KCAL_PER_GRAM[MacroCategory.PROTEIN]
        + carbs_g * KCAL_PER_GRAM[MacroCategory.CARBS]
        + fat_g * KCAL_PER_GRAM[MacroCategory.FAT]
    )


def macros_match(left: MacroProfile, right: MacroProfile) -> bool:
    """Return True when every component agrees within the gram tolerance."""
    return all(
        abs(getattr(left, name) - getattr(right, name)) <= GRAM_TOLERANCE
        for name in MACRO_FIELDS
    )


def parse_slot(value: object) -> MealSlot | None:
    """Parse a meal slot name, returning None when unknown."""
    if isinstance(value, MealSlot):
        return value
    if isinstance(value, str):
        try:
            return MealSlot(value.strip().lower())
        except ValueError:
            return None
    return None
