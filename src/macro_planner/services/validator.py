"""Budget validator for candidate meals.

Everything here is a pure function of its arguments: no database, no AI
backend, no clock.
"""

import math
from dataclasses import dataclass
from typing import Protocol

from macro_planner.domain.nutrition import MACRO_FIELDS, floor_grams
from macro_planner.domain.suggestions import MealSuggestion


class MacroAmounts(Protocol):
    """Anything exposing calories and macro grams."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


@dataclass(frozen=True)
class Violation:
    """A macro that exceeds its limit."""

    macro: str
    suggested: float
    limit: float

    @property
    def excess(self) -> float:
        """Amount above the limit."""
        return round(self.suggested - self.limit, 2)


@dataclass(frozen=True)
class BudgetCheck:
    """Outcome of validating a candidate against a budget."""

    violations: tuple[Violation, ...] = ()

    @property
    def ok(self) -> bool:
        """True when no macro exceeds its limit."""
        return not self.violations

    @property
    def violated_macros(self) -> list[str]:
        """Names of the macros over budget."""
        return [violation.macro for violation in self.violations]


def validate(candidate: MacroAmounts, budget: MacroAmounts) -> BudgetCheck:
    """Reject any macro strictly above the remaining budget.

    Equal to the limit is allowed; there is no rounding slack.
    """
    violations = []
    for name in MACRO_FIELDS:
        suggested = float(getattr(candidate, name))
        limit = float(getattr(budget, name))
        if suggested > limit:
            violations.append(Violation(macro=name, suggested=suggested, limit=limit))
    return BudgetCheck(violations=tuple(violations))


def scale_to_budget(
    candidate: MealSuggestion, check: BudgetCheck, budget: MacroAmounts
) -> MealSuggestion | None:
    """Shrink a candidate proportionally so its violated macros fit.

    Returns None when a violated limit is negative (nothing can fit), a value
    is not finite, or the scaled result still fails validation.
    """
    if check.ok:
        return candidate
    if not all(math.isfinite(getattr(candidate, name)) for name in MACRO_FIELDS):
        return None
    factor = 1.0
    for violation in check.violations:
        if violation.limit < 0 or violation.suggested <= 0:
            return None
        factor = min(factor, violation.limit / violation.suggested)
    scaled = candidate.model_copy(
        update={
            "calories": int(candidate.calories * factor),
            "protein_g": floor_grams(candidate.protein_g * factor),
            "carbs_g": floor_grams(candidate.carbs_g * factor),
            "fat_g": floor_grams(candidate.fat_g * factor),
            "adjusted": True,
        }
    )
    if not validate(scaled, budget).ok:
        return None
    return scaled
