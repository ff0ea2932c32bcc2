"""Domain models for per-slot budgets and day plans."""

from dataclasses import dataclass
from datetime import date

from macro_planner.domain.nutrition import MacroProfile, MealSlot


@dataclass(frozen=True)
class RemainingBudget:
    """Slot target minus what has been logged for the slot.

    Values may be negative when the user has already eaten past the slot
    target.
    """

    slot: MealSlot
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    target: MacroProfile
    consumed: MacroProfile
    targets_default: bool = False

    @property
    def remaining(self) -> MacroProfile:
        """Remaining amounts as a profile."""
        return MacroProfile(
            calories=self.calories,
            protein_g=self.protein_g,
            fat_g=self.fat_g,
            carbs_g=self.carbs_g,
        )


@dataclass(frozen=True)
class DailySummary:
    """Day-level target, consumed and remaining totals."""

    day: date
    target: MacroProfile
    consumed: MacroProfile
    remaining: MacroProfile
    targets_default: bool = False


@dataclass(frozen=True)
class DayPlan:
    """Per-slot macro targets for a day.

    Version 0 means the plan was derived from the allocation policy and has
    not been persisted yet.
    """

    day: date
    version: int
    slots: dict[MealSlot, MacroProfile]

    @property
    def is_persisted(self) -> bool:
        """Return True when the plan came from storage."""
        return self.version > 0
