"""Domain models for meal logging."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from macro_planner.domain.nutrition import MacroProfile, MealSlot


@dataclass(frozen=True)
class LoggedMeal:
    """A recorded food entry; the source of truth for consumed amounts."""

    id: UUID
    user_id: UUID
    slot: MealSlot
    name: str
    calories: int
    protein_g: float
    carbs_g: float
    fat_g: float
    logged_at: datetime

    @property
    def macros(self) -> MacroProfile:
        """Macros of the meal as a profile."""
        return MacroProfile(
            calories=float(self.calories),
            protein_g=self.protein_g,
            fat_g=self.fat_g,
            carbs_g=self.carbs_g,
        )
