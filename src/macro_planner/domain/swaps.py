"""Domain models for same-macro swaps between meal slots."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from macro_planner.domain.nutrition import MacroCategory, MacroProfile, MealSlot


@dataclass(frozen=True)
class SwapRequest:
    """Move ``amount_g`` grams of one macro category between two slots."""

    from_slot: MealSlot
    to_slot: MealSlot
    category: MacroCategory
    amount_g: float


@dataclass(frozen=True)
class SwapRecord:
    """A persisted swap, used for the day's history."""

    id: UUID
    user_id: UUID
    day: date
    from_slot: MealSlot
    to_slot: MealSlot
    category: MacroCategory
    amount_g: float
    created_at: datetime


@dataclass(frozen=True)
class SwapApplied:
    """The swap was persisted."""

    from_slot: MealSlot
    to_slot: MealSlot
    from_macros: MacroProfile
    to_macros: MacroProfile
    record: SwapRecord


@dataclass(frozen=True)
class InsufficientAmount:
    """The source slot does not hold enough of the category."""

    slot: MealSlot
    category: MacroCategory
    available_g: float
    requested_g: float

    @property
    def shortfall_g(self) -> float:
        """Grams missing from the source slot."""
        return round(self.requested_g - self.available_g, 2)


@dataclass(frozen=True)
class SwapConflict:
    """Concurrent writers kept changing the plan; the client should retry."""

    attempts: int


SwapResult = SwapApplied | InsufficientAmount | SwapConflict


@dataclass(frozen=True)
class SwapStatus:
    """Swap history and plan state for a day."""

    day: date
    swap_count: int
    history: list[SwapRecord]
    plan: dict[MealSlot, MacroProfile]
    target: MacroProfile
    plan_total: MacroProfile
    is_balanced: bool
