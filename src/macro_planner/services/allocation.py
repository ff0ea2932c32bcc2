"""Per-slot allocation of daily targets."""

from dataclasses import dataclass, replace

from macro_planner.config import Settings
from macro_planner.domain.models import DailyTargets
from macro_planner.domain.nutrition import MacroProfile, MealSlot, round_grams

_SHARE_TOLERANCE = 1e-9

MACRO_COMPONENTS = ("protein", "carbs", "fat")


@dataclass(frozen=True)
class SlotShares:
    """Share of one daily total assigned to breakfast, lunch and dinner.

    The snack slot receives whatever is left, so the four slots always add
    up to the daily total.
    """

    breakfast: float = 0.25
    lunch: float = 0.35
    dinner: float = 0.30

    def __post_init__(self) -> None:
        shares = (self.breakfast, self.lunch, self.dinner)
        if any(share < 0 for share in shares):
            raise ValueError("Slot shares must not be negative")
        if sum(shares) > 1 + _SHARE_TOLERANCE:
            raise ValueError("Slot shares must not exceed 100% of the day")

    @property
    def snack(self) -> float:
        """Share left for the snack slot."""
        return max(0.0, 1 - (self.breakfast + self.lunch + self.dinner))

    def share_for(self, slot: MealSlot) -> float:
        """Return the configured share for a slot."""
        if slot is MealSlot.SNACK:
            return self.snack
        return getattr(self, slot.value)


# Aggressive days front-load protein and carbs; 10% stays with the snack.
_AGGRESSIVE_CALORIES = SlotShares(breakfast=0.315, lunch=0.36, dinner=0.225)
_AGGRESSIVE_PROTEIN = SlotShares(breakfast=0.36, lunch=0.315, dinner=0.225)
_AGGRESSIVE_CARBS = SlotShares(breakfast=0.27, lunch=0.405, dinner=0.225)
_EVEN_SHARES = SlotShares(breakfast=0.3, lunch=0.3, dinner=0.3)


@dataclass(frozen=True)
class SlotAllocation(SlotShares):
    """Calorie shares per slot, with optional per-macro overrides.

    A macro without an override follows the calorie shares.
    """

    protein: SlotShares | None = None
    carbs: SlotShares | None = None
    fat: SlotShares | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SlotAllocation":
        """Build the allocation from configured shares."""
        return cls(
            breakfast=settings.breakfast_share,
            lunch=settings.lunch_share,
            dinner=settings.dinner_share,
        )

    def shares_for(self, component: str) -> SlotShares:
        """Return the slot shares used for ``calories`` or a macro."""
        if component == "calories":
            return self
        if component not in MACRO_COMPONENTS:
            raise ValueError(f"Unknown component: {component}")
        return getattr(self, component) or self

    def for_goal_style(self, goal_style: str | None) -> "SlotAllocation":
        """Return the allocation used on days planned with a goal style.

        Balanced (or unknown) keeps the configured shares. Conservative
        spreads every component evenly over the three main meals.
        """
        style = (goal_style or "balanced").strip().lower()
        if style == "aggressive":
            fat = self.shares_for("fat")
            return SlotAllocation(
                breakfast=_AGGRESSIVE_CALORIES.breakfast,
                lunch=_AGGRESSIVE_CALORIES.lunch,
                dinner=_AGGRESSIVE_CALORIES.dinner,
                protein=_AGGRESSIVE_PROTEIN,
                carbs=_AGGRESSIVE_CARBS,
                fat=SlotShares(fat.breakfast, fat.lunch, fat.dinner),
            )
        if style == "conservative":
            return replace(
                self,
                breakfast=_EVEN_SHARES.breakfast,
                lunch=_EVEN_SHARES.lunch,
                dinner=_EVEN_SHARES.dinner,
                protein=None,
                carbs=None,
                fat=None,
            )
        return self

    def allocate(self, targets: DailyTargets) -> dict[MealSlot, MacroProfile]:
        """Split daily targets into slot targets that sum exactly to the day."""
        calories = _split(float(targets.calories), self, digits=0)
        protein = _split(targets.protein_g, self.shares_for("protein"), digits=2)
        carbs = _split(targets.carbs_g, self.shares_for("carbs"), digits=2)
        fat = _split(targets.fat_g, self.shares_for("fat"), digits=2)
        return {
            slot: MacroProfile(
                calories=calories[slot],
                protein_g=protein[slot],
                fat_g=fat[slot],
                carbs_g=carbs[slot],
            )
            for slot in MealSlot
        }


def _split(total: float, shares: SlotShares, digits: int) -> dict[MealSlot, float]:
    parts: dict[MealSlot, float] = {}
    assigned = 0.0
    for slot in (MealSlot.BREAKFAST, MealSlot.LUNCH, MealSlot.DINNER):
        value = round(total * shares.share_for(slot), digits)
        parts[slot] = value
        assigned += value
    parts[MealSlot.SNACK] = round_grams(total - assigned)
    return parts
