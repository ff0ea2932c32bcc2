"""Supabase repository for day plans and the swap log."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from macro_planner.domain.ledger import DayPlan
from macro_planner.domain.nutrition import MacroCategory, MacroProfile, MealSlot
from macro_planner.domain.swaps import SwapRecord
from macro_planner.services.ledger import MealPlanRepository


@dataclass
class SupabaseMealPlanRepository(MealPlanRepository):
    """Supabase implementation for meal plans.

    Swaps go through the ``apply_meal_swap`` Postgres function, which checks
    the plan version, writes the day's slots and the swap log in one transaction
    and returns the new version (null on a version mismatch).
    """

    client: Client

    def get_day_plan(self, user_id: UUID, day: date) -> DayPlan | None:
        """Return the persisted plan for a day, if complete."""
        response = (
            self.client.table("meal_plan_slots")
            .select("meal_type, calories, protein_g, carbs_g, fat_g, version")
            .eq("user_id", str(user_id))
            .eq("day", day.isoformat())
            .execute()
        )
        rows = response.data or []
        slots: dict[MealSlot, MacroProfile] = {}
        version = 0
        for row in rows:
            slot = MealSlot(str(row["meal_type"]))
            slots[slot] = MacroProfile(
                calories=float(row.get("calories") or 0.0),
                protein_g=float(row.get("protein_g") or 0.0),
                fat_g=float(row.get("fat_g") or 0.0),
                carbs_g=float(row.get("carbs_g") or 0.0),
            )
            version = max(version, int(row.get("version") or 0))
        if version == 0 or set(slots) != set(MealSlot):
            return None
        return DayPlan(day=day, version=version, slots=slots)

    def apply_swap(
        self,
        user_id: UUID,
        expected_version: int,
        slots: dict[MealSlot, MacroProfile],
        record: SwapRecord,
    ) -> bool:
        """Persist the swap if the stored version still matches."""
        response = self.client.rpc(
            "apply_meal_swap",
            {
                "p_user_id": str(user_id),
                "p_day": record.day.isoformat(),
                "p_expected_version": expected_version,
                "p_slots": [
                    {
                        "meal_type": slot.value,
                        "calories": macros.calories,
                        "protein_g": macros.protein_g,
                        "carbs_g": macros.carbs_g,
                        "fat_g": macros.fat_g,
                    }
                    for slot, macros in slots.items()
                ],
                "p_swap": {
                    "id": str(record.id),
                    "from_meal": record.from_slot.value,
                    "to_meal": record.to_slot.value,
                    "category": record.category.value,
                    "amount_g": record.amount_g,
                    "created_at": record.created_at.isoformat(),
                },
            },
        ).execute()
        return response.data is not None

    def list_swaps(self, user_id: UUID, day: date) -> list[SwapRecord]:
        """Return the day's swaps, newest first."""
        response = (
            self.client.table("meal_swap_logs")
            .select(
                "id, user_id, day, from_meal, to_meal, category, amount_g, created_at"
            )
            .eq("user_id", str(user_id))
            .eq("day", day.isoformat())
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_swap(row) for row in response.data or []]


def _parse_swap(row: dict[str, object]) -> SwapRecord:
    return SwapRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        day=date.fromisoformat(str(row["day"])),
        from_slot=MealSlot(str(row["from_meal"])),
        to_slot=MealSlot(str(row["to_meal"])),
        category=MacroCategory(str(row["category"])),
        amount_g=float(row.get("amount_g") or 0.0),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
