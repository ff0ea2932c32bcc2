"""Supabase repository for logged meals."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from macro_planner.domain.meals import LoggedMeal
from macro_planner.domain.nutrition import MacroProfile, MealSlot
from macro_planner.services.meals import MealLogRepository

_COLUMNS = (
    "id, user_id, meal_type, name, calories, protein_g, carbs_g, fat_g, logged_at"
)


@dataclass
class SupabaseMealLogRepository(MealLogRepository):
    """Supabase implementation for logged meals."""

    client: Client

    def create_logged_meal(
        self,
        user_id: UUID,
        slot: MealSlot,
        name: str,
        macros: MacroProfile,
        logged_at: datetime,
    ) -> LoggedMeal:
        """Create a food log row and return it."""
        response = (
            self.client.table("food_logs")
            .insert(
                {
                    "user_id": str(user_id),
                    "meal_type": slot.value,
                    "name": name,
                    "calories": int(round(macros.calories)),
                    "protein_g": macros.protein_g,
                    "carbs_g": macros.carbs_g,
                    "fat_g": macros.fat_g,
                    "logged_at": logged_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create food log")
        return _parse_meal(response.data[0])

    def get_logged_meal(self, meal_id: UUID) -> LoggedMeal | None:
        """Return a food log row by id."""
        response = (
            self.client.table("food_logs")
            .select(_COLUMNS)
            .eq("id", str(meal_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def delete_logged_meal(self, meal_id: UUID) -> None:
        """Delete a food log row."""
        self.client.table("food_logs").delete().eq("id", str(meal_id)).execute()

    def list_logged_meals(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[LoggedMeal]:
        """Return food logs within a UTC time range, oldest first."""
        response = (
            self.client.table("food_logs")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("logged_at", start.isoformat())
            .lt("logged_at", end.isoformat())
            .order("logged_at", desc=False)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]


def _parse_meal(row: dict[str, object]) -> LoggedMeal:
    return LoggedMeal(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        slot=MealSlot(str(row["meal_type"])),
        name=str(row.get("name") or ""),
        calories=int(row.get("calories") or 0),
        protein_g=float(row.get("protein_g") or 0.0),
        carbs_g=float(row.get("carbs_g") or 0.0),
        fat_g=float(row.get("fat_g") or 0.0),
        logged_at=datetime.fromisoformat(str(row["logged_at"])),
    )
