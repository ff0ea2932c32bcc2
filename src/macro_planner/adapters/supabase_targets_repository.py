"""Supabase repository for per-day targets."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import Client

from macro_planner.domain.models import DailyTargets
from macro_planner.services.targets import TargetsRepository


@dataclass
class SupabaseTargetsRepository(TargetsRepository):
    """Supabase implementation for daily targets."""

    client: Client

    def get_daily_targets(self, user_id: UUID, day: date) -> DailyTargets | None:
        """Return the stored targets for a day."""
        response = (
            self.client.table("daily_targets")
            .select("calories, protein_g, carbs_g, fat_g, is_default")
            .eq("user_id", str(user_id))
            .eq("day", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return DailyTargets(
            calories=int(row.get("calories", 0)),
            protein_g=float(row.get("protein_g", 0.0)),
            carbs_g=float(row.get("carbs_g", 0.0)),
            fat_g=float(row.get("fat_g", 0.0)),
            is_default=bool(row.get("is_default", False)),
        )

    def save_daily_targets(
        self, user_id: UUID, day: date, targets: DailyTargets
    ) -> None:
        """Upsert the targets for a day."""
        self.client.table("daily_targets").upsert(
            {
                "user_id": str(user_id),
                "day": day.isoformat(),
                "calories": targets.calories,
                "protein_g": targets.protein_g,
                "carbs_g": targets.carbs_g,
                "fat_g": targets.fat_g,
                "is_default": targets.is_default,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id,day",
        ).execute()
