"""Supabase repository for user profiles."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from macro_planner.domain.models import UserProfile
from macro_planner.services.profiles import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for user profiles."""

    client: Client

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the user's profile if present."""
        response = (
            self.client.table("user_profiles")
            .select(
                "user_id, goal, weight_kg, height_cm, age, gender, activity_level, "
                "aggressiveness, goal_style, calorie_target, dietary_restrictions, "
                "preferred_cuisines, timezone"
            )
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return UserProfile(
            user_id=UUID(row["user_id"]),
            goal=row.get("goal"),
            weight_kg=_optional_float(row.get("weight_kg")),
            height_cm=_optional_float(row.get("height_cm")),
            age=_optional_int(row.get("age")),
            gender=row.get("gender"),
            activity_level=row.get("activity_level"),
            aggressiveness=row.get("aggressiveness") or "balanced",
            goal_style=row.get("goal_style"),
            calorie_target=_optional_int(row.get("calorie_target")),
            dietary_restrictions=list(row.get("dietary_restrictions") or []),
            preferred_cuisines=list(row.get("preferred_cuisines") or []),
            timezone=row.get("timezone"),
        )


def _optional_float(value: object) -> float | None:
    return float(value) if value is not None else None


def _optional_int(value: object) -> int | None:
    return int(value) if value is not None else None
