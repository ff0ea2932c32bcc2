"""Domain models for users and their daily targets."""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class UserProfile:
    """Profile data used to derive targets and prompt the AI backend."""

    user_id: UUID
    goal: str | None = None
    weight_kg: float | None = None
    height_cm: float | None = None
    age: int | None = None
    gender: str | None = None
    activity_level: str | None = None
    aggressiveness: str = "balanced"
    goal_style: str | None = None
    calorie_target: int | None = None
    dietary_restrictions: list[str] = field(default_factory=list)
    preferred_cuisines: list[str] = field(default_factory=list)
    timezone: str | None = None


@dataclass(frozen=True)
class DailyTargets:
    """Calorie and macro targets for one user and day."""

    calories: int
    protein_g: float
    carbs_g: float
    fat_g: float
    is_default: bool = False
