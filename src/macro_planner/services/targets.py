"""Daily calorie and macro target calculations."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from macro_planner.domain.models import DailyTargets, UserProfile
from macro_planner.domain.nutrition import KCAL_PER_GRAM, MacroCategory
from macro_planner.services.profiles import ProfileService

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "lightly_active": 1.375,
    "light": 1.375,
    "moderately_active": 1.55,
    "moderate": 1.55,
    "very_active": 1.725,
    "active": 1.725,
    "extremely_active": 1.9,
    "very": 1.9,
}

GOAL_CALORIE_ADJUSTMENTS = {
    "fat_loss": -500,
    "maintenance": 0,
    "muscle_gain": 300,
    "recomposition": -200,
}

GOAL_PROTEIN_PER_KG = {
    "fat_loss": 2.0,
    "maintenance": 1.6,
    "muscle_gain": 2.2,
    "recomposition": 2.0,
}

AGGRESSIVENESS_FACTORS = {"aggressive": 1.2, "balanced": 1.0, "conservative": 0.9}

MIN_CALORIES = 1200
FAT_CALORIE_SHARE = 0.25
# protein/carbs/fat calorie split when body weight is unknown
FALLBACK_CALORIE_SPLIT = (0.30, 0.40, 0.30)

DEFAULT_TARGETS = DailyTargets(
    calories=2000, protein_g=150.0, carbs_g=200.0, fat_g=67.0, is_default=True
)

_logger = logging.getLogger(__name__)


class TargetsRepository(Protocol):
    """Persistence interface for per-day targets."""

    def get_daily_targets(self, user_id: UUID, day: date) -> DailyTargets | None:
        """Return the stored targets for a day."""

    def save_daily_targets(
        self, user_id: UUID, day: date, targets: DailyTargets
    ) -> None:
        """Persist the targets for a day, replacing any previous value."""


@dataclass
class TargetsService:
    """Service that resolves a user's targets for a day."""

    repository: TargetsRepository
    profile_service: ProfileService

    def get_targets(self, user_id: UUID, day: date) -> DailyTargets:
        """Return stored targets, computing them from the profile when absent."""
        stored = self.repository.get_daily_targets(user_id, day)
        if stored is not None:
            return stored
        return compute_targets(self.profile_service.get_profile(user_id))

    def refresh_targets(self, user_id: UUID, day: date) -> DailyTargets:
        """Recompute targets from the current profile and persist them."""
        targets = compute_targets(self.profile_service.get_profile(user_id))
        if targets.is_default:
            _logger.info("Profile incomplete, storing default targets: %s", user_id)
        self.repository.save_daily_targets(user_id, day, targets)
        return targets


def compute_targets(profile: UserProfile) -> DailyTargets:
    """Derive daily targets from a profile, or defaults if it is incomplete."""
    goal = _normalize(profile.goal) or "maintenance"
    calories = profile.calorie_target
    if calories is None:
        tdee = _tdee(profile)
        if tdee is None:
            return DEFAULT_TARGETS
        calories = calorie_target(tdee, goal, profile.aggressiveness)
    if profile.weight_kg and profile.weight_kg > 0:
        protein_g, carbs_g, fat_g = macro_targets(profile.weight_kg, calories, goal)
    else:
        protein_g, carbs_g, fat_g = _split_macros(calories)
    return DailyTargets(
        calories=int(calories),
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
    )


def basal_metabolic_rate(
    weight_kg: float, height_cm: float, age: int, gender: str | None
) -> int:
    """Mifflin-St Jeor BMR in kcal/day."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    normalized = _normalize(gender)
    if normalized in {"male", "m"}:
        return round(base + 5)
    if normalized in {"female", "f"}:
        return round(base - 161)
    return round(base - 78)


def total_daily_energy(bmr: int, activity_level: str | None) -> int:
    """TDEE for an activity level; unknown levels count as sedentary."""
    multiplier = ACTIVITY_MULTIPLIERS.get(
        _normalize(activity_level) or "sedentary", ACTIVITY_MULTIPLIERS["sedentary"]
    )
    return round(bmr * multiplier)


def calorie_target(tdee: int, goal: str, aggressiveness: str | None) -> int:
    """Apply the goal adjustment and aggressiveness, with a safety floor."""
    adjustment = GOAL_CALORIE_ADJUSTMENTS.get(goal, 0)
    factor = AGGRESSIVENESS_FACTORS.get(_normalize(aggressiveness) or "balanced", 1.0)
    return max(MIN_CALORIES, round(tdee + round(adjustment * factor)))


def macro_targets(
    weight_kg: float, calories: int, goal: str
) -> tuple[float, float, float]:
    """Return protein, carbs and fat grams for a calorie target."""
    protein_g = round(weight_kg * GOAL_PROTEIN_PER_KG.get(goal, 1.6))
    fat_g = round(calories * FAT_CALORIE_SHARE / KCAL_PER_GRAM[MacroCategory.FAT])
    used = (
        protein_g * KCAL_PER_GRAM[MacroCategory.PROTEIN]
        + fat_g * KCAL_PER_GRAM[MacroCategory.FAT]
    )
    carbs_g = max(0, round((calories - used) / KCAL_PER_GRAM[MacroCategory.CARBS]))
    return float(protein_g), float(carbs_g), float(fat_g)


def _split_macros(calories: int) -> tuple[float, float, float]:
    protein_share, carbs_share, fat_share = FALLBACK_CALORIE_SPLIT
    return (
        float(round(calories * protein_share / KCAL_PER_GRAM[MacroCategory.PROTEIN])),
        float(round(calories * carbs_share / KCAL_PER_GRAM[MacroCategory.CARBS])),
        float(round(calories * fat_share / KCAL_PER_GRAM[MacroCategory.FAT])),
    )


def _tdee(profile: UserProfile) -> int | None:
    if not (profile.weight_kg and profile.height_cm and profile.age):
        return None
    if profile.weight_kg <= 0 or profile.height_cm <= 0 or profile.age <= 0:
        return None
    bmr = basal_metabolic_rate(
        profile.weight_kg, profile.height_cm, profile.age, profile.gender
    )
    return total_daily_energy(bmr, profile.activity_level)


def _normalize(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip().lower().replace(" ", "_")
    return cleaned or None
