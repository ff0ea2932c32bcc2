"""Meal logging service."""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from macro_planner.domain.errors import MacroValidationError
from macro_planner.domain.meals import LoggedMeal
from macro_planner.domain.nutrition import MACRO_FIELDS, MacroProfile, MealSlot
from macro_planner.services.clock import day_window, local_day
from macro_planner.services.locks import DayLocks
from macro_planner.services.profiles import ProfileService

_logger = logging.getLogger(__name__)


class MealLogRepository(Protocol):
    """Persistence interface for logged meals."""

    def create_logged_meal(
        self,
        user_id: UUID,
        slot: MealSlot,
        name: str,
        macros: MacroProfile,
        logged_at: datetime,
    ) -> LoggedMeal:
        """Create a logged meal and return it."""

    def get_logged_meal(self, meal_id: UUID) -> LoggedMeal | None:
        """Return a logged meal by id."""

    def delete_logged_meal(self, meal_id: UUID) -> None:
        """Delete a logged meal."""

    def list_logged_meals(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[LoggedMeal]:
        """Return meals logged within a UTC time range."""


@dataclass
class MealLogService:
    """Service that records and removes logged meals.

    Writes take the same day lock as swaps so they never interleave with a
    swap's read-modify-write cycle.
    """

    repository: MealLogRepository
    profile_service: ProfileService
    locks: DayLocks

    async def log_meal(
        self,
        user_id: UUID,
        slot: MealSlot,
        name: str,
        macros: MacroProfile,
        logged_at: datetime | None = None,
    ) -> LoggedMeal:
        """Persist a logged meal."""
        _validate_macros(macros)
        moment = logged_at or datetime.now(tz=UTC)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=UTC)
        day = local_day(moment, self.profile_service.get_timezone(user_id))
        async with self.locks.hold(user_id, day):
            meal = self.repository.create_logged_meal(
                user_id=user_id,
                slot=slot,
                name=name.strip() or slot.value.title(),
                macros=macros,
                logged_at=moment,
            )
        _logger.info("Logged %s meal for %s on %s", slot.value, user_id, day)
        return meal

    async def delete_meal(self, user_id: UUID, meal_id: UUID) -> bool:
        """Delete a meal owned by the user; return False when not found."""
        meal = self.repository.get_logged_meal(meal_id)
        if meal is None or meal.user_id != user_id:
            return False
        day = local_day(meal.logged_at, self.profile_service.get_timezone(user_id))
        async with self.locks.hold(user_id, day):
            self.repository.delete_logged_meal(meal_id)
        return True

    def list_meals(self, user_id: UUID, day: date) -> list[LoggedMeal]:
        """Return the meals whose local day is ``day``."""
        tz = self.profile_service.get_timezone(user_id)
        start, end = day_window(day, tz)
        meals = self.repository.list_logged_meals(user_id, start, end)
        return [meal for meal in meals if local_day(meal.logged_at, tz) == day]


def _validate_macros(macros: MacroProfile) -> None:
    for name in MACRO_FIELDS:
        value = getattr(macros, name)
        if not math.isfinite(value):
            raise MacroValidationError(name, f"{name} must be a finite number")
        if value < 0:
            raise MacroValidationError(name, f"{name} must not be negative")
