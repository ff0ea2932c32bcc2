"""Macro ledger: remaining budgets computed fresh from raw logs."""

from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from macro_planner.domain.ledger import DailySummary, DayPlan, RemainingBudget
from macro_planner.domain.meals import LoggedMeal
from macro_planner.domain.models import DailyTargets
from macro_planner.domain.nutrition import (
    MacroProfile,
    MealSlot,
    round_macros,
    subtract_macros,
    sum_macros,
)
from macro_planner.domain.swaps import SwapRecord
from macro_planner.services.allocation import SlotAllocation
from macro_planner.services.meals import MealLogService
from macro_planner.services.targets import TargetsService


class MealPlanRepository(Protocol):
    """Persistence interface for per-slot day plans and their swap log."""

    def get_day_plan(self, user_id: UUID, day: date) -> DayPlan | None:
        """Return the persisted plan for a day, if any."""

    def apply_swap(
        self,
        user_id: UUID,
        expected_version: int,
        slots: dict[MealSlot, MacroProfile],
        record: SwapRecord,
    ) -> bool:
        """Write every slot of the day and the swap record in one transaction.

        Returns False without writing when the stored plan version differs
        from ``expected_version`` (0 means no plan is stored yet).
        """

    def list_swaps(self, user_id: UUID, day: date) -> list[SwapRecord]:
        """Return the day's swaps, newest first."""


@dataclass
class MacroLedger:
    """Read-only view over targets, the day plan and logged meals."""

    targets_service: TargetsService
    meal_log_service: MealLogService
    plan_repository: MealPlanRepository
    allocation: SlotAllocation

    def get_plan(self, user_id: UUID, day: date) -> DayPlan:
        """Return the stored plan or one derived from the allocation policy."""
        return self._plan_for(user_id, day, None)

    def get_remaining_for_slot(
        self, user_id: UUID, day: date, slot: MealSlot
    ) -> RemainingBudget:
        """Return slot target minus what was logged for the slot."""
        return self.get_remaining(user_id, day)[slot]

    def get_remaining(
        self, user_id: UUID, day: date
    ) -> dict[MealSlot, RemainingBudget]:
        """Return the remaining budget of every slot."""
        targets = self.targets_service.get_targets(user_id, day)
        plan = self._plan_for(user_id, day, targets)
        meals = self.meal_log_service.list_meals(user_id, day)
        remaining: dict[MealSlot, RemainingBudget] = {}
        for slot in MealSlot:
            target = plan.slots[slot]
            consumed = _consumed(meals, slot)
            left = round_macros(subtract_macros(target, consumed))
            remaining[slot] = RemainingBudget(
                slot=slot,
                calories=left.calories,
                protein_g=left.protein_g,
                carbs_g=left.carbs_g,
                fat_g=left.fat_g,
                target=target,
                consumed=consumed,
                targets_default=targets.is_default,
            )
        return remaining

    def get_daily_totals(self, user_id: UUID, day: date) -> DailySummary:
        """Return the day-level target, consumed and remaining totals."""
        targets = self.targets_service.get_targets(user_id, day)
        plan = self._plan_for(user_id, day, targets)
        meals = self.meal_log_service.list_meals(user_id, day)
        target = plan_totals(plan)
        consumed = round_macros(sum_macros(meal.macros for meal in meals))
        return DailySummary(
            day=day,
            target=target,
            consumed=consumed,
            remaining=round_macros(subtract_macros(target, consumed)),
            targets_default=targets.is_default,
        )

    def _plan_for(
        self, user_id: UUID, day: date, targets: DailyTargets | None
    ) -> DayPlan:
        stored = self.plan_repository.get_day_plan(user_id, day)
        if stored is not None:
            return stored
        resolved = targets or self.targets_service.get_targets(user_id, day)
        profile = self.targets_service.profile_service.get_profile(user_id)
        allocation = self.allocation.for_goal_style(
            profile.goal_style or profile.aggressiveness
        )
        return DayPlan(day=day, version=0, slots=allocation.allocate(resolved))


def plan_totals(plan: DayPlan) -> MacroProfile:
    """Sum a plan's slots."""
    return round_macros(sum_macros(plan.slots[slot] for slot in MealSlot))


def _consumed(meals: list[LoggedMeal], slot: MealSlot) -> MacroProfile:
    return round_macros(sum_macros(meal.macros for meal in meals if meal.slot == slot))
