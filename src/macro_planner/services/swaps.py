"""Same-macro swaps between meal slots of one day."""

import logging
import math
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

from macro_planner.domain.errors import (
    ConcurrencyConflict,
    ConsistencyError,
    InsufficientBudgetError,
    MacroValidationError,
)
from macro_planner.domain.ledger import DayPlan
from macro_planner.domain.nutrition import (
    MacroCategory,
    MacroProfile,
    MealSlot,
    macros_match,
    parse_slot,
    round_grams,
)
from macro_planner.domain.swaps import (
    InsufficientAmount,
    SwapApplied,
    SwapConflict,
    SwapRecord,
    SwapRequest,
    SwapResult,
    SwapStatus,
)
from macro_planner.services.ledger import MacroLedger, MealPlanRepository, plan_totals
from macro_planner.services.locks import DayLocks

_logger = logging.getLogger(__name__)


@dataclass
class SwapEngine:
    """Move grams of one macro between two slots, keeping the day's totals."""

    ledger: MacroLedger
    plan_repository: MealPlanRepository
    locks: DayLocks
    retry_attempts: int = 3

    async def swap(self, user_id: UUID, day: date, request: SwapRequest) -> SwapResult:
        """Apply a swap atomically or report why it was not applied."""
        request = _validate_request(request)
        attempts = max(1, self.retry_attempts)
        async with self.locks.hold(user_id, day):
            for attempt in range(1, attempts + 1):
                plan = self.ledger.get_plan(user_id, day)
                source = plan.slots[request.from_slot]
                available = getattr(source, request.category.field)
                if available < request.amount_g:
                    return InsufficientAmount(
                        slot=request.from_slot,
                        category=request.category,
                        available_g=round_grams(available),
                        requested_g=request.amount_g,
                    )

                slots = move_macro(plan.slots, request)
                _check_conservation(user_id, plan, slots, request)
                record = SwapRecord(
                    id=uuid4(),
                    user_id=user_id,
                    day=day,
                    from_slot=request.from_slot,
                    to_slot=request.to_slot,
                    category=request.category,
                    amount_g=request.amount_g,
                    created_at=datetime.now(tz=UTC),
                )
                if self.plan_repository.apply_swap(
                    user_id, plan.version, slots, record
                ):
                    _logger.info(
                        "Swapped %sg %s from %s to %s for %s on %s",
                        request.amount_g,
                        request.category.value,
                        request.from_slot.value,
                        request.to_slot.value,
                        user_id,
                        day,
                    )
                    return SwapApplied(
                        from_slot=request.from_slot,
                        to_slot=request.to_slot,
                        from_macros=slots[request.from_slot],
                        to_macros=slots[request.to_slot],
                        record=record,
                    )
                _logger.warning(
                    "Swap version conflict for %s on %s (attempt %s of %s)",
                    user_id,
                    day,
                    attempt,
                    attempts,
                )
        return SwapConflict(attempts=attempts)

    def get_swap_status(self, user_id: UUID, day: date) -> SwapStatus:
        """Return the day's swap history and whether the plan still balances."""
        targets = self.ledger.targets_service.get_targets(user_id, day)
        plan = self.ledger.get_plan(user_id, day)
        history = self.plan_repository.list_swaps(user_id, day)
        total = plan_totals(plan)
        target = MacroProfile(
            calories=float(targets.calories),
            protein_g=targets.protein_g,
            fat_g=targets.fat_g,
            carbs_g=targets.carbs_g,
        )
        return SwapStatus(
            day=day,
            swap_count=len(history),
            history=history,
            plan=dict(plan.slots),
            target=target,
            plan_total=total,
            is_balanced=macros_match(total, target),
        )


def build_swap_request(
    from_slot: object, to_slot: object, category: object, amount_g: float
) -> SwapRequest:
    """Parse raw request values into a validated swap request."""
    parsed_from = parse_slot(from_slot)
    if parsed_from is None:
        raise MacroValidationError("from_slot", f"Unknown meal slot: {from_slot}")
    parsed_to = parse_slot(to_slot)
    if parsed_to is None:
        raise MacroValidationError("to_slot", f"Unknown meal slot: {to_slot}")
    return _validate_request(
        SwapRequest(
            from_slot=parsed_from,
            to_slot=parsed_to,
            category=_parse_category(category),
            amount_g=amount_g,
        )
    )


def move_macro(
    slots: dict[MealSlot, MacroProfile], request: SwapRequest
) -> dict[MealSlot, MacroProfile]:
    """Return a copy of the slots with the grams and their calories moved.

    Only the swapped category contributes to the calorie change, so each
    slot's calorie figure for its untouched macros is kept as stored.
    """
    field = request.category.field
    delta_kcal = request.amount_g * request.category.kcal_per_gram
    source = slots[request.from_slot]
    target = slots[request.to_slot]
    moved = dict(slots)
    moved[request.from_slot] = replace(
        source,
        **{
            field: round_grams(getattr(source, field) - request.amount_g),
            "calories": round_grams(source.calories - delta_kcal),
        },
    )
    moved[request.to_slot] = replace(
        target,
        **{
            field: round_grams(getattr(target, field) + request.amount_g),
            "calories": round_grams(target.calories + delta_kcal),
        },
    )
    return moved


def raise_for_result(result: SwapResult) -> SwapApplied:
    """Return an applied swap or raise the matching domain error."""
    if isinstance(result, InsufficientAmount):
        raise InsufficientBudgetError(
            {result.category.field: result.shortfall_g},
            f"{result.slot.value} has only {result.available_g}g "
            f"{result.category.value}, {result.requested_g}g requested",
        )
    if isinstance(result, SwapConflict):
        raise ConcurrencyConflict(result.attempts)
    return result


def _validate_request(request: SwapRequest) -> SwapRequest:
    if request.from_slot == request.to_slot:
        raise MacroValidationError("to_slot", "Cannot swap a slot with itself")
    category = _parse_category(request.category)
    amount = round_grams(float(request.amount_g))
    if not math.isfinite(amount) or amount <= 0:
        raise MacroValidationError("amount_g", "Swap amount must be positive")
    return replace(request, category=category, amount_g=amount)


def _parse_category(value: object) -> MacroCategory:
    if isinstance(value, MacroCategory):
        return value
    if isinstance(value, str):
        try:
            return MacroCategory(value.strip().lower())
        except ValueError:
            pass
    raise MacroValidationError("category", f"Unknown macro category: {value}")


def _check_conservation(
    user_id: UUID,
    plan: DayPlan,
    slots: dict[MealSlot, MacroProfile],
    request: SwapRequest,
) -> None:
    before = plan_totals(plan)
    after = plan_totals(replace(plan, slots=slots))
    if macros_match(before, after):
        return
    _logger.error(
        "Swap conservation check failed for %s on %s: request=%s before=%s after=%s",
        user_id,
        plan.day,
        request,
        before,
        after,
    )
    raise ConsistencyError("Swap would change the day's macro totals")
