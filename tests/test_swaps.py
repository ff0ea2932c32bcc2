"""Tests for the swap engine."""

import asyncio
from uuid import uuid4

import pytest

from macro_planner.domain.errors import (
    ConcurrencyConflict,
    ConsistencyError,
    InsufficientBudgetError,
    MacroValidationError,
)
from macro_planner.domain.nutrition import MacroCategory, MacroProfile, MealSlot
from macro_planner.domain.swaps import (
    InsufficientAmount,
    SwapApplied,
    SwapConflict,
    SwapRequest,
)
from macro_planner.services import swaps
from macro_planner.services.swaps import build_swap_request, raise_for_result
from tests.conftest import DAY, STANDARD_TARGETS, build_services, set_plan

_PLAN = {
    MealSlot.BREAKFAST: MacroProfile(calories=290, protein_g=20, fat_g=10, carbs_g=30),
    MealSlot.LUNCH: MacroProfile(calories=415, protein_g=30, fat_g=15, carbs_g=40),
    MealSlot.DINNER: MacroProfile(calories=600, protein_g=45, fat_g=18, carbs_g=60),
    MealSlot.SNACK: MacroProfile(calories=200, protein_g=15, fat_g=6, carbs_g=20),
}


def _protein(from_slot: MealSlot, to_slot: MealSlot, amount_g: float) -> SwapRequest:
    return SwapRequest(
        from_slot=from_slot,
        to_slot=to_slot,
        category=MacroCategory.PROTEIN,
        amount_g=amount_g,
    )


def _total_protein(slots: dict[MealSlot, MacroProfile]) -> float:
    return round(sum(macros.protein_g for macros in slots.values()), 2)


def test_swap_moves_grams_and_conserves_totals() -> None:
    services = build_services()
    user_id = uuid4()
    set_plan(services, user_id, DAY, dict(_PLAN))

    result = asyncio.run(
        services.swap_engine.swap(
            user_id, DAY, _protein(MealSlot.LUNCH, MealSlot.BREAKFAST, 10)
        )
    )

    assert isinstance(result, SwapApplied)
    assert result.to_macros.protein_g == 30
    assert result.from_macros.protein_g == 20
    assert result.to_macros.calories == 330
    assert result.from_macros.calories == 375
    stored = services.plans.plans[(user_id, DAY)]
    assert stored.version == 2
    assert _total_protein(stored.slots) == 110
    assert sum(macros.calories for macros in stored.slots.values()) == 1505
    assert stored.slots[MealSlot.DINNER] == _PLAN[MealSlot.DINNER]
    assert services.plans.swaps == [result.record]


def test_first_swap_persists_the_derived_plan() -> None:
    services = build_services()
    user_id = uuid4()
    services.targets.targets[(user_id, DAY)] = STANDARD_TARGETS
    request = SwapRequest(
        from_slot=MealSlot.DINNER,
        to_slot=MealSlot.SNACK,
        category=MacroCategory.FAT,
        amount_g=4,
    )

    result = asyncio.run(services.swap_engine.swap(user_id, DAY, request))

    assert isinstance(result, SwapApplied)
    stored = services.plans.plans[(user_id, DAY)]
    assert stored.version == 1
    assert set(stored.slots) == set(MealSlot)
    assert stored.slots[MealSlot.SNACK] == MacroProfile(236, 15, 10, 20)
    assert stored.slots[MealSlot.DINNER] == MacroProfile(564, 45, 14, 60)


def test_insufficient_amount_leaves_the_plan_untouched() -> None:
    services = build_services()
    user_id = uuid4()
    set_plan(services, user_id, DAY, dict(_PLAN))

    result = asyncio.run(
        services.swap_engine.swap(
            user_id, DAY, _protein(MealSlot.BREAKFAST, MealSlot.DINNER, 40)
        )
    )

    assert result == InsufficientAmount(
        slot=MealSlot.BREAKFAST,
        category=MacroCategory.PROTEIN,
        available_g=20,
        requested_g=40,
    )
    assert result.shortfall_g == 20
    assert services.ledger.get_plan(user_id, DAY).slots == _PLAN
    assert services.plans.write_attempts == 0
    with pytest.raises(InsufficientBudgetError) as exc_info:
        raise_for_result(result)
    assert exc_info.value.shortfall == {"protein_g": 20}


def test_whole_amount_can_be_moved() -> None:
    services = build_services()
    user_id = uuid4()
    set_plan(services, user_id, DAY, dict(_PLAN))

    result = asyncio.run(
        services.swap_engine.swap(
            user_id, DAY, _protein(MealSlot.BREAKFAST, MealSlot.DINNER, 20)
        )
    )

    assert isinstance(result, SwapApplied)
    assert result.from_macros.protein_g == 0


@pytest.mark.parametrize(
    ("from_slot", "to_slot", "category", "amount_g", "field"),
    [
        ("lunch", "lunch", "protein", 5, "to_slot"),
        ("brunch", "lunch", "protein", 5, "from_slot"),
        ("lunch", "supper", "protein", 5, "to_slot"),
        ("lunch", "dinner", "fiber", 5, "category"),
        ("lunch", "dinner", "carbs", 0, "amount_g"),
        ("lunch", "dinner", "carbs", -3, "amount_g"),
        ("lunch", "dinner", "carbs", 0.001, "amount_g"),
        ("lunch", "dinner", "carbs", float("nan"), "amount_g"),
        ("lunch", "dinner", "carbs", float("inf"), "amount_g"),
    ],
)
def test_build_swap_request_rejects_invalid_input(
    from_slot: str, to_slot: str, category: str, amount_g: float, field: str
) -> None:
    with pytest.raises(MacroValidationError) as exc_info:
        build_swap_request(from_slot, to_slot, category, amount_g)

    assert exc_info.value.field == field


def test_build_swap_request_normalizes_input() -> None:
    request = build_swap_request(" Lunch ", "DINNER", "Carbs", 12.3456)

    assert request == SwapRequest(
        from_slot=MealSlot.LUNCH,
        to_slot=MealSlot.DINNER,
        category=MacroCategory.CARBS,
        amount_g=12.35,
    )


def test_version_conflict_is_retried() -> None:
    services = build_services()
    user_id = uuid4()
    set_plan(services, user_id, DAY, dict(_PLAN))
    services.plans.forced_conflicts = 1

    result = asyncio.run(
        services.swap_engine.swap(
            user_id, DAY, _protein(MealSlot.LUNCH, MealSlot.SNACK, 5)
        )
    )

    assert isinstance(result, SwapApplied)
    assert services.plans.write_attempts == 2


def test_persistent_conflict_returns_swap_conflict() -> None:
    services = build_services(retry_attempts=3)
    user_id = uuid4()
    set_plan(services, user_id, DAY, dict(_PLAN))
    services.plans.forced_conflicts = 10

    result = asyncio.run(
        services.swap_engine.swap(
            user_id, DAY, _protein(MealSlot.LUNCH, MealSlot.SNACK, 5)
        )
    )

    assert result == SwapConflict(attempts=3)
    assert services.plans.write_attempts == 3
    assert services.ledger.get_plan(user_id, DAY).slots == _PLAN
    with pytest.raises(ConcurrencyConflict):
        raise_for_result(result)


def test_conservation_failure_raises_without_writing(monkeypatch) -> None:
    services = build_services()
    user_id = uuid4()
    set_plan(services, user_id, DAY, dict(_PLAN))

    def _leaky_move(slots, request):  # type: ignore[no-untyped-def]
        moved = dict(slots)
        source = slots[request.from_slot]
        moved[request.from_slot] = MacroProfile(
            calories=source.calories,
            protein_g=source.protein_g - request.amount_g,
            fat_g=source.fat_g,
            carbs_g=source.carbs_g,
        )
        return moved

    monkeypatch.setattr(swaps, "move_macro", _leaky_move)

    with pytest.raises(ConsistencyError):
        asyncio.run(
            services.swap_engine.swap(
                user_id, DAY, _protein(MealSlot.LUNCH, MealSlot.SNACK, 5)
            )
        )
    assert services.plans.write_attempts == 0
    assert len(services.locks) == 0


def test_concurrent_swaps_are_serialized() -> None:
    services = build_services()
    user_id = uuid4()
    set_plan(services, user_id, DAY, dict(_PLAN))

    async def _run_both() -> list[object]:
        return await asyncio.gather(
            services.swap_engine.swap(
                user_id, DAY, _protein(MealSlot.LUNCH, MealSlot.BREAKFAST, 15)
            ),
            services.swap_engine.swap(
                user_id, DAY, _protein(MealSlot.LUNCH, MealSlot.SNACK, 15)
            ),
        )

    results = asyncio.run(_run_both())

    assert all(isinstance(result, SwapApplied) for result in results)
    stored = services.plans.plans[(user_id, DAY)]
    assert stored.version == 3
    assert stored.slots[MealSlot.LUNCH].protein_g == 0
    assert _total_protein(stored.slots) == 110
    assert services.plans.write_attempts == 2


def test_swap_status_reports_history_and_balance() -> None:
    services = build_services()
    user_id = uuid4()
    services.targets.targets[(user_id, DAY)] = STANDARD_TARGETS
    engine = services.swap_engine
    asyncio.run(
        engine.swap(user_id, DAY, _protein(MealSlot.LUNCH, MealSlot.BREAKFAST, 10))
    )
    asyncio.run(
        engine.swap(user_id, DAY, _protein(MealSlot.DINNER, MealSlot.SNACK, 5))
    )

    status = engine.get_swap_status(user_id, DAY)

    assert status.swap_count == 2
    assert status.history[0].from_slot == MealSlot.DINNER
    assert status.plan[MealSlot.BREAKFAST].protein_g == 47.5
    assert status.plan_total == MacroProfile(2000, 150, 60, 200)
    assert status.is_balanced


def test_swap_status_flags_a_plan_that_drifted_from_targets() -> None:
    services = build_services()
    user_id = uuid4()
    services.targets.targets[(user_id, DAY)] = STANDARD_TARGETS
    set_plan(services, user_id, DAY, dict(_PLAN))

    status = services.swap_engine.get_swap_status(user_id, DAY)

    assert status.swap_count == 0
    assert not status.is_balanced
