"""Planner API endpoints with shared-token auth."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from macro_planner.api.schemas import (
    DayRequest,
    LogMealRequest,
    RecommendRequest,
    SwapBody,
    day_recommendations_to_dict,
    meal_to_dict,
    recommendation_to_dict,
    remaining_to_dict,
    summary_to_dict,
    swap_applied_to_dict,
    swap_status_to_dict,
    targets_to_dict,
)
from macro_planner.domain.errors import MacroValidationError
from macro_planner.domain.nutrition import MacroProfile, MealSlot, parse_slot
from macro_planner.services.clock import today
from macro_planner.services.swaps import build_swap_request, raise_for_result

if TYPE_CHECKING:
    from macro_planner.containers import AppContainer

router = APIRouter(tags=["planner"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


async def require_user(
    request: Request,
    x_api_token: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
) -> UUID:
    """Check the shared token and return the caller's user id."""
    container = _container(request)
    if not x_api_token or x_api_token != container.settings.api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    try:
        return UUID(x_user_id or "")
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from None


async def rate_limited_user(
    request: Request, user_id: UUID = Depends(require_user)
) -> UUID:
    """Count the request against the user's rate limit."""
    if not _container(request).rate_limiter.check_and_increment(str(user_id)):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS)
    return user_id


def _resolve_day(container: AppContainer, user_id: UUID, day: date | None) -> date:
    if day is not None:
        return day
    return today(container.profile_service.get_timezone(user_id))


def _require_slot(value: str, field: str) -> MealSlot:
    slot = parse_slot(value)
    if slot is None:
        raise MacroValidationError(field, f"Unknown meal slot: {value}")
    return slot


@router.get("/remaining")
async def remaining(
    request: Request,
    user_id: UUID = Depends(rate_limited_user),
    day: date | None = Query(default=None, alias="date"),
) -> dict[str, object]:
    """Return the remaining budget for every slot of the day."""
    container = _container(request)
    resolved = _resolve_day(container, user_id, day)
    return remaining_to_dict(
        resolved, container.ledger.get_remaining(user_id, resolved)
    )


@router.get("/summary")
async def summary(
    request: Request,
    user_id: UUID = Depends(rate_limited_user),
    day: date | None = Query(default=None, alias="date"),
) -> dict[str, object]:
    """Return the day's target, consumed and remaining totals."""
    container = _container(request)
    resolved = _resolve_day(container, user_id, day)
    return summary_to_dict(container.ledger.get_daily_totals(user_id, resolved))


@router.get("/targets")
async def targets(
    request: Request,
    user_id: UUID = Depends(rate_limited_user),
    day: date | None = Query(default=None, alias="date"),
) -> dict[str, object]:
    """Return the day's calorie and macro targets."""
    container = _container(request)
    resolved = _resolve_day(container, user_id, day)
    return targets_to_dict(
        resolved, container.targets_service.get_targets(user_id, resolved)
    )


@router.post("/targets/refresh")
async def refresh_targets(
    body: DayRequest,
    request: Request,
    user_id: UUID = Depends(rate_limited_user),
) -> dict[str, object]:
    """Recompute the day's targets from the profile and store them."""
    container = _container(request)
    resolved = _resolve_day(container, user_id, body.day)
    return targets_to_dict(
        resolved, container.targets_service.refresh_targets(user_id, resolved)
    )


@router.post("/recommend")
async def recommend(
    body: RecommendRequest,
    request: Request,
    user_id: UUID = Depends(rate_limited_user),
) -> dict[str, object]:
    """Return one primary and two alternative meal suggestions."""
    container = _container(request)
    slot = _require_slot(body.meal_type, "meal_type")
    resolved = _resolve_day(container, user_id, body.day)
    result = await container.suggestion_generator.recommend(user_id, resolved, slot)
    return recommendation_to_dict(result)


@router.post("/recommend/day")
async def recommend_day(
    body: DayRequest,
    request: Request,
    user_id: UUID = Depends(rate_limited_user),
) -> dict[str, object]:
    """Return suggestions for every meal slot of the day."""
    container = _container(request)
    resolved = _resolve_day(container, user_id, body.day)
    results = await container.suggestion_generator.recommend_day(user_id, resolved)
    return day_recommendations_to_dict(resolved, results)


@router.post("/swap")
async def swap(
    body: SwapBody,
    request: Request,
    user_id: UUID = Depends(rate_limited_user),
) -> dict[str, object]:
    """Move grams of one macro from one slot to another."""
    container = _container(request)
    swap_request = build_swap_request(
        body.from_slot, body.to_slot, body.category, body.amount_g
    )
    resolved = _resolve_day(container, user_id, body.day)
    result = await container.swap_engine.swap(user_id, resolved, swap_request)
    return swap_applied_to_dict(raise_for_result(result))


@router.get("/swap-status")
async def swap_status(
    request: Request,
    user_id: UUID = Depends(rate_limited_user),
    day: date | None = Query(default=None, alias="date"),
) -> dict[str, object]:
    """Return the day's swap history and plan balance."""
    container = _container(request)
    resolved = _resolve_day(container, user_id, day)
    return swap_status_to_dict(container.swap_engine.get_swap_status(user_id, resolved))


@router.post("/meals", status_code=status.HTTP_201_CREATED)
async def log_meal(
    body: LogMealRequest,
    request: Request,
    user_id: UUID = Depends(rate_limited_user),
) -> dict[str, object]:
    """Record an eaten meal against a slot."""
    container = _container(request)
    slot = _require_slot(body.slot, "slot")
    meal = await container.meal_log_service.log_meal(
        user_id,
        slot,
        body.name,
        MacroProfile(
            calories=body.calories,
            protein_g=body.protein_g,
            fat_g=body.fat_g,
            carbs_g=body.carbs_g,
        ),
        logged_at=body.logged_at,
    )
    return meal_to_dict(meal)


@router.get("/meals")
async def list_meals(
    request: Request,
    user_id: UUID = Depends(rate_limited_user),
    day: date | None = Query(default=None, alias="date"),
) -> dict[str, object]:
    """Return the meals logged on a day."""
    container = _container(request)
    resolved = _resolve_day(container, user_id, day)
    meals = container.meal_log_service.list_meals(user_id, resolved)
    return {"date": resolved.isoformat(), "meals": [meal_to_dict(m) for m in meals]}


@router.delete("/meals/{meal_id}")
async def delete_meal(
    meal_id: UUID,
    request: Request,
    user_id: UUID = Depends(rate_limited_user),
) -> dict[str, str]:
    """Delete one of the user's logged meals."""
    container = _container(request)
    if not await container.meal_log_service.delete_meal(user_id, meal_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"status": "deleted"}
