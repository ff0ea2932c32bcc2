"""Request models and response serializers for the planner API."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from macro_planner.domain.ledger import DailySummary, RemainingBudget
from macro_planner.domain.meals import LoggedMeal
from macro_planner.domain.models import DailyTargets
from macro_planner.domain.nutrition import MacroProfile, MealSlot
from macro_planner.domain.suggestions import MealSuggestion, RecommendationSet
from macro_planner.domain.swaps import SwapApplied, SwapRecord, SwapStatus


class DayRequest(BaseModel):
    """Body carrying an optional local day."""

    model_config = ConfigDict(populate_by_name=True)

    day: date | None = Field(default=None, alias="date")


class RecommendRequest(DayRequest):
    """Request suggestions for one meal slot."""

    meal_type: str


class SwapBody(DayRequest):
    """Move grams of one macro between two slots."""

    from_slot: str
    to_slot: str
    category: str
    amount_g: float = Field(gt=0, allow_inf_nan=False)


class LogMealRequest(BaseModel):
    """A meal the user has eaten."""

    slot: str
    name: str = ""
    calories: float = Field(allow_inf_nan=False)
    protein_g: float = Field(allow_inf_nan=False)
    carbs_g: float = Field(allow_inf_nan=False)
    fat_g: float = Field(allow_inf_nan=False)
    logged_at: datetime | None = None


def macros_to_dict(macros: MacroProfile) -> dict[str, float]:
    return {
        "calories": macros.calories,
        "protein_g": macros.protein_g,
        "carbs_g": macros.carbs_g,
        "fat_g": macros.fat_g,
    }


def budget_to_dict(budget: RemainingBudget) -> dict[str, object]:
    return {
        "slot": budget.slot.value,
        **macros_to_dict(budget.remaining),
        "target": macros_to_dict(budget.target),
        "consumed": macros_to_dict(budget.consumed),
        "targets_default": budget.targets_default,
    }


def remaining_to_dict(
    day: date, remaining: dict[MealSlot, RemainingBudget]
) -> dict[str, object]:
    return {
        "date": day.isoformat(),
        "slots": {
            slot.value: budget_to_dict(budget) for slot, budget in remaining.items()
        },
    }


def summary_to_dict(summary: DailySummary) -> dict[str, object]:
    return {
        "date": summary.day.isoformat(),
        "target": macros_to_dict(summary.target),
        "consumed": macros_to_dict(summary.consumed),
        "remaining": macros_to_dict(summary.remaining),
        "targets_default": summary.targets_default,
    }


def targets_to_dict(day: date, targets: DailyTargets) -> dict[str, object]:
    return {
        "date": day.isoformat(),
        "calories": targets.calories,
        "protein_g": targets.protein_g,
        "carbs_g": targets.carbs_g,
        "fat_g": targets.fat_g,
        "is_default": targets.is_default,
    }


def suggestion_to_dict(suggestion: MealSuggestion) -> dict[str, object]:
    return suggestion.model_dump()


def recommendation_to_dict(result: RecommendationSet) -> dict[str, object]:
    return {
        "date": result.day.isoformat(),
        "meal_type": result.slot.value,
        "budget": budget_to_dict(result.budget),
        "primary": suggestion_to_dict(result.primary) if result.primary else None,
        "alternatives": [suggestion_to_dict(item) for item in result.alternatives],
        "source": result.source,
        "zero_budget": result.zero_budget,
        "targets_default": result.targets_default,
    }


def day_recommendations_to_dict(
    day: date, results: dict[MealSlot, RecommendationSet]
) -> dict[str, object]:
    return {
        "date": day.isoformat(),
        "slots": {
            slot.value: recommendation_to_dict(result)
            for slot, result in results.items()
        },
    }


def swap_record_to_dict(record: SwapRecord) -> dict[str, object]:
    return {
        "id": str(record.id),
        "date": record.day.isoformat(),
        "from_slot": record.from_slot.value,
        "to_slot": record.to_slot.value,
        "category": record.category.value,
        "amount_g": record.amount_g,
        "created_at": record.created_at.isoformat(),
    }


def swap_applied_to_dict(result: SwapApplied) -> dict[str, object]:
    return {
        "from_slot": {
            "slot": result.from_slot.value,
            **macros_to_dict(result.from_macros),
        },
        "to_slot": {"slot": result.to_slot.value, **macros_to_dict(result.to_macros)},
        "swap": swap_record_to_dict(result.record),
    }


def swap_status_to_dict(status: SwapStatus) -> dict[str, object]:
    return {
        "date": status.day.isoformat(),
        "swap_count": status.swap_count,
        "history": [swap_record_to_dict(record) for record in status.history],
        "plan": {
            slot.value: macros_to_dict(macros) for slot, macros in status.plan.items()
        },
        "target": macros_to_dict(status.target),
        "plan_total": macros_to_dict(status.plan_total),
        "is_balanced": status.is_balanced,
    }


def meal_to_dict(meal: LoggedMeal) -> dict[str, object]:
    return {
        "id": str(meal.id),
        "slot": meal.slot.value,
        "name": meal.name,
        "calories": meal.calories,
        "protein_g": meal.protein_g,
        "carbs_g": meal.carbs_g,
        "fat_g": meal.fat_g,
        "logged_at": meal.logged_at.isoformat(),
    }
