"""Models for meal suggestions produced by the AI backend or the fallback."""

import math
from dataclasses import dataclass, field
from datetime import date

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from macro_planner.domain.ledger import RemainingBudget
from macro_planner.domain.nutrition import MealSlot


class MealSuggestion(BaseModel):
    """Candidate meal that has not been logged."""

    model_config = ConfigDict(
        populate_by_name=True, extra="ignore", frozen=True, allow_inf_nan=False
    )

    name: str = Field(min_length=1)
    description: str = ""
    calories: int = Field(
        ge=0, validation_alias=AliasChoices("calories", "total_calories", "kcal")
    )
    protein_g: float = Field(
        ge=0, validation_alias=AliasChoices("protein_g", "protein", "total_protein")
    )
    carbs_g: float = Field(
        ge=0, validation_alias=AliasChoices("carbs_g", "carbs", "total_carbs")
    )
    fat_g: float = Field(
        ge=0, validation_alias=AliasChoices("fat_g", "fat", "total_fat")
    )
    ingredients: list[str] = Field(default_factory=list)
    instructions: str = ""
    source: str = "ai"
    adjusted: bool = False

    @field_validator("calories", mode="before")
    @classmethod
    def _round_calories_up(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                return value
        if isinstance(value, float) and math.isfinite(value):
            return math.ceil(value)
        return value

    @field_validator("ingredients", mode="before")
    @classmethod
    def _flatten_ingredients(cls, value: object) -> object:
        if not isinstance(value, list):
            return value
        flattened: list[str] = []
        for item in value:
            if isinstance(item, dict):
                name = str(item.get("name") or item.get("item") or "").strip()
                quantity = item.get("quantity")
                unit = item.get("unit") or ""
                if name and quantity is not None:
                    flattened.append(f"{name} {quantity}{unit}".strip())
                elif name:
                    flattened.append(name)
            elif item is not None:
                flattened.append(str(item))
        return flattened

    @field_validator("instructions", mode="before")
    @classmethod
    def _join_instructions(cls, value: object) -> object:
        if isinstance(value, list):
            return "\n".join(str(step) for step in value)
        if value is None:
            return ""
        return value


@dataclass(frozen=True)
class RecommendationSet:
    """One primary and two alternative suggestions for a meal slot."""

    slot: MealSlot
    day: date
    budget: RemainingBudget
    primary: MealSuggestion | None
    alternatives: list[MealSuggestion] = field(default_factory=list)
    source: str = "ai"
    zero_budget: bool = False

    @property
    def targets_default(self) -> bool:
        """True when the budget was derived from default targets."""
        return self.budget.targets_default

    @property
    def members(self) -> list[MealSuggestion]:
        """Primary followed by alternatives."""
        if self.primary is None:
            return list(self.alternatives)
        return [self.primary, *self.alternatives]
