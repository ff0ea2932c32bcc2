"""Meal suggestions that never exceed the slot's remaining budget."""

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from pydantic import ValidationError

from macro_planner.domain.errors import (
    ConsistencyError,
    InsufficientBudgetError,
    UpstreamAIError,
)
from macro_planner.domain.ledger import RemainingBudget
from macro_planner.domain.models import UserProfile
from macro_planner.domain.nutrition import MealSlot
from macro_planner.domain.suggestions import MealSuggestion, RecommendationSet
from macro_planner.services.ai import TextGenerationService
from macro_planner.services.fallback import fallback_suggestions
from macro_planner.services.ledger import MacroLedger
from macro_planner.services.profiles import ProfileService
from macro_planner.services.validator import scale_to_budget, validate

SUGGESTION_COUNT = 3

_logger = logging.getLogger(__name__)


@dataclass
class SuggestionGenerator:
    """Generate AI suggestions, then gate them through the budget validator."""

    ledger: MacroLedger
    profile_service: ProfileService
    text_service: TextGenerationService

    async def recommend(
        self, user_id: UUID, day: date, slot: MealSlot
    ) -> RecommendationSet:
        """Return one primary and two alternative suggestions for a slot."""
        budget = self.ledger.get_remaining_for_slot(user_id, day, slot)
        if budget.calories <= 0:
            return _empty_set(slot, day, budget, zero_budget=True)

        profile = self.profile_service.get_profile(user_id)
        restrictions = profile.dietary_restrictions
        # raises InsufficientBudgetError when a macro is already exhausted
        fallbacks = fallback_suggestions(budget, day, restrictions)

        prompt = build_prompt(slot, budget, profile)
        try:
            raw = await self.text_service.generate(prompt)
        except UpstreamAIError as exc:
            _logger.warning(
                "Using fallback suggestions for %s %s %s: %s", user_id, day, slot, exc
            )
            return _build_set(slot, day, budget, fallbacks, source="fallback")

        accepted = _accept_suggestions(parse_suggestions(raw), budget)
        if not accepted:
            _logger.warning(
                "No AI suggestion fit the budget for %s %s %s", user_id, day, slot
            )
            return _build_set(slot, day, budget, fallbacks, source="fallback")

        members = accepted[:SUGGESTION_COUNT]
        source = "ai"
        if len(members) < SUGGESTION_COUNT:
            members.extend(fallbacks[: SUGGESTION_COUNT - len(members)])
            source = "mixed"
        return _build_set(slot, day, budget, members, source=source)

    async def recommend_day(
        self, user_id: UUID, day: date
    ) -> dict[MealSlot, RecommendationSet]:
        """Return recommendations for every slot of the day.

        A slot with an exhausted macro gets an empty set instead of failing
        the whole day.
        """
        results = await asyncio.gather(
            *(self._recommend_or_empty(user_id, day, slot) for slot in MealSlot)
        )
        return dict(zip(MealSlot, results, strict=True))

    async def _recommend_or_empty(
        self, user_id: UUID, day: date, slot: MealSlot
    ) -> RecommendationSet:
        try:
            return await self.recommend(user_id, day, slot)
        except InsufficientBudgetError as exc:
            _logger.info("No suggestions for %s %s %s: %s", user_id, day, slot, exc)
            budget = self.ledger.get_remaining_for_slot(user_id, day, slot)
            return _empty_set(slot, day, budget, zero_budget=False)


def build_prompt(slot: MealSlot, budget: RemainingBudget, profile: UserProfile) -> str:
    """Build the suggestion prompt with the budget stated as a hard ceiling."""
    restrictions = ", ".join(profile.dietary_restrictions) or "None"
    cuisines = ", ".join(profile.preferred_cuisines) or "Any"
    lines = [
        f"Suggest {SUGGESTION_COUNT} {slot.value} meals: "
        "1 primary and 2 alternatives.",
        "",
        "Meal limits (hard ceilings):",
        f"- Calories: {_limit(budget.calories)} kcal",
        f"- Protein: {_limit(budget.protein_g)} g",
        f"- Carbs: {_limit(budget.carbs_g)} g",
        f"- Fat: {_limit(budget.fat_g)} g",
        "ALL values must be <= meal limits, no exceptions.",
        "",
        f"Dietary restrictions: {restrictions}",
        f"Preferred cuisines: {cuisines}",
        f"Goal: {profile.goal or 'Not set'}",
    ]
    if budget.targets_default:
        lines.append(
            "The limits come from generic default targets because the user's "
            "profile is incomplete; do not assume anything about their body."
        )
    lines.extend(
        [
            "",
            "Respond ONLY with JSON, no markdown:",
            '{"primary": {...}, "alternatives": [{...}, {...}]}',
            "Each meal: "
            '{"name": str, "description": str, "calories": int, '
            '"protein_g": number, "carbs_g": number, "fat_g": number, '
            '"ingredients": [str], "instructions": str}',
        ]
    )
    return "\n".join(lines)


def parse_suggestions(raw: str) -> list[MealSuggestion]:
    """Extract meal suggestions from free text; invalid entries are dropped."""
    payload = extract_json(raw)
    if payload is None:
        return []
    suggestions = []
    for entry in _candidate_entries(payload):
        try:
            suggestions.append(MealSuggestion.model_validate({**entry, "source": "ai"}))
        except ValidationError as exc:
            _logger.info("Dropping malformed AI suggestion: %s", exc.error_count())
    return suggestions


def extract_json(raw: str) -> object | None:
    """Return the first well-formed JSON object or array in the text."""
    decoder = json.JSONDecoder()
    for index, char in enumerate(raw):
        if char not in "{[":
            continue
        try:
            value, _ = decoder.raw_decode(raw, index)
        except json.JSONDecodeError:
            continue
        if isinstance(value, dict | list):
            return value
    return None


def _candidate_entries(payload: object) -> list[dict[str, object]]:
    if isinstance(payload, list):
        return [entry for entry in payload if isinstance(entry, dict)]
    if not isinstance(payload, dict):
        return []
    if "primary" in payload or "alternatives" in payload:
        entries: list[object] = [payload.get("primary")]
        alternatives = payload.get("alternatives")
        if isinstance(alternatives, list):
            entries.extend(alternatives)
        return [entry for entry in entries if isinstance(entry, dict)]
    for key in ("suggestions", "meals", "options"):
        nested = payload.get(key)
        if isinstance(nested, list):
            return [entry for entry in nested if isinstance(entry, dict)]
    return [payload]


def _accept_suggestions(
    suggestions: list[MealSuggestion], budget: RemainingBudget
) -> list[MealSuggestion]:
    accepted = []
    for suggestion in suggestions:
        check = validate(suggestion, budget)
        if check.ok:
            accepted.append(suggestion)
            continue
        # Kept only after one proportional scale-down; flagged as adjusted.
        scaled = scale_to_budget(suggestion, check, budget)
        if scaled is not None:
            _logger.info(
                "Scaled AI suggestion %r to fit %s",
                suggestion.name,
                check.violated_macros,
            )
            accepted.append(scaled)
        else:
            _logger.info(
                "Discarded AI suggestion %r over budget on %s",
                suggestion.name,
                check.violated_macros,
            )
    return accepted


def _build_set(
    slot: MealSlot,
    day: date,
    budget: RemainingBudget,
    members: list[MealSuggestion],
    *,
    source: str,
) -> RecommendationSet:
    for member in members:
        if not validate(member, budget).ok:
            raise ConsistencyError(f"Suggestion {member.name!r} exceeds {slot} budget")
    return RecommendationSet(
        slot=slot,
        day=day,
        budget=budget,
        primary=members[0],
        alternatives=members[1:SUGGESTION_COUNT],
        source=source,
    )


def _empty_set(
    slot: MealSlot, day: date, budget: RemainingBudget, *, zero_budget: bool
) -> RecommendationSet:
    return RecommendationSet(
        slot=slot,
        day=day,
        budget=budget,
        primary=None,
        alternatives=[],
        source="none",
        zero_budget=zero_budget,
    )


def _limit(value: float) -> str:
    return f"{value:g}"
