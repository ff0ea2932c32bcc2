"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from macro_planner.adapters.openai_text_client import OpenAITextClient
from macro_planner.adapters.supabase_meal_log_repository import (
    SupabaseMealLogRepository,
)
from macro_planner.adapters.supabase_meal_plan_repository import (
    SupabaseMealPlanRepository,
)
from macro_planner.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from macro_planner.adapters.supabase_targets_repository import (
    SupabaseTargetsRepository,
)
from macro_planner.config import Settings, parse_model_list
from macro_planner.services.ai import TextGenerationService
from macro_planner.services.allocation import SlotAllocation
from macro_planner.services.ledger import MacroLedger
from macro_planner.services.locks import DayLocks
from macro_planner.services.meals import MealLogService
from macro_planner.services.profiles import ProfileService
from macro_planner.services.rate_limit import InMemoryRateLimiter, RateLimiter
from macro_planner.services.suggestions import SuggestionGenerator
from macro_planner.services.swaps import SwapEngine
from macro_planner.services.targets import TargetsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    profile_service: ProfileService
    targets_service: TargetsService
    meal_log_service: MealLogService
    ledger: MacroLedger
    suggestion_generator: SuggestionGenerator
    swap_engine: SwapEngine
    rate_limiter: RateLimiter
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    profile_service = ProfileService(SupabaseProfileRepository(supabase_client))
    targets_service = TargetsService(
        repository=SupabaseTargetsRepository(supabase_client),
        profile_service=profile_service,
    )
    locks = DayLocks()
    meal_log_service = MealLogService(
        repository=SupabaseMealLogRepository(supabase_client),
        profile_service=profile_service,
        locks=locks,
    )
    plan_repository = SupabaseMealPlanRepository(supabase_client)
    ledger = MacroLedger(
        targets_service=targets_service,
        meal_log_service=meal_log_service,
        plan_repository=plan_repository,
        allocation=SlotAllocation.from_settings(resolved_settings),
    )
    openai_client = OpenAITextClient.create(
        resolved_settings.openai_api_key,
        timeout_seconds=resolved_settings.ai_timeout_seconds,
        store=resolved_settings.openai_store,
    )
    text_service = TextGenerationService(
        client=openai_client,
        models=parse_model_list(
            resolved_settings.openai_model, resolved_settings.openai_model_fallbacks
        ),
        timeout_seconds=resolved_settings.ai_timeout_seconds,
    )
    suggestion_generator = SuggestionGenerator(
        ledger=ledger,
        profile_service=profile_service,
        text_service=text_service,
    )
    swap_engine = SwapEngine(
        ledger=ledger,
        plan_repository=plan_repository,
        locks=locks,
        retry_attempts=resolved_settings.swap_retry_attempts,
    )
    rate_limiter = InMemoryRateLimiter(
        max_requests=resolved_settings.rate_limit_requests,
        window_seconds=resolved_settings.rate_limit_window_seconds,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        profile_service=profile_service,
        targets_service=targets_service,
        meal_log_service=meal_log_service,
        ledger=ledger,
        suggestion_generator=suggestion_generator,
        swap_engine=swap_engine,
        rate_limiter=rate_limiter,
        close_resources=close_resources,
    )
