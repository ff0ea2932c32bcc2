"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from macro_planner.api.planner import router as planner_router
from macro_planner.app_logging import configure_logging
from macro_planner.containers import AppContainer
from macro_planner.domain.errors import (
    ConcurrencyConflict,
    ConsistencyError,
    InsufficientBudgetError,
    MacroValidationError,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(planner_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.exception_handler(MacroValidationError)
    async def validation_error(
        request: Request, exc: MacroValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": "validation_error",
                "field": exc.field,
                "detail": exc.message,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = first.get("loc") or ()
        return JSONResponse(
            status_code=422,
            content={
                "error": "validation_error",
                "field": str(location[-1]) if location else None,
                "detail": first.get("msg", "Invalid request"),
            },
        )

    @app.exception_handler(InsufficientBudgetError)
    async def insufficient_budget(
        request: Request, exc: InsufficientBudgetError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "error": "insufficient_budget",
                "shortfall": exc.shortfall,
                "detail": exc.message,
            },
        )

    @app.exception_handler(ConcurrencyConflict)
    async def concurrency_conflict(
        request: Request, exc: ConcurrencyConflict
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "conflict", "retryable": True, "detail": str(exc)},
        )

    @app.exception_handler(ConsistencyError)
    async def consistency_error(
        request: Request, exc: ConsistencyError
    ) -> JSONResponse:
        logger.error("Consistency check failed on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "consistency_error", "detail": "Internal error"},
        )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "internal_error"},
        )

    return app
