"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from calorie_tracker.api.foods import router as foods_router
from calorie_tracker.api.users import router as users_router
from calorie_tracker.app_logging import configure_logging
from calorie_tracker.containers import AppContainer
from calorie_tracker.services.barcode import (
    FoodValidationError,
    InvalidBarcodeError,
    ProductNotFoundError,
)
from calorie_tracker.services.meals import MealNotFoundError, MealValidationError
from calorie_tracker.services.profiles import ProfileValidationError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(users_router)
    app.include_router(foods_router)

    @app.exception_handler(ProfileValidationError)
    @app.exception_handler(MealValidationError)
    @app.exception_handler(InvalidBarcodeError)
    @app.exception_handler(FoodValidationError)
    async def invalid_input(request: Request, exc: ValueError) -> JSONResponse:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc)},
        )

    @app.exception_handler(ProductNotFoundError)
    @app.exception_handler(MealNotFoundError)
    async def not_found(request: Request, exc: LookupError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
