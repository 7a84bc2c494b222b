from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from workhub.app import App
from workhub.config import Config
from workhub.errors import RetryableConflictError, StatisticsUpdateError, UserError
from workhub.web.error_handlers import (
    general_exception_handler,
    request_validation_error_handler,
    retryable_conflict_handler,
    statistics_update_error_handler,
    user_error_handler,
)
from workhub.web.openapi import set_custom_openapi
from workhub.web.routers import (
    buildings_router,
    cities_router,
    dashboard_router,
    metadata_router,
    orders_router,
    services_router,
    spaces_router,
)


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        # Store app instance and config in app state
        app.state.app = app_instance
        app.state.config = config
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="WorkHub API",
        lifespan=lifespan,
        openapi_tags=[],  # Tags will be added by custom OpenAPI function
    )

    # Add CORS middleware for frontend development
    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Health check endpoint (at root level, not versioned)
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    # API v1 routes
    app.include_router(cities_router, prefix="/api/v1")
    app.include_router(buildings_router, prefix="/api/v1")
    app.include_router(spaces_router, prefix="/api/v1")
    app.include_router(services_router, prefix="/api/v1")
    app.include_router(orders_router, prefix="/api/v1")
    app.include_router(dashboard_router, prefix="/api/v1")
    app.include_router(metadata_router, prefix="/api/v1")

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(RetryableConflictError, retryable_conflict_handler)
    app.add_exception_handler(StatisticsUpdateError, statistics_update_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
