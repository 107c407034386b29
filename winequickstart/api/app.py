"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from winequickstart.api.routes import router
from winequickstart.config import Settings, get_settings
from winequickstart.core.database import Database
from winequickstart.core.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, *, database: Database | None = None) -> FastAPI:
    """Create the app around an explicit settings object and database."""
    resolved_settings = settings or get_settings()
    resolved_database = database or Database(resolved_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging()
        logger.info(
            "Starting Wine Quickstart API",
            extra={
                "environment": resolved_settings.environment,
                "version": resolved_settings.app_version,
                "telegram_enabled": resolved_settings.telegram_enabled,
            },
        )
        yield
        logger.info("Shutting down Wine Quickstart API")
        await resolved_database.close()

    app = FastAPI(
        title=f"{resolved_settings.app_name} Operations API",
        version=resolved_settings.app_version,
        docs_url="/docs" if resolved_settings.debug else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = resolved_settings
    app.state.database = resolved_database
    app.include_router(router, prefix="/api")

    @app.get("/health", summary="Health check")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "version": resolved_settings.app_version}

    return app
