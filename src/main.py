"""Main application entry point for the restaurant ordering service.

This module provides the FastAPI application factory and configuration
for running the service locally or in a container.
"""

import logging
import os

from fastapi import FastAPI

from restaurant_ordering_service.config import Settings
from restaurant_ordering_service.context import AppContext
from restaurant_ordering_service.handlers.api_handler import create_app
from restaurant_ordering_service.observability import configure_logging, setup_observability

logger = logging.getLogger(__name__)


def create_application(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Reads settings from the environment
    2. Configures logging
    3. Builds the application context (DynamoDB, repositories, services)
    4. Creates the FastAPI app
    5. Sets up observability

    Args:
        settings: Settings to use instead of reading the environment

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or Settings.from_env()

    configure_logging(settings.log_level)
    logger.info("Initializing restaurant ordering service...")

    context = AppContext.from_settings(settings)
    app = create_app(context)

    if settings.enable_otel:
        setup_observability(settings, app)

    logger.info(
        f"Restaurant ordering service initialized - environment: {settings.environment}"
    )
    return app


# Building the app connects to DynamoDB, so skip it during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()

    logger.info(f"Starting development server on {settings.host}:{settings.port}")
    logger.info(f"API documentation available at http://{settings.host}:{settings.port}/docs")

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
