"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import WebConfig
from .dependencies import get_config, get_session_registry
from .routers import sessions_router, voice_models_router

logger = logging.getLogger("dubdesk")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    yield

    # Shutdown
    registry = app.dependency_overrides.get(get_session_registry, get_session_registry)()
    logger.info("Closing %d open session(s)", len(registry))
    registry.shutdown()


def create_app(config: WebConfig | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Optional configuration. Uses defaults if not provided.

    Returns:
        The FastAPI application.
    """
    if config is None:
        config = get_config()

    app = FastAPI(
        title="dubdesk API",
        description="Dialogue review sessions for the localization pipeline",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(sessions_router, prefix="/api/v1")
    app.include_router(voice_models_router, prefix="/api/v1")

    @app.get("/health")
    def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    return app
