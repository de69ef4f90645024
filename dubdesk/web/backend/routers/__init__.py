"""API routers for the web backend."""

from .sessions import router as sessions_router
from .voice_models import router as voice_models_router

__all__ = [
    "sessions_router",
    "voice_models_router",
]
