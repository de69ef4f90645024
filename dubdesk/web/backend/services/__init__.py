"""Service layer for the web backend."""

from .session_registry import SessionAccessError, SessionRegistry

__all__ = ["SessionAccessError", "SessionRegistry"]
