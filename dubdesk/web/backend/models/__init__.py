"""Pydantic models for API requests and responses."""

from .requests import (
    AssignVoiceRequest,
    EditDraftRequest,
    JumpRequest,
    OpenSessionRequest,
    PlaybackRequest,
    SaveRequest,
    SelectCharacterRequest,
    SetFilterRequest,
)
from .responses import (
    AssignmentResponse,
    CharacterResponse,
    NavigatorResponse,
    NoticeResponse,
    PlaybackResponse,
    SessionResponse,
)

__all__ = [
    # Requests
    "AssignVoiceRequest",
    "EditDraftRequest",
    "JumpRequest",
    "OpenSessionRequest",
    "PlaybackRequest",
    "SaveRequest",
    "SelectCharacterRequest",
    "SetFilterRequest",
    # Responses
    "AssignmentResponse",
    "CharacterResponse",
    "NavigatorResponse",
    "NoticeResponse",
    "PlaybackResponse",
    "SessionResponse",
]
