"""Pydantic request models for API endpoints."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from ....models import Role
from ....review import DialogueFilter, PlaybackMode


class OpenSessionRequest(BaseModel):
    """Request to open a review session over an episode's dialogues."""

    project_id: str = Field(..., min_length=1, description="Project identifier")
    database_name: str = Field(..., min_length=1, description="Project database name")
    collection_name: str = Field(..., min_length=1, description="Episode collection name")
    username: str = Field(..., min_length=1, description="Signed-in user")
    role: Role = Field(..., description="Role implied by the view")
    dialogues: list[dict[str, Any]] = Field(default_factory=list, description="Raw dialogue documents")
    project: dict[str, Any] | None = Field(
        default=None,
        description="Project document; when given, the user must be assigned to it",
    )


class EditDraftRequest(BaseModel):
    """Edit one or more draft fields of the displayed dialogue."""

    fields: dict[str, Any] = Field(..., min_length=1, description="Field name to new value")


class SaveRequest(BaseModel):
    """Save the displayed draft."""

    advance: bool | None = Field(default=None, description="Move to the next dialogue after saving")


class JumpRequest(BaseModel):
    key: str = Field(..., min_length=1, description="Dialogue number or id")


class SelectCharacterRequest(BaseModel):
    name: str | None = Field(default=None, description="Character to show; null shows everyone")


class SetFilterRequest(BaseModel):
    filter: DialogueFilter


class PlaybackRequest(BaseModel):
    mode: PlaybackMode


class AssignVoiceRequest(BaseModel):
    """Assign a voice, or remove it when ``voice_id`` is null."""

    character: str = Field(..., description="Character whose dialogues are targeted")
    voice_id: str | None = Field(default=None, description="Voice model id; null removes")
    scope: Literal["current", "all"] = "current"
