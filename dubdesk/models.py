"""
Core data models shared by the review engine and the web shell.

Includes models for:
- Dialogue records and their text variants
- Episodes with per-stage pipeline steps
- Projects and their user assignments
- Voice catalog entries
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ValidationError
from .formatters import get_number_value


# ============================================================================
# STATUS VOCABULARIES
# ============================================================================


class ReviewStatus(str, Enum):
    """Workflow status of a dialogue record across review roles."""

    PENDING = "pending"
    APPROVED = "approved"
    REVISION_REQUESTED = "revision-requested"
    NEEDS_RERECORD = "needs-rerecord"
    VOICE_OVER_ADDED = "voice-over-added"
    TRANSCRIBED = "transcribed"
    TRANSLATED = "translated"
    ADAPTED = "adapted"


class StepStatus(str, Enum):
    """Status of one pipeline step on an episode."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class StepName(str, Enum):
    """Pipeline stages, in execution order."""

    AUDIO_EXTRACTION = "audioExtraction"
    TRANSCRIPTION = "transcription"
    VIDEO_CLIPS = "videoClips"
    TRANSLATION = "translation"
    VOICE_ASSIGNMENT = "voiceAssignment"
    VOICE_CONVERSION = "step6"
    AUDIO_MERGE = "step7"
    FINAL_VIDEO = "step8"


class Role(str, Enum):
    """Dashboard roles. Each view implies one role."""

    ADMIN = "admin"
    TRANSCRIBER = "transcriber"
    TRANSLATOR = "translator"
    VOICE_OVER = "voice-over"
    DIRECTOR = "director"
    SR_DIRECTOR = "srDirector"


# ============================================================================
# DIALOGUE MODELS
# ============================================================================


def _unwrap_id(value: Any) -> Any:
    if isinstance(value, dict) and "$oid" in value:
        return value["$oid"]
    return value


class DialogueText(BaseModel):
    """The three independently editable text variants of a line."""

    original: str = ""
    translated: str = ""
    adapted: str = ""

    @field_validator("original", "translated", "adapted", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else value


class DialogueRecord(BaseModel):
    """
    One spoken line within an episode.

    Field names follow Python conventions; the camelCase aliases are the
    wire names used by the persistence API. Unknown fields are preserved so
    that a round trip through the review engine never drops server data.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None, alias="_id")
    dialog_number: Optional[str] = Field(default=None, alias="dialogNumber")
    subtitle_index: int = Field(default=0, alias="subtitleIndex")

    time_start: str | float = Field(default="", alias="timeStart")
    time_end: str | float = Field(default="", alias="timeEnd")

    character: str = ""
    character_name: str = Field(default="", alias="characterName")
    dialogue: DialogueText = Field(default_factory=DialogueText)

    video_url: Optional[str] = Field(default=None, alias="videoUrl")
    recorded_audio_url: Optional[str] = Field(default=None, alias="recordedAudioUrl")
    ai_converted_voiceover_url: Optional[str] = None

    status: ReviewStatus = ReviewStatus.PENDING
    revision_requested: bool = Field(default=False, alias="revisionRequested")
    needs_rerecord: bool = Field(default=False, alias="needsReRecord")
    voice_id: Optional[str] = Field(default=None, alias="voiceId")

    director_notes: str = Field(default="", alias="directorNotes")
    voice_over_notes: str = Field(default="", alias="voiceOverNotes")

    @field_validator("id", "dialog_number", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        value = _unwrap_id(value)
        return None if value is None else str(value)

    @field_validator("dialogue", mode="before")
    @classmethod
    def _default_dialogue(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("character", "character_name", "director_notes", "voice_over_notes", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else value

    @field_validator("time_start", "time_end", mode="before")
    @classmethod
    def _unwrap_time(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, dict):
            return get_number_value(value)
        return value

    @field_validator("subtitle_index", mode="before")
    @classmethod
    def _unwrap_index(cls, value: Any) -> Any:
        if value is None:
            return 0
        if isinstance(value, dict):
            return int(get_number_value(value))
        return value

    @property
    def key(self) -> str:
        """Stable identity: the composite dialogue number, else the document id."""
        return self.dialog_number or self.id or ""

    @property
    def speaker(self) -> str:
        """Grouping key for per-character views."""
        return self.character or self.character_name

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "DialogueRecord":
        """
        Adapt a raw stage document into a record.

        Fills ``character`` from ``characterName`` and ``videoUrl`` from
        ``videoClipUrl`` and derives the revision/rerecord flags from status.
        Raises ValidationError for unknown statuses, badly typed fields or a
        non-mapping input.
        """
        if not isinstance(doc, dict):
            raise ValidationError(f"Malformed dialogue record: {doc!r}")

        data = dict(doc)
        data.setdefault("character", data.get("characterName") or "")
        data.setdefault("characterName", data.get("character") or "")
        if not data.get("videoUrl") and data.get("videoClipUrl"):
            data["videoUrl"] = data["videoClipUrl"]
        if not data.get("status"):
            data["status"] = ReviewStatus.PENDING.value

        status = data["status"]
        if status not in {s.value for s in ReviewStatus}:
            raise ValidationError(f"Unknown dialogue status: {status}")

        data["revisionRequested"] = bool(data.get("revisionRequested")) or status == ReviewStatus.REVISION_REQUESTED.value
        data["needsReRecord"] = bool(data.get("needsReRecord")) or status == ReviewStatus.NEEDS_RERECORD.value

        try:
            return cls.model_validate(data)
        except pydantic.ValidationError as e:
            key = data.get("dialogNumber") or "?"
            raise ValidationError(f"Malformed dialogue record {key}: {e.errors()[0]['msg']}") from e

    def to_document(self) -> dict[str, Any]:
        """Serialize with wire aliases."""
        return self.model_dump(by_alias=True, mode="json")


def sort_records(records: list[DialogueRecord]) -> list[DialogueRecord]:
    """Order records by subtitle index (stable for ties)."""
    return sorted(records, key=lambda r: r.subtitle_index)


class DialogueNumber(BaseModel):
    """Parsed composite dialogue number ``project.episode.scene.line``."""

    project: str
    episode: str
    scene: str
    line: str


def parse_dialogue_number(value: str) -> DialogueNumber:
    """Split a ``1.2.3.4`` dialogue number; anything else is a ValidationError."""
    parts = (value or "").split(".")
    if len(parts) != 4 or not all(parts):
        raise ValidationError(
            f"Invalid dialogue number {value!r}. Expected project.episode.scene.line"
        )
    return DialogueNumber(project=parts[0], episode=parts[1], scene=parts[2], line=parts[3])


# ============================================================================
# PIPELINE MODELS
# ============================================================================


class StepState(BaseModel):
    """State of one pipeline step. Stage-specific payload is kept as extras."""

    model_config = ConfigDict(extra="allow")

    status: StepStatus = StepStatus.PENDING
    error: Optional[str] = None
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class Episode(BaseModel):
    """A named unit of work within a project."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None, alias="_id")
    name: str
    collection_name: str = Field(default="", alias="collectionName")
    status: str = "uploaded"
    steps: dict[StepName, StepState] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        value = _unwrap_id(value)
        return None if value is None else str(value)

    def step(self, name: StepName) -> StepState:
        """Get a step, creating a pending one if absent."""
        if name not in self.steps:
            self.steps[name] = StepState()
        return self.steps[name]


class Assignment(BaseModel):
    """A user granted a role on a project."""

    username: str
    role: str


class Project(BaseModel):
    """A container of episodes plus role assignments."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None, alias="_id")
    title: str = ""
    database_name: str = Field(default="", alias="databaseName")
    source_language: str = Field(default="", alias="sourceLanguage")
    target_language: str = Field(default="", alias="targetLanguage")
    assigned_to: list[Assignment] = Field(default_factory=list, alias="assignedTo")
    episodes: list[Episode] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        value = _unwrap_id(value)
        return None if value is None else str(value)


class UserSession(BaseModel):
    """The signed-in user as seen by a view."""

    username: str
    role: Role


# ============================================================================
# VOICE CATALOG
# ============================================================================


class VoiceLabels(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    gender: Optional[str] = None
    accent: Optional[str] = None
    age: Optional[str] = None
    description: Optional[str] = None
    use_case: Optional[str] = Field(default=None, alias="useCase")


class VoiceVerification(BaseModel):
    required: bool = False
    verified: bool = False


class VoiceModel(BaseModel):
    """An external voice catalog entry. Used only as a selection value."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    name: str = ""
    category: str = ""
    description: str = ""
    labels: VoiceLabels = Field(default_factory=VoiceLabels)
    verification: VoiceVerification = Field(default_factory=VoiceVerification)
    preview_url: Optional[str] = Field(default=None, alias="previewUrl")

    @field_validator("labels", "verification", mode="before")
    @classmethod
    def _default_nested(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def is_usable(self) -> bool:
        """False when the model requires verification it has not passed."""
        return not (self.verification.required and not self.verification.verified)
