"""
Change detection between an in-memory draft and the last-saved record.

Each review role edits a different slice of a dialogue record. A
``FieldSchema`` names that slice; a ``Draft`` holds the role's editable
values for the record currently on screen. ``has_changes`` is a pure
comparison and is consulted before every navigation and before the
auto-save timer fires.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ..errors import ValidationError
from ..formatters import normalize_time
from ..models import DialogueRecord, ReviewStatus, Role

TIME_FIELDS = ("time_start", "time_end")
BOOL_FIELDS = ("revision_requested", "needs_rerecord")


def read_field(record: DialogueRecord, name: str) -> Any:
    """Read a (possibly dotted) field in its comparable form."""
    if name.startswith("dialogue."):
        return getattr(record.dialogue, name.split(".", 1)[1]) or ""
    if name == "character":
        return record.speaker
    value = getattr(record, name)
    if name in TIME_FIELDS:
        return normalize_time(value)
    if name in BOOL_FIELDS:
        return bool(value)
    return "" if value is None else value


def _normalize(name: str, value: Any) -> Any:
    if name in TIME_FIELDS:
        return normalize_time(value)
    if name in BOOL_FIELDS:
        return bool(value)
    return "" if value is None else value


@dataclass(frozen=True)
class FieldSchema:
    """Which record fields a role may edit, and what status a save sets."""

    name: str
    fields: tuple[str, ...]
    status_on_save: Callable[[dict[str, Any], DialogueRecord], Optional[ReviewStatus]] = (
        lambda values, record: None
    )


def _director_status(values: dict[str, Any], record: DialogueRecord) -> ReviewStatus:
    if values.get("revision_requested"):
        return ReviewStatus.REVISION_REQUESTED
    if values.get("needs_rerecord"):
        return ReviewStatus.NEEDS_RERECORD
    return ReviewStatus.APPROVED


def _voice_over_status(values: dict[str, Any], record: DialogueRecord) -> Optional[ReviewStatus]:
    if values.get("recorded_audio_url"):
        return ReviewStatus.VOICE_OVER_ADDED
    return None


TRANSCRIBER = FieldSchema(
    name="transcriber",
    fields=("character", "dialogue.original", "time_start", "time_end"),
    status_on_save=lambda values, record: ReviewStatus.TRANSCRIBED,
)

TRANSLATOR = FieldSchema(
    name="translator",
    fields=("dialogue.translated",),
    status_on_save=lambda values, record: ReviewStatus.TRANSLATED,
)

VOICE_OVER = FieldSchema(
    name="voice-over",
    fields=("dialogue.adapted", "recorded_audio_url", "voice_over_notes"),
    status_on_save=_voice_over_status,
)

DIRECTOR = FieldSchema(
    name="director",
    fields=("director_notes", "revision_requested", "needs_rerecord"),
    status_on_save=_director_status,
)

SCHEMAS: dict[Role, FieldSchema] = {
    Role.TRANSCRIBER: TRANSCRIBER,
    Role.TRANSLATOR: TRANSLATOR,
    Role.VOICE_OVER: VOICE_OVER,
    Role.DIRECTOR: DIRECTOR,
    Role.SR_DIRECTOR: DIRECTOR,
    Role.ADMIN: DIRECTOR,
}


def schema_for(role: Role) -> FieldSchema:
    return SCHEMAS[role]


@dataclass
class Draft:
    """Editable values for one record, owned by the navigator until saved."""

    record_key: str
    schema: FieldSchema
    values: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: DialogueRecord, schema: FieldSchema) -> "Draft":
        return cls(
            record_key=record.key,
            schema=schema,
            values={name: read_field(record, name) for name in schema.fields},
        )

    def set(self, name: str, value: Any) -> None:
        """Edit one field. Last write wins."""
        if name not in self.values:
            raise ValidationError(f"Field {name!r} is not editable by {self.schema.name}")
        self.values[name] = _normalize(name, value)

    def get(self, name: str) -> Any:
        return self.values[name]

    def apply_to(self, record: DialogueRecord) -> DialogueRecord:
        return apply_draft(record, self)


def has_changes(draft: Optional[Draft], original: Optional[DialogueRecord]) -> bool:
    """True when any editable field differs from the saved record."""
    if draft is None or original is None:
        return False
    return any(
        value != read_field(original, name)
        for name, value in draft.values.items()
    )


def _wire_names(name: str) -> tuple[str, ...]:
    if name.startswith("dialogue."):
        return ("dialogue",)
    if name == "character":
        return ("character", "characterName")
    alias = DialogueRecord.model_fields[name].alias
    return (alias or name,)


def build_patch(record: DialogueRecord, draft: Draft) -> dict[str, Any]:
    """Wire-named body for saving ``draft`` over ``record``."""
    document = apply_draft(record, draft).to_document()
    patch = {"status": document["status"]}
    for name in draft.values:
        for wire in _wire_names(name):
            patch[wire] = document[wire]
    return patch


def apply_draft(record: DialogueRecord, draft: Draft) -> DialogueRecord:
    """Return a copy of ``record`` with the draft applied and status updated."""
    updated = record.model_copy(deep=True)
    for name, value in draft.values.items():
        if name.startswith("dialogue."):
            setattr(updated.dialogue, name.split(".", 1)[1], value)
        elif name == "character":
            updated.character = value
            updated.character_name = value
        else:
            setattr(updated, name, value)

    status = draft.schema.status_on_save(draft.values, record)
    if status is not None:
        updated.status = status
    return updated
