"""Pydantic response models for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from ....review import AssignmentResult, SessionView


class NavigatorResponse(BaseModel):
    """Navigator state for rendering the review screen."""

    current_record: dict[str, Any] | None
    index: int
    total: int
    can_go_next: bool
    can_go_previous: bool
    confirmation_required: bool
    empty: bool
    draft: dict[str, Any]
    has_changes: bool
    selected_character: str | None
    filter: str
    message: str | None = None


class PlaybackResponse(BaseModel):
    mode: str
    media_error: str | None
    controls_enabled: bool
    has_recorded: bool
    has_converted: bool


class NoticeResponse(BaseModel):
    kind: str
    text: str


class CharacterResponse(BaseModel):
    name: str
    count: int


class SessionResponse(BaseModel):
    """Combined view of a review session."""

    session_id: str
    navigator: NavigatorResponse
    playback: PlaybackResponse
    notice: NoticeResponse | None = None
    autosave_pending: bool = False
    status_counts: dict[str, int] = Field(default_factory=dict)
    max_recording_seconds: float = 3.0
    characters: list[CharacterResponse] = Field(default_factory=list)

    @classmethod
    def from_view(cls, session_id: str, view: SessionView) -> "SessionResponse":
        nav = view.navigator
        return cls(
            session_id=session_id,
            navigator=NavigatorResponse(
                current_record=nav.current_record.to_document() if nav.current_record else None,
                index=nav.index,
                total=nav.total,
                can_go_next=nav.can_go_next,
                can_go_previous=nav.can_go_previous,
                confirmation_required=nav.confirmation_required,
                empty=nav.empty,
                draft=nav.draft,
                has_changes=nav.has_changes,
                selected_character=nav.selected_character,
                filter=nav.filter.value,
                message=nav.message,
            ),
            playback=PlaybackResponse(
                mode=view.playback.mode.value,
                media_error=view.playback.media_error,
                controls_enabled=view.playback.controls_enabled,
                has_recorded=view.playback.has_recorded,
                has_converted=view.playback.has_converted,
            ),
            notice=NoticeResponse(kind=view.notice.kind, text=view.notice.text) if view.notice else None,
            autosave_pending=view.autosave_pending,
            status_counts=view.status_counts,
            max_recording_seconds=view.max_recording_seconds,
            characters=[CharacterResponse(name=c.name, count=c.count) for c in view.characters],
        )


class AssignmentResponse(BaseModel):
    """Outcome of a voice assignment plus the refreshed session view."""

    total: int
    success: int
    failure: int
    skipped: int
    errors: list[str]
    session: SessionResponse

    @classmethod
    def from_result(cls, result: AssignmentResult, session: SessionResponse) -> "AssignmentResponse":
        return cls(
            total=result.total,
            success=result.success,
            failure=result.failure,
            skipped=result.skipped,
            errors=result.errors,
            session=session,
        )
