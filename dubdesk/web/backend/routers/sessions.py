"""Review session router."""

from fastapi import APIRouter, HTTPException, status

from ....errors import AssetTimeoutError, RemoteError, ReviewError
from ....models import UserSession
from ....review import ReviewSession, SyncContext
from ..dependencies import SessionRegistryDep
from ..models.requests import (
    AssignVoiceRequest,
    EditDraftRequest,
    JumpRequest,
    OpenSessionRequest,
    PlaybackRequest,
    SaveRequest,
    SelectCharacterRequest,
    SetFilterRequest,
)
from ..models.responses import AssignmentResponse, SessionResponse
from ..services.session_registry import SessionAccessError

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _http_error(e: ReviewError) -> HTTPException:
    if isinstance(e, AssetTimeoutError):
        code = status.HTTP_504_GATEWAY_TIMEOUT
    elif isinstance(e, RemoteError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(e))


def _get_session(registry: SessionRegistryDep, session_id: str) -> ReviewSession:
    try:
        return registry.get(session_id)
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session not found: {session_id}",
        )


def _respond(session_id: str, session: ReviewSession) -> SessionResponse:
    return SessionResponse.from_view(session_id, session.view())


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def open_session(request: OpenSessionRequest, registry: SessionRegistryDep) -> SessionResponse:
    """Open a review session."""
    try:
        session_id, session = registry.open(
            user=UserSession(username=request.username, role=request.role),
            context=SyncContext(request.project_id, request.database_name, request.collection_name),
            dialogues=request.dialogues,
            project=request.project,
        )
    except SessionAccessError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ReviewError as e:
        raise _http_error(e)
    return _respond(session_id, session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    registry: SessionRegistryDep,
    search: str = "",
) -> SessionResponse:
    """Get the combined view of a session."""
    session = _get_session(registry, session_id)
    return SessionResponse.from_view(session_id, session.view(character_search=search))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(session_id: str, registry: SessionRegistryDep) -> None:
    """Close a session, cancelling its timers."""
    _get_session(registry, session_id)
    registry.close(session_id)


@router.post("/{session_id}/next", response_model=SessionResponse)
async def next_dialogue(session_id: str, registry: SessionRegistryDep) -> SessionResponse:
    """Move to the next dialogue (deferred when there are unsaved changes)."""
    session = _get_session(registry, session_id)
    session.next()
    return _respond(session_id, session)


@router.post("/{session_id}/previous", response_model=SessionResponse)
async def previous_dialogue(session_id: str, registry: SessionRegistryDep) -> SessionResponse:
    """Move to the previous dialogue (deferred when there are unsaved changes)."""
    session = _get_session(registry, session_id)
    session.previous()
    return _respond(session_id, session)


@router.post("/{session_id}/discard", response_model=SessionResponse)
async def discard_changes(session_id: str, registry: SessionRegistryDep) -> SessionResponse:
    """Drop the draft and any deferred move."""
    session = _get_session(registry, session_id)
    session.discard_changes()
    return _respond(session_id, session)


@router.post("/{session_id}/jump", response_model=SessionResponse)
async def jump_to_dialogue(
    session_id: str,
    request: JumpRequest,
    registry: SessionRegistryDep,
) -> SessionResponse:
    """Display a dialogue by its key."""
    session = _get_session(registry, session_id)
    if not session.jump_to(request.key):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Dialogue not in current view: {request.key}",
        )
    return _respond(session_id, session)


@router.post("/{session_id}/character", response_model=SessionResponse)
async def select_character(
    session_id: str,
    request: SelectCharacterRequest,
    registry: SessionRegistryDep,
) -> SessionResponse:
    """Show one character's dialogues, or everyone's when name is null."""
    session = _get_session(registry, session_id)
    session.select_character(request.name)
    return _respond(session_id, session)


@router.post("/{session_id}/filter", response_model=SessionResponse)
async def set_filter(
    session_id: str,
    request: SetFilterRequest,
    registry: SessionRegistryDep,
) -> SessionResponse:
    """Apply a status filter."""
    session = _get_session(registry, session_id)
    session.set_filter(request.filter)
    return _respond(session_id, session)


@router.patch("/{session_id}/draft", response_model=SessionResponse)
async def edit_draft(
    session_id: str,
    request: EditDraftRequest,
    registry: SessionRegistryDep,
) -> SessionResponse:
    """Edit draft fields and restart the auto-save countdown."""
    session = _get_session(registry, session_id)
    try:
        for name, value in request.fields.items():
            session.edit(name, value)
    except ReviewError as e:
        raise _http_error(e)
    return _respond(session_id, session)


@router.post("/{session_id}/save", response_model=SessionResponse)
async def save_dialogue(
    session_id: str,
    request: SaveRequest,
    registry: SessionRegistryDep,
) -> SessionResponse:
    """Save the draft. Failures are reported in the session notice."""
    session = _get_session(registry, session_id)
    await session.save_current(advance=request.advance)
    return _respond(session_id, session)


@router.post("/{session_id}/playback", response_model=SessionResponse)
async def toggle_playback(
    session_id: str,
    request: PlaybackRequest,
    registry: SessionRegistryDep,
) -> SessionResponse:
    """Start or stop a playback mode."""
    session = _get_session(registry, session_id)
    await session.toggle_playback(request.mode)
    return _respond(session_id, session)


@router.post("/{session_id}/voice", response_model=AssignmentResponse)
async def assign_voice(
    session_id: str,
    request: AssignVoiceRequest,
    registry: SessionRegistryDep,
) -> AssignmentResponse:
    """Assign or remove a voice for the displayed dialogue or the whole character."""
    session = _get_session(registry, session_id)

    model = None
    try:
        if request.voice_id is not None:
            models = await session.sync.fetch_voice_models()
            model = next((m for m in models if m.id == request.voice_id), None)
            if model is None:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Voice model not found: {request.voice_id}",
                )
        result = await session.assign_voice(request.character, model, request.scope)
    except ReviewError as e:
        raise _http_error(e)

    return AssignmentResponse.from_result(result, _respond(session_id, session))


@router.post("/{session_id}/convert", response_model=SessionResponse)
async def convert_voice(session_id: str, registry: SessionRegistryDep) -> SessionResponse:
    """Convert the displayed take with its assigned voice."""
    session = _get_session(registry, session_id)
    try:
        await session.convert_voice()
    except ReviewError as e:
        raise _http_error(e)
    return _respond(session_id, session)


@router.delete("/{session_id}/recording", response_model=SessionResponse)
async def delete_recording(session_id: str, registry: SessionRegistryDep) -> SessionResponse:
    """Delete the displayed voice-over take. Failures are reported in the session notice."""
    session = _get_session(registry, session_id)
    await session.delete_recording()
    return _respond(session_id, session)
