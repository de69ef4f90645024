"""Voice catalog router."""

from fastapi import APIRouter, HTTPException, status

from ....errors import RemoteError
from ....models import VoiceModel
from ....review import filter_voice_models
from ..dependencies import SyncClientDep

router = APIRouter(prefix="/voice-models", tags=["voice-models"])


@router.get("", response_model=list[VoiceModel])
async def list_voice_models(
    sync: SyncClientDep,
    gender: str = "all",
    search: str = "",
) -> list[VoiceModel]:
    """List catalog voices, optionally filtered by gender and search term."""
    try:
        models = await sync.fetch_voice_models()
    except RemoteError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return filter_voice_models(models, gender=gender, search=search)
