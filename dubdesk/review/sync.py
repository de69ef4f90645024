"""Remote sync client for the persistence, voice catalog and storage APIs.

Every call is a single attempt. Failures surface as ``RemoteError`` with the
server's ``error`` text when one is provided, so callers can show it as-is.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

import httpx

from ..errors import AssetTimeoutError, RemoteError, ValidationError
from ..models import DialogueRecord, ReviewStatus, VoiceModel

logger = logging.getLogger("dubdesk")


@dataclass
class SyncContext:
    """Routing context the persistence API needs on every write."""

    project_id: str
    database_name: str
    collection_name: str

    def validate(self) -> None:
        missing = [
            name for name in ("project_id", "database_name", "collection_name")
            if not getattr(self, name)
        ]
        if missing:
            raise ValidationError(f"Missing required context: {', '.join(missing)}")

    def as_params(self) -> dict[str, str]:
        return {
            "projectId": self.project_id,
            "databaseName": self.database_name,
            "collectionName": self.collection_name,
        }


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        payload = response.json()
    except ValueError:
        return default
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return default


def _check_payload(payload: Any, default: str) -> None:
    """Raise for ``{error}`` / ``{ok: false}`` / ``{success: false}`` bodies."""
    if not isinstance(payload, dict):
        return
    if payload.get("error") or payload.get("ok") is False or payload.get("success") is False:
        raise RemoteError(str(payload.get("error") or default))


def _routing(record: DialogueRecord, context: SyncContext) -> dict[str, Any]:
    """Context params plus the scene number taken from the dialogue number."""
    params = context.as_params()
    parts = record.key.split(".")
    if len(parts) >= 3:
        params["sceneNumber"] = parts[2]
    return params


class RemoteSyncClient:
    """Async client for dialogue persistence and voice conversion.

    Pass ``client`` to reuse an existing ``httpx.AsyncClient`` (tests hand in
    one backed by ``httpx.MockTransport``). Otherwise a client is opened per
    call.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    async def _request(self, method: str, url: str, default_error: str, **kwargs: Any) -> Any:
        try:
            async with self._session() as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise RemoteError(f"{default_error}: {e}") from e

        if response.is_error:
            message = _error_message(response, default_error)
            logger.warning("%s %s returned %s: %s", method, url, response.status_code, message)
            raise RemoteError(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteError(f"{default_error}: invalid response body") from e
        _check_payload(payload, default_error)
        return payload

    async def save(
        self,
        record: DialogueRecord,
        patch: dict[str, Any],
        context: SyncContext,
    ) -> DialogueRecord:
        """Persist a partial update to one dialogue.

        Args:
            record: The record being saved (supplies the key)
            patch: Wire-named fields to update
            context: Project routing context

        Returns:
            The canonical record returned by the server

        Raises:
            ValidationError: Missing context or record key; nothing was sent
            RemoteError: Transport failure, non-2xx, or an error payload
        """
        context.validate()
        if not record.key:
            raise ValidationError("Dialogue record has no identifier")

        body = {**patch, **_routing(record, context)}
        payload = await self._request(
            "PATCH",
            f"{self.base_url}/dialogues/{record.key}",
            "Failed to save",
            json=body,
        )
        logger.info("Saved dialogue %s", record.key)

        if isinstance(payload, dict):
            # "dialogue" is also the text field of a bare record document
            for doc in (payload.get("dialogue"), payload.get("data"), payload):
                if isinstance(doc, dict) and (doc.get("dialogNumber") or doc.get("_id")):
                    return DialogueRecord.from_document(doc)
        # Server echoed nothing usable: treat what we sent as canonical
        return DialogueRecord.from_document({**record.to_document(), **patch})

    async def remove_voice(self, record: DialogueRecord, context: SyncContext) -> DialogueRecord:
        """Clear the voice assignment and converted audio of one dialogue."""
        context.validate()
        if not record.key:
            raise ValidationError("Dialogue record has no identifier")

        await self._request(
            "DELETE",
            f"{self.base_url}/dialogues/remove-voice/{record.key}",
            "Failed to remove voice",
            params=context.as_params(),
        )
        logger.info("Removed voice from dialogue %s", record.key)
        return record.model_copy(update={"voice_id": None, "ai_converted_voiceover_url": None})

    async def delete_recording(self, record: DialogueRecord, context: SyncContext) -> DialogueRecord:
        """Delete the voice-over take and reset the dialogue to pending.

        Raises:
            ValidationError: Missing context or record key; nothing was sent
            RemoteError: Transport failure, error payload, or no record echoed back
        """
        context.validate()
        if not record.key:
            raise ValidationError("Dialogue record has no identifier")

        payload = await self._request(
            "PATCH",
            f"{self.base_url}/dialogues/{record.key}",
            "Failed to delete recording",
            json={"deleteVoiceOver": True, **_routing(record, context)},
        )
        if not isinstance(payload, dict) or not (payload.get("_id") or payload.get("dialogNumber")):
            raise RemoteError("Failed to delete recording: Invalid response")
        logger.info("Deleted recording of dialogue %s", record.key)

        doc = {k: v for k, v in payload.items() if k != "deleteVoiceOver"}
        saved = DialogueRecord.from_document(doc)
        return saved.model_copy(update={"recorded_audio_url": None, "status": ReviewStatus.PENDING})

    async def fetch_voice_models(self) -> list[VoiceModel]:
        """Fetch the voice catalog. Accepts a bare list or ``{success, models}``."""
        payload = await self._request("GET", f"{self.base_url}/voice-models", "Failed to fetch voice models")
        if isinstance(payload, dict):
            payload = payload.get("models", [])
        return [VoiceModel.model_validate(m) for m in payload or []]

    async def convert_speech(
        self,
        record: DialogueRecord,
        voice_id: str,
        output_path: str,
    ) -> str:
        """Request speech-to-speech conversion of the recorded take.

        Returns:
            The converted audio URL (or ``output_path`` if none was returned)
        """
        payload = await self._request(
            "POST",
            f"{self.base_url}/voice-models/speech-to-speech",
            "Failed to convert speech",
            json={
                "voiceId": voice_id,
                "recordedAudioUrl": record.recorded_audio_url,
                "dialogueNumber": record.key,
                "characterName": record.speaker,
                "outputPath": output_path,
            },
        )
        if not isinstance(payload, dict) or not payload.get("success"):
            raise RemoteError("Failed to convert speech")
        logger.info("Converted speech for dialogue %s", record.key)
        return payload.get("convertedAudioUrl") or output_path

    async def asset_exists(self, url: str) -> bool:
        """HEAD the asset; True only on 200."""
        try:
            async with self._session() as client:
                response = await client.head(url)
        except httpx.HTTPError as e:
            logger.debug("HEAD %s failed: %s", url, e)
            return False
        return response.status_code == 200

    async def poll_for_asset(
        self,
        url: str,
        max_attempts: int = 30,
        interval: float = 2.0,
    ) -> str:
        """Poll until the asset exists.

        Raises:
            AssetTimeoutError: If it is still missing after ``max_attempts``
        """
        for attempt in range(1, max_attempts + 1):
            if await self.asset_exists(url):
                logger.debug("Asset %s available after %d attempt(s)", url, attempt)
                return url
            if attempt < max_attempts:
                await asyncio.sleep(interval)

        raise AssetTimeoutError(
            f"Asset not available after {max_attempts} attempts: {url}"
        )
