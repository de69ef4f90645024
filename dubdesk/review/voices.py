"""
Voice assignment for one dialogue or every dialogue of a character.

Bulk assignment runs sequentially. A failed precondition on the displayed
dialogue aborts the whole batch; failures on other dialogues are counted
and reported in the aggregate result.
"""

import logging
from dataclasses import dataclass, field
from typing import Literal, Optional

from ..errors import RemoteError, ValidationError
from ..models import DialogueRecord, VoiceModel
from .navigator import DialogueNavigator, character_of
from .playback import MediaPlaybackCoordinator
from .sync import RemoteSyncClient, SyncContext

logger = logging.getLogger("dubdesk")

Scope = Literal["current", "all"]


@dataclass
class AssignmentResult:
    """Aggregate outcome of an assignment or removal."""

    total: int = 0
    success: int = 0
    failure: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


def filter_voice_models(
    models: list[VoiceModel],
    gender: str = "all",
    search: str = "",
) -> list[VoiceModel]:
    """Narrow the catalog by gender label and a case-insensitive search term."""
    needle = search.strip().lower()
    result = []
    for model in models:
        if gender != "all" and (model.labels.gender or "").lower() != gender.lower():
            continue
        if needle:
            haystack = " ".join(
                filter(None, [model.name, model.description, model.category, model.labels.accent])
            ).lower()
            if needle not in haystack:
                continue
        result.append(model)
    return result


def converted_output_path(record: DialogueRecord, context: SyncContext, root: str = "") -> str:
    """Storage path for a record's converted take."""
    character = record.speaker.lower()
    return (
        f"{root.rstrip('/')}/{context.database_name}/{context.collection_name}"
        f"/converted_audio/{character}/{record.key}.wav"
    )


class VoiceAssigner:
    """Applies voice selections through the sync client and navigator."""

    def __init__(
        self,
        navigator: DialogueNavigator,
        sync: RemoteSyncClient,
        context: SyncContext,
        editable_statuses: list[str],
        playback: Optional[MediaPlaybackCoordinator] = None,
    ):
        self.navigator = navigator
        self.sync = sync
        self.context = context
        self.editable_statuses = set(editable_statuses)
        self.playback = playback

    def check_preconditions(self, record: DialogueRecord, model: Optional[VoiceModel]) -> None:
        """Raise ValidationError when ``model`` may not be assigned to ``record``.

        Removal (``model is None``) is always allowed.
        """
        if model is None:
            return
        if record.status.value not in self.editable_statuses:
            raise ValidationError(
                f"Cannot assign a voice while dialogue {record.key} is {record.status.value}"
            )
        if not model.is_usable:
            raise ValidationError(f"Voice model {model.name or model.id} requires verification")

    async def _apply(self, record: DialogueRecord, model: Optional[VoiceModel]) -> DialogueRecord:
        if model is None:
            return await self.sync.remove_voice(record, self.context)
        return await self.sync.save(record, {"voiceId": model.id}, self.context)

    async def assign_voice(
        self,
        character: str,
        model: Optional[VoiceModel],
        scope: Scope = "current",
    ) -> AssignmentResult:
        """Assign (or with ``model=None`` remove) a voice.

        Args:
            character: Character whose dialogues are targeted for ``scope='all'``
            model: Voice to assign, or None to remove the current voice
            scope: ``'current'`` for the displayed dialogue, ``'all'`` for the character

        Returns:
            AssignmentResult with per-record accounting

        Raises:
            ValidationError: No dialogue displayed, bad scope, or the displayed
                dialogue fails the precondition check
        """
        if scope not in ("current", "all"):
            raise ValidationError(f"Unknown scope: {scope}")
        current = self.navigator.current_record
        if current is None:
            raise ValidationError("No dialogue is displayed")
        self.check_preconditions(current, model)
        self.context.validate()

        if scope == "current":
            targets = [current]
        else:
            targets = [r for r in self.navigator.records if character_of(r) == character]

        desired = model.id if model else None
        result = AssignmentResult(total=len(targets))
        for record in targets:
            if record.voice_id == desired:
                result.success += 1
                result.skipped += 1
                continue
            try:
                if record.key != current.key:
                    self.check_preconditions(record, model)
                updated = await self._apply(record, model)
            except (ValidationError, RemoteError) as e:
                result.failure += 1
                result.errors.append(f"{record.key}: {e}")
                logger.warning("Voice update failed for %s: %s", record.key, e)
                continue
            self.navigator.replace_record(updated, reset_draft=False)
            result.success += 1

        self.navigator.cache.invalidate(self.navigator.cache_key)
        displayed = self.navigator.current_record
        if displayed is None or displayed.key != current.key:
            self.navigator.jump_to(current.key)
        logger.info(
            "%s voice for %s (%s): %d/%d succeeded, %d failed",
            "Assigned" if model else "Removed",
            character,
            scope,
            result.success,
            result.total,
            result.failure,
        )
        return result

    async def convert_current(self, output_root: str = "") -> DialogueRecord:
        """Convert the displayed dialogue's recorded take with its assigned voice."""
        record = self.navigator.current_record
        if record is None:
            raise ValidationError("No dialogue is displayed")
        if not record.recorded_audio_url:
            raise ValidationError("No recorded audio to convert")
        if not record.voice_id:
            raise ValidationError("No voice assigned to this dialogue")
        if record.status.value not in self.editable_statuses:
            raise ValidationError(f"Cannot convert while dialogue is {record.status.value}")
        if not record.speaker:
            raise ValidationError("Dialogue has no character name")
        self.context.validate()

        output_path = converted_output_path(record, self.context, output_root)
        url = await self.sync.convert_speech(record, record.voice_id, output_path)
        updated = await self.sync.save(record, {"ai_converted_voiceover_url": url}, self.context)

        self.navigator.replace_record(updated, reset_draft=False)
        if self.playback is not None:
            self.playback.expect_conversion(updated.ai_converted_voiceover_url or url)
        logger.info("Converted dialogue %s to %s", record.key, url)
        return updated
