"""
Review session: one user's review view over one episode.

Wires the navigator, sync client, shared cache, auto-save timer, playback
coordinator and notices together, and owns the save pipeline.

Save pipeline:
    validate → issue token → remote save → apply if token is still latest
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from ..config import Config
from ..errors import RemoteError, ValidationError
from ..formatters import calculate_duration
from ..models import DialogueRecord, UserSession, VoiceModel
from .autosave import AutoSaveScheduler
from .cache import QueryCache, dialogues_key
from .changes import FieldSchema, build_patch
from .navigator import CharacterSummary, DialogueFilter, DialogueNavigator, NavigatorView
from .notices import Notice, Notices
from .playback import HeadlessMediaElement, MediaPlaybackCoordinator, PlaybackMode, PlaybackView
from .sync import RemoteSyncClient, SyncContext
from .voices import AssignmentResult, Scope, VoiceAssigner

logger = logging.getLogger("dubdesk")

DEFAULT_RECORDING_SECONDS = 3.0


def _media(record: Optional[DialogueRecord]) -> Optional[tuple]:
    if record is None:
        return None
    return (record.video_url, record.recorded_audio_url, record.ai_converted_voiceover_url)


@dataclass
class SessionView:
    """Everything a UI shell needs to render the review screen."""

    navigator: NavigatorView
    playback: PlaybackView
    notice: Optional[Notice]
    autosave_pending: bool
    status_counts: dict[str, int]
    max_recording_seconds: float = DEFAULT_RECORDING_SECONDS
    characters: list[CharacterSummary] = field(default_factory=list)


class ReviewSession:
    """Coordinates a single review view and its save pipeline."""

    def __init__(
        self,
        navigator: DialogueNavigator,
        sync: RemoteSyncClient,
        context: SyncContext,
        playback: MediaPlaybackCoordinator,
        config: Config,
        notices: Optional[Notices] = None,
    ):
        self.navigator = navigator
        self.sync = sync
        self.context = context
        self.playback = playback
        self.config = config
        self.notices = notices or Notices(
            error_seconds=config.review.notice_seconds,
            success_seconds=config.review.success_notice_seconds,
        )
        self.voices = VoiceAssigner(
            navigator,
            sync,
            context,
            config.voices.editable_statuses,
            playback=playback,
        )
        self.scheduler = AutoSaveScheduler(
            config.review.autosave_delay_seconds,
            should_save=navigator.has_changes,
            save=self._autosave,
        )
        self._tokens: dict[str, int] = {}
        self._counter = itertools.count(1)
        self.playback.load(navigator.current_record)

    @classmethod
    def create(
        cls,
        records: list[DialogueRecord],
        user: UserSession,
        context: SyncContext,
        config: Config,
        sync: RemoteSyncClient,
        cache: QueryCache,
        schema: Optional[FieldSchema] = None,
    ) -> "ReviewSession":
        """Build a session with headless media elements."""
        context.validate()
        navigator = DialogueNavigator(
            records,
            session=lambda: user,
            cache=cache,
            cache_key=dialogues_key(context.project_id),
            schema=schema,
        )
        playback = MediaPlaybackCoordinator(
            HeadlessMediaElement(),
            HeadlessMediaElement(),
            HeadlessMediaElement(),
            sync,
            poll_max_attempts=config.playback.poll_max_attempts,
            poll_interval=config.playback.poll_interval_seconds,
            storage_base_url=config.playback.storage_base_url,
        )
        return cls(navigator, sync, context, playback, config)

    # =========================================================================
    # Navigation
    # =========================================================================

    def _displayed_changed(self, before: Optional[DialogueRecord]) -> None:
        after = self.navigator.current_record
        before_key = before.key if before else None
        after_key = after.key if after else None
        if before_key != after_key:
            self.scheduler.cancel()
            self.playback.load(after)
        elif _media(before) != _media(after):
            self.playback.load(after)

    def next(self) -> bool:
        before = self.navigator.current_record
        moved = self.navigator.next()
        self._displayed_changed(before)
        return moved

    def previous(self) -> bool:
        before = self.navigator.current_record
        moved = self.navigator.previous()
        self._displayed_changed(before)
        return moved

    def jump_to(self, key: str) -> bool:
        before = self.navigator.current_record
        found = self.navigator.jump_to(key)
        self._displayed_changed(before)
        return found

    def select_character(self, name: Optional[str]) -> None:
        before = self.navigator.current_record
        if name is None:
            self.navigator.clear_character()
        else:
            self.navigator.select_character(name)
        self._displayed_changed(before)

    def set_filter(self, name: DialogueFilter | str) -> None:
        before = self.navigator.current_record
        self.navigator.set_filter(name)
        self._displayed_changed(before)

    # =========================================================================
    # Editing and saving
    # =========================================================================

    def edit(self, name: str, value: Any) -> bool:
        """Edit a draft field and restart the auto-save countdown."""
        changed = self.navigator.edit(name, value)
        self.scheduler.touch()
        return changed

    def discard_changes(self) -> None:
        self.navigator.discard_changes()
        self.scheduler.cancel()

    async def _autosave(self) -> None:
        await self.save_current(advance=False)

    async def save_current(self, advance: Optional[bool] = None) -> Optional[DialogueRecord]:
        """Save the displayed draft.

        Returns the canonical record, or None when validation failed, the
        remote call failed, or a newer save for the same record superseded
        this one. Failures are reported through ``notices``.
        """
        if advance is None:
            advance = self.config.review.advance_after_save

        record = self.navigator.current_record
        draft = self.navigator.draft
        try:
            if record is None or draft is None:
                raise ValidationError("No dialogue is displayed")
            if not record.key:
                raise ValidationError("Dialogue record has no identifier")
            self.context.validate()
        except ValidationError as e:
            self.notices.error(str(e))
            return None

        token = next(self._counter)
        self._tokens[record.key] = token
        snapshot = dict(draft.values)
        patch = build_patch(record, draft)

        try:
            saved = await self.sync.save(record, patch, self.context)
        except RemoteError as e:
            self.scheduler.cancel()
            self.notices.error(e.message)
            logger.warning("Save failed for %s: %s", record.key, e.message)
            return None

        if self._tokens.get(record.key) != token:
            logger.debug("Discarding stale save response for %s", record.key)
            return None

        current = self.navigator.draft
        untouched = current is not None and current.record_key == record.key and current.values == snapshot
        if untouched:
            self.scheduler.cancel()
        before = self.navigator.current_record
        self.navigator.replace_record(saved, reset_draft=untouched)
        self.notices.success("Changes saved")

        if self.navigator.confirmation_required:
            self.navigator.confirm_and_continue()
        elif advance and before is not None and before.key == saved.key and not self.navigator.has_changes():
            self.navigator.next()
        self._displayed_changed(before)
        return saved

    # =========================================================================
    # Playback and voices
    # =========================================================================

    async def toggle_playback(self, mode: PlaybackMode | str) -> PlaybackMode:
        return await self.playback.toggle(mode)

    async def assign_voice(
        self,
        character: str,
        model: Optional[VoiceModel],
        scope: Scope = "current",
    ) -> AssignmentResult:
        before = self.navigator.current_record
        result = await self.voices.assign_voice(character, model, scope)
        self._displayed_changed(before)
        if result.failure:
            self.notices.error(f"{result.failure} of {result.total} dialogues failed")
        else:
            self.notices.success(f"Updated {result.success} dialogues")
        return result

    async def delete_recording(self) -> Optional[DialogueRecord]:
        """Delete the displayed voice-over take and reset the dialogue to pending.

        Unsaved edits to other fields stay in the draft. Failures are
        reported through ``notices``.
        """
        record = self.navigator.current_record
        if record is None:
            self.notices.error("No dialogue is displayed")
            return None
        try:
            updated = await self.sync.delete_recording(record, self.context)
        except (ValidationError, RemoteError) as e:
            self.notices.error("Failed to delete recording")
            logger.warning("Deleting recording failed for %s: %s", record.key, e)
            return None

        self.navigator.replace_record(updated, reset_draft=False)
        draft = self.navigator.draft
        if draft is not None and draft.record_key == updated.key and "recorded_audio_url" in draft.values:
            draft.set("recorded_audio_url", None)
        self.navigator.cache.invalidate(self.navigator.cache_key)
        self.notices.success("Recording deleted")
        self._displayed_changed(record)
        return updated

    async def convert_voice(self) -> Optional[DialogueRecord]:
        """Convert the displayed take with its assigned voice.

        Precondition failures raise ValidationError; remote failures are
        reported through ``notices``.
        """
        try:
            updated = await self.voices.convert_current(self.config.voices.output_root)
        except RemoteError as e:
            self.notices.error(e.message)
            return None
        self.notices.success("Voice conversion started")
        return updated

    # =========================================================================
    # Lifecycle and rendering
    # =========================================================================

    def close(self) -> None:
        """Unmount: stop timers and detach media listeners."""
        self.scheduler.close()
        self.playback.close()

    def max_recording_seconds(self) -> float:
        """Recording limit for the displayed dialogue: its time span, else 3 seconds."""
        record = self.navigator.current_record
        if record is None:
            return DEFAULT_RECORDING_SECONDS
        duration = calculate_duration(record.time_start, record.time_end)
        return duration if duration > 0 else DEFAULT_RECORDING_SECONDS

    def view(self, character_search: str = "") -> SessionView:
        return SessionView(
            navigator=self.navigator.view(),
            playback=self.playback.view(),
            notice=self.notices.current(),
            autosave_pending=self.scheduler.pending,
            status_counts=self.navigator.status_counts(),
            characters=self.navigator.characters(character_search),
            max_recording_seconds=self.max_recording_seconds(),
        )
