"""
Media playback coordination for one video and two optional audio takes.

Modes are mutually exclusive. Playing with an external take mutes the
video's own audio, rewinds both elements and starts them together; when the
take ends the video is unmuted and the coordinator returns to IDLE.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Protocol

from ..errors import MediaError, RemoteError
from ..models import DialogueRecord
from .sync import RemoteSyncClient

logger = logging.getLogger("dubdesk")

EndedListener = Callable[[], None]


class PlaybackMode(str, Enum):
    IDLE = "idle"
    PLAYING_NATIVE = "playing-native"
    PLAYING_WITH_RECORDED = "playing-with-recorded"
    PLAYING_WITH_CONVERTED = "playing-with-converted"


class MediaElement(Protocol):
    """The subset of a media element the coordinator drives."""

    src: Optional[str]
    muted: bool
    current_time: float

    async def play(self) -> None: ...

    def pause(self) -> None: ...

    def add_ended_listener(self, listener: EndedListener) -> None: ...

    def remove_ended_listener(self, listener: EndedListener) -> None: ...


@dataclass
class HeadlessMediaElement:
    """In-process media element. Tracks state without decoding anything."""

    src: Optional[str] = None
    muted: bool = False
    current_time: float = 0.0
    playing: bool = False
    error: Optional[str] = None
    _listeners: list[EndedListener] = field(default_factory=list)

    async def play(self) -> None:
        if not self.src:
            raise MediaError("No media source loaded")
        if self.error:
            raise MediaError(self.error)
        self.playing = True

    def pause(self) -> None:
        self.playing = False

    def add_ended_listener(self, listener: EndedListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_ended_listener(self, listener: EndedListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def finish(self) -> None:
        """Simulate reaching the end of the media."""
        self.playing = False
        for listener in list(self._listeners):
            listener()


def resolve_asset_url(path: Optional[str], base_url: str) -> Optional[str]:
    """Prefix relative storage paths with the public storage base URL."""
    if not path:
        return None
    if path.startswith(("http://", "https://")):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


@dataclass
class PlaybackView:
    mode: PlaybackMode
    media_error: Optional[str]
    controls_enabled: bool
    has_recorded: bool
    has_converted: bool


class MediaPlaybackCoordinator:
    """Owns the video element and the recorded/converted audio elements."""

    def __init__(
        self,
        video: MediaElement,
        recorded: MediaElement,
        converted: MediaElement,
        sync: RemoteSyncClient,
        poll_max_attempts: int = 30,
        poll_interval: float = 2.0,
        storage_base_url: str = "",
    ):
        self.video = video
        self.recorded = recorded
        self.converted = converted
        self.sync = sync
        self.poll_max_attempts = poll_max_attempts
        self.poll_interval = poll_interval
        self.storage_base_url = storage_base_url

        self.mode = PlaybackMode.IDLE
        self.media_error: Optional[str] = None
        self.awaiting_conversion = False
        self._attached = False

    def _external(self, mode: PlaybackMode) -> MediaElement:
        if mode == PlaybackMode.PLAYING_WITH_RECORDED:
            return self.recorded
        return self.converted

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def _attach(self) -> None:
        if not self._attached:
            self.recorded.add_ended_listener(self._on_external_ended)
            self.converted.add_ended_listener(self._on_external_ended)
            self._attached = True

    def _detach(self) -> None:
        self.recorded.remove_ended_listener(self._on_external_ended)
        self.converted.remove_ended_listener(self._on_external_ended)
        self._attached = False

    def load(self, record: Optional[DialogueRecord]) -> None:
        """Point the elements at a record's media, stopping any playback."""
        self.stop()
        self._detach()
        self.media_error = None
        self.awaiting_conversion = False

        self.video.src = record.video_url if record else None
        self.recorded.src = record.recorded_audio_url if record else None
        self.converted.src = (
            resolve_asset_url(record.ai_converted_voiceover_url, self.storage_base_url)
            if record else None
        )
        self._attach()

    def close(self) -> None:
        """Stop everything and detach listeners."""
        self.stop()
        self._detach()

    def stop(self) -> None:
        self.video.pause()
        self.recorded.pause()
        self.converted.pause()
        self.video.muted = False
        self.mode = PlaybackMode.IDLE

    def _on_external_ended(self) -> None:
        logger.debug("External audio ended in mode %s", self.mode.value)
        self.stop()

    def expect_conversion(self, url: Optional[str]) -> None:
        """A conversion was just requested; poll for its output on next play."""
        self.converted.src = resolve_asset_url(url, self.storage_base_url)
        self.awaiting_conversion = True

    def clear_media_error(self) -> None:
        self.media_error = None

    # =========================================================================
    # Mode transitions
    # =========================================================================

    async def _ensure_converted(self) -> None:
        url = self.converted.src
        if not url:
            raise MediaError("No converted audio available")
        if self.awaiting_conversion:
            await self.sync.poll_for_asset(url, self.poll_max_attempts, self.poll_interval)
            self.awaiting_conversion = False
        elif not await self.sync.asset_exists(url):
            raise MediaError("Converted audio file is not available")

    async def toggle(self, mode: PlaybackMode | str) -> PlaybackMode:
        """Start ``mode``, or stop it when it is already active.

        Failures are recorded in ``media_error`` and leave the coordinator
        IDLE with the video unmuted.
        """
        mode = PlaybackMode(mode)
        if mode == PlaybackMode.IDLE or mode == self.mode:
            self.stop()
            return self.mode
        if self.media_error:
            logger.debug("Playback controls disabled: %s", self.media_error)
            return self.mode

        self.stop()
        try:
            if mode == PlaybackMode.PLAYING_NATIVE:
                self.video.current_time = 0.0
                await self.video.play()
            else:
                audio = self._external(mode)
                if mode == PlaybackMode.PLAYING_WITH_CONVERTED:
                    await self._ensure_converted()
                elif not audio.src:
                    raise MediaError("No recorded audio available")
                self.video.muted = True
                self.video.current_time = 0.0
                audio.current_time = 0.0
                await asyncio.gather(self.video.play(), audio.play())
        except (MediaError, RemoteError) as e:
            self.stop()
            self.media_error = str(e)
            logger.warning("Playback failed in mode %s: %s", mode.value, e)
            return self.mode

        self.mode = mode
        return self.mode

    def view(self) -> PlaybackView:
        return PlaybackView(
            mode=self.mode,
            media_error=self.media_error,
            controls_enabled=self.media_error is None and bool(self.video.src),
            has_recorded=bool(self.recorded.src),
            has_converted=bool(self.converted.src),
        )
