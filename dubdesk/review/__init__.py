"""Dialogue review engine.

Components:
- changes: per-role field schemas, drafts and change detection
- cache: shared query cache with replace-by-key updates
- sync: remote sync client for persistence, voices and storage checks
- navigator: ordered, filterable cursor gated on unsaved changes
- playback: mutually exclusive video/recorded/converted playback
- autosave: debounced save after inactivity
- voices: single and bulk voice assignment
- session: wires the above into one review view
"""

from .autosave import AutoSaveScheduler
from .cache import QueryCache, dialogues_key, replace_by_key
from .changes import Draft, FieldSchema, build_patch, has_changes, schema_for
from .navigator import DialogueFilter, DialogueNavigator, NavigatorView
from .notices import Notices
from .playback import (
    HeadlessMediaElement,
    MediaElement,
    MediaPlaybackCoordinator,
    PlaybackMode,
    resolve_asset_url,
)
from .session import ReviewSession, SessionView
from .sync import RemoteSyncClient, SyncContext
from .voices import AssignmentResult, VoiceAssigner, filter_voice_models

__all__ = [
    "AssignmentResult",
    "AutoSaveScheduler",
    "DialogueFilter",
    "DialogueNavigator",
    "Draft",
    "FieldSchema",
    "HeadlessMediaElement",
    "MediaElement",
    "MediaPlaybackCoordinator",
    "NavigatorView",
    "Notices",
    "PlaybackMode",
    "QueryCache",
    "RemoteSyncClient",
    "ReviewSession",
    "SessionView",
    "SyncContext",
    "VoiceAssigner",
    "build_patch",
    "dialogues_key",
    "filter_voice_models",
    "has_changes",
    "replace_by_key",
    "resolve_asset_url",
    "schema_for",
]
