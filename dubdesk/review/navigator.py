"""
Dialogue navigation state machine.

Holds the ordered dialogue list, the current position, the per-character
grouping and the status filter. Moves are gated on unsaved changes: when the
draft differs from the saved record a move is deferred and a confirmation is
surfaced instead.

States (as seen by the UI):
    EMPTY        - no records in the current grouping/filter
    BROWSING     - a record is displayed, draft is clean
    EDITING      - draft differs from the saved record
    CONFIRMING   - a move was requested while EDITING
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Hashable, Optional

from ..errors import ValidationError
from ..models import DialogueRecord, UserSession, sort_records
from .cache import QueryCache, replace_by_key
from .changes import Draft, FieldSchema, has_changes, schema_for

logger = logging.getLogger("dubdesk")

EMPTY_MESSAGE = "No Dialogues Available"
UNKNOWN_CHARACTER = "Unknown"


class DialogueFilter(str, Enum):
    """Status filters offered by every review view."""

    ALL = "all"
    PENDING = "pending"
    REVISION = "revision"
    RERECORD = "rerecord"


FILTERS: dict[DialogueFilter, Callable[[DialogueRecord], bool]] = {
    DialogueFilter.ALL: lambda r: True,
    DialogueFilter.PENDING: lambda r: not r.revision_requested and not r.needs_rerecord,
    DialogueFilter.REVISION: lambda r: r.revision_requested,
    DialogueFilter.RERECORD: lambda r: r.needs_rerecord,
}


def character_of(record: DialogueRecord) -> str:
    return record.speaker or UNKNOWN_CHARACTER


@dataclass
class CharacterSummary:
    name: str
    count: int


@dataclass
class NavigatorView:
    """Plain-data snapshot for rendering."""

    current_record: Optional[DialogueRecord]
    index: int
    total: int
    can_go_next: bool
    can_go_previous: bool
    confirmation_required: bool
    empty: bool
    draft: dict[str, Any] = field(default_factory=dict)
    has_changes: bool = False
    selected_character: Optional[str] = None
    filter: DialogueFilter = DialogueFilter.ALL
    message: Optional[str] = None


class DialogueNavigator:
    """Ordered, filterable cursor over a project's dialogue records.

    The shared cache handle and the session accessor are injected so the
    navigator can be driven without any web framework around it.
    """

    def __init__(
        self,
        records: list[DialogueRecord],
        session: Callable[[], UserSession],
        cache: QueryCache,
        cache_key: Hashable,
        schema: Optional[FieldSchema] = None,
    ):
        self._session = session
        self.cache = cache
        self.cache_key = cache_key
        self.schema = schema or schema_for(session().role)

        self._records: list[DialogueRecord] = sort_records(list(records))
        if cache_key not in cache:
            cache.set(cache_key, list(self._records))

        self.selected_character: Optional[str] = None
        self.filter = DialogueFilter.ALL
        self.current_index = 0
        self.draft: Optional[Draft] = None
        self._pending_move: Optional[int] = None
        self._visible: list[DialogueRecord] = []
        self._rebuild(reset_index=True)

    # =========================================================================
    # Derived state
    # =========================================================================

    @property
    def records(self) -> list[DialogueRecord]:
        """All records, unfiltered, in subtitle order."""
        return list(self._records)

    @property
    def visible(self) -> list[DialogueRecord]:
        """Records in the current character grouping and filter."""
        return list(self._visible)

    @property
    def current_record(self) -> Optional[DialogueRecord]:
        if not self._visible:
            return None
        return self._visible[self.current_index]

    @property
    def confirmation_required(self) -> bool:
        return self._pending_move is not None

    def has_changes(self) -> bool:
        return has_changes(self.draft, self.current_record)

    def _grouped(self) -> list[DialogueRecord]:
        if self.selected_character is None:
            return self._records
        return [r for r in self._records if character_of(r) == self.selected_character]

    def _rebuild(self, reset_index: bool) -> None:
        predicate = FILTERS[self.filter]
        displayed = self.current_record.key if self._visible and not reset_index else None
        self._visible = [r for r in self._grouped() if predicate(r)]

        if reset_index or not self._visible:
            self.current_index = 0
        else:
            self.current_index = min(self.current_index, len(self._visible) - 1)

        current = self.current_record
        if current is None:
            self.draft = None
        elif reset_index or current.key != displayed or self.draft is None:
            self._load_draft()

    def _load_draft(self) -> None:
        current = self.current_record
        self.draft = Draft.from_record(current, self.schema) if current else None
        self._pending_move = None

    # =========================================================================
    # Grouping and filtering
    # =========================================================================

    def select_character(self, name: str) -> None:
        """Show only one character's records (exact, case-sensitive match)."""
        self.selected_character = name
        self._rebuild(reset_index=True)
        logger.debug("Selected character %r (%d records)", name, len(self._visible))

    def clear_character(self) -> None:
        self.selected_character = None
        self._rebuild(reset_index=True)

    def set_filter(self, name: DialogueFilter | str) -> None:
        try:
            self.filter = DialogueFilter(name)
        except ValueError as e:
            raise ValidationError(f"Unknown filter: {name}") from e
        self._rebuild(reset_index=True)
        logger.debug("Filter set to %s (%d records)", self.filter.value, len(self._visible))

    def characters(self, search: str = "") -> list[CharacterSummary]:
        """Characters with record counts, optionally narrowed by a search term."""
        counts: dict[str, int] = {}
        for record in self._records:
            name = character_of(record)
            counts[name] = counts.get(name, 0) + 1

        needle = search.strip().lower()
        return [
            CharacterSummary(name=name, count=count)
            for name, count in sorted(counts.items())
            if not needle or needle in name.lower()
        ]

    def status_counts(self) -> dict[str, int]:
        """Badge counts for each filter within the current character grouping."""
        grouped = self._grouped()
        return {
            f.value: sum(1 for r in grouped if predicate(r))
            for f, predicate in FILTERS.items()
        }

    # =========================================================================
    # Movement
    # =========================================================================

    def _move(self, step: int) -> bool:
        if not self._visible:
            return False
        target = max(0, min(self.current_index + step, len(self._visible) - 1))
        if target == self.current_index:
            return False
        if self.has_changes():
            self._pending_move = step
            logger.debug("Move deferred: unsaved changes on %s", self.current_record.key)
            return False
        self.current_index = target
        self._load_draft()
        logger.debug("Moved to %d/%d", self.current_index + 1, len(self._visible))
        return True

    def next(self) -> bool:
        """Advance one record. Returns False when deferred or at the end."""
        return self._move(1)

    def previous(self) -> bool:
        """Go back one record. Returns False when deferred or at the start."""
        return self._move(-1)

    def discard_changes(self) -> None:
        """Drop the draft and any deferred move; stay on the current record."""
        self._load_draft()

    def confirm_and_continue(self) -> bool:
        """Carry out a deferred move once the draft is clean again."""
        step = self._pending_move
        if step is None:
            return False
        if self.has_changes():
            return False
        self._pending_move = None
        return self._move(step)

    def jump_to(self, key: str) -> bool:
        """Display the record with ``key`` and reload its draft from it."""
        for index, record in enumerate(self._visible):
            if record.key == key:
                self.current_index = index
                self._load_draft()
                return True
        logger.debug("Record %s not in current view", key)
        return False

    # =========================================================================
    # Editing and sync
    # =========================================================================

    def edit(self, name: str, value: Any) -> bool:
        """Edit one draft field. Returns whether the draft now has changes."""
        if self.draft is None:
            raise ValidationError("No dialogue is displayed")
        self.draft.set(name, value)
        return self.has_changes()

    def replace_record(self, record: DialogueRecord, reset_draft: bool = True) -> None:
        """Swap in an authoritative copy in the list and the shared cache."""
        self._records = replace_by_key(self._records, record)
        self.cache.update(self.cache_key, lambda records: replace_by_key(records, record))

        self._rebuild(reset_index=False)
        current = self.current_record
        # A draft edited after the save was issued is left alone
        if reset_draft and current is not None and current.key == record.key:
            pending = self._pending_move
            self._load_draft()
            self._pending_move = pending

    # =========================================================================
    # Rendering
    # =========================================================================

    def view(self) -> NavigatorView:
        total = len(self._visible)
        current = self.current_record
        return NavigatorView(
            current_record=current,
            index=self.current_index if current else 0,
            total=total,
            can_go_next=current is not None and self.current_index < total - 1,
            can_go_previous=current is not None and self.current_index > 0,
            confirmation_required=self.confirmation_required,
            empty=current is None,
            draft=dict(self.draft.values) if self.draft else {},
            has_changes=self.has_changes(),
            selected_character=self.selected_character,
            filter=self.filter,
            message=EMPTY_MESSAGE if current is None else None,
        )
