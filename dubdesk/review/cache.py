"""Shared query cache handed to every view that reads dialogue lists."""

import logging
from copy import copy
from typing import Any, Callable, Hashable, Optional

from ..models import DialogueRecord

logger = logging.getLogger("dubdesk")


def dialogues_key(project_id: str) -> tuple[str, str]:
    return ("dialogues", project_id)


def replace_by_key(records: list[DialogueRecord], updated: DialogueRecord) -> list[DialogueRecord]:
    """Return a new list with the record sharing ``updated.key`` swapped in.

    Sibling records are left as they are so concurrent writers to other
    records are not clobbered.
    """
    return [updated if r.key == updated.key else r for r in records]


class QueryCache:
    """In-process key/value cache with functional updaters."""

    def __init__(self):
        self._entries: dict[Hashable, Any] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        return self._entries.get(key)

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = value

    def update(self, key: Hashable, updater: Callable[[Any], Any]) -> Optional[Any]:
        """Apply ``updater`` to the entry. A missing entry is left missing."""
        if key not in self._entries:
            return None
        self._entries[key] = updater(copy(self._entries[key]))
        return self._entries[key]

    def invalidate(self, key: Hashable) -> None:
        if self._entries.pop(key, None) is not None:
            logger.debug("Invalidated cache entry %s", key)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries
