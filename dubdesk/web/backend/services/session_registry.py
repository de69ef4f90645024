"""In-memory registry of open review sessions.

Each browser view opens one session. Sessions share the sync client and
the query cache so that saves in one view update the list seen by others.
"""

import logging
import threading
import uuid
from typing import Any, Optional

from ....config import Config
from ....models import DialogueRecord, Project, Role, UserSession
from ....pipeline import is_assigned
from ....review import QueryCache, RemoteSyncClient, ReviewSession, SyncContext

logger = logging.getLogger("dubdesk")


class SessionAccessError(Exception):
    """The user is not assigned to the project in the requested role."""


class SessionRegistry:
    """Creates, looks up and closes review sessions."""

    def __init__(
        self,
        sync: RemoteSyncClient,
        cache: QueryCache,
        config: Config,
        max_sessions: int = 200,
    ):
        """Initialize the registry.

        Args:
            sync: Shared remote sync client.
            cache: Shared query cache.
            config: Application configuration.
            max_sessions: Oldest sessions are closed beyond this many.
        """
        self.sync = sync
        self.cache = cache
        self.config = config
        self.max_sessions = max_sessions
        self._sessions: dict[str, ReviewSession] = {}
        self._lock = threading.Lock()

    def open(
        self,
        user: UserSession,
        context: SyncContext,
        dialogues: list[dict[str, Any]],
        project: Optional[dict[str, Any]] = None,
    ) -> tuple[str, ReviewSession]:
        """Open a session over the given dialogue documents.

        Raises:
            SessionAccessError: The project does not list the user in this role.
            ValidationError: Missing context or a malformed dialogue document.
        """
        if project is not None and user.role != Role.ADMIN:
            if not is_assigned(Project.model_validate(project), user):
                raise SessionAccessError(
                    f"{user.username} is not assigned to this project as {user.role.value}"
                )

        records = [DialogueRecord.from_document(doc) for doc in dialogues]
        session = ReviewSession.create(records, user, context, self.config, self.sync, self.cache)

        session_id = f"session_{uuid.uuid4().hex[:12]}"
        with self._lock:
            self._sessions[session_id] = session
            evicted = []
            while len(self._sessions) > self.max_sessions:
                oldest = next(iter(self._sessions))
                evicted.append(self._sessions.pop(oldest))
        for old in evicted:
            old.close()

        logger.info(
            "Opened %s for %s (%s) with %d dialogues",
            session_id,
            user.username,
            user.role.value,
            len(records),
        )
        return session_id, session

    def get(self, session_id: str) -> ReviewSession:
        """Look up a session. Raises KeyError when unknown."""
        with self._lock:
            return self._sessions[session_id]

    def close(self, session_id: str) -> None:
        """Close a session. Raises KeyError when unknown."""
        with self._lock:
            session = self._sessions.pop(session_id)
        session.close()
        logger.info("Closed %s", session_id)

    def shutdown(self) -> None:
        """Close every open session."""
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close()

    def __len__(self) -> int:
        return len(self._sessions)

