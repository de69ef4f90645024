"""Transient on-screen messages with expiry."""

import time
from dataclasses import dataclass
from typing import Callable, Literal, Optional

NoticeKind = Literal["error", "success"]


@dataclass
class Notice:
    kind: NoticeKind
    text: str
    expires_at: float


class Notices:
    """A single notice slot. A newer notice replaces the older one."""

    def __init__(
        self,
        error_seconds: float = 3.0,
        success_seconds: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.error_seconds = error_seconds
        self.success_seconds = success_seconds
        self._clock = clock
        self._notice: Optional[Notice] = None

    def error(self, text: str) -> Notice:
        self._notice = Notice("error", text, self._clock() + self.error_seconds)
        return self._notice

    def success(self, text: str) -> Notice:
        self._notice = Notice("success", text, self._clock() + self.success_seconds)
        return self._notice

    def current(self) -> Optional[Notice]:
        """The live notice, or None once it has expired."""
        if self._notice is not None and self._clock() >= self._notice.expires_at:
            self._notice = None
        return self._notice

    def clear(self) -> None:
        self._notice = None
