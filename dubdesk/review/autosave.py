"""Debounced auto-save timer."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger("dubdesk")


class AutoSaveScheduler:
    """Fire ``save`` once ``delay`` seconds pass without a new edit.

    Every ``touch()`` restarts the countdown. When the timer fires it asks
    ``should_save()`` again so a manual save in the meantime suppresses it.
    Errors from ``save`` are logged and never propagated.
    """

    def __init__(
        self,
        delay: float,
        should_save: Callable[[], bool],
        save: Callable[[], Awaitable[Any]],
    ):
        self.delay = delay
        self._should_save = should_save
        self._save = save
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def touch(self) -> None:
        """Restart the countdown after an edit."""
        if self._closed:
            return
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def close(self) -> None:
        """Cancel and refuse further scheduling (view unmounted)."""
        self.cancel()
        self._closed = True

    async def _run(self) -> None:
        await asyncio.sleep(self.delay)
        # Detach before saving so a cancel() from the save path can't cancel us
        self._task = None

        if not self._should_save():
            logger.debug("Auto-save skipped: nothing to save")
            return

        logger.info("Auto-saving after %.1fs of inactivity", self.delay)
        try:
            await self._save()
        except Exception:
            logger.exception("Auto-save failed")
