"""Tests for the debounced auto-save scheduler."""

import asyncio

import pytest

from dubdesk.review.autosave import AutoSaveScheduler


class Recorder:
    """Counts save calls and controls should_save."""

    def __init__(self, dirty: bool = True, fail: bool = False):
        self.dirty = dirty
        self.fail = fail
        self.saves = 0

    def should_save(self) -> bool:
        return self.dirty

    async def save(self) -> None:
        self.saves += 1
        if self.fail:
            raise RuntimeError("boom")
        self.dirty = False


class TestAutoSaveScheduler:
    """Tests for AutoSaveScheduler."""

    @pytest.mark.asyncio
    async def test_fires_after_delay(self) -> None:
        """A single edit saves once the delay passes."""
        recorder = Recorder()
        scheduler = AutoSaveScheduler(0.1, recorder.should_save, recorder.save)

        scheduler.touch()
        assert scheduler.pending
        await asyncio.sleep(0.02)
        assert recorder.saves == 0

        await asyncio.sleep(0.2)
        assert recorder.saves == 1
        assert not scheduler.pending

    @pytest.mark.asyncio
    async def test_touch_restarts_countdown(self) -> None:
        """Edits within the delay push the save back."""
        recorder = Recorder()
        scheduler = AutoSaveScheduler(0.1, recorder.should_save, recorder.save)

        for _ in range(4):
            scheduler.touch()
            await asyncio.sleep(0.03)
        assert recorder.saves == 0

        await asyncio.sleep(0.2)
        assert recorder.saves == 1

    @pytest.mark.asyncio
    async def test_skipped_when_clean(self) -> None:
        """A manual save in the meantime suppresses the auto-save."""
        recorder = Recorder()
        scheduler = AutoSaveScheduler(0.03, recorder.should_save, recorder.save)

        scheduler.touch()
        recorder.dirty = False
        await asyncio.sleep(0.08)

        assert recorder.saves == 0

    @pytest.mark.asyncio
    async def test_cancel(self) -> None:
        """Cancelled timers never fire."""
        recorder = Recorder()
        scheduler = AutoSaveScheduler(0.03, recorder.should_save, recorder.save)

        scheduler.touch()
        scheduler.cancel()
        await asyncio.sleep(0.08)

        assert recorder.saves == 0
        assert not scheduler.pending

    @pytest.mark.asyncio
    async def test_close_refuses_new_timers(self) -> None:
        """After close, touch is ignored."""
        recorder = Recorder()
        scheduler = AutoSaveScheduler(0.01, recorder.should_save, recorder.save)

        scheduler.close()
        scheduler.touch()
        await asyncio.sleep(0.05)

        assert recorder.saves == 0

    @pytest.mark.asyncio
    async def test_save_errors_logged(self, caplog) -> None:
        """Errors from the save callback never escape."""
        recorder = Recorder(fail=True)
        scheduler = AutoSaveScheduler(0.01, recorder.should_save, recorder.save)

        with caplog.at_level("ERROR", logger="dubdesk"):
            scheduler.touch()
            await asyncio.sleep(0.05)

        assert recorder.saves == 1
        assert "Auto-save failed" in caplog.text
