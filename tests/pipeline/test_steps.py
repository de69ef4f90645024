"""Tests for episode pipeline step tracking."""

import pytest

from dubdesk.errors import ValidationError
from dubdesk.models import Episode, StepName, StepStatus
from dubdesk.pipeline import (
    can_enter,
    can_transition,
    complete_step,
    episode_progress,
    fail_step,
    next_step,
    start_step,
)


@pytest.fixture
def episode() -> Episode:
    return Episode(name="Episode 1", collectionName="episode_1")


class TestTransitions:
    """Tests for the step status transition table."""

    def test_valid_transitions(self) -> None:
        """Steps start, finish, fail and retry."""
        assert can_transition(StepStatus.PENDING, StepStatus.PROCESSING)
        assert can_transition(StepStatus.PROCESSING, StepStatus.COMPLETED)
        assert can_transition(StepStatus.PROCESSING, StepStatus.ERROR)
        assert can_transition(StepStatus.ERROR, StepStatus.PROCESSING)

    def test_invalid_transitions(self) -> None:
        """A pending step cannot complete without processing."""
        assert not can_transition(StepStatus.PENDING, StepStatus.COMPLETED)
        assert not can_transition(StepStatus.COMPLETED, StepStatus.ERROR)


class TestPrerequisites:
    """Tests for prerequisite gating."""

    def test_first_step_has_no_prerequisite(self, episode: Episode) -> None:
        """Audio extraction can always start."""
        assert can_enter(episode, StepName.AUDIO_EXTRACTION)

    def test_blocked_until_prerequisite_completes(self, episode: Episode) -> None:
        """Transcription requires completed audio extraction."""
        with pytest.raises(ValidationError, match="audioExtraction"):
            start_step(episode, StepName.TRANSCRIPTION)

        start_step(episode, StepName.AUDIO_EXTRACTION)
        assert not can_enter(episode, StepName.TRANSCRIPTION)

        complete_step(episode, StepName.AUDIO_EXTRACTION)
        assert can_enter(episode, StepName.TRANSCRIPTION)

    def test_complete_attaches_payload(self, episode: Episode) -> None:
        """Stage payload is kept on the step."""
        start_step(episode, StepName.AUDIO_EXTRACTION)
        state = complete_step(episode, StepName.AUDIO_EXTRACTION, audioUrl="s3://a.wav")
        assert state.status == StepStatus.COMPLETED
        assert state.audioUrl == "s3://a.wav"
        assert state.updated_at is not None

    def test_fail_then_retry_clears_error(self, episode: Episode) -> None:
        """A failed step can be retried and loses its error."""
        start_step(episode, StepName.AUDIO_EXTRACTION)
        fail_step(episode, StepName.AUDIO_EXTRACTION, "ffmpeg exited 1")
        assert episode.steps[StepName.AUDIO_EXTRACTION].error == "ffmpeg exited 1"

        state = start_step(episode, StepName.AUDIO_EXTRACTION)
        assert state.status == StepStatus.PROCESSING
        assert state.error is None

    def test_cannot_complete_pending_step(self, episode: Episode) -> None:
        """Completing a step that never started is rejected."""
        with pytest.raises(ValidationError):
            complete_step(episode, StepName.AUDIO_EXTRACTION)


class TestProgress:
    """Tests for next_step and episode_progress."""

    def test_progress(self, episode: Episode) -> None:
        """Progress counts completed steps in pipeline order."""
        assert episode_progress(episode) == (0, 8)
        assert next_step(episode) == StepName.AUDIO_EXTRACTION

        for step in (StepName.AUDIO_EXTRACTION, StepName.TRANSCRIPTION):
            start_step(episode, step)
            complete_step(episode, step)

        assert episode_progress(episode) == (2, 8)
        assert next_step(episode) == StepName.VIDEO_CLIPS
