"""
Episode pipeline step tracking.

Each episode carries a ``steps`` map keyed by stage name. A step may only be
entered once its declared prerequisite has completed.

Pipeline flow:
    audioExtraction → transcription → videoClips → translation →
    voiceAssignment → step6 (voice conversion) → step7 (audio merge) →
    step8 (final video)
"""

import logging
from datetime import datetime
from typing import Any, Optional

from ..errors import ValidationError
from ..models import Episode, StepName, StepState, StepStatus

logger = logging.getLogger("dubdesk")


PREREQUISITES: dict[StepName, Optional[StepName]] = {
    StepName.AUDIO_EXTRACTION: None,
    StepName.TRANSCRIPTION: StepName.AUDIO_EXTRACTION,
    StepName.VIDEO_CLIPS: StepName.TRANSCRIPTION,
    StepName.TRANSLATION: StepName.VIDEO_CLIPS,
    StepName.VOICE_ASSIGNMENT: StepName.TRANSLATION,
    StepName.VOICE_CONVERSION: StepName.VOICE_ASSIGNMENT,
    StepName.AUDIO_MERGE: StepName.VOICE_CONVERSION,
    StepName.FINAL_VIDEO: StepName.AUDIO_MERGE,
}


# =============================================================================
# Status Transition Rules
# =============================================================================

VALID_TRANSITIONS = {
    StepStatus.PENDING: [StepStatus.PROCESSING],
    StepStatus.PROCESSING: [StepStatus.COMPLETED, StepStatus.ERROR],
    StepStatus.COMPLETED: [StepStatus.PROCESSING],  # Re-run
    StepStatus.ERROR: [StepStatus.PROCESSING],  # Retry
}


def can_transition(from_status: StepStatus, to_status: StepStatus) -> bool:
    """Check if a step status transition is valid."""
    return to_status in VALID_TRANSITIONS.get(from_status, [])


def can_enter(episode: Episode, step: StepName) -> bool:
    """True when the step's prerequisite (if any) has completed."""
    prerequisite = PREREQUISITES[step]
    if prerequisite is None:
        return True
    state = episode.steps.get(prerequisite)
    return state is not None and state.status == StepStatus.COMPLETED


def _transition(episode: Episode, step: StepName, to_status: StepStatus) -> StepState:
    state = episode.step(step)
    if not can_transition(state.status, to_status):
        raise ValidationError(
            f"Cannot move {step.value} from {state.status.value} to {to_status.value}"
        )
    state.status = to_status
    state.updated_at = datetime.now()
    logger.info("Episode %s step %s -> %s", episode.name, step.value, to_status.value)
    return state


def start_step(episode: Episode, step: StepName) -> StepState:
    """
    Enter a step.

    Raises ValidationError when the prerequisite has not completed or the
    step is already processing.
    """
    if not can_enter(episode, step):
        prerequisite = PREREQUISITES[step]
        raise ValidationError(
            f"{step.value} requires {prerequisite.value} to be completed first"
        )
    state = _transition(episode, step, StepStatus.PROCESSING)
    state.error = None
    return state


def complete_step(episode: Episode, step: StepName, **payload: Any) -> StepState:
    """Mark a processing step completed, attaching its stage payload."""
    state = _transition(episode, step, StepStatus.COMPLETED)
    for name, value in payload.items():
        setattr(state, name, value)
    return state


def fail_step(episode: Episode, step: StepName, error: str) -> StepState:
    """Mark a processing step failed with an error message."""
    state = _transition(episode, step, StepStatus.ERROR)
    state.error = error
    return state


def next_step(episode: Episode) -> Optional[StepName]:
    """The first step that is not completed, in pipeline order."""
    for step in StepName:
        state = episode.steps.get(step)
        if state is None or state.status != StepStatus.COMPLETED:
            return step
    return None


def episode_progress(episode: Episode) -> tuple[int, int]:
    """Return (completed steps, total steps)."""
    completed = sum(
        1 for step in StepName
        if episode.steps.get(step) is not None and episode.steps[step].status == StepStatus.COMPLETED
    )
    return completed, len(StepName)
