"""
Episode pipeline status tracking and project access rules.

- steps: prerequisite-gated step transitions per episode
- access: which projects a signed-in user may act on
"""

from .access import is_assigned, visible_projects
from .steps import (
    PREREQUISITES,
    can_enter,
    can_transition,
    complete_step,
    episode_progress,
    fail_step,
    next_step,
    start_step,
)

__all__ = [
    "PREREQUISITES",
    "can_enter",
    "can_transition",
    "complete_step",
    "episode_progress",
    "fail_step",
    "is_assigned",
    "next_step",
    "start_step",
    "visible_projects",
]
