from .state import QuestionProgress, SessionState, Stats, TimerState
from .engine import (
    MASTERY_THRESHOLD,
    active_pool,
    advance,
    initialize_progress,
    is_finished,
    pick_next,
    record_answer,
    reset,
    shuffle_options,
    start,
)

__all__ = [
    "QuestionProgress",
    "SessionState",
    "Stats",
    "TimerState",
    "MASTERY_THRESHOLD",
    "active_pool",
    "advance",
    "initialize_progress",
    "is_finished",
    "pick_next",
    "record_answer",
    "reset",
    "shuffle_options",
    "start",
]
