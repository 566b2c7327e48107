from __future__ import annotations

"""Session engine: pure transitions over session state.

Every function takes the current state and returns a new one; nothing
here touches storage, clocks or global randomness. Callers inject a
``random.Random`` so selection and shuffling are reproducible.
"""

import random
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..bank.models import AnswerOption, Question
from .state import QuestionProgress, SessionState, Stats, TimerState

MASTERY_THRESHOLD = 5


def initialize_progress(
    bank_ids: Iterable[int], existing: Mapping[int, QuestionProgress]
) -> Dict[int, QuestionProgress]:
    """Add a fresh record for every bank id missing from ``existing``.

    Existing records are kept as-is, including orphans whose question has
    left the bank.
    """
    progress = dict(existing)
    for qid in bank_ids:
        if qid not in progress:
            progress[qid] = QuestionProgress(question_id=qid)
    return progress


def active_pool(bank_ids: Iterable[int], progress: Mapping[int, QuestionProgress]) -> List[int]:
    out = []
    for qid in bank_ids:
        qs = progress.get(qid)
        if qs is None or not qs.is_excluded:
            out.append(qid)
    return out


def is_finished(bank_ids: Iterable[int], progress: Mapping[int, QuestionProgress]) -> bool:
    return not active_pool(bank_ids, progress)


def pick_next(
    bank_ids: Iterable[int], progress: Mapping[int, QuestionProgress], rng: random.Random
) -> Optional[int]:
    """Uniformly pick an active question id, or None when the pool is empty."""
    pool = active_pool(bank_ids, progress)
    if not pool:
        return None
    return rng.choice(pool)


def start(bank_ids: Iterable[int], state: SessionState, rng: random.Random) -> SessionState:
    if state.current_question_id is not None:
        return state
    return replace(state, current_question_id=pick_next(bank_ids, state.progress, rng))


def advance(bank_ids: Iterable[int], state: SessionState, rng: random.Random) -> SessionState:
    if state.current_question_id is None:
        return state
    return replace(state, current_question_id=pick_next(bank_ids, state.progress, rng))


def record_answer(
    state: SessionState, stats: Stats, question_id: int, is_correct: bool
) -> Tuple[SessionState, Stats]:
    """Apply one graded answer to the streak of ``question_id`` and the stats.

    Unknown or already excluded questions are left alone, stats included.
    The current question is not changed; advancing is a separate step.
    """
    qs = state.progress.get(question_id)
    if qs is None or qs.is_excluded:
        return state, stats

    streak = qs.consecutive_correct + 1 if is_correct else 0
    excluded = bool(is_correct and streak >= MASTERY_THRESHOLD)
    streak = min(streak, MASTERY_THRESHOLD)

    progress = dict(state.progress)
    progress[question_id] = replace(qs, consecutive_correct=streak, is_excluded=excluded)
    new_stats = Stats(
        total_answers=stats.total_answers + 1,
        correct_answers=stats.correct_answers + (1 if is_correct else 0),
    )
    return replace(state, progress=progress), new_stats


def reset(now_ms: int) -> Tuple[SessionState, Stats, TimerState]:
    return SessionState(), Stats(), TimerState(start_epoch_ms=int(now_ms))


def shuffle_options(question: Question, rng: random.Random) -> List[AnswerOption]:
    """Return the options in a fresh uniformly random order (Fisher-Yates)."""
    options = list(question.options)
    for i in range(len(options) - 1, 0, -1):
        j = rng.randint(0, i)
        options[i], options[j] = options[j], options[i]
    return options
