from __future__ import annotations

"""Derived read-only session signals and their text formatting."""

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from ..session.engine import MASTERY_THRESHOLD, active_pool
from ..session.state import QuestionProgress, Stats


@dataclass(frozen=True)
class Signals:
    active_count: int
    total_count: int
    completed_count: int
    progress_percent: int
    accuracy_percent: int
    current_streak: int
    elapsed: str

    @property
    def finished(self) -> bool:
        return self.total_count > 0 and self.active_count == 0


def _percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    # halves round up
    return int(part * 100 / whole + 0.5)


def accuracy_percent(stats: Stats) -> int:
    return _percent(stats.correct_answers, stats.total_answers)


def format_elapsed(elapsed_ms: int) -> str:
    """Format milliseconds as HH:MM:SS; hours do not wrap."""
    ms = max(int(elapsed_ms), 0)
    hh = ms // 3_600_000
    mm = (ms % 3_600_000) // 60_000
    ss = (ms % 60_000) // 1000
    return f"{hh:02d}:{mm:02d}:{ss:02d}"


def compute_signals(
    bank_ids: Iterable[int],
    progress: Mapping[int, QuestionProgress],
    stats: Stats,
    elapsed_ms: int,
    current_question_id: Optional[int] = None,
) -> Signals:
    ids = list(bank_ids)
    total = len(ids)
    active = len(active_pool(ids, progress))
    completed = max(total - active, 0)
    streak = 0
    if current_question_id is not None and current_question_id in progress:
        streak = progress[current_question_id].consecutive_correct
    return Signals(
        active_count=active,
        total_count=total,
        completed_count=completed,
        progress_percent=_percent(completed, total),
        accuracy_percent=accuracy_percent(stats),
        current_streak=streak,
        elapsed=format_elapsed(elapsed_ms),
    )


def format_streak(streak: int) -> str:
    filled = max(0, min(int(streak), MASTERY_THRESHOLD))
    return "●" * filled + "○" * (MASTERY_THRESHOLD - filled)


def format_summary(signals: Signals) -> str:
    """Return a human-readable summary of session progress."""
    lines = [
        f"Mastered: {signals.completed_count}/{signals.total_count} ({signals.progress_percent}%)",
        f"Remaining: {signals.active_count}",
        f"Accuracy: {signals.accuracy_percent}%",
        f"Time: {signals.elapsed}",
    ]
    return "\n".join(lines)
