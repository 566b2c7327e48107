from __future__ import annotations

"""Session state records and their JSON shape.

The JSON field names match the stored layout used since v1 of the
session entries, so existing progress files keep loading.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class QuestionProgress:
    question_id: int
    consecutive_correct: int = 0
    is_excluded: bool = False

    def to_json(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "consecutiveCorrect": self.consecutive_correct,
            "isExcluded": self.is_excluded,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "QuestionProgress":
        return cls(
            question_id=int(data["questionId"]),
            consecutive_correct=int(data.get("consecutiveCorrect", 0)),
            is_excluded=bool(data.get("isExcluded", False)),
        )


@dataclass(frozen=True)
class SessionState:
    progress: Dict[int, QuestionProgress] = field(default_factory=dict)
    current_question_id: Optional[int] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "questionStates": {str(qid): p.to_json() for qid, p in self.progress.items()},
            "currentQuestionId": self.current_question_id,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "SessionState":
        states = data.get("questionStates", {}) or {}
        progress = {int(k): QuestionProgress.from_json(v) for k, v in states.items()}
        current = data.get("currentQuestionId")
        return cls(progress=progress, current_question_id=int(current) if current is not None else None)


@dataclass(frozen=True)
class Stats:
    total_answers: int = 0
    correct_answers: int = 0

    def to_json(self) -> Dict[str, Any]:
        return {"totalAnswers": self.total_answers, "correctAnswers": self.correct_answers}

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Stats":
        return cls(
            total_answers=int(data.get("totalAnswers", 0)),
            correct_answers=int(data.get("correctAnswers", 0)),
        )


@dataclass(frozen=True)
class TimerState:
    start_epoch_ms: int

    def elapsed_ms(self, now_ms: int) -> int:
        return max(int(now_ms) - self.start_epoch_ms, 0)
