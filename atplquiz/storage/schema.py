from __future__ import annotations

"""Storage keys and Pydantic models for persisted session entries."""

from typing import Dict, Optional

from pydantic import BaseModel, Field, validator

from ..session.engine import MASTERY_THRESHOLD

# --- Keys ---
# Bump the suffix on incompatible layout changes so old entries are ignored.

SESSION_KEY = "atpl-quiz-session-v1"
STATS_KEY = "atpl-quiz-stats-v1"
TIMER_START_KEY = "atpl-quiz-timer-start-v1"

ALL_KEYS = (SESSION_KEY, STATS_KEY, TIMER_START_KEY)


# --- Pydantic models ---

class ProgressRecord(BaseModel):
    question_id: int = Field(alias="questionId")
    consecutive_correct: int = Field(default=0, alias="consecutiveCorrect", ge=0, le=MASTERY_THRESHOLD)
    is_excluded: bool = Field(default=False, alias="isExcluded")

    @validator("is_excluded", always=True)
    def _excluded_at_threshold(cls, v: bool, values):  # type: ignore[override]
        streak = values.get("consecutive_correct")
        if streak is not None and streak >= MASTERY_THRESHOLD and not v:
            raise ValueError("a question at the mastery threshold must be excluded")
        return v


class SessionRecord(BaseModel):
    question_states: Dict[int, ProgressRecord] = Field(default_factory=dict, alias="questionStates")
    current_question_id: Optional[int] = Field(default=None, alias="currentQuestionId")

    @validator("question_states")
    def _keys_match_ids(cls, v: Dict[int, ProgressRecord]):  # type: ignore[override]
        for qid, rec in v.items():
            if int(qid) != rec.question_id:
                raise ValueError(f"progress key {qid} does not match questionId {rec.question_id}")
        return v


class StatsRecord(BaseModel):
    total_answers: int = Field(default=0, alias="totalAnswers", ge=0)
    correct_answers: int = Field(default=0, alias="correctAnswers", ge=0)

    @validator("correct_answers")
    def _correct_le_total(cls, v: int, values):  # type: ignore[override]
        total = values.get("total_answers")
        if total is not None and v > total:
            raise ValueError("correctAnswers must be <= totalAnswers")
        return v
