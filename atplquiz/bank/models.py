from __future__ import annotations

"""Question bank records."""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class AnswerOption:
    id: int
    text: str
    is_correct: bool


@dataclass(frozen=True)
class Question:
    """A single multiple-choice question as parsed from the corpus."""

    id: int
    text: str
    options: Tuple[AnswerOption, ...]

    def correct_option(self) -> Optional[AnswerOption]:
        for opt in self.options:
            if opt.is_correct:
                return opt
        return None
