from __future__ import annotations

"""Plaintext question bank parser.

Corpus layout, one block per question, blocks separated by a line of at
least 35 underscores:

    12. What color is the sky?
    * blue
    red
    green
    ___________________________________

The correct option is marked with a leading ``*``. Parsing is best-effort:
any block that does not have the one-question-plus-three-options shape is
skipped, and later blocks reusing an id are dropped.
"""

import re
from typing import Dict, Iterable, List, Optional

from .models import AnswerOption, Question

OPTIONS_PER_QUESTION = 3
MIN_BLOCK_LINES = 1 + OPTIONS_PER_QUESTION
QUESTION_LINE_WINDOW = 3

_SEPARATOR_RE = re.compile(r"^[ \t]*_{35,}[ \t]*$", re.MULTILINE)
_QUESTION_RE = re.compile(r"^(\d+)\s*\.")
_QUESTION_PREFIX_RE = re.compile(r"^\d+\s*\.?\s*")
_CORRECT_MARK_RE = re.compile(r"^\*\s*")


def split_blocks(raw: str) -> List[str]:
    """Split raw corpus text into trimmed, non-empty blocks."""
    text = raw.replace("\r\n", "\n").replace("\r", "\n")
    blocks = (b.strip() for b in _SEPARATOR_RE.split(text))
    return [b for b in blocks if b]


def _block_lines(block: str) -> List[str]:
    lines = (line.strip() for line in block.split("\n"))
    return [line for line in lines if line]


def parse_option(idx: int, line: str) -> AnswerOption:
    m = _CORRECT_MARK_RE.match(line)
    if m:
        return AnswerOption(id=idx, text=line[m.end():], is_correct=True)
    return AnswerOption(id=idx, text=line, is_correct=False)


def parse_block(block: str) -> Optional[Question]:
    """Parse one block, or return None when it does not fit the expected shape."""
    lines = _block_lines(block)
    if len(lines) < MIN_BLOCK_LINES:
        return None

    q_idx = None
    for i, line in enumerate(lines[:QUESTION_LINE_WINDOW]):
        if _QUESTION_RE.match(line):
            q_idx = i
            break
    if q_idx is None:
        return None

    question_line = lines[q_idx]
    qid = int(_QUESTION_RE.match(question_line).group(1))
    qtext = _QUESTION_PREFIX_RE.sub("", question_line, count=1).strip()

    option_lines = lines[q_idx + 1 : q_idx + 1 + OPTIONS_PER_QUESTION]
    if len(option_lines) != OPTIONS_PER_QUESTION:
        return None

    options = tuple(parse_option(i, line) for i, line in enumerate(option_lines))
    return Question(id=qid, text=qtext, options=options)


def dedupe(questions: Iterable[Question]) -> List[Question]:
    """Keep the first question seen for each id."""
    seen = set()
    out: List[Question] = []
    for q in questions:
        if q.id in seen:
            continue
        seen.add(q.id)
        out.append(q)
    return out


def parse(raw: str) -> List[Question]:
    """Parse a corpus into an ordered, deduplicated list of questions.

    Never raises on malformed input; unparseable blocks are skipped.
    """
    parsed = []
    for block in split_blocks(raw or ""):
        q = parse_block(block)
        if q is not None:
            parsed.append(q)
    return dedupe(parsed)


def build_bank(questions: Iterable[Question]) -> Dict[int, Question]:
    """Map id -> Question, preserving first-occurrence order."""
    bank: Dict[int, Question] = {}
    for q in questions:
        bank.setdefault(q.id, q)
    return bank
