from .models import AnswerOption, Question
from .parser import build_bank, dedupe, parse, parse_block, split_blocks
from .loader import CorpusLoadError, read_corpus

__all__ = [
    "AnswerOption",
    "Question",
    "build_bank",
    "dedupe",
    "parse",
    "parse_block",
    "split_blocks",
    "CorpusLoadError",
    "read_corpus",
]
