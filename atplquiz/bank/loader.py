from __future__ import annotations

"""Corpus loading from disk."""

from pathlib import Path


class CorpusLoadError(Exception):
    """Raised when the corpus file cannot be read."""


def read_corpus(path: str | Path, encoding: str = "utf-8") -> str:
    """Read the raw corpus text, dropping a leading BOM if present."""
    p = Path(path)
    try:
        with p.open("r", encoding=encoding) as f:
            text = f.read()
    except FileNotFoundError as exc:
        raise CorpusLoadError(f"Corpus file not found: {p}") from exc
    except (OSError, UnicodeDecodeError, LookupError) as exc:
        raise CorpusLoadError(f"Cannot read corpus {p}: {exc}") from exc
    return text.lstrip("\ufeff")
