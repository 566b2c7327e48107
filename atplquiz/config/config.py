from __future__ import annotations

"""Configuration loading and validation for atplquiz.

Loads YAML configuration, applies section defaults, and replaces bad
values with defaults after printing a warning.
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..app.controller import DEFAULT_AUTO_ADVANCE_MS

ALLOWED_ENCODINGS = {"utf-8", "utf-8-sig", "cp1251", "koi8-r"}
MAX_AUTO_ADVANCE_MS = 10_000


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"ERROR: Config file is not valid YAML: {path}: {e}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(f"ERROR: Config file must contain a mapping: {path}", file=sys.stderr)
        sys.exit(1)
    return data


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or the packaged defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        return _load_yaml(Path(path))
    return _load_yaml(Path(__file__).with_name("defaults.yml"))


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated configuration dictionary (modified in place).
    """
    for section in ("corpus", "storage", "session", "ui"):
        if not isinstance(cfg.get(section), dict):
            cfg[section] = {}

    corpus = cfg["corpus"]
    storage = cfg["storage"]
    session = cfg["session"]
    ui = cfg["ui"]

    corpus.setdefault("path", "./questions.txt")
    corpus.setdefault("encoding", "utf-8")
    storage.setdefault("path", "./.atplquiz/state.json")
    session.setdefault("auto_advance_ms", DEFAULT_AUTO_ADVANCE_MS)
    ui.setdefault("show_streak", True)

    encoding = str(corpus.get("encoding", "")).lower()
    if encoding not in ALLOWED_ENCODINGS:
        print(f"WARNING: Unsupported corpus encoding '{corpus.get('encoding')}', using 'utf-8'.", file=sys.stderr)
        encoding = "utf-8"
    corpus["encoding"] = encoding

    try:
        delay = int(session.get("auto_advance_ms"))
    except (TypeError, ValueError):
        delay = -1
    if not 0 <= delay <= MAX_AUTO_ADVANCE_MS:
        print(
            f"WARNING: auto_advance_ms must be within 0..{MAX_AUTO_ADVANCE_MS}, "
            f"got {session.get('auto_advance_ms')!r}; using {DEFAULT_AUTO_ADVANCE_MS}.",
            file=sys.stderr,
        )
        delay = DEFAULT_AUTO_ADVANCE_MS
    session["auto_advance_ms"] = delay

    corpus["path"] = str(corpus["path"])
    storage["path"] = str(storage["path"])
    ui["show_streak"] = bool(ui.get("show_streak", True))
    return cfg
