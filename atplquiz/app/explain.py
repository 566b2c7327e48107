from __future__ import annotations

"""Explain mode: one-line traces at session milestones.

Off by default; the CLI turns it on with ``--explain``.
"""

import json
import sys
from typing import Any, Dict

_ENABLED = False


def enable(flag: bool = True) -> None:
    global _ENABLED
    _ENABLED = bool(flag)


def enabled() -> bool:
    return _ENABLED


def trace(event: str, payload: Dict[str, Any] | None = None) -> None:
    if not _ENABLED:
        return
    try:
        data = json.dumps(payload or {}, ensure_ascii=False, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        data = "{}"
    print(f"[EXPLAIN] {event} :: {data}", file=sys.stderr)
