from __future__ import annotations

"""Read and write the three session entries through a key-value store.

Each entry is loaded independently; an entry that is missing, not valid
JSON, or fails schema validation is treated as absent.
"""

import json
import math
import sys
from typing import Any, Dict, Optional

from ..app.explain import trace as xtrace
from ..session.state import SessionState, Stats, TimerState
from .schema import ALL_KEYS, SESSION_KEY, STATS_KEY, TIMER_START_KEY, SessionRecord, StatsRecord
from .store import KeyValueStore


def _as_mapping(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"expected a JSON object, got {type(data).__name__}")
    return data


class SessionRepository:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    # --- load ---

    def load_session(self) -> Optional[SessionState]:
        raw = self.store.get(SESSION_KEY)
        if raw is None:
            return None
        try:
            rec = SessionRecord.parse_obj(_as_mapping(json.loads(raw)))
        except (ValueError, TypeError) as e:
            xtrace("session_entry_discarded", {"reason": str(e)[:200]})
            return None
        return SessionState.from_json(rec.dict(by_alias=True))

    def load_stats(self) -> Optional[Stats]:
        raw = self.store.get(STATS_KEY)
        if raw is None:
            return None
        try:
            rec = StatsRecord.parse_obj(_as_mapping(json.loads(raw)))
        except (ValueError, TypeError) as e:
            xtrace("stats_entry_discarded", {"reason": str(e)[:200]})
            return None
        return Stats.from_json(rec.dict(by_alias=True))

    def load_timer(self) -> Optional[TimerState]:
        raw = self.store.get(TIMER_START_KEY)
        if raw is None:
            return None
        try:
            value = float(raw)
        except (ValueError, TypeError):
            return None
        if not math.isfinite(value):
            return None
        return TimerState(start_epoch_ms=int(value))

    # --- save ---

    def _write(self, key: str, value: str) -> None:
        try:
            self.store.set(key, value)
        except OSError as e:
            print(f"[WARN] Could not persist {key}: {e}", file=sys.stderr)

    def save_session(self, state: SessionState) -> None:
        self._write(SESSION_KEY, json.dumps(state.to_json(), separators=(",", ":")))

    def save_stats(self, stats: Stats) -> None:
        self._write(STATS_KEY, json.dumps(stats.to_json(), separators=(",", ":")))

    def save_timer(self, timer: TimerState) -> None:
        self._write(TIMER_START_KEY, str(int(timer.start_epoch_ms)))

    def clear(self) -> None:
        for key in ALL_KEYS:
            try:
                self.store.remove(key)
            except OSError as e:
                print(f"[WARN] Could not remove {key}: {e}", file=sys.stderr)
