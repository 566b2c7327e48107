from .schema import ALL_KEYS, SESSION_KEY, STATS_KEY, TIMER_START_KEY, ProgressRecord, SessionRecord, StatsRecord
from .store import JsonFileStore, KeyValueStore, MemoryStore
from .repository import SessionRepository

__all__ = [
    "ALL_KEYS",
    "SESSION_KEY",
    "STATS_KEY",
    "TIMER_START_KEY",
    "ProgressRecord",
    "SessionRecord",
    "StatsRecord",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "SessionRepository",
]
