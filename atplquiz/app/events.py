from __future__ import annotations

"""Tiny pub/sub event bus between the controller and the front end."""

from typing import Any, Callable, Dict, List

QUESTION_PRESENTED = "question_presented"
ANSWER_GRADED = "answer_graded"
QUESTION_EXCLUDED = "question_excluded"
SESSION_FINISHED = "session_finished"
SESSION_RESET = "session_reset"


class EventBus:
    def __init__(self) -> None:
        self._subs: Dict[str, List[Callable[[Any], None]]] = {}

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        self._subs.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        handlers = self._subs.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, payload: Any = None) -> None:
        for h in list(self._subs.get(event, [])):
            h(payload)
