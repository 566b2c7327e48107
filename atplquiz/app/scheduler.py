from __future__ import annotations

"""Deferred, cancellable callbacks on an injected clock.

Nothing runs on its own: the owner calls ``run_due`` from its event loop,
so callbacks never interleave with a user action.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, List


def system_clock_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class ScheduledTask:
    due_ms: int
    callback: Callable[[], None]
    seq: int
    cancelled: bool = field(default=False)

    def cancel(self) -> None:
        self.cancelled = True


class DeferredScheduler:
    def __init__(self, clock: Callable[[], int] = system_clock_ms) -> None:
        self.clock = clock
        self._tasks: List[ScheduledTask] = []
        self._seq = 0

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        self._seq += 1
        task = ScheduledTask(due_ms=self.clock() + max(int(delay_ms), 0), callback=callback, seq=self._seq)
        self._tasks.append(task)
        return task

    def pending(self) -> List[ScheduledTask]:
        return [t for t in self._tasks if not t.cancelled]

    def next_due_ms(self) -> int | None:
        live = self.pending()
        if not live:
            return None
        return min(t.due_ms for t in live)

    def run_due(self) -> int:
        """Run every live task whose due time has passed. Returns how many ran."""
        now = self.clock()
        due = sorted((t for t in self._tasks if not t.cancelled and t.due_ms <= now), key=lambda t: (t.due_ms, t.seq))
        self._tasks = [t for t in self._tasks if not t.cancelled and t.due_ms > now]
        for t in due:
            if not t.cancelled:
                t.callback()
        return len(due)

    def cancel_all(self) -> None:
        for t in self._tasks:
            t.cancel()
        self._tasks = []
