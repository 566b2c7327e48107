from __future__ import annotations

"""Quiz controller: drives the session engine from user actions.

Owns the bank, the loading/error gate, write-through persistence, the
shuffled option order of the current presentation and the cancellable
auto-advance that follows a question being mastered. Front ends call
``start``/``choose``/``advance``/``reset`` and poll ``tick``.
"""

import random
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from ..bank.models import AnswerOption, Question
from ..bank.parser import build_bank, parse
from ..session import engine
from ..session.state import SessionState, Stats, TimerState
from ..stats.stats import Signals, compute_signals
from ..storage.repository import SessionRepository
from ..storage.store import KeyValueStore
from . import events
from .events import EventBus
from .explain import enabled as explain_enabled
from .explain import trace as xtrace
from .scheduler import DeferredScheduler, ScheduledTask, system_clock_ms

STATUS_LOADING = "loading"
STATUS_READY = "ready"
STATUS_ERROR = "error"

DEFAULT_AUTO_ADVANCE_MS = 800


class QuizController:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        rng: Optional[random.Random] = None,
        clock: Callable[[], int] = system_clock_ms,
        scheduler: Optional[DeferredScheduler] = None,
        auto_advance_ms: int = DEFAULT_AUTO_ADVANCE_MS,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.repo = SessionRepository(store)
        self.rng = rng or random.Random()
        self.clock = clock
        self.scheduler = scheduler or DeferredScheduler(clock)
        self.auto_advance_ms = int(auto_advance_ms)
        self.bus = bus or EventBus()

        self.bank: Dict[int, Question] = {}
        self.load_error: Optional[str] = None

        self.state: SessionState = self.repo.load_session() or SessionState()
        self.stats: Stats = self.repo.load_stats() or Stats()
        self.timer: TimerState = self._restore_timer()

        # per-presentation state
        self.displayed_options: List[AnswerOption] = []
        self.has_answered = False
        self.selected_index: Optional[int] = None
        self.last_answer_correct: Optional[bool] = None
        self.excluded_notice = False
        self._auto_task: Optional[ScheduledTask] = None
        self._presentation = 0

        xtrace(
            "state_restored",
            {
                "records": len(self.state.progress),
                "current": self.state.current_question_id,
                "answers": self.stats.total_answers,
            },
        )

    def _restore_timer(self) -> TimerState:
        timer = self.repo.load_timer()
        if timer is None:
            timer = TimerState(start_epoch_ms=self.clock())
            self.repo.save_timer(timer)
        return timer

    # --- loading ---

    @property
    def status(self) -> str:
        if self.load_error is not None:
            return STATUS_ERROR
        if not self.bank:
            return STATUS_LOADING
        return STATUS_READY

    def load_corpus(self, raw: str) -> int:
        """Parse the corpus and bring the session in line with it.

        Returns the number of questions in the bank.
        """
        return self.load_questions(parse(raw))

    def load_questions(self, questions: List[Question]) -> int:
        self.bank = build_bank(questions)
        xtrace("bank_loaded", {"questions": len(self.bank)})
        if not self.bank:
            return 0

        progress = engine.initialize_progress(self.bank.keys(), self.state.progress)
        state = replace(self.state, progress=progress)
        current = state.current_question_id
        if current is not None and current not in engine.active_pool(self.bank.keys(), progress):
            # left over from a mastered question or one dropped from the corpus
            state = replace(state, current_question_id=engine.pick_next(self.bank.keys(), progress, self.rng))
            xtrace("current_repaired", {"was": current, "now": state.current_question_id})
        self._commit_session(state)
        self._present()
        return len(self.bank)

    def fail_load(self, message: str) -> None:
        self.load_error = str(message)
        xtrace("load_failed", {"error": self.load_error})

    # --- read-only views ---

    @property
    def current_question(self) -> Optional[Question]:
        qid = self.state.current_question_id
        if qid is None:
            return None
        return self.bank.get(qid)

    @property
    def finished(self) -> bool:
        return self.status == STATUS_READY and engine.is_finished(self.bank.keys(), self.state.progress)

    def elapsed_ms(self) -> int:
        return self.timer.elapsed_ms(self.clock())

    def signals(self) -> Signals:
        return compute_signals(
            self.bank.keys(),
            self.state.progress,
            self.stats,
            self.elapsed_ms(),
            self.state.current_question_id,
        )

    def tick(self) -> Signals:
        """Fire due deferred work and return fresh signals for display."""
        self.scheduler.run_due()
        return self.signals()

    # --- actions ---

    def start(self) -> bool:
        if self.status != STATUS_READY or self.state.current_question_id is not None:
            return False
        state = engine.start(self.bank.keys(), self.state, self.rng)
        if state.current_question_id is None:
            self.bus.emit(events.SESSION_FINISHED, self.signals())
            return False
        self._commit_session(state)
        self._present()
        return True

    def choose(self, index: int) -> Optional[bool]:
        """Answer the current presentation with displayed option ``index``.

        Returns whether the answer was correct, or None when rejected.
        """
        question = self.current_question
        if self.status != STATUS_READY or question is None or self.has_answered:
            return None
        if not 0 <= index < len(self.displayed_options):
            return None
        progress = self.state.progress.get(question.id)
        if progress is None or progress.is_excluded:
            return None

        is_correct = self.displayed_options[index].is_correct
        self.has_answered = True
        self.selected_index = index
        self.last_answer_correct = is_correct

        state, stats = engine.record_answer(self.state, self.stats, question.id, is_correct)
        self.stats = stats
        self.repo.save_stats(stats)
        self._commit_session(state)

        new_progress = state.progress[question.id]
        xtrace(
            "answer_graded",
            {"question": question.id, "correct": is_correct, "streak": new_progress.consecutive_correct},
        )
        self.bus.emit(events.ANSWER_GRADED, {"question": question, "correct": is_correct, "progress": new_progress})

        if new_progress.is_excluded:
            self.excluded_notice = True
            xtrace("question_excluded", {"question": question.id})
            self.bus.emit(events.QUESTION_EXCLUDED, question)
            self._schedule_auto_advance()
        return is_correct

    def advance(self) -> bool:
        if self.status != STATUS_READY or self.state.current_question_id is None:
            return False
        self._cancel_auto_advance()
        self._commit_session(engine.advance(self.bank.keys(), self.state, self.rng))
        self._present()
        if self.state.current_question_id is None:
            self.bus.emit(events.SESSION_FINISHED, self.signals())
        return True

    def reset(self) -> None:
        """Discard all progress, stats and the timer, then start over fresh."""
        self._cancel_auto_advance()
        self.repo.clear()
        state, self.stats, self.timer = engine.reset(self.clock())
        if self.bank:
            state = replace(state, progress=engine.initialize_progress(self.bank.keys(), {}))
        self._commit_session(state)
        self.repo.save_stats(self.stats)
        self.repo.save_timer(self.timer)
        self._present()
        xtrace("session_reset", {"questions": len(self.bank)})
        self.bus.emit(events.SESSION_RESET, None)

    # --- internals ---

    def _commit_session(self, state: SessionState) -> None:
        self.state = state
        self.repo.save_session(state)

    def _present(self) -> None:
        """Start a new presentation of whatever question is current."""
        self._cancel_auto_advance()
        self._presentation += 1
        self.has_answered = False
        self.selected_index = None
        self.last_answer_correct = None
        self.excluded_notice = False
        question = self.current_question
        if question is None:
            self.displayed_options = []
            return
        self.displayed_options = engine.shuffle_options(question, self.rng)
        if explain_enabled():
            xtrace(
                "question_presented",
                {"question": question.id, "text": question.text, "order": [o.id for o in self.displayed_options]},
            )
        self.bus.emit(events.QUESTION_PRESENTED, question)

    def _schedule_auto_advance(self) -> None:
        self._cancel_auto_advance()
        token = self._presentation

        def fire() -> None:
            self._auto_task = None
            if token != self._presentation:
                return
            xtrace("auto_advance", {"presentation": token})
            self.advance()

        self._auto_task = self.scheduler.schedule(self.auto_advance_ms, fire)
        xtrace("auto_advance_scheduled", {"delay_ms": self.auto_advance_ms})

    def _cancel_auto_advance(self) -> None:
        if self._auto_task is not None:
            self._auto_task.cancel()
            self._auto_task = None
            xtrace("auto_advance_cancelled")

    @property
    def auto_advance_pending(self) -> bool:
        return self._auto_task is not None and not self._auto_task.cancelled
