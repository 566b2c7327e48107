from __future__ import annotations

"""Terminal front end for atplquiz."""

import argparse
import sys
import time
from typing import Any, Callable, Dict, Optional

from .. import __version__
from ..bank.loader import CorpusLoadError, read_corpus
from ..bank.parser import parse, parse_block, split_blocks
from ..config.config import load_config, validate_config
from ..stats.stats import format_streak, format_summary
from ..storage.store import JsonFileStore
from ..util.randomness import make_rng
from . import events
from .controller import QuizController
from .explain import enable as explain_enable

LABELS = "ABC"

Ask = Callable[[str], str]
Inform = Callable[[str], None]


def _console_ui() -> Dict[str, Any]:
    def ask(prompt: str) -> str:
        return input(prompt)

    def inform(msg: str) -> None:
        print(msg)

    def sleep_ms(ms: int) -> None:
        time.sleep(max(ms, 0) / 1000.0)

    return {"ask": ask, "inform": inform, "sleep_ms": sleep_ms}


def _parse_choice(raw: str) -> Optional[int]:
    s = raw.strip().upper()
    if s in ("1", "2", "3"):
        return int(s) - 1
    if len(s) == 1 and s in LABELS:
        return LABELS.index(s)
    return None


def _render_question(ctrl: QuizController, inform: Inform, show_streak: bool) -> None:
    q = ctrl.current_question
    sig = ctrl.tick()
    header = f"[{sig.elapsed}]  {sig.completed_count}/{sig.total_count} mastered ({sig.progress_percent}%)"
    if show_streak:
        header += f"  streak {format_streak(sig.current_streak)}"
    inform("")
    inform(header)
    inform(f"#{q.id}. {q.text}")
    for i, opt in enumerate(ctrl.displayed_options):
        inform(f"  {i + 1}) {LABELS[i]}. {opt.text}")


def _report_answer(ctrl: QuizController, inform: Inform) -> None:
    chosen = ctrl.displayed_options[ctrl.selected_index]
    if ctrl.last_answer_correct:
        inform(f"Correct! {ctrl.selected_index + 1}) {chosen.text}")
        return
    right = next((i for i, o in enumerate(ctrl.displayed_options) if o.is_correct), None)
    if right is None:
        inform("Incorrect. This question has no marked answer.")
    else:
        inform(f"Incorrect. Answer was {right + 1}) {ctrl.displayed_options[right].text}")


def _confirm_reset(ask: Ask) -> bool:
    return ask("Reset all progress? [y/N]: ").strip().lower() in ("y", "yes")


def run_quiz(ctrl: QuizController, ui: Dict[str, Any], *, show_streak: bool = True) -> int:
    """Interactive loop over a loaded controller. Returns an exit code."""
    ask: Ask = ui["ask"]
    inform: Inform = ui["inform"]
    sleep_ms = ui.get("sleep_ms", lambda _ms: None)

    def on_excluded(q) -> None:
        inform(f"Question #{q.id} mastered and retired.")

    ctrl.bus.subscribe(events.QUESTION_EXCLUDED, on_excluded)
    try:
        return _quiz_loop(ctrl, ask, inform, sleep_ms, show_streak)
    finally:
        ctrl.bus.unsubscribe(events.QUESTION_EXCLUDED, on_excluded)


def _quiz_loop(ctrl: QuizController, ask: Ask, inform: Inform, sleep_ms: Callable[[int], None], show_streak: bool) -> int:
    while True:
        try:
            if ctrl.current_question is None:
                sig = ctrl.tick()
                inform("")
                if ctrl.finished:
                    inform("All questions mastered!")
                    inform(format_summary(sig))
                    cmd = ask("[r] reset, [q] quit: ").strip().lower()
                else:
                    inform(format_summary(sig))
                    cmd = ask("[Enter] start, [r] reset, [q] quit: ").strip().lower()
                    if cmd == "":
                        ctrl.start()
                        continue
                if cmd == "q":
                    return 0
                if cmd == "r" and _confirm_reset(ask):
                    ctrl.reset()
                continue

            if not ctrl.has_answered:
                _render_question(ctrl, inform, show_streak)
                cmd = ask("Answer [1-3], [r] reset, [q] quit: ").strip()
                if cmd.lower() == "q":
                    return 0
                if cmd.lower() == "r":
                    if _confirm_reset(ask):
                        ctrl.reset()
                    continue
                idx = _parse_choice(cmd)
                if idx is None:
                    inform("Please answer 1, 2 or 3.")
                    continue
                if ctrl.choose(idx) is not None:
                    _report_answer(ctrl, inform)
                continue

            if ctrl.auto_advance_pending:
                due = ctrl.scheduler.next_due_ms()
                if due is not None:
                    sleep_ms(due - ctrl.clock())
                ctrl.tick()
                if ctrl.auto_advance_pending:
                    # clock did not reach the due time; move on by hand
                    ctrl.advance()
                continue

            cmd = ask("[Enter] next, [q] quit: ").strip().lower()
            if cmd == "q":
                return 0
            ctrl.advance()
        except (EOFError, KeyboardInterrupt):
            inform("")
            return 0


def _build_controller(cfg: Dict[str, Any], seed: Optional[int]) -> QuizController:
    store = JsonFileStore(cfg["storage"]["path"])
    return QuizController(
        store,
        rng=make_rng(seed),
        auto_advance_ms=int(cfg["session"]["auto_advance_ms"]),
    )


def _load(ctrl: QuizController, cfg: Dict[str, Any]) -> bool:
    corpus = cfg["corpus"]
    try:
        raw = read_corpus(corpus["path"], corpus["encoding"])
    except CorpusLoadError as e:
        ctrl.fail_load(str(e))
        print(f"Load error: {e}", file=sys.stderr)
        return False
    ctrl.load_corpus(raw)
    return True


def _apply_overrides(cfg: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    if getattr(args, "corpus", None):
        cfg.setdefault("corpus", {})["path"] = args.corpus
    if getattr(args, "state", None):
        cfg.setdefault("storage", {})["path"] = args.state
    if getattr(args, "auto_advance_ms", None) is not None:
        cfg.setdefault("session", {})["auto_advance_ms"] = args.auto_advance_ms
    return validate_config(cfg)


def _cmd_check(cfg: Dict[str, Any], show_list: bool) -> int:
    corpus = cfg["corpus"]
    try:
        raw = read_corpus(corpus["path"], corpus["encoding"])
    except CorpusLoadError as e:
        print(f"Load error: {e}", file=sys.stderr)
        return 2
    blocks = split_blocks(raw)
    well_formed = sum(1 for b in blocks if parse_block(b) is not None)
    questions = parse(raw)
    print(f"Blocks: {len(blocks)}")
    print(f"Parsed: {well_formed} (skipped {len(blocks) - well_formed})")
    print(f"Unique questions: {len(questions)} (duplicates dropped {well_formed - len(questions)})")
    for q in questions:
        marked = sum(1 for o in q.options if o.is_correct)
        if marked != 1:
            print(f"WARNING: question #{q.id} has {marked} options marked correct.", file=sys.stderr)
        if show_list:
            print(f"#{q.id}. {q.text}")
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="atplquiz", description="Multiple-choice self-study quiz")
    p.add_argument("--version", action="version", version=f"atplquiz {__version__}")
    sub = p.add_subparsers(dest="cmd", required=True)

    def common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--config", default=None, help="Path to YAML config")
        sp.add_argument("--corpus", default=None, help="Question bank text file")
        sp.add_argument("--state", default=None, help="Progress file")
        sp.add_argument("--explain", action="store_true", help="Trace session milestones to stderr")

    rp = sub.add_parser("run", help="Take the quiz")
    common(rp)
    rp.add_argument("--seed", type=int, default=None)
    rp.add_argument("--auto-advance-ms", dest="auto_advance_ms", type=int, default=None)

    cp = sub.add_parser("check", help="Parse the bank and report what was accepted")
    common(cp)
    cp.add_argument("--list", dest="show_list", action="store_true", help="List parsed questions")

    sp = sub.add_parser("status", help="Show saved progress")
    common(sp)

    xp = sub.add_parser("reset", help="Discard all saved progress")
    common(xp)
    xp.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    args = p.parse_args(argv)
    if args.explain:
        explain_enable(True)
    cfg = _apply_overrides(load_config(args.config), args)

    if args.cmd == "check":
        return _cmd_check(cfg, args.show_list)

    if args.cmd == "run":
        ctrl = _build_controller(cfg, args.seed)
        if not _load(ctrl, cfg):
            return 2
        if not ctrl.bank:
            print("No questions available.")
            return 1
        return run_quiz(ctrl, _console_ui(), show_streak=cfg["ui"]["show_streak"])

    if args.cmd == "status":
        ctrl = _build_controller(cfg, None)
        if not _load(ctrl, cfg):
            return 2
        print(format_summary(ctrl.signals()))
        print(f"Answers: {ctrl.stats.correct_answers}/{ctrl.stats.total_answers} correct")
        return 0

    if args.cmd == "reset":
        if not args.yes and not _confirm_reset(input):
            print("Aborted.")
            return 1
        ctrl = _build_controller(cfg, None)
        _load(ctrl, cfg)
        ctrl.reset()
        print("Progress reset.")
        return 0

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
