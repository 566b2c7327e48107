import contextlib
import io
import json
import random
import tempfile
import unittest
from dataclasses import replace
from pathlib import Path

from atplquiz.app import explain
from atplquiz.app.cli import main
from atplquiz.app.controller import QuizController
from atplquiz.session import QuestionProgress
from atplquiz.storage import MemoryStore

SEP = "_" * 35
CORPUS = "7. Какого цвета небо?\n*Синего\nЗелёного\nКрасного\n" + SEP + "\n"


def traces(text):
    out = []
    for line in text.splitlines():
        if not line.startswith("[EXPLAIN] "):
            continue
        event, _, data = line[len("[EXPLAIN] "):].partition(" :: ")
        out.append((event, json.loads(data)))
    return out


class ExplainTestCase(unittest.TestCase):
    def setUp(self) -> None:
        explain.enable(True)
        self.addCleanup(explain.enable, False)


class TraceTests(ExplainTestCase):
    def test_toggle(self) -> None:
        self.assertTrue(explain.enabled())
        explain.enable(False)
        self.assertFalse(explain.enabled())
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            explain.trace("bank_loaded", {"questions": 1})
        self.assertEqual(err.getvalue(), "")

    def test_payload_is_one_line_and_keeps_cyrillic(self) -> None:
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            explain.trace("question_presented", {"text": "Какого цвета\nнебо?", "order": [2, 0, 1]})
        text = err.getvalue()
        self.assertEqual(text.count("\n"), 1)
        self.assertTrue(text.startswith('[EXPLAIN] question_presented :: {"text":"Какого цвета\\nнебо?"'))
        self.assertEqual(traces(text), [("question_presented", {"text": "Какого цвета\nнебо?", "order": [2, 0, 1]})])

    def test_unserializable_payload_falls_back_to_str(self) -> None:
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            explain.trace("load_failed", {"error": ValueError("нет файла")})
        self.assertEqual(traces(err.getvalue()), [("load_failed", {"error": "нет файла"})])


class ControllerTraceTests(ExplainTestCase):
    def test_session_milestones(self) -> None:
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            ctrl = QuizController(MemoryStore(), rng=random.Random(1), clock=lambda: 0, auto_advance_ms=800)
            ctrl.load_corpus(CORPUS)
            ctrl.start()
            progress = dict(ctrl.state.progress)
            progress[7] = QuestionProgress(question_id=7, consecutive_correct=4)
            ctrl.state = replace(ctrl.state, progress=progress)
            ctrl.choose(next(i for i, o in enumerate(ctrl.displayed_options) if o.is_correct))
            ctrl.advance()
            ctrl.reset()
        got = traces(err.getvalue())
        names = [e for e, _ in got]
        for event in (
            "state_restored",
            "bank_loaded",
            "question_presented",
            "answer_graded",
            "question_excluded",
            "auto_advance_scheduled",
            "auto_advance_cancelled",
            "session_reset",
        ):
            self.assertIn(event, names)
        self.assertLess(names.index("answer_graded"), names.index("question_excluded"))
        self.assertLess(names.index("question_excluded"), names.index("auto_advance_scheduled"))
        self.assertLess(names.index("auto_advance_scheduled"), names.index("auto_advance_cancelled"))
        self.assertEqual(names[-1], "session_reset")

        presented = dict(got)["question_presented"]
        self.assertEqual(presented["question"], 7)
        self.assertEqual(presented["text"], "Какого цвета небо?")
        self.assertEqual(sorted(presented["order"]), [0, 1, 2])
        self.assertIn("Какого цвета небо?", err.getvalue())
        self.assertEqual(dict(got)["answer_graded"], {"question": 7, "correct": True, "streak": 5})
        self.assertEqual(dict(got)["bank_loaded"], {"questions": 1})

    def test_silent_when_disabled(self) -> None:
        explain.enable(False)
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            ctrl = QuizController(MemoryStore(), rng=random.Random(1), clock=lambda: 0)
            ctrl.load_corpus(CORPUS)
            ctrl.start()
            ctrl.choose(0)
            ctrl.reset()
        self.assertEqual(err.getvalue(), "")


class CommandLineTraceTests(ExplainTestCase):
    def setUp(self) -> None:
        super().setUp()
        explain.enable(False)
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.corpus = Path(self.tmp.name) / "questions.txt"
        self.corpus.write_text(CORPUS, encoding="utf-8")
        self.state = Path(self.tmp.name) / "state.json"

    def test_flag_turns_tracing_on(self) -> None:
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(["status", "--corpus", str(self.corpus), "--state", str(self.state), "--explain"])
        self.assertEqual(code, 0)
        self.assertTrue(explain.enabled())
        names = [e for e, _ in traces(err.getvalue())]
        self.assertEqual(names, ["state_restored", "bank_loaded"])


if __name__ == "__main__":
    unittest.main()
