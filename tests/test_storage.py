import json
import tempfile
import unittest
from pathlib import Path

from atplquiz.session import QuestionProgress, SessionState, Stats, TimerState
from atplquiz.storage import (
    SESSION_KEY,
    STATS_KEY,
    TIMER_START_KEY,
    JsonFileStore,
    MemoryStore,
    SessionRepository,
)


class RepositoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = MemoryStore()
        self.repo = SessionRepository(self.store)

    def test_missing_entries_load_as_none(self) -> None:
        self.assertIsNone(self.repo.load_session())
        self.assertIsNone(self.repo.load_stats())
        self.assertIsNone(self.repo.load_timer())

    def test_session_layout_is_stable(self) -> None:
        state = SessionState(progress={12: QuestionProgress(12, 2, False)}, current_question_id=12)
        self.repo.save_session(state)
        data = json.loads(self.store.get(SESSION_KEY))
        self.assertEqual(
            data,
            {
                "questionStates": {"12": {"questionId": 12, "consecutiveCorrect": 2, "isExcluded": False}},
                "currentQuestionId": 12,
            },
        )
        self.assertEqual(self.repo.load_session(), state)

    def test_stats_and_timer_entries(self) -> None:
        self.repo.save_stats(Stats(7, 4))
        self.repo.save_timer(TimerState(1_700_000_000_000))
        self.assertEqual(json.loads(self.store.get(STATS_KEY)), {"totalAnswers": 7, "correctAnswers": 4})
        self.assertEqual(self.store.get(TIMER_START_KEY), "1700000000000")
        self.assertEqual(self.repo.load_stats(), Stats(7, 4))
        self.assertEqual(self.repo.load_timer(), TimerState(1_700_000_000_000))

    def test_corrupt_entries_are_treated_as_absent(self) -> None:
        bad_sessions = [
            "{not json",
            "[]",
            json.dumps({"questionStates": {"1": {"questionId": 1, "consecutiveCorrect": 9, "isExcluded": True}}}),
            json.dumps({"questionStates": {"1": {"questionId": 1, "consecutiveCorrect": 5, "isExcluded": False}}}),
            json.dumps({"questionStates": {"1": {"questionId": 2, "consecutiveCorrect": 0, "isExcluded": False}}}),
            json.dumps({"questionStates": {"1": {"consecutiveCorrect": 0}}}),
        ]
        for raw in bad_sessions:
            self.store.set(SESSION_KEY, raw)
            self.assertIsNone(self.repo.load_session(), raw)

        for raw in ["oops", json.dumps({"totalAnswers": 1, "correctAnswers": 2}), json.dumps({"totalAnswers": -1})]:
            self.store.set(STATS_KEY, raw)
            self.assertIsNone(self.repo.load_stats(), raw)

        for raw in ["abc", "nan", "inf", ""]:
            self.store.set(TIMER_START_KEY, raw)
            self.assertIsNone(self.repo.load_timer(), raw)

    def test_one_bad_entry_does_not_spoil_the_others(self) -> None:
        self.repo.save_stats(Stats(3, 1))
        self.store.set(SESSION_KEY, "garbage")
        self.assertIsNone(self.repo.load_session())
        self.assertEqual(self.repo.load_stats(), Stats(3, 1))

    def test_clear_removes_all_entries(self) -> None:
        self.repo.save_session(SessionState())
        self.repo.save_stats(Stats())
        self.repo.save_timer(TimerState(1))
        self.repo.clear()
        self.assertEqual(self.store.snapshot(), {})


class JsonFileStoreTests(unittest.TestCase):
    def test_values_survive_reopen(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "nested" / "state.json"
            store = JsonFileStore(path)
            store.set("k", "значение")
            store.set("other", "1")
            store.remove("other")
            again = JsonFileStore(path)
            self.assertEqual(again.get("k"), "значение")
            self.assertIsNone(again.get("other"))
            self.assertEqual([p.name for p in path.parent.iterdir()], ["state.json"])

    def test_unreadable_file_starts_empty(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "state.json"
            path.write_text("{broken", encoding="utf-8")
            self.assertIsNone(JsonFileStore(path).get("k"))
            path.write_text("[1, 2]", encoding="utf-8")
            self.assertIsNone(JsonFileStore(path).get("k"))


if __name__ == "__main__":
    unittest.main()
