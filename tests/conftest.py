from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (ROOT / "src",):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from vocab_drill.quiz.bank import QuestionBank  # noqa: E402
from vocab_drill.quiz.models import SessionListener, VocabularyItem  # noqa: E402


class RecordingListener(SessionListener):
    """Collects every notification as ``(hook, args)`` tuples."""

    def __init__(self) -> None:
        self.events: list[tuple[str, tuple]] = []

    def on_question_ready(self, prompt):
        self.events.append(("question_ready", (prompt,)))

    def on_answer_evaluated(self, record, score_delta, streak):
        self.events.append(("answer_evaluated", (record, score_delta, streak)))

    def on_tick(self, seconds_remaining):
        self.events.append(("tick", (seconds_remaining,)))

    def on_session_ended(self, summary):
        self.events.append(("session_ended", (summary,)))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def of(self, name: str) -> list[tuple]:
        return [args for event, args in self.events if event == name]


def make_numbers_items() -> list[VocabularyItem]:
    return [
        VocabularyItem("一", "ichi", "one", "numbers"),
        VocabularyItem("二", "ni", "two", "numbers"),
        VocabularyItem("三", "san", "three", "numbers"),
    ]


@pytest.fixture
def rng() -> random.Random:
    return random.Random(0)


@pytest.fixture
def numbers_items() -> list[VocabularyItem]:
    return make_numbers_items()


@pytest.fixture
def numbers_bank(numbers_items, rng) -> QuestionBank:
    """Three-item ``numbers`` bank plus an empty ``empty`` category."""

    return QuestionBank(
        {"numbers": numbers_items, "empty": []},
        display_names={"numbers": "Numbers"},
        rng=rng,
    )


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def workspace_home(tmp_path: Path, monkeypatch) -> Path:
    """Point the workspace env at a per-test directory."""

    home = tmp_path / "vocab-data"
    monkeypatch.setenv("VOCAB_DRILL_DATA_HOME", str(home))
    return home
