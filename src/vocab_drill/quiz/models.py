"""Data structures shared by the quiz engine and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from .errors import InvalidConfig

__all__ = [
    "DEFAULT_DURATION_SECONDS",
    "DEFAULT_OPTION_COUNT",
    "QUESTION_COUNT_CHOICES",
    "VocabularyItem",
    "PromptPolicy",
    "DifficultyLevel",
    "AnswerMode",
    "Phase",
    "SessionConfig",
    "QuestionPrompt",
    "AnswerRecord",
    "ErrorEntry",
    "SessionSummary",
    "SessionListener",
]

DEFAULT_DURATION_SECONDS = 60
DEFAULT_OPTION_COUNT = 4
QUESTION_COUNT_CHOICES = (5, 10, 15)


@dataclass(frozen=True, eq=False)
class VocabularyItem:
    """A single vocabulary entry.

    Items compare by identity: two entries sharing a reading are still
    distinct questions and distinct distractors.
    """

    word: str
    reading: str
    meaning: str
    category: str
    romaji: str | None = None

    def accepted_answers(self) -> tuple[str, ...]:
        answers = [self.reading.strip().lower()]
        if self.romaji:
            alternate = self.romaji.strip().lower()
            if alternate and alternate not in answers:
                answers.append(alternate)
        return tuple(answers)


@dataclass(frozen=True)
class PromptPolicy:
    """Which item fields the player may see for a difficulty level."""

    show_word: bool
    show_reading: bool
    show_meaning: bool
    requires_free_text: bool = False

    def reveal(self, item: VocabularyItem) -> dict[str, str]:
        revealed: dict[str, str] = {}
        if self.show_word:
            revealed["word"] = item.word
        if self.show_reading:
            revealed["reading"] = item.reading
        if self.show_meaning:
            revealed["meaning"] = item.meaning
        return revealed


_POLICIES = {
    "easy": PromptPolicy(show_word=True, show_reading=True, show_meaning=False),
    "medium": PromptPolicy(
        show_word=True, show_reading=False, show_meaning=False
    ),
    "hard": PromptPolicy(
        show_word=False,
        show_reading=False,
        show_meaning=True,
        requires_free_text=True,
    ),
}

_MULTIPLIERS = {"easy": 1.0, "medium": 1.5, "hard": 2.0}


class DifficultyLevel(Enum):
    """Supported difficulty levels with their scoring weight."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def multiplier(self) -> float:
        return _MULTIPLIERS[self.value]

    @property
    def prompt_policy(self) -> PromptPolicy:
        return _POLICIES[self.value]

    @property
    def display(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_value(cls, value: "DifficultyLevel | str") -> "DifficultyLevel":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        expected = ", ".join(member.value for member in cls)
        raise InvalidConfig(
            f"Unknown difficulty '{value}'. Expected one of: {expected}."
        )


class AnswerMode(Enum):
    """How the player answers: pick an option or type the reading."""

    SELECTION = "selection"
    FREE_TEXT = "free_text"

    @classmethod
    def from_value(cls, value: "AnswerMode | str") -> "AnswerMode":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        if normalized == "freetext":
            normalized = "free_text"
        for member in cls:
            if member.value == normalized:
                return member
        expected = ", ".join(member.value for member in cls)
        raise InvalidConfig(
            f"Unknown answer mode '{value}'. Expected one of: {expected}."
        )


class Phase(Enum):
    CONFIGURING = "configuring"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class SessionConfig:
    """Player choices for one session; immutable once the session starts."""

    category: str
    difficulty: DifficultyLevel | str = DifficultyLevel.EASY
    mode: AnswerMode | str = AnswerMode.SELECTION
    question_count: int = 10
    duration_seconds: int = DEFAULT_DURATION_SECONDS
    option_count: int = DEFAULT_OPTION_COUNT

    def resolve(self) -> "SessionConfig":
        """Return a copy with enum members, raising ``InvalidConfig``."""

        category = str(self.category or "").strip()
        if not category:
            raise InvalidConfig("A category must be provided.")
        difficulty = DifficultyLevel.from_value(self.difficulty)
        mode = AnswerMode.from_value(self.mode)
        for name in ("question_count", "duration_seconds", "option_count"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfig(f"'{name}' must be an integer.")
            if value <= 0:
                raise InvalidConfig(f"'{name}' must be a positive integer.")
        if mode is AnswerMode.SELECTION and self.option_count < 2:
            raise InvalidConfig("Selection mode needs at least two options.")
        if (
            difficulty.prompt_policy.requires_free_text
            and mode is not AnswerMode.FREE_TEXT
        ):
            raise InvalidConfig(
                f"Difficulty '{difficulty.value}' requires free-text answers."
            )
        return replace(
            self, category=category, difficulty=difficulty, mode=mode
        )


@dataclass(frozen=True)
class QuestionPrompt:
    """Everything a presenter needs to show the current question."""

    index: int
    total: int
    item: VocabularyItem
    policy: PromptPolicy
    options: tuple[VocabularyItem, ...] | None = None

    @property
    def number(self) -> int:
        return self.index + 1

    @property
    def revealed(self) -> dict[str, str]:
        return self.policy.reveal(self.item)


@dataclass(frozen=True)
class AnswerRecord:
    """Outcome of one submitted answer."""

    sequence: int
    item: VocabularyItem
    user_answer: str
    is_correct: bool
    score_delta: float
    answered_at: int
    hint_used: bool = False

    @property
    def correct_answer(self) -> str:
        return self.item.reading


@dataclass(frozen=True)
class ErrorEntry:
    """An incorrect answer kept for review."""

    item: VocabularyItem
    user_answer: str
    correct_answer: str

    @property
    def word(self) -> str:
        return self.item.word

    @classmethod
    def from_record(cls, record: AnswerRecord) -> "ErrorEntry":
        return cls(
            item=record.item,
            user_answer=record.user_answer,
            correct_answer=record.correct_answer,
        )


@dataclass(frozen=True)
class SessionSummary:
    """Final, immutable report for a completed session."""

    category: str
    difficulty: DifficultyLevel
    mode: AnswerMode
    score: float
    percentage: float
    elapsed_seconds: int
    max_streak: int
    question_count: int
    questions_answered: int
    correct: tuple[AnswerRecord, ...] = ()
    errors: tuple[ErrorEntry, ...] = ()
    unanswered: tuple[VocabularyItem, ...] = ()
    hints_used: int = 0
    expired: bool = False
    records: tuple[AnswerRecord, ...] = field(default=(), repr=False)

    @property
    def correct_count(self) -> int:
        return len(self.correct)

    def as_dict(self) -> dict[str, Any]:
        """Plain mapping suitable for structured logging."""

        return {
            "category": self.category,
            "difficulty": self.difficulty.value,
            "mode": self.mode.value,
            "score": self.score,
            "percentage": self.percentage,
            "elapsed_seconds": self.elapsed_seconds,
            "max_streak": self.max_streak,
            "question_count": self.question_count,
            "questions_answered": self.questions_answered,
            "correct_count": self.correct_count,
            "error_count": len(self.errors),
            "unanswered_count": len(self.unanswered),
            "hints_used": self.hints_used,
            "expired": self.expired,
            "errors": [
                {
                    "word": entry.word,
                    "user_answer": entry.user_answer,
                    "correct_answer": entry.correct_answer,
                }
                for entry in self.errors
            ],
        }


class SessionListener:
    """Notification surface for presenters; every hook defaults to a no-op."""

    def on_question_ready(self, prompt: QuestionPrompt) -> None:
        pass

    def on_answer_evaluated(
        self, record: AnswerRecord, score_delta: float, streak: int
    ) -> None:
        pass

    def on_tick(self, seconds_remaining: int) -> None:
        pass

    def on_session_ended(self, summary: SessionSummary) -> None:
        pass
