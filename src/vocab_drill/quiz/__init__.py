"""Vocabulary quiz engine: bank, evaluator, clock and session."""

from .bank import QuestionBank, load_bank, load_starter_bank
from .clock import SessionClock
from .errors import (
    AlreadyRunning,
    BankLoadError,
    ClockNotRunning,
    EmptyCategory,
    InsufficientPool,
    InvalidChoice,
    InvalidConfig,
    NotAwaitingAnswer,
    QuizError,
    SessionEnded,
    SessionNotFinished,
)
from .evaluator import evaluate_free_text, evaluate_selection, score_for
from .models import (
    AnswerMode,
    AnswerRecord,
    DifficultyLevel,
    ErrorEntry,
    Phase,
    PromptPolicy,
    QuestionPrompt,
    SessionConfig,
    SessionListener,
    SessionSummary,
    VocabularyItem,
)
from .session import QuizSession

__all__ = [
    "QuestionBank",
    "load_bank",
    "load_starter_bank",
    "SessionClock",
    "evaluate_selection",
    "evaluate_free_text",
    "score_for",
    "AnswerMode",
    "AnswerRecord",
    "DifficultyLevel",
    "ErrorEntry",
    "Phase",
    "PromptPolicy",
    "QuestionPrompt",
    "SessionConfig",
    "SessionListener",
    "SessionSummary",
    "VocabularyItem",
    "QuizSession",
    "QuizError",
    "InvalidConfig",
    "EmptyCategory",
    "InsufficientPool",
    "InvalidChoice",
    "NotAwaitingAnswer",
    "SessionEnded",
    "SessionNotFinished",
    "AlreadyRunning",
    "ClockNotRunning",
    "BankLoadError",
]
