"""Correctness checks and scoring for both answer modes."""

from __future__ import annotations

from typing import Sequence

from .errors import InvalidChoice
from .models import DifficultyLevel, VocabularyItem

__all__ = [
    "evaluate_selection",
    "evaluate_free_text",
    "normalize_answer",
    "score_for",
]


def normalize_answer(raw: str) -> str:
    return raw.strip().lower()


def evaluate_selection(
    choice_index: int,
    options: Sequence[VocabularyItem],
    correct_item: VocabularyItem,
) -> bool:
    """Return whether ``options[choice_index]`` carries the correct reading.

    An index outside ``options`` is a caller bug, not a wrong answer, and
    raises :class:`InvalidChoice`. Negative indexes are rejected rather than
    wrapping around.
    """

    if isinstance(choice_index, bool) or not isinstance(choice_index, int):
        raise InvalidChoice(
            f"Choice must be an integer index, got {choice_index!r}."
        )
    if not 0 <= choice_index < len(options):
        raise InvalidChoice(
            f"Choice {choice_index} is outside the {len(options)} options."
        )
    return options[choice_index].reading == correct_item.reading


def evaluate_free_text(raw_input: str, item: VocabularyItem) -> bool:
    """Exact, case-insensitive match against the reading or romaji.

    No fuzzy matching and no partial credit.
    """

    answer = normalize_answer(raw_input)
    if not answer:
        return False
    return answer in item.accepted_answers()


def score_for(correct: bool, difficulty: DifficultyLevel) -> float:
    return difficulty.multiplier if correct else 0.0
