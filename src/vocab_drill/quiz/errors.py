"""Typed failures raised by the quiz engine.

Every error is raised synchronously to the caller. None are retried or
swallowed inside the engine; a mutating call that raises leaves the session
exactly as it was.
"""

from __future__ import annotations

__all__ = [
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


class QuizError(RuntimeError):
    """Base class for quiz engine failures."""


class InvalidConfig(QuizError):
    """Session configuration names unknown values or an unusable bank."""


class EmptyCategory(QuizError):
    """The bank holds no items for the requested category."""

    def __init__(self, category: str) -> None:
        super().__init__(f"Category '{category}' has no vocabulary items.")
        self.category = category


class InsufficientPool(QuizError):
    """Not enough distinct items to build the requested option set."""

    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            f"Need {requested} distinct items for options, "
            f"only {available} available."
        )
        self.requested = requested
        self.available = available


class InvalidChoice(QuizError):
    """A selection index outside the presented options."""


class NotAwaitingAnswer(QuizError):
    """An answer or hint arrived while no question is open."""


class SessionEnded(QuizError):
    """A mutating call reached a completed session."""


class SessionNotFinished(QuizError):
    """The summary was requested before the session completed."""


class AlreadyRunning(QuizError):
    """The clock or session was started twice."""


class ClockNotRunning(QuizError):
    """The clock was ticked before ``start`` or after ``stop``."""


class BankLoadError(QuizError):
    """A vocabulary bank file could not be read or is malformed."""
