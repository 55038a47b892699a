"""Quiz session state machine.

A :class:`QuizSession` walks ``CONFIGURING -> ACTIVE -> COMPLETED``. While
active it alternates between awaiting an answer and evaluating one. All
transitions happen synchronously inside ``start``, ``submit_answer``,
``request_hint``, ``tick`` and ``abandon``; there are no background tasks and
no shared globals, so independent sessions can coexist.

Presenters subscribe a :class:`~vocab_drill.quiz.models.SessionListener`.
Notifications are delivered only after the state update they describe has
fully committed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Union

from .bank import QuestionBank
from .clock import SessionClock
from .errors import (
    AlreadyRunning,
    InsufficientPool,
    InvalidChoice,
    InvalidConfig,
    NotAwaitingAnswer,
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
    QuestionPrompt,
    SessionConfig,
    SessionListener,
    SessionSummary,
    VocabularyItem,
)

__all__ = ["QuizSession", "SessionState", "Step"]

RawAnswer = Union[int, str]


class Step(Enum):
    """Per-question sub-phase while the session is active."""

    AWAITING_ANSWER = "awaiting_answer"
    EVALUATED = "evaluated"


@dataclass
class SessionState:
    """Mutable state owned and written only by one ``QuizSession``."""

    phase: Phase = Phase.CONFIGURING
    step: Optional[Step] = None
    questions: list[VocabularyItem] = field(default_factory=list)
    index: int = 0
    score: float = 0.0
    streak: int = 0
    max_streak: int = 0
    options: Optional[tuple[VocabularyItem, ...]] = None
    hint: Optional[str] = None
    hints_used: int = 0
    records: list[AnswerRecord] = field(default_factory=list)

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def current(self) -> VocabularyItem:
        return self.questions[self.index]


class QuizSession:
    """One quiz run from configuration to summary."""

    def __init__(
        self,
        config: SessionConfig,
        bank: QuestionBank,
        *,
        listeners: Iterable[SessionListener] = (),
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config
        self._bank = bank
        self._listeners: list[SessionListener] = list(listeners)
        self._logger = logger or logging.getLogger("vocab_drill.quiz")
        self._clock = SessionClock(on_expire=self._on_clock_expired)
        self._state = SessionState()
        self._summary: Optional[SessionSummary] = None

    # -- read-only views -------------------------------------------------

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def awaiting_answer(self) -> bool:
        return (
            self._state.phase is Phase.ACTIVE
            and self._state.step is Step.AWAITING_ANSWER
        )

    @property
    def current_prompt(self) -> Optional[QuestionPrompt]:
        if not self.awaiting_answer:
            return None
        return self._prompt()

    @property
    def current_index(self) -> int:
        return self._state.index

    @property
    def question_count(self) -> int:
        return self._state.question_count

    @property
    def score(self) -> float:
        return self._state.score

    @property
    def streak(self) -> int:
        return self._state.streak

    @property
    def max_streak(self) -> int:
        return self._state.max_streak

    @property
    def hint_used(self) -> bool:
        return self._state.hint is not None

    @property
    def seconds_remaining(self) -> int:
        return self._clock.seconds_remaining

    @property
    def records(self) -> tuple[AnswerRecord, ...]:
        return tuple(self._state.records)

    @property
    def errors(self) -> tuple[ErrorEntry, ...]:
        return tuple(
            ErrorEntry.from_record(record)
            for record in self._state.records
            if not record.is_correct
        )

    def subscribe(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    # -- transitions -----------------------------------------------------

    def start(self) -> QuestionPrompt:
        """Validate the config, draw questions and open the first one."""

        self._ensure_not_ended()
        if self._state.phase is Phase.ACTIVE:
            raise AlreadyRunning("Session already started.")

        config = self._config.resolve()
        if config.category not in self._bank.categories():
            raise InvalidConfig(f"Unknown category '{config.category}'.")
        if self._bank.size(config.category) == 0:
            raise InvalidConfig(
                f"Category '{config.category}' has no vocabulary items."
            )
        questions = self._bank.select_questions(
            config.category, config.question_count
        )
        options = self._options_for(questions[0], config)

        self._config = config
        state = self._state
        state.questions = questions
        state.phase = Phase.ACTIVE
        state.step = Step.AWAITING_ANSWER
        state.options = options
        self._clock.start(config.duration_seconds)

        self._logger.info(
            "Quiz session started",
            extra={
                "category": config.category,
                "difficulty": self._difficulty.value,
                "mode": self._mode.value,
                "requested_count": config.question_count,
                "question_count": state.question_count,
                "duration_seconds": config.duration_seconds,
            },
        )
        prompt = self._prompt()
        self._notify("on_question_ready", prompt)
        return prompt

    def submit_answer(self, raw: RawAnswer) -> AnswerRecord:
        """Evaluate ``raw`` for the open question and advance.

        Selection mode expects an option index; free-text mode expects the
        typed string. Invalid input raises before any state changes.
        """

        self._ensure_awaiting()
        state = self._state
        item = state.current
        if self._mode is AnswerMode.SELECTION:
            options = state.options or ()
            is_correct = evaluate_selection(raw, options, item)  # type: ignore[arg-type]
            user_answer = options[raw].reading  # type: ignore[index]
        else:
            if not isinstance(raw, str):
                raise InvalidChoice(
                    f"Free-text answers must be strings, got {raw!r}."
                )
            is_correct = evaluate_free_text(raw, item)
            user_answer = raw

        delta = score_for(is_correct, self._difficulty)
        record = AnswerRecord(
            sequence=len(state.records),
            item=item,
            user_answer=user_answer,
            is_correct=is_correct,
            score_delta=delta,
            answered_at=self._clock.elapsed,
            hint_used=state.hint is not None,
        )

        state.records.append(record)
        state.score += delta
        if is_correct:
            state.streak += 1
        else:
            state.streak = 0
        state.max_streak = max(state.max_streak, state.streak)
        state.hint = None
        state.index += 1
        state.step = Step.EVALUATED

        self._logger.debug(
            "Answer evaluated",
            extra={
                "sequence": record.sequence,
                "word": item.word,
                "correct": is_correct,
                "score_delta": delta,
                "streak": state.streak,
            },
        )

        next_prompt: Optional[QuestionPrompt] = None
        ended = False
        if state.index >= state.question_count or self._clock.is_expired():
            self._finish(expired=self._clock.is_expired())
            ended = True
        else:
            state.options = self._options_for(state.current, self._config)
            state.step = Step.AWAITING_ANSWER
            next_prompt = self._prompt()

        self._notify("on_answer_evaluated", record, delta, state.streak)
        if ended:
            self._notify("on_session_ended", self._summary)
        elif next_prompt is not None:
            self._notify("on_question_ready", next_prompt)
        return record

    def request_hint(self) -> str:
        """Return the clue for the open question.

        Only the first request per question counts as a hint; repeating it
        returns the same text and changes nothing.
        """

        self._ensure_awaiting()
        state = self._state
        if state.hint is not None:
            return state.hint
        item = state.current
        if self._difficulty is DifficultyLevel.HARD:
            hint = f"First letter: {item.reading[:1]}"
        else:
            hint = f"Category: {self._bank.display_name(item.category)}"
        state.hint = hint
        state.hints_used += 1
        return hint

    def tick(self) -> int:
        """Advance the countdown by one unit.

        The tick that exhausts the budget completes the session at once,
        even with a question open.
        """

        self._ensure_not_ended()
        remaining = self._clock.tick()
        self._notify("on_tick", remaining)
        if self._state.phase is Phase.COMPLETED:
            self._notify("on_session_ended", self._summary)
        return remaining

    def abandon(self) -> SessionSummary:
        """Stop the clock and end the session early."""

        self._ensure_not_ended()
        if self._state.phase is not Phase.ACTIVE:
            raise NotAwaitingAnswer("Session has not started.")
        self._finish(expired=False)
        self._notify("on_session_ended", self._summary)
        return self._summary  # type: ignore[return-value]

    def get_summary(self) -> SessionSummary:
        if self._summary is None:
            raise SessionNotFinished("Session has not completed yet.")
        return self._summary

    # -- internals -------------------------------------------------------

    @property
    def _difficulty(self) -> DifficultyLevel:
        return DifficultyLevel.from_value(self._config.difficulty)

    @property
    def _mode(self) -> AnswerMode:
        return AnswerMode.from_value(self._config.mode)

    def _ensure_not_ended(self) -> None:
        if self._state.phase is Phase.COMPLETED:
            raise SessionEnded("Session has ended; start a new session.")

    def _ensure_awaiting(self) -> None:
        self._ensure_not_ended()
        if not self.awaiting_answer:
            raise NotAwaitingAnswer("No question is awaiting an answer.")

    def _options_for(
        self, item: VocabularyItem, config: SessionConfig
    ) -> Optional[tuple[VocabularyItem, ...]]:
        if AnswerMode.from_value(config.mode) is not AnswerMode.SELECTION:
            return None
        pool = self._bank.items_for(config.category)
        try:
            options = self._bank.request_distractors(
                item, pool, config.option_count
            )
        except InsufficientPool as exc:
            self._logger.debug(
                "Reducing option count to pool size",
                extra={
                    "requested": exc.requested,
                    "available": exc.available,
                },
            )
            options = self._bank.request_distractors(item, pool, exc.available)
        return tuple(options)

    def _prompt(self) -> QuestionPrompt:
        state = self._state
        return QuestionPrompt(
            index=state.index,
            total=state.question_count,
            item=state.current,
            policy=self._difficulty.prompt_policy,
            options=state.options,
        )

    def _on_clock_expired(self) -> None:
        if self._state.phase is not Phase.ACTIVE:
            return
        self._logger.info(
            "Session clock expired",
            extra={
                "answered": len(self._state.records),
                "question_count": self._state.question_count,
            },
        )
        self._finish(expired=True)

    def _finish(self, *, expired: bool) -> None:
        state = self._state
        self._clock.stop()
        unanswered: tuple[VocabularyItem, ...] = ()
        if (
            state.step is Step.AWAITING_ANSWER
            and state.index < state.question_count
        ):
            unanswered = (state.current,)
        state.phase = Phase.COMPLETED
        state.step = None
        state.options = None
        state.hint = None
        self._summary = self._build_summary(
            unanswered=unanswered, expired=expired
        )
        self._logger.info(
            "Quiz session completed", extra=self._summary.as_dict()
        )

    def _build_summary(
        self,
        *,
        unanswered: tuple[VocabularyItem, ...],
        expired: bool,
    ) -> SessionSummary:
        state = self._state
        difficulty = self._difficulty
        max_score = state.question_count * difficulty.multiplier
        percentage = (
            round(state.score / max_score * 100, 1) if max_score else 0.0
        )
        records = tuple(state.records)
        return SessionSummary(
            category=self._config.category,
            difficulty=difficulty,
            mode=self._mode,
            score=state.score,
            percentage=percentage,
            elapsed_seconds=self._clock.elapsed,
            max_streak=state.max_streak,
            question_count=state.question_count,
            questions_answered=len(records),
            correct=tuple(record for record in records if record.is_correct),
            errors=self.errors,
            unanswered=unanswered,
            hints_used=state.hints_used,
            expired=expired,
            records=records,
        )

    def _notify(self, hook: str, *args: object) -> None:
        for listener in list(self._listeners):
            getattr(listener, hook)(*args)
