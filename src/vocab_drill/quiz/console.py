"""Rich-powered terminal presenter for a :class:`QuizSession`.

The presenter only renders notifications and forwards input; all rules live
in the session. Time is driven by :class:`WallClockTicker`, which converts
wall-clock time elapsed between inputs into whole-second session ticks.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .errors import InvalidChoice
from .models import (
    AnswerMode,
    AnswerRecord,
    Phase,
    QuestionPrompt,
    SessionListener,
    SessionSummary,
)
from .session import QuizSession

InputProvider = Callable[[], str]
TimeSource = Callable[[], float]
ExitAction = Literal["completed", "expired", "quit"]

_HINT_WORDS = {"hint", "?"}
_QUIT_WORDS = {"quit", "exit"}
_FIELD_LABELS = (("word", "Word"), ("reading", "Reading"), ("meaning", "Meaning"))


@dataclass(frozen=True)
class ConsoleCommand:
    """Normalized user command parsed from console input."""

    type: Literal["answer", "hint", "quit"]
    value: Optional[object] = None


@dataclass(frozen=True)
class ConsoleSessionResult:
    """Return value from ``run_console_session``."""

    summary: SessionSummary
    exit_action: ExitAction


def parse_console_command(
    raw: Optional[str], mode: AnswerMode
) -> Optional[ConsoleCommand]:
    """Parse raw input into a command for the given answer mode.

    Selection mode takes 1-based option numbers and also accepts the short
    forms ``h`` and ``q``; free-text mode passes any other text through as
    the answer.
    """

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    lowered = text.lower()
    if lowered in _HINT_WORDS:
        return ConsoleCommand("hint")
    if lowered in _QUIT_WORDS:
        return ConsoleCommand("quit")
    if mode is AnswerMode.FREE_TEXT:
        return ConsoleCommand("answer", text)
    if lowered == "h":
        return ConsoleCommand("hint")
    if lowered == "q":
        return ConsoleCommand("quit")
    if text.isdigit():
        return ConsoleCommand("answer", int(text) - 1)
    return None


class WallClockTicker:
    """Tick source that catches the session clock up with real time."""

    def __init__(
        self, session: QuizSession, time_source: TimeSource = time.monotonic
    ) -> None:
        self._session = session
        self._time_source = time_source
        self._last = time_source()

    def reset(self) -> None:
        self._last = self._time_source()

    def catch_up(self) -> int:
        """Tick once per whole second elapsed; return the ticks applied."""

        whole = int(self._time_source() - self._last)
        applied = 0
        while applied < whole and self._session.phase is Phase.ACTIVE:
            self._session.tick()
            applied += 1
        self._last += whole
        return applied


class ConsoleRenderer(SessionListener):
    """Session listener that renders prompts and results with Rich."""

    def __init__(self, console: Console, session: QuizSession) -> None:
        self._console = console
        self._session = session

    def on_question_ready(self, prompt: QuestionPrompt) -> None:
        console = self._console
        header = Text.assemble(
            (f"Question {prompt.number}", "bold cyan"),
            (f" / {prompt.total}", "dim"),
        )
        console.print()
        console.rule(header)

        fields = Table(show_header=False, box=box.SIMPLE)
        fields.add_column("Field", style="dim")
        fields.add_column("Value", style="bold")
        revealed = prompt.revealed
        for key, label in _FIELD_LABELS:
            if key in revealed:
                fields.add_row(label, revealed[key])
        console.print(fields)

        if prompt.options is not None:
            options = Table(show_header=False, box=box.SIMPLE, expand=True)
            options.add_column("Key", justify="center", style="cyan")
            options.add_column("Reading")
            for number, option in enumerate(prompt.options, start=1):
                options.add_row(str(number), option.reading)
            console.print(options)
            answer_hint = f"choices [1-{len(prompt.options)}]"
        else:
            answer_hint = "type the reading"

        console.print(
            Text(
                f"Time left {self._session.seconds_remaining}s | "
                f"Streak {self._session.streak} | "
                f"Commands: {answer_hint}, hint, quit",
                style="dim",
            )
        )
        console.print(
            Text("The timer is checked each time you answer.", style="dim")
        )

    def on_answer_evaluated(
        self, record: AnswerRecord, score_delta: float, streak: int
    ) -> None:
        if record.is_correct:
            self._console.print(
                f"[bold green]Correct![/] +{score_delta:g} (streak {streak})"
            )
        else:
            self._console.print(
                "[bold red]Incorrect.[/] Answer: "
                f"[bold]{record.correct_answer}[/]"
            )

    def on_session_ended(self, summary: SessionSummary) -> None:
        if summary.expired:
            self._console.print("\n[bold yellow]Time's up![/]")
        render_summary(self._console, summary)


def run_console_session(
    session: QuizSession,
    console: Console,
    input_provider: InputProvider,
    *,
    time_source: TimeSource = time.monotonic,
) -> ConsoleSessionResult:
    """Run ``session`` interactively until it completes or the user quits."""

    session.subscribe(ConsoleRenderer(console, session))
    ticker = WallClockTicker(session, time_source)
    mode = AnswerMode.from_value(session.config.mode)
    session.start()
    ticker.reset()

    exit_action: ExitAction = "completed"
    while session.awaiting_answer:
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            session.abandon()
            exit_action = "quit"
            break
        ticker.catch_up()
        if not session.awaiting_answer:
            break
        command = parse_console_command(raw, mode)
        if command is None:
            console.print("[red]Unrecognized input. Try again.[/]")
            continue
        if command.type == "hint":
            console.print(
                Panel(session.request_hint(), title="Hint", border_style="blue")
            )
            continue
        if command.type == "quit":
            console.print("\n[bold yellow]Ending session early.[/]")
            session.abandon()
            exit_action = "quit"
            break
        try:
            session.submit_answer(command.value)  # type: ignore[arg-type]
        except InvalidChoice:
            console.print(
                f"[red]'{raw.strip()}' is not a valid choice for this "
                "question.[/red]"
            )

    summary = session.get_summary()
    if exit_action == "completed" and summary.expired:
        exit_action = "expired"
    return ConsoleSessionResult(summary=summary, exit_action=exit_action)


def render_summary(console: Console, summary: SessionSummary) -> None:
    """Print the end-of-session report."""

    console.print()
    console.rule(Text("Quiz Summary", style="bold magenta"))

    overview = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD)
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Score", f"{summary.score:g}")
    overview.add_row("Percentage", f"{summary.percentage:.1f}%")
    overview.add_row("Category", summary.category)
    overview.add_row("Difficulty", summary.difficulty.display)
    overview.add_row(
        "Answered", f"{summary.questions_answered}/{summary.question_count}"
    )
    overview.add_row("Correct", str(summary.correct_count))
    overview.add_row("Time", f"{summary.elapsed_seconds}s")
    overview.add_row("Max streak", str(summary.max_streak))
    overview.add_row("Hints used", str(summary.hints_used))
    console.print(overview)

    if summary.errors:
        review = Table(
            title="Review incorrect answers", box=box.SIMPLE, expand=True
        )
        review.add_column("Word")
        review.add_column("Your answer")
        review.add_column("Correct")
        for entry in summary.errors:
            review.add_row(
                entry.word, entry.user_answer or "(blank)", entry.correct_answer
            )
        console.print(review)

    if summary.unanswered:
        words = ", ".join(item.word for item in summary.unanswered)
        console.print(Text(f"Unanswered: {words}", style="dim"))
