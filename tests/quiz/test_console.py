from __future__ import annotations

import random

import pytest
from rich.console import Console

from vocab_drill.quiz.bank import QuestionBank
from vocab_drill.quiz.console import (
    ConsoleCommand,
    WallClockTicker,
    parse_console_command,
    render_summary,
    run_console_session,
)
from vocab_drill.quiz.models import AnswerMode, Phase, SessionConfig
from vocab_drill.quiz.session import QuizSession


class _InOrder(random.Random):
    def shuffle(self, x, *args, **kwargs):  # noqa: ANN001
        return None


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def make_provider(commands: list[str]):
    iterator = iter(commands)

    def _provider() -> str:
        return next(iterator)

    return _provider


def make_console() -> Console:
    return Console(record=True, width=80, force_terminal=True)


@pytest.fixture
def ordered_bank(numbers_items):
    return QuestionBank(
        {"numbers": numbers_items},
        display_names={"numbers": "Numbers"},
        rng=_InOrder(0),
    )


def test_parse_console_command_variants() -> None:
    selection = AnswerMode.SELECTION
    free_text = AnswerMode.FREE_TEXT

    assert parse_console_command("2", selection) == ConsoleCommand("answer", 1)
    assert parse_console_command(" h ", selection) == ConsoleCommand("hint")
    assert parse_console_command("?", selection) == ConsoleCommand("hint")
    assert parse_console_command("Q", selection) == ConsoleCommand("quit")
    assert parse_console_command("exit", selection) == ConsoleCommand("quit")
    assert parse_console_command("two", selection) is None
    assert parse_console_command("", selection) is None
    assert parse_console_command(None, selection) is None

    assert parse_console_command(" San ", free_text) == ConsoleCommand(
        "answer", "San"
    )
    assert parse_console_command("h", free_text) == ConsoleCommand("answer", "h")
    assert parse_console_command("hint", free_text) == ConsoleCommand("hint")
    assert parse_console_command("quit", free_text) == ConsoleCommand("quit")


def test_free_text_session_with_hint(ordered_bank) -> None:
    console = make_console()
    config = SessionConfig("numbers", mode="free_text", question_count=3)
    session = QuizSession(config, ordered_bank)

    result = run_console_session(
        session,
        console,
        make_provider(["ichi", "hint", "hint", "san", "san"]),
        time_source=FakeClock(),
    )

    assert result.exit_action == "completed"
    assert result.summary.score == 2.0
    assert result.summary.hints_used == 1
    rendered = console.export_text()
    assert "Question 1 / 3" in rendered
    assert "Correct!" in rendered
    assert "Incorrect. Answer: ni" in rendered
    assert "Category: Numbers" in rendered
    assert "Quiz Summary" in rendered
    assert "Review incorrect answers" in rendered
    assert "Time's up!" not in rendered


def test_selection_session_invalid_input_and_quit(numbers_bank) -> None:
    console = make_console()
    session = QuizSession(SessionConfig("numbers", question_count=3), numbers_bank)

    result = run_console_session(
        session,
        console,
        make_provider(["9", "abc", "1", "quit"]),
        time_source=FakeClock(),
    )

    assert result.exit_action == "quit"
    assert result.summary.questions_answered == 1
    assert len(result.summary.unanswered) == 1
    rendered = console.export_text()
    assert "'9' is not a valid choice" in rendered
    assert "Unrecognized input. Try again." in rendered
    assert "Ending session early." in rendered
    assert "Unanswered:" in rendered


def test_wall_clock_expiry_ends_session(ordered_bank) -> None:
    console = make_console()
    clock = FakeClock()
    config = SessionConfig(
        "numbers", mode="free_text", question_count=3, duration_seconds=5
    )
    session = QuizSession(config, ordered_bank)

    def slow_provider() -> str:
        clock.now += 10
        return "ichi"

    result = run_console_session(
        session, console, slow_provider, time_source=clock
    )

    assert result.exit_action == "expired"
    assert result.summary.expired
    assert result.summary.questions_answered == 0
    assert result.summary.elapsed_seconds == 5
    assert "Time's up!" in console.export_text()


def test_input_eof_abandons_session(ordered_bank) -> None:
    console = make_console()
    session = QuizSession(
        SessionConfig("numbers", mode="free_text"), ordered_bank
    )

    def closed() -> str:
        raise EOFError

    result = run_console_session(
        session, console, closed, time_source=FakeClock()
    )

    assert result.exit_action == "quit"
    assert session.phase is Phase.COMPLETED
    assert "Session interrupted." in console.export_text()


def test_wall_clock_ticker_applies_whole_seconds(ordered_bank) -> None:
    clock = FakeClock()
    session = QuizSession(
        SessionConfig("numbers", mode="free_text", duration_seconds=30),
        ordered_bank,
    )
    session.start()
    ticker = WallClockTicker(session, clock)

    clock.now = 2.5
    assert ticker.catch_up() == 2
    clock.now = 3.1
    assert ticker.catch_up() == 1
    clock.now = 3.9
    assert ticker.catch_up() == 0
    assert session.seconds_remaining == 27


def test_render_summary_without_errors(ordered_bank) -> None:
    console = make_console()
    session = QuizSession(
        SessionConfig("numbers", mode="free_text", question_count=1),
        ordered_bank,
    )
    session.start()
    session.submit_answer("ichi")

    render_summary(console, session.get_summary())

    rendered = console.export_text()
    assert "Quiz Summary" in rendered
    assert "100.0%" in rendered
    assert "Review incorrect answers" not in rendered


def test_question_status_explains_when_time_is_checked(ordered_bank) -> None:
    console = make_console()
    config = SessionConfig("numbers", mode="free_text", question_count=2)
    session = QuizSession(config, ordered_bank)

    run_console_session(
        session,
        console,
        make_provider(["ichi", "quit"]),
        time_source=FakeClock(),
    )

    rendered = console.export_text()
    assert "Time left 60s" in rendered
    assert rendered.count("The timer is checked each time you answer.") == 2
