"""CLI entry point for ``vocab quiz``."""

from __future__ import annotations

import argparse
import random
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from vocab_drill.core import config_templates
from vocab_drill.core import workspace as workspace_mod
from vocab_drill.core.config_templates import ConfigTemplateError
from vocab_drill.core.logging import close_logger, configure_logger
from vocab_drill.core.workspace import WorkspaceError

from .bank import QuestionBank, load_bank, load_starter_bank
from .config import (
    ConfigOverrides,
    QuizConfigError,
    load_config,
)
from .console import InputProvider, TimeSource, run_console_session
from .errors import BankLoadError, QuizError
from .models import QUESTION_COUNT_CHOICES, AnswerMode, DifficultyLevel
from .session import QuizSession


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vocab quiz",
        description="Drill vocabulary in a timed quiz session.",
        epilog=(
            "Run `vocab quiz categories` to list bank categories or "
            "`vocab quiz config init` to scaffold quiz.toml."
        ),
    )
    parser.add_argument("--category", help="Bank category to draw from.")
    parser.add_argument(
        "--difficulty",
        choices=[level.value for level in DifficultyLevel],
        help="easy shows word and reading, medium the word, hard the meaning.",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in AnswerMode],
        help="Answer by picking an option or by typing the reading.",
    )
    parser.add_argument(
        "--count",
        type=int,
        help=(
            "Number of questions (typically one of "
            f"{', '.join(str(n) for n in QUESTION_COUNT_CHOICES)})."
        ),
    )
    parser.add_argument(
        "--duration", type=int, help="Session time budget in seconds."
    )
    parser.add_argument(
        "--options", type=int, help="Options shown in selection mode."
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--seed", type=int, help="Seed the question shuffle (repeatable runs)."
    )
    parser.add_argument(
        "--log-level",
        help="Set the logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log output to stderr.",
    )
    return parser


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--bank",
        type=Path,
        help="Path to a .toml or .json vocabulary bank.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a TOML config file (defaults to the workspace config).",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root used for config, logs and banks.",
    )


def main(
    argv: Sequence[str] | None = None,
    *,
    console: Optional[Console] = None,
    input_provider: Optional[InputProvider] = None,
    time_source: Optional[TimeSource] = None,
) -> int:
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    console = console or Console()

    if args_list[:1] == ["config"]:
        return _handle_config(args_list[1:])
    if args_list[:1] == ["categories"]:
        return _handle_categories(args_list[1:], console)

    parser = _build_parser()
    args = parser.parse_args(args_list)

    overrides = ConfigOverrides(
        category=args.category,
        difficulty=args.difficulty,
        mode=args.mode,
        question_count=args.count,
        duration_seconds=args.duration,
        option_count=args.options,
        bank_path=args.bank,
        log_level=args.log_level,
    )
    try:
        load_result = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except QuizConfigError as exc:
        parser.error(str(exc))

    config = load_result.config
    rng = random.Random(args.seed)
    try:
        bank = _load_bank(config.bank_path, rng=rng)
    except BankLoadError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    logger, log_path = configure_logger(
        "vocab_drill.quiz",
        log_dir=load_result.layout.path_for("logs"),
        level=config.log_level,
        verbose=args.verbose,
    )
    logger.debug(
        "quiz CLI invoked",
        extra={
            "config_path": load_result.config_path,
            "bank_path": config.bank_path,
        },
    )

    session = QuizSession(config.session, bank, logger=logger)
    provider = input_provider or (lambda: console.input("[bold]> [/]"))
    try:
        result = run_console_session(
            session,
            console,
            provider,
            time_source=time_source or time.monotonic,
        )
    except QuizError as exc:
        logger.error("Quiz session failed", extra={"reason": str(exc)})
        sys.stderr.write(str(exc) + "\n")
        return 1
    finally:
        close_logger(logger)

    console.print(
        f"[dim]Session {result.exit_action}. Log file: {log_path}[/]"
    )
    return 0


def _load_bank(
    bank_path: Optional[Path], *, rng: random.Random
) -> QuestionBank:
    if bank_path is None:
        return load_starter_bank(rng=rng)
    return load_bank(bank_path, rng=rng)


def _handle_categories(argv: Sequence[str], console: Console) -> int:
    parser = argparse.ArgumentParser(
        prog="vocab quiz categories",
        description="List the categories available in the vocabulary bank.",
    )
    _add_common_arguments(parser)
    args = parser.parse_args(argv)

    try:
        load_result = load_config(
            config_path=args.config,
            overrides=ConfigOverrides(bank_path=args.bank),
            workspace_path=args.workspace,
        )
    except QuizConfigError as exc:
        parser.error(str(exc))

    try:
        bank = _load_bank(load_result.config.bank_path, rng=random.Random())
    except BankLoadError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    table = Table(title="Categories")
    table.add_column("Category", style="cyan")
    table.add_column("Name")
    table.add_column("Items", justify="right")
    for category in bank.categories():
        table.add_row(
            category, bank.display_name(category), str(bank.size(category))
        )
    console.print(table)
    return 0


def _handle_config(argv: Sequence[str]) -> int:
    parser = argparse.ArgumentParser(
        prog="vocab quiz config",
        description="Scaffold configuration and vocabulary bank files.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    init_parser = subparsers.add_parser(
        "init",
        help="Write quiz.toml, or a starter bank with `--template bank`.",
    )
    init_parser.add_argument(
        "--template",
        choices=[t.name for t in config_templates.iter_templates()],
        default="quiz",
        help="Which file to write (defaults to the quiz config).",
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help="Destination file (defaults to its workspace location).",
    )
    init_parser.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root override used to resolve the default path.",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if it already exists.",
    )
    args = parser.parse_args(argv)

    template = config_templates.get_template(args.template)
    try:
        if args.path is not None:
            written = template.write(
                _absolute(args.path), overwrite=args.force
            )
        else:
            layout = workspace_mod.ensure_workspace(path=args.workspace)
            written = template.write(layout=layout, overwrite=args.force)
    except (WorkspaceError, ConfigTemplateError) as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote {template.label} to {written}\n")
    return 0


def _absolute(path: Path) -> Path:
    candidate = path.expanduser()
    if not candidate.is_absolute():
        candidate = (Path.cwd() / candidate).resolve()
    return candidate


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
