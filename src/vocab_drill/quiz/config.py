"""Configuration loader for the ``vocab quiz`` command."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

from vocab_drill.core import config as core_config
from vocab_drill.core import workspace as workspace_mod

from .errors import InvalidConfig
from .models import (
    DEFAULT_DURATION_SECONDS,
    DEFAULT_OPTION_COUNT,
    AnswerMode,
    DifficultyLevel,
    SessionConfig,
)

CONFIG_FILENAME = "quiz.toml"
CONFIG_ENV = "VOCAB_DRILL_QUIZ_CONFIG"
ENV_PREFIX = "VOCAB_DRILL_QUIZ_"

_DEFAULT_CATEGORY = "numbers"
_DEFAULT_QUESTION_COUNT = 10
_DEFAULT_LOG_LEVEL = "INFO"


class QuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizConfig:
    """Fully resolved configuration for a quiz run."""

    session: SessionConfig
    bank_path: Optional[Path]
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of env and file options."""

    category: Optional[str] = None
    difficulty: Optional[str] = None
    mode: Optional[str] = None
    question_count: Optional[int] = None
    duration_seconds: Optional[int] = None
    option_count: Optional[int] = None
    bank_path: Optional[Path] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    """Result of loading configuration, including workspace context."""

    config: QuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(env=env_map, path=workspace_path)
    except workspace_mod.WorkspaceError as exc:
        raise QuizConfigError(str(exc)) from exc

    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )

    try:
        table, loaded_path = core_config.load_with_defaults(
            requested_path,
            _default_table(),
            required=config_path is not None
            or _env_config_path(env_map) is not None,
        )
    except core_config.TomlConfigError as exc:
        raise QuizConfigError(str(exc)) from exc

    session_table = table["session"]
    category = _require_string(
        _pick_first(
            overrides.category,
            _parse_env_string(env_map, "CATEGORY"),
            session_table["category"],
        ),
        field="session.category",
    )
    difficulty = _resolve_enum(
        DifficultyLevel,
        _pick_first(
            overrides.difficulty,
            _parse_env_string(env_map, "DIFFICULTY"),
            session_table["difficulty"],
        ),
        field="session.difficulty",
    )
    mode_value = _pick_first(
        overrides.mode,
        _parse_env_string(env_map, "MODE"),
        session_table["mode"],
    )
    if mode_value is None:
        mode_value = _default_mode(difficulty)
    mode = _resolve_enum(AnswerMode, mode_value, field="session.mode")
    question_count = _require_positive_int(
        _pick_first(
            overrides.question_count,
            _parse_env_int(env_map, "QUESTION_COUNT"),
            session_table["question_count"],
        ),
        field="session.question_count",
    )
    duration = _require_positive_int(
        _pick_first(
            overrides.duration_seconds,
            _parse_env_int(env_map, "DURATION_SECONDS"),
            session_table["duration_seconds"],
        ),
        field="session.duration_seconds",
    )
    option_count = _require_positive_int(
        _pick_first(
            overrides.option_count,
            _parse_env_int(env_map, "OPTION_COUNT"),
            session_table["option_count"],
        ),
        field="session.option_count",
    )
    bank_path = _resolve_bank_path(
        _pick_first(
            overrides.bank_path,
            _parse_env_string(env_map, "BANK"),
            table["bank"]["path"],
        ),
        layout=layout,
    )
    log_level = _require_string(
        _pick_first(
            overrides.log_level,
            _parse_env_string(env_map, "LOG_LEVEL"),
            table["logging"]["level"],
        ),
        field="logging.level",
    ).upper()

    try:
        session = SessionConfig(
            category=category,
            difficulty=difficulty,
            mode=mode,
            question_count=question_count,
            duration_seconds=duration,
            option_count=option_count,
        ).resolve()
    except InvalidConfig as exc:
        raise QuizConfigError(str(exc)) from exc
    config = QuizConfig(session=session, bank_path=bank_path, log_level=log_level)
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _default_table() -> MutableMapping[str, MutableMapping[str, Any]]:
    return {
        "bank": {"path": None},
        "session": {
            "category": _DEFAULT_CATEGORY,
            "difficulty": DifficultyLevel.EASY.value,
            "mode": None,
            "question_count": _DEFAULT_QUESTION_COUNT,
            "duration_seconds": DEFAULT_DURATION_SECONDS,
            "option_count": DEFAULT_OPTION_COUNT,
        },
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = _env_config_path(env_map)
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _resolve_bank_path(
    value: object, *, layout: workspace_mod.WorkspaceLayout
) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        value = Path(value.strip())
    if not isinstance(value, Path):
        raise QuizConfigError("bank.path must be a string when provided.")
    candidate = value.expanduser()
    if not candidate.is_absolute():
        candidate = layout.path_for("banks") / candidate
    return candidate.resolve()


def _resolve_enum(enum_cls: Any, value: object, *, field: str) -> Any:
    if not isinstance(value, (str, enum_cls)):
        raise QuizConfigError(f"'{field}' must be a string.")
    try:
        return enum_cls.from_value(value)
    except InvalidConfig as exc:
        raise QuizConfigError(f"{field}: {exc}") from exc


def _require_positive_int(value: object, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise QuizConfigError(f"'{field}' must be a positive integer.")
    return value


def _require_string(value: object, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuizConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _parse_env_int(env_map: Mapping[str, str], key: str) -> Optional[int]:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise QuizConfigError(
            f"{ENV_PREFIX}{key} must be an integer, got '{raw}'."
        ) from exc


def _env_config_path(env_map: Mapping[str, str]) -> Optional[str]:
    raw = env_map.get(CONFIG_ENV)
    if raw is None:
        return None
    return raw.strip() or None


def _parse_env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def _default_mode(difficulty: DifficultyLevel) -> AnswerMode:
    if difficulty.prompt_policy.requires_free_text:
        return AnswerMode.FREE_TEXT
    return AnswerMode.SELECTION
