from __future__ import annotations

import tomllib
from pathlib import Path

import pytest

from vocab_drill.core import config_templates, workspace
from vocab_drill.core.config_templates import (
    ConfigTemplate,
    ConfigTemplateError,
)


def test_get_template_returns_quiz_template(tmp_path: Path) -> None:
    template = config_templates.get_template("quiz")
    assert isinstance(template, ConfigTemplate)

    contents = template.read_text()
    assert "[session]" in contents
    assert "[logging]" in contents
    parsed = tomllib.loads(contents)
    assert parsed["session"]["category"] == "numbers"

    target = tmp_path / "quiz.toml"
    written = template.write(target)
    assert written == target
    assert target.read_text(encoding="utf-8") == contents

    with pytest.raises(ConfigTemplateError):
        template.write(target)

    updated = template.write(target, overwrite=True)
    assert updated == target


def test_iter_templates_returns_registered_templates() -> None:
    names = {template.name for template in config_templates.iter_templates()}
    assert names == {"quiz", "bank"}


@pytest.mark.parametrize("unknown", ["missing", "", "rag"])
def test_get_template_unknown_raises(unknown: str) -> None:
    with pytest.raises(ConfigTemplateError):
        config_templates.get_template(unknown)


def test_templates_default_into_their_workspace_directory(
    tmp_path: Path,
) -> None:
    layout = workspace.ensure_workspace(path=tmp_path / "ws")

    quiz = config_templates.get_template("quiz")
    bank = config_templates.get_template("bank")

    assert quiz.default_path(layout) == layout.path_for("config") / "quiz.toml"
    expected = layout.path_for("banks") / "my_words.toml"
    assert bank.default_path(layout) == expected

    written = bank.write(layout=layout)
    assert written == bank.default_path(layout)
    parsed = tomllib.loads(written.read_text(encoding="utf-8"))
    assert "numbers" in parsed["categories"]


def test_write_without_destination_raises() -> None:
    template = config_templates.get_template("quiz")

    with pytest.raises(ConfigTemplateError, match="workspace is required"):
        template.write()
