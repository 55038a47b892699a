"""Packaged TOML files that ``vocab quiz config init`` can scaffold.

Each template knows which workspace directory it belongs in, so callers only
pass an explicit path when they want to place it elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Iterable, Optional

from .config import TomlConfigError, write_toml_template
from .workspace import WorkspaceLayout

__all__ = [
    "ConfigTemplate",
    "ConfigTemplateError",
    "get_template",
    "iter_templates",
]


class ConfigTemplateError(RuntimeError):
    """Raised when a template is unknown or cannot be written."""


@dataclass(frozen=True)
class ConfigTemplate:
    """A packaged resource plus where it lands inside the workspace."""

    name: str
    label: str
    package: str
    resource: str
    directory: str
    target: str

    def read_text(self) -> str:
        try:
            return (
                resources.files(self.package)
                .joinpath(self.resource)
                .read_text(encoding="utf-8")
            )
        except FileNotFoundError as exc:  # pragma: no cover - package state
            raise ConfigTemplateError(
                f"Template '{self.name}' resource not found."
            ) from exc

    def default_path(self, layout: WorkspaceLayout) -> Path:
        return layout.path_for(self.directory) / self.target

    def write(
        self,
        path: Optional[Path] = None,
        *,
        layout: Optional[WorkspaceLayout] = None,
        overwrite: bool = False,
    ) -> Path:
        """Write the template to ``path`` or to its workspace default."""

        if path is None:
            if layout is None:
                raise ConfigTemplateError(
                    "Either a destination path or a workspace is required."
                )
            path = self.default_path(layout)
        try:
            return write_toml_template(
                path, template=self.read_text(), overwrite=overwrite
            )
        except TomlConfigError as exc:
            raise ConfigTemplateError(str(exc)) from exc


_TEMPLATES: dict[str, ConfigTemplate] = {
    template.name: template
    for template in (
        ConfigTemplate(
            name="quiz",
            label="quiz config",
            package="vocab_drill.quiz",
            resource="template.toml",
            directory="config",
            target="quiz.toml",
        ),
        ConfigTemplate(
            name="bank",
            label="vocabulary bank",
            package="vocab_drill.quiz",
            resource="starter_bank.toml",
            directory="banks",
            target="my_words.toml",
        ),
    )
}


def get_template(name: str) -> ConfigTemplate:
    try:
        return _TEMPLATES[name]
    except KeyError as exc:
        known = ", ".join(sorted(_TEMPLATES))
        raise ConfigTemplateError(
            f"Unknown template '{name}'. Expected one of: {known}."
        ) from exc


def iter_templates() -> Iterable[ConfigTemplate]:
    return tuple(_TEMPLATES.values())
