"""TOML helpers shared by vocab-drill config files, templates and banks."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

try:  # Python >= 3.11 ships ``tomllib`` in the stdlib.
    import tomllib
except ModuleNotFoundError as exc:  # pragma: no cover - Python < 3.11
    raise RuntimeError("Python 3.11+ is required for tomllib support.") from exc

__all__ = [
    "TomlConfigError",
    "load_toml",
    "merge_defaults",
    "load_with_defaults",
    "write_toml_template",
]


class TomlConfigError(RuntimeError):
    """Raised when a TOML document cannot be read, parsed or validated."""


def load_toml(path: Path) -> Mapping[str, Any]:
    """Parse the TOML document at ``path``.

    Both config files and vocabulary banks go through here; callers wrap
    :class:`TomlConfigError` in their own error type.
    """

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise TomlConfigError(f"File not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Failed to parse TOML in {path}: {exc}") from exc


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    """Overlay ``override`` onto ``base`` in place.

    Keys missing from ``base`` are rejected, and a table in ``base`` may only
    be replaced by a table.
    """

    for key, value in override.items():
        dotted = f"{path}{key}"
        if key not in base:
            raise TomlConfigError(f"Unknown configuration key '{dotted}'.")
        current = base[key]
        if not isinstance(current, MutableMapping):
            base[key] = value
            continue
        if not isinstance(value, Mapping):
            raise TomlConfigError(
                f"Expected table for '{dotted}', found {type(value).__name__}."
            )
        merge_defaults(current, value, path=f"{dotted}.")


def load_with_defaults(
    path: Path,
    defaults: Mapping[str, Any],
    *,
    required: bool = False,
) -> tuple[MutableMapping[str, Any], Optional[Path]]:
    """Return ``defaults`` overlaid with the file at ``path`` when it exists.

    ``defaults`` is deep-copied and never mutated. The second element is the
    path that was actually read, or ``None`` when the file was absent and not
    ``required``.
    """

    table: MutableMapping[str, Any] = copy.deepcopy(dict(defaults))
    if not path.exists():
        if required:
            raise TomlConfigError(f"Config file not found: {path}")
        return table, None
    merge_defaults(table, load_toml(path))
    return table, path


def write_toml_template(
    path: Path,
    *,
    template: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write ``template`` to ``path``, refusing to clobber unless asked."""

    if path.exists() and not overwrite:
        raise TomlConfigError(f"File already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(template, encoding="utf-8")
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path
