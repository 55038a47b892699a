from __future__ import annotations

from pathlib import Path

import pytest

from vocab_drill.core import workspace


def test_ensure_workspace_creates_directories(tmp_path, monkeypatch):
    root = tmp_path / "data"
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    layout = workspace.ensure_workspace()

    assert layout.home == root.resolve()
    assert {name for name, _ in layout.items()} == {"config", "logs", "banks"}
    for name, path in layout.items():
        assert path.is_dir()
        assert layout.created[name] is True
    assert layout.created["home"] is True


def test_ensure_workspace_is_idempotent(tmp_path, monkeypatch):
    root = tmp_path / "existing"
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    first = workspace.ensure_workspace()
    second = workspace.ensure_workspace()

    assert first.home == second.home
    assert all(not created for created in second.created.values())


def test_ensure_workspace_respects_custom_path(tmp_path, monkeypatch):
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(tmp_path / "ignored"))
    custom = tmp_path / "custom-root"

    layout = workspace.ensure_workspace(path=custom)

    assert layout.home == custom.resolve()
    assert not (tmp_path / "ignored").exists()


def test_ensure_workspace_without_create(tmp_path, monkeypatch):
    root = tmp_path / "deferred"
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    layout = workspace.ensure_workspace(create=False)

    assert layout.home == root.resolve()
    assert not root.exists()
    assert all(not created for created in layout.created.values())


def test_describe_layout_returns_mapping(tmp_path, monkeypatch):
    root = tmp_path / "layout"
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    mapping = workspace.describe_layout()

    assert mapping["home"] == root.resolve()
    assert mapping["banks"] == root.resolve() / "banks"
    assert not root.exists()


def test_ensure_workspace_errors_when_path_is_file(tmp_path, monkeypatch):
    root = tmp_path / "file"
    root.write_text("not a dir", encoding="utf-8")
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    with pytest.raises(workspace.WorkspaceError):
        workspace.ensure_workspace()


def test_path_for_unknown_key_errors(tmp_path, monkeypatch):
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(tmp_path / "workspace"))

    layout = workspace.ensure_workspace(create=False)

    with pytest.raises(KeyError):
        layout.path_for("unknown")


def test_ensure_workspace_uses_env_mapping(tmp_path):
    env_home = tmp_path / "env-home"
    env = {workspace.WORKSPACE_ENV: str(env_home)}

    layout = workspace.ensure_workspace(env=env)

    assert layout.home == env_home.resolve()


def test_default_workspace_falls_back_to_tempdir(tmp_path, monkeypatch):
    default = tmp_path / "home" / ".vocab-drill-data"
    monkeypatch.setattr(workspace, "DEFAULT_WORKSPACE", default)
    monkeypatch.setattr(
        workspace.tempfile, "gettempdir", lambda: str(tmp_path / "tmp")
    )
    real_ensure_dir = workspace._ensure_dir

    def fake_ensure_dir(path: Path) -> bool:
        if path == default.resolve():
            raise PermissionError("denied")
        return real_ensure_dir(path)

    monkeypatch.setattr(workspace, "_ensure_dir", fake_ensure_dir)

    layout = workspace.ensure_workspace(env={})

    assert layout.home == tmp_path / "tmp" / "vocab-drill-data"
    assert layout.path_for("logs").is_dir()


def test_explicit_path_never_falls_back(tmp_path, monkeypatch):
    def deny(path: Path) -> bool:  # noqa: D401
        raise PermissionError("nope")

    monkeypatch.setattr(workspace, "_ensure_dir", deny)

    with pytest.raises(workspace.WorkspaceError):
        workspace.ensure_workspace(path=tmp_path / "locked")
