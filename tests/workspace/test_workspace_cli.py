from __future__ import annotations

from vocab_drill.core import workspace as workspace_mod
from vocab_drill.workspace import cli


def test_vocab_init_creates_workspace(tmp_path, capsys, monkeypatch):
    target = tmp_path / "workspace"
    monkeypatch.setenv("VOCAB_DRILL_DATA_HOME", str(target))

    code = cli.main([])

    out = capsys.readouterr().out
    assert code == 0
    assert "Workspace ready" in out
    assert "(created)" in out
    assert (target / "banks").is_dir()


def test_vocab_init_reports_existing_directories(tmp_path, capsys):
    target = tmp_path / "again"
    cli.main(["--path", str(target), "--quiet"])

    code = cli.main(["--path", str(target)])

    out = capsys.readouterr().out
    assert code == 0
    assert "(created)" not in out
    assert out.count("(exists)") == 4


def test_vocab_init_supports_custom_path(tmp_path, capsys):
    target = tmp_path / "custom"

    code = cli.main(["--path", str(target)])

    assert code == 0
    assert target.is_dir()
    assert str(target) in capsys.readouterr().out


def test_vocab_init_quiet_mode(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("VOCAB_DRILL_DATA_HOME", str(tmp_path / "quiet"))

    code = cli.main(["--quiet"])

    assert code == 0
    assert capsys.readouterr().out == ""


def test_vocab_init_reports_workspace_errors(tmp_path, capsys):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")

    code = cli.main(["--path", str(blocker)])

    assert code == 1
    assert "not a directory" in capsys.readouterr().err
    assert workspace_mod.WORKSPACE_ENV == "VOCAB_DRILL_DATA_HOME"
