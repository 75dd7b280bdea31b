"""Smoke tests for the notecal CLI."""

import pytest
from typer.testing import CliRunner

from notecal.cli import app


runner = CliRunner()


@pytest.fixture
def vault(temp_vault, monkeypatch):
    """Vault with notes at its root, CWD outside any repo config."""
    for name in ("NOTECAL_VAULT", "NOTECAL_DAILY_FOLDER", "NOTECAL_DAILY_FORMAT", "NOTECAL_DELETE_FILE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(temp_vault)
    return temp_vault


def test_init_creates_state(vault):
    result = runner.invoke(app, ["init", "--vault", str(vault)])

    assert result.exit_code == 0
    assert (vault / ".notecal" / "config.toml").exists()
    assert (vault / ".notecal" / "journal.jsonl").exists()

    again = runner.invoke(app, ["init", "--vault", str(vault)])
    assert again.exit_code == 0
    assert "already" in again.output


def test_add_delete_restore(vault):
    """Test the add -> delete -> trash restore round trip through the CLI."""
    added = runner.invoke(
        app,
        ["add", "Standup", "--start", "2025-09-01 09:00", "--end", "2025-09-01 09:30", "--vault", str(vault)],
    )
    assert added.exit_code == 0, added.output
    assert "202509010900000" in added.output

    note = vault / "2025-09-01.md"
    assert note.read_text(encoding="utf-8") == "# 2025-09-01\n- 09:00-09:30 Standup\n"

    listed = runner.invoke(app, ["list", "--day", "2025-09-01", "--vault", str(vault)])
    assert listed.exit_code == 0
    assert "1 Event(s)" in listed.output

    deleted = runner.invoke(app, ["delete", "202509010900000", "--title", "Standup", "--vault", str(vault)])
    assert deleted.exit_code == 0, deleted.output
    assert "Ledger ID: 2025090109000001" in deleted.output
    assert "Standup" not in note.read_text(encoding="utf-8")

    trash = runner.invoke(app, ["trash", "list", "--vault", str(vault)])
    assert trash.exit_code == 0
    assert "2025090109000001" in trash.output

    restored = runner.invoke(app, ["trash", "restore", "2025090109000001", "--vault", str(vault)])
    assert restored.exit_code == 0, restored.output
    assert "- 09:00 Standup" in note.read_text(encoding="utf-8")

    journal = runner.invoke(app, ["journal", "tail", "--full", "--vault", str(vault)])
    assert journal.exit_code == 0
    assert "EVENT_RESTORED" in journal.output


def test_errors_exit_with_code_1(vault):
    (vault / "2025-09-01.md").write_text("# 2025-09-01\n- 09:00-10:00 c\n", encoding="utf-8")

    missing = runner.invoke(app, ["delete", "202509012300009", "--title", "zzz", "--vault", str(vault)])
    assert missing.exit_code == 1
    assert "record_not_found" in missing.output

    bad_id = runner.invoke(app, ["toggle", "12345", "--file", "2025-09-01.md", "--vault", str(vault)])
    assert bad_id.exit_code == 1
    assert "invalid_identifier" in bad_id.output

    no_note = runner.invoke(app, ["delete", "202509050900000", "--vault", str(vault)])
    assert no_note.exit_code == 1
    assert "No daily note" in no_note.output
    assert "--file" in no_note.output


def test_edit_with_relative_file(vault):
    note = vault / "2025-09-01.md"
    note.write_text("# 2025-09-01\n- 09:00-10:00 c\n", encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "edit", "202509010900000",
            "--original", "c",
            "--title", "c moved",
            "--start", "2025-09-01T11:00",
            "--end", "2025-09-01T12:00",
            "--file", "2025-09-01.md",
            "--vault", str(vault),
        ],
    )

    assert result.exit_code == 0, result.output
    assert note.read_text(encoding="utf-8") == "# 2025-09-01\n- 11:00-12:00 c moved\n"


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "notecal v" in result.output


def test_edit_keeps_task_type_by_default(vault):
    note = vault / "2025-09-01.md"
    note.write_text("# 2025-09-01\n- [x] 09:00-10:00 Call\n", encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "edit", "202509010900000",
            "--original", "Call",
            "--title", "Call Bob",
            "--start", "2025-09-01 09:00",
            "--end", "2025-09-01 10:00",
            "--vault", str(vault),
        ],
    )

    assert result.exit_code == 0, result.output
    assert note.read_text(encoding="utf-8") == "# 2025-09-01\n- [x] 09:00-10:00 Call Bob\n"
