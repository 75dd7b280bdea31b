"""Pytest fixtures for notecal tests."""

from pathlib import Path

import pytest

from notecal.config import CalendarConfig
from notecal.events import EventService
from notecal.journal import JournalWriter
from notecal.paths import VaultPaths
from notecal.store import DailyNoteStore
from notecal.trash import DeleteLedger


SCENARIO_NOTE = "\n".join(
    [
        "# 2025-09-01",
        "",
        "## Schedule",
        "",
        "- 09:00-10:00 c",
        "\t33333",
        "- [ ] b 🛫 2025-09-12 📅 2025-09-13",
        "\t2",
        "",
        "\t- [ ] test2",
        "\ttest2",
        "- [ ] a 🛫 2025-09-12 📅 2025-09-13",
        "\t- [ ] 1",
        "\t111",
        "",
        "\ttest1",
    ]
)


@pytest.fixture
def temp_vault(tmp_path):
    """Create a temporary vault for testing.

    Args:
        tmp_path: pytest's built-in temporary directory fixture

    Returns:
        Path to temporary vault root
    """
    vault_root = tmp_path / "test_vault"
    vault_root.mkdir()
    (vault_root / ".obsidian").mkdir()
    return vault_root


@pytest.fixture
def vault_config(temp_vault):
    """CalendarConfig pointing to the temporary vault, daily notes in Daily/."""
    return CalendarConfig(vault_path=temp_vault, daily_folder="Daily")


@pytest.fixture
def vault_paths(vault_config):
    """Create VaultPaths for temporary vault with its directories in place."""
    paths = VaultPaths.from_config(vault_config)

    for directory in paths.get_all_directories():
        directory.mkdir(parents=True, exist_ok=True)

    paths.journal_file.touch()

    return paths


@pytest.fixture
def store(vault_paths):
    return DailyNoteStore(vault_paths.daily)


@pytest.fixture
def ledger(store, vault_paths):
    return DeleteLedger(store, vault_paths.delete_file)


@pytest.fixture
def service(vault_config, vault_paths):
    """EventService wired to the temporary vault."""
    return EventService.from_config(vault_config, journal=JournalWriter(vault_paths.journal_file, run_id="test-run"))


@pytest.fixture
def scenario_note(vault_paths) -> Path:
    """Daily note for 2025-09-01 holding three records with nested notes."""
    path = vault_paths.daily / "2025-09-01.md"
    path.write_text(SCENARIO_NOTE, encoding="utf-8")
    return path


@pytest.fixture
def scenario_text() -> str:
    return SCENARIO_NOTE
