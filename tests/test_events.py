"""End-to-end tests for event operations over daily notes."""

import logging
from datetime import date, datetime

import pytest

from notecal.errors import DocumentNotFound, InvalidIdentifier, MoveIncomplete, RecordNotFound
from notecal.journal import read_journal_tail
from notecal.lines import split_lines
from notecal.models.event import EventType


def _journal_types(vault_paths):
    return [e.event_type for e in read_journal_tail(vault_paths.journal_file, n=100)]


class TestDelete:
    """Deleting records together with their notes."""

    def test_delete_scenario_removes_whole_span(self, service, scenario_note, scenario_text, vault_paths, caplog):
        """Test that deleting 'b' removes lines 6-10 and nothing else."""
        lines = split_lines(scenario_text)

        with caplog.at_level(logging.WARNING, logger="notecal.events"):
            result = service.delete_event("202509120000001", scenario_note, title="b")

        expected = lines[:6] + lines[11:]
        assert scenario_note.read_text(encoding="utf-8") == "\n".join(expected)
        assert expected[5] == "\t33333"
        assert expected[6] == "- [ ] a 🛫 2025-09-12 📅 2025-09-13"

        assert (result.start, result.end) == (6, 10)
        assert result.strategy == "title"
        assert result.removed_lines == lines[6:11]
        assert result.ledger_id == "202509120000001"
        assert "not kept in the delete ledger" in caplog.text

        ledger_text = vault_paths.delete_file.read_text(encoding="utf-8")
        assert ledger_text.startswith("- [ ] b 🛫 2025-09-12 📅 2025-09-13 deletedAt: ")
        assert _journal_types(vault_paths) == ["EVENT_DELETED"]

    def test_hard_delete_skips_ledger(self, service, scenario_note, vault_paths):
        result = service.delete_event("202509010900000", scenario_note, title="c", soft=False)

        assert result.ledger_id is None
        assert result.removed_lines == ["- 09:00-10:00 c", "\t33333"]
        assert not vault_paths.delete_file.exists()

    def test_delete_falls_back_to_time(self, service, scenario_note):
        """Test that a stale title still resolves through the time in the id."""
        result = service.delete_event("202509010900005", scenario_note, title="renamed meanwhile")

        assert result.strategy == "time"
        assert result.removed_lines[0] == "- 09:00-10:00 c"

    def test_unresolvable_delete_leaves_document_alone(self, service, scenario_note, scenario_text):
        with pytest.raises(RecordNotFound) as exc_info:
            service.delete_event("202509012300009", scenario_note, title="zzz")

        assert exc_info.value.details["attempted"] == "title,time,ordinal"
        assert scenario_note.read_text(encoding="utf-8") == scenario_text

    def test_delete_in_missing_document(self, service, vault_paths):
        with pytest.raises(DocumentNotFound):
            service.delete_event("202509010900000", vault_paths.daily / "2025-09-09.md")

    def test_invalid_identifier(self, service, scenario_note):
        with pytest.raises(InvalidIdentifier):
            service.delete_event("9:00", scenario_note)


class TestCreate:
    """Creating records in daily notes."""

    def test_create_in_new_note(self, service, vault_paths):
        event = service.create_event("A", datetime(2025, 9, 1, 9, 0), datetime(2025, 9, 1, 10, 0))

        note = vault_paths.daily / "2025-09-01.md"
        assert event.id == "202509010900000"
        assert event.path == note
        assert note.read_text(encoding="utf-8") == "# 2025-09-01\n- 09:00-10:00 A\n"
        assert _journal_types(vault_paths) == ["EVENT_CREATED"]

    def test_ordinal_counts_records_above(self, service, vault_paths):
        service.create_event("A", datetime(2025, 9, 1, 9, 0), datetime(2025, 9, 1, 10, 0))
        second = service.create_event(
            "B", datetime(2025, 9, 1, 11, 0), datetime(2025, 9, 1, 12, 0), EventType.TODO, notes="agenda"
        )

        assert second.id == "202509011100001"
        assert second.notes == "agenda"
        assert (vault_paths.daily / "2025-09-01.md").read_text(encoding="utf-8") == (
            "# 2025-09-01\n- 09:00-10:00 A\n- [ ] 11:00-12:00 B\n\tagenda\n"
        )

    def test_create_below_existing_notes(self, service, scenario_note, scenario_text):
        """Test that a new entry lands after the last record's notes."""
        event = service.create_event("d", datetime(2025, 9, 1, 17, 0), datetime(2025, 9, 1, 18, 0))

        assert event.line == 16
        assert event.id == "202509011700003"
        assert scenario_note.read_text(encoding="utf-8") == scenario_text + "\n- 17:00-18:00 d"

    def test_create_rejects_end_before_start(self, service):
        with pytest.raises(ValueError):
            service.create_event("A", datetime(2025, 9, 1, 10, 0), datetime(2025, 9, 1, 9, 0))


class TestUpdate:
    """Editing records in place and across days."""

    def test_update_in_place_keeps_notes(self, service, scenario_note, scenario_text):
        event = service.update_event(
            "202509010900000",
            scenario_note,
            "c",
            "c renamed",
            "default",
            datetime(2025, 9, 1, 11, 0),
            datetime(2025, 9, 1, 12, 0),
        )

        lines = split_lines(scenario_text)
        lines[4] = "- 11:00-12:00 c renamed"
        assert scenario_note.read_text(encoding="utf-8") == "\n".join(lines)
        assert event.id == "202509011100000"
        assert event.notes == "33333"

    def test_update_can_clear_notes(self, service, scenario_note, scenario_text):
        service.update_event(
            "202509010900000",
            scenario_note,
            "c",
            "c",
            "default",
            datetime(2025, 9, 1, 9, 0),
            datetime(2025, 9, 1, 10, 0),
            notes="",
        )

        lines = split_lines(scenario_text)
        assert scenario_note.read_text(encoding="utf-8") == "\n".join(lines[:5] + lines[6:])

    def test_update_untimed_task_keeps_all_day_form(self, service, scenario_note, scenario_text):
        """Test that an untimed task stays untimed and keeps its nested notes."""
        service.update_event(
            "202509120000001",
            scenario_note,
            "b",
            "b",
            EventType.TODO,
            datetime(2025, 9, 12),
            datetime(2025, 9, 14),
        )

        expected = scenario_text.replace(
            "- [ ] b 🛫 2025-09-12 📅 2025-09-13", "- [ ] b 🛫 2025-09-12 📅 2025-09-14"
        )
        assert scenario_note.read_text(encoding="utf-8") == expected

    def test_dated_task_in_earlier_note_keeps_its_start(self, service, scenario_note):
        """Test that a single-day edit keeps the start date the note cannot imply."""
        event = service.update_event(
            "202509120000001",
            scenario_note,
            "b",
            "b2",
            EventType.TODO,
            datetime(2025, 9, 12),
            datetime(2025, 9, 12),
        )

        assert split_lines(scenario_note.read_text(encoding="utf-8"))[6] == "- [ ] b2 🛫 2025-09-12 📅 2025-09-12"
        assert event.start == datetime(2025, 9, 12)
        assert event.id == "202509120000001"

        reread = service.get_event(event.id, scenario_note, title="b2")
        assert reread.start == datetime(2025, 9, 12)

    def test_dated_task_in_own_note_stays_without_start_date(self, service, vault_paths):
        note = vault_paths.daily / "2025-09-05.md"
        note.write_text("# 2025-09-05\n- [ ] pay rent 📅 2025-09-05\n", encoding="utf-8")

        event = service.update_event(
            "202509050000000",
            note,
            "pay rent",
            "pay bills",
            EventType.TODO,
            datetime(2025, 9, 5),
            datetime(2025, 9, 5),
        )

        assert note.read_text(encoding="utf-8") == "# 2025-09-05\n- [ ] pay bills 📅 2025-09-05\n"
        assert event.start == datetime(2025, 9, 5)

    def test_update_without_type_keeps_task_marker(self, service, scenario_note):
        service.toggle_event("202509010900000", scenario_note, title="c")

        event = service.update_event(
            "202509010900000",
            scenario_note,
            "c",
            "c later",
            None,
            datetime(2025, 9, 1, 9, 30),
            datetime(2025, 9, 1, 10, 0),
        )

        assert event.event_type == EventType.TODO
        assert split_lines(scenario_note.read_text(encoding="utf-8"))[4] == "- [ ] 09:30-10:00 c later"

    def test_update_keeps_block_anchor(self, service, vault_paths):
        note = vault_paths.daily / "2025-09-01.md"
        note.write_text("# 2025-09-01\n- 09:00-10:00 Sync ^ab12\n", encoding="utf-8")

        event = service.update_event(
            "202509010900000",
            note,
            "Sync",
            "Weekly sync",
            "default",
            datetime(2025, 9, 1, 9, 30),
            datetime(2025, 9, 1, 10, 30),
        )

        assert note.read_text(encoding="utf-8") == "# 2025-09-01\n- 09:30-10:30 Weekly sync ^ab12\n"
        assert event.annotation == "^ab12"

    def test_update_moves_to_new_day(self, service, vault_paths):
        """Test that changing the start day moves the record and its notes."""
        created = service.create_event(
            "Dentist", datetime(2025, 9, 1, 15, 0), datetime(2025, 9, 1, 16, 0), notes="bring card"
        )

        moved = service.update_event(
            created.id,
            created.path,
            "Dentist",
            "Dentist",
            "default",
            datetime(2025, 9, 3, 15, 0),
            datetime(2025, 9, 3, 16, 0),
        )

        target = vault_paths.daily / "2025-09-03.md"
        assert moved.path == target
        assert moved.id == "202509031500000"
        assert created.path.read_text(encoding="utf-8") == "# 2025-09-01\n"
        assert target.read_text(encoding="utf-8") == "# 2025-09-03\n- 15:00-16:00 Dentist\n\tbring card\n"
        assert _journal_types(vault_paths) == ["EVENT_CREATED", "EVENT_MOVED"]

    def test_move_event_keeps_title_and_notes(self, service, scenario_note, scenario_text, vault_paths):
        moved = service.move_event(
            "202509010900000",
            scenario_note,
            datetime(2025, 9, 2, 10, 0),
            datetime(2025, 9, 2, 11, 0),
            title="c",
        )

        lines = split_lines(scenario_text)
        assert scenario_note.read_text(encoding="utf-8") == "\n".join(lines[:4] + lines[6:])
        target = vault_paths.daily / "2025-09-02.md"
        assert target.read_text(encoding="utf-8") == "# 2025-09-02\n- 10:00-11:00 c\n\t33333\n"
        assert moved.title == "c"

    def test_move_leaves_single_blank_separator(self, service, vault_paths):
        note = vault_paths.daily / "2025-09-01.md"
        note.write_text("# 2025-09-01\n\n- 09:00-10:00 a\n\n- 11:00-12:00 other\n", encoding="utf-8")

        service.move_event(
            "202509010900000", note, datetime(2025, 9, 2, 9, 0), datetime(2025, 9, 2, 10, 0), title="a"
        )

        assert note.read_text(encoding="utf-8") == "# 2025-09-01\n\n- 11:00-12:00 other\n"
        target = vault_paths.daily / "2025-09-02.md"
        assert target.read_text(encoding="utf-8") == "# 2025-09-02\n- 09:00-10:00 a\n"

    def test_failed_target_write_raises_move_incomplete(self, service, scenario_note, scenario_text, vault_paths, monkeypatch):
        """Test that a failure after the source write reports the removed lines."""

        def broken_create(day):
            raise OSError("disk full")

        monkeypatch.setattr(service.store, "create_for_date", broken_create)

        with pytest.raises(MoveIncomplete) as exc_info:
            service.move_event(
                "202509010900000",
                scenario_note,
                datetime(2025, 9, 2, 10, 0),
                datetime(2025, 9, 2, 11, 0),
                title="c",
            )

        assert exc_info.value.kind == "move_incomplete"
        assert exc_info.value.details["lines"] == ["- 10:00-11:00 c", "\t33333"]
        assert exc_info.value.details["source"] == str(scenario_note)

        lines = split_lines(scenario_text)
        assert scenario_note.read_text(encoding="utf-8") == "\n".join(lines[:4] + lines[6:])
        assert _journal_types(vault_paths) == ["EVENT_MOVE_INCOMPLETE"]


class TestToggle:
    """Switching task state."""

    def test_toggle_todo_and_back(self, service, scenario_note, scenario_text):
        done = service.toggle_event("202509120000001", scenario_note, title="b")

        assert done.event_type == EventType.DONE
        assert scenario_note.read_text(encoding="utf-8") == scenario_text.replace("- [ ] b ", "- [x] b ")

        todo = service.toggle_event("202509120000001", scenario_note, title="b")
        assert todo.event_type == EventType.TODO
        assert scenario_note.read_text(encoding="utf-8") == scenario_text

    def test_toggle_plain_record_becomes_todo(self, service, scenario_note, vault_paths):
        event = service.toggle_event("202509010900000", scenario_note, title="c")

        assert event.event_type == EventType.TODO
        assert split_lines(scenario_note.read_text(encoding="utf-8"))[4] == "- [ ] 09:00-10:00 c"
        assert _journal_types(vault_paths) == ["EVENT_STATUS_CHANGED"]


class TestTrash:
    """Restore and purge through the service."""

    def test_delete_then_restore_round_trip(self, service, vault_paths):
        """Test that a restored record has the same title and start time."""
        created = service.create_event("Team sync", datetime(2025, 9, 1, 9, 0), datetime(2025, 9, 1, 10, 0))
        deleted = service.delete_event(created.id, created.path, title="Team sync")

        assert [e.id for e in service.list_deleted()] == [deleted.ledger_id]

        result = service.restore_deleted(deleted.ledger_id)

        events = service.list_events(date(2025, 9, 1))
        assert [(e.title, e.start) for e in events] == [("Team sync", datetime(2025, 9, 1, 9, 0))]
        assert result.restored_line == "- 09:00 Team sync"
        assert service.list_deleted() == []
        assert _journal_types(vault_paths) == ["EVENT_CREATED", "EVENT_DELETED", "EVENT_RESTORED"]

    def test_purge(self, service, scenario_note, vault_paths):
        deleted = service.delete_event("202509010900000", scenario_note, title="c")

        entry = service.purge_deleted(deleted.ledger_id)

        assert entry.content == "c"
        assert service.list_deleted() == []
        assert _journal_types(vault_paths) == ["EVENT_DELETED", "EVENT_PURGED"]

    def test_restore_rejects_bad_ledger_id(self, service):
        with pytest.raises(InvalidIdentifier):
            service.restore_deleted("12")


def test_list_events_across_notes(service, scenario_note):
    service.create_event("Later", datetime(2025, 9, 5, 9, 0), datetime(2025, 9, 5, 9, 30))

    titles = [e.title for e in service.list_events()]

    assert titles == ["c", "b", "a", "Later"]
    assert service.list_events(date(2025, 9, 2)) == []


def test_get_event_returns_current_view(service, scenario_note):
    event = service.get_event("202509010900000", scenario_note, title="c")

    assert event.title == "c"
    assert event.notes == "33333"
    assert event.path == scenario_note
