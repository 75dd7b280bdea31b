"""Event operations over daily notes.

Each operation is a read-modify-write pass over one document: read the note,
locate the record, compute the new line list, write it back. Moves between
days are two such passes (source first, then target) and are not atomic:
if the target pass fails the record only exists in the :class:`MoveIncomplete`
error raised to the caller.
"""

import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import Optional, Union

from .config import CalendarConfig
from .errors import EventError, MoveIncomplete, NotARecordLine
from .formatter import (
    as_event_type,
    clean_event,
    format_all_day_line,
    format_event_line,
    has_leading_time,
    set_marker,
    split_annotation,
    strip_line,
)
from .identifiers import decode_event_id
from .journal import JournalWriter
from .lines import find_record_boundaries, is_record_start, join_lines, split_lines, trim_trailing_blank
from .models.event import DeletedEvent, DeleteResult, Event, EventType, RestoreResult
from .mutator import delete_span, find_insert_position, insert_at, replace_span
from .parser import extract_event_time, parse_document, parse_event_line
from .paths import VaultPaths
from .resolver import event_type_at, find_event_line, require, resolve
from .store import DailyNoteStore, DocumentStore
from .trash import DeleteLedger

logger = logging.getLogger(__name__)


class EventService:
    """Create, edit, move, delete and restore events stored in daily notes."""

    def __init__(
        self,
        store: DocumentStore,
        ledger: DeleteLedger,
        journal: JournalWriter,
        insert_after: str = "",
        process_entries_below: str = "",
    ):
        self.store = store
        self.ledger = ledger
        self.journal = journal
        self.insert_after = insert_after
        self.process_entries_below = process_entries_below

    @classmethod
    def from_config(cls, config: CalendarConfig, journal: Optional[JournalWriter] = None) -> "EventService":
        """Wire a filesystem-backed service from configuration."""
        paths = VaultPaths.from_config(config)
        store = DailyNoteStore(paths.daily, config.daily_format)
        ledger = DeleteLedger(store, paths.delete_file, config.insert_after, config.process_entries_below)
        return cls(
            store=store,
            ledger=ledger,
            journal=journal or JournalWriter(paths.journal_file),
            insert_after=config.insert_after,
            process_entries_below=config.process_entries_below,
        )

    # -- document helpers -------------------------------------------------

    def _load(self, path: Path) -> list[str]:
        return split_lines(self.store.read(path))

    def _save(self, path: Path, lines: list[str]) -> None:
        self.store.write(path, join_lines(lines))

    def _document_for(self, day: date) -> Path:
        path = self.store.resolve_for_date(day)
        if path is None:
            path = self.store.create_for_date(day)
        return path

    def _insert_position(self, lines: list[str], event_type: EventType) -> int:
        return find_insert_position(lines, event_type, self.insert_after, self.process_entries_below)

    def _view(self, path: Path, lines: list[str], index: int, fallback_day: date) -> Event:
        ordinal = sum(1 for line in lines[:index] if is_record_start(line))
        day = self.store.date_for(path) or fallback_day
        return parse_event_line(lines, index, ordinal, day, path)

    # -- queries ----------------------------------------------------------

    def list_events(self, day: Optional[date] = None) -> list[Event]:
        """All events of one day, or of every daily note when ``day`` is None."""
        if day is not None:
            path = self.store.resolve_for_date(day)
            paths = [path] if path is not None else []
        else:
            paths = self.store.list_all()

        events: list[Event] = []
        for path in paths:
            note_day = self.store.date_for(path) or day
            if note_day is None:
                continue
            events.extend(parse_document(self._load(path), note_day, path))
        return events

    def get_event(self, identifier: str, path: Path, title: Optional[str] = None) -> Event:
        lines = self._load(path)
        found = require(resolve(lines, identifier, title), path=str(path), identifier=identifier, title=title)
        return self._view(path, lines, found.line, decode_event_id(identifier).day)

    # -- mutations --------------------------------------------------------

    def create_event(
        self,
        content: str,
        start: datetime,
        end: datetime,
        event_type: Union[EventType, str] = EventType.DEFAULT,
        notes: Optional[str] = None,
    ) -> Event:
        """Insert a new record into the daily note of ``start``'s day."""
        if end < start:
            raise ValueError("Event end must not be before its start")
        resolved_type = as_event_type(event_type)
        text = format_event_line(content, start, end, resolved_type, notes)

        path = self._document_for(start.date())
        lines = self._load(path)
        position = self._insert_position(lines, resolved_type)
        updated = insert_at(lines, position, text)
        self._save(path, updated)

        event = self._view(path, updated, position, start.date())
        logger.info(f"Created event {event.id} in {path} at line {position}")
        self.journal.append_event(
            event_type="EVENT_CREATED",
            event_ref=event.id,
            payload={"path": str(path), "line": position, "text": text},
        )
        return event

    def update_event(
        self,
        identifier: str,
        path: Path,
        original_content: str,
        content: str,
        event_type: Optional[Union[EventType, str]],
        start: datetime,
        end: datetime,
        notes: Optional[str] = None,
    ) -> Event:
        """Rewrite an event's span, moving it to another day if its start day changed.

        ``event_type=None`` keeps the record's current type. ``notes=None``
        keeps the notes already in the document; an empty string removes them.
        """
        if end < start:
            raise ValueError("Event end must not be before its start")
        original_start = decode_event_id(identifier).created

        lines = self._load(path)
        found = require(
            find_event_line(
                lines, identifier, original_content, event_type or EventType.DEFAULT, original_start
            ),
            path=str(path),
            identifier=identifier,
            title=original_content,
        )
        if event_type is None:
            resolved_type = event_type_at(lines, found.line)
        else:
            resolved_type = as_event_type(event_type)
        return self._apply_edit(
            identifier, path, lines, found.line, original_start,
            original_content, content, resolved_type, start, end, notes,
        )

    def move_event(
        self,
        identifier: str,
        path: Path,
        start: datetime,
        end: datetime,
        title: Optional[str] = None,
    ) -> Event:
        """Reschedule an event keeping its title, type, notes and anchor."""
        if end < start:
            raise ValueError("Event end must not be before its start")
        lines = self._load(path)
        found = require(resolve(lines, identifier, title), path=str(path), identifier=identifier, title=title)
        current = self._view(path, lines, found.line, decode_event_id(identifier).day)
        return self._apply_edit(
            identifier, path, lines, found.line, current.start,
            current.title, current.title, current.event_type, start, end, None,
        )

    def _apply_edit(
        self,
        identifier: str,
        path: Path,
        lines: list[str],
        index: int,
        original_start: datetime,
        original_content: str,
        content: str,
        event_type: EventType,
        start: datetime,
        end: datetime,
        notes: Optional[str],
    ) -> Event:
        span_start, span_end = find_record_boundaries(lines, index)
        # blank lines after the record stay where they are
        span_end = trim_trailing_blank(lines, span_start, span_end)
        original_line = lines[index]
        current = self._view(path, lines, index, original_start.date())

        if notes is None:
            notes = current.notes

        new_content = clean_event(original_content, content)
        _, annotation = split_annotation(strip_line(original_line))
        if annotation and split_annotation(new_content)[1] is None:
            new_content = f"{new_content} {annotation}"

        in_place = start.date() == original_start.date()
        untimed = extract_event_time(original_line) is None and not has_leading_time(content)
        if event_type.is_task and untimed:
            # a start date left off the line falls back to the day of the note holding it
            note_day = self.store.date_for(path) if in_place else start.date()
            implied_start = datetime.combine(note_day, time()) if note_day else original_start
            text = format_all_day_line(new_content, implied_start, start, end, event_type, notes)
        else:
            text = format_event_line(new_content, start, end, event_type, notes)
        new_lines = split_lines(text)

        if in_place:
            updated = replace_span(lines, span_start, span_end, new_lines)
            self._save(path, updated)
            event = self._view(path, updated, span_start, start.date())
            logger.info(f"Updated event {identifier} in {path} (lines {span_start}-{span_end})")
            self.journal.append_event(
                event_type="EVENT_UPDATED",
                event_ref=identifier,
                payload={
                    "path": str(path),
                    "start": span_start,
                    "end": span_end,
                    "old": lines[span_start : span_end + 1],
                    "new": new_lines,
                },
            )
            return event

        return self._move(identifier, path, lines, span_start, span_end, new_lines, event_type, start)

    def _move(
        self,
        identifier: str,
        source: Path,
        lines: list[str],
        span_start: int,
        span_end: int,
        new_lines: list[str],
        event_type: EventType,
        start: datetime,
    ) -> Event:
        remaining, removed = delete_span(lines, span_start, span_end)
        # keep a single blank line between the records around the gap
        if (
            0 < span_start < len(remaining)
            and not remaining[span_start - 1].strip()
            and not remaining[span_start].strip()
        ):
            remaining = remaining[:span_start] + remaining[span_start + 1 :]
        self._save(source, remaining)

        target: Optional[Path] = None
        try:
            target = self._document_for(start.date())
            target_lines = remaining if target == source else self._load(target)
            position = self._insert_position(target_lines, event_type)
            updated = insert_at(target_lines, position, new_lines)
            self._save(target, updated)
        except (EventError, OSError) as e:
            logger.error(f"Event {identifier} removed from {source} but not written to {target}: {e}")
            self.journal.append_event(
                event_type="EVENT_MOVE_INCOMPLETE",
                event_ref=identifier,
                payload={
                    "source": str(source),
                    "target": str(target) if target else None,
                    "lines": new_lines,
                    "error": str(e),
                },
            )
            raise MoveIncomplete(
                "Event was removed from its note but could not be written to the new day",
                identifier=identifier,
                source=str(source),
                target=str(target) if target else None,
                lines=new_lines,
            ) from e

        event = self._view(target, updated, position, start.date())
        logger.info(f"Moved event {identifier} from {source} to {target} at line {position}")
        self.journal.append_event(
            event_type="EVENT_MOVED",
            event_ref=identifier,
            payload={
                "source": str(source),
                "target": str(target),
                "removed": removed,
                "inserted_at": position,
                "new": new_lines,
            },
        )
        return event

    def toggle_event(self, identifier: str, path: Path, title: Optional[str] = None) -> Event:
        """Flip todo and done; any other type becomes todo. Only the marker changes."""
        lines = self._load(path)
        found = require(resolve(lines, identifier, title), path=str(path), identifier=identifier, title=title)
        current = event_type_at(lines, found.line)
        new_type = EventType.DONE if current is EventType.TODO else EventType.TODO

        new_line = set_marker(lines[found.line], new_type)
        updated = replace_span(lines, found.line, found.line, [new_line])
        self._save(path, updated)

        logger.info(f"Event {identifier} in {path}: {current.value} -> {new_type.value}")
        self.journal.append_event(
            event_type="EVENT_STATUS_CHANGED",
            event_ref=identifier,
            payload={"path": str(path), "line": found.line, "from": current.value, "to": new_type.value},
        )
        return self._view(path, updated, found.line, decode_event_id(identifier).day)

    def delete_event(
        self,
        identifier: str,
        path: Path,
        title: Optional[str] = None,
        soft: bool = True,
    ) -> DeleteResult:
        """Remove an event and its notes from a daily note.

        With ``soft`` the record line is also appended to the delete ledger.
        Notes are not carried into the ledger.
        """
        created = decode_event_id(identifier).created
        lines = self._load(path)
        found = require(resolve(lines, identifier, title), path=str(path), identifier=identifier, title=title)
        if not is_record_start(lines[found.line]):
            raise NotARecordLine(
                "Target line is not an event line",
                path=str(path),
                identifier=identifier,
                line=found.line,
            )

        span_start, span_end = find_record_boundaries(lines, found.line)
        remaining, removed = delete_span(lines, span_start, span_end)
        self._save(path, remaining)
        logger.info(
            f"Deleted event {identifier} from {path} (lines {span_start}-{span_end}, via {found.strategy})"
        )

        ledger_id = None
        if soft:
            if any(line.strip() for line in removed[1:]):
                logger.warning(f"Notes of event {identifier} are not kept in the delete ledger")
            ledger_id = self.ledger.append(removed[0], created).id

        self.journal.append_event(
            event_type="EVENT_DELETED",
            event_ref=identifier,
            payload={
                "path": str(path),
                "start": span_start,
                "end": span_end,
                "removed": removed,
                "strategy": found.strategy,
                "ledger_id": ledger_id,
            },
        )
        return DeleteResult(
            path=path,
            identifier=identifier,
            start=span_start,
            end=span_end,
            removed_lines=removed,
            strategy=found.strategy,
            ledger_id=ledger_id,
        )

    # -- delete ledger ----------------------------------------------------

    def list_deleted(self) -> list[DeletedEvent]:
        return self.ledger.entries()

    def restore_deleted(self, ledger_id: str) -> RestoreResult:
        result = self.ledger.restore(ledger_id)
        self.journal.append_event(
            event_type="EVENT_RESTORED",
            event_ref=ledger_id,
            payload={"path": str(result.path), "line": result.inserted_at, "text": result.restored_line},
        )
        return result

    def purge_deleted(self, ledger_id: str) -> DeletedEvent:
        entry = self.ledger.purge(ledger_id)
        self.journal.append_event(
            event_type="EVENT_PURGED",
            event_ref=ledger_id,
            payload={"line": entry.line},
        )
        return entry
