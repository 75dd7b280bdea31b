"""Soft-delete ledger kept next to the daily notes as ``delete.md``.

Each deleted record becomes one line::

    - [ ] Write report 🛫 2025-09-12 📅 2025-09-13 deletedAt: 2025/09/12 10:00:00 createdAt: 20250912000000

``createdAt`` is optional when reading, so hand-written entries still parse.
Entries are addressed by ledger id: the record's creation timestamp followed
by the entry's 1-based line number. Removing an entry blanks its line so the
line numbers of the other entries stay valid.
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from .errors import DocumentNotFound, NotARecordLine, RecordNotFound
from .formatter import START_EMOJI, strip_line
from .identifiers import decode_ledger_id, encode_ledger_id
from .lines import is_record_start, join_lines, split_lines
from .models.event import DeletedEvent, EventType, RestoreResult
from .mutator import find_insert_position, insert_at
from .parser import extract_event_time
from .store import DocumentStore

logger = logging.getLogger(__name__)

DELETED_AT_FORMAT = "%Y/%m/%d %H:%M:%S"

_ENTRY_RE = re.compile(
    r"^(?P<line>- .*?) deletedAt: (?P<deleted>\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2})"
    r"(?: createdAt: (?P<created>\d{14}))?\s*$"
)
_START_DATE_RE = re.compile(START_EMOJI + r"\s?(\d{4}-\d{2}-\d{2})")


def format_entry(record_line: str, created: datetime, deleted: datetime) -> str:
    return (
        f"{record_line} deletedAt: {deleted.strftime(DELETED_AT_FORMAT)}"
        f" createdAt: {created.strftime('%Y%m%d%H%M%S')}"
    )


def _derive_created(record_line: str, deleted: datetime) -> datetime:
    """Best guess of the creation time for entries written without createdAt."""
    created = deleted
    match = _START_DATE_RE.search(record_line)
    if match:
        created = datetime.strptime(match.group(1), "%Y-%m-%d")
    timed = extract_event_time(record_line)
    if timed is not None:
        created = created.replace(hour=timed[0], minute=timed[1], second=0)
    return created


def parse_entry(text: str, line_number: int) -> Optional[DeletedEvent]:
    """Parse one ledger line; ``None`` for blank or foreign lines."""
    match = _ENTRY_RE.match(text)
    if match is None:
        return None
    record_line = match.group("line")
    deleted = datetime.strptime(match.group("deleted"), DELETED_AT_FORMAT)
    if match.group("created"):
        created = datetime.strptime(match.group("created"), "%Y%m%d%H%M%S")
    else:
        created = _derive_created(record_line, deleted)
    return DeletedEvent(
        id=encode_ledger_id(created, line_number),
        content=strip_line(record_line),
        line=record_line,
        created_at=created,
        deleted_at=deleted,
        line_number=line_number,
    )


class DeleteLedger:
    """Soft-delete ledger stored through a :class:`DocumentStore`."""

    def __init__(
        self,
        store: DocumentStore,
        path: Path,
        insert_after: str = "",
        process_entries_below: str = "",
    ):
        self.store = store
        self.path = path
        self.insert_after = insert_after
        self.process_entries_below = process_entries_below

    def _read(self) -> str:
        try:
            return self.store.read(self.path)
        except DocumentNotFound:
            return ""

    def append(
        self,
        record_line: str,
        created: datetime,
        deleted: Optional[datetime] = None,
    ) -> DeletedEvent:
        """Append a deleted record line and return its ledger entry."""
        if not is_record_start(record_line):
            raise NotARecordLine("Only record lines can be sent to the ledger", text=record_line)

        deleted = (deleted or datetime.now()).replace(microsecond=0)
        text = self._read()
        lines = split_lines(text)
        entry = format_entry(record_line, created, deleted)

        if not lines or lines == [""]:
            line_number = 1
            new_text = entry
        else:
            line_number = len(lines) + 1
            new_text = text + "\n" + entry

        self.store.write(self.path, new_text)
        logger.info(f"Ledger entry {line_number} written to {self.path}")

        created = created.replace(microsecond=0)
        return DeletedEvent(
            id=encode_ledger_id(created, line_number),
            content=strip_line(record_line),
            line=record_line,
            created_at=created,
            deleted_at=deleted,
            line_number=line_number,
        )

    def entries(self) -> list[DeletedEvent]:
        """All live entries in ledger order."""
        entries: list[DeletedEvent] = []
        for index, text in enumerate(split_lines(self._read())):
            entry = parse_entry(text, index + 1)
            if entry is not None:
                entries.append(entry)
        return entries

    def get(self, ledger_id: str) -> DeletedEvent:
        """Look up an entry by ledger id (index only; no content check).

        Raises:
            InvalidIdentifier: If the ledger id is malformed.
            DocumentNotFound: If the ledger file does not exist.
            RecordNotFound: If the line number is past the end of the ledger.
            NotARecordLine: If the addressed line is not a ledger entry.
        """
        decoded = decode_ledger_id(ledger_id)
        try:
            text = self.store.read(self.path)
        except DocumentNotFound as e:
            raise DocumentNotFound("Delete file not found", path=str(self.path), identifier=ledger_id) from e

        lines = split_lines(text)
        if decoded.line_number > len(lines):
            raise RecordNotFound(
                "Ledger line number is past the end of the ledger",
                path=str(self.path),
                identifier=ledger_id,
                line_count=len(lines),
            )
        entry = parse_entry(lines[decoded.line_number - 1], decoded.line_number)
        if entry is None:
            raise NotARecordLine(
                "Ledger line is not a deleted record",
                path=str(self.path),
                identifier=ledger_id,
                text=lines[decoded.line_number - 1],
            )
        return entry

    def _blank(self, ledger_id: str) -> DeletedEvent:
        entry = self.get(ledger_id)
        lines = split_lines(self.store.read(self.path))
        lines[entry.line_number - 1] = ""
        self.store.write(self.path, join_lines(lines))
        return entry

    def restore(self, ledger_id: str) -> RestoreResult:
        """Reinsert an entry as ``- HH:MM <content>`` into its day's note.

        Day and time come from the timestamp part of the ledger id. The daily
        note is created when missing. The ledger line is blanked only after the
        daily note has been written.
        """
        entry = self.get(ledger_id)
        created = decode_ledger_id(ledger_id).created
        restored_line = f"- {created:%H:%M} {entry.content}".rstrip()

        target = self.store.resolve_for_date(created.date())
        created_document = target is None
        if target is None:
            target = self.store.create_for_date(created.date())

        lines = split_lines(self.store.read(target))
        position = find_insert_position(
            lines, EventType.DEFAULT, self.insert_after, self.process_entries_below
        )
        self.store.write(target, join_lines(insert_at(lines, position, restored_line)))
        self._blank(ledger_id)
        logger.info(f"Restored ledger entry {ledger_id} into {target} at line {position}")

        return RestoreResult(
            ledger_id=ledger_id,
            path=target,
            restored_line=restored_line,
            inserted_at=position,
            created_document=created_document,
        )

    def purge(self, ledger_id: str) -> DeletedEvent:
        """Drop an entry for good."""
        entry = self._blank(ledger_id)
        logger.info(f"Purged ledger entry {ledger_id}")
        return entry
