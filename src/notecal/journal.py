"""Append-only audit journal of event mutations."""

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console

from .models.journal import JournalEvent, JournalEventType

console = Console()


class JournalWriter:
    """Append-only journal writer.

    Writes one JSON object per mutation to <vault>/.notecal/journal.jsonl.
    Never truncates or rewrites; only appends.
    """

    def __init__(self, journal_path: Path, run_id: str | None = None):
        """Initialize journal writer.

        Args:
            journal_path: Path to journal.jsonl file
            run_id: Optional run ID; if None, generates a new uuid4
        """
        self.journal_path = journal_path
        self.run_id = run_id or str(uuid.uuid4())

    def append_event(
        self,
        event_type: JournalEventType,
        payload: dict,
        event_ref: str | None = None,
    ) -> JournalEvent:
        """Append an entry to the journal.

        Args:
            event_type: Type of mutation
            payload: Mutation-specific data
            event_ref: Optional event or ledger id reference

        Returns:
            The created JournalEvent
        """
        self.journal_path.parent.mkdir(parents=True, exist_ok=True)

        event = JournalEvent(
            event_id=str(uuid.uuid4()),
            run_id=self.run_id,
            ts=datetime.now(timezone.utc),
            event_type=event_type,
            event_ref=event_ref,
            payload=payload,
        )

        with open(self.journal_path, "a", encoding="utf-8") as f:
            # mode='json' serializes datetimes and paths
            f.write(json.dumps(event.model_dump(mode="json"), ensure_ascii=False) + "\n")

        return event


def read_journal_tail(journal_path: Path, n: int = 20) -> list[JournalEvent]:
    """Read the last N entries from the journal.

    Robust parsing: skips malformed lines with a warning.

    Args:
        journal_path: Path to journal.jsonl file
        n: Number of entries to read from the end

    Returns:
        List of JournalEvent objects (last N entries)
    """
    if not journal_path.exists():
        return []

    events: list[JournalEvent] = []
    malformed_count = 0

    with open(journal_path, "r", encoding="utf-8") as f:
        lines = f.readlines()

    for line in lines[-n:] if len(lines) > n else lines:
        line = line.strip()
        if not line:
            continue

        try:
            events.append(JournalEvent(**json.loads(line)))
        except (json.JSONDecodeError, ValueError) as e:
            malformed_count += 1
            console.print(f"[yellow]Warning: Skipping malformed line: {e}[/yellow]")

    if malformed_count > 0:
        console.print(f"[yellow]Skipped {malformed_count} malformed line(s)[/yellow]")

    return events
