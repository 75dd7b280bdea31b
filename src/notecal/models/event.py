"""Pydantic models for calendar events stored in daily notes."""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Record types. Task types render with a bracketed marker."""

    DEFAULT = "default"
    TODO = "TASK-TODO"
    DONE = "TASK-DONE"
    IN_PROGRESS = "TASK-IN_PROGRESS"
    IMPORTANT = "TASK-IMPORTANT"
    CANCELLED = "TASK-CANCELLED"

    @property
    def is_task(self) -> bool:
        return self is not EventType.DEFAULT


class Event(BaseModel):
    """Read-only view of one record reconstructed from a daily note.

    The daily note owns the record. This is a snapshot: ``line`` is only
    meaningful until the next edit of the document.
    """

    id: str = Field(..., description="Event identifier (timestamp + ordinal)")
    title: str = Field(..., description="Text with time, date and marker tokens removed")
    start: datetime = Field(..., description="Start moment")
    end: datetime = Field(..., description="End moment")
    all_day: bool = Field(False, description="True when the line carries no time of day")
    event_type: EventType = Field(EventType.DEFAULT, description="Record type")
    notes: str | None = Field(None, description="Continuation lines, de-indented")
    annotation: str | None = Field(None, description="Trailing ^block-id anchor")
    path: Path | None = Field(None, description="Daily note holding the record")
    line: int | None = Field(None, description="Index of the record-start line at read time")

    model_config = {"frozen": True}


class DeletedEvent(BaseModel):
    """One entry of the soft-delete ledger."""

    id: str = Field(..., description="Ledger id (created timestamp + line number)")
    content: str = Field(..., description="Record text with list prefix and tokens removed")
    line: str = Field(..., description="Verbatim record line as it was deleted")
    created_at: datetime = Field(..., description="Creation timestamp of the record")
    deleted_at: datetime = Field(..., description="Deletion timestamp")
    line_number: int = Field(..., description="1-based line number inside the ledger")

    model_config = {"frozen": True}


class DeleteResult(BaseModel):
    """Result of removing a record span from a daily note."""

    path: Path
    identifier: str
    start: int = Field(..., description="First removed line (0-based)")
    end: int = Field(..., description="Last removed line (0-based, inclusive)")
    removed_lines: list[str]
    strategy: str = Field(..., description="Resolver strategy that located the record")
    ledger_id: str | None = Field(None, description="Ledger id when soft-deleted")


class RestoreResult(BaseModel):
    """Result of moving a ledger entry back into a daily note."""

    ledger_id: str
    path: Path
    restored_line: str
    inserted_at: int
    created_document: bool = False
