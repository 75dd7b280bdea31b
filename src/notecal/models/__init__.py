"""Pydantic models for notecal."""

from .event import DeletedEvent, DeleteResult, Event, EventType, RestoreResult
from .journal import JournalEvent, JournalEventType

__all__ = [
    "Event",
    "EventType",
    "DeletedEvent",
    "DeleteResult",
    "RestoreResult",
    # Journal
    "JournalEvent",
    "JournalEventType",
]
