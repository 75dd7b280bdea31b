"""Pydantic models for the audit journal."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

JournalEventType = Literal[
    "EVENT_CREATED",
    "EVENT_UPDATED",
    "EVENT_MOVED",
    "EVENT_MOVE_INCOMPLETE",
    "EVENT_STATUS_CHANGED",
    "EVENT_DELETED",
    "EVENT_RESTORED",
    "EVENT_PURGED",
]


class JournalEvent(BaseModel):
    """Append-only journal record.

    Written as JSONL to <vault>/.notecal/journal.jsonl.
    Never mutate or delete; only append.
    """

    event_id: str = Field(description="Unique journal entry identifier (uuid4)")
    run_id: str = Field(description="Run/session identifier (uuid4)")
    ts: datetime = Field(description="Entry timestamp (ISO8601 UTC)")
    event_type: JournalEventType = Field(description="Mutation type")
    event_ref: str | None = Field(default=None, description="Event or ledger id affected")
    payload: dict = Field(default_factory=dict, description="Mutation-specific data")

    model_config = {"frozen": True}
