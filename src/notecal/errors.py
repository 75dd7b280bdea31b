"""Exception taxonomy for event operations.

Every failure carries a ``kind`` so callers can tell a stale identifier apart
from a missing document, plus a ``details`` dict with whatever was known at
the point of failure (document path, identifier, strategies attempted).
"""

from typing import Any


class EventError(Exception):
    """Base class for all event operation failures."""

    kind = "event_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = {k: v for k, v in details.items() if v is not None}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        extra = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({extra})"


class InvalidIdentifier(EventError):
    """Identifier failed the pattern or length check."""

    kind = "invalid_identifier"


class DocumentNotFound(EventError):
    """Daily note (or the delete ledger) does not exist."""

    kind = "document_not_found"


class RecordNotFound(EventError):
    """No strategy could locate the record, or a span fell outside the document."""

    kind = "record_not_found"


class NotARecordLine(EventError):
    """Target line exists but is not a record-start line."""

    kind = "not_a_record_line"


class UnknownRecordType(EventError):
    """Event type or marker character has no entry in the marker table."""

    kind = "unknown_record_type"


class MoveIncomplete(EventError):
    """Source document was rewritten but the target write did not happen.

    The removed lines are attached as ``details["lines"]`` so they can be
    re-inserted by hand. No automatic compensation is attempted.
    """

    kind = "move_incomplete"
