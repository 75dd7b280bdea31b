"""Event and ledger identifiers.

Both identifier kinds are a fixed-width 14-digit timestamp (``YYYYMMDDHHmmSS``)
followed directly by a decimal suffix:

- event ids: ``<created YYYYMMDDHHmm>00<ordinal>``, where the ordinal is the
  0-based position of the record among record-start lines when it was created;
- ledger ids: ``<created YYYYMMDDHHmmSS><line number>``, where the line number
  is the 1-based position of the entry inside the delete ledger.

The suffix is only a positional hint. It is never renumbered after other edits.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from .errors import InvalidIdentifier

TIMESTAMP_WIDTH = 14
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

_ID_RE = re.compile(r"^\d{14,}$")


@dataclass(frozen=True)
class EventId:
    created: datetime
    ordinal: Optional[int]

    @property
    def day(self) -> date:
        return self.created.date()

    @property
    def time_label(self) -> str:
        """``HH:MM`` as it would appear in a timed record line."""
        return self.created.strftime("%H:%M")

    @property
    def minute_key(self) -> str:
        """``YYYYMMDDHHmm`` prefix used to compare against record times."""
        return self.created.strftime("%Y%m%d%H%M")

    def __str__(self) -> str:
        return encode_event_id(self.created, self.ordinal or 0)


@dataclass(frozen=True)
class LedgerId:
    created: datetime
    line_number: int

    def __str__(self) -> str:
        return encode_ledger_id(self.created, self.line_number)


def _split(identifier: str) -> tuple[datetime, str]:
    if not isinstance(identifier, str) or not _ID_RE.match(identifier):
        raise InvalidIdentifier(
            "Identifier must be at least 14 digits", identifier=identifier
        )
    stamp, suffix = identifier[:TIMESTAMP_WIDTH], identifier[TIMESTAMP_WIDTH:]
    try:
        created = datetime.strptime(stamp, TIMESTAMP_FORMAT)
    except ValueError:
        raise InvalidIdentifier(
            "Identifier timestamp is not a valid date", identifier=identifier
        )
    return created, suffix


def encode_event_id(created: datetime, ordinal: int) -> str:
    if ordinal < 0:
        raise ValueError("ordinal must be >= 0")
    return created.strftime("%Y%m%d%H%M") + "00" + str(ordinal)


def decode_event_id(identifier: str) -> EventId:
    """Decode an event id. A bare 14-digit id decodes with ``ordinal=None``."""
    created, suffix = _split(identifier)
    return EventId(created=created.replace(second=0), ordinal=int(suffix) if suffix else None)


def encode_ledger_id(created: datetime, line_number: int) -> str:
    if line_number < 1:
        raise ValueError("line_number is 1-based")
    return created.strftime(TIMESTAMP_FORMAT) + str(line_number)


def decode_ledger_id(identifier: str) -> LedgerId:
    created, suffix = _split(identifier)
    if not suffix or int(suffix) < 1:
        raise InvalidIdentifier(
            "Ledger id is missing its line number", identifier=identifier
        )
    return LedgerId(created=created, line_number=int(suffix))
