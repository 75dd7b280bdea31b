"""Locate a record inside a daily note.

Identifiers carry a positional ordinal that goes stale as soon as anything
above the record changes, so resolution tries content-based strategies first:

1. title  - first record line containing the hinted title
2. time   - first record line containing the ``HH:MM`` encoded in the id
3. ordinal - the n-th record line, n taken from the id

Every strategy returns a candidate index or ``None``; the first candidate wins.
Callers get a :class:`Found` or a :class:`NotFound` listing what was tried.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Union

from .errors import RecordNotFound
from .formatter import as_event_type, event_type_for_marker, marker_for
from .identifiers import EventId, decode_event_id
from .lines import is_record_start, record_marker
from .models.event import EventType
from .parser import extract_event_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Found:
    line: int
    strategy: str


@dataclass(frozen=True)
class NotFound:
    attempted: list[str] = field(default_factory=list)


Resolution = Union[Found, NotFound]
Strategy = Callable[[list[str], EventId, Optional[str], Optional[EventType]], Optional[int]]


def by_title(
    lines: list[str], event_id: EventId, title: Optional[str], event_type: Optional[EventType]
) -> Optional[int]:
    if not title:
        return None
    for index, line in enumerate(lines):
        if is_record_start(line) and title in line:
            return index
    return None


def by_time(
    lines: list[str], event_id: EventId, title: Optional[str], event_type: Optional[EventType]
) -> Optional[int]:
    pattern = event_id.time_label
    for index, line in enumerate(lines):
        if is_record_start(line) and pattern in line:
            return index
    return None


def by_ordinal(
    lines: list[str], event_id: EventId, title: Optional[str], event_type: Optional[EventType]
) -> Optional[int]:
    if event_id.ordinal is None:
        return None
    count = 0
    for index, line in enumerate(lines):
        if is_record_start(line):
            if count == event_id.ordinal:
                return index
            count += 1
    return None


STRATEGIES: list[tuple[str, Strategy]] = [
    ("title", by_title),
    ("time", by_time),
    ("ordinal", by_ordinal),
]


def resolve(
    lines: list[str],
    identifier: str,
    title: Optional[str] = None,
    event_type: Optional[Union[EventType, str]] = None,
    strategies: Optional[list[tuple[str, Strategy]]] = None,
) -> Resolution:
    """Find the current line index of the record named by ``identifier``.

    Raises:
        InvalidIdentifier: If the identifier cannot be decoded.
    """
    event_id = decode_event_id(identifier)
    hinted_type = as_event_type(event_type) if event_type is not None else None
    attempted: list[str] = []

    for name, strategy in STRATEGIES if strategies is None else strategies:
        attempted.append(name)
        candidate = strategy(lines, event_id, title, hinted_type)
        if candidate is None:
            logger.debug(f"Strategy {name} found nothing for {identifier}")
            continue
        if not is_record_start(lines[candidate]):
            logger.debug(f"Strategy {name} returned non-record line {candidate}; skipping")
            continue
        logger.debug(f"Strategy {name} resolved {identifier} to line {candidate}")
        return Found(line=candidate, strategy=name)

    return NotFound(attempted=attempted)


def require(resolution: Resolution, **details) -> Found:
    """Unwrap a resolution or raise :class:`RecordNotFound`."""
    if isinstance(resolution, Found):
        return resolution
    raise RecordNotFound(
        "Could not find target event line",
        attempted=",".join(resolution.attempted),
        **details,
    )


def find_event_line(
    lines: list[str],
    identifier: str,
    original_content: str,
    event_type: Union[EventType, str] = EventType.DEFAULT,
    original_start: Optional[datetime] = None,
) -> Resolution:
    """Resolver used by edit flows.

    Matches record lines containing ``original_content`` and checks that the
    marker or time agrees with what the caller believes the record to be.
    Falls back to any record line containing the content, then to a scan of
    timed record lines whose time matches the identifier. Continuation lines
    are never returned.
    """
    event_id = decode_event_id(identifier)
    resolved_type = as_event_type(event_type)
    mark = marker_for(resolved_type)
    start = original_start or event_id.created
    content = original_content.strip()
    attempted = ["content"]

    if content:
        for index, line in enumerate(lines):
            if not is_record_start(line) or content not in line:
                continue
            if resolved_type.is_task and record_marker(line) is not None:
                return Found(line=index, strategy="content")
            timed = extract_event_time(line)
            if timed is not None:
                hour, minute = timed
                if start.replace(hour=hour, minute=minute).strftime("%Y%m%d%H%M") == event_id.minute_key:
                    return Found(line=index, strategy="content")
            elif (
                line.strip() == f"- {content}"
                or f"- {content} 📅" in line
                or f"- {content} 🛫" in line
                or (mark is not None and f"- [{mark}] {content}" in line)
            ):
                return Found(line=index, strategy="content")

        attempted.append("loose-content")
        for index, line in enumerate(lines):
            if is_record_start(line) and content in line:
                return Found(line=index, strategy="loose-content")

    attempted.append("time")
    for index, line in enumerate(lines):
        if not is_record_start(line):
            continue
        timed = extract_event_time(line)
        if timed is None:
            continue
        hour, minute = timed
        if start.replace(hour=hour, minute=minute).strftime("%Y%m%d%H%M") == event_id.minute_key:
            return Found(line=index, strategy="time")

    return NotFound(attempted=attempted)


def event_type_at(lines: list[str], index: int) -> EventType:
    """Event type of the record-start line at ``index``."""
    return event_type_for_marker(record_marker(lines[index]))
