"""Render events back into canonical daily-note lines.

Canonical forms:

- same day:   ``- [m] HH:MM-HH:MM <content> ^anchor``
- multi day:  ``- [m] <content> 🛫 YYYY-MM-DD 📅 YYYY-MM-DD ^anchor``
- untimed:    ``- [m] <content> [🛫 YYYY-MM-DD] 📅 YYYY-MM-DD ^anchor``

followed by one tab-indented line per note line. The ``[m]`` marker is only
present for task types.
"""

import re
from datetime import datetime
from typing import Optional, Union

from .errors import UnknownRecordType
from .lines import RECORD_START_RE, record_body
from .models.event import EventType

START_EMOJI = "🛫"
DUE_EMOJI = "📅"
TIMER_EMOJI = "⏲"
NOTE_INDENT = "\t"

MARKERS: dict[EventType, Optional[str]] = {
    EventType.DEFAULT: None,
    EventType.TODO: " ",
    EventType.DONE: "x",
    EventType.IN_PROGRESS: "/",
    EventType.IMPORTANT: "!",
    EventType.CANCELLED: "-",
}

_MARKER_TYPES: dict[str, EventType] = {
    marker: event_type for event_type, marker in MARKERS.items() if marker is not None
}
_MARKER_TYPES["X"] = EventType.DONE

_ANNOTATION_RE = re.compile(r"\s(\^[a-zA-Z0-9]{2,})$")
_LEADING_TIME_RE = re.compile(r"^\d{1,2}:\d{2}(-\d{1,2}:\d{2})?\s+")
_TIMER_RE = re.compile(r"\s*" + TIMER_EMOJI + r"\s?\d{1,2}:\d{2}")
_DUE_RE = re.compile(r"\s*" + DUE_EMOJI + r"\s?\d{4}-\d{2}-\d{2}")
_START_RE = re.compile(r"\s*" + START_EMOJI + r"\s?\d{4}-\d{2}-\d{2}")
_TIME_RANGE_RE = re.compile(r"\s*\d{1,2}:\d{2}-\d{1,2}:\d{2}")
_HAS_TIME_RE = re.compile(r"^\d{1,2}:\d{2}")


def as_event_type(value: Union[EventType, str]) -> EventType:
    if isinstance(value, EventType):
        return value
    try:
        return EventType(value)
    except ValueError:
        raise UnknownRecordType(f"Unknown event type: {value!r}", event_type=value)


def marker_for(event_type: Union[EventType, str]) -> Optional[str]:
    """Marker character for an event type, ``None`` for default records."""
    resolved = as_event_type(event_type)
    if resolved not in MARKERS:
        raise UnknownRecordType(f"No marker for event type: {resolved.value}", event_type=resolved.value)
    return MARKERS[resolved]


def event_type_for_marker(marker: Optional[str]) -> EventType:
    if marker is None:
        return EventType.DEFAULT
    if marker not in _MARKER_TYPES:
        raise UnknownRecordType(f"Unknown task marker: [{marker}]", marker=marker)
    return _MARKER_TYPES[marker]


def has_leading_time(content: str) -> bool:
    return _HAS_TIME_RE.match(content.strip()) is not None


def split_annotation(content: str) -> tuple[str, Optional[str]]:
    """Detach a trailing ``^anchor`` token from content."""
    match = _ANNOTATION_RE.search(content)
    if match is None:
        return content, None
    return content[: match.start()].rstrip(), match.group(1)


def clean_content(content: str) -> str:
    """Remove time and date tokens so formatting can re-derive them."""
    cleaned = _LEADING_TIME_RE.sub("", content.strip()).strip()
    cleaned = _TIMER_RE.sub("", cleaned).strip()
    cleaned = _DUE_RE.sub("", cleaned).strip()
    cleaned = _START_RE.sub("", cleaned).strip()
    cleaned = _TIME_RANGE_RE.sub("", cleaned).strip()
    return cleaned


def strip_line(line: str) -> str:
    """Reduce a rendered record line to the content it was rendered from."""
    first = line.split("\n", 1)[0]
    if RECORD_START_RE.match(first):
        first = record_body(first)
    return clean_content(first)


def clean_event(original_content: str, content: str) -> str:
    """Clean new content, falling back to the original when nothing is left."""
    cleaned = clean_content(content)
    if cleaned == "" and original_content:
        cleaned = clean_content(original_content)
    return cleaned


def render_notes(notes: Optional[str]) -> list[str]:
    """Turn a notes block into continuation lines.

    Leading and trailing blank lines are dropped. Interior blank lines stay as
    empty lines so the notes keep their paragraphs.
    """
    if not notes or not notes.strip():
        return []
    note_lines = notes.replace("\r\n", "\n").split("\n")
    while note_lines and not note_lines[0].strip():
        note_lines.pop(0)
    while note_lines and not note_lines[-1].strip():
        note_lines.pop()
    return [NOTE_INDENT + line if line.strip() else "" for line in note_lines]


def _prefix(event_type: Union[EventType, str]) -> str:
    mark = marker_for(event_type)
    return "- " if mark is None else f"- [{mark}] "


def _assemble(head: str, parts: list[str], annotation: Optional[str], notes: Optional[str]) -> str:
    if annotation:
        parts = parts + [annotation]
    line = head + " ".join(p for p in parts if p)
    return "\n".join([line.rstrip()] + render_notes(notes))


def format_event_line(
    content: str,
    start: datetime,
    end: datetime,
    event_type: Union[EventType, str] = EventType.DEFAULT,
    notes: Optional[str] = None,
) -> str:
    """Format a timed record (plus notes) into canonical text."""
    head = _prefix(event_type)
    body, annotation = split_annotation(clean_content(content))

    if start.date() == end.date():
        parts = [f"{start:%H:%M}-{end:%H:%M}", body]
    else:
        parts = [body, START_EMOJI, f"{start:%Y-%m-%d}", DUE_EMOJI, f"{end:%Y-%m-%d}"]
    return _assemble(head, parts, annotation, notes)


def format_all_day_line(
    content: str,
    original_start: datetime,
    start: datetime,
    end: datetime,
    event_type: Union[EventType, str] = EventType.DEFAULT,
    notes: Optional[str] = None,
) -> str:
    """Format a record that carries no time of day.

    The start date is written only when it moved away from ``original_start``
    or the record spans several days. The due date is always written.
    """
    head = _prefix(event_type)
    body, annotation = split_annotation(clean_content(content))

    parts = [body]
    if start.date() != end.date() or start.date() != original_start.date():
        parts += [START_EMOJI, f"{start:%Y-%m-%d}"]
    parts += [DUE_EMOJI, f"{end:%Y-%m-%d}"]
    return _assemble(head, parts, annotation, notes)


def set_marker(line: str, event_type: Union[EventType, str]) -> str:
    """Rewrite only the list prefix and marker of a record-start line."""
    if not RECORD_START_RE.match(line):
        return line
    return _prefix(event_type) + record_body(line)
