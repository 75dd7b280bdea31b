"""Structural edits on a document's line list.

All functions return new lists and leave their input untouched. Span checks
happen before anything is spliced so an out-of-range request never removes
unrelated lines.
"""

from typing import Optional, Union

from .errors import RecordNotFound
from .lines import find_record_boundaries, is_heading, is_record_like, split_lines, trim_trailing_blank
from .models.event import EventType


def _check_span(lines: list[str], start: int, end: int) -> None:
    if start < 0 or end < start or end >= len(lines):
        raise RecordNotFound(
            "Line span is outside the document",
            start=start,
            end=end,
            line_count=len(lines),
        )


def replace_span(lines: list[str], start: int, end: int, new_lines: list[str]) -> list[str]:
    """Replace lines ``start..end`` (inclusive) with ``new_lines``."""
    _check_span(lines, start, end)
    return lines[:start] + list(new_lines) + lines[end + 1 :]


def delete_span(lines: list[str], start: int, end: int) -> tuple[list[str], list[str]]:
    """Remove lines ``start..end`` (inclusive).

    Returns:
        Tuple of (remaining lines, removed lines)
    """
    _check_span(lines, start, end)
    return lines[:start] + lines[end + 1 :], lines[start : end + 1]


def insert_at(lines: list[str], position: int, text: Union[str, list[str]]) -> list[str]:
    """Insert a record (and its note lines) before ``position``."""
    new_lines = split_lines(text) if isinstance(text, str) else list(text)
    position = max(0, min(position, len(lines)))
    return lines[:position] + new_lines + lines[position:]


def find_insert_position(
    lines: list[str],
    event_type: Union[EventType, str] = EventType.DEFAULT,
    insert_after: Optional[str] = None,
    process_entries_below: Optional[str] = None,
) -> int:
    """Pick the index a new record should be inserted at.

    Order of preference:

    1. todo/default records: right after the last record-like entry, past its
       note lines, so new entries cluster with existing ones
    2. the first non-blank line after the ``insert_after`` anchor
    3. the line after the ``process_entries_below`` marker
    4. 0 for an empty document
    5. the line after the first section heading
    6. the end of the document
    """
    if event_type in (EventType.TODO, EventType.DEFAULT, EventType.TODO.value, EventType.DEFAULT.value):
        last_record = -1
        for index, line in enumerate(lines):
            if is_record_like(line):
                last_record = index
        if last_record >= 0:
            start, end = find_record_boundaries(lines, last_record)
            return trim_trailing_blank(lines, start, end) + 1

    if insert_after and insert_after.strip():
        for index, line in enumerate(lines):
            if insert_after in line:
                position = index + 1
                while position < len(lines) and lines[position].strip() == "":
                    position += 1
                return position

    if process_entries_below and process_entries_below.strip():
        for index, line in enumerate(lines):
            if process_entries_below in line:
                return index + 1

    if not lines:
        return 0

    for index, line in enumerate(lines):
        if is_heading(line):
            return index + 1

    return len(lines)
