"""Rebuild read-only event views from daily-note lines."""

import logging
import re
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Optional

from .errors import UnknownRecordType
from .formatter import DUE_EMOJI, START_EMOJI, TIMER_EMOJI, clean_content, event_type_for_marker, split_annotation
from .identifiers import encode_event_id
from .lines import find_record_boundaries, is_record_start, record_body, record_marker, strip_indent, trim_trailing_blank
from .models.event import Event

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?:-(\d{1,2}):(\d{2}))?")
_TIMER_RE = re.compile(TIMER_EMOJI + r"\s?(\d{1,2}):(\d{2})")
_START_DATE_RE = re.compile(START_EMOJI + r"\s?(\d{4}-\d{2}-\d{2})")
_DUE_DATE_RE = re.compile(DUE_EMOJI + r"\s?(\d{4}-\d{2}-\d{2})")


def extract_event_time(line: str) -> Optional[tuple[int, int]]:
    """Return the leading ``(hour, minute)`` of a record line, if it has one."""
    match = _TIME_RE.match(record_body(line).strip())
    if match is None:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour, minute


def _parse_day(value: str) -> Optional[date]:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def _notes_for_span(lines: list[str], start: int, end: int) -> Optional[str]:
    end = trim_trailing_blank(lines, start, end)
    if end == start:
        return None
    return "\n".join(strip_indent(line) for line in lines[start + 1 : end + 1])


def parse_event_line(
    lines: list[str],
    index: int,
    ordinal: int,
    document_date: date,
    path: Optional[Path] = None,
) -> Event:
    """Build the event view for the record-start line at ``index``.

    Raises:
        UnknownRecordType: If the line carries a marker outside the marker table.
    """
    line = lines[index]
    event_type = event_type_for_marker(record_marker(line))
    body = record_body(line).strip()

    start_day = document_date
    match = _START_DATE_RE.search(body)
    if match:
        start_day = _parse_day(match.group(1)) or document_date
    end_day = start_day
    match = _DUE_DATE_RE.search(body)
    if match:
        end_day = _parse_day(match.group(1)) or start_day

    start_end: Optional[tuple[int, int]] = None
    match = _TIME_RE.match(body)
    if match and match.group(3):
        start_end = (int(match.group(3)), int(match.group(4)))
    else:
        timer = _TIMER_RE.search(body)
        if timer:
            start_end = (int(timer.group(1)), int(timer.group(2)))

    start_time = extract_event_time(line)
    all_day = start_time is None
    if all_day:
        start = datetime.combine(start_day, time())
        end = datetime.combine(end_day, time())
    else:
        start = datetime.combine(start_day, time(*start_time))
        if start_end is not None and start_end[0] <= 23 and start_end[1] <= 59:
            end = datetime.combine(end_day, time(*start_end))
        else:
            end = start + timedelta(hours=1)
        if end < start:
            end = start

    title, annotation = split_annotation(clean_content(body))
    _, span_end = find_record_boundaries(lines, index)

    return Event(
        id=encode_event_id(start, ordinal),
        title=title,
        start=start,
        end=end,
        all_day=all_day,
        event_type=event_type,
        notes=_notes_for_span(lines, index, span_end),
        annotation=annotation,
        path=path,
        line=index,
    )


def parse_document(lines: list[str], document_date: date, path: Optional[Path] = None) -> list[Event]:
    """Return one event per record-start line, in document order.

    Record lines with an unknown task marker still count towards the ordinal
    but are skipped with a warning.
    """
    events: list[Event] = []
    ordinal = 0
    for index, line in enumerate(lines):
        if not is_record_start(line):
            continue
        try:
            events.append(parse_event_line(lines, index, ordinal, document_date, path))
        except UnknownRecordType as e:
            logger.warning(f"Skipping record line {index} in {path}: {e}")
        ordinal += 1
    return events
