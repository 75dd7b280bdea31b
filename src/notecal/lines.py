"""Line classification and record boundary detection for daily notes.

A daily note is handled as a list of lines. A record starts at a line matching
``- `` (optionally followed by a one-character task marker such as ``[ ]``)
and owns every following line up to the next record-start line or section
heading. Blank lines inside that range belong to the record.
"""

import re
from enum import Enum
from typing import Optional

from .errors import RecordNotFound

RECORD_START_RE = re.compile(r"^- (?:\[(?P<marker>.)\] )?")
HEADING_RE = re.compile(r"^#+ ")
INDENT_UNITS = ("\t", "    ")

_LEADING_TIME_RE = re.compile(r"^- (?:\[.\] )?\d{1,2}:\d{2}")
_TASK_MARKERS = ("- [ ]", "- [x]", "- [-]")


class LineKind(str, Enum):
    """Closed classification of a single document line."""

    RECORD = "record"
    CONTINUATION = "continuation"
    HEADING = "heading"
    BLANK = "blank"
    OTHER = "other"


def split_lines(text: str) -> list[str]:
    """Split document text into lines.

    Trailing newlines produce a trailing empty line so that joining the result
    with ``"\\n"`` reproduces the input exactly.
    """
    if text == "":
        return []
    return re.split(r"\r?\n", text)


def join_lines(lines: list[str]) -> str:
    return "\n".join(lines)


def is_record_start(line: str) -> bool:
    return RECORD_START_RE.match(line) is not None


def is_heading(line: str) -> bool:
    return HEADING_RE.match(line) is not None


def is_continuation(line: str) -> bool:
    return line.startswith(INDENT_UNITS)


def classify_line(line: str) -> LineKind:
    """Classify a line. Checks run in a fixed order; the first match wins."""
    if is_record_start(line):
        return LineKind.RECORD
    if is_heading(line):
        return LineKind.HEADING
    if is_continuation(line):
        return LineKind.CONTINUATION
    if line.strip() == "":
        return LineKind.BLANK
    return LineKind.OTHER


def record_marker(line: str) -> Optional[str]:
    """Return the task marker character of a record-start line, if any."""
    match = RECORD_START_RE.match(line)
    if match is None:
        return None
    return match.group("marker")


def record_body(line: str) -> str:
    """Return a record-start line with the list prefix and marker removed."""
    match = RECORD_START_RE.match(line)
    if match is None:
        return line
    return line[match.end():]


def find_record_boundaries(lines: list[str], start_index: int) -> tuple[int, int]:
    """Compute the inclusive line span of the record starting at ``start_index``.

    The span runs through every following line that is neither a record-start
    line nor a section heading. When no such stop line exists the span runs to
    the end of the document.

    Raises:
        RecordNotFound: If ``start_index`` is out of range or does not point at
            a record-start line.
    """
    if start_index < 0 or start_index >= len(lines):
        raise RecordNotFound(
            "Record start index is outside the document",
            line=start_index,
            line_count=len(lines),
        )
    if not is_record_start(lines[start_index]):
        raise RecordNotFound(
            "Record start index does not point at a record line",
            line=start_index,
            text=lines[start_index],
        )

    end = len(lines) - 1
    for index in range(start_index + 1, len(lines)):
        if is_record_start(lines[index]) or is_heading(lines[index]):
            end = index - 1
            break
    return start_index, end


def trim_trailing_blank(lines: list[str], start: int, end: int) -> int:
    """Return ``end`` moved back past blank lines, never before ``start``."""
    while end > start and lines[end].strip() == "":
        end -= 1
    return end


def strip_indent(line: str) -> str:
    """Remove exactly one indentation unit from a continuation line."""
    for unit in INDENT_UNITS:
        if line.startswith(unit):
            return line[len(unit):]
    return line


def is_record_like(line: str) -> bool:
    """Whether a line looks like an existing calendar entry.

    Used to cluster new entries next to existing ones: timed entries, task
    entries and entries carrying a start or due date all count.
    """
    if not is_record_start(line):
        return False
    if _LEADING_TIME_RE.match(line):
        return True
    if line.startswith(_TASK_MARKERS):
        return True
    return " 📅 " in line or " 🛫 " in line
