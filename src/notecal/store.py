"""Document storage for daily notes.

The event layer only talks to a :class:`DocumentStore`; the filesystem
implementation below keeps one markdown file per day inside the vault's daily
notes folder.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from .errors import DocumentNotFound

logger = logging.getLogger(__name__)


class DocumentStore(ABC):
    """Interface the event layer needs from the note-taking host."""

    @abstractmethod
    def read(self, path: Path) -> str:
        """Return the text of a document.

        Raises:
            DocumentNotFound: If the document does not exist.
        """
        pass

    @abstractmethod
    def write(self, path: Path, text: str) -> None:
        """Replace the text of a document."""
        pass

    @abstractmethod
    def resolve_for_date(self, day: date) -> Optional[Path]:
        """Return the daily note for ``day`` or ``None`` if there is none."""
        pass

    @abstractmethod
    def create_for_date(self, day: date) -> Path:
        """Create the daily note for ``day`` and return it."""
        pass

    @abstractmethod
    def list_all(self) -> list[Path]:
        """Every daily note, oldest first."""
        pass

    @abstractmethod
    def date_for(self, path: Path) -> Optional[date]:
        """The day a daily note belongs to, ``None`` if it is not a daily note."""
        pass


class DailyNoteStore(DocumentStore):
    """Daily notes stored as ``<daily_dir>/<strftime(daily_format)>.md``.

    ``daily_format`` may contain ``/`` to nest notes in year/month folders.
    """

    def __init__(self, daily_dir: Path, daily_format: str = "%Y-%m-%d"):
        self.daily_dir = daily_dir
        self.daily_format = daily_format

    def path_for_date(self, day: date) -> Path:
        return self.daily_dir / f"{day.strftime(self.daily_format)}.md"

    def read(self, path: Path) -> str:
        if not path.exists():
            raise DocumentNotFound(f"File not found: {path}", path=str(path))
        return path.read_text(encoding="utf-8")

    def write(self, path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    def resolve_for_date(self, day: date) -> Optional[Path]:
        path = self.path_for_date(day)
        return path if path.exists() else None

    def create_for_date(self, day: date) -> Path:
        path = self.path_for_date(day)
        if path.exists():
            return path
        # New daily note with minimal header
        self.write(path, f"# {day.strftime('%Y-%m-%d')}\n")
        logger.info(f"Created daily note {path}")
        return path

    def date_for(self, path: Path) -> Optional[date]:
        try:
            relative = path.relative_to(self.daily_dir).with_suffix("")
        except ValueError:
            return None
        try:
            return datetime.strptime(relative.as_posix(), self.daily_format).date()
        except ValueError:
            return None

    def list_all(self) -> list[Path]:
        if not self.daily_dir.exists():
            return []
        notes: list[tuple[date, Path]] = []
        for path in self.daily_dir.rglob("*.md"):
            day = self.date_for(path)
            if day is not None:
                notes.append((day, path))
        return [path for _, path in sorted(notes)]
