"""Plain data records shared by the core, connectors and storage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Verse:
    """A single verse as supplied by a connector.

    ``text`` may be ``None`` when the source has a numbered but empty
    verse.  Verses are immutable once loaded; the core only reads them.
    """

    chapter_number: int
    verse_number: int
    text: Optional[str] = None

    @property
    def is_recitable(self) -> bool:
        return bool(self.text and self.text.strip())

    @property
    def label(self) -> str:
        """Short ``chapter:verse`` label used in status messages."""
        return f"{self.chapter_number}:{self.verse_number}"


@dataclass(frozen=True, order=True)
class RevealedVerseIdentifier:
    """Identifies a verse the user has completed at least once."""

    book_name: str
    chapter_number: int
    verse_number: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bookName": self.book_name,
            "chapterNumber": self.chapter_number,
            "verseNumber": self.verse_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RevealedVerseIdentifier":
        return cls(
            book_name=str(data["bookName"]),
            chapter_number=int(data["chapterNumber"]),
            verse_number=int(data["verseNumber"]),
        )


__all__ = ["Verse", "RevealedVerseIdentifier"]
