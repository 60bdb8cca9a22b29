"""Base interface for connectors.

Connectors encapsulate the logic for retrieving Bible text.  Subclasses
must implement :meth:`list_books` and :meth:`get_verses`; the chapter
helpers are derived from the full verse list but may be overridden
when a source can fetch a single chapter more cheaply.

Missing books or chapters raise :class:`LookupError`.
"""

from __future__ import annotations

from typing import List

from ..core.models import Verse


class BaseConnector:
    """Abstract base class for all connectors."""

    def list_books(self) -> List[str]:
        """Return the names of all books this source offers, in canonical order."""
        raise NotImplementedError

    def get_verses(self, book_name: str) -> List[Verse]:
        """Return every verse of *book_name* in chapter/verse order."""
        raise NotImplementedError

    def get_chapter(self, book_name: str, chapter: int) -> List[Verse]:
        """Return the verses of one chapter.

        The default implementation filters :meth:`get_verses`.
        """
        verses = [v for v in self.get_verses(book_name) if v.chapter_number == chapter]
        if not verses:
            raise LookupError(f"Chapter {chapter} not found in {book_name!r}")
        return verses

    def available_chapters(self, book_name: str) -> List[int]:
        """Return the sorted chapter numbers present in *book_name*."""
        return sorted({v.chapter_number for v in self.get_verses(book_name)})
