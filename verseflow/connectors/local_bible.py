"""LocalBibleConnector: offline Bible reader.

Reads a whole translation from a single JSON file in ``bible_dir``
named after the version (``KJV.json``, ``WEB.json``).  The file maps
book names to chapters to verses::

    {
        "Genesis": {
            "1": {"1": "In the beginning God created the heaven and the earth.", ...},
            ...
        },
        ...
    }

Books keep the order of the file; chapter and verse keys are sorted
numerically.  Keys that are not integers are skipped with a warning.
A verse whose text is empty or ``null`` is kept (the engine skips it
when reciting).

Usage (from config_default_settings.json)::

    {
        "connector": {
            "type": "local",
            "bible_dir": "bible_data",
            "version": "KJV"
        }
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..core.errors import DataError
from ..core.models import Verse
from ..utils.paths import find_data_dir
from .base import BaseConnector

logger = logging.getLogger(__name__)

#: Translations published in this layout.
SUPPORTED_VERSIONS = ("KJV", "WEB")
DEFAULT_BIBLE_DIR = "bible_data"


def _numbered(mapping: Dict[str, Any], what: str) -> List[Tuple[int, Any]]:
    """Return ``(number, value)`` pairs sorted by the numeric key."""
    items: List[Tuple[int, Any]] = []
    for key, value in mapping.items():
        try:
            items.append((int(key), value))
        except (TypeError, ValueError):
            logger.warning("Skipping non-numeric %s key %r", what, key)
    return sorted(items, key=lambda item: item[0])


class LocalBibleConnector(BaseConnector):
    """Connector that reads ``<bible_dir>/<version>.json``.

    :param bible_dir: Directory holding the version files.  A relative
        path is looked up in the working directory, then the repository
        root and the package directory.
    :param version: Translation name, e.g. ``"KJV"``.
    """

    def __init__(self, bible_dir: Optional[str] = None, version: str = "KJV") -> None:
        self._dir = find_data_dir(str(Path(bible_dir or DEFAULT_BIBLE_DIR).expanduser()))
        self.version = version.upper()
        if self.version not in SUPPORTED_VERSIONS:
            logger.warning("Version %s is not one of %s", self.version, SUPPORTED_VERSIONS)
        self._data: Optional[Dict[str, Dict[str, Dict[str, Optional[str]]]]] = None
        self._cache: Dict[str, List[Verse]] = {}

    @property
    def path(self) -> Path:
        return self._dir / f"{self.version}.json"

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load(self) -> Dict[str, Dict[str, Dict[str, Optional[str]]]]:
        if self._data is not None:
            return self._data
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError as exc:
            raise DataError(f"Bible file not found: {self.path}") from exc
        except (OSError, ValueError) as exc:
            raise DataError(f"Could not read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise DataError(f"{self.path} is not a book mapping")
        logger.info("Loaded %d books from %s", len(data), self.path)
        self._data = data
        return data

    def reload(self) -> None:
        """Drop cached data so the next call re-reads the file."""
        self._data = None
        self._cache.clear()

    # ------------------------------------------------------------------
    # BaseConnector interface
    # ------------------------------------------------------------------

    def list_books(self) -> List[str]:
        return list(self._load().keys())

    def get_verses(self, book_name: str) -> List[Verse]:
        if book_name in self._cache:
            return list(self._cache[book_name])
        chapters = self._load().get(book_name)
        if chapters is None:
            raise LookupError(f"Book not found: {book_name!r}")
        if not isinstance(chapters, dict):
            raise DataError(f"Malformed chapter data for {book_name!r}")

        verses: List[Verse] = []
        for chapter, chapter_data in _numbered(chapters, "chapter"):
            if not isinstance(chapter_data, dict):
                raise DataError(f"Malformed verse data for {book_name} {chapter}")
            for number, text in _numbered(chapter_data, "verse"):
                verses.append(Verse(chapter, number, text if text is None else str(text)))
        self._cache[book_name] = verses
        logger.debug("%s: %d verses", book_name, len(verses))
        return list(verses)


__all__ = ["LocalBibleConnector", "SUPPORTED_VERSIONS"]
