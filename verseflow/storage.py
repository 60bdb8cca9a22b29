"""Durable storage for revealed verse identifiers.

The flow engine treats storage as a load/save port: it loads the full
set once at construction (and again when told to reload) and pushes the
full set back after every newly completed verse.

:class:`JsonRevealedVerseStore` keeps the set in a small JSON file as a
list of ``{"bookName", "chapterNumber", "verseNumber"}`` objects.
"""

from __future__ import annotations

import abc
import json
import logging
import os
from pathlib import Path
from typing import Iterable, Set

from .core.errors import PersistenceError
from .core.models import RevealedVerseIdentifier

logger = logging.getLogger(__name__)


class RevealedVerseStore(abc.ABC):
    """Load/save port for the set of revealed verses."""

    @abc.abstractmethod
    def load(self) -> Set[RevealedVerseIdentifier]:
        """Return the persisted set (empty if nothing was stored)."""

    @abc.abstractmethod
    def save(self, identifiers: Iterable[RevealedVerseIdentifier]) -> None:
        """Replace the persisted set; raise :class:`PersistenceError` on failure."""

    def clear(self) -> None:
        """Forget every revealed verse."""
        self.save(set())


class JsonRevealedVerseStore(RevealedVerseStore):
    """Store the revealed set in a JSON file.

    :param path: File location; ``~`` is expanded and parent
        directories are created on first save.
    """

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path).expanduser()

    def load(self) -> Set[RevealedVerseIdentifier]:
        if not self.path.is_file():
            return set()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                payload = json.load(f)
            return {RevealedVerseIdentifier.from_dict(item) for item in payload}
        except (OSError, ValueError, KeyError, TypeError):
            # An unreadable file (e.g. from an older format) loads as empty.
            logger.warning("Could not load revealed verses from %s", self.path, exc_info=True)
            return set()

    def save(self, identifiers: Iterable[RevealedVerseIdentifier]) -> None:
        payload = [ident.to_dict() for ident in sorted(identifiers)]
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise PersistenceError(f"Could not save revealed verses to {self.path}: {exc}") from exc
        logger.debug("Saved %d revealed verses to %s", len(payload), self.path)


__all__ = ["JsonRevealedVerseStore", "RevealedVerseStore"]
