"""Connector for retrieving verses from a bible-api.com style HTTP API.

The API serves one chapter per request::

    GET {base_url}/{book}+{chapter}?translation=kjv

    {
        "reference": "John 3",
        "verses": [
            {"book_name": "John", "chapter": 3, "verse": 1, "text": "There was a man ..."},
            ...
        ],
        ...
    }

There is no endpoint listing the chapters of a book, so
:meth:`BibleApiConnector.get_verses` requests chapter 1, 2, 3 ... until
the API answers 404.  Any other non-200 status raises a
:class:`ConnectionError`, as do network failures.

If internet access is not available every method raises
:class:`ConnectionError`; use :class:`~verseflow.connectors.local_bible.LocalBibleConnector`
for offline work.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from ..core.models import Verse
from ..utils.refs import BOOK_NAMES
from .base import BaseConnector

logger = logging.getLogger(__name__)

#: Upper bound on chapters requested per book (Psalms has 150).
MAX_CHAPTERS = 150


class BibleApiConnector(BaseConnector):
    """Fetch Bible text over HTTP.

    :param base_url: Base URL of the API.
    :param translation: Translation identifier understood by the API.
    :param timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str = "https://bible-api.com",
        translation: str = "kjv",
        timeout: float = 30,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.translation = translation.lower()
        self.timeout = timeout
        self.session = requests.Session()
        self._cache: Dict[str, List[Verse]] = {}

    # ------------------------------------------------------------------ #
    # Low-level request helper
    # ------------------------------------------------------------------ #
    def _request(self, path: str) -> Optional[Dict[str, Any]]:
        """Send a GET request and return JSON, or ``None`` on 404.

        :raises ConnectionError: If the API returns any other non-200 status
            or a body that is not JSON.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self.session.get(
                url,
                params={"translation": self.translation},
                headers={"User-Agent": "VerseFlow/0.1"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ConnectionError(f"Request to {url} failed: {exc}") from exc
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise ConnectionError(
                f"Bible API responded with status {resp.status_code} for {url}"
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise ConnectionError(f"Bible API returned invalid JSON for {url}: {exc}") from exc

    def _fetch_chapter(self, book_name: str, chapter: int) -> Optional[List[Verse]]:
        data = self._request(f"{book_name.replace(' ', '+')}+{chapter}")
        if data is None:
            return None
        verses: List[Verse] = []
        for item in data.get("verses") or []:
            try:
                number = int(item["verse"])
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed verse entry in %s %d: %r", book_name, chapter, item)
                continue
            text = item.get("text")
            verses.append(Verse(chapter, number, text.strip() if isinstance(text, str) else None))
        return verses

    # ------------------------------------------------------------------ #
    # BaseConnector interface
    # ------------------------------------------------------------------ #
    def list_books(self) -> List[str]:
        return list(BOOK_NAMES)

    def get_chapter(self, book_name: str, chapter: int) -> List[Verse]:
        if book_name in self._cache:
            return super().get_chapter(book_name, chapter)
        verses = self._fetch_chapter(book_name, chapter)
        if not verses:
            raise LookupError(f"Chapter {chapter} not found in {book_name!r}")
        return verses

    def get_verses(self, book_name: str) -> List[Verse]:
        if book_name in self._cache:
            return list(self._cache[book_name])
        verses: List[Verse] = []
        for chapter in range(1, MAX_CHAPTERS + 1):
            chapter_verses = self._fetch_chapter(book_name, chapter)
            if chapter_verses is None:
                break
            verses.extend(chapter_verses)
        if not verses:
            raise LookupError(f"Book not found: {book_name!r}")
        logger.info("Fetched %s from %s: %d verses", book_name, self.base_url, len(verses))
        self._cache[book_name] = verses
        return list(verses)


__all__ = ["BibleApiConnector"]
