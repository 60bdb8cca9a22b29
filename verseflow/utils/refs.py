"""Reference helpers.

Book names follow the Protestant canon as used by the KJV and WEB
JSON files.  ``parse_reference`` accepts references such as
``"John 3"``, ``"John 3:16"``, ``"1 John 2:1"`` or ``"john.3.16"``
and resolves the book case-insensitively (common abbreviations
included).  If the string cannot be parsed a :class:`ValueError` is
raised.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

BOOK_NAMES: List[str] = [
    "Genesis", "Exodus", "Leviticus", "Numbers", "Deuteronomy",
    "Joshua", "Judges", "Ruth", "1 Samuel", "2 Samuel",
    "1 Kings", "2 Kings", "1 Chronicles", "2 Chronicles", "Ezra",
    "Nehemiah", "Esther", "Job", "Psalms", "Proverbs",
    "Ecclesiastes", "Song of Solomon", "Isaiah", "Jeremiah", "Lamentations",
    "Ezekiel", "Daniel", "Hosea", "Joel", "Amos",
    "Obadiah", "Jonah", "Micah", "Nahum", "Habakkuk",
    "Zephaniah", "Haggai", "Zechariah", "Malachi",
    "Matthew", "Mark", "Luke", "John", "Acts",
    "Romans", "1 Corinthians", "2 Corinthians", "Galatians", "Ephesians",
    "Philippians", "Colossians", "1 Thessalonians", "2 Thessalonians", "1 Timothy",
    "2 Timothy", "Titus", "Philemon", "Hebrews", "James",
    "1 Peter", "2 Peter", "1 John", "2 John", "3 John",
    "Jude", "Revelation",
]

# Alternative spellings and abbreviations, lower-case.
_ALIASES: Dict[str, str] = {
    "gen": "Genesis",
    "exo": "Exodus",
    "ex": "Exodus",
    "lev": "Leviticus",
    "num": "Numbers",
    "deut": "Deuteronomy",
    "deu": "Deuteronomy",
    "ps": "Psalms",
    "psa": "Psalms",
    "psalm": "Psalms",
    "prov": "Proverbs",
    "eccl": "Ecclesiastes",
    "song of songs": "Song of Solomon",
    "canticles": "Song of Solomon",
    "isa": "Isaiah",
    "jer": "Jeremiah",
    "ezek": "Ezekiel",
    "dan": "Daniel",
    "matt": "Matthew",
    "mt": "Matthew",
    "mk": "Mark",
    "lk": "Luke",
    "jn": "John",
    "rom": "Romans",
    "gal": "Galatians",
    "eph": "Ephesians",
    "phil": "Philippians",
    "col": "Colossians",
    "heb": "Hebrews",
    "rev": "Revelation",
    "revelations": "Revelation",
}

_ROMAN_PREFIX = {"i": "1", "ii": "2", "iii": "3"}

_RE_REF = re.compile(
    r"^\s*(?P<book>(?:[1-3]|i{1,3})?\s*[A-Za-z][A-Za-z ]*?)"
    r"(?:[\s.]+(?P<chapter>\d+)(?:[:.](?P<verse>\d+))?)?\s*$",
    re.IGNORECASE,
)


def canonical_book_name(name: str) -> Optional[str]:
    """Return the canonical spelling of *name*, or ``None`` if unknown."""
    key = re.sub(r"\s+", " ", name.strip().lower())
    parts = key.split(" ", 1)
    if len(parts) == 2 and parts[0] in _ROMAN_PREFIX:
        key = f"{_ROMAN_PREFIX[parts[0]]} {parts[1]}"
    key = re.sub(r"^([1-3])(?=[a-z])", r"\1 ", key)
    for book in BOOK_NAMES:
        if book.lower() == key:
            return book
    return _ALIASES.get(key)


def parse_reference(ref: str) -> Tuple[str, Optional[int], Optional[int]]:
    """Parse ``"Book [chapter[:verse]]"`` into ``(book, chapter, verse)``.

    :raises ValueError: If the string is not a reference to a known book.
    """
    m = _RE_REF.match(ref or "")
    if not m:
        raise ValueError(f"Cannot parse reference: {ref!r}")
    book = canonical_book_name(m.group("book"))
    if book is None:
        raise ValueError(f"Unknown book in reference: {ref!r}")
    chapter = int(m.group("chapter")) if m.group("chapter") else None
    verse = int(m.group("verse")) if m.group("verse") else None
    return book, chapter, verse


def format_reference(book: str, chapter: Optional[int] = None, verse: Optional[int] = None) -> str:
    """Inverse of :func:`parse_reference`."""
    if chapter is None:
        return book
    if verse is None:
        return f"{book} {chapter}"
    return f"{book} {chapter}:{verse}"


__all__ = ["BOOK_NAMES", "canonical_book_name", "format_reference", "parse_reference"]
