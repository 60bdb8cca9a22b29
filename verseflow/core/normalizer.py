"""
Text normalisation for recitation matching
==========================================

Both the reference verse text and the recognizer's transcript pass
through :func:`normalize` before they are compared.  The goal is to
reduce two strings that *sound* the same to the same list of plain
lowercase words, whatever the recognizer decided to write:

* ordinal numerals (``"10th"``, ``"1st"``) become ordinal words
  (``"tenth"``, ``"first"``);
* cardinal numerals (``"2"``, ``"1,000"``, ``"3.5"``) become cardinal
  words (``"two"``, ``"one thousand"``, ``"three point five"``);
* diacritics are folded to their base letter (``"é"`` -> ``"e"``);
* everything that is not a lowercase letter is treated as a word
  break.

Spell-out uses :mod:`inflect` with the ``"and"`` and thousands-comma
connectives disabled, so ``"123"`` always reads ``"one hundred
twenty-three"`` independent of locale.

Example::

    >>> normalize("He said 2 men, 10th time.")
    ['he', 'said', 'two', 'men', 'tenth', 'time']
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Dict, List, Optional

import inflect

logger = logging.getLogger(__name__)

_ENGINE = inflect.engine()

# Integers with thousands separators and optional decimals, bare decimals,
# or bare integers.
_RE_CARDINAL = re.compile(r"\b\d{1,3}(?:,\d{3})*(?:\.\d+)?\b|\b\d+\.\d+\b|\b\d+\b")
_RE_ORDINAL = re.compile(r"\b(\d+)(?:st|nd|rd|th)\b", re.IGNORECASE)
_RE_NON_LETTER = re.compile(r"[^a-z\s]+")
_RE_SEPARATORS = re.compile(r"[,\s]+")

#: Cardinal words whose ordinal is not simply ``cardinal + "th"``.
IRREGULAR_ORDINALS: Dict[str, str] = {
    "one": "first",
    "two": "second",
    "three": "third",
    "five": "fifth",
    "eight": "eighth",
    "nine": "ninth",
    "twelve": "twelfth",
}


def spell_cardinal(value: float | int | str) -> Optional[str]:
    """Return the English cardinal spelling of *value*, or ``None``.

    Integers are spelled directly; decimal strings are spelled digit by
    digit after the point (``"3.5"`` -> ``"three point five"``).
    """
    try:
        words = _ENGINE.number_to_words(value, andword="", comma="")
    except Exception:
        logger.debug("Cardinal spell-out failed for %r", value, exc_info=True)
        return None
    if not isinstance(words, str) or not words:
        return None
    return _RE_SEPARATORS.sub(" ", words).strip()


def spell_ordinal(number: int) -> Optional[str]:
    """Return the English ordinal spelling of *number*.

    The ordinal is derived from the cardinal spelling: irregular words
    are looked up, 11-19 take ``"th"``, compound (hyphenated) cardinals
    only change their final segment, and ``...y`` becomes ``...ieth``.
    Returns ``None`` when the cardinal itself cannot be spelled.
    """
    cardinal = spell_cardinal(number)
    if cardinal is None:
        return None

    if cardinal in IRREGULAR_ORDINALS:
        return IRREGULAR_ORDINALS[cardinal]

    if 11 <= number % 100 <= 19:
        return cardinal + "th"

    if "-" in cardinal:
        prefix, _, last = cardinal.rpartition("-")
        if last in IRREGULAR_ORDINALS:
            return f"{prefix}-{IRREGULAR_ORDINALS[last]}"
        if last.endswith("y"):
            return f"{prefix}-{last[:-1]}ieth"
        return f"{prefix}-{last}th"

    if cardinal.endswith("y"):
        return cardinal[:-1] + "ieth"
    return cardinal + "th"


def _replace_ordinal(match: re.Match) -> str:
    digits = match.group(1)
    spelled = spell_ordinal(int(digits))
    if spelled is None:
        # Leave the bare digits for the cardinal pass to try.
        logger.debug("Ordinal spell-out failed for %r", match.group(0))
        return digits
    return spelled


def _replace_cardinal(match: re.Match) -> str:
    raw = match.group(0)
    cleaned = raw.replace(",", "")
    try:
        value = float(cleaned)
    except ValueError:
        logger.debug("Could not parse cardinal %r", raw)
        return raw
    if "." not in cleaned:
        spelled = spell_cardinal(int(cleaned))
    elif value.is_integer():
        spelled = spell_cardinal(int(value))
    else:
        whole, _, fraction = cleaned.partition(".")
        spelled = spell_cardinal(f"{int(whole)}.{fraction.rstrip('0')}")
    if spelled is None:
        return raw
    return spelled


def fold_diacritics(text: str) -> str:
    """Strip combining marks after canonical decomposition."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(text: str) -> List[str]:
    """Canonicalise *text* into an ordered list of comparable words.

    :param text: Free text (verse text or a speech transcript).
    :return: Lowercase alphabetic tokens in their original order.
    """
    if not text:
        return []
    lowered = text.lower()
    lowered = _RE_ORDINAL.sub(_replace_ordinal, lowered)
    lowered = _RE_CARDINAL.sub(_replace_cardinal, lowered)
    folded = fold_diacritics(lowered)
    cleaned = _RE_NON_LETTER.sub(" ", folded)
    return [word for word in cleaned.split() if word]


class TextNormalizer:
    """Callable wrapper around :func:`normalize`.

    Useful where a normaliser object is injected (for example into the
    matcher) and tests want to substitute a simpler one.
    """

    def normalize(self, text: str) -> List[str]:
        return normalize(text)

    __call__ = normalize


__all__ = [
    "IRREGULAR_ORDINALS",
    "TextNormalizer",
    "fold_diacritics",
    "normalize",
    "spell_cardinal",
    "spell_ordinal",
]
