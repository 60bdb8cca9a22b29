"""Soundex-style phonetic codes for single words.

Each word maps to a four character code: its first letter followed by
up to three digits that group similar-sounding consonants.  Vowels and
``H``/``W``/``Y`` carry no digit but break a run of equal digits, so
``"Robert"`` and ``"Rupert"`` both encode to ``"R163"``.
"""

from __future__ import annotations

from typing import Dict

CODE_LENGTH = 4

_DIGITS: Dict[str, str] = {}
for _letters, _digit in (
    ("BFPV", "1"),
    ("CGJKQSXZ", "2"),
    ("DT", "3"),
    ("L", "4"),
    ("MN", "5"),
    ("R", "6"),
):
    for _letter in _letters:
        _DIGITS[_letter] = _digit


def soundex_digit(char: str) -> str:
    """Return the digit class of an uppercase letter (``"0"`` if unmapped)."""
    return _DIGITS.get(char, "0")


def encode(word: str) -> str:
    """Return the phonetic code of *word*, or ``""`` for an empty word."""
    if not word:
        return ""
    upper = word.upper()
    first = upper[0]
    code = first
    previous = soundex_digit(first)
    for char in upper[1:]:
        if len(code) >= CODE_LENGTH:
            break
        digit = soundex_digit(char)
        if digit != "0" and digit != previous:
            code += digit
        previous = digit
    return code.ljust(CODE_LENGTH, "0")[:CODE_LENGTH]


class PhoneticEncoder:
    """Object form of :func:`encode` for injection into the matcher."""

    code_length = CODE_LENGTH

    def encode(self, word: str) -> str:
        return encode(word)


__all__ = ["CODE_LENGTH", "PhoneticEncoder", "encode", "soundex_digit"]
