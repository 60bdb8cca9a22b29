"""
Recitation matching
===================

:class:`RecitationMatcher` decides whether a spoken transcript "says
the same words" as a reference text.  Both strings are normalised
with :func:`~verseflow.core.normalizer.normalize` and compared word by
word, **order-independently**: for each reference word the first
still-unused recited word that matches is consumed.  What counts as a
match depends on the :class:`AccuracyLevel`:

=========  =============================================
``NONE``   exact equality of the normalised words
``LOW``    first character of the phonetic code
``MEDIUM`` first two characters of the phonetic code
``HIGH``   first three characters of the phonetic code
``EXACT``  the full four character phonetic code
=========  =============================================

The raw matched count is then classified:

* ``FULL``    at least ``ceil(n * 0.66)`` of the ``n`` reference words
  matched; the reported count is ``n``;
* ``PARTIAL`` at least ``max(2, floor(n * 0.25))`` matched;
* ``NONE``    otherwise.

The full-match test runs first, so for very small ``n`` (``n == 3``:
full threshold 2, partial floor 2) a tie resolves to a full match.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .normalizer import normalize
from .phonetic import encode

logger = logging.getLogger(__name__)

FULL_MATCH_RATIO = 0.66
PARTIAL_MATCH_RATIO = 0.25
PARTIAL_MATCH_MIN_WORDS = 2


class AccuracyLevel(Enum):
    """Configurable matching strictness, from plain words to full Soundex."""

    NONE = "None"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    EXACT = "Exact"

    @property
    def prefix_length(self) -> Optional[int]:
        """Number of phonetic-code characters compared, or ``None`` for words."""
        return _PREFIX_LENGTHS[self]

    @classmethod
    def parse(cls, value: "str | AccuracyLevel") -> "AccuracyLevel":
        """Parse a configuration value such as ``"medium"`` or ``"High"``."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for level in cls:
            if level.value.lower() == key or level.name.lower() == key:
                return level
        raise ValueError(f"Unknown accuracy level: {value!r}")


_PREFIX_LENGTHS = {
    AccuracyLevel.NONE: None,
    AccuracyLevel.LOW: 1,
    AccuracyLevel.MEDIUM: 2,
    AccuracyLevel.HIGH: 3,
    AccuracyLevel.EXACT: 4,
}


class MatchType(Enum):
    NO_MATCH = "noMatch"
    PARTIAL_MATCH = "partialMatch"
    FULL_MATCH = "fullMatch"


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one recitation check.

    For a full match ``matched_word_count`` equals
    ``original_word_count``; otherwise it is the raw number of
    reference words found in the recitation.
    """

    type: MatchType
    matched_word_count: int
    original_word_count: int

    @property
    def is_full_match(self) -> bool:
        return self.type is MatchType.FULL_MATCH


def _phonetic_key(length: int) -> Callable[[str, str], bool]:
    def same(original: str, recited: str) -> bool:
        return (
            len(original) >= length
            and len(recited) >= length
            and original[:length] == recited[:length]
        )

    return same


def _consume_matches(
    originals: List[str], recited: List[str], same: Callable[[str, str], bool]
) -> int:
    """Greedy, order-independent matching; returns the matched count."""
    remaining = list(recited)
    matched = 0
    for original in originals:
        if not original:
            continue
        for idx, candidate in enumerate(remaining):
            if candidate and same(original, candidate):
                del remaining[idx]
                matched += 1
                break
    return matched


def classify(matched: int, total: int) -> CheckResult:
    """Turn a raw matched count into a :class:`CheckResult`."""
    full_threshold = math.ceil(total * FULL_MATCH_RATIO)
    if total > 0 and matched >= full_threshold:
        return CheckResult(MatchType.FULL_MATCH, total, total)
    partial_threshold = max(
        PARTIAL_MATCH_MIN_WORDS, math.floor(total * PARTIAL_MATCH_RATIO)
    )
    if total > 0 and matched >= partial_threshold:
        return CheckResult(MatchType.PARTIAL_MATCH, matched, total)
    return CheckResult(MatchType.NO_MATCH, matched, total)


class RecitationMatcher:
    """Compare a recited transcript against a reference text.

    :param normalizer: Function producing comparable words; defaults to
        :func:`~verseflow.core.normalizer.normalize`.
    :param encoder: Function producing phonetic codes; defaults to
        :func:`~verseflow.core.phonetic.encode`.
    """

    def __init__(
        self,
        normalizer: Callable[[str], List[str]] = normalize,
        encoder: Callable[[str], str] = encode,
    ) -> None:
        self.normalizer = normalizer
        self.encoder = encoder

    def check(
        self,
        recited: str,
        reference: str,
        accuracy: AccuracyLevel = AccuracyLevel.LOW,
    ) -> CheckResult:
        accuracy = AccuracyLevel.parse(accuracy)
        original_words = self.normalizer(reference or "")
        recited_words = self.normalizer(recited or "")
        logger.debug(
            "Check (accuracy=%s): original=%s recited=%s",
            accuracy.value,
            original_words[:10],
            recited_words[:10],
        )

        if not original_words:
            match_type = MatchType.FULL_MATCH if not recited_words else MatchType.NO_MATCH
            logger.debug("Reference is empty; result %s", match_type.value)
            return CheckResult(match_type, 0, 0)

        length = accuracy.prefix_length
        if length is None:
            matched = _consume_matches(
                original_words, recited_words, lambda a, b: a == b
            )
        else:
            original_codes = [self.encoder(word) for word in original_words]
            recited_codes = [self.encoder(word) for word in recited_words]
            logger.debug(
                "Phonetic prefix %d: original=%s recited=%s",
                length,
                original_codes[:5],
                recited_codes[:5],
            )
            matched = _consume_matches(
                original_codes, recited_codes, _phonetic_key(length)
            )

        result = classify(matched, len(original_words))
        logger.debug(
            "Matched %d of %d words -> %s",
            matched,
            len(original_words),
            result.type.value,
        )
        return result


__all__ = [
    "AccuracyLevel",
    "CheckResult",
    "MatchType",
    "RecitationMatcher",
    "classify",
]
