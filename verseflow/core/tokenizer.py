"""
Chunk tokenizer
===============

Splits a verse into *chunks*: contiguous slices of the raw verse text
that are short enough to be spoken and repeated in one breath.  A chunk
ends

1. right after a sentence terminator (``.?!``) that follows a word,
2. right after a clause terminator (``,;:``) that follows a word,
3. at the end of the word that brings the chunk up to ``word_limit``
   normalised words, or
4. at the end of the verse.

The raw text spans of all chunks, concatenated, reproduce the verse
(apart from whitespace trimmed at chunk edges): text after the last
word, such as a closing quotation mark, is absorbed into the final
chunk.

Example::

    >>> chunks, total = tokenize("In the beginning God created the heavens and the earth.", 5)
    >>> [c.text for c in chunks]
    ['In the beginning God created', 'the heavens and the earth.']
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, NamedTuple, Optional, Tuple

from .normalizer import normalize

SENTENCE_TERMINATORS = ".?!"
CLAUSE_TERMINATORS = ",;:"

# A "word" is a run of digits (with inner . or , groups and an optional
# letter suffix such as "10th"), or a run of letters/digits joined by
# apostrophes or inner periods ("LORD's", "e.g").
_RE_WORD = re.compile(
    r"\d+(?:[.,]\d+)*(?:[^\W\d_]+)?"
    r"|[^\W_]+(?:['’.][^\W_]+)*"
)


@dataclass(frozen=True)
class Chunk:
    """One speakable slice of a verse."""

    text: str
    normalized_words: Tuple[str, ...]
    ends_with_sentence_terminator: bool = False
    ends_with_clause_terminator: bool = False

    @property
    def valid_word_count(self) -> int:
        return len(self.normalized_words)


class TokenizedVerse(NamedTuple):
    chunks: List[Chunk]
    total_valid_words: int


def split_words(text: str) -> List[re.Match]:
    """Return the word matches of *text* in order."""
    return list(_RE_WORD.finditer(text))


def _terminators_for(last_char: str) -> Tuple[bool, bool]:
    """Infer ``(sentence, clause)`` flags from a closing character."""
    if last_char and last_char in SENTENCE_TERMINATORS:
        return True, False
    if last_char and last_char in CLAUSE_TERMINATORS:
        return False, True
    return True, False


def _make_chunk(span: str, words: List[str], sentence: bool, clause: bool) -> Chunk:
    return Chunk(
        text=span.strip(),
        normalized_words=tuple(words),
        ends_with_sentence_terminator=sentence,
        ends_with_clause_terminator=clause and not sentence,
    )


def tokenize(
    verse_text: Optional[str],
    word_limit: int,
    normalize_fn: Callable[[str], List[str]] = normalize,
) -> TokenizedVerse:
    """Split *verse_text* into chunks of at most ``word_limit`` words.

    :param verse_text: Raw verse text; ``None`` or ``""`` yields no chunks.
    :param word_limit: Maximum normalised words per chunk before a forced
        break (values below 1 are treated as 1).
    :param normalize_fn: Normaliser applied to each raw word.
    :return: ``(chunks, total_valid_words)``.
    """
    if not verse_text:
        return TokenizedVerse([], 0)

    limit = max(1, int(word_limit))
    words = split_words(verse_text)
    last_index = len(words) - 1

    chunks: List[Chunk] = []
    start = 0
    pending: List[str] = []

    for index, match in enumerate(words):
        pending.extend(normalize_fn(match.group()))
        end = match.end()
        following = verse_text[end:end + 1]
        is_last = index == last_index

        if following and following in SENTENCE_TERMINATORS:
            close_at, sentence, clause = end + 1, True, False
        elif following and following in CLAUSE_TERMINATORS:
            close_at, sentence, clause = end + 1, False, True
        elif len(pending) >= limit:
            close_at, sentence, clause = end, False, False
        elif is_last:
            close_at = len(verse_text)
            sentence, clause = _terminators_for(match.group()[-1:])
        else:
            continue

        if not pending:
            continue
        if is_last:
            close_at = len(verse_text)
        chunks.append(_make_chunk(verse_text[start:close_at], pending, sentence, clause))
        start = close_at
        pending = []

    if pending:
        span = verse_text[start:]
        sentence, clause = _terminators_for(span.strip()[-1:])
        chunks.append(_make_chunk(span, pending, sentence, clause))

    total = sum(chunk.valid_word_count for chunk in chunks)
    return TokenizedVerse(chunks, total)


class ChunkTokenizer:
    """Tokenizer bound to a normaliser, for injection into the engine."""

    def __init__(self, normalize_fn: Callable[[str], List[str]] = normalize) -> None:
        self.normalize_fn = normalize_fn

    def tokenize(self, verse_text: Optional[str], word_limit: int) -> TokenizedVerse:
        return tokenize(verse_text, word_limit, self.normalize_fn)


__all__ = [
    "CLAUSE_TERMINATORS",
    "Chunk",
    "ChunkTokenizer",
    "SENTENCE_TERMINATORS",
    "TokenizedVerse",
    "split_words",
    "tokenize",
]
