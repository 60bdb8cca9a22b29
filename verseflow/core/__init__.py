"""
Core recitation logic for VerseFlow.

This subpackage contains the pieces that decide *whether* a user
recited a verse correctly and *what happens next*:

* :mod:`.normalizer` turns text into comparable lower-case words
  (numbers and ordinals spelled out, diacritics folded);
* :mod:`.phonetic` computes Soundex codes;
* :mod:`.matcher` compares a transcript with a reference text at a
  configurable accuracy;
* :mod:`.tokenizer` splits a verse into speakable chunks;
* :mod:`.flow_engine` drives the speak / listen / check loop.

Nothing here imports Qt or audio libraries; the engine talks to the
outside world through the ports in :mod:`verseflow.speech.base` and
:mod:`verseflow.storage`.

Example::

    from verseflow.core import RecitationMatcher, AccuracyLevel
    result = RecitationMatcher().check("for god so loved", "For God so loved the world", AccuracyLevel.LOW)
    print(result.type, result.matched_word_count)
"""

# Public API of the core package
from .errors import (  # noqa: F401
    DataError,
    InputUnavailable,
    OutputUnavailable,
    PersistenceError,
    RecitationError,
)
from .flow_engine import FlowState, FlowStatus, RecitationFlowEngine  # noqa: F401
from .matcher import AccuracyLevel, CheckResult, MatchType, RecitationMatcher  # noqa: F401
from .models import RevealedVerseIdentifier, Verse  # noqa: F401
from .normalizer import TextNormalizer, normalize  # noqa: F401
from .phonetic import PhoneticEncoder, encode  # noqa: F401
from .settings import RecitationSettings  # noqa: F401
from .tokenizer import Chunk, ChunkTokenizer, TokenizedVerse, tokenize  # noqa: F401

__all__ = [
    "AccuracyLevel",
    "CheckResult",
    "Chunk",
    "ChunkTokenizer",
    "DataError",
    "FlowState",
    "FlowStatus",
    "InputUnavailable",
    "MatchType",
    "OutputUnavailable",
    "PersistenceError",
    "PhoneticEncoder",
    "RecitationError",
    "RecitationFlowEngine",
    "RecitationMatcher",
    "RecitationSettings",
    "RevealedVerseIdentifier",
    "TextNormalizer",
    "TokenizedVerse",
    "Verse",
    "encode",
    "normalize",
    "tokenize",
]
