"""Recitation settings consumed by the flow engine.

The engine never reads configuration on its own: the caller builds a
:class:`RecitationSettings` (usually with :meth:`RecitationSettings.from_config`)
and re-injects a new value through ``update_settings`` whenever the
user changes something.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any

from .matcher import AccuracyLevel

logger = logging.getLogger(__name__)

MIN_WORD_LIMIT = 3
MAX_WORD_LIMIT = 30
DEFAULT_WORD_LIMIT = 12


def clamp_word_limit(value: Any) -> int:
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return DEFAULT_WORD_LIMIT
    return max(MIN_WORD_LIMIT, min(MAX_WORD_LIMIT, limit))


@dataclass(frozen=True)
class RecitationSettings:
    """Settings the flow engine reads on every chunk.

    ``voice_identifier`` and ``speech_rate`` are opaque to the engine
    and passed straight through to the speech-output port.
    """

    accuracy: AccuracyLevel = AccuracyLevel.LOW
    word_limit: int = DEFAULT_WORD_LIMIT
    voice_identifier: str = ""
    speech_rate: float = 0.0

    @classmethod
    def from_config(cls, cfg: Any) -> "RecitationSettings":
        """Build settings from an :class:`~verseflow.config.AppConfig`."""
        raw_accuracy = cfg.get("recitation", "required_accuracy", default=AccuracyLevel.LOW.value)
        try:
            accuracy = AccuracyLevel.parse(raw_accuracy)
        except ValueError:
            logger.warning("Unknown accuracy %r in config; using Low", raw_accuracy)
            accuracy = AccuracyLevel.LOW
        return cls(
            accuracy=accuracy,
            word_limit=clamp_word_limit(cfg.get("recitation", "word_limit", default=DEFAULT_WORD_LIMIT)),
            voice_identifier=str(cfg.get("recitation", "voice_identifier", default="") or ""),
            speech_rate=float(cfg.get("recitation", "speech_rate", default=0.0) or 0.0),
        )

    def replace(self, **changes: Any) -> "RecitationSettings":
        """Return a copy with *changes* applied (word limit re-clamped)."""
        if "accuracy" in changes:
            changes["accuracy"] = AccuracyLevel.parse(changes["accuracy"])
        if "word_limit" in changes:
            changes["word_limit"] = clamp_word_limit(changes["word_limit"])
        return dataclasses.replace(self, **changes)


__all__ = [
    "DEFAULT_WORD_LIMIT",
    "MAX_WORD_LIMIT",
    "MIN_WORD_LIMIT",
    "RecitationSettings",
    "clamp_word_limit",
]
