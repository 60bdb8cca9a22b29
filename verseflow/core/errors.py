"""Error types raised and reported by the recitation core.

Every error that leaves the core carries a short classification
``tag`` plus descriptive text.  The flow engine stores the error that
ended a session in :attr:`RecitationFlowEngine.error` and exposes the
combined ``reason`` string (``"<tag>: <text>"``) in its status
message.

``RecitationMismatch`` is deliberately absent: a recitation that does
not match is not an exception, it is a :class:`~verseflow.core.matcher.CheckResult`
that drives the retry path.
"""

from __future__ import annotations


class RecitationError(Exception):
    """Base class for all errors surfaced by the recitation core."""

    tag = "error"

    @property
    def reason(self) -> str:
        message = str(self) or "Unknown"
        return f"{self.tag}: {message}"


class InputUnavailable(RecitationError):
    """The microphone or recognizer could not start, or failed mid-capture."""

    tag = "input-unavailable"


class OutputUnavailable(RecitationError):
    """The speech-output engine is busy or failed to start speaking."""

    tag = "output-unavailable"


class DataError(RecitationError):
    """The selected book/chapter has no recitable verses or is malformed."""

    tag = "data-error"


class PersistenceError(RecitationError):
    """The revealed-verse set could not be written to durable storage."""

    tag = "persistence-error"


__all__ = [
    "RecitationError",
    "InputUnavailable",
    "OutputUnavailable",
    "DataError",
    "PersistenceError",
]
