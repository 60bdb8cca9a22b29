"""Abstract ports driven by the recitation flow engine.

The engine never talks to a speech synthesiser, microphone or timer
directly.  It drives three small interfaces instead:

* :class:`SpeechOutputPort` – speaks one chunk at a time.  ``speak``
  returns a session token (or ``None`` when the request is rejected)
  and the port later reports ``on_finished(token)`` exactly once, when
  speaking finishes *or* is cancelled.
* :class:`SpeechInputPort` – captures one utterance at a time.
  ``start_capture`` raises :class:`~verseflow.core.errors.InputUnavailable`
  when the microphone cannot start; afterwards the port reports any
  number of ``on_partial(text)`` calls followed by exactly one
  ``on_final(text)`` or ``on_error(exc)``.
* :class:`Scheduler` – runs a callback after a short delay; used only
  for user-perceivable pacing.

All callbacks must be delivered serially on the thread that owns the
engine.  Stopping a port is idempotent: ``stop``/``stop_capture`` on an
inactive port simply invokes the completion callback.

Concrete implementations live next to this module (``qt_output``,
``qt_scheduler``, ``vosk_input``); tests use in-memory fakes.
"""

from __future__ import annotations

import abc
from typing import Callable, Optional

Callback = Callable[[], None]


class SpeechOutputPort(abc.ABC):
    """Text-to-speech capability consumed by the engine."""

    def __init__(self) -> None:
        self.on_finished: Optional[Callable[[str], None]] = None

    @property
    @abc.abstractmethod
    def is_active(self) -> bool:
        """True while an utterance is being spoken."""

    @abc.abstractmethod
    def speak(self, text: str, voice_identifier: str, rate: float) -> Optional[str]:
        """Start speaking *text*; return a session token or ``None`` if rejected."""

    @abc.abstractmethod
    def stop(self, completion: Optional[Callback] = None) -> None:
        """Cancel any utterance in flight, then call *completion*."""

    def _notify_finished(self, token: str) -> None:
        if self.on_finished is not None:
            self.on_finished(token)


class SpeechInputPort(abc.ABC):
    """Speech-to-text capability consumed by the engine."""

    def __init__(self) -> None:
        self.on_partial: Optional[Callable[[str], None]] = None
        self.on_final: Optional[Callable[[str], None]] = None
        self.on_error: Optional[Callable[[Exception], None]] = None

    @property
    @abc.abstractmethod
    def is_active(self) -> bool:
        """True while a capture session is running."""

    @abc.abstractmethod
    def start_capture(self) -> None:
        """Begin a capture session; raise ``InputUnavailable`` on failure."""

    @abc.abstractmethod
    def stop_capture(self, completion: Optional[Callback] = None) -> None:
        """Cancel the running session (no final result), then call *completion*."""

    def _notify_partial(self, text: str) -> None:
        if self.on_partial is not None:
            self.on_partial(text)

    def _notify_final(self, text: str) -> None:
        if self.on_final is not None:
            self.on_final(text)

    def _notify_error(self, error: Exception) -> None:
        if self.on_error is not None:
            self.on_error(error)


class ScheduledCall(abc.ABC):
    """Handle returned by :meth:`Scheduler.call_later`."""

    @abc.abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running; no-op if it already ran."""


class Scheduler(abc.ABC):
    """Runs callbacks after a delay on the engine's thread."""

    @abc.abstractmethod
    def call_later(self, delay: float, callback: Callback) -> ScheduledCall:
        """Schedule *callback* to run once after *delay* seconds."""


__all__ = [
    "Callback",
    "ScheduledCall",
    "Scheduler",
    "SpeechInputPort",
    "SpeechOutputPort",
]
