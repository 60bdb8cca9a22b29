"""Speech ports for VerseFlow.

Only the abstract interfaces are imported here.  The concrete Qt and
vosk implementations pull in ``PyQt6``, ``vosk`` and ``sounddevice``
and must be imported explicitly::

    from verseflow.speech.qt_output import QtSpeechOutput
    from verseflow.speech.qt_scheduler import QtScheduler
    from verseflow.speech.vosk_input import VoskSpeechInput
"""

from .base import (  # noqa: F401
    Callback,
    ScheduledCall,
    Scheduler,
    SpeechInputPort,
    SpeechOutputPort,
)

__all__ = [
    "Callback",
    "ScheduledCall",
    "Scheduler",
    "SpeechInputPort",
    "SpeechOutputPort",
]
