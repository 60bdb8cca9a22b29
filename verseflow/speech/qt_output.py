"""Speech output port backed by Qt's ``QTextToSpeech``.

Every :meth:`QtSpeechOutput.speak` call gets a fresh session token.
When the engine returns to ``Ready`` (speech finished *or* was
stopped) the token is handed to ``on_finished`` exactly once; the
flow engine ignores tokens it no longer expects, so a cancelled
utterance can never start a capture.
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from PyQt6.QtCore import QObject
from PyQt6.QtTextToSpeech import QTextToSpeech

from .base import Callback, SpeechOutputPort

logger = logging.getLogger(__name__)

class QtSpeechOutput(SpeechOutputPort):
    """Speak chunks with the platform text-to-speech engine.

    :param tts: Optional pre-built ``QTextToSpeech`` (e.g. with a
        specific engine plugin).
    :param parent: Qt parent for the default ``QTextToSpeech``.
    """

    def __init__(self, tts: Optional[QTextToSpeech] = None, parent: Optional[QObject] = None) -> None:
        super().__init__()
        self._tts = tts or QTextToSpeech(parent)
        self._tts.stateChanged.connect(self._on_state_changed)
        self._token: Optional[str] = None
        # Set once the current utterance moved off Ready (synthesizing or speaking).
        self._started = False
        self._voice_name: Optional[str] = None
        self._stop_waiters: List[Callback] = []

    @property
    def is_active(self) -> bool:
        return self._token is not None

    def voice_names(self) -> List[str]:
        """Names usable as ``voice_identifier``."""
        return [voice.name() for voice in self._tts.availableVoices()]

    def speak(self, text: str, voice_identifier: str, rate: float) -> Optional[str]:
        if self._token is not None:
            logger.warning("Speech requested while another utterance is active")
            return None
        if self._tts.state() == QTextToSpeech.State.Error:
            logger.error("Text-to-speech engine error: %s", self._tts.errorString())
            return None

        self._apply_voice(voice_identifier)
        self._tts.setRate(max(-1.0, min(1.0, float(rate))))

        token = uuid.uuid4().hex
        self._token = token
        self._started = False
        logger.debug("Speaking [%s]: %r", token[:8], text)
        self._tts.say(text)
        return token

    def stop(self, completion: Optional[Callback] = None) -> None:
        if self._token is None:
            if completion is not None:
                completion()
            return
        if completion is not None:
            self._stop_waiters.append(completion)
        # stop() also drops a say() the engine has not started yet.
        self._tts.stop()
        if not self._started and self._tts.state() == QTextToSpeech.State.Ready:
            # Never left Ready, so no Ready transition will confirm the stop.
            self._finish()

    def _apply_voice(self, voice_identifier: str) -> None:
        if not voice_identifier or voice_identifier == self._voice_name:
            return
        for voice in self._tts.availableVoices():
            if voice.name() == voice_identifier:
                self._tts.setVoice(voice)
                self._voice_name = voice_identifier
                return
        logger.warning("Voice %r not available; keeping %s", voice_identifier, self._tts.voice().name())

    def _on_state_changed(self, state: QTextToSpeech.State) -> None:
        if self._token is None:
            return
        if state == QTextToSpeech.State.Error:
            logger.error("Text-to-speech failed: %s", self._tts.errorString())
            self._finish()
        elif state == QTextToSpeech.State.Ready:
            # A Ready that the current utterance did not lead up to is stale.
            if self._started:
                self._finish()
        else:
            self._started = True

    def _finish(self) -> None:
        token, self._token = self._token, None
        waiters, self._stop_waiters = self._stop_waiters, []
        if token is not None:
            self._notify_finished(token)
        for waiter in waiters:
            waiter()


__all__ = ["QtSpeechOutput"]
