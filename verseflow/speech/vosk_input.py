"""Offline speech-to-text input port built on vosk and sounddevice.

Each capture session opens a 16 kHz mono ``int16`` stream on the
microphone, feeds it into a ``KaldiRecognizer`` and ends on whichever
comes first:

* the recognizer finalizes a non-empty utterance,
* the partial transcript stops changing for ``silence_timeout``
  seconds after the user started speaking,
* ``max_duration`` seconds have passed.

The blocking audio loop runs on a ``QThreadPool`` worker
(:class:`~verseflow.speech.capture_job.CaptureJob`); transcripts are
delivered back on the Qt thread, so the flow engine sees them
serially.

The vosk model is loaded lazily on the first capture.  Download a
model (e.g. ``vosk-model-small-en-us-0.15``) and point
``speech.vosk_model_path`` in the config at its directory.
"""

from __future__ import annotations

import json
import logging
import queue
import threading
import time
from functools import partial
from pathlib import Path
from typing import Any, Callable, List, Optional

import sounddevice as sd
import vosk
from PyQt6.QtCore import QThreadPool

from ..core.errors import InputUnavailable
from .base import Callback, SpeechInputPort
from .capture_job import CaptureJob

logger = logging.getLogger(__name__)

BLOCK_SIZE = 8000


class VoskSpeechInput(SpeechInputPort):
    """Microphone capture with vosk recognition.

    :param model_path: Directory of an unpacked vosk model.
    :param samplerate: Capture sample rate in Hz.
    :param device: sounddevice input device (index or name); ``None``
        selects the system default.
    :param silence_timeout: Seconds without transcript change that end
        a capture once speech was heard.
    :param max_duration: Hard limit for one capture in seconds.
    :param pool: Thread pool for capture jobs; defaults to the global one.
    """

    def __init__(
        self,
        model_path: str,
        samplerate: int = 16000,
        device: Optional[Any] = None,
        silence_timeout: float = 1.5,
        max_duration: float = 30.0,
        pool: Optional[QThreadPool] = None,
    ) -> None:
        super().__init__()
        self.model_path = Path(model_path).expanduser()
        self.samplerate = int(samplerate)
        self.device = device
        self.silence_timeout = float(silence_timeout)
        self.max_duration = float(max_duration)
        self._pool = pool or QThreadPool.globalInstance()
        self._model: Optional[vosk.Model] = None
        self._job: Optional[CaptureJob] = None
        self._stop_waiters: List[Callback] = []

    # ------------------------------------------------------------------ #
    # SpeechInputPort interface
    # ------------------------------------------------------------------ #
    @property
    def is_active(self) -> bool:
        return self._job is not None

    def start_capture(self) -> None:
        if self._job is not None:
            raise InputUnavailable("A capture session is already running.")
        model = self._load_model()
        try:
            sd.check_input_settings(
                device=self.device, samplerate=self.samplerate, channels=1, dtype="int16"
            )
        except Exception as exc:
            raise InputUnavailable(f"Microphone unavailable: {exc}") from exc

        job = CaptureJob(partial(self._capture, model))
        job.signals.partial.connect(lambda text, job=job: self._on_partial(job, text))
        job.signals.final.connect(lambda text, job=job: self._on_final(job, text))
        job.signals.failed.connect(lambda message, job=job: self._on_failed(job, message))
        job.signals.finished.connect(lambda job=job: self._on_finished(job))
        self._job = job
        self._pool.start(job)
        logger.debug("Capture started (device=%s, %d Hz)", self.device, self.samplerate)

    def stop_capture(self, completion: Optional[Callback] = None) -> None:
        if self._job is None:
            if completion is not None:
                completion()
            return
        if completion is not None:
            self._stop_waiters.append(completion)
        self._job.cancel()
        logger.debug("Capture cancel requested")

    # ------------------------------------------------------------------ #
    # Job signal handlers (Qt thread)
    # ------------------------------------------------------------------ #
    def _on_partial(self, job: CaptureJob, text: str) -> None:
        if job is self._job and not job.cancelled:
            self._notify_partial(text)

    def _on_final(self, job: CaptureJob, text: str) -> None:
        if job is not self._job or job.cancelled:
            return
        self._job = None
        logger.debug("Final transcript: %r", text)
        self._notify_final(text)
        self._flush_waiters()

    def _on_failed(self, job: CaptureJob, message: str) -> None:
        if job is not self._job or job.cancelled:
            return
        self._job = None
        logger.error("Capture failed: %s", message)
        self._notify_error(InputUnavailable(message))
        self._flush_waiters()

    def _on_finished(self, job: CaptureJob) -> None:
        if job is self._job:
            self._job = None
            self._flush_waiters()

    def _flush_waiters(self) -> None:
        waiters, self._stop_waiters = self._stop_waiters, []
        for waiter in waiters:
            waiter()

    # ------------------------------------------------------------------ #
    # Worker side
    # ------------------------------------------------------------------ #
    def _load_model(self) -> vosk.Model:
        if self._model is None:
            if not self.model_path.is_dir():
                raise InputUnavailable(f"Vosk model not found: {self.model_path}")
            vosk.SetLogLevel(-1)
            try:
                self._model = vosk.Model(str(self.model_path))
            except Exception as exc:
                raise InputUnavailable(f"Could not load vosk model: {exc}") from exc
            logger.info("Loaded vosk model from %s", self.model_path)
        return self._model

    def _capture(
        self,
        model: vosk.Model,
        report_partial: Callable[[str], None],
        cancel: threading.Event,
    ) -> Optional[str]:
        """Record until an utterance completes; runs on the worker thread."""
        audio: "queue.Queue[bytes]" = queue.Queue()

        def callback(indata, frames, time_info, status) -> None:
            if status:
                logger.debug("Audio status: %s", status)
            audio.put(bytes(indata))

        recognizer = vosk.KaldiRecognizer(model, self.samplerate)
        texts: List[str] = []
        last_partial = ""
        started = time.monotonic()
        last_change: Optional[float] = None

        with sd.RawInputStream(
            samplerate=self.samplerate,
            blocksize=BLOCK_SIZE,
            device=self.device,
            dtype="int16",
            channels=1,
            callback=callback,
        ):
            while not cancel.is_set():
                now = time.monotonic()
                if now - started >= self.max_duration:
                    logger.debug("Capture reached %.1fs limit", self.max_duration)
                    break
                if last_change is not None and now - last_change >= self.silence_timeout:
                    logger.debug("Silence after speech; ending capture")
                    break
                try:
                    data = audio.get(timeout=0.1)
                except queue.Empty:
                    continue
                if recognizer.AcceptWaveform(data):
                    text = json.loads(recognizer.Result()).get("text", "").strip()
                    if text:
                        texts.append(text)
                        break
                else:
                    text = json.loads(recognizer.PartialResult()).get("partial", "").strip()
                    if text and text != last_partial:
                        last_partial = text
                        last_change = now
                        report_partial(text)

        if cancel.is_set():
            return None
        if not texts:
            tail = json.loads(recognizer.FinalResult()).get("text", "").strip()
            if tail:
                texts.append(tail)
        return " ".join(texts)


__all__ = ["VoskSpeechInput"]
