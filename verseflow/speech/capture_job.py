"""Run one speech capture on a ``QThreadPool`` worker.

A ``CaptureJob`` wraps a blocking capture function.  The function is
called with two arguments: a ``report_partial(text)`` callable and a
:class:`threading.Event` that is set when the capture should be
abandoned.  It returns the final transcript, or ``None`` when it was
cancelled.

Results travel back to the Qt thread through the signals of
:class:`CaptureSignals`:

``partial``
    Emitted with every changed partial transcript.

``final``
    Emitted once with the final transcript (never after a cancel).

``failed``
    Emitted with a string representation of the exception if the
    capture function raises.

``finished``
    Emitted when the job is finished, regardless of outcome.

Example usage::

    job = CaptureJob(record_and_recognise)
    job.signals.final.connect(handle_transcript)
    job.signals.failed.connect(handle_error)
    QThreadPool.globalInstance().start(job)
    ...
    job.cancel()
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from PyQt6.QtCore import QObject, QRunnable, pyqtSignal, pyqtSlot

logger = logging.getLogger(__name__)

CaptureFn = Callable[[Callable[[str], None], threading.Event], Optional[str]]


class CaptureSignals(QObject):
    #: Signal emitted with each partial transcript.
    partial = pyqtSignal(str)
    #: Signal emitted with the final transcript.
    final = pyqtSignal(str)
    #: Signal emitted when the capture raises, carrying the error message.
    failed = pyqtSignal(str)
    #: Signal emitted when the job is finished.
    finished = pyqtSignal()


class CaptureJob(QRunnable):
    """Wraps a capture function for execution in a separate thread.

    :param fn: Capture function, see the module docstring.
    """

    def __init__(self, fn: CaptureFn) -> None:
        super().__init__()
        self.fn = fn
        self.cancel_event = threading.Event()
        self.signals = CaptureSignals()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()

    @pyqtSlot()
    def run(self) -> None:
        """Execute the capture and emit signals as appropriate."""
        try:
            result = self.fn(self.signals.partial.emit, self.cancel_event)
        except Exception as exc:
            logger.debug("Capture failed", exc_info=True)
            if not self.cancelled:
                self.signals.failed.emit(str(exc) or exc.__class__.__name__)
        else:
            if result is not None and not self.cancelled:
                self.signals.final.emit(result)
        finally:
            self.signals.finished.emit()


__all__ = ["CaptureJob", "CaptureSignals"]
