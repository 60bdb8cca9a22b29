"""Pacing scheduler on the Qt event loop."""

from __future__ import annotations

from typing import Optional, Set

from PyQt6.QtCore import QObject, QTimer

from .base import Callback, ScheduledCall, Scheduler


class _TimerCall(ScheduledCall):
    def __init__(self, timer: QTimer, owner: "QtScheduler") -> None:
        self._timer = timer
        self._owner = owner

    def cancel(self) -> None:
        self._timer.stop()
        self._owner._release(self)


class QtScheduler(Scheduler):
    """Run callbacks with single-shot ``QTimer`` objects.

    Timers are kept referenced until they fire or are cancelled.
    """

    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._parent = parent
        self._calls: Set[_TimerCall] = set()

    def call_later(self, delay: float, callback: Callback) -> ScheduledCall:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        call = _TimerCall(timer, self)

        def fire() -> None:
            self._release(call)
            callback()

        timer.timeout.connect(fire)
        self._calls.add(call)
        timer.start(max(0, int(delay * 1000)))
        return call

    def _release(self, call: _TimerCall) -> None:
        if call in self._calls:
            self._calls.discard(call)
            call._timer.deleteLater()


__all__ = ["QtScheduler"]
