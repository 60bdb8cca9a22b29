# tests/conftest.py
from typing import Callable, List, Optional, Set

import pytest

from verseflow.core.errors import PersistenceError
from verseflow.core.flow_engine import RecitationFlowEngine
from verseflow.core.matcher import AccuracyLevel
from verseflow.core.models import RevealedVerseIdentifier, Verse
from verseflow.core.settings import RecitationSettings
from verseflow.speech.base import ScheduledCall, Scheduler, SpeechInputPort, SpeechOutputPort
from verseflow.storage import RevealedVerseStore


class FakeOutput(SpeechOutputPort):
    """Records speak requests; speech 'ends' when the test calls finish()."""

    def __init__(self):
        super().__init__()
        self.spoken: List[str] = []
        self.requests: List[tuple] = []
        self.current: Optional[str] = None
        self.reject = False
        self.defer_stop = False
        self.stop_calls = 0
        self._pending_stop: List[Callable[[], None]] = []
        self._counter = 0

    @property
    def is_active(self):
        return self.current is not None

    def speak(self, text, voice_identifier, rate):
        assert self.current is None, "speak while another utterance is active"
        if self.reject:
            return None
        self._counter += 1
        self.current = f"tok-{self._counter}"
        self.spoken.append(text)
        self.requests.append((text, voice_identifier, rate))
        return self.current

    def finish(self):
        token, self.current = self.current, None
        self._notify_finished(token)

    def stop(self, completion=None):
        self.stop_calls += 1
        if self.current is None:
            if completion:
                completion()
            return
        if self.defer_stop:
            self._pending_stop.append(completion)
            return
        self.finish()
        if completion:
            completion()

    def complete_stop(self):
        self.finish()
        pending, self._pending_stop = self._pending_stop, []
        for completion in pending:
            if completion:
                completion()


class FakeInput(SpeechInputPort):
    def __init__(self):
        super().__init__()
        self.active = False
        self.captures = 0
        self.fail_start: Optional[Exception] = None

    @property
    def is_active(self):
        return self.active

    def start_capture(self):
        assert not self.active, "capture while another capture is active"
        if self.fail_start is not None:
            raise self.fail_start
        self.captures += 1
        self.active = True

    def stop_capture(self, completion=None):
        self.active = False
        if completion:
            completion()

    def final(self, text):
        self.active = False
        self._notify_final(text)

    def partial(self, text):
        self._notify_partial(text)

    def error(self, exc):
        self.active = False
        self._notify_error(exc)


class _ManualCall(ScheduledCall):
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Runs scheduled callbacks only when the test says so."""

    def __init__(self):
        self.calls: List[_ManualCall] = []

    def call_later(self, delay, callback):
        call = _ManualCall(delay, callback)
        self.calls.append(call)
        return call

    @property
    def pending(self) -> List[_ManualCall]:
        return [c for c in self.calls if not c.cancelled]

    def run_next(self):
        pending = self.pending
        assert pending, "nothing scheduled"
        call = pending[0]
        self.calls.remove(call)
        call.callback()
        return call


class MemoryStore(RevealedVerseStore):
    def __init__(self, initial: Optional[Set[RevealedVerseIdentifier]] = None):
        self.identifiers: Set[RevealedVerseIdentifier] = set(initial or ())
        self.saves: List[Set[RevealedVerseIdentifier]] = []
        self.fail = False

    def load(self):
        return set(self.identifiers)

    def save(self, identifiers):
        if self.fail:
            raise PersistenceError("disk full")
        self.identifiers = set(identifiers)
        self.saves.append(set(identifiers))


GENESIS = [
    Verse(1, 1, "In the beginning God created the heaven and the earth."),
    Verse(1, 2, "And the earth was without form, and void; and darkness was upon the face of the deep."),
    Verse(2, 1, "Thus the heavens and the earth were finished."),
]


class Harness:
    def __init__(self, store=None, settings=None):
        self.output = FakeOutput()
        self.input = FakeInput()
        self.scheduler = ManualScheduler()
        self.store = store or MemoryStore()
        self.statuses = []
        self.engine = RecitationFlowEngine(
            self.output,
            self.input,
            self.store,
            self.scheduler,
            settings or RecitationSettings(accuracy=AccuracyLevel.LOW, word_limit=12),
        )
        self.engine.add_listener(self.statuses.append)

    def current_chunk_text(self):
        return self.engine.chunks[self.engine.chunk_index].text

    def recite_chunk(self, text=None):
        """Finish speaking, answer with *text* (default: the chunk itself)."""
        answer = self.current_chunk_text() if text is None else text
        self.output.finish()
        self.input.final(answer)
        return self.scheduler.run_next()


@pytest.fixture()
def harness():
    h = Harness()
    h.engine.load_book("Genesis", GENESIS)
    return h


@pytest.fixture()
def make_harness():
    return Harness
