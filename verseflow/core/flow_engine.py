"""
Recitation flow engine
======================

:class:`RecitationFlowEngine` sequences the listen-then-repeat loop over
the verses of one book:

1. tokenize the current verse into chunks,
2. speak the current chunk (``SPEAKING``),
3. capture the user's repetition (``LISTENING``),
4. compare it against the chunk (``CHECKING``) and either advance
   (``VERSE_CORRECT``) or retry (``VERSE_INCORRECT``) after a short
   pacing delay,
5. once every chunk of a verse matched, mark the verse as revealed,
   persist the revealed set and move on to the next recitable verse.

The engine owns no threads.  It is driven by commands (``start``,
``stop``, ``jump_to`` ...) and by callbacks from its ports, and both
must arrive serially on one thread (the Qt event loop in the
application, plain calls in the tests).

Cancelling is two-phase: the engine asks both speech ports to stop and
only runs the follow-up action (settle to idle, resume at a new verse)
once *both* have confirmed.  A generation counter invalidates pacing
timers and speech tokens from before the cancel.

Usage::

    engine = RecitationFlowEngine(output, input_port, store, scheduler, settings)
    engine.add_listener(lambda status: print(status.message))
    engine.load_book("John", verses)
    engine.select_chapter(3)
    engine.start()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Set

from ..speech.base import Callback, ScheduledCall, Scheduler, SpeechInputPort, SpeechOutputPort
from .errors import (
    DataError,
    InputUnavailable,
    OutputUnavailable,
    PersistenceError,
    RecitationError,
)
from .matcher import RecitationMatcher
from .models import RevealedVerseIdentifier, Verse
from .settings import RecitationSettings
from .tokenizer import Chunk, ChunkTokenizer, TokenizedVerse

if TYPE_CHECKING:
    from ..storage import RevealedVerseStore

logger = logging.getLogger(__name__)

#: Pause after a correct chunk before moving on (seconds).
CORRECT_PACING_DELAY = 0.5
#: Pause after a failed chunk before speaking it again (seconds).
RETRY_PACING_DELAY = 1.5


class FlowState(Enum):
    IDLE = "idle"
    SPEAKING = "speaking"
    LISTENING = "listening"
    CHECKING = "checking"
    VERSE_CORRECT = "verseCorrect"
    VERSE_INCORRECT = "verseIncorrect"
    COMPLETED_ALL = "completedAll"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """True for states that need an explicit ``start()`` to leave."""
        return self in (FlowState.COMPLETED_ALL, FlowState.ERROR)


@dataclass(frozen=True)
class FlowStatus:
    """Snapshot delivered to listeners on every transition."""

    state: FlowState
    message: str
    verse: Optional[Verse]
    progress: int
    error: Optional[RecitationError] = None


StatusListener = Callable[[FlowStatus], None]


class RecitationFlowEngine:
    """Drive the speak / listen / check loop for one book.

    :param output: Speech-output port (text to speech).
    :param input: Speech-input port (speech to text).
    :param store: Persistence port for the revealed-verse set.
    :param scheduler: Runs the pacing delays.
    :param settings: Accuracy, word limit, voice and rate.  Replace them
        with :meth:`update_settings`.
    :param matcher: Optional custom :class:`RecitationMatcher`.
    :param tokenizer: Optional custom :class:`ChunkTokenizer`.
    """

    def __init__(
        self,
        output: SpeechOutputPort,
        input: SpeechInputPort,
        store: RevealedVerseStore,
        scheduler: Scheduler,
        settings: Optional[RecitationSettings] = None,
        matcher: Optional[RecitationMatcher] = None,
        tokenizer: Optional[ChunkTokenizer] = None,
    ) -> None:
        self.output = output
        self.input = input
        self.store = store
        self.scheduler = scheduler
        self._settings = settings or RecitationSettings()
        self.matcher = matcher or RecitationMatcher()
        self.tokenizer = tokenizer or ChunkTokenizer()

        self.output.on_finished = self.on_output_finished
        self.input.on_partial = self.on_input_partial
        self.input.on_final = self.on_input_final
        self.input.on_error = self.on_input_error

        self._listeners: List[StatusListener] = []

        self._book_name: Optional[str] = None
        self._verses: List[Verse] = []
        self._selected_chapter: Optional[int] = None
        self._index = 0

        self._tokenized: Optional[TokenizedVerse] = None
        self._chunk_index = 0
        self._recited_word_count = 0
        self._recited_text = ""

        self._state = FlowState.IDLE
        self._message = ""
        self._error: Optional[RecitationError] = None
        self._active = False

        # Cancellation bookkeeping.
        self._generation = 0
        self._command = 0
        self._pending_stops = 0
        self._after_cancel: List[Callback] = []
        self._expected_token: Optional[str] = None
        self._pacing: Optional[ScheduledCall] = None

        self._revealed: Set[RevealedVerseIdentifier] = set()
        self.reload_revealed()

    # ------------------------------------------------------------------ #
    # Observation
    # ------------------------------------------------------------------ #
    def add_listener(self, listener: StatusListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: StatusListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def state(self) -> FlowState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def status_message(self) -> str:
        return self._message

    @property
    def error(self) -> Optional[RecitationError]:
        """The error that ended the last session, if any."""
        return self._error

    @property
    def settings(self) -> RecitationSettings:
        return self._settings

    @property
    def book_name(self) -> Optional[str]:
        return self._book_name

    @property
    def verses(self) -> List[Verse]:
        return list(self._verses)

    @property
    def current_verse(self) -> Optional[Verse]:
        if 0 <= self._index < len(self._verses):
            return self._verses[self._index]
        return None

    @property
    def chunks(self) -> List[Chunk]:
        return list(self._tokenized.chunks) if self._tokenized else []

    @property
    def chunk_index(self) -> int:
        return self._chunk_index

    @property
    def recited_word_count(self) -> int:
        return self._recited_word_count

    @property
    def total_valid_words(self) -> int:
        return self._tokenized.total_valid_words if self._tokenized else 0

    @property
    def progress_percentage(self) -> int:
        total = self.total_valid_words
        if total <= 0:
            return 0
        return int(self._recited_word_count / total * 100)

    @property
    def recited_text(self) -> str:
        """Latest partial or final transcript for the current chunk."""
        return self._recited_text

    @property
    def revealed_identifiers(self) -> frozenset:
        return frozenset(self._revealed)

    def revealed_in_current_book(self) -> Set[RevealedVerseIdentifier]:
        if self._book_name is None:
            return set()
        return {ident for ident in self._revealed if ident.book_name == self._book_name}

    # ------------------------------------------------------------------ #
    # Content and settings
    # ------------------------------------------------------------------ #
    def load_book(self, book_name: str, verses: Iterable[Verse]) -> None:
        """Replace the current book.  A running session is stopped first."""
        if self._active or self._pending_stops:
            self._command += 1
            self._active = False
            self._cancel_io(lambda: None)
        self._book_name = book_name
        self._verses = list(verses)
        self._selected_chapter = None
        self._index = 0
        self._error = None
        self._reset_verse_progress()
        self.reload_revealed()
        logger.info("Loaded %s with %d verses", book_name, len(self._verses))

        if not any(v.is_recitable for v in self._verses):
            self._set_state(FlowState.IDLE, f"{book_name} has no recitable verses.")
            return
        first = self._verses[0]
        self._selected_chapter = first.chapter_number
        self._set_state(
            FlowState.IDLE,
            f"Tap 'Start Reciting' for {book_name} Chapter {first.chapter_number}.",
        )

    def update_settings(self, settings: RecitationSettings) -> None:
        """Apply new settings.

        Accuracy, voice and rate apply to the next chunk; the word limit
        applies the next time a verse is tokenized.
        """
        self._settings = settings
        logger.debug("Settings updated: %s", settings)

    def reload_revealed(self) -> None:
        """Re-read the revealed set from the store (e.g. after an external clear)."""
        self._revealed = set(self.store.load())
        logger.debug("Loaded %d revealed verses", len(self._revealed))

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #
    def start(self) -> None:
        """Begin (or restart) reciting from the selected chapter."""
        if self._book_name is None:
            self._fail(DataError("No book selected."))
            return
        if not any(v.is_recitable for v in self._verses):
            self._fail(DataError(f"No verses to recite for {self._book_name}."))
            return

        current = self.current_verse
        if self._selected_chapter is not None and (
            current is None or current.chapter_number != self._selected_chapter
        ):
            found = self._first_recitable_in_chapter(self._selected_chapter)
            self._index = found if found is not None else 0
        elif self._index >= len(self._verses):
            self._index = 0

        self._error = None
        command = self._next_command()

        def begin() -> None:
            if command != self._command:
                return
            self._active = True
            self._reset_verse_progress()
            logger.info("Starting recitation of %s at %s", self._book_name, self._current_label())
            self._process_next_action()

        self._cancel_io(begin)

    def stop(self, completion: Optional[Callback] = None) -> None:
        """Cancel any speech in flight and settle to idle.

        ``completion`` runs once both speech ports confirmed they are
        inactive.
        """
        was_active = self._active
        self._active = False
        self._next_command()

        def settle() -> None:
            if not self._state.is_terminal:
                message = "Recitation stopped." if was_active else self._message
                self._set_state(FlowState.IDLE, message)
            if completion is not None:
                completion()

        self._cancel_io(settle)

    def select_chapter(self, chapter_number: int) -> None:
        """External chapter change.

        Jumps to the chapter while reciting; otherwise only repositions.
        """
        self._selected_chapter = chapter_number
        current = self.current_verse
        if self._active:
            if current is None or current.chapter_number != chapter_number:
                self.jump_to(chapter_number)
            return

        found = self._first_recitable_in_chapter(chapter_number)
        if found is None:
            self._set_message(
                f"Chapter {chapter_number} selected in {self._book_name}, "
                "but no recitable verses found."
            )
            return
        self._index = found
        self._reset_verse_progress()
        self._set_message(f"Switched to {self._book_name} Chapter {chapter_number}.")

    def select_verse(self, chapter_number: int, verse_number: int) -> None:
        """Verse tap: always jumps to the verse and starts reciting."""
        self.jump_to(chapter_number, verse_number)

    def jump_to(self, chapter_number: int, verse_number: Optional[int] = None) -> None:
        """Stop, then resume at a chapter's first recitable verse or a given verse."""
        if verse_number is None:
            target = self._first_recitable_in_chapter(chapter_number)
        else:
            target = self._find_verse(chapter_number, verse_number)

        if target is None:
            label = chapter_number if verse_number is None else f"{chapter_number}:{verse_number}"
            logger.info("Jump target %s not found in %s", label, self._book_name)
            missing = f"Chapter {chapter_number} selected in {self._book_name}, but no recitable verses found."
            self.stop(lambda: self._set_message(missing))
            return

        self._selected_chapter = chapter_number
        self._error = None
        command = self._next_command()

        def resume() -> None:
            if command != self._command:
                return
            self._index = target
            self._reset_verse_progress()
            self._active = True
            self._set_message(f"Jumping to {self._book_name} {self._current_label()}...")
            self._process_next_action()

        self._cancel_io(resume)

    # ------------------------------------------------------------------ #
    # Port callbacks
    # ------------------------------------------------------------------ #
    def on_output_finished(self, token: str) -> None:
        if token != self._expected_token or not self._active or self._state is not FlowState.SPEAKING:
            logger.debug("Ignoring speech-finished for stale token %s", token)
            return
        self._expected_token = None
        self._recited_text = ""
        self._set_state(FlowState.LISTENING, "Your turn for this part...")
        try:
            self.input.start_capture()
        except InputUnavailable as exc:
            self._fail(exc)
        except Exception as exc:
            self._fail(InputUnavailable(str(exc)))

    def on_input_partial(self, text: str) -> None:
        if self._active and self._state is FlowState.LISTENING:
            self._recited_text = text

    def on_input_final(self, text: str) -> None:
        if not self._active or self._state is not FlowState.LISTENING:
            logger.debug("Ignoring transcript outside listening: %r", text)
            return
        self._recited_text = text
        self._check(text)

    def on_input_error(self, error: Exception) -> None:
        if not self._active or self._state is not FlowState.LISTENING:
            logger.debug("Ignoring input error outside listening: %s", error)
            return
        if not isinstance(error, InputUnavailable):
            error = InputUnavailable(str(error))
        self._fail(error)

    # ------------------------------------------------------------------ #
    # Loop
    # ------------------------------------------------------------------ #
    def _process_next_action(self) -> None:
        if not self._active:
            return
        while True:
            verse = self.current_verse
            if verse is None:
                self._finish_book()
                return
            if self._tokenized is None:
                self._tokenized = self.tokenizer.tokenize(verse.text, self._settings.word_limit)
                logger.debug(
                    "Verse %s: %d chunks, %d words",
                    verse.label,
                    len(self._tokenized.chunks),
                    self._tokenized.total_valid_words,
                )
            if self._tokenized.total_valid_words > 0:
                break
            if verse.is_recitable:
                # Text with no words to repeat counts as recited.
                logger.debug("Verse %s has no words; completing", verse.label)
                self._complete_verse()
                return
            logger.debug("Skipping empty verse %s", verse.label)
            self._index += 1
            self._reset_verse_progress()

        if self._chunk_index >= len(self._tokenized.chunks):
            if self._recited_word_count < self._tokenized.total_valid_words:
                logger.warning(
                    "Verse %s: %d of %d words counted; completing anyway",
                    self._current_label(),
                    self._recited_word_count,
                    self._tokenized.total_valid_words,
                )
            self._complete_verse()
            return
        self._speak_current_chunk()

    def _speak_current_chunk(self) -> None:
        chunk = self._tokenized.chunks[self._chunk_index]
        self._set_state(
            FlowState.SPEAKING,
            f"Listen ({self.progress_percentage}% done): {self._book_name} {self._current_label()}",
        )
        try:
            token = self.output.speak(
                chunk.text, self._settings.voice_identifier, self._settings.speech_rate
            )
        except OutputUnavailable as exc:
            self._fail(exc)
            return
        if token is None:
            self._fail(OutputUnavailable("Could not speak segment."))
            return
        self._expected_token = token

    def _check(self, transcript: str) -> None:
        chunk = self._tokenized.chunks[self._chunk_index]
        self._set_state(FlowState.CHECKING)
        result = self.matcher.check(transcript, chunk.text, self._settings.accuracy)

        if result.is_full_match:
            self._recited_word_count += chunk.valid_word_count
            self._chunk_index += 1
            message = "Correct!"
            if chunk.ends_with_sentence_terminator:
                message += " Next verse..."
            elif chunk.ends_with_clause_terminator:
                message += " Continuing..."
            elif self._chunk_index < len(self._tokenized.chunks):
                message += " Next part..."
            self._set_state(FlowState.VERSE_CORRECT, message)
            self._schedule(CORRECT_PACING_DELAY, self._process_next_action)
        else:
            base = "Didn't catch that. " if not transcript.strip() else "Not quite. "
            logger.info(
                "Chunk %d of %s: %s (%d/%d)",
                self._chunk_index + 1,
                self._current_label(),
                result.type.value,
                result.matched_word_count,
                result.original_word_count,
            )
            self._set_state(FlowState.VERSE_INCORRECT, base + "Try this part again.")
            self._schedule(RETRY_PACING_DELAY, self._speak_current_chunk)

    def _complete_verse(self) -> None:
        verse = self.current_verse
        message = f"Verse complete! {self._book_name} {verse.label}"
        identifier = RevealedVerseIdentifier(self._book_name, verse.chapter_number, verse.verse_number)
        if identifier not in self._revealed:
            self._revealed.add(identifier)
            try:
                self.store.save(self._revealed)
            except PersistenceError as exc:
                logger.warning("Revealed verse %s not persisted: %s", verse.label, exc)
                message += " (progress not saved)"
        logger.info("Verse %s %s complete", self._book_name, verse.label)
        self._set_state(FlowState.VERSE_CORRECT, message)

        self._index += 1
        self._reset_verse_progress()
        self._process_next_action()

    def _finish_book(self) -> None:
        recitable = {(v.chapter_number, v.verse_number) for v in self._verses if v.is_recitable}
        revealed = {(i.chapter_number, i.verse_number) for i in self.revealed_in_current_book()}
        if recitable <= revealed:
            message = f"Congrats! All verses in {self._book_name} recited."
        else:
            message = f"Finished {self._book_name}. Tap 'Start' for another round."
        self._active = False
        # The next start() begins a new round from the first verse.
        self._selected_chapter = None
        logger.info("Reached end of %s", self._book_name)
        self._set_state(FlowState.COMPLETED_ALL, message)

    def _fail(self, error: RecitationError) -> None:
        logger.error("Recitation failed: %s", error.reason)
        self._active = False
        self._next_command()
        self._error = error
        self._set_state(FlowState.ERROR, error.reason)
        self._cancel_io(lambda: None)

    # ------------------------------------------------------------------ #
    # Cancellation and pacing
    # ------------------------------------------------------------------ #
    def _cancel_io(self, then: Callback) -> None:
        """Stop both ports, then run *then* once both confirmed."""
        self._after_cancel.append(then)
        if self._pending_stops:
            return
        self._expected_token = None
        if self._pacing is not None:
            self._pacing.cancel()
            self._pacing = None
        self._generation += 1
        self._pending_stops = 2
        self.output.stop(self._on_port_stopped)
        self.input.stop_capture(self._on_port_stopped)

    def _on_port_stopped(self) -> None:
        self._pending_stops -= 1
        if self._pending_stops > 0:
            return
        callbacks, self._after_cancel = self._after_cancel, []
        for callback in callbacks:
            callback()

    def _schedule(self, delay: float, action: Callback) -> None:
        generation = self._generation

        def fire() -> None:
            self._pacing = None
            if generation != self._generation or not self._active:
                return
            action()

        self._pacing = self.scheduler.call_later(delay, fire)

    def _next_command(self) -> int:
        self._command += 1
        return self._command

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _reset_verse_progress(self) -> None:
        self._tokenized = None
        self._chunk_index = 0
        self._recited_word_count = 0
        self._recited_text = ""

    def _first_recitable_in_chapter(self, chapter_number: int) -> Optional[int]:
        for idx, verse in enumerate(self._verses):
            if verse.chapter_number == chapter_number and verse.is_recitable:
                return idx
        return None

    def _find_verse(self, chapter_number: int, verse_number: int) -> Optional[int]:
        for idx, verse in enumerate(self._verses):
            if verse.chapter_number == chapter_number and verse.verse_number == verse_number:
                return idx
        return None

    def _current_label(self) -> str:
        verse = self.current_verse
        return verse.label if verse is not None else ""

    def _set_message(self, message: str) -> None:
        self._message = message
        self._emit()

    def _set_state(self, state: FlowState, message: Optional[str] = None) -> None:
        self._state = state
        if message is not None:
            self._message = message
        logger.debug("State -> %s: %s", state.value, self._message)
        self._emit()

    def _emit(self) -> None:
        status = FlowStatus(
            state=self._state,
            message=self._message,
            verse=self.current_verse,
            progress=self.progress_percentage,
            error=self._error if self._state is FlowState.ERROR else None,
        )
        for listener in list(self._listeners):
            listener(status)


__all__ = [
    "CORRECT_PACING_DELAY",
    "FlowState",
    "FlowStatus",
    "RETRY_PACING_DELAY",
    "RecitationFlowEngine",
]
