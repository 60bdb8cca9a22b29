"""VerseFlow application entry point.

This script can be invoked directly (``python -m verseflow.main``) or
through the ``verseflow`` console script.  It loads the configuration,
fetches the requested book, wires the flow engine to the Qt speech
output, the vosk microphone input and the JSON revealed-verse store,
and runs the Qt event loop until the book is finished, an error ends
the session or the user presses Ctrl+C.

Examples::

    verseflow "John 3"          # recite John from chapter 3
    verseflow "Psalms 23:4"     # start at a single verse
    verseflow --list-books
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from typing import List, Optional

from PyQt6.QtCore import QCoreApplication, QTimer

from .config import get_app_config, load_config
from .connectors import get_default_connector
from .core.errors import DataError, PersistenceError
from .core.flow_engine import FlowState, FlowStatus, RecitationFlowEngine
from .core.settings import RecitationSettings
from .speech.qt_output import QtSpeechOutput
from .speech.qt_scheduler import QtScheduler
from .speech.vosk_input import VoskSpeechInput
from .storage import JsonRevealedVerseStore
from .utils.refs import parse_reference
from .utils.session_logger import configure_session_logger

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="verseflow",
        description="Memorise Bible verses by listening and repeating.",
    )
    parser.add_argument("reference", nargs="?", help='Book and optional chapter[:verse], e.g. "John 3:16"')
    parser.add_argument("--config", help="JSON file overriding config_default_settings.json")
    parser.add_argument("--list-books", action="store_true", help="Print the available books and exit")
    parser.add_argument("--accuracy", help="Override recitation accuracy (None, Low, Medium, High, Exact)")
    parser.add_argument("--word-limit", type=int, help="Override the chunk word limit (3-30)")
    parser.add_argument("--reset", action="store_true", help="Forget all revealed verses before starting")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    cfg = load_config(args.config) if args.config else get_app_config()

    logging.basicConfig(
        level=cfg.get("logging", "level", default="INFO"),
        format="%(levelname)s %(name)s: %(message)s",
    )
    configure_session_logger(cfg.get("logging", "session_log", default=None))

    connector = get_default_connector(cfg.section("connector"))
    if args.list_books:
        for name in connector.list_books():
            print(name)
        return
    if not args.reference:
        build_parser().error("a reference is required unless --list-books is given")

    try:
        book, chapter, verse = parse_reference(args.reference)
        verses = connector.get_verses(book)
    except (ValueError, LookupError, DataError, ConnectionError) as exc:
        print(f"verseflow: {exc}", file=sys.stderr)
        sys.exit(2)
    if chapter is not None and not any(
        v.is_recitable and v.chapter_number == chapter and verse in (None, v.verse_number)
        for v in verses
    ):
        print(f"verseflow: no recitable verse at {args.reference}", file=sys.stderr)
        sys.exit(2)

    settings = RecitationSettings.from_config(cfg)
    if args.accuracy:
        settings = settings.replace(accuracy=args.accuracy)
    if args.word_limit is not None:
        settings = settings.replace(word_limit=args.word_limit)

    app = QCoreApplication(sys.argv[:1])
    store = JsonRevealedVerseStore(
        cfg.get("storage", "revealed_verses_file", default="~/.verseflow/revealed_verses.json")
    )
    if args.reset:
        try:
            store.clear()
        except PersistenceError as exc:
            print(f"verseflow: {exc}", file=sys.stderr)
            sys.exit(2)

    speech = cfg.section("speech")
    engine = RecitationFlowEngine(
        output=QtSpeechOutput(parent=app),
        input=VoskSpeechInput(
            model_path=speech.get("vosk_model_path", "models/vosk-model-small-en-us-0.15"),
            samplerate=speech.get("samplerate", 16000),
            device=speech.get("device"),
            silence_timeout=speech.get("silence_timeout", 1.5),
            max_duration=speech.get("max_capture_seconds", 30.0),
        ),
        store=store,
        scheduler=QtScheduler(app),
        settings=settings,
    )

    def on_status(status: FlowStatus) -> None:
        print(status.message, flush=True)
        if status.state in (FlowState.COMPLETED_ALL, FlowState.ERROR):
            app.quit()

    engine.add_listener(on_status)
    engine.load_book(book, verses)

    def start() -> None:
        if verse is not None:
            engine.select_verse(chapter, verse)
        else:
            if chapter is not None:
                engine.select_chapter(chapter)
            engine.start()

    # Ctrl+C stops the engine; the heartbeat lets the handler run inside Qt's loop.
    signal.signal(signal.SIGINT, lambda *_: engine.stop(app.quit))
    heartbeat = QTimer(app)
    heartbeat.timeout.connect(lambda: None)
    heartbeat.start(250)

    QTimer.singleShot(0, start)
    exit_code = app.exec()
    revealed = len(engine.revealed_in_current_book())
    print(f"{revealed} of {sum(1 for v in verses if v.is_recitable)} verses of {book} revealed.")
    sys.exit(1 if engine.state is FlowState.ERROR else exit_code)


if __name__ == "__main__":
    main()
