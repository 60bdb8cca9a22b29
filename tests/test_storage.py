# tests/test_storage.py
import json

import pytest

from verseflow.core.errors import PersistenceError
from verseflow.core.models import RevealedVerseIdentifier
from verseflow.storage import JsonRevealedVerseStore


def test_missing_file_loads_empty(tmp_path):
    assert JsonRevealedVerseStore(tmp_path / "revealed.json").load() == set()


def test_save_writes_named_fields(tmp_path):
    path = tmp_path / "sub" / "revealed.json"
    store = JsonRevealedVerseStore(path)
    store.save({RevealedVerseIdentifier("John", 3, 16), RevealedVerseIdentifier("Genesis", 1, 1)})

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload == [
        {"bookName": "Genesis", "chapterNumber": 1, "verseNumber": 1},
        {"bookName": "John", "chapterNumber": 3, "verseNumber": 16},
    ]
    assert store.load() == {RevealedVerseIdentifier("John", 3, 16), RevealedVerseIdentifier("Genesis", 1, 1)}


def test_corrupt_file_loads_empty(tmp_path):
    path = tmp_path / "revealed.json"
    path.write_text("{not json", encoding="utf-8")
    assert JsonRevealedVerseStore(path).load() == set()


def test_wrong_shape_loads_empty(tmp_path):
    path = tmp_path / "revealed.json"
    path.write_text(json.dumps([{"book": "John"}]), encoding="utf-8")
    assert JsonRevealedVerseStore(path).load() == set()


def test_clear(tmp_path):
    store = JsonRevealedVerseStore(tmp_path / "revealed.json")
    store.save({RevealedVerseIdentifier("John", 3, 16)})
    store.clear()
    assert store.load() == set()


def test_unwritable_location_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonRevealedVerseStore(blocker / "revealed.json")
    with pytest.raises(PersistenceError) as excinfo:
        store.save({RevealedVerseIdentifier("John", 3, 16)})
    assert excinfo.value.reason.startswith("persistence-error: ")
