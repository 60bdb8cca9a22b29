# tests/test_refs.py
import pytest

from verseflow.utils.refs import BOOK_NAMES, format_reference, parse_reference


@pytest.mark.parametrize(
    "ref, expected",
    [
        ("John 3:16", ("John", 3, 16)),
        ("john", ("John", None, None)),
        ("1 John 2", ("1 John", 2, None)),
        ("1john 2:1", ("1 John", 2, 1)),
        ("II Kings 2:11", ("2 Kings", 2, 11)),
        ("ps 23", ("Psalms", 23, None)),
        ("Song of Songs 1:1", ("Song of Solomon", 1, 1)),
        ("Isaiah.53.5", ("Isaiah", 53, 5)),
    ],
)
def test_parse_reference(ref, expected):
    assert parse_reference(ref) == expected


@pytest.mark.parametrize("ref", ["", "3:16", "Hezekiah 1"])
def test_parse_reference_rejects_garbage(ref):
    with pytest.raises(ValueError):
        parse_reference(ref)


def test_format_reference():
    assert format_reference("John") == "John"
    assert format_reference("John", 3) == "John 3"
    assert format_reference("John", 3, 16) == "John 3:16"


def test_book_list_is_complete():
    assert len(BOOK_NAMES) == 66
    assert BOOK_NAMES[0] == "Genesis"
    assert BOOK_NAMES[-1] == "Revelation"
