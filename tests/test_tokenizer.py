# tests/test_tokenizer.py
import re

import pytest

from verseflow.core.tokenizer import ChunkTokenizer, tokenize


def _squash(text):
    return re.sub(r"\s+", "", text)


def test_word_limit_split():
    chunks, total = tokenize("In the beginning God created the heavens and the earth.", 5)
    assert [c.text for c in chunks] == ["In the beginning God created", "the heavens and the earth."]
    assert total == 10
    first, second = chunks
    assert not first.ends_with_sentence_terminator
    assert not first.ends_with_clause_terminator
    assert second.ends_with_sentence_terminator
    assert second.normalized_words == ("the", "heavens", "and", "the", "earth")


def test_clause_and_sentence_boundaries():
    text = "And God said, Let there be light: and there was light."
    chunks, total = tokenize(text, 12)
    assert [c.text for c in chunks] == [
        "And God said,",
        "Let there be light:",
        "and there was light.",
    ]
    assert [c.ends_with_clause_terminator for c in chunks] == [True, True, False]
    assert chunks[-1].ends_with_sentence_terminator
    assert total == 11


@pytest.mark.parametrize("text", ["", None, "... --"])
def test_no_words_gives_no_chunks(text):
    assert tokenize(text, 5) == ([], 0)


def test_last_word_without_punctuation_defaults_to_sentence():
    chunks, _ = tokenize("Jesus wept", 12)
    assert [c.text for c in chunks] == ["Jesus wept"]
    assert chunks[0].ends_with_sentence_terminator


def test_trailing_quote_is_absorbed():
    text = 'And he said, "Go."'
    chunks, _ = tokenize(text, 12)
    assert [c.text for c in chunks] == ["And he said,", '"Go."']
    assert chunks[-1].ends_with_sentence_terminator


def test_spans_reconstruct_the_verse():
    text = "For God so loved the world, that he gave his only begotten Son, that whosoever believeth in him should not perish, but have everlasting life."
    chunks, total = tokenize(text, 4)
    assert _squash("".join(c.text for c in chunks)) == _squash(text)
    assert total == sum(c.valid_word_count for c in chunks) == 25
    assert all(c.valid_word_count <= 4 for c in chunks)


def test_numbers_count_as_spelled_words():
    chunks, total = tokenize("Thou shalt keep the 10th day.", 12)
    assert chunks[0].normalized_words == ("thou", "shalt", "keep", "the", "tenth", "day")
    assert total == 6


def test_chunk_tokenizer_uses_injected_normalizer():
    tokenizer = ChunkTokenizer(lambda word: [word.upper()])
    result = tokenizer.tokenize("one two three", 2)
    assert [c.normalized_words for c in result.chunks] == [("ONE", "TWO"), ("THREE",)]
    assert result.total_valid_words == 3
