# tests/test_matcher.py
import pytest

from verseflow.core.matcher import (
    AccuracyLevel,
    CheckResult,
    MatchType,
    RecitationMatcher,
    classify,
)

TEN_WORDS = "alpha bravo charlie delta echo foxtrot golf hotel india juliet"


@pytest.fixture
def matcher():
    return RecitationMatcher()


def test_empty_reference_and_empty_recitation_is_full(matcher):
    assert matcher.check("", "") == CheckResult(MatchType.FULL_MATCH, 0, 0)


def test_empty_reference_with_recitation_is_no_match(matcher):
    assert matcher.check("hello", "") == CheckResult(MatchType.NO_MATCH, 0, 0)


def test_seven_of_ten_is_full_and_reports_total(matcher):
    recited = "alpha bravo charlie delta echo foxtrot golf"
    result = matcher.check(recited, TEN_WORDS, AccuracyLevel.NONE)
    assert result.type is MatchType.FULL_MATCH
    assert result.matched_word_count == 10
    assert result.original_word_count == 10


def test_six_of_ten_is_partial(matcher):
    result = matcher.check("alpha bravo charlie delta echo foxtrot", TEN_WORDS, AccuracyLevel.NONE)
    assert result == CheckResult(MatchType.PARTIAL_MATCH, 6, 10)


def test_two_of_ten_is_partial_one_is_not(matcher):
    assert matcher.check("alpha bravo", TEN_WORDS, AccuracyLevel.NONE).type is MatchType.PARTIAL_MATCH
    assert matcher.check("alpha", TEN_WORDS, AccuracyLevel.NONE) == CheckResult(MatchType.NO_MATCH, 1, 10)


def test_matching_ignores_order(matcher):
    reversed_words = " ".join(reversed(TEN_WORDS.split()))
    assert matcher.check(reversed_words, TEN_WORDS, AccuracyLevel.NONE).is_full_match


def test_recited_words_are_consumed_once(matcher):
    result = matcher.check("the the the", "the cat sat on the mat", AccuracyLevel.NONE)
    # Only two "the" in the reference can be matched.
    assert result.matched_word_count == 2


def test_numbers_match_spelled_words(matcher):
    result = matcher.check("he said two men tenth time", "He said 2 men, 10th time.", AccuracyLevel.NONE)
    assert result.is_full_match


def test_three_word_tie_resolves_to_full(matcher):
    result = matcher.check("one two", "one two three", AccuracyLevel.NONE)
    assert result == CheckResult(MatchType.FULL_MATCH, 3, 3)


@pytest.mark.parametrize(
    "level, expected",
    [
        (AccuracyLevel.NONE, MatchType.NO_MATCH),
        (AccuracyLevel.LOW, MatchType.FULL_MATCH),
        (AccuracyLevel.EXACT, MatchType.FULL_MATCH),
    ],
)
def test_phonetic_levels_accept_sound_alikes(matcher, level, expected):
    assert matcher.check("rupert", "robert", level).type is expected


def test_medium_is_stricter_than_low(matcher):
    assert matcher.check("bill", "bat", AccuracyLevel.LOW).is_full_match
    assert not matcher.check("bill", "bat", AccuracyLevel.MEDIUM).is_full_match


def test_classify_thresholds():
    assert classify(0, 0).type is MatchType.NO_MATCH
    assert classify(14, 20).type is MatchType.FULL_MATCH
    assert classify(13, 20) == CheckResult(MatchType.PARTIAL_MATCH, 13, 20)
    assert classify(5, 20).type is MatchType.PARTIAL_MATCH
    assert classify(4, 20).type is MatchType.NO_MATCH


def test_accuracy_parse():
    assert AccuracyLevel.parse("medium") is AccuracyLevel.MEDIUM
    assert AccuracyLevel.parse("EXACT") is AccuracyLevel.EXACT
    assert AccuracyLevel.parse(AccuracyLevel.LOW) is AccuracyLevel.LOW
    with pytest.raises(ValueError):
        AccuracyLevel.parse("perfect")
