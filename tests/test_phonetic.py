# tests/test_phonetic.py
from verseflow.core.phonetic import PhoneticEncoder, encode


def test_similar_names_share_a_code():
    assert encode("Robert") == "R163"
    assert encode("Rupert") == "R163"


def test_case_insensitive():
    assert encode("robert") == encode("ROBERT")


def test_empty_word():
    assert encode("") == ""


def test_short_codes_are_padded():
    assert encode("A") == "A000"
    assert encode("Lee") == "L000"


def test_repeated_digits_collapse():
    # "ll" shares one digit; the first letter's digit also counts.
    assert encode("Lloyd") == "L300"


def test_encoder_object():
    assert PhoneticEncoder().encode("Rupert") == "R163"
    assert PhoneticEncoder.code_length == 4
