import string

import pytest
from hypothesis import given, settings, strategies as st

from pastebin.ids import DEFAULT_ALPHABET, IdGenerator, is_valid_paste_id


def test_default_ids_are_eight_characters_from_alphabet():
    generator = IdGenerator()
    for _ in range(200):
        paste_id = generator.generate()
        assert len(paste_id) == 8
        assert set(paste_id) <= set(DEFAULT_ALPHABET)


def test_default_alphabet_excludes_ambiguous_characters():
    for ambiguous in "0Ol1":
        assert ambiguous not in DEFAULT_ALPHABET
    assert set(DEFAULT_ALPHABET) <= set(string.ascii_letters + string.digits)


def test_id_space():
    assert IdGenerator("ab", 3).id_space == 8


@pytest.mark.parametrize(
    "alphabet,length",
    [("", 8), ("abc", 0), ("ab/c", 8), ("aab", 8)],
)
def test_rejects_bad_configuration(alphabet, length):
    with pytest.raises(ValueError):
        IdGenerator(alphabet, length)


@settings(max_examples=50)
@given(
    alphabet=st.sets(st.sampled_from(string.ascii_letters + string.digits), min_size=1).map(
        lambda chars: "".join(sorted(chars))
    ),
    length=st.integers(min_value=1, max_value=32),
)
def test_generated_ids_respect_configuration(alphabet, length):
    paste_id = IdGenerator(alphabet, length).generate()
    assert len(paste_id) == length
    assert set(paste_id) <= set(alphabet)


@pytest.mark.parametrize(
    "paste_id,expected",
    [
        ("abcDEF23", True),
        ("abc123", True),
        ("a" * 20, True),
        ("abc12", False),
        ("a" * 21, False),
        ("abc-1234", False),
        ("abcdé123", False),
        (None, False),
        (12345678, False),
    ],
)
def test_is_valid_paste_id(paste_id, expected):
    assert is_valid_paste_id(paste_id) is expected


def test_is_valid_paste_id_follows_configured_shape():
    assert is_valid_paste_id("ab-ab_ab", alphabet="ab-_", length=8)
    assert not is_valid_paste_id("ab-ab+ab", alphabet="ab-_", length=8)
    assert is_valid_paste_id("2Q2v", length=4)
    assert not is_valid_paste_id("2Q2", length=4)
    assert is_valid_paste_id("a" * 32, length=32)
    assert not is_valid_paste_id("a" * 33, length=32)
