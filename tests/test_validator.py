# tests/test_validator.py
from __future__ import annotations

import pytest

from primefinder.number_theory import BOUND
from primefinder.utility import UserInputError
from primefinder.validator import InvalidInputError, is_valid_input, parse


@pytest.mark.parametrize("text,expected", [
    ("1", 1),
    ("97", 97),
    ("  360 ", 360),
    ("007", 7),
    ("1,234,567", 1234567),
    ("1 234 567", 1234567),
    ("1_000_000", 1000000),
    (str(BOUND), BOUND),
    ("0" * 5000 + "42", 42),
])
def test_parse_accepts(text, expected):
    assert parse(text) == expected


@pytest.mark.parametrize("text,reason", [
    ("", "empty"),
    ("   ", "empty"),
    ("abc", "non_numeric"),
    ("12a", "non_numeric"),
    ("1.5", "non_numeric"),
    ("+5", "non_numeric"),
    ("12,34", "non_numeric"),
    ("1,234_567", "non_numeric"),
    ("-5", "negative"),
    ("- 12", "negative"),
    ("0", "zero"),
    ("000", "zero"),
    (str(BOUND + 1), "too_large"),
    ("99999999999999999999999", "too_large"),
    ("9" * 5000, "too_large"),
    ("1," + ",".join(["000"] * 2000), "too_large"),
])
def test_parse_rejects(text, reason):
    with pytest.raises(InvalidInputError) as exc:
        parse(text)
    assert exc.value.reason == reason


def test_invalid_input_is_a_user_error():
    with pytest.raises(UserInputError, match="larger than the maximum"):
        parse(str(BOUND + 1))


@pytest.mark.parametrize("text,ok", [
    ("42", True),
    ("0", False),
    ("", False),
    ("-1", False),
    ("forty-two", False),
    (str(BOUND), True),
    ("9" * 5000, False),
])
def test_is_valid_input(text, ok):
    assert is_valid_input(text) is ok



def test_oversized_input_message_stays_short():
    text = "9" * 5000
    with pytest.raises(InvalidInputError) as exc:
        parse(text)
    assert exc.value.text == text
    assert len(str(exc.value)) < 120
