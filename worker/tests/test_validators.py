import pytest

from leadfinder.etl import validators
from leadfinder.etl.validators import CONTACT_RULES, GENERAL_RULES


@pytest.mark.parametrize("value", ["N/A", "null", "Hidden", "  n/a  ", "NULL\n", " hidden ", "None", "undefined"])
def test_noise_keywords_are_invalid(value):
    assert validators.is_valid(value) is False
    assert validators.is_valid(value, CONTACT_RULES) is False


def test_noise_keywords_match_as_substrings():
    assert validators.is_valid("Phone hidden by owner") is False
    assert validators.is_valid("number not available") is False


def test_strict_keywords_only_apply_to_contact_fields():
    assert validators.is_valid("unknown owner", GENERAL_RULES) is True
    assert validators.is_valid("unknown owner", CONTACT_RULES) is False
    assert validators.is_valid("no number listed", CONTACT_RULES) is False


@pytest.mark.parametrize("value", [None, "", "   "])
def test_empty_values_are_invalid(value):
    assert validators.is_valid(value) is False


def test_length_thresholds():
    assert validators.is_valid("Jo", GENERAL_RULES) is True
    assert validators.is_valid("J", GENERAL_RULES) is False
    assert validators.is_valid("a@b.c", CONTACT_RULES) is False
    assert validators.is_valid("a@b.co", CONTACT_RULES) is True


def test_punctuation_only_is_invalid():
    assert validators.is_valid("-----", GENERAL_RULES) is False
    assert validators.is_valid("+ () -", CONTACT_RULES) is False


@pytest.mark.parametrize(
    "phone",
    ["+91 98220 12345", "020-2567 8901", "12345678", "+44 20 7946 0958", "123456789012345"],
)
def test_plausible_phones_are_valid(phone):
    assert validators.is_phone_valid(phone) is True


@pytest.mark.parametrize(
    "phone",
    ["0000000000", "1111111111", "123", "1234567", "1234567890123456", "N/A", "no number", None],
)
def test_placeholder_phones_are_invalid(phone):
    assert validators.is_phone_valid(phone) is False


def test_phone_digits_strips_formatting():
    assert validators.phone_digits("+91 (020) 2567-8901") == "9102025678901"


def test_non_latin_letters_count_as_alphanumeric():
    assert validators.is_valid("राजेश कुमार", GENERAL_RULES) is True
    assert validators.is_valid("।।", GENERAL_RULES) is False
