import pytest

from core.errors import InvalidIdentifierError
from core.services.validation import DEMO_CONTENT, DEMO_IDENTIFIER, is_demo_identifier, validate_identifier


@pytest.mark.parametrize("value", ["jack", "A_1", "a" * 15, "___", "0"])
def test_accepts_valid_handles(value):
    assert validate_identifier(value) == value


def test_trims_surrounding_whitespace():
    assert validate_identifier("  elonmusk \n") == "elonmusk"


@pytest.mark.parametrize(
    "value, reason",
    [
        (None, "empty_identifier"),
        ("", "empty_identifier"),
        ("   ", "empty_identifier"),
        ("a" * 16, "identifier_too_long"),
        ("bad-name", "identifier_has_invalid_characters"),
        ("two words", "identifier_has_invalid_characters"),
        ("@handle", "identifier_has_invalid_characters"),
        ("ñandú", "identifier_has_invalid_characters"),
        ("name\nx", "identifier_has_invalid_characters"),
    ],
)
def test_rejects_invalid_handles(value, reason):
    with pytest.raises(InvalidIdentifierError) as excinfo:
        validate_identifier(value)
    assert excinfo.value.reason == reason


def test_demo_identifier_is_exact_match():
    assert is_demo_identifier(DEMO_IDENTIFIER)
    assert not is_demo_identifier("Test123")
    assert not is_demo_identifier("test1234")


def test_demo_content_is_a_small_fixed_batch():
    assert 1 <= len(DEMO_CONTENT) <= 10
    assert all(item.text for item in DEMO_CONTENT.items)
