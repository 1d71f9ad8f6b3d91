"""Tests for rating and submission validation."""

import pytest

from review_relay.errors import ValidationError
from review_relay.services.validation import (
    COMMENT_REQUIRED_MESSAGE,
    NAME_REQUIRED_MESSAGE,
    RATING_INVALID_MESSAGE,
    coerce_rating,
    is_valid_rating,
    validate_submission,
)


@pytest.mark.parametrize("value", [1, 2, 3, 4, 5, 5.0, "3", " 4 "])
def test_valid_ratings(value):
    assert is_valid_rating(value) is True


@pytest.mark.parametrize(
    "value",
    [0, 6, -1, 4.5, float("nan"), float("inf"), "five", "", "4.5", None, True, [5], {}],
)
def test_invalid_ratings(value):
    assert is_valid_rating(value) is False


def test_coerce_rating_rejects_huge_strings():
    assert coerce_rating("9" * 5000) is None


def test_five_star_accepted_without_reason():
    submission = validate_submission("Olena", 5, "")
    assert submission.rating == 5
    assert submission.reason == ""
    assert submission.is_negative is False


def test_five_star_accepts_any_reason():
    submission = validate_submission("Olena", 5, "  Чудово!\x00 ")
    assert submission.reason == "Чудово!"


@pytest.mark.parametrize("rating", [1, 2, 3, 4])
def test_low_rating_requires_reason(rating):
    with pytest.raises(ValidationError) as exc_info:
        validate_submission("Ivan", rating, "   ")
    assert exc_info.value.public_message == COMMENT_REQUIRED_MESSAGE
    assert exc_info.value.status_code == 400


def test_low_rating_with_reason_is_negative():
    submission = validate_submission("Ivan", 2, "Холодно в кімнаті")
    assert submission.is_negative is True
    assert submission.reason == "Холодно в кімнаті"


def test_control_chars_only_reason_counts_as_empty():
    with pytest.raises(ValidationError):
        validate_submission("Ivan", 3, "\x00\x01\x02")


def test_empty_name_rejected():
    with pytest.raises(ValidationError) as exc_info:
        validate_submission("  ", 5, "")
    assert exc_info.value.public_message == NAME_REQUIRED_MESSAGE


def test_non_string_name_rejected():
    with pytest.raises(ValidationError) as exc_info:
        validate_submission(123, 5, "")
    assert exc_info.value.public_message == NAME_REQUIRED_MESSAGE


def test_rating_checked_before_name():
    with pytest.raises(ValidationError) as exc_info:
        validate_submission("", 9, "")
    assert exc_info.value.public_message == RATING_INVALID_MESSAGE


def test_fields_are_bounded():
    submission = validate_submission("N" * 100, 1, "r" * 1000)
    assert len(submission.name) == 60
    assert len(submission.reason) == 500


def test_string_rating_is_coerced():
    assert validate_submission("Olena", "4", "ok").rating == 4
