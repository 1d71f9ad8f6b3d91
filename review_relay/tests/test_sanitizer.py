"""Tests for the text sanitizer. Pure logic, no mocks needed."""

import pytest

from review_relay.services.sanitizer import CONTROL_CHAR_RE, sanitize

SAMPLES = [
    "",
    "Olena",
    "  Olena  ",
    "Ivan\x00\x07 Petrenko\x1f",
    "line\tone\nline two\r",
    "\x85C1 range\x9f",
    "word " * 40,
    "a" * 59 + " b",
    "   \x00   ",
]


def test_non_string_becomes_empty():
    assert sanitize(None, 60) == ""
    assert sanitize(42, 60) == ""
    assert sanitize(["Olena"], 60) == ""
    assert sanitize({"name": "x"}, 60) == ""


def test_strips_control_characters_and_whitespace():
    assert sanitize("  Iv\x00an\x7f \x1b", 60) == "Ivan"


def test_keeps_tab_and_newline_inside_text():
    assert sanitize("one\ttwo\nthree", 60) == "one\ttwo\nthree"


def test_truncates_to_max_length():
    assert sanitize("abcdef", 3) == "abc"


def test_truncation_does_not_leave_trailing_space():
    assert sanitize("ab cd", 3) == "ab"


@pytest.mark.parametrize("raw", SAMPLES)
def test_idempotent(raw):
    once = sanitize(raw, 60)
    assert sanitize(once, 60) == once


@pytest.mark.parametrize("raw", SAMPLES)
def test_output_bounded_and_clean(raw):
    out = sanitize(raw, 60)
    assert len(out) <= 60
    assert not CONTROL_CHAR_RE.search(out)
