import pytest

from textscope.domain.exceptions import TextValidationError
from textscope.domain.services.text_validation import (
    sanitize_text,
    validate_and_sanitize_text,
)
from textscope.domain.use_cases.text_analysis_use_case import count_vowels


@pytest.mark.unit
class TestSanitizeText:
    def test_removes_control_characters(self):
        assert sanitize_text("he\x00ll\x07o\x7f") == "hello"

    def test_keeps_tab_newline_and_carriage_return(self):
        assert sanitize_text("a\tb\nc\rd") == "a\tb\nc\rd"

    @pytest.mark.parametrize("raw", [None, 42, ["text"], {"text": "x"}])
    def test_non_string_becomes_empty(self, raw):
        assert sanitize_text(raw) == ""


@pytest.mark.unit
class TestValidateAndSanitizeText:
    def test_returns_trimmed_text(self):
        assert validate_and_sanitize_text("  Hello World \n") == "Hello World"

    @pytest.mark.parametrize("raw", ["", "   ", "\x00\x01", None, 7])
    def test_empty_after_trimming_is_rejected(self, raw):
        with pytest.raises(TextValidationError) as exc_info:
            validate_and_sanitize_text(raw)

        assert exc_info.value.message == (
            "Text is required and cannot be empty after trimming."
        )
        assert exc_info.value.code == 400

    def test_length_limit_is_inclusive(self):
        assert validate_and_sanitize_text("a" * 10, max_length=10) == "a" * 10

    def test_too_long_is_rejected(self):
        with pytest.raises(TextValidationError) as exc_info:
            validate_and_sanitize_text("a" * 1001, max_length=1000)

        assert exc_info.value.message == (
            "Text must be at most 1,000 characters (got 1,001)."
        )

    def test_limit_applies_after_sanitizing(self):
        raw = "a" * 10 + "\x00" * 5
        assert validate_and_sanitize_text(raw, max_length=10) == "a" * 10


@pytest.mark.unit
class TestCountVowels:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Hello World", 3),
            ("AEIOU aeiou", 10),
            ("rhythm", 0),
            ("yay", 1),
            ("héllo", 1),
        ],
    )
    def test_counts_ascii_vowels_case_insensitively(self, text, expected):
        assert count_vowels(text) == expected
