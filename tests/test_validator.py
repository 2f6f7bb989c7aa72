"""
Tests for path and destination validation.
"""
import pytest

from shorturl_app.models.short_url import ShortUrl
from shorturl_app.schemas.url import ShortUrlCreate
from shorturl_app.services.validator import (
    DESTINATION_EMPTY,
    DESTINATION_INVALID,
    DESTINATION_NULL,
    PATH_EMPTY,
    PATH_INVALID_CHARACTERS,
    PATH_NULL,
    PATH_TOO_LONG,
    is_valid_path,
    strip_slashes,
    validate,
    validate_destination,
    validate_path,
)


class TestValidatePath:
    """Test short path rules"""

    @pytest.mark.parametrize("path", ["a", "abc", "A_b_9", "0123456789", "__________"])
    def test_valid_paths(self, path):
        assert validate_path(path) == []
        assert is_valid_path(path)

    def test_null_path(self):
        assert validate_path(None) == [PATH_NULL]

    def test_empty_path(self):
        assert validate_path("") == [PATH_EMPTY]

    def test_eleven_characters_too_long(self):
        """Length 11 of a valid charset only reports the length error"""
        assert validate_path("abcdefghijk") == [PATH_TOO_LONG]

    @pytest.mark.parametrize("path", ["a-b", "a b", "a/b", "é", "abc\n", "a.b", "ab$"])
    def test_invalid_characters(self, path):
        assert validate_path(path) == [PATH_INVALID_CHARACTERS]

    def test_length_and_charset_reported_together(self):
        errors = validate_path("abc-def-ghi-jkl")
        assert PATH_TOO_LONG in errors
        assert PATH_INVALID_CHARACTERS in errors
        assert len(errors) == 2


class TestValidateDestination:
    """Test destination URL rules"""

    @pytest.mark.parametrize(
        "destination",
        [
            "https://example.com/x",
            "http://example.com",
            "https://example.com:8443/a/b?q=1#frag",
            "ftp://files.example.com/pub",
            "http://localhost:8000",
        ],
    )
    def test_valid_destinations(self, destination):
        assert validate_destination(destination) == []

    def test_null_destination(self):
        assert validate_destination(None) == [DESTINATION_NULL]

    def test_empty_destination(self):
        assert validate_destination("") == [DESTINATION_EMPTY]

    @pytest.mark.parametrize(
        "destination",
        [
            "not a url",
            "example.com",
            "/relative/path",
            "https://",
            "mailto:someone@example.com",
            "https://exa mple.com",
            " https://example.com",
            "http://example.com:notaport",
        ],
    )
    def test_invalid_destinations(self, destination):
        assert validate_destination(destination) == [DESTINATION_INVALID]


class TestValidate:
    """Test combined validation result"""

    def test_valid_short_url(self):
        result = validate(ShortUrl(path="abc", destination="https://x.com"))
        assert result.is_valid
        assert result.errors == {"path": [], "destination": []}

    def test_errors_per_field(self):
        result = validate(ShortUrlCreate(path="bad path!", destination=None))
        assert not result.is_valid
        assert result.errors["path"] == [PATH_INVALID_CHARACTERS]
        assert result.errors["destination"] == [DESTINATION_NULL]

    def test_only_one_field_invalid(self):
        result = validate(ShortUrlCreate(path="ok", destination="nope"))
        assert not result.is_valid
        assert result.errors["path"] == []
        assert result.errors["destination"] == [DESTINATION_INVALID]


class TestStripSlashes:
    """Test path normalization"""

    @pytest.mark.parametrize("raw", ["/abc/", "abc", "/abc", "abc/", "//abc//"])
    def test_equivalent_forms(self, raw):
        assert strip_slashes(raw) == "abc"

    def test_none_stays_none(self):
        assert strip_slashes(None) is None

    def test_only_slashes_becomes_empty(self):
        assert strip_slashes("///") == ""
        assert validate_path(strip_slashes("///")) == [PATH_EMPTY]
