"""
PromptShelf Backend: API Key Comparison Tests
===============================================

What:  Unit tests for header_bytes() and api_key_matches(); the HTTP
       behaviour of the guard is covered in test_prompts_api.py.
"""

import pytest

from promptshelf.security import api_key_matches, header_bytes


class TestApiKeyMatches:
    def test_equal_key_matches(self):
        assert api_key_matches(b"s3cret", "s3cret") is True

    @pytest.mark.parametrize(
        "provided, secret",
        [
            (b"s3cret", "S3CRET"),
            (b"s3cret ", "s3cret"),
            (b"s3cre", "s3cret"),
            (None, "s3cret"),
            (b"", "s3cret"),
            (b"", ""),
            (b"anything", ""),
        ],
    )
    def test_other_values_do_not_match(self, provided, secret):
        """Exact byte equality only; an unset secret never matches."""
        assert api_key_matches(provided, secret) is False

    def test_secret_is_compared_as_utf8(self):
        assert api_key_matches("clé".encode("utf-8"), "clé") is True
        assert api_key_matches("clé".encode("latin-1"), "clé") is False


class TestHeaderBytes:
    def test_restores_utf8_bytes_decoded_as_latin1(self):
        """A UTF-8 header decoded by Starlette round-trips to the sent bytes."""
        received = "clé".encode("utf-8").decode("latin-1")
        assert header_bytes(received) == b"cl\xc3\xa9"

    def test_ascii_is_unchanged(self):
        assert header_bytes("s3cret") == b"s3cret"
