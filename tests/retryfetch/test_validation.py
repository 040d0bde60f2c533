"""Tests for retryfetch.http.validation."""

from __future__ import annotations

import httpx
import pytest

from retryfetch.errors import ErrorCode, InvalidInputError
from retryfetch.http.validation import validate_url


class TestValidateUrl:
    """Tests for validate_url."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("http://example.test/", "http://example.test/"),
            ("https://example.test/a/b?c=d", "https://example.test/a/b?c=d"),
            ("HTTPS://EXAMPLE.test/Path", "https://example.test/Path"),
            ("http://example.test:8080/x", "http://example.test:8080/x"),
        ],
    )
    def test_accepts_http_urls(self, raw: str, expected: str) -> None:
        """HTTP and HTTPS URLs are returned re-serialized."""
        assert validate_url(raw) == expected

    def test_accepts_schemes_prefixed_by_http(self) -> None:
        """Any scheme starting with "http" passes the scheme check."""
        assert validate_url("httpfoo://example.test/").startswith("httpfoo://")

    def test_empty_string(self) -> None:
        """An empty string is rejected with a fixed message."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_url("")
        assert exc_info.value.message == "URL is empty. Skipping."
        assert exc_info.value.code == ErrorCode.INVALID_INPUT

    @pytest.mark.parametrize(
        "raw",
        ["ftp://example.test/file", "file:///etc/hosts", "example.test/path", "ws://example.test/"],
    )
    def test_non_http_scheme(self, raw: str) -> None:
        """URLs without an HTTP scheme are rejected and name the URL."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_url(raw)
        assert exc_info.value.message == f"URL {raw} does not have a valid HTTP scheme. Skipping."
        assert exc_info.value.url == raw

    def test_unparseable_url_keeps_cause(self) -> None:
        """A parse failure is wrapped with the parser error as cause."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_url("http://example.test:notaport/")
        assert isinstance(exc_info.value.__cause__, httpx.InvalidURL)

    @pytest.mark.parametrize("raw", ["http://exa mple.test/", "http://exa%20mple.test/"])
    def test_rejects_invalid_host_characters(self, raw: str) -> None:
        """Hosts with whitespace or escapes are refused before any request."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_url(raw)
        assert exc_info.value.message.startswith(f"URL {raw} could not be parsed: invalid host name")
        assert exc_info.value.url == raw

    @pytest.mark.parametrize(
        "raw", ["http://[::1]:8080/", "http://127.0.0.1/", "http://bücher.test/"]
    )
    def test_accepts_ip_and_international_hosts(self, raw: str) -> None:
        """IP literals and IDNA hosts pass the host name check."""
        assert validate_url(raw).startswith("http://")
