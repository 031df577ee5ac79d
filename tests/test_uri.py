"""Tests for URI validation and display names."""

import tempfile
from pathlib import Path

import pytest

from mdnotebook.core.uri import display_name, is_valid_uri, to_uri


@pytest.mark.parametrize(
    "text",
    [
        "https://example.com/report.pdf",
        "file:///tmp/notes.md",
        "mailto:me@example.com",
        "docs/report.pdf",
        "report.pdf",
        "https://example.com/a%20b",
    ],
)
def test_valid_uris(text):
    assert is_valid_uri(text)


@pytest.mark.parametrize(
    "text",
    ["", "not a uri", "https://exa mple.com", "http://[::1", "bad%zzescape", "1http:x", "a<b>"],
)
def test_invalid_uris(text):
    assert not is_valid_uri(text)


def test_display_name():
    assert display_name("https://example.com/files/report.pdf") == "report.pdf"
    assert display_name("https://example.com/dir/") == "dir"
    assert display_name("https://example.com") == "example.com"
    assert display_name("file:///tmp/My%20File.txt") == "My File.txt"
    assert display_name("mailto:me@example.com") == "me@example.com"


def test_display_name_leaves_link_syntax_escaped():
    assert display_name("https://example.com/a%0Ab") == "a%0Ab"
    assert display_name("https://example.com/a%5D%28c") == "a%5D%28c"
    assert display_name("https://example.com/a(1)%20b.pdf") == "a%281%29 b.pdf"
    assert display_name("http://[::1]") == "%5B::1%5D"


def test_to_uri_accepts_urls_and_existing_paths():
    assert to_uri("https://example.com/a.pdf") == "https://example.com/a.pdf"
    with tempfile.TemporaryDirectory() as tmpdir:
        f = Path(tmpdir) / "my notes.txt"
        f.write_text("x")
        uri = to_uri(str(f))
        assert uri is not None
        assert uri.startswith("file://")
        assert is_valid_uri(uri)
        assert display_name(uri) == "my notes.txt"


def test_to_uri_rejects_garbage():
    assert to_uri("no such file here.txt") is None
