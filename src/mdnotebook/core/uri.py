"""URI checks and display names for file blocks."""

import re
from pathlib import Path
from urllib.parse import unquote, urlsplit

# RFC 3986 reserved + unreserved characters; "%" is checked separately
_URI_CHARS = re.compile(r"^[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]+$")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
# characters that would end or split a "[label](uri)" line
_LABEL_ESCAPES = str.maketrans({c: f"%{ord(c):02X}" for c in "[]()\r\n"})


def is_valid_uri(text: str) -> bool:
    """
    Check that text is a syntactically valid URI reference.

    Relative references ("docs/a.pdf") are accepted; anything with whitespace,
    characters outside RFC 3986 or broken percent escapes is not.
    """
    if not text or not _URI_CHARS.match(text) or _BAD_ESCAPE.search(text):
        return False
    try:
        parts = urlsplit(text)
    except ValueError:  # e.g. unbalanced IPv6 brackets
        return False
    if text.startswith(":") or (":" in text.split("/", 1)[0] and not _SCHEME.match(text)):
        return False
    return bool(parts.scheme or parts.netloc or parts.path or parts.query or parts.fragment)


def _link_safe(name: str) -> str:
    return name.translate(_LABEL_ESCAPES)


def display_name(url: str) -> str:
    """
    Last non-empty path segment of a URI, percent-decoded.

    Falls back to the host, then to the whole string. Brackets, parentheses
    and line breaks stay escaped so the name can sit inside a link label.

    Examples:
        >>> display_name("https://example.com/files/report.pdf")
        'report.pdf'
        >>> display_name("file:///tmp/my%20notes/")
        'my notes'
        >>> display_name("https://example.com/a%281%29.pdf")
        'a%281%29.pdf'
    """
    parts = urlsplit(url)
    segments = [s for s in parts.path.split("/") if s]
    if segments:
        return _link_safe(unquote(segments[-1]))
    if parts.netloc:
        return _link_safe(parts.netloc)
    return _link_safe(url)


def to_uri(target: str) -> str | None:
    """Accept a URI as-is, or turn an existing local path into a file:// URI."""
    if _SCHEME.match(target) and is_valid_uri(target):
        return target
    p = Path(target).expanduser()
    if p.exists():
        return p.resolve().as_uri()
    return target if is_valid_uri(target) else None
