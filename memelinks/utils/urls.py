# memelinks/utils/urls.py
"""
URL canonicalization used for duplicate detection.

Two submissions count as the same link when they agree on scheme, host
and path; query strings and fragments are ignored.
"""

import hashlib
from urllib.parse import urlsplit

ALLOWED_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}


class InvalidURLError(ValueError):
    """Raised when a submitted string is not an acceptable http(s) URL."""


def normalize_url(raw: str) -> str:
    """Return ``scheme://host[:port]/path`` for an http(s) URL.

    Raises InvalidURLError for markup characters, relative or unparsable
    URLs, and schemes other than http/https.
    """
    candidate = raw.strip()
    if "<" in candidate or ">" in candidate:
        raise InvalidURLError("Invalid URL characters")

    try:
        parts = urlsplit(candidate)
        port = parts.port
    except ValueError as e:
        raise InvalidURLError("Invalid URL format") from e

    if not parts.scheme or not parts.netloc:
        raise InvalidURLError("Invalid URL format")
    if parts.scheme not in ALLOWED_SCHEMES:
        raise InvalidURLError("Invalid protocol")

    host = parts.hostname
    if not host:
        raise InvalidURLError("Invalid URL format")
    if ":" in host:
        host = f"[{host}]"  # IPv6 literal
    if port is not None and port != DEFAULT_PORTS[parts.scheme]:
        host = f"{host}:{port}"

    path = parts.path or "/"
    return f"{parts.scheme}://{host}{path}"


def content_hash(normalized_url: str) -> str:
    """sha256 hex digest identifying a normalized URL."""
    return hashlib.sha256(normalized_url.encode("utf-8")).hexdigest()
