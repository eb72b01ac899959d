# tests/unit/test_url_normalizer.py

import hashlib

import pytest

from memelinks.utils.urls import InvalidURLError, content_hash, normalize_url


def test_query_and_fragment_are_dropped():
    assert normalize_url("http://example.com/meme?x=1#top") == "http://example.com/meme"


def test_variants_share_one_hash():
    a = content_hash(normalize_url("http://example.com/meme?x=1"))
    b = content_hash(normalize_url("http://example.com/meme?x=2#frag"))
    assert a == b
    assert a == hashlib.sha256(b"http://example.com/meme").hexdigest()


def test_surrounding_whitespace_is_ignored():
    assert normalize_url("  https://example.com/a  ") == "https://example.com/a"


def test_scheme_and_host_are_lowercased_path_is_not():
    assert normalize_url("HTTPS://Example.COM/Meme") == "https://example.com/Meme"


def test_empty_path_becomes_slash():
    assert normalize_url("https://example.com") == "https://example.com/"
    assert normalize_url("https://example.com?q=1") == "https://example.com/"


def test_trailing_slash_is_preserved():
    assert normalize_url("https://example.com/a/") == "https://example.com/a/"


def test_port_kept_unless_default():
    assert normalize_url("http://example.com:8080/a") == "http://example.com:8080/a"
    assert normalize_url("http://example.com:80/a") == "http://example.com/a"
    assert normalize_url("https://example.com:443/a") == "https://example.com/a"


def test_userinfo_is_dropped():
    assert normalize_url("https://user:pw@example.com/a") == "https://example.com/a"


def test_ipv6_host_keeps_brackets():
    assert normalize_url("http://[::1]:8000/x") == "http://[::1]:8000/x"


@pytest.mark.parametrize("raw", [
    "ftp://example.com/file",
    "javascript:alert(1)",
    "mailto:someone@example.com",
    "file:///etc/passwd",
])
def test_non_http_schemes_are_rejected(raw):
    with pytest.raises(InvalidURLError):
        normalize_url(raw)


@pytest.mark.parametrize("raw", [
    "example.com/meme",
    "/relative/path",
    "not a url",
    "http://",
    "http://example.com:notaport/",
])
def test_relative_or_malformed_urls_are_rejected(raw):
    with pytest.raises(InvalidURLError):
        normalize_url(raw)


def test_markup_characters_are_rejected():
    with pytest.raises(InvalidURLError):
        normalize_url("http://example.com/<script>")
    with pytest.raises(InvalidURLError):
        normalize_url("http://example.com/a>b")
