# tests/test_origin.py

import pytest

from core.errors import InvalidOriginError
from core.security.origin import is_secure_origin, normalize_origin


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com", "https://example.com"),
        ("HTTPS://Example.COM/Some/Path", "https://example.com"),
        ("https://example.com/path?query=1#frag", "https://example.com"),
        ("https://example.com:443/x", "https://example.com"),
        ("https://example.com:8443/x", "https://example.com:8443"),
        ("http://localhost:80/", "http://localhost"),
        ("http://localhost:8080/app", "http://localhost:8080"),
        ("blob:https://aistudio.google.com/1234-5678", "https://aistudio.google.com"),
        ("chrome-extension://abcdef/popup.html", "chrome-extension://abcdef"),
        ("chrome-extension://abcdef:99/popup.html", "chrome-extension://abcdef"),
    ],
)
def test_normalize_origin(url, expected):
    assert normalize_origin(url) == expected


def test_about_blank_resolves_to_self_origin():
    assert normalize_origin("about:blank", self_origin="https://aistudio.google.com") == "https://aistudio.google.com"
    assert normalize_origin("about:srcdoc", self_origin="https://aistudio.google.com") == "https://aistudio.google.com"


def test_protocol_relative_takes_scheme_from_self_origin():
    assert normalize_origin("//cdn.example.com/x.js", self_origin="https://aistudio.google.com") == "https://cdn.example.com"


def test_relative_url_resolves_to_self_origin():
    assert normalize_origin("/prompts/new", self_origin="https://aistudio.google.com:8443") == "https://aistudio.google.com:8443"


def test_relative_url_without_base_is_invalid():
    with pytest.raises(InvalidOriginError):
        normalize_origin("/prompts/new")


def test_disallowed_scheme_is_rejected():
    with pytest.raises(InvalidOriginError):
        normalize_origin("ftp://example.com/file")


def test_empty_url_normalizes_to_empty():
    assert normalize_origin("") == ""


@pytest.mark.parametrize(
    "origin, secure",
    [
        ("https://aistudio.google.com", True),
        ("http://localhost:8080", False),
        ("chrome-extension://abcdef", True),
        ("moz-extension://abcdef", True),
        ("chrome-untrusted://new-tab-page", True),
        ("file://", False),
    ],
)
def test_is_secure_origin(origin, secure):
    assert is_secure_origin(origin) is secure
