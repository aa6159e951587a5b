# tests/test_session_secrets.py

import httpx
import pytest

from adapters.session_secrets import (
    CookieJarSecretSource,
    MappingSecretSource,
    cookie_scope,
    load_cookies_file,
    load_session_cookies,
    parse_cookie_header,
)
from core.config import AppSettings
from core.errors import CookieFileError


def test_mapping_source_treats_empty_values_as_missing():
    source = MappingSecretSource({"__SAPISID": "", "__APISID": "abc"})
    assert source.get("__SAPISID") is None
    assert source.get("__APISID") == "abc"
    assert source.get("__OVERRIDE_SID") is None


def test_parse_cookie_header():
    cookies = parse_cookie_header("SAPISID=abc/def; APISID=xyz; broken; __Secure-1PAPISID=one")
    source = CookieJarSecretSource(cookies)
    assert source.get("SAPISID") == "abc/def"
    assert source.get("APISID") == "xyz"
    assert source.get("__Secure-1PAPISID") == "one"
    assert source.get("broken") is None


def test_cookie_source_filters_by_domain():
    cookies = httpx.Cookies()
    cookies.set("SAPISID", "other", domain=".example.org")
    cookies.set("SAPISID", "google", domain=".google.com")
    source = CookieJarSecretSource(cookies, domain="aistudio.google.com")
    assert source.get("SAPISID") == "google"


def test_load_cookies_file(tmp_path):
    path = tmp_path / "cookies.txt"
    path.write_text(
        "# Netscape HTTP Cookie File\n"
        ".google.com\tTRUE\t/\tTRUE\t4102444800\tSAPISID\tfrom-file\n"
        ".google.com\tTRUE\t/\tTRUE\t4102444800\t__Secure-3PAPISID\tthird\n",
        encoding="utf-8",
    )
    source = CookieJarSecretSource(load_cookies_file(path), domain="aistudio.google.com")
    assert source.get("SAPISID") == "from-file"
    assert source.get("__Secure-3PAPISID") == "third"


def test_load_session_cookies_merges_header(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    settings = AppSettings(_env_file=None, cookie_header="SAPISID=hdr")
    source = CookieJarSecretSource(load_session_cookies(settings, domain="aistudio.google.com"))
    assert source.get("SAPISID") == "hdr"


def test_cookie_scope_is_the_parent_domain():
    assert cookie_scope("aistudio.google.com") == ".google.com"
    assert cookie_scope("alkalimakersuite-pa.clients6.google.com") == ".google.com"
    assert cookie_scope("localhost") == "localhost"


def test_scoped_header_cookies_are_sent_to_sibling_hosts():
    cookies = parse_cookie_header("SAPISID=abc", domain=cookie_scope("aistudio.google.com"))
    request = httpx.Request("POST", "https://alkalimakersuite-pa.clients6.google.com/$rpc/x")
    cookies.set_cookie_header(request)
    assert request.headers["cookie"] == "SAPISID=abc"


def test_missing_cookies_file_is_a_bridge_error(tmp_path):
    with pytest.raises(CookieFileError):
        load_cookies_file(tmp_path / "missing.txt")


def test_malformed_cookies_file_is_a_bridge_error(tmp_path):
    path = tmp_path / "cookies.txt"
    path.write_text("not a cookie file\n", encoding="utf-8")
    with pytest.raises(CookieFileError):
        load_cookies_file(path)
