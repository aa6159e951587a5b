"""Fuentes de secretos de sesión (implementan `core.interfaces.SecretSource`).

Dos superficies:
- Variables ambientales de sesión (mapeo nombre -> valor).
- Cookies (nombre/valor con dominio, path y expiración), vía `httpx.Cookies`.

Los secretos solo se leen; nunca se escriben a disco.
"""

from __future__ import annotations

import logging
from http.cookiejar import MozillaCookieJar
from pathlib import Path
from typing import Mapping

import httpx

from core.config import AppSettings
from core.errors import CookieFileError

logger = logging.getLogger(__name__)


class MappingSecretSource:
    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values = dict(values or {})

    def get(self, name: str) -> str | None:
        return self._values.get(name) or None


class CookieJarSecretSource:
    """Lookup de cookies, opcionalmente restringido a un dominio."""

    def __init__(self, cookies: httpx.Cookies, *, domain: str | None = None) -> None:
        self._cookies = cookies
        self._domain = domain

    @property
    def cookies(self) -> httpx.Cookies:
        return self._cookies

    def get(self, name: str) -> str | None:
        for cookie in self._cookies.jar:
            if cookie.name != name:
                continue
            if self._domain and not _domain_matches(self._domain, cookie.domain):
                continue
            return cookie.value
        return None


def _domain_matches(host: str, cookie_domain: str) -> bool:
    cookie_domain = cookie_domain.lstrip(".").lower()
    host = host.lower()
    return not cookie_domain or host == cookie_domain or host.endswith("." + cookie_domain)


def cookie_scope(host: str) -> str:
    """Parent domain shared by the page and the RPC host (`aistudio.google.com` -> `.google.com`)."""

    labels = [label for label in host.lower().split(".") if label]
    if len(labels) <= 2:
        return ".".join(labels)
    return "." + ".".join(labels[-2:])


def parse_cookie_header(header: str, *, domain: str = "") -> httpx.Cookies:
    """Convierte ``"A=1; B=2"`` (cabecera Cookie del navegador) en `httpx.Cookies`.

    `domain` debe ser el dominio padre (ver `cookie_scope`) para que las cookies
    viajen tanto a la página como al host RPC.
    """

    cookies = httpx.Cookies()
    for chunk in header.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        name, sep, value = chunk.partition("=")
        if not sep:
            continue
        cookies.set(name.strip(), value.strip(), domain=domain)
    return cookies


def load_cookies_file(path: Path) -> httpx.Cookies:
    """Carga un cookies.txt (formato Netscape) exportado del navegador."""

    jar = MozillaCookieJar(str(path))
    try:
        jar.load(ignore_discard=True, ignore_expires=False)
    except OSError as exc:
        raise CookieFileError(f"Cannot load cookies file {path}: {exc}") from exc
    logger.debug("Loaded %d cookies from %s", len(jar), path)
    return httpx.Cookies(jar)


def load_session_cookies(settings: AppSettings, *, domain: str = "") -> httpx.Cookies:
    cookies = httpx.Cookies()
    if settings.cookies_file is not None:
        cookies.update(load_cookies_file(settings.cookies_file))
    if settings.cookie_header:
        cookies.update(parse_cookie_header(settings.cookie_header, domain=domain))
    return cookies
