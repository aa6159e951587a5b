"""Descubrimiento de API keys y del origen RPC en los scripts de la página.

Implementa `core.interfaces.CredentialSource` de dos formas:
- `StaticPageSource`: HTML ya capturado (tests, ficheros guardados).
- `RemotePageSource`: descarga la página en cada descubrimiento, de modo que un
  refresco del pool ve claves rotadas.

Nota:
- Las claves se devuelven en orden inverso al de aparición: la última definida
  suele ser la que funciona.
"""

from __future__ import annotations

import logging
import re
from typing import Collection, Iterable

import httpx

from adapters.http_client import build_async_client, extract_script_texts
from core.config import AppSettings
from core.errors import OriginNotFoundError, PageFetchError

logger = logging.getLogger(__name__)

API_KEY_RE = re.compile(r"[`'\"](AIzaSy[^\s`'\"]*)[`'\"]")
SERVICE_ORIGIN_RE = re.compile(r"[`'\"](https://alkalimakersuite[^`'\"]*\.google\.com)[`'\"]")


def find_api_keys(scripts: Iterable[str], excluding: Collection[str] = ()) -> list[str]:
    found: dict[str, None] = {}
    for script in scripts:
        for match in API_KEY_RE.finditer(script):
            key = match.group(1)
            if key not in excluding:
                found.setdefault(key, None)
    return list(reversed(list(found)))


def find_service_origin(scripts: Iterable[str]) -> str:
    for script in scripts:
        match = SERVICE_ORIGIN_RE.search(script)
        if match:
            return match.group(1)
    raise OriginNotFoundError("No API URL found in the page scripts")


class StaticPageSource:
    """Fuente sobre un HTML fijo (o una lista de scripts ya extraídos)."""

    def __init__(self, html: str = "", *, scripts: list[str] | None = None) -> None:
        self._scripts = scripts if scripts is not None else extract_script_texts(html)

    async def discover_credentials(self, excluding: Collection[str] = ()) -> list[str]:
        return find_api_keys(self._scripts, excluding)

    async def discover_service_origin(self) -> str:
        return find_service_origin(self._scripts)


class RemotePageSource:
    """Descarga `page_url` con las cookies de sesión y escanea sus scripts."""

    def __init__(
        self,
        page_url: str,
        settings: AppSettings | None = None,
        *,
        cookies: httpx.Cookies | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._page_url = page_url
        self._settings = settings or AppSettings()
        self._cookies = cookies
        self._transport = transport

    async def _fetch_scripts(self) -> list[str]:
        try:
            async with build_async_client(self._settings, cookies=self._cookies, transport=self._transport) as client:
                response = await client.get(self._page_url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise PageFetchError(f"Could not load {self._page_url}: {type(exc).__name__}: {exc}") from exc
        scripts = extract_script_texts(response.text)
        logger.debug("Fetched %s: %d inline scripts", self._page_url, len(scripts))
        return scripts

    async def discover_credentials(self, excluding: Collection[str] = ()) -> list[str]:
        return find_api_keys(await self._fetch_scripts(), excluding)

    async def discover_service_origin(self) -> str:
        return find_service_origin(await self._fetch_scripts())
