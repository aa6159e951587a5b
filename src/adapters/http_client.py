"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y cookies para la página y para el servicio RPC.
- Facilita testeo: se puede sustituir el transporte por `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx
from bs4 import BeautifulSoup

from core.config import AppSettings


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    cookies: httpx.Cookies | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que página y RPC se comporten igual.
    - Las cookies de sesión viajan en todas las peticiones (equivalente a
      `withCredentials` en el navegador).
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        cookies=cookies,
        transport=transport,
    )


def extract_script_texts(html: str) -> list[str]:
    """Devuelve el contenido de cada `<script>` del documento, en orden.

    Solo interesan scripts embebidos: los `<script src=...>` vacíos se omiten.
    """

    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser")
    texts: list[str] = []
    for tag in soup.find_all("script"):
        text = tag.string if tag.string is not None else tag.get_text()
        if text:
            texts.append(str(text))
    return texts
