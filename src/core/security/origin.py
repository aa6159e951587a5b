"""Normalización del origen usado para firmar la autorización.

El servicio remoto recalcula el hash con su propia vista del origen, así que
cualquier diferencia (mayúsculas, puerto por defecto, path) invalida el token.
"""

from __future__ import annotations

import re

from core.errors import InvalidOriginError

ALLOWED_SCHEMES: frozenset[str] = frozenset(
    {
        "http",
        "https",
        "chrome-extension",
        "moz-extension",
        "file",
        "android-app",
        "chrome-search",
        "chrome-untrusted",
        "chrome",
        "app",
        "devtools",
    }
)

_DEFAULT_PORTS = {"http": "80", "https": "443"}

_SECURE_PREFIXES: tuple[str, ...] = (
    "https:",
    "chrome-extension:",
    "chrome-untrusted://new-tab-page",
    "moz-extension:",
)

_SPECIAL_ABOUT_RE = re.compile(r"^about:(?:blank|srcdoc)$")
_HAS_SCHEME_RE = re.compile(r"^[\w\-]*://")


def normalize_origin(url: str, *, self_origin: str | None = None) -> str:
    """Reduce `url` to `scheme://host[:port]`.

    `self_origin` plays the role of the caller's own location: it replaces
    `about:blank`/`about:srcdoc`, supplies the scheme of protocol-relative
    URLs and stands in for relative ones.
    """

    if not url:
        return ""

    if _SPECIAL_ABOUT_RE.match(url):
        return self_origin or ""

    if url.startswith("blob:"):
        url = url[len("blob:") :]

    url = url.split("#", 1)[0].split("?", 1)[0].lower()

    if url.startswith("//"):
        if not self_origin or "://" not in self_origin:
            raise InvalidOriginError(f"Protocol-relative URL without a base origin: {url}")
        url = self_origin.split("://", 1)[0].lower() + ":" + url

    if not _HAS_SCHEME_RE.match(url):
        if not self_origin:
            raise InvalidOriginError(f"Invalid URL: {url}")
        url = self_origin.lower()

    scheme, _, rest = url.partition("://")
    if not scheme:
        raise InvalidOriginError(f"Invalid URL: {url}")
    if scheme not in ALLOWED_SCHEMES:
        raise InvalidOriginError(f"Invalid protocol: {scheme}")

    host = rest.split("/", 1)[0]
    port_suffix = ""
    if ":" in host:
        host, port = host.split(":", 1)
        default = _DEFAULT_PORTS.get(scheme)
        if default is not None and port != default:
            port_suffix = ":" + port

    return f"{scheme}://{host}{port_suffix}"


def is_secure_origin(origin: str) -> bool:
    """True para orígenes que usan las variantes SAPISID (https y extensiones)."""

    return origin.startswith(_SECURE_PREFIXES)
