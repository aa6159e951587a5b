"""Derivación de tokens de autorización (SAPISIDHASH y variantes).

Formato:
- Sin parámetros: ``LABEL sha1("<secret> <origin>")``.
- Con parámetros (lista, aunque esté vacía): ``LABEL <ts>_<sha1>[_<keys>]`` donde
  el hash cubre ``"<values:joined> <ts> <secret> <origin>"`` (o sin valores).
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Sequence

from core.domain.models import AuthParam
from core.interfaces.secret_source import SecretSource
from core.security.origin import is_secure_origin, normalize_origin
from core.security.sha1 import sha1_hex

logger = logging.getLogger(__name__)

# Slots ambientales (variables de sesión) y sus cookies equivalentes.
SID_VARIABLES: tuple[str, ...] = ("__SAPISID", "__APISID", "__3PSAPISID", "__1PSAPISID", "__OVERRIDE_SID")
SID_COOKIES: tuple[str, ...] = ("SAPISID", "APISID", "__Secure-3PAPISID", "__Secure-1PAPISID")


def _hash_blob(
    secret: str,
    origin: str,
    params: Sequence[AuthParam] | None,
    clock: Callable[[], float],
) -> str:
    if params is None:
        return sha1_hex(" ".join([secret, origin]))

    keys = [p.key for p in params]
    values = [p.value for p in params]
    timestamp = str(int(clock()))

    parts = [timestamp, secret, origin]
    if values:
        parts.insert(0, ":".join(values))
    digest = sha1_hex(" ".join(parts))

    result = [timestamp, digest]
    if keys:
        result.append("".join(keys))
    return "_".join(result)


def derive_token(
    secret: str | None,
    origin: str | None,
    label: str | None,
    params: Sequence[AuthParam] | None = None,
    *,
    clock: Callable[[], float] = time.time,
) -> str | None:
    """Build ``label + " " + blob`` or return None if any input is missing."""

    if not secret or not origin or not label:
        return None
    return f"{label} {_hash_blob(secret, origin, params, clock)}"


def _lookup(variables: SecretSource, cookies: SecretSource, variable: str, *cookie_names: str) -> str | None:
    value = variables.get(variable)
    if value:
        return value
    for name in cookie_names:
        value = cookies.get(name)
        if value:
            return value
    return None


def build_authorization(
    page_url: str,
    variables: SecretSource,
    cookies: SecretSource,
    params: Sequence[AuthParam] | None = None,
    *,
    clock: Callable[[], float] = time.time,
) -> str | None:
    """Assemble the full ``authorization`` header for `page_url`.

    Secure origins get up to three tokens (SAPISIDHASH, SAPISID1PHASH,
    SAPISID3PHASH); plain http gets APISIDHASH only. Returns None when no
    session secret is available at all.
    """

    has_secret = any(variables.get(name) for name in SID_VARIABLES) or any(
        cookies.get(name) for name in SID_COOKIES
    )
    if not has_secret:
        logger.debug("No session secret found in variables or cookies")
        return None

    origin = normalize_origin(page_url)
    secure = is_secure_origin(origin)
    tokens: list[str] = []

    if secure:
        primary = _lookup(variables, cookies, "__SAPISID", "SAPISID", "__Secure-3PAPISID")
        label = "SAPISIDHASH"
    else:
        primary = _lookup(variables, cookies, "__APISID", "APISID", "__Secure-3PAPISID")
        label = "APISIDHASH"

    token = derive_token(primary, origin, label, params, clock=clock)
    if token:
        tokens.append(token)

    if secure:
        for variable, cookie, variant in (
            ("__1PSAPISID", "__Secure-1PAPISID", "SAPISID1PHASH"),
            ("__3PSAPISID", "__Secure-3PAPISID", "SAPISID3PHASH"),
        ):
            token = derive_token(_lookup(variables, cookies, variable, cookie), origin, variant, params, clock=clock)
            if token:
                tokens.append(token)

    return " ".join(tokens) if tokens else None
