"""Pool de API keys con marcador de última clave exitosa.

Estado (por instancia, nunca global):
- `pool`: claves únicas en el orden que devuelve la fuente.
- `last_successful`: última clave que obtuvo respuesta 2xx.
- `service_origin`: base URL del servicio RPC, resuelta una sola vez.

Las mutaciones (carga inicial, refresco) se serializan con un `asyncio.Lock`:
entre dos `await` otra llamada podría leer un pool a medio reemplazar.
"""

from __future__ import annotations

import asyncio
import logging

from core.errors import MissingCapabilityError, NoCredentialsError, mask_key
from core.interfaces.credential_source import CredentialSource

logger = logging.getLogger(__name__)


def _unique(keys: list[str]) -> list[str]:
    return list(dict.fromkeys(keys))


class KeyPoolManager:
    def __init__(self, source: CredentialSource) -> None:
        if not isinstance(source, CredentialSource):
            raise MissingCapabilityError(
                f"{type(source).__name__} does not provide discover_credentials/discover_service_origin"
            )
        self._source = source
        self._pool: list[str] | None = None
        self._last_successful: str | None = None
        self._service_origin: str | None = None
        self._lock = asyncio.Lock()

    @property
    def pool(self) -> list[str]:
        return list(self._pool or [])

    @property
    def last_successful(self) -> str | None:
        return self._last_successful

    async def get_or_init(self) -> list[str]:
        """Devuelve el pool, descubriéndolo en el primer uso."""

        async with self._lock:
            if not self._pool:
                keys = _unique(await self._source.discover_credentials())
                logger.info("Loaded %d API keys", len(keys))
                if not keys:
                    raise NoCredentialsError("No API keys found in the page scripts")
                self._pool = keys
            return list(self._pool)

    def ordered(self) -> list[str]:
        """Pool with the last successful key moved to the front."""

        keys = list(self._pool or [])
        marked = self._last_successful
        if marked is not None and marked in keys:
            keys.remove(marked)
            keys.insert(0, marked)
        return keys

    def mark_success(self, key: str) -> None:
        """Remember `key` as trusted; keys outside the current pool are not marked."""

        if self._pool and key in self._pool:
            self._last_successful = key
        else:
            logger.debug("Key %s succeeded but is no longer pooled; marker left unset", mask_key(key))

    async def refresh(self, excluding: str) -> list[str]:
        """Rediscover keys without `excluding`, replace the pool and clear the marker.

        The marker is cleared before discovery, so a failed discovery leaves the
        pool untouched but no longer trusts `excluding`.
        """

        logger.warning("Previously successful key %s failed, refreshing API keys", mask_key(excluding))
        async with self._lock:
            self._last_successful = None
            keys = [k for k in _unique(await self._source.discover_credentials([excluding])) if k != excluding]
            self._pool = keys
            logger.info("Refreshed pool: %d API keys", len(keys))
            return list(keys)

    async def service_origin(self) -> str:
        """Origen del servicio RPC (cacheado tras la primera resolución)."""

        if self._service_origin is None:
            async with self._lock:
                if self._service_origin is None:
                    self._service_origin = await self._source.discover_service_origin()
                    logger.debug("Resolved service origin %s", self._service_origin)
        return self._service_origin
