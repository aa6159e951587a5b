"""Contrato de descubrimiento de credenciales.

Por qué Protocol:
- El Core no sabe de dónde salen las API keys (HTML capturado, página remota,
  navegador); solo depende de estas dos capacidades.
- Permite sustituir la fuente por un doble en tests sin herencia.
"""

from __future__ import annotations

from typing import Collection, Protocol, runtime_checkable


@runtime_checkable
class CredentialSource(Protocol):
    """Contrato mínimo para localizar API keys y el origen del servicio.

    Reglas de diseño:
    - Ambos métodos son asíncronos porque típicamente hacen I/O (HTTP).
    - `discover_credentials` devuelve claves únicas, la última descubierta primero.
    - `discover_service_origin` lanza `OriginNotFoundError` si no hay coincidencia.
    """

    async def discover_credentials(self, excluding: Collection[str] = ()) -> list[str]:
        ...

    async def discover_service_origin(self) -> str:
        ...
