"""Contrato de lectura de secretos de sesión."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SecretSource(Protocol):
    """Lookup por nombre de slot (variable ambiental o cookie)."""

    def get(self, name: str) -> str | None:
        ...
