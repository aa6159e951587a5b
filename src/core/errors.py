"""Errores del Core.

Por qué una jerarquía propia:
- La CLI puede capturar `BridgeError` y mostrar un mensaje limpio.
- Los fallos por credencial (recuperables) se distinguen de los fatales.
"""

from __future__ import annotations

from dataclasses import dataclass


class BridgeError(Exception):
    """Base de todos los errores controlados de studio-bridge."""


class MissingCapabilityError(BridgeError):
    """A required collaborator (discovery, authorization) is not available."""


class NoCredentialsError(BridgeError):
    """Discovery returned no API keys."""


class OriginNotFoundError(BridgeError):
    """The RPC service origin could not be located in the page scripts."""


class PageFetchError(BridgeError):
    """The page holding the API keys could not be downloaded."""


class NotAuthenticatedError(BridgeError):
    """No session secret was found to build the authorization header."""


class CookieFileError(BridgeError):
    """The configured cookies.txt is missing or unreadable."""


class UnrecognizedDocumentError(BridgeError):
    """The document is neither an API request nor a studio prompt file."""


class InvalidOriginError(BridgeError, ValueError):
    """The URL cannot be normalized into an authorization origin."""


class HashFinalizedError(BridgeError, RuntimeError):
    """The digest was already finalized; call `reset()` before reusing it."""


@dataclass(eq=False)
class TransmissionFailure(BridgeError):
    """One failed attempt with a given API key."""

    key: str
    status_code: int | None = None
    reason: str = ""

    def describe(self) -> str:
        if self.status_code is not None:
            return f"{mask_key(self.key)}: HTTP {self.status_code} {self.reason}".rstrip()
        return f"{mask_key(self.key)}: {self.reason or 'no response'}"

    def __str__(self) -> str:
        return self.describe()


class AllCredentialsExhaustedError(BridgeError):
    """Every candidate API key was tried without a successful response."""

    def __init__(self, attempts: list[TransmissionFailure]) -> None:
        self.attempts = list(attempts)
        details = "; ".join(a.describe() for a in self.attempts) or "no keys tried"
        super().__init__(
            f"All API keys failed: unable to complete the request after trying "
            f"{len(self.attempts)} attempt(s) ({details})"
        )


def mask_key(value: str, visible: int = 10) -> str:
    """Recorta una clave para logs (nunca se registra completa)."""

    if len(value) <= visible:
        return value[:4] + "…"
    return value[:visible] + "…"
