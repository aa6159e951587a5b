"""Autorización de sesión.

Por qué aquí:
- SHA-1 propio, normalización de origen y formato de tokens son puros (sin I/O).
- Los adaptadores solo aportan los secretos; el Core decide cómo firmar.
"""

from core.security.origin import is_secure_origin, normalize_origin
from core.security.sha1 import Sha1, sha1_hex
from core.security.tokens import build_authorization, derive_token

__all__ = [
    "Sha1",
    "build_authorization",
    "derive_token",
    "is_secure_origin",
    "normalize_origin",
    "sha1_hex",
]
