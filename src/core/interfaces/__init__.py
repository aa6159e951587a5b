"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- Permite invertir dependencias: el Core depende de abstracciones.
"""

from core.interfaces.credential_source import CredentialSource
from core.interfaces.secret_source import SecretSource

__all__ = ["CredentialSource", "SecretSource"]
