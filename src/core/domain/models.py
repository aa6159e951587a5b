"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Facilita la serialización de resultados para la CLI (`--json`).

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class AuthParam(BaseModel):
    """Parámetro con clave para las variantes de token con timestamp."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Clave; las claves se concatenan al final del token.")
    value: str = Field(default="", description="Valor incluido en el hash (unido con ':').")


class CreatedPrompt(BaseModel):
    """Resultado de `CreatePrompt`.

    Por qué existe:
    - La respuesta es posicional; el primer elemento es la ruta del prompt creado.
    """

    path: str | None = Field(
        default=None,
        description="Ruta relativa del prompt creado (p.ej. 'prompts/abc123').",
    )
    raw: Any = Field(
        default=None,
        description="Respuesta JSON completa, para auditoría.",
    )

    def url(self, base_url: str) -> str | None:
        if not self.path:
            return None
        return base_url.rstrip("/") + "/" + self.path.lstrip("/")


class SystemStatus(str, Enum):
    """Overall service health derived from the incidents history."""

    OPERATIONAL = "operational"
    PARTIAL_OUTAGE = "partial_outage"
    TOTAL_OUTAGE = "total_outage"


class ActiveIncident(BaseModel):
    platform_id: int | None = Field(default=None, description="Identificador numérico de la plataforma.")
    platform_name: str = Field(..., description="Nombre legible de la plataforma.")
    incident_name: str = Field(default="", description="Título del incidente.")
    description: str = Field(default="", description="Último estado + mensaje.")
    severity: int | None = Field(default=None, description="1 = parcial; otro valor = total.")
    timestamp: datetime | None = Field(default=None, description="Momento de la última actualización.")


class ServiceStatusReport(BaseModel):
    status: SystemStatus = Field(default=SystemStatus.OPERATIONAL)
    incidents: list[ActiveIncident] = Field(default_factory=list)
