"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP/RPC/cookies) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

RPC_SERVICE_PATH = "/$rpc/google.internal.alkali.applications.makersuite.v1.MakerSuiteService"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "studio-bridge"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "studio-bridge"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "studio-bridge"
    return Path.home() / ".config" / "studio-bridge"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario.

    Solo para ajustes no secretos: los secretos de sesión nunca se persisten.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# studio-bridge user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="STUDIO_BRIDGE_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    attempt_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Timeout por intento de API key; si falta se usa http_timeout_seconds.",
    )
    user_agent: str = Field(
        default="Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36",
        min_length=1,
        description="User-Agent para cargar la página del servicio.",
    )

    page_url: str = Field(
        default="https://aistudio.google.com",
        min_length=8,
        description="Página cuyo origen firma la autorización y cuyos scripts contienen las API keys.",
    )
    rpc_path: str = Field(
        default=RPC_SERVICE_PATH,
        min_length=1,
        description="Ruta fija del servicio RPC (se le añade el nombre de la operación).",
    )
    content_type: str = Field(
        default="application/json+protobuf",
        description="Content-Type de las llamadas RPC.",
    )
    client_user_agent: str = Field(
        default="grpc-web-javascript/0.1",
        description="Valor fijo de la cabecera x-user-agent.",
    )

    cookies_file: Path | None = Field(
        default=None,
        description="Ruta a un cookies.txt (formato Netscape) exportado del navegador.",
    )
    cookie_header: str | None = Field(
        default=None,
        description="Cabecera Cookie copiada del navegador (alternativa a cookies_file).",
    )
    session_variables: dict[str, str] = Field(
        default_factory=dict,
        description="Variables de sesión ambientales (p.ej. {'__SAPISID': '...'}), en JSON.",
    )

    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging para la CLI.",
    )
