"""Exportación JSON del payload canónico.

Por qué JSON compacto:
- El fichero debe poder enviarse tal cual al servicio (mismo formato que la red).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from core.services.prompt_converter import encode_payload


def export_payload_json(*, payload: Any, output_path: Path) -> Path:
    """Exporta el payload a JSON UTF-8 (compacto, sin reordenar posiciones)."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(encode_payload(payload) + "\n", encoding="utf-8")
    return output_path
