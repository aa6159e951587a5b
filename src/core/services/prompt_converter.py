"""Conversión de documentos de prompt al payload posicional del servicio.

El servicio no usa nombres de campo: cada valor se identifica por su posición
en listas anidadas. Todo el conocimiento de posiciones vive en este módulo.

Reglas:
- Las listas de esquema (y la de configuración) se recortan por el final hasta
  el último valor no nulo; los nulos intermedios se conservan.
- Un documento que no es de ninguno de los dos formatos devuelve `None`; un
  documento reconocido pero mal formado lanza `pydantic.ValidationError`.
"""

from __future__ import annotations

import json
from typing import Any

from core.domain.prompts import (
    GenerateContentRequest,
    ResponseSchema,
    StudioPromptFile,
)

SCHEMA_TYPE_TO_NUMBER: dict[str, int] = {
    "string": 1,
    "number": 2,
    "integer": 3,
    "boolean": 4,
    "array": 5,
    "object": 6,
}

JSON_MIME_TYPE = "application/json"
TEXT_MIME_TYPE = "text/plain"

# Bloque literal que el servicio espera en la posición 7 de la configuración.
CONFIG_PADDING: list[list[int | None]] = [
    [None, None, 7, 1],
    [None, None, 8, 2],
    [None, None, 9, 3],
    [None, None, 10, 4],
    [None, None, 11, 5],
]

MESSAGE_WIDTH = 9
TITLE_WIDTH = 11


def trim_trailing_nulls(values: list[Any]) -> list[Any]:
    """Drop `None` entries after the last non-null one."""

    end = len(values)
    while end > 0 and values[end - 1] is None:
        end -= 1
    return values[:end]


def convert_role(role: str | None) -> str:
    return "model" if role in ("model", "assistant") else "user"


def convert_message(role: str | None, text: str | None) -> list[Any]:
    message: list[Any] = [None] * MESSAGE_WIDTH
    message[0] = text
    message[-1] = convert_role(role)
    return message


def convert_response_schema(schema: ResponseSchema) -> list[Any]:
    """Encode a response schema recursively into its positional form."""

    encoded: list[Any] = [
        SCHEMA_TYPE_TO_NUMBER[schema.type],
        None,
        schema.description,
        schema.nullable,
        schema.enum if schema.type == "string" and schema.enum is not None else None,
        convert_response_schema(schema.items) if schema.type == "array" and schema.items is not None else None,
        (
            [[name, convert_response_schema(child)] for name, child in schema.properties.items()]
            if schema.type == "object" and schema.properties is not None
            else None
        ),
        schema.required if schema.type == "object" and schema.required is not None else None,
    ]
    return trim_trailing_nulls(encoded)


def build_config(
    *,
    temperature: float | None,
    model: str | None,
    top_p: float | None,
    top_k: int | None,
    max_output_tokens: int | None,
    response_mime_type: str | None,
    response_schema: ResponseSchema | None,
) -> list[Any]:
    if response_mime_type is not None:
        mime_type = response_mime_type
    else:
        mime_type = JSON_MIME_TYPE if response_schema is not None else TEXT_MIME_TYPE
    config: list[Any] = [
        temperature,
        None,  # stop sequences
        model,
        None,
        top_p,
        top_k,
        max_output_tokens,
        [list(row) for row in CONFIG_PADDING],
        mime_type,
        0,
        convert_response_schema(response_schema) if response_schema is not None else None,
        None,
        None,
        1,
        0,
        None,
        None,
        0,
        0,
    ]
    return trim_trailing_nulls(config)


def build_title(name: str) -> list[Any]:
    title: list[Any] = [None] * TITLE_WIDTH
    title[0] = name
    title[-1] = []
    return title


def _system_block(instruction: Any) -> list[Any]:
    if instruction is None or instruction == "":
        return []
    return [instruction]


def _assemble(
    name: str,
    config: list[Any],
    system_instruction: Any,
    messages: list[list[Any]] | None,
) -> list[Any]:
    prompt: list[Any] = [None, None, None, config, build_title(name)]
    prompt.extend([None] * 7)
    prompt.append(_system_block(system_instruction))
    # Segundo elemento: el campo de entrada vacío del usuario.
    prompt.append([messages, [convert_message("user", "")]])
    return [prompt]


def convert_api_request(name: str, request: GenerateContentRequest) -> list[Any]:
    generation = request.generation_config
    config = build_config(
        temperature=generation.temperature if generation else None,
        model=f"models/{request.model}" if request.model else None,
        top_p=generation.top_p if generation else None,
        top_k=generation.top_k if generation else None,
        max_output_tokens=generation.max_output_tokens if generation else None,
        response_mime_type=generation.response_mime_type if generation else None,
        response_schema=generation.response_schema if generation else None,
    )
    messages = [
        convert_message(content.role, part.text)
        for content in request.contents
        for part in content.parts
    ]
    return _assemble(name, config, request.system_instruction, messages)


def convert_studio_file(name: str, studio: StudioPromptFile) -> list[Any]:
    settings = studio.run_settings
    config = build_config(
        temperature=settings.temperature if settings else None,
        model=settings.model if settings else None,
        top_p=settings.top_p if settings else None,
        top_k=settings.top_k if settings else None,
        max_output_tokens=settings.max_output_tokens if settings else None,
        response_mime_type=settings.response_mime_type if settings else None,
        response_schema=settings.response_schema if settings else None,
    )
    messages = None
    if studio.chunked_prompt is not None:
        messages = [convert_message(chunk.role, chunk.text) for chunk in studio.chunked_prompt.chunks]
    return _assemble(name, config, studio.system_instruction, messages)


def detect_shape(document: Any) -> str | None:
    """Return "api", "studio" or None."""

    if not isinstance(document, dict):
        return None
    if "generationConfig" in document:
        return "api"
    if "runSettings" in document or "chunkedPrompt" in document:
        return "studio"
    return None


def convert_prompt(name: str, document: Any) -> list[Any] | None:
    """Convert either prompt shape into the canonical payload.

    Returns None when `document` is not a recognized prompt.
    """

    shape = detect_shape(document)
    if shape == "api":
        return convert_api_request(name, GenerateContentRequest.model_validate(document))
    if shape == "studio":
        return convert_studio_file(name, StudioPromptFile.model_validate(document))
    return None


def encode_payload(payload: Any) -> str:
    """Serializa el payload tal como viaja por la red (JSON compacto)."""

    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
