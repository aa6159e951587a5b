"""Formatos de entrada de prompts.

Dos formas de documento describen el mismo prompt:
- Petición de API (`generateContent`): `generationConfig` + `contents[].parts[]`.
- Fichero de estudio: `runSettings` + `chunkedPrompt.chunks[]`.

Los modelos ignoran campos desconocidos (safety settings, tokenCount, ...) y
solo validan lo que el conversor necesita.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.config import ConfigDict

SCHEMA_TYPES: tuple[str, ...] = ("string", "number", "integer", "boolean", "array", "object")


class ResponseSchema(BaseModel):
    """Subset of the OpenAPI-like schema accepted for structured output."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str
    description: str | None = None
    nullable: bool | None = None
    enum: list[str] | None = None
    items: ResponseSchema | None = None
    properties: dict[str, ResponseSchema] | None = None
    required: list[str] | None = None

    @field_validator("type")
    @classmethod
    def _normalize_type(cls, value: str) -> str:
        lowered = value.lower()
        if lowered not in SCHEMA_TYPES:
            raise ValueError(f"unsupported schema type: {value!r}")
        return lowered

    @model_validator(mode="after")
    def _check_children(self) -> ResponseSchema:
        if self.type == "array" and self.items is None:
            raise ValueError("array schema requires 'items'")
        if self.type == "object" and self.properties is None:
            raise ValueError("object schema requires 'properties'")
        return self


class GenerationConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    temperature: int | float | None = None
    top_p: int | float | None = Field(default=None, alias="topP")
    top_k: int | None = Field(default=None, alias="topK")
    max_output_tokens: int | None = Field(default=None, alias="maxOutputTokens")
    stop_sequences: list[str] | None = Field(default=None, alias="stopSequences")
    response_mime_type: str | None = Field(default=None, alias="responseMimeType")
    response_schema: ResponseSchema | None = Field(default=None, alias="responseSchema")


class Part(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str | None = None


class Content(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str = "user"
    parts: list[Part] = Field(default_factory=list)


class GenerateContentRequest(BaseModel):
    """API request shape (marker: `generationConfig`)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    model: str | None = None
    contents: list[Content] = Field(default_factory=list)
    system_instruction: Any = Field(default=None, alias="systemInstruction")
    generation_config: GenerationConfig | None = Field(default=None, alias="generationConfig")


class RunSettings(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    temperature: int | float | None = None
    model: str | None = None
    top_p: int | float | None = Field(default=None, alias="topP")
    top_k: int | None = Field(default=None, alias="topK")
    max_output_tokens: int | None = Field(default=None, alias="maxOutputTokens")
    end_tokens: list[str] | None = Field(default=None, alias="endTokens")
    response_mime_type: str | None = Field(default=None, alias="responseMimeType")
    response_schema: ResponseSchema | None = Field(default=None, alias="responseSchema")


class ChunkedMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    role: str = "user"
    text: str | None = None
    token_count: int | None = Field(default=None, alias="tokenCount")


class ChunkedPrompt(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    chunks: list[ChunkedMessage] = Field(default_factory=list)
    pending_inputs: list[ChunkedMessage] = Field(default_factory=list, alias="pendingInputs")


class StudioPromptFile(BaseModel):
    """Studio file shape (markers: `runSettings` / `chunkedPrompt`)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    run_settings: RunSettings | None = Field(default=None, alias="runSettings")
    system_instruction: Any = Field(default=None, alias="systemInstruction")
    chunked_prompt: ChunkedPrompt | None = Field(default=None, alias="chunkedPrompt")
