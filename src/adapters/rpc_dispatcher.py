"""Dispatcher RPC con rotación de API keys.

Máquina de estados por llamada::

    Pending -> Trying(i) -> Succeeded
                         -> Refreshing -> Trying(0)   (pool nuevo no vacío)
                         -> Trying(i + 1)
                         -> Exhausted                 (i fuera de rango)

Reglas:
- Los intentos son estrictamente secuenciales (el servicio limita por clave).
- Un error de transporte (sin respuesta) cuenta igual que un status no 2xx.
- Si falla la clave marcada como última exitosa, se refresca el pool sin ella
  y, si el pool nuevo no está vacío, se reinicia desde su índice 0.
- Un refresco que falla (p.ej. la página no carga) cuenta como refresco vacío:
  se sigue con la clave siguiente de la lista actual.
- El header `authorization` se deriva de nuevo en cada intento (lleva timestamp).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

import httpx

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import CreatedPrompt
from core.errors import (
    AllCredentialsExhaustedError,
    BridgeError,
    MissingCapabilityError,
    NotAuthenticatedError,
    TransmissionFailure,
    UnrecognizedDocumentError,
    mask_key,
)
from core.services.key_pool import KeyPoolManager
from core.services.prompt_converter import convert_prompt, encode_payload

logger = logging.getLogger(__name__)

Authorizer = Callable[[], str | None]

CREATE_PROMPT = "CreatePrompt"
LIST_INCIDENTS_HISTORY = "ListIncidentsHistory"


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class RpcDispatcher:
    """Envía operaciones RPC probando las API keys del pool en orden."""

    def __init__(
        self,
        key_pool: KeyPoolManager,
        authorizer: Authorizer,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        cookies: httpx.Cookies | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        attempt_timeout: float | None = None,
    ) -> None:
        if not callable(authorizer):
            raise MissingCapabilityError("authorizer is not callable")
        self._pool = key_pool
        self._authorizer = authorizer
        self._settings = settings or AppSettings()
        self._client = client
        self._cookies = cookies
        self._transport = transport
        self._attempt_timeout = attempt_timeout or self._settings.attempt_timeout_seconds

    @property
    def key_pool(self) -> KeyPoolManager:
        return self._pool

    def _headers(self, key: str) -> dict[str, str]:
        authorization = self._authorizer()
        if not authorization:
            raise NotAuthenticatedError("No auth tokens found (missing SAPISID/APISID session secrets)")
        return {
            "authorization": authorization,
            "content-type": self._settings.content_type,
            "x-goog-api-key": key,
            "x-user-agent": self._settings.client_user_agent,
        }

    async def _attempt(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        body: str,
        key: str,
    ) -> httpx.Response | TransmissionFailure:
        headers = self._headers(key)
        timeout = httpx.Timeout(self._attempt_timeout) if self._attempt_timeout else httpx.USE_CLIENT_DEFAULT
        try:
            response = await client.request(method, url, content=body, headers=headers, timeout=timeout)
        except httpx.HTTPError as exc:
            detail = str(exc)
            reason = f"{type(exc).__name__}: {detail}" if detail else type(exc).__name__
            return TransmissionFailure(key=key, reason=reason)
        if _is_success(response.status_code):
            return response
        return TransmissionFailure(key=key, status_code=response.status_code, reason=response.reason_phrase)

    async def _run(self, client: httpx.AsyncClient, method: str, url: str, body: str) -> str:
        await self._pool.get_or_init()
        keys = self._pool.ordered()
        failures: list[TransmissionFailure] = []
        index = 0

        while index < len(keys):
            key = keys[index]
            outcome = await self._attempt(client, method, url, body, key)

            if isinstance(outcome, httpx.Response):
                self._pool.mark_success(key)
                logger.debug("Request succeeded with API key %s", mask_key(key))
                return outcome.text

            failures.append(outcome)
            logger.warning("Error with API key %d/%d: %s", index + 1, len(keys), outcome.describe())

            if key == self._pool.last_successful:
                try:
                    fresh = await self._pool.refresh(excluding=key)
                except (BridgeError, httpx.HTTPError) as exc:
                    logger.warning("Key refresh failed, continuing with the current list: %s", exc)
                    fresh = []
                if fresh:
                    keys = fresh
                    index = 0
                    continue

            index += 1

        raise AllCredentialsExhaustedError(failures)

    async def send(self, operation: str, method: str = "POST", data: Any = None) -> str:
        """Send `data` (JSON-serialized) to `operation`; returns the raw body."""

        origin = await self._pool.service_origin()
        url = f"{origin}{self._settings.rpc_path}/{operation}"
        body = encode_payload(data)

        if self._client is not None:
            return await self._run(self._client, method, url, body)
        async with build_async_client(self._settings, cookies=self._cookies, transport=self._transport) as client:
            return await self._run(client, method, url, body)

    async def create_prompt(self, name: str, document: Any) -> CreatedPrompt:
        payload = convert_prompt(name, document)
        if payload is None:
            raise UnrecognizedDocumentError("This JSON format is not recognized as a valid prompt")
        text = await self.send(CREATE_PROMPT, "POST", payload)
        raw = json.loads(text)
        path = raw[0] if isinstance(raw, list) and raw and isinstance(raw[0], str) else None
        return CreatedPrompt(path=path, raw=raw)

    async def list_incidents(self) -> Any:
        return json.loads(await self.send(LIST_INCIDENTS_HISTORY, "POST", []))
