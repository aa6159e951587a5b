"""Session wiring and high-level flows.

This module assembles the collaborators (cookies, secret sources, credential
source, key pool, dispatcher) from `AppSettings`, so the CLI only deals with
arguments and presentation. Every `BridgeSession` owns its own key pool and
cached service origin; nothing is shared through module globals.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import httpx

from adapters.rpc_dispatcher import RpcDispatcher
from adapters.script_scanner import RemotePageSource
from adapters.session_secrets import (
    CookieJarSecretSource,
    MappingSecretSource,
    cookie_scope,
    load_session_cookies,
)
from core.config import AppSettings
from core.domain.models import AuthParam, CreatedPrompt, ServiceStatusReport
from core.interfaces.credential_source import CredentialSource
from core.interfaces.secret_source import SecretSource
from core.security.tokens import build_authorization
from core.services.key_pool import KeyPoolManager
from core.services.service_status import determine_system_status

logger = logging.getLogger(__name__)

DEFAULT_PROMPT_NAME = "Imported Prompt"


@dataclass
class BridgeSession:
    """Everything one process needs to talk to the RPC service."""

    settings: AppSettings
    variables: SecretSource
    cookies: CookieJarSecretSource
    key_pool: KeyPoolManager
    dispatcher: RpcDispatcher
    auth_params: list[AuthParam] | None = field(default_factory=list)

    def authorization(self) -> str | None:
        return build_authorization(self.settings.page_url, self.variables, self.cookies, self.auth_params)


def build_session(
    settings: AppSettings | None = None,
    *,
    source: CredentialSource | None = None,
    cookies: httpx.Cookies | None = None,
    client: httpx.AsyncClient | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    auth_params: list[AuthParam] | None = None,
) -> BridgeSession:
    """Build a session from settings; `source`/`cookies`/`client`/`transport` override the defaults.

    Header cookies are scoped to the parent domain of the page so the same jar
    authenticates both the page download and the RPC host.

    `auth_params` defaults to an empty list, which selects the timestamped
    token variant the web client sends for RPC calls.
    """

    settings = settings or AppSettings()
    host = urlsplit(settings.page_url).hostname or ""
    jar = cookies if cookies is not None else load_session_cookies(settings, domain=cookie_scope(host))

    variables = MappingSecretSource(settings.session_variables)
    cookie_source = CookieJarSecretSource(jar, domain=host or None)
    source = source or RemotePageSource(settings.page_url, settings, cookies=jar, transport=transport)
    key_pool = KeyPoolManager(source)

    params = [] if auth_params is None else auth_params
    authorizer = partial(build_authorization, settings.page_url, variables, cookie_source, params)
    dispatcher = RpcDispatcher(key_pool, authorizer, settings, client=client, cookies=jar, transport=transport)

    return BridgeSession(
        settings=settings,
        variables=variables,
        cookies=cookie_source,
        key_pool=key_pool,
        dispatcher=dispatcher,
        auth_params=params,
    )


def load_prompt_document(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


async def import_prompt(session: BridgeSession, document: Any, *, name: str = DEFAULT_PROMPT_NAME) -> CreatedPrompt:
    created = await session.dispatcher.create_prompt(name, document)
    logger.info("Prompt created: %s", created.path)
    return created


async def fetch_service_status(session: BridgeSession) -> ServiceStatusReport:
    return determine_system_status(await session.dispatcher.list_incidents())
