"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from cli.ui_components import build_doctor_table
from core.config import AppSettings, write_user_env_vars
from core.errors import BridgeError, mask_key
from core.security.tokens import SID_COOKIES, SID_VARIABLES
from core.services.bridge_session import BridgeSession, build_session

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_discovery(session: BridgeSession) -> tuple[tuple[bool, str], tuple[bool, str]]:
    try:
        origin = await session.key_pool.service_origin()
        origin_check = (True, origin)
    except BridgeError as exc:
        origin_check = (False, str(exc))
    except Exception as exc:
        origin_check = (False, f"{type(exc).__name__}: {exc}")

    try:
        keys = await session.key_pool.get_or_init()
        keys_check = (True, f"{len(keys)} found, first {mask_key(keys[0])}")
    except BridgeError as exc:
        keys_check = (False, str(exc))
    except Exception as exc:
        keys_check = (False, f"{type(exc).__name__}: {exc}")

    return origin_check, keys_check


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    try:
        session = build_session(settings)
    except BridgeError as exc:
        _console.print(f"[red]Cannot load session secrets:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    table = build_doctor_table()
    table.add_row("Page URL", "OK", settings.page_url)

    present = [name for name in SID_VARIABLES if session.variables.get(name)]
    present += [name for name in SID_COOKIES if session.cookies.get(name)]
    if present:
        table.add_row("Session secrets", "OK", ", ".join(present))
    else:
        table.add_row("Session secrets", "FAIL", "Set STUDIO_BRIDGE_COOKIES_FILE or STUDIO_BRIDGE_COOKIE_HEADER")

    header = session.authorization()
    table.add_row("Authorization", "OK" if header else "FAIL", (header or "not derivable").split(" ")[0])

    (ok_origin, detail_origin), (ok_keys, detail_keys) = asyncio.run(_check_discovery(session))
    table.add_row("Service origin", "OK" if ok_origin else "FAIL", detail_origin)
    table.add_row("API keys", "OK" if ok_keys else "FAIL", detail_keys)

    _console.print(table)

    if not present:
        _console.print(
            "\n[yellow]Note:[/yellow] export your browser cookies (cookies.txt) for the page domain and point "
            "STUDIO_BRIDGE_COOKIES_FILE at it."
        )


@app.command(name="setup")
def setup() -> None:
    """Interactive setup for non-secret settings (stored in the user config .env).

    Session secrets are never written; provide them per run via env vars.
    """

    page_url = typer.prompt("Page URL", default=AppSettings().page_url, show_default=True).strip()
    cookies_file = typer.prompt("cookies.txt path (optional)", default="", show_default=False).strip()

    if not page_url:
        raise typer.BadParameter("page_url is required")

    values = {"STUDIO_BRIDGE_PAGE_URL": page_url}
    if cookies_file:
        values["STUDIO_BRIDGE_COOKIES_FILE"] = cookies_file
    env_path = write_user_env_vars(values)

    _console.print(f"[green]Saved config to:[/green] {env_path}")
