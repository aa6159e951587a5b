"""CLI principal (Typer).

Comandos:
- `convert`: documento de prompt -> payload posicional (sin red).
- `import`: crea el prompt en el servicio (CreatePrompt).
- `status`: estado del servicio a partir del historial de incidentes.
- `auth-header`: muestra la cabecera `authorization` derivada (diagnóstico).
- `doctor`: diagnóstico de entorno.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from adapters.json_exporter import export_payload_json
from cli import doctor
from cli.ui_components import build_status_panel, build_incidents_table, print_banner
from core.config import AppSettings
from core.errors import BridgeError
from core.services.bridge_session import (
    DEFAULT_PROMPT_NAME,
    build_session,
    fetch_service_status,
    import_prompt,
    load_prompt_document,
)
from core.services.prompt_converter import convert_prompt, encode_payload

app = typer.Typer(no_args_is_help=True, help="Import prompt files into the studio RPC service.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)


def _read_document(path: Path) -> object:
    try:
        return load_prompt_document(path)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid JSON format: {exc}") from exc


@app.command()
def convert(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Prompt JSON file."),
    name: str = typer.Option(DEFAULT_PROMPT_NAME, "--name", "-n", help="Prompt title."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the payload to this file."),
) -> None:
    """Convert a prompt document into the canonical positional payload."""

    document = _read_document(path)
    try:
        payload = convert_prompt(name, document)
    except ValidationError as exc:
        _err_console.print(f"[red]Malformed prompt:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    if payload is None:
        _err_console.print("[red]This JSON format is not recognized as a valid prompt.[/red]")
        raise typer.Exit(code=1)

    if output is not None:
        written = export_payload_json(payload=payload, output_path=output)
        _console.print(f"[green]Payload written to:[/green] {written}")
        return
    _console.print_json(encode_payload(payload))


@app.command(name="import")
def import_(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Prompt JSON file."),
    name: str = typer.Option(DEFAULT_PROMPT_NAME, "--name", "-n", help="Prompt title."),
) -> None:
    """Create the prompt in the remote service."""

    settings = AppSettings()
    print_banner(_console)
    document = _read_document(path)

    try:
        session = build_session(settings)
        created = asyncio.run(import_prompt(session, document, name=name))
    except (BridgeError, ValidationError) as exc:
        _err_console.print(f"[red]Failed to create prompt:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    url = created.url(settings.page_url)
    _console.print(f"[green]Prompt created:[/green] {url or created.raw}")


@app.command()
def status(
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
) -> None:
    """Show the service status derived from the incidents history."""

    try:
        session = build_session(AppSettings())
        report = asyncio.run(fetch_service_status(session))
    except BridgeError as exc:
        _err_console.print(f"[red]Failed to fetch incidents data:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    if as_json:
        _console.print_json(report.model_dump_json())
        return
    _console.print(build_status_panel(report))
    if report.incidents:
        _console.print(build_incidents_table(report.incidents))


@app.command(name="auth-header")
def auth_header() -> None:
    """Print the authorization header derived from the configured session secrets."""

    try:
        session = build_session(AppSettings())
    except BridgeError as exc:
        _err_console.print(f"[red]Cannot load session secrets:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    value = session.authorization()
    if not value:
        _err_console.print("[yellow]No session secrets configured (SAPISID/APISID).[/yellow]")
        raise typer.Exit(code=1)
    _console.print(value, soft_wrap=True)


def run() -> None:
    app()
