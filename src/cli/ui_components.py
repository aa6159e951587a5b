"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import ActiveIncident, ServiceStatusReport, SystemStatus

_STATUS_STYLES: dict[SystemStatus, tuple[str, str]] = {
    SystemStatus.OPERATIONAL: ("All systems operational", "green"),
    SystemStatus.PARTIAL_OUTAGE: ("Partial outage", "yellow"),
    SystemStatus.TOTAL_OUTAGE: ("Major outage", "red"),
}


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("studio-bridge", style="bold cyan")
    subtitle = Text("Prompt import • Key rotation • Session auth", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_status_panel(report: ServiceStatusReport) -> Panel:
    label, style = _STATUS_STYLES[report.status]
    body = Text(label, style=f"bold {style}")
    body.append(f"\nActive incidents: {len(report.incidents)}", style="dim")
    return Panel(body, title="Service status", border_style=style)


def build_incidents_table(incidents: list[ActiveIncident]) -> Table:
    table = Table(title="Active incidents")
    table.add_column("Platform", style="cyan", no_wrap=True)
    table.add_column("Incident", style="white")
    table.add_column("Latest update", style="magenta")
    table.add_column("Severity", style="red")
    table.add_column("Updated", style="dim")
    for incident in incidents:
        severity = "partial" if incident.severity == 1 else "total"
        updated = incident.timestamp.strftime("%Y-%m-%d %H:%M %Z").strip() if incident.timestamp else "-"
        table.add_row(incident.platform_name, incident.incident_name, incident.description, severity, updated)
    return table


def build_doctor_table() -> Table:
    table = Table(title="studio-bridge Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    return table
