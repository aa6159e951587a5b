"""Interpretación del historial de incidentes (`ListIncidentsHistory`).

Formato posicional de la respuesta:
- ``data[0][0]``: lista de incidentes.
- incidente: ``[_, nombre, severidad, actualizaciones, plataforma]``.
- actualización: ``[estado, timestamp, _, mensaje]``.

Un incidente está activo si su última actualización no es RESOLVED. La
severidad 1 es una caída parcial; cualquier otro valor cuenta como total.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import TypeAdapter, ValidationError

from core.domain.models import ActiveIncident, ServiceStatusReport, SystemStatus

logger = logging.getLogger(__name__)

PLATFORM_NAMES: dict[int, str] = {
    1: "Gemini API",
    2: "Multimodal Live API",
    3: "Google AI Studio",
}

INCIDENT_DETECTED = 1
INCIDENT_IDENTIFIED = 2
INCIDENT_MITIGATED = 3
INCIDENT_RESOLVED = 4

INCIDENT_STATUS_NAMES: dict[int, str] = {
    INCIDENT_DETECTED: "DETECTED",
    INCIDENT_IDENTIFIED: "IDENTIFIED",
    INCIDENT_MITIGATED: "MITIGATED",
    INCIDENT_RESOLVED: "RESOLVED",
}

SEVERITY_PARTIAL = 1

_DATETIME = TypeAdapter(datetime)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    try:
        parsed = _DATETIME.validate_python(value)
    except ValidationError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _item(values: Any, index: int) -> Any:
    if isinstance(values, list) and len(values) > index:
        return values[index]
    return None


def latest_update(updates: list[Any]) -> list[Any] | None:
    """Return the most recent update by timestamp (unparseable ones sort first)."""

    candidates = [u for u in updates if isinstance(u, list) and u]
    if not candidates:
        return None
    return max(candidates, key=lambda u: _parse_timestamp(_item(u, 1)) or _EPOCH)


def is_incident_unresolved(updates: list[Any]) -> bool:
    latest = latest_update(updates)
    return latest is not None and latest[0] != INCIDENT_RESOLVED


def determine_system_status(incidents_data: Any) -> ServiceStatusReport:
    incidents = _item(_item(incidents_data, 0), 0)
    if not isinstance(incidents, list):
        logger.debug("Unexpected incidents payload; assuming operational")
        return ServiceStatusReport()

    active: list[ActiveIncident] = []
    has_partial = False
    has_total = False

    for incident in incidents:
        updates = _item(incident, 3)
        if not isinstance(updates, list) or not is_incident_unresolved(updates):
            continue

        latest = latest_update(updates) or []
        status_code = _item(latest, 0)
        platform_id = _item(incident, 4)
        severity = _item(incident, 2)

        if not isinstance(platform_id, int):
            platform_id = None
        status_name = INCIDENT_STATUS_NAMES.get(status_code, str(status_code)) if isinstance(status_code, int) else "UNKNOWN"
        message = _item(latest, 3)
        active.append(
            ActiveIncident(
                platform_id=platform_id,
                platform_name=PLATFORM_NAMES.get(platform_id, f"Platform {platform_id}") if platform_id else "Unknown platform",
                incident_name=str(_item(incident, 1) or ""),
                description=f"{status_name}: {message}" if message else status_name,
                severity=severity if isinstance(severity, int) else None,
                timestamp=_parse_timestamp(_item(latest, 1)),
            )
        )

        if severity == SEVERITY_PARTIAL:
            has_partial = True
        else:
            has_total = True

    if has_total:
        status = SystemStatus.TOTAL_OUTAGE
    elif has_partial:
        status = SystemStatus.PARTIAL_OUTAGE
    else:
        status = SystemStatus.OPERATIONAL
    return ServiceStatusReport(status=status, incidents=active)
