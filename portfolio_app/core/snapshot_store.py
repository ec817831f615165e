"""Read and write the cached report JSON that seeds the dashboard."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any

import pytz

from portfolio_app.analytics.aggregations.totals import summarize

from .config import TIMEZONE
from .errors import MappingError
from .mappers import ticket_from_record, ticket_to_record
from .models import ReportSnapshot, ReportTotals, Ticket

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_PATH = Path(__file__).resolve().parents[2] / "data" / "report_data.json"

_TOTAL_FIELDS = {
    "all_tickets": "allTickets",
    "total_initiatives": "totalInitiatives",
    "overdue_items": "overdueItems",
    "completed": "completed",
    "active_tickets": "activeTickets",
    "ai_project_type_tickets": "aiProjectTypeTickets",
}


def empty_snapshot(owner_name: str = "") -> ReportSnapshot:
    return ReportSnapshot(
        generated_at=datetime.now(pytz.timezone(TIMEZONE)).isoformat(),
        owner_name=owner_name,
    )


def snapshot_from_dict(data: dict[str, Any]) -> ReportSnapshot:
    summary = data.get("summary") or {}
    owner = summary.get("owner") or {}
    by_key: dict[str, Ticket] = {}
    for record in data.get("tickets") or []:
        try:
            ticket = ticket_from_record(record)
        except MappingError as exc:
            logger.warning("Skipping stored ticket: %s", exc)
            continue
        # duplicate keys: last record wins
        by_key[ticket.key] = ticket
    tickets = list(by_key.values())
    return ReportSnapshot(
        generated_at=str(summary.get("generatedAt") or ""),
        owner_name=str(owner.get("name") or ""),
        scope_note=str(summary.get("scopeNote") or ""),
        totals=summarize(tickets),
        tickets=tuple(tickets),
    )


def totals_to_dict(totals: ReportTotals) -> dict[str, int]:
    return {name: getattr(totals, attr) for attr, name in _TOTAL_FIELDS.items()}


def snapshot_to_dict(snapshot: ReportSnapshot) -> dict[str, Any]:
    return {
        "summary": {
            "generatedAt": snapshot.generated_at,
            "owner": {"name": snapshot.owner_name},
            "scopeNote": snapshot.scope_note,
            "totals": totals_to_dict(snapshot.totals),
        },
        "tickets": [ticket_to_record(t) for t in snapshot.tickets],
    }


def load_snapshot(path: str | Path | None = None, owner_name: str = "") -> ReportSnapshot:
    """Load the cached report; a missing file yields an empty snapshot."""
    path = Path(path or DEFAULT_SNAPSHOT_PATH)
    if not path.exists():
        logger.info("No cached report at %s; starting empty", path)
        return empty_snapshot(owner_name)
    data = json.loads(path.read_text(encoding="utf-8"))
    snapshot = snapshot_from_dict(data)
    if owner_name and not snapshot.owner_name:
        snapshot = replace(snapshot, owner_name=owner_name)
    return snapshot


def save_snapshot(snapshot: ReportSnapshot, path: str | Path | None = None) -> Path:
    path = Path(path or DEFAULT_SNAPSHOT_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(snapshot_to_dict(snapshot), indent=2), encoding="utf-8")
    tmp.replace(path)
    return path
