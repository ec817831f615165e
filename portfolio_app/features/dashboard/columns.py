"""Ticket table column definitions."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from portfolio_app.analytics.metrics.aging import delivery_outcome, signed_aging_days, to_timestamp
from portfolio_app.core.column_config import get_columns
from portfolio_app.core.config import DEFAULT_PROJECT_TYPE
from portfolio_app.core.models import ColumnDefinition, Ticket


def _created_text(t: Ticket) -> str:
    ts = to_timestamp(t.created)
    return ts.strftime("%Y-%m-%d %H:%M") if ts is not None else ""


def ticket_columns(today: date | None = None) -> dict[str, ColumnDefinition]:
    """Every column a ticket table can show, keyed by column key.

    ``aging_days`` is recomputed against ``today`` at render time so a cached
    snapshot does not show stale offsets.
    """
    cols = [
        ColumnDefinition("key", "Key", lambda t: t.key, render=lambda t: t.url),
        ColumnDefinition("summary", "Summary", lambda t: t.summary),
        ColumnDefinition("status", "Status", lambda t: t.status),
        ColumnDefinition("rag", "RAG", lambda t: t.rag),
        ColumnDefinition(
            "aging_days",
            "Aging (days)",
            lambda t: signed_aging_days(t.due_date or t.end_date, today=today),
        ),
        ColumnDefinition("aging_bucket", "Aging Bucket", lambda t: t.aging_bucket),
        ColumnDefinition("start_date", "Start", lambda t: t.start_date),
        ColumnDefinition("end_date", "End (Due date)", lambda t: t.due_date or t.end_date),
        ColumnDefinition("due_date", "Due Date", lambda t: t.due_date or t.end_date),
        ColumnDefinition("resolved", "Resolved", lambda t: t.resolved),
        ColumnDefinition(
            "delivery_outcome",
            "Delivered",
            lambda t: delivery_outcome(t.resolved, t.due_date or t.end_date),
        ),
        ColumnDefinition("created", "Created", _created_text),
        ColumnDefinition("assignee", "Assignee", lambda t: t.assignee),
        ColumnDefinition("reporter", "Reporter", lambda t: t.reporter),
        ColumnDefinition("priority", "Priority", lambda t: t.priority),
        ColumnDefinition("issue_type", "Type", lambda t: t.issue_type),
        ColumnDefinition("category", "Category", lambda t: t.category),
        ColumnDefinition("stream", "Demand/Delivery", lambda t: t.stream),
        ColumnDefinition("brand", "Brand", lambda t: t.brand),
        ColumnDefinition("project_key", "Project", lambda t: t.project_key),
        ColumnDefinition("project_type", "Project Type", lambda t: t.project_type_value or DEFAULT_PROJECT_TYPE),
    ]
    return {c.key: c for c in cols}


def column_set(set_name: str, today: date | None = None) -> Sequence[ColumnDefinition]:
    available = ticket_columns(today)
    return [available[k] for k in get_columns(set_name) if k in available]
