"""Summary counters recomputed from a ticket collection."""

from __future__ import annotations

from collections.abc import Iterable

from portfolio_app.core.config import AI_PROJECT_TYPE, INITIATIVE_ISSUE_TYPES
from portfolio_app.core.models import ReportTotals, Ticket


def is_initiative(ticket: Ticket) -> bool:
    return ticket.issue_type in INITIATIVE_ISSUE_TYPES or ticket.category == "Strategic"


def is_ai_project_type(ticket: Ticket) -> bool:
    return (ticket.project_type_value or "").casefold() == AI_PROJECT_TYPE.casefold()


def summarize(tickets: Iterable[Ticket]) -> ReportTotals:
    """Count every total from scratch; nothing is carried over from a prior summary."""
    rows = list(tickets)
    return ReportTotals(
        all_tickets=len(rows),
        total_initiatives=sum(1 for t in rows if is_initiative(t)),
        overdue_items=sum(1 for t in rows if t.is_overdue),
        completed=sum(1 for t in rows if t.is_done),
        active_tickets=sum(1 for t in rows if t.active),
        ai_project_type_tickets=sum(1 for t in rows if is_ai_project_type(t)),
    )
