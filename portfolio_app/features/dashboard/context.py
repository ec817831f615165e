"""Pure helpers to build dashboard context for testing (no Streamlit)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import pandas as pd

from portfolio_app.analytics.aggregations.splits import group_count, sort_aging_buckets
from portfolio_app.analytics.aggregations.totals import summarize
from portfolio_app.analytics.segments import filters as seg
from portfolio_app.core.config import DEFAULT_PROJECT_TYPE
from portfolio_app.core.models import PeriodOption, ReportSnapshot, ReportTotals, Ticket


@dataclass(slots=True)
class DashboardContext:
    tickets: list[Ticket]
    active: list[Ticket]
    completed: list[Ticket]
    new_last_24h: list[Ticket]
    totals: ReportTotals
    project_type_split: pd.DataFrame
    brand_split: pd.DataFrame
    aging_split: pd.DataFrame


def build_context(
    snapshot: ReportSnapshot,
    period: PeriodOption,
    project_type: str = seg.ALL_PROJECT_TYPES,
    *,
    now: datetime | None = None,
) -> DashboardContext:
    """Narrow the snapshot to the selected period/project type and derive views.

    Totals here describe the filtered selection; the snapshot's own totals
    always describe the full collection.
    """
    in_period = seg.filter_by_period(snapshot.tickets, period)
    tickets = seg.filter_by_project_type(in_period, project_type)
    active = seg.active_tickets(tickets)
    return DashboardContext(
        tickets=tickets,
        active=active,
        completed=seg.completed_tickets(tickets),
        new_last_24h=seg.created_last_24h(tickets, now=now),
        totals=summarize(tickets),
        project_type_split=group_count(tickets, lambda t: t.project_type_value or DEFAULT_PROJECT_TYPE),
        brand_split=group_count(tickets, lambda t: t.brand),
        aging_split=sort_aging_buckets(group_count(active, lambda t: t.aging_bucket)),
    )
