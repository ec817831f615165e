"""Ticket segment filters for the dashboard (period, project type, recency)."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

import pytz

from portfolio_app.analytics.metrics.aging import is_within_last_24_hours, to_timestamp
from portfolio_app.core.config import DEFAULT_PROJECT_TYPE, PERIOD_START_YEAR, PROJECT_TYPE_OPTIONS, TIMEZONE
from portfolio_app.core.models import PeriodOption, Ticket

ALL_PROJECT_TYPES = PROJECT_TYPE_OPTIONS[0]


def quarter_of(moment: datetime) -> int:
    return (moment.month - 1) // 3 + 1


def period_options(now: datetime | None = None, start_year: int = PERIOD_START_YEAR) -> list[PeriodOption]:
    """ALL TIME, then every quarter up to the current one, then each year."""
    now = now or datetime.now(pytz.timezone(TIMEZONE))
    end_year = now.year
    end_quarter = quarter_of(now)
    options = [PeriodOption(key="ALL", label="ALL TIME", kind="all", year=0)]
    for year in range(start_year, end_year + 1):
        max_q = end_quarter if year == end_year else 4
        for q in range(1, max_q + 1):
            options.append(PeriodOption(key=f"Q{q}-{year}", label=f"QTR {q} {year}", kind="quarter", year=year, quarter=q))
    for year in range(start_year, end_year + 1):
        options.append(PeriodOption(key=f"ANNUAL-{year}", label=f"ANNUAL {year}", kind="annual", year=year))
    return options


def filter_by_period(tickets: Iterable[Ticket], period: PeriodOption) -> list[Ticket]:
    rows = list(tickets)
    if period.kind == "all":
        return rows
    out = []
    for t in rows:
        ref = to_timestamp(t.start_date) or to_timestamp(t.created)
        if ref is None:
            continue
        if period.kind == "annual":
            if ref.year == period.year:
                out.append(t)
        elif ref.year == period.year and quarter_of(ref) == period.quarter:
            out.append(t)
    return out


def filter_by_project_type(tickets: Iterable[Ticket], project_type: str) -> list[Ticket]:
    rows = list(tickets)
    if project_type == ALL_PROJECT_TYPES:
        return rows
    return [t for t in rows if (t.project_type_value or DEFAULT_PROJECT_TYPE) == project_type]


def active_tickets(tickets: Iterable[Ticket]) -> list[Ticket]:
    return [t for t in tickets if t.active]


def completed_tickets(tickets: Iterable[Ticket]) -> list[Ticket]:
    return [t for t in tickets if t.is_done]


def created_last_24h(tickets: Iterable[Ticket], *, now: datetime | None = None) -> list[Ticket]:
    return [t for t in tickets if is_within_last_24_hours(t.created, now=now)]


def rag_level(rag: str | None) -> str:
    """Collapse free-text RAG values to red/amber/green/unknown."""
    r = (rag or "").lower()
    if "red" in r:
        return "red"
    if "amber" in r or "yellow" in r:
        return "amber"
    if "green" in r:
        return "green"
    return "unknown"
