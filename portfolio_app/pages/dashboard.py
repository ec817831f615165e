"""Jira dashboard page: refresh, headline totals, splits, and ticket tables."""

from __future__ import annotations

import logging
from datetime import datetime

import pytz
import streamlit as st

from portfolio_app.analytics.segments.filters import period_options
from portfolio_app.app import register_page
from portfolio_app.core.config import PROJECT_TYPE_OPTIONS, SETTINGS, TIMEZONE
from portfolio_app.core.models import ReportSnapshot
from portfolio_app.core.service import ReportService
from portfolio_app.core.snapshot_store import load_snapshot, save_snapshot
from portfolio_app.features.dashboard.columns import column_set
from portfolio_app.features.dashboard.context import build_context
from portfolio_app.visual.charts import aging_bar, split_pie
from portfolio_app.visual.progress import ProgressReporter
from portfolio_app.visual.tables import render_query_table

logger = logging.getLogger(__name__)


def _current_snapshot(service: ReportService) -> ReportSnapshot:
    snapshot = st.session_state.get("snapshot")
    if snapshot is None:
        snapshot = load_snapshot(owner_name=service.settings.owner_name)
        st.session_state["snapshot"] = snapshot
    return snapshot


def _run_refresh(service: ReportService, snapshot: ReportSnapshot) -> None:
    reporter = ProgressReporter("Refreshing from Jira")
    outcome = service.refresh_or_keep(snapshot, progress=reporter.callback)
    if not outcome.ok:
        st.session_state["refresh_error"] = outcome.error
        reporter.error(f"Refresh failed: {outcome.error}")
        return
    st.session_state["snapshot"] = outcome.snapshot
    st.session_state["refresh_error"] = None
    try:
        save_snapshot(outcome.snapshot)
    except OSError as exc:
        logger.warning("Could not cache refreshed snapshot: %s", exc)
    reporter.complete(f"Loaded {outcome.snapshot.totals.all_tickets} ticket(s).")


@register_page("Jira Dashboard")
def dashboard_page():
    st.title("Jira Portfolio Dashboard")
    service: ReportService | None = st.session_state.get("report_service")
    if service is None:
        st.warning("Initialize connection on Setup page first.")
        return

    snapshot = _current_snapshot(service)
    refresh = st.button("Refresh from Jira", type="primary")
    if refresh or not st.session_state.get("initial_refresh_done"):
        st.session_state["initial_refresh_done"] = True
        _run_refresh(service, snapshot)
        snapshot = st.session_state["snapshot"]

    if st.session_state.get("refresh_error"):
        st.error(st.session_state["refresh_error"])

    st.caption(
        f"Owner: {snapshot.owner_name or 'n/a'} · Generated: {snapshot.generated_at or 'n/a'}"
        + (f" · {snapshot.scope_note}" if snapshot.scope_note else "")
    )

    now = datetime.now(pytz.timezone(TIMEZONE))
    options = period_options(now)
    c1, c2 = st.columns(2)
    period = c1.selectbox("Period", options, format_func=lambda o: o.label, key="period")
    project_type = c2.selectbox("Project Type", list(PROJECT_TYPE_OPTIONS), key="project_type")
    ctx = build_context(snapshot, period, project_type, now=now)

    m = st.columns(6)
    m[0].metric("All Tickets", ctx.totals.all_tickets)
    m[1].metric("Initiatives", ctx.totals.total_initiatives)
    m[2].metric("Overdue", ctx.totals.overdue_items)
    m[3].metric("Completed", ctx.totals.completed)
    m[4].metric("Active", ctx.totals.active_tickets)
    m[5].metric("New (24h)", len(ctx.new_last_24h))

    charts = [
        split_pie(ctx.project_type_split, "Project Type"),
        split_pie(ctx.brand_split, "Brand"),
        aging_bar(ctx.aging_split),
    ]
    for col, chart in zip(st.columns(3), charts):
        if chart is None:
            col.info("No data for this selection.")
        else:
            col.altair_chart(chart, use_container_width=True)

    today = now.date()
    tab_active, tab_completed, tab_new = st.tabs(["Active", "Completed", "New (24h)"])
    with tab_active:
        render_query_table(
            "Active Tickets",
            ctx.active,
            column_set("active", today),
            state_key="active",
            default_sort="aging_bucket",
        )
    with tab_completed:
        render_query_table(
            "Completed Tickets",
            ctx.completed,
            column_set("completed", today),
            state_key="completed",
            default_sort="resolved",
            default_dir="desc",
        )
    with tab_new:
        render_query_table(
            "Tickets Created in the Last 24 Hours",
            ctx.new_last_24h,
            column_set("new", today),
            state_key="new",
            default_sort="created",
            default_dir="desc",
            limit=SETTINGS.new_ticket_table_limit,
        )
