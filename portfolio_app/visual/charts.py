"""Chart builders (Altair) for the dashboard splits."""

from __future__ import annotations

import altair as alt
import pandas as pd

from portfolio_app.core.config import AGING_BUCKET_ORDER

PIE_COLORS = ["#38bdf8", "#22c55e", "#f59e0b", "#ef4444", "#a78bfa", "#14b8a6", "#f43f5e", "#8b5cf6"]


def split_pie(counts: pd.DataFrame, title: str):
    """Donut chart of a ``name``/``value`` count frame (None when empty)."""
    if counts.empty:
        return None
    return (
        alt.Chart(counts)
        .mark_arc(innerRadius=50)
        .encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color(
                "name:N",
                sort=list(counts["name"]),
                scale=alt.Scale(range=PIE_COLORS),
                legend=alt.Legend(title=None),
            ),
            tooltip=[alt.Tooltip("name:N", title=title), alt.Tooltip("value:Q", title="Tickets")],
        )
        .properties(height=260, title=title)
    )


def aging_bar(counts: pd.DataFrame):
    if counts.empty:
        return None
    return (
        alt.Chart(counts)
        .mark_bar(color="#f59e0b")
        .encode(
            x=alt.X("name:N", title="Aging Bucket", sort=list(AGING_BUCKET_ORDER)),
            y=alt.Y("value:Q", title="Active Tickets"),
            tooltip=[alt.Tooltip("name:N", title="Bucket"), alt.Tooltip("value:Q", title="Tickets")],
        )
        .properties(height=260, title="Aging of Active Tickets")
    )
