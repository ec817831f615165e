"""Sortable/filterable ticket tables for Streamlit rendering."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd
import streamlit as st

from portfolio_app.analytics.segments.filters import rag_level
from portfolio_app.core.config import SETTINGS
from portfolio_app.core.models import ColumnDefinition, SortDirection
from portfolio_app.core.table_query import cell_text, query_rows

RAG_BACKGROUNDS = {"red": "#fecaca", "amber": "#fde68a", "green": "#bbf7d0"}


def rows_to_frame(rows: Sequence, columns: Sequence[ColumnDefinition]) -> pd.DataFrame:
    """Display frame: custom renderers win over raw values, blanks become ``-``."""
    data = {}
    for col in columns:
        fn = col.render or col.value
        data[col.label] = [cell_text(fn(row)) or "-" for row in rows]
    return pd.DataFrame(data, columns=[c.label for c in columns])


def rag_cell_style(value) -> str:
    color = RAG_BACKGROUNDS.get(rag_level(value))
    return f"background-color: {color}" if color else ""


def styled_frame(frame: pd.DataFrame, columns: Sequence[ColumnDefinition]):
    """Colour the RAG column by level; frames without one pass through unchanged."""
    rag_labels = [c.label for c in columns if c.key == "rag"]
    if not rag_labels or frame.empty:
        return frame
    return frame.style.map(rag_cell_style, subset=rag_labels)


def link_config(columns: Sequence[ColumnDefinition]) -> dict[str, object]:
    cfg: dict[str, object] = {}
    for col in columns:
        if col.render is not None:
            cfg[col.label] = st.column_config.LinkColumn(
                col.label,
                display_text=r"browse/(.*)$",
                help="Open in Jira",
            )
    return cfg


def render_query_table(
    title: str,
    rows: Sequence,
    columns: Sequence[ColumnDefinition],
    *,
    state_key: str,
    limit: int | None = None,
    default_sort: str | None = None,
    default_dir: SortDirection = "asc",
) -> list:
    """Render a table with per-column filters and a sort selector.

    Widget state lives under ``state_key`` so several tables can share a page.
    Returns the rows shown.
    """
    st.subheader(title)
    labels = {c.key: c.label for c in columns}
    sort_options = ["", *labels.keys()]
    c1, c2 = st.columns([3, 1])
    sort_key = c1.selectbox(
        "Sort by",
        sort_options,
        index=sort_options.index(default_sort) if default_sort in sort_options else 0,
        format_func=lambda k: labels.get(k, "(none)"),
        key=f"{state_key}_sort",
    )
    sort_dir = c2.radio(
        "Direction",
        ["asc", "desc"],
        index=0 if default_dir == "asc" else 1,
        horizontal=True,
        key=f"{state_key}_dir",
    )
    filters: dict[str, str] = {}
    with st.expander("Filters"):
        cols = st.columns(min(len(columns), 4) or 1)
        for idx, col in enumerate(columns):
            filters[col.key] = cols[idx % len(cols)].text_input(
                col.label, key=f"{state_key}_filter_{col.key}", placeholder="Filter..."
            )

    shown = query_rows(rows, columns, filters, sort_key or None, sort_dir, limit or SETTINGS.max_table_rows)
    st.caption(f"Rows: {len(shown)}")
    frame = rows_to_frame(shown, columns)
    st.dataframe(styled_frame(frame, columns), hide_index=True, column_config=link_config(columns))
    return shown
