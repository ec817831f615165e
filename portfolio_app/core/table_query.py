"""Client-side table querying: column filters, type-aware sort, row limit.

``query_rows`` is a pure function over an in-memory row collection. Given the
same rows, columns, filters, and sort settings it always returns the same
ordering, and rows that compare equal keep their original relative order.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from functools import cmp_to_key
from typing import Any, TypeVar

import pandas as pd

from portfolio_app.analytics.metrics.aging import aging_bucket_rank

from .models import ColumnDefinition, SortDirection

T = TypeVar("T")

AGING_BUCKET_COLUMN = "aging_bucket"


def cell_text(value: Any) -> str:
    return "" if value is None else str(value)


def _as_number(text: str) -> float | None:
    if not text.strip():
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _as_instant(text: str) -> int | None:
    if not text.strip():
        return None
    try:
        ts = pd.to_datetime(text, errors="coerce", format="ISO8601", utc=True)
    except (TypeError, ValueError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts.value


def _sign(a, b) -> int:
    return (a > b) - (a < b)


def filter_rows(rows: Sequence[T], columns: Sequence[ColumnDefinition], filters: Mapping[str, str]) -> list[T]:
    active = [
        (col, needle)
        for col in columns
        if (needle := (filters.get(col.key) or "").strip().casefold())
    ]
    if not active:
        return list(rows)
    return [
        row
        for row in rows
        if all(needle in cell_text(col.value(row)).casefold() for col, needle in active)
    ]


def sort_rows(
    rows: Sequence[T],
    column: ColumnDefinition,
    direction: SortDirection = "asc",
) -> list[T]:
    texts = [cell_text(column.value(row)) for row in rows]
    if column.key == AGING_BUCKET_COLUMN:
        ranks = [aging_bucket_rank(t) for t in texts]

        def compare(i: int, j: int) -> int:
            return _sign(ranks[i], ranks[j])

    else:
        numbers = [_as_number(t) for t in texts]
        instants: dict[int, int | None] = {}

        def instant(i: int) -> int | None:
            if i not in instants:
                instants[i] = _as_instant(texts[i])
            return instants[i]

        def compare(i: int, j: int) -> int:
            if numbers[i] is not None and numbers[j] is not None:
                return _sign(numbers[i], numbers[j])
            a, b = instant(i), instant(j)
            if a is not None and b is not None:
                return _sign(a, b)
            return _sign(texts[i], texts[j])

    flip = -1 if direction == "desc" else 1
    order = sorted(range(len(rows)), key=cmp_to_key(lambda i, j: flip * compare(i, j)))
    return [rows[i] for i in order]


def query_rows(
    rows: Sequence[T],
    columns: Sequence[ColumnDefinition],
    filters: Mapping[str, str] | None = None,
    sort_key: str | None = None,
    sort_dir: SortDirection = "asc",
    limit: int | None = None,
) -> list[T]:
    """Filter, then sort, then truncate ``rows`` for table display.

    Parameters
    ----------
    rows : sequence
        Row objects handed to each column's ``value`` accessor.
    columns : sequence of ColumnDefinition
        Table columns; filters and ``sort_key`` refer to ``ColumnDefinition.key``.
    filters : mapping, optional
        Per-column substring filters; a row survives when every non-empty filter
        is contained (case-insensitively) in that column's text.
    sort_key : str, optional
        Column to sort by. Unknown keys leave the filtered order untouched.
    sort_dir : {"asc", "desc"}
        ``"desc"`` reverses the comparator, not the list, so ties stay stable.
    limit : int, optional
        Maximum number of rows returned after sorting.

    Returns
    -------
    list
        New list; the input sequence is not modified.
    """
    out = filter_rows(rows, columns, filters or {})
    if sort_key:
        column = next((c for c in columns if c.key == sort_key), None)
        if column is not None:
            out = sort_rows(out, column, sort_dir)
    if limit and len(out) > limit:
        out = out[:limit]
    return out
