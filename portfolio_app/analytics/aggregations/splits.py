"""Group counts feeding the split charts."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import pandas as pd

from portfolio_app.analytics.metrics.aging import normalize_aging_bucket
from portfolio_app.core.config import AGING_BUCKET_ORDER
from portfolio_app.core.models import Ticket


def group_count(tickets: Iterable[Ticket], key_fn: Callable[[Ticket], str | None]) -> pd.DataFrame:
    """Count tickets per ``key_fn`` value, largest group first.

    Empty keys are counted as ``"Unknown"``; ties keep first-seen order.
    """
    keys = [key_fn(t) or "Unknown" for t in tickets]
    if not keys:
        return pd.DataFrame({"name": pd.Series(dtype=str), "value": pd.Series(dtype=int)})
    counts = pd.Series(keys).value_counts(sort=False).sort_values(ascending=False, kind="stable")
    return pd.DataFrame({"name": counts.index.astype(str), "value": counts.to_numpy(dtype=int)})


def sort_aging_buckets(counts: pd.DataFrame) -> pd.DataFrame:
    """Fold bucket labels onto the canonical set, in rank order, empty buckets dropped."""
    if counts.empty:
        return counts
    work = counts.assign(name=counts["name"].map(normalize_aging_bucket))
    totals = work.groupby("name")["value"].sum()
    rows = [(name, int(totals.get(name, 0))) for name in AGING_BUCKET_ORDER]
    return pd.DataFrame([r for r in rows if r[1] > 0], columns=["name", "value"])
