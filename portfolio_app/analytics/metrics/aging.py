"""Aging, delivery, and recency metrics (pure functions).

Every function here is total over optional inputs: missing or unparseable
dates are treated as absent. The reference clock is injectable (``today`` /
``now``) so results are deterministic under test.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any

import pandas as pd
import pytz

from portfolio_app.core.config import AGING_BUCKET_ORDER, TIMEZONE

DAY_MS = 24 * 60 * 60 * 1000


def _tz():
    return pytz.timezone(TIMEZONE)


def to_timestamp(value: Any) -> pd.Timestamp | None:
    """Parse a date/time value into a tz-aware Timestamp in the local timezone."""
    if value is None or value == "":
        return None
    try:
        ts = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError):
        return None
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is None:
        # wall times inside a DST gap move to the first valid instant; repeated
        # hours resolve to the daylight-saving reading
        return ts.tz_localize(_tz(), ambiguous=True, nonexistent="shift_forward")
    return ts.tz_convert(_tz())


def to_local_date(value: Any) -> date | None:
    """Calendar day of ``value`` in the local timezone (time of day dropped)."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    ts = to_timestamp(value)
    if ts is None:
        return None
    return ts.date()


def local_today() -> date:
    return datetime.now(_tz()).date()


def signed_aging_days(due_date: Any, *, today: date | None = None) -> int | None:
    """Whole days between ``due_date`` and today; positive once overdue."""
    due = to_local_date(due_date)
    if due is None:
        return None
    today = today or local_today()
    return (today - due).days


def aging_bucket(days: int | None) -> str:
    if days is None:
        return "Unknown"
    if days > 90:
        return "90+"
    if days > 60:
        return "61-90"
    if days > 30:
        return "31-60"
    return "0-30"


def normalize_aging_bucket(name: Any) -> str:
    """Map free-form bucket labels (e.g. ``"60-90"``) onto the canonical set."""
    lower = str(name or "").strip().lower()
    if "90+" in lower:
        return "90+"
    if "61-90" in lower or "60-90" in lower:
        return "61-90"
    if "31-60" in lower or "30-60" in lower:
        return "31-60"
    if "0-30" in lower or "0 to 30" in lower:
        return "0-30"
    return "Unknown"


def aging_bucket_rank(name: Any) -> int:
    """Position in :data:`AGING_BUCKET_ORDER` (0 = most overdue)."""
    return AGING_BUCKET_ORDER.index(normalize_aging_bucket(name))


def delivery_outcome(resolved_date: Any, due_date: Any) -> str:
    due = to_local_date(due_date)
    if due is None:
        return "No due date"
    resolved = to_local_date(resolved_date)
    if resolved is None:
        return "Unknown completion date"
    return "On Time" if resolved <= due else "Late"


def is_within_last_24_hours(value: Any, *, now: datetime | None = None) -> bool:
    ts = to_timestamp(value)
    if ts is None:
        return False
    if now is None:
        now = datetime.now(_tz())
    elif now.tzinfo is None:
        now = _tz().localize(now)
    age = pd.Timestamp(now) - ts
    return timedelta(0) <= age <= timedelta(milliseconds=DAY_MS)
