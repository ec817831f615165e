from datetime import UTC, date, datetime, timedelta

import pytest
import pytz

from portfolio_app.analytics.metrics.aging import (
    aging_bucket,
    aging_bucket_rank,
    delivery_outcome,
    is_within_last_24_hours,
    normalize_aging_bucket,
    signed_aging_days,
    to_local_date,
    to_timestamp,
)
from portfolio_app.analytics.metrics.derived import derive_brand, derive_category


@pytest.mark.parametrize(
    "days, bucket",
    [
        (None, "Unknown"),
        (-12, "0-30"),
        (0, "0-30"),
        (30, "0-30"),
        (31, "31-60"),
        (60, "31-60"),
        (61, "61-90"),
        (90, "61-90"),
        (91, "90+"),
        (400, "90+"),
    ],
)
def test_aging_bucket_boundaries(days, bucket):
    assert aging_bucket(days) == bucket


def test_signed_aging_days_sign_and_granularity():
    today = date(2024, 3, 1)
    assert signed_aging_days(None, today=today) is None
    assert signed_aging_days("", today=today) is None
    assert signed_aging_days("not a date", today=today) is None
    assert signed_aging_days("2024-02-20", today=today) == 10
    assert signed_aging_days("2024-03-01", today=today) == 0
    assert signed_aging_days("2024-03-05", today=today) == -4
    # time of day is ignored
    assert signed_aging_days("2024-02-29T23:59:00", today=today) == 1


def test_to_local_date_accepts_dates():
    assert to_local_date(date(2024, 1, 10)) == date(2024, 1, 10)
    assert to_local_date(None) is None


def test_delivery_outcome():
    assert delivery_outcome("2024-01-10", "2024-01-10") == "On Time"
    assert delivery_outcome("2024-01-11", "2024-01-10") == "Late"
    assert delivery_outcome("2024-01-02", "2024-01-10") == "On Time"
    assert delivery_outcome(None, "2024-01-10") == "Unknown completion date"
    assert delivery_outcome("2024-01-10", None) == "No due date"
    assert delivery_outcome("garbage", "2024-01-10") == "Unknown completion date"


def test_within_last_24_hours():
    now = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    assert is_within_last_24_hours("2024-05-01T00:00:00.000+0000", now=now)
    assert is_within_last_24_hours((now - timedelta(hours=24)).isoformat(), now=now)
    assert not is_within_last_24_hours((now - timedelta(hours=24, seconds=1)).isoformat(), now=now)
    assert not is_within_last_24_hours((now + timedelta(minutes=5)).isoformat(), now=now)
    assert not is_within_last_24_hours(None, now=now)
    assert not is_within_last_24_hours("yesterday-ish", now=now)


def test_normalize_and_rank_buckets():
    assert normalize_aging_bucket("60-90 days") == "61-90"
    assert normalize_aging_bucket("30-60") == "31-60"
    assert normalize_aging_bucket("0 to 30") == "0-30"
    assert normalize_aging_bucket(None) == "Unknown"
    ranks = [aging_bucket_rank(b) for b in ("90+", "61-90", "31-60", "0-30", "Unknown")]
    assert ranks == sorted(ranks)


def test_derive_brand():
    assert derive_brand(["selleys-paint"], []) == "Selleys"
    assert derive_brand([], ["Yates"]) == "Yates"
    assert derive_brand([], []) == "Other"
    assert derive_brand(None, None) == "Other"
    # priority order, not position, decides
    assert derive_brand(["YATES"], ["Selleys Trade"]) == "Selleys"


def test_derive_category():
    assert derive_category("Operational/Tactical") == "Tactical"
    assert derive_category("operational") == "Tactical"
    assert derive_category("Not yet classified") == "Ad hoc"
    assert derive_category("Strategic") == "Strategic"
    assert derive_category("AI") == "Strategic"
    assert derive_category(None) == "Strategic"


def test_naive_times_around_daylight_saving_changes():
    tz = pytz.timezone("Australia/Melbourne")
    # clocks jump 02:00 -> 03:00 on 2024-10-06
    gap = to_timestamp("2024-10-06T02:30:00")
    assert gap is not None
    assert (gap.hour, gap.minute) == (3, 0)
    assert to_local_date("2024-10-06T02:30:00") == date(2024, 10, 6)
    assert delivery_outcome("2024-10-06T02:30:00", "2024-10-06") == "On Time"
    assert signed_aging_days("2024-10-06T02:30:00", today=date(2024, 10, 8)) == 2
    # 02:00-03:00 happens twice on 2024-04-07
    repeated = to_timestamp("2024-04-07T02:30:00")
    assert repeated is not None and repeated.utcoffset() == timedelta(hours=11)
    now = tz.localize(datetime(2024, 4, 7, 12, 0))
    assert is_within_last_24_hours("2024-04-07T02:30:00", now=now)
