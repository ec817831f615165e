"""Key-based reconciliation of a fresh fetch against the previously held tickets."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from portfolio_app.analytics.metrics.aging import local_today, to_local_date

from .models import Ticket


@dataclass(frozen=True, slots=True)
class ReconciliationPolicy:
    """How tickets missing from a fresh fetch are treated.

    The refresh queries cover a bounded window (open work, recent items), so a
    ticket absent from the new result is not evidence it was deleted upstream.
    By default every missing ticket is kept unchanged and the local collection
    only grows. Tickets present in both sets are replaced whole, never merged
    field by field.

    ``evict_resolved_after_days`` opts into dropping a *retained* ticket whose
    resolved date lies more than that many days before ``today``. Tickets
    that are part of the fresh fetch are never evicted.
    """

    retain_missing: bool = True
    evict_resolved_after_days: int | None = None

    def keeps(self, ticket: Ticket, today: date) -> bool:
        if not self.retain_missing:
            return False
        if self.evict_resolved_after_days is None:
            return True
        resolved = to_local_date(ticket.resolved)
        if resolved is None:
            return True
        return (today - resolved).days <= self.evict_resolved_after_days


DEFAULT_POLICY = ReconciliationPolicy()


def merge_tickets(
    previous: Iterable[Ticket],
    fresh: Iterable[Ticket],
    policy: ReconciliationPolicy = DEFAULT_POLICY,
    *,
    today: date | None = None,
) -> tuple[Ticket, ...]:
    """Overlay ``fresh`` on ``previous`` by key.

    Order follows first appearance: previous keys keep their position, new keys
    are appended in fetch order.
    """
    today = today or local_today()
    merged: dict[str, Ticket] = {}
    for ticket in previous:
        merged[ticket.key] = ticket
    fresh_keys: set[str] = set()
    for ticket in fresh:
        merged[ticket.key] = ticket
        fresh_keys.add(ticket.key)
    return tuple(t for key, t in merged.items() if key in fresh_keys or policy.keeps(t, today))
