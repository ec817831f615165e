"""ReportService: orchestrates fetching, mapping, merging, and summarizing."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

import pytz

from portfolio_app.analytics.aggregations.totals import summarize

from .config import (
    JQL_AI_CLAUSE,
    JQL_CURRENT_USER_CLAUSE,
    JQL_TEAM_CLAUSE,
    TIMEZONE,
    Settings,
)
from .errors import EmptyRefreshError, MappingError, PortfolioError
from .jira_client import JiraProxyAPI
from .mappers import map_issue
from .merge import DEFAULT_POLICY, ReconciliationPolicy, merge_tickets
from .models import ReportSnapshot, Ticket

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int | None, int | None], None]


def primary_jql() -> str:
    return " ".join([JQL_CURRENT_USER_CLAUSE, JQL_TEAM_CLAUSE, JQL_AI_CLAUSE])


def fallback_jql(owner: str) -> str:
    """Same query with the owner's name in place of ``currentUser()``.

    Used when the proxy cannot resolve the session user inside JQL. Without an
    owner name the primary query is repeated.
    """
    if not owner:
        return primary_jql()
    escaped = owner.replace('"', '\\"')
    owner_clause = f'(assignee = "{escaped}" OR reporter = "{escaped}")'
    return " ".join([owner_clause, JQL_TEAM_CLAUSE, JQL_AI_CLAUSE])


@dataclass(frozen=True, slots=True)
class RefreshOutcome:
    """Result of a refresh attempt; ``snapshot`` is always safe to display."""

    snapshot: ReportSnapshot
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ReportService:
    def __init__(
        self,
        api: JiraProxyAPI,
        settings: Settings | None = None,
        policy: ReconciliationPolicy = DEFAULT_POLICY,
    ):
        self.api = api
        self.settings = settings or api.settings
        self.policy = policy
        self._tz = pytz.timezone(TIMEZONE)

    # ------------------ Fetch ------------------
    def fetch_raw(self, owner: str, *, progress: ProgressCallback | None = None) -> list[dict[str, Any]]:
        """Run the primary query, then the owner fallback if it came back empty."""
        if progress:
            progress("Querying Jira", None, None)
        issues = self.api.search_all(primary_jql(), on_page=self._page_reporter(progress))
        if not issues:
            logger.info("Primary refresh query returned no issues; retrying with owner fallback")
            if progress:
                progress("No results for current user, retrying by owner name", None, None)
            issues = self.api.search_all(fallback_jql(owner), on_page=self._page_reporter(progress))
        if not issues:
            raise EmptyRefreshError("Refresh returned zero tickets; keeping previous dashboard data.")
        return issues

    def fetch_tickets(
        self,
        owner: str,
        *,
        today: date | None = None,
        progress: ProgressCallback | None = None,
    ) -> list[Ticket]:
        raw = self.fetch_raw(owner, progress=progress)
        if progress:
            progress("Mapping issues", None, len(raw))
        tickets: list[Ticket] = []
        for record in raw:
            try:
                tickets.append(map_issue(record, browse_base=self.settings.browse_base, today=today))
            except MappingError as exc:
                logger.warning("Skipping unmappable issue: %s", exc)
        if not tickets:
            raise EmptyRefreshError("Refresh returned no usable tickets; keeping previous dashboard data.")
        return tickets

    # ------------------ Refresh ------------------
    def refresh(
        self,
        previous: ReportSnapshot,
        *,
        now: datetime | None = None,
        progress: ProgressCallback | None = None,
    ) -> ReportSnapshot:
        """Build a new snapshot from Jira merged over ``previous``.

        Raises on transport failures and on an empty result; ``previous`` is
        never modified.
        """
        now = now or datetime.now(self._tz)
        today = now.astimezone(self._tz).date() if now.tzinfo else now.date()
        owner = previous.owner_name or self.settings.owner_name
        fresh = self.fetch_tickets(owner, today=today, progress=progress)
        if progress:
            progress("Merging with cached tickets", None, None)
        tickets = merge_tickets(previous.tickets, fresh, self.policy, today=today)
        logger.info(
            "Refresh fetched %s tickets, %s after merge (%s cached)",
            len(fresh),
            len(tickets),
            len(previous.tickets),
        )
        return ReportSnapshot(
            generated_at=now.isoformat(),
            owner_name=previous.owner_name,
            scope_note=previous.scope_note,
            totals=summarize(tickets),
            tickets=tickets,
        )

    def refresh_or_keep(
        self,
        previous: ReportSnapshot,
        *,
        now: datetime | None = None,
        progress: ProgressCallback | None = None,
    ) -> RefreshOutcome:
        try:
            return RefreshOutcome(self.refresh(previous, now=now, progress=progress))
        except PortfolioError as exc:
            logger.warning("Refresh failed, keeping previous snapshot: %s", exc)
            return RefreshOutcome(previous, str(exc) or "Failed to refresh")

    # ------------------ Internal Helpers ------------------
    @staticmethod
    def _page_reporter(progress: ProgressCallback | None):
        if progress is None:
            return None

        def on_page(pages: int, total: int) -> None:
            progress(f"Fetched page {pages} ({total} issues so far)", None, None)

        return on_page
