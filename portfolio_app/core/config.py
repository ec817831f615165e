"""Central configuration, constants, and connection settings."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

# =============================================================================
# Jira Connection Settings
# =============================================================================
JIRA_BROWSE_BASE = "https://duluxgroup.atlassian.net"
TIMEZONE = "Australia/Melbourne"
DEFAULT_PROXY_BASE = "/api/proxy/jira"
# Mount points the auth proxy has been exposed under, tried after the configured base
FALLBACK_PROXY_BASES: Sequence[str] = ("/proxy/jira", "/api/proxy/jira")
SEARCH_PATH = "/rest/api/3/search/jql"
DEFAULT_PAGE_SIZE = 100
DEFAULT_TIMEOUT_SECONDS = 30.0

# Marker the proxy's HTML login page carries when the session cookie has expired
SESSION_EXPIRED_MARKER = "Sign In Required"

# =============================================================================
# Jira Custom Field IDs
# =============================================================================
FIELD_IDS = {
    "start_date": "customfield_11342",
    "rag": "customfield_11578",
    "project_type": "customfield_11588",
    "brands": "customfield_11768",
    "brand_text": "customfield_12577",
}

# Explicit field selection for search requests (bounds the payload size)
JIRA_FETCH_FIELDS: Sequence[str] = (
    "summary",
    "status",
    "issuetype",
    "project",
    "labels",
    "created",
    "resolutiondate",
    "assignee",
    "reporter",
    "priority",
    "duedate",
    FIELD_IDS["start_date"],
    FIELD_IDS["rag"],
    FIELD_IDS["project_type"],
    FIELD_IDS["brands"],
    FIELD_IDS["brand_text"],
)

# =============================================================================
# Refresh Queries
# =============================================================================
JQL_TEAM_CLAUSE = (
    'OR (project in (EPM, DLWLC) AND statusCategory != Done AND '
    '("Brands/Function" ~ "Selleys" OR "Brands/Function" ~ "Yates"))'
)
JQL_AI_CLAUSE = 'OR ("Project Type" = "AI")'
JQL_CURRENT_USER_CLAUSE = "(assignee = currentUser() OR reporter = currentUser())"

# =============================================================================
# Derivation Constants
# =============================================================================
# Display/rank order for aging buckets, most overdue first
AGING_BUCKET_ORDER: Sequence[str] = ("90+", "61-90", "31-60", "0-30", "Unknown")

# Brand tokens in priority order: first substring match wins
BRAND_PRIORITY: Sequence[tuple[str, str]] = (
    ("selleys", "Selleys"),
    ("yates", "Yates"),
)
DEFAULT_BRAND = "Other"

DEFAULT_PROJECT_TYPE = "Not yet classified"
AI_PROJECT_TYPE = "AI"
INITIATIVE_ISSUE_TYPES: frozenset[str] = frozenset({"Initiative", "Epic", "Capability"})
DEFAULT_STREAM = "Demand"

PROJECT_TYPE_OPTIONS: Sequence[str] = (
    "All Project Types",
    "AI",
    "Not yet classified",
    "Operational/Tactical",
    "Regulatory/Compliance",
    "Strategic",
)

# First year offered in the period selector
PERIOD_START_YEAR = 2024

# =============================================================================
# Meeting Intelligence
# =============================================================================
DEFAULT_R2_URL = "https://r2.host-ly.com"
TICKET_PROJECT_KEY = "PKPI2"
TICKET_ASSIGNEE_ACCOUNT_ID = "5f7a805b25fbdf00685e6cf8"
DRAFT_SIGNATURE = "Simon"


def _strip_slash(value: str | None) -> str:
    return (value or "").strip().rstrip("/")


@dataclass(slots=True)
class Settings:
    """Connection settings handed to the API clients and services.

    Values normally come from Streamlit secrets or the environment; see
    :meth:`from_mapping`.
    """

    proxy_base: str = DEFAULT_PROXY_BASE
    origin: str = ""
    user_id: str = ""
    owner_name: str = ""
    browse_base: str = JIRA_BROWSE_BASE
    r2_url: str = DEFAULT_R2_URL
    r2_secret: str = ""
    outlook_bridge_url: str = ""
    ticket_project_key: str = TICKET_PROJECT_KEY
    ticket_assignee_id: str = TICKET_ASSIGNEE_ACCOUNT_ID
    page_size: int = DEFAULT_PAGE_SIZE
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    extra_proxy_bases: list[str] = field(default_factory=lambda: list(FALLBACK_PROXY_BASES))

    def candidate_bases(self) -> list[str]:
        """Ordered, de-duplicated proxy bases (absolute when ``origin`` is set)."""
        out: list[str] = []
        for base in [self.proxy_base, *self.extra_proxy_bases]:
            cleaned = _strip_slash(base)
            if not cleaned:
                continue
            if self.origin and cleaned.startswith("/"):
                cleaned = _strip_slash(self.origin) + cleaned
            if cleaned not in out:
                out.append(cleaned)
        return out

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> Settings:
        """Build settings from a flat mapping (``st.secrets`` section or ``os.environ``).

        Both plain keys (``JIRA_PROXY_BASE``) and the ``VITE_`` prefixed names used
        by the proxy deployment are accepted.
        """

        def pick(name: str, default: Any = "") -> Any:
            for candidate in (name, f"VITE_{name}"):
                value = values.get(candidate)
                if value not in (None, ""):
                    return value
            return default

        extra = pick("JIRA_PROXY_FALLBACKS", None)
        if isinstance(extra, str):
            extra_bases = [b.strip() for b in extra.split(",") if b.strip()]
        elif extra:
            extra_bases = list(extra)
        else:
            extra_bases = list(FALLBACK_PROXY_BASES)

        return cls(
            proxy_base=_strip_slash(pick("JIRA_PROXY_BASE", DEFAULT_PROXY_BASE)),
            origin=_strip_slash(pick("APP_ORIGIN")),
            user_id=str(pick("USER_ID")),
            owner_name=str(pick("OWNER_NAME")),
            browse_base=_strip_slash(pick("JIRA_BROWSE_BASE", JIRA_BROWSE_BASE)),
            r2_url=_strip_slash(pick("R2_URL", DEFAULT_R2_URL)),
            r2_secret=str(pick("R2_SECRET")),
            outlook_bridge_url=_strip_slash(pick("OUTLOOK_BRIDGE_URL")),
            ticket_project_key=str(pick("TICKET_PROJECT_KEY", TICKET_PROJECT_KEY)),
            ticket_assignee_id=str(pick("TICKET_ASSIGNEE_ID", TICKET_ASSIGNEE_ACCOUNT_ID)),
            page_size=int(pick("JIRA_PAGE_SIZE", DEFAULT_PAGE_SIZE)),
            timeout=float(pick("HTTP_TIMEOUT", DEFAULT_TIMEOUT_SECONDS)),
            extra_proxy_bases=extra_bases,
        )


@dataclass(slots=True)
class AppSettings:
    max_table_rows: int = 1000
    new_ticket_table_limit: int = 50


SETTINGS = AppSettings()
