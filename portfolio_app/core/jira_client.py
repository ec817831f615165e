"""Jira API client wrapper (REST v3 enhanced search through the auth proxy)."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

import requests
from jira import JIRA, JIRAError

from .config import JIRA_FETCH_FIELDS, SEARCH_PATH, SESSION_EXPIRED_MARKER, Settings
from .errors import EndpointsExhaustedError, SessionExpiredError, TransportError
from .models import CreatedTicket

logger = logging.getLogger(__name__)

PageCallback = Callable[[int, int], None]


def _error_message(body: Any, status_code: int) -> str:
    if isinstance(body, dict):
        for name in ("message", "error"):
            if body.get(name):
                return str(body[name])
        messages = body.get("errorMessages")
        if isinstance(messages, list) and messages:
            return "; ".join(str(m) for m in messages)
    return f"HTTP {status_code}"


class JiraProxyAPI:
    """Search and create Jira issues through one of several proxy mount points.

    Each request walks ``settings.candidate_bases()`` in order; the first base
    that answers with JSON wins. Failures are collected and only raised, joined,
    once every candidate has failed.
    """

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if settings.user_id:
            self.session.headers["X-User-ID"] = settings.user_id
        self._client: JIRA | None = None

    # ------------------ Search ------------------
    def search_page(
        self,
        jql: str,
        max_results: int,
        next_page_token: str | None = None,
        fields: Sequence[str] = JIRA_FETCH_FIELDS,
    ) -> Any:
        params = {"jql": jql, "maxResults": max_results, "fields": ",".join(fields)}
        if next_page_token:
            params["nextPageToken"] = next_page_token
        errors: list[str] = []
        for base in self.settings.candidate_bases():
            url = f"{base}{SEARCH_PATH}"
            try:
                return self._get_json(url, params)
            except (requests.RequestException, ValueError, TransportError) as exc:
                logger.warning("Search via %s failed: %s", url, exc)
                errors.append(f"{url}: {str(exc) or 'request failed'}")
        raise EndpointsExhaustedError(errors)

    def _get_json(self, url: str, params: dict[str, Any]) -> Any:
        resp = self.session.get(url, params=params, timeout=self.settings.timeout)
        content_type = resp.headers.get("content-type") or ""
        if "application/json" in content_type:
            body = resp.json()
            if resp.status_code >= 400:
                raise TransportError(_error_message(body, resp.status_code))
            return body
        if SESSION_EXPIRED_MARKER in (resp.text or ""):
            raise SessionExpiredError("Session expired, please refresh the page and sign in again.")
        raise TransportError(f"Non-JSON response (HTTP {resp.status_code})")

    def search_all(
        self,
        jql: str,
        page_size: int | None = None,
        *,
        on_page: PageCallback | None = None,
    ) -> list[dict[str, Any]]:
        """Follow ``nextPageToken`` until an empty page, ``isLast``, or no cursor."""
        page_size = page_size or self.settings.page_size
        out: list[dict[str, Any]] = []
        token: str | None = None
        seen_tokens: set[str] = set()
        pages = 0
        while True:
            page = self.search_page(jql, page_size, token)
            pages += 1
            if isinstance(page, dict) and isinstance(page.get("issues"), list):
                issues = page["issues"]
            elif isinstance(page, list):
                issues = page
            else:
                issues = []
            out.extend(issues)
            logger.debug("Fetched page %s (%s issues, %s total)", pages, len(issues), len(out))
            if on_page:
                on_page(pages, len(out))
            if not issues or (isinstance(page, dict) and page.get("isLast") is True):
                break
            token = page.get("nextPageToken") if isinstance(page, dict) else None
            if not token:
                break
            if token in seen_tokens:
                raise TransportError(f"Pagination cursor repeated after page {pages}: {token}")
            seen_tokens.add(token)
        return out

    # ------------------ Create ------------------
    @property
    def client(self) -> JIRA:
        if self._client is None:
            bases = self.settings.candidate_bases()
            if not bases:
                raise TransportError("No Jira proxy base configured")
            headers = {"X-User-ID": self.settings.user_id} if self.settings.user_id else {}
            self._client = JIRA(
                options={"server": bases[0], "rest_api_version": "3", "headers": headers},
                get_server_info=False,
                timeout=self.settings.timeout,
            )
        return self._client

    def create_issue(self, summary: str, description: str, assignee_id: str | None = None) -> CreatedTicket:
        fields: dict[str, Any] = {
            "project": {"key": self.settings.ticket_project_key},
            "summary": summary,
            "description": {
                "type": "doc",
                "version": 1,
                "content": [{"type": "paragraph", "content": [{"type": "text", "text": description}]}],
            },
            "issuetype": {"name": "Task"},
        }
        if assignee_id:
            fields["assignee"] = {"id": assignee_id}
        try:
            issue = self.client.create_issue(fields=fields)
        except JIRAError as exc:
            raise TransportError(f"Jira create failed: {exc.text or exc}") from exc
        key = issue.key
        return CreatedTicket(key=key, url=f"{self.settings.browse_base}/browse/{key}")
