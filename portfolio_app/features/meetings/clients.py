"""HTTP clients for the meeting collaborators (AI parse, object store, mail bridge)."""

from __future__ import annotations

from typing import Any

import requests

from portfolio_app.core.config import Settings
from portfolio_app.core.errors import PortfolioError, TransportError


def _check(resp: requests.Response, what: str) -> None:
    if resp.status_code >= 400:
        raise TransportError(f"{what}: {resp.text[:200]}")


class MeetingParserAPI:
    """``POST {r2_url}/parse`` turning meeting text into a structured summary."""

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session or requests.Session()

    def parse(self, text: str, file_name: str) -> dict[str, Any]:
        if not self.settings.r2_secret:
            raise PortfolioError("R2_SECRET not configured")
        resp = self.session.post(
            f"{self.settings.r2_url}/parse",
            json={"text": text, "fileName": file_name},
            headers={"Authorization": f"Bearer {self.settings.r2_secret}"},
            timeout=self.settings.timeout,
        )
        _check(resp, "Parse API error")
        return resp.json()


class MeetingStoreAPI:
    """Object storage for meeting records, keyed ``meetings/<id>.json``."""

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session or requests.Session()

    def put(self, meeting_id: str, record: dict[str, Any]) -> str:
        key = f"meetings/{meeting_id}.json"
        resp = self.session.put(
            f"{self.settings.r2_url}/{key}",
            json=record,
            headers={"Authorization": f"Bearer {self.settings.r2_secret}"},
            timeout=self.settings.timeout,
        )
        _check(resp, "R2 save failed")
        return key


class OutlookBridgeAPI:
    """Calendar/email bridge creating draft messages."""

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.settings.outlook_bridge_url)

    def send_draft(self, recipients: list[str], subject: str, body: str) -> str:
        if not self.configured:
            raise PortfolioError("OUTLOOK_BRIDGE_URL not configured")
        payload = {
            "to": [{"email": "", "name": name} for name in recipients],
            "subject": subject,
            "body": body,
            "isDraft": True,
        }
        resp = self.session.post(
            f"{self.settings.outlook_bridge_url}/send",
            json=payload,
            timeout=self.settings.timeout,
        )
        _check(resp, "Outlook draft failed")
        return str((resp.json() or {}).get("id", ""))
