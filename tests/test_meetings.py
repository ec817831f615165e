import io
import zipfile
from datetime import datetime

import pytest
import pytz
import requests

from portfolio_app.core.config import Settings
from portfolio_app.core.errors import PortfolioError, TransportError
from portfolio_app.core.models import CreatedTicket
from portfolio_app.features.meetings.clients import MeetingParserAPI, OutlookBridgeAPI
from portfolio_app.features.meetings.docx_text import extract_docx_text
from portfolio_app.features.meetings.workflow import (
    draft_body,
    draft_subject,
    meeting_from_parsed,
    meeting_to_record,
    save_and_action,
)

NOW = pytz.timezone("Australia/Melbourne").localize(datetime(2024, 5, 2, 9, 0))

PARSED = {
    "title": "Selleys range sync",
    "date": "2024-05-01",
    "participants": ["Alice", "Bob"],
    "keyPoints": ["Range locked"],
    "decisions": ["Ship in June"],
    "actionItems": [
        {"description": "Book photo shoot", "owner": "Simon", "dueDate": "2024-05-10", "isSimon": True},
        {"description": "Send pricing", "owner": "Alice", "isSimon": False},
        {"description": "Update roadmap", "owner": "Simon", "isMine": True},
    ],
    "nextSteps": ["Review in two weeks"],
}


def _docx(body_xml):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")
        archive.writestr(
            "word/document.xml",
            '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main"><w:body>'
            + body_xml
            + "</w:body></w:document>",
        )
    return buf.getvalue()


def test_extract_docx_text_paragraphs():
    data = _docx(
        '<w:p><w:pPr><w:pStyle w:val="Title"/></w:pPr><w:r><w:t>Minutes</w:t></w:r></w:p>'
        '<w:p w:rsidR="00A1"><w:r><w:t>Agreed: R&amp;D </w:t></w:r><w:r><w:t>budget</w:t></w:r></w:p>'
    )
    lines = [line for line in extract_docx_text(data).splitlines() if line]
    assert lines == ["Minutes", "Agreed: R&D budget"]


def test_extract_docx_text_rejects_non_docx():
    with pytest.raises(PortfolioError):
        extract_docx_text(b"plain text, not a zip")
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        archive.writestr("other.xml", "<x/>")
    with pytest.raises(PortfolioError):
        extract_docx_text(buf.getvalue())


def test_meeting_from_parsed():
    meeting = meeting_from_parsed(PARSED, "raw", now=NOW)
    assert meeting.title == "Selleys range sync"
    assert [a.is_mine for a in meeting.action_items] == [True, False, True]
    assert meeting.parsed_at == NOW.isoformat()
    assert meeting.id.startswith(str(int(NOW.timestamp() * 1000)))
    record = meeting_to_record(meeting)
    assert record["actionItems"][0]["isSimon"] is True
    assert record["keyPoints"] == ["Range locked"]


def test_meeting_from_sparse_payload():
    meeting = meeting_from_parsed({"actionItems": ["not a dict"]}, "", now=NOW)
    assert meeting.title == "Untitled meeting"
    assert meeting.action_items == []
    assert meeting.participants == []


def test_draft_text():
    meeting = meeting_from_parsed(PARSED, "raw", now=NOW)
    assert draft_subject(meeting) == "Meeting Minutes: Selleys range sync - 2024-05-01"
    body = draft_body(meeting)
    assert "• Book photo shoot - Simon (due 2024-05-10)" in body
    assert "• Send pricing - Alice\n" in body
    assert body.endswith("Regards,\nSimon")


class FakeStore:
    def __init__(self, fail=False):
        self.fail = fail
        self.saved = {}

    def put(self, meeting_id, record):
        if self.fail:
            raise TransportError("R2 save failed: 503")
        self.saved[meeting_id] = record
        return f"meetings/{meeting_id}.json"


class FakeTickets:
    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []

    def create_issue(self, summary, description, assignee_id=None):
        self.calls.append((summary, description, assignee_id))
        if summary in self.fail_on:
            raise requests.ConnectionError("proxy down")
        key = f"PKPI2-{len(self.calls)}"
        return CreatedTicket(key=key, url=f"https://jira.test/browse/{key}")


class FakeBridge:
    def __init__(self, configured=True, fail=False):
        self.configured = configured
        self.fail = fail
        self.drafts = []

    def send_draft(self, recipients, subject, body):
        if self.fail:
            raise TransportError("Outlook draft failed: 500")
        self.drafts.append((recipients, subject, body))
        return "draft-1"


def test_save_and_action_creates_tickets_for_own_items_only():
    meeting = meeting_from_parsed(PARSED, "raw", now=NOW)
    store, tickets, bridge = FakeStore(), FakeTickets(), FakeBridge()
    seen = []
    report = save_and_action(
        meeting, store=store, tickets=tickets, bridge=bridge, assignee_id="acct-1", on_log=seen.append
    )
    assert meeting.id in store.saved
    assert [c[0] for c in tickets.calls] == ["Book photo shoot", "Update roadmap"]
    assert tickets.calls[0][1] == "From meeting: Selleys range sync. Due: 2024-05-10"
    assert tickets.calls[1][1].endswith("Due: TBD")
    assert tickets.calls[0][2] == "acct-1"
    assert [c.key for c in report.created] == ["PKPI2-1", "PKPI2-2"]
    assert report.failed == []
    assert report.draft_id == "draft-1"
    assert bridge.drafts[0][0] == ["Alice", "Bob"]
    assert seen == report.log
    assert seen[0] == "Saving to R2..."


def test_one_failed_ticket_does_not_stop_the_rest():
    meeting = meeting_from_parsed(PARSED, "raw", now=NOW)
    tickets = FakeTickets(fail_on={"Book photo shoot"})
    report = save_and_action(meeting, store=FakeStore(), tickets=tickets, bridge=FakeBridge(fail=True))
    assert report.failed == ["Book photo shoot"]
    assert [c.key for c in report.created] == ["PKPI2-2"]
    assert report.draft_id is None
    assert any(line.startswith("Jira failed: proxy down") for line in report.log)
    assert report.log[-1].startswith("Outlook failed")


def test_store_failure_aborts_before_side_effects():
    meeting = meeting_from_parsed(PARSED, "raw", now=NOW)
    tickets, bridge = FakeTickets(), FakeBridge()
    with pytest.raises(TransportError):
        save_and_action(meeting, store=FakeStore(fail=True), tickets=tickets, bridge=bridge)
    assert tickets.calls == []
    assert bridge.drafts == []


def test_unconfigured_bridge_is_skipped():
    meeting = meeting_from_parsed(PARSED, "raw", now=NOW)
    bridge = FakeBridge(configured=False)
    report = save_and_action(meeting, store=FakeStore(), tickets=FakeTickets(), bridge=bridge)
    assert bridge.drafts == []
    assert report.draft_id is None


def test_parser_requires_secret():
    api = MeetingParserAPI(Settings(r2_secret=""))
    with pytest.raises(PortfolioError):
        api.parse("text", "minutes.txt")
    assert not OutlookBridgeAPI(Settings(outlook_bridge_url="")).configured


class BrokenTickets(FakeTickets):
    def create_issue(self, summary, description, assignee_id=None):
        if summary == "Book photo shoot":
            self.calls.append((summary, description, assignee_id))
            raise KeyError("issuetype")
        return super().create_issue(summary, description, assignee_id)


class BrokenBridge(FakeBridge):
    def send_draft(self, recipients, subject, body):
        raise ValueError("bridge returned malformed JSON")


def test_unexpected_errors_are_isolated_per_item():
    meeting = meeting_from_parsed(PARSED, "raw", now=NOW)
    tickets = BrokenTickets()
    report = save_and_action(meeting, store=FakeStore(), tickets=tickets, bridge=BrokenBridge())
    assert report.failed == ["Book photo shoot"]
    assert [c.key for c in report.created] == ["PKPI2-2"]
    assert report.draft_id is None
    assert report.log[-1] == "Outlook failed: bridge returned malformed JSON"
