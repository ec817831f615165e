"""Meeting intelligence page: upload minutes, review the AI summary, act on it."""

from __future__ import annotations

import requests
import streamlit as st

from portfolio_app.app import register_page
from portfolio_app.core.config import Settings
from portfolio_app.core.errors import PortfolioError
from portfolio_app.core.jira_client import JiraProxyAPI
from portfolio_app.core.models import MeetingSummary
from portfolio_app.features.meetings.clients import MeetingParserAPI, MeetingStoreAPI, OutlookBridgeAPI
from portfolio_app.features.meetings.docx_text import extract_docx_text
from portfolio_app.features.meetings.workflow import meeting_from_parsed, save_and_action
from portfolio_app.visual.progress import ProgressReporter


def _section(title: str, items: list[str]) -> None:
    if not items:
        return
    st.markdown(f"**{title}**")
    st.markdown("\n".join(f"- {item}" for item in items))


def _render_meeting(meeting: MeetingSummary) -> None:
    st.subheader(meeting.title)
    st.caption(f"{meeting.date} · {', '.join(meeting.participants)}")
    _section("Key Points", meeting.key_points)
    _section("Decisions", meeting.decisions)
    if meeting.action_items:
        st.markdown("**Action Items**")
        st.dataframe(
            [
                {
                    "Action": a.description,
                    "Owner": a.owner,
                    "Due": a.due_date or "TBD",
                    "Mine": "yes" if a.is_mine else "",
                }
                for a in meeting.action_items
            ],
            hide_index=True,
        )
    _section("Next Steps", meeting.next_steps)


@register_page("Meeting Intelligence")
def meetings_page():
    st.title("Meeting Intelligence")
    settings: Settings | None = st.session_state.get("settings")
    service = st.session_state.get("report_service")
    if settings is None or service is None:
        st.warning("Initialize connection on Setup page first.")
        return

    upload = st.file_uploader("Copilot meeting extract (.docx)", type=["docx"])
    if upload is not None and st.session_state.get("meeting_file") != upload.name:
        reporter = ProgressReporter(f"Reading {upload.name}")
        try:
            text = extract_docx_text(upload.getvalue())
            reporter.update("Extracted text, sending to parser...")
            parsed = MeetingParserAPI(settings).parse(text, upload.name)
            st.session_state["meeting"] = meeting_from_parsed(parsed, text)
            st.session_state["meeting_file"] = upload.name
            st.session_state.pop("meeting_report", None)
            reporter.complete("AI parsing complete.")
        except (PortfolioError, requests.RequestException, ValueError) as exc:
            reporter.error(f"Failed to parse meeting: {exc}")

    meeting: MeetingSummary | None = st.session_state.get("meeting")
    if meeting is None:
        st.info("Upload a meeting extract to get started.")
        return
    _render_meeting(meeting)

    if st.button("Save & create actions", type="primary"):
        reporter = ProgressReporter("Saving meeting")
        api: JiraProxyAPI = service.api
        try:
            report = save_and_action(
                meeting,
                store=MeetingStoreAPI(settings),
                tickets=api,
                bridge=OutlookBridgeAPI(settings),
                assignee_id=settings.ticket_assignee_id,
                on_log=reporter.log,
            )
            st.session_state["meeting_report"] = report
            reporter.complete(f"Done: {len(report.created)} ticket(s) created.")
        except (PortfolioError, requests.RequestException) as exc:
            reporter.error(f"Save failed: {exc}")

    report = st.session_state.get("meeting_report")
    if report is not None:
        for ticket in report.created:
            st.markdown(f"- [{ticket.key}]({ticket.url})")
        if report.draft_id:
            st.success("Outlook draft created.")
        with st.expander("Action log"):
            st.text("\n".join(report.log))
