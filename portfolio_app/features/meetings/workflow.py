"""Meeting minutes workflow: parse, store, then fan out follow-up actions."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import pytz

from portfolio_app.core.config import DRAFT_SIGNATURE, TIMEZONE
from portfolio_app.core.models import ActionItem, CreatedTicket, MeetingSummary

logger = logging.getLogger(__name__)

LogCallback = Callable[[str], None]


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v]


def meeting_from_parsed(parsed: dict[str, Any], raw_text: str, *, now: datetime | None = None) -> MeetingSummary:
    now = now or datetime.now(pytz.timezone(TIMEZONE))
    actions = [
        ActionItem(
            description=str(a.get("description") or ""),
            owner=str(a.get("owner") or ""),
            due_date=str(a.get("dueDate") or ""),
            is_mine=bool(a.get("isSimon") or a.get("isMine")),
        )
        for a in parsed.get("actionItems") or []
        if isinstance(a, dict)
    ]
    return MeetingSummary(
        id=f"{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:6]}",
        title=str(parsed.get("title") or "Untitled meeting"),
        date=str(parsed.get("date") or ""),
        participants=_strings(parsed.get("participants")),
        key_points=_strings(parsed.get("keyPoints")),
        decisions=_strings(parsed.get("decisions")),
        action_items=actions,
        next_steps=_strings(parsed.get("nextSteps")),
        raw_text=raw_text,
        parsed_at=now.isoformat(),
    )


def meeting_to_record(meeting: MeetingSummary) -> dict[str, Any]:
    return {
        "id": meeting.id,
        "title": meeting.title,
        "date": meeting.date,
        "participants": meeting.participants,
        "keyPoints": meeting.key_points,
        "decisions": meeting.decisions,
        "actionItems": [
            {"description": a.description, "owner": a.owner, "dueDate": a.due_date, "isSimon": a.is_mine}
            for a in meeting.action_items
        ],
        "nextSteps": meeting.next_steps,
        "rawText": meeting.raw_text,
        "parsedAt": meeting.parsed_at,
    }


def _bullets(items: list[str]) -> str:
    return "\n".join(f"• {item}" for item in items)


def draft_subject(meeting: MeetingSummary) -> str:
    return f"Meeting Minutes: {meeting.title} - {meeting.date}"


def draft_body(meeting: MeetingSummary) -> str:
    actions = "\n".join(
        f"• {a.description} - {a.owner}" + (f" (due {a.due_date})" if a.due_date else "")
        for a in meeting.action_items
    )
    return (
        f"Hi all,\n\nPlease find the minutes from our meeting on {meeting.date}.\n\n"
        f"KEY POINTS\n{_bullets(meeting.key_points)}\n\n"
        f"DECISIONS\n{_bullets(meeting.decisions)}\n\n"
        f"ACTION ITEMS\n{actions}\n\n"
        f"NEXT STEPS\n{_bullets(meeting.next_steps)}\n\n"
        f"Regards,\n{DRAFT_SIGNATURE}"
    )


@dataclass(slots=True)
class ActionReport:
    created: list[CreatedTicket] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    draft_id: str | None = None
    log: list[str] = field(default_factory=list)


def save_and_action(
    meeting: MeetingSummary,
    *,
    store,
    tickets,
    bridge=None,
    assignee_id: str | None = None,
    on_log: LogCallback | None = None,
) -> ActionReport:
    """Store the meeting, then create a ticket per own action item and a draft.

    A storage failure aborts before any side effect. After that every action is
    attempted independently: a failed ticket or draft is logged and recorded
    but never stops the remaining items.
    """
    report = ActionReport()

    def log(message: str) -> None:
        report.log.append(message)
        if on_log:
            on_log(message)

    log("Saving to R2...")
    store.put(meeting.id, meeting_to_record(meeting))
    log("Saved to R2.")

    for action in (a for a in meeting.action_items if a.is_mine):
        log(f"Creating Jira ticket: {action.description[:50]}...")
        description = f"From meeting: {meeting.title}. Due: {action.due_date or 'TBD'}"
        try:
            created = tickets.create_issue(action.description, description, assignee_id)
        except Exception as exc:
            logger.warning("Ticket creation failed for %r: %s", action.description, exc)
            report.failed.append(action.description)
            log(f"Jira failed: {exc}")
            continue
        report.created.append(created)
        log(f"Created {created.key}")

    if bridge is not None and bridge.configured:
        log("Creating Outlook draft...")
        try:
            report.draft_id = bridge.send_draft(meeting.participants, draft_subject(meeting), draft_body(meeting))
            log("Outlook draft created.")
        except Exception as exc:
            logger.warning("Outlook draft failed for meeting %s: %s", meeting.id, exc)
            log(f"Outlook failed: {exc}")
    return report
