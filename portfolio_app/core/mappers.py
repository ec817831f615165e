"""Mapping raw Jira issue JSON into Ticket instances and stored report records."""

from __future__ import annotations

from datetime import date
from typing import Any

from portfolio_app.analytics.metrics.aging import aging_bucket, signed_aging_days
from portfolio_app.analytics.metrics.derived import derive_brand, derive_category

from .config import DEFAULT_PROJECT_TYPE, DEFAULT_STREAM, FIELD_IDS, JIRA_BROWSE_BASE
from .errors import MappingError
from .models import Ticket


def _option_values(value: Any) -> list[str]:
    """Ordered ``value`` entries of a multi-select custom field."""
    if not isinstance(value, list):
        return []
    out: list[str] = []
    for item in value:
        text = item.get("value") if isinstance(item, dict) else None
        if text:
            out.append(str(text))
    return out


def _name(node: Any, attr: str = "name") -> str | None:
    if isinstance(node, dict):
        val = node.get(attr)
        if val:
            return str(val)
    return None


def _text(value: Any) -> str | None:
    return str(value) if value else None


def map_issue(
    raw: dict[str, Any],
    *,
    browse_base: str = JIRA_BROWSE_BASE,
    today: date | None = None,
) -> Ticket:
    key = raw.get("key") if isinstance(raw, dict) else None
    if not key:
        raise MappingError("Issue record has no key")
    fields = raw.get("fields") or {}

    status = fields.get("status") or {}
    status_category = _name(status.get("statusCategory")) or ""
    is_done = status_category.casefold() == "done"

    due_date = _text(fields.get("duedate"))
    age = signed_aging_days(due_date, today=today)

    project_type_tags = _option_values(fields.get(FIELD_IDS["project_type"]))
    project_type_value = project_type_tags[0] if project_type_tags else DEFAULT_PROJECT_TYPE

    brand_text = fields.get(FIELD_IDS["brand_text"])
    brand_tokens = _option_values(fields.get(FIELD_IDS["brands"]))
    if isinstance(brand_text, str):
        brand_tokens.append(brand_text)
    raw_labels = fields.get("labels")
    labels = [str(lbl) for lbl in raw_labels if lbl] if isinstance(raw_labels, list) else []

    resolved = _text(fields.get("resolutiondate"))
    project = fields.get("project") or {}

    return Ticket(
        key=str(key),
        url=f"{browse_base.rstrip('/')}/browse/{key}",
        summary=fields.get("summary") or "",
        status=_name(status) or "Unknown",
        rag=_name(fields.get(FIELD_IDS["rag"]), "value") or "Unknown",
        issue_type=_name(fields.get("issuetype")) or "Unknown",
        project_key=_name(project, "key") or "",
        project_name=_name(project) or "",
        project_type=_name(project, "projectTypeKey") or "",
        project_type_value=project_type_value,
        project_type_tags=tuple(project_type_tags),
        labels=tuple(labels),
        start_date=_text(fields.get(FIELD_IDS["start_date"])),
        end_date=due_date,
        due_date=due_date,
        created=_text(fields.get("created")),
        resolved=resolved[:10] if resolved else None,
        assignee=_name(fields.get("assignee"), "displayName"),
        reporter=_name(fields.get("reporter"), "displayName"),
        priority=_name(fields.get("priority")),
        aging_days=age,
        aging_bucket=aging_bucket(age),
        is_done=is_done,
        is_overdue=age is not None and age > 0,
        stream=DEFAULT_STREAM,
        category=derive_category(project_type_value),
        brand=derive_brand(labels, brand_tokens),
    )


# Serialized field names of the report JSON
_RECORD_FIELDS: dict[str, str] = {
    "key": "key",
    "url": "url",
    "summary": "summary",
    "status": "status",
    "rag": "rag",
    "issue_type": "issueType",
    "project_key": "projectKey",
    "project_name": "projectName",
    "project_type": "projectType",
    "project_type_tags": "projectTypeTags",
    "project_type_value": "projectTypeValue",
    "labels": "labels",
    "start_date": "startDate",
    "end_date": "endDate",
    "due_date": "dueDate",
    "created": "created",
    "resolved": "resolved",
    "assignee": "assignee",
    "reporter": "reporter",
    "priority": "priority",
    "aging_days": "agingDays",
    "aging_bucket": "agingBucket",
    "is_done": "isDone",
    "is_overdue": "isOverdue",
    "stream": "stream",
    "category": "category",
    "brand": "brand",
}


def ticket_to_record(ticket: Ticket) -> dict[str, Any]:
    record: dict[str, Any] = {}
    for attr, name in _RECORD_FIELDS.items():
        value = getattr(ticket, attr)
        record[name] = list(value) if isinstance(value, tuple) else value
    record["active"] = ticket.active
    return record


def ticket_from_record(record: dict[str, Any]) -> Ticket:
    """Rebuild a Ticket from a stored report record.

    Stored derived values are trusted as-is; only ``active`` is recomputed
    because it is defined by ``isDone``.
    """
    if not record.get("key"):
        raise MappingError("Stored ticket has no key")
    is_done = bool(record.get("isDone", False))
    aging = record.get("agingDays")
    project_type_value = record.get("projectTypeValue") or DEFAULT_PROJECT_TYPE
    return Ticket(
        key=str(record["key"]),
        url=record.get("url") or "",
        summary=record.get("summary") or "",
        status=record.get("status") or "Unknown",
        rag=record.get("rag") or "Unknown",
        issue_type=record.get("issueType") or "Unknown",
        project_key=record.get("projectKey") or "",
        project_name=record.get("projectName") or "",
        project_type=record.get("projectType") or "",
        project_type_value=project_type_value,
        project_type_tags=tuple(record.get("projectTypeTags") or ()),
        labels=tuple(record.get("labels") or ()),
        start_date=record.get("startDate"),
        end_date=record.get("endDate"),
        due_date=record.get("dueDate"),
        created=record.get("created"),
        resolved=record.get("resolved"),
        assignee=record.get("assignee"),
        reporter=record.get("reporter"),
        priority=record.get("priority"),
        aging_days=int(aging) if aging is not None else None,
        aging_bucket=record.get("agingBucket") or aging_bucket(aging),
        is_done=is_done,
        is_overdue=bool(record.get("isOverdue", aging is not None and aging > 0)),
        stream=record.get("stream") or DEFAULT_STREAM,
        category=record.get("category") or derive_category(project_type_value),
        brand=record.get("brand") or "Other",
    )
