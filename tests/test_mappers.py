from datetime import date

import pytest

from portfolio_app.core.errors import MappingError
from portfolio_app.core.mappers import map_issue, ticket_from_record, ticket_to_record

TODAY = date(2024, 3, 1)


def _raw_issue(key="EPM-1", **field_overrides):
    fields = {
        "summary": "Selleys launch plan",
        "status": {"name": "In Progress", "statusCategory": {"name": "In Progress"}},
        "issuetype": {"name": "Epic"},
        "project": {"key": "EPM", "name": "Enterprise Portfolio", "projectTypeKey": "software"},
        "labels": ["launch"],
        "created": "2024-02-01T10:00:00.000+1100",
        "resolutiondate": None,
        "assignee": {"displayName": "Alice"},
        "reporter": {"displayName": "Bob"},
        "priority": {"name": "High"},
        "duedate": "2024-02-20",
        "customfield_11342": "2024-01-15",
        "customfield_11578": {"value": "Amber"},
        "customfield_11588": [{"value": "Operational/Tactical"}, {"value": "AI"}],
        "customfield_11768": [{"value": "Selleys"}],
        "customfield_12577": None,
    }
    fields.update(field_overrides)
    return {"key": key, "fields": fields}


def test_map_issue_full_record():
    t = map_issue(_raw_issue(), today=TODAY)
    assert t.key == "EPM-1"
    assert t.url.endswith("/browse/EPM-1")
    assert t.status == "In Progress"
    assert t.rag == "Amber"
    assert t.issue_type == "Epic"
    assert t.project_key == "EPM"
    assert t.project_type == "software"
    assert t.project_type_tags == ("Operational/Tactical", "AI")
    assert t.project_type_value == "Operational/Tactical"
    assert t.category == "Tactical"
    assert t.brand == "Selleys"
    assert t.start_date == "2024-01-15"
    assert t.due_date == t.end_date == "2024-02-20"
    assert t.aging_days == 10
    assert t.aging_bucket == "0-30"
    assert t.is_overdue
    assert not t.is_done and t.active
    assert t.stream == "Demand"


def test_map_issue_missing_fields_get_safe_defaults():
    t = map_issue({"key": "X-1"}, today=TODAY)
    assert t.summary == ""
    assert t.status == "Unknown"
    assert t.rag == "Unknown"
    assert t.issue_type == "Unknown"
    assert t.project_key == "" and t.project_name == ""
    assert t.labels == ()
    assert t.project_type_value == "Not yet classified"
    assert t.category == "Ad hoc"
    assert t.brand == "Other"
    assert t.due_date is None and t.created is None and t.resolved is None
    assert t.assignee is None and t.priority is None
    assert t.aging_days is None
    assert t.aging_bucket == "Unknown"
    assert not t.is_overdue
    assert t.active


def test_done_is_status_category_casefold():
    done = map_issue(_raw_issue(status={"name": "Closed", "statusCategory": {"name": "DONE"}}), today=TODAY)
    assert done.is_done and not done.active
    named_done = map_issue(_raw_issue(status={"name": "Done", "statusCategory": {"name": "In Progress"}}), today=TODAY)
    assert not named_done.is_done and named_done.active


def test_resolved_truncated_to_date_and_brand_text():
    t = map_issue(
        _raw_issue(
            resolutiondate="2024-02-18T16:30:00.000+1100",
            customfield_11768=None,
            customfield_12577="Yates garden",
            labels=None,
        ),
        today=TODAY,
    )
    assert t.resolved == "2024-02-18"
    assert t.brand == "Yates"
    assert t.labels == ()


def test_not_yet_due_is_not_overdue():
    t = map_issue(_raw_issue(duedate="2024-03-10"), today=TODAY)
    assert t.aging_days == -9
    assert not t.is_overdue


def test_missing_key_raises():
    with pytest.raises(MappingError):
        map_issue({"fields": {"summary": "orphan"}})


def test_record_roundtrip_keeps_active_invariant():
    t = map_issue(_raw_issue(status={"name": "Done", "statusCategory": {"name": "Done"}}), today=TODAY)
    record = ticket_to_record(t)
    assert record["isDone"] is True and record["active"] is False
    # a stale "active" flag in storage never overrides isDone
    record["active"] = True
    assert ticket_from_record(record) == t
    assert not ticket_from_record(record).active
