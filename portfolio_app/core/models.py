"""Domain data models for tickets, report snapshots, and meeting summaries."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

Category = Literal["Strategic", "Tactical", "Ad hoc"]
SortDirection = Literal["asc", "desc"]


@dataclass(frozen=True, slots=True)
class Ticket:
    key: str
    url: str
    summary: str
    status: str
    rag: str
    issue_type: str
    project_key: str
    project_name: str
    project_type: str
    project_type_value: str
    start_date: str | None
    end_date: str | None
    due_date: str | None
    created: str | None
    resolved: str | None
    assignee: str | None
    reporter: str | None
    priority: str | None
    aging_days: int | None
    aging_bucket: str
    is_done: bool
    is_overdue: bool
    category: Category
    brand: str
    stream: str = "Demand"
    project_type_tags: tuple[str, ...] = ()
    labels: tuple[str, ...] = ()

    @property
    def active(self) -> bool:
        return not self.is_done


@dataclass(frozen=True, slots=True)
class ReportTotals:
    all_tickets: int = 0
    total_initiatives: int = 0
    overdue_items: int = 0
    completed: int = 0
    active_tickets: int = 0
    ai_project_type_tickets: int = 0


@dataclass(frozen=True, slots=True)
class ReportSnapshot:
    """One immutable, fully computed view of the ticket collection."""

    generated_at: str
    owner_name: str
    scope_note: str = ""
    totals: ReportTotals = field(default_factory=ReportTotals)
    tickets: tuple[Ticket, ...] = ()


@dataclass(frozen=True, slots=True)
class ColumnDefinition:
    key: str
    label: str
    value: Callable[[Any], Any]
    render: Callable[[Any], Any] | None = None


@dataclass(frozen=True, slots=True)
class PeriodOption:
    key: str
    label: str
    kind: Literal["all", "quarter", "annual"]
    year: int
    quarter: int | None = None


@dataclass(slots=True)
class ActionItem:
    description: str
    owner: str = ""
    due_date: str = ""
    is_mine: bool = False


@dataclass(slots=True)
class MeetingSummary:
    id: str
    title: str
    date: str
    participants: list[str] = field(default_factory=list)
    key_points: list[str] = field(default_factory=list)
    decisions: list[str] = field(default_factory=list)
    action_items: list[ActionItem] = field(default_factory=list)
    next_steps: list[str] = field(default_factory=list)
    raw_text: str = ""
    parsed_at: str = ""


@dataclass(frozen=True, slots=True)
class CreatedTicket:
    key: str
    url: str
