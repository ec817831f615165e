"""Load table column sets from YAML (with fallbacks)."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

ACTIVE_TABLE_COLUMNS: Sequence[str] = (
    "key",
    "summary",
    "status",
    "rag",
    "aging_days",
    "aging_bucket",
    "start_date",
    "end_date",
    "assignee",
    "reporter",
    "priority",
    "issue_type",
    "category",
    "stream",
    "brand",
    "project_key",
    "project_type",
)

COMPLETED_TABLE_COLUMNS: Sequence[str] = (
    "key",
    "summary",
    "status",
    "start_date",
    "due_date",
    "resolved",
    "delivery_outcome",
    "assignee",
    "reporter",
    "issue_type",
    "category",
    "brand",
    "project_key",
    "project_type",
)

NEW_TICKET_COLUMNS: Sequence[str] = (
    "key",
    "summary",
    "status",
    "created",
    "assignee",
    "issue_type",
    "project_key",
)

_DEFAULTS: dict[str, Sequence[str]] = {
    "active": ACTIVE_TABLE_COLUMNS,
    "completed": COMPLETED_TABLE_COLUMNS,
    "new": NEW_TICKET_COLUMNS,
}

_CACHE: dict[str, list[str]] | None = None


def _fallback() -> dict[str, list[str]]:
    return {name: list(cols) for name, cols in _DEFAULTS.items()}


def load_column_sets(base_path: str | Path | None = None, *, reload: bool = False) -> dict[str, list[str]]:
    global _CACHE
    if _CACHE is not None and not reload:
        return _CACHE
    base = Path(base_path or Path(__file__).resolve().parent.parent)
    yaml_path = base / "columns.yaml"
    if not yaml_path.exists():
        _CACHE = _fallback()
        return _CACHE
    try:
        data = yaml.safe_load(yaml_path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable %s: %s", yaml_path, exc)
        _CACHE = _fallback()
        return _CACHE
    sets = data.get("sets") or {}
    _CACHE = {name: list(sets.get(name) or cols) for name, cols in _DEFAULTS.items()}
    return _CACHE


def get_columns(set_name: str) -> list[str]:
    sets = load_column_sets()
    return sets.get(set_name, [])
