"""Classification fields derived from ticket text (brand, category)."""

from __future__ import annotations

from collections.abc import Iterable

from portfolio_app.core.config import BRAND_PRIORITY, DEFAULT_BRAND
from portfolio_app.core.models import Category


def derive_brand(labels: Iterable[str] | None, brand_fields: Iterable[str] | None) -> str:
    """Attribute a ticket to a brand from its labels and brand field values.

    The concatenated text is scanned case-insensitively; the first brand in
    ``BRAND_PRIORITY`` whose token appears wins, otherwise ``"Other"``.

    Examples
    --------
    >>> derive_brand(["selleys-paint"], [])
    'Selleys'
    >>> derive_brand([], ["Yates"])
    'Yates'
    >>> derive_brand([], [])
    'Other'
    """
    tokens = [str(t) for t in (labels or []) if t] + [str(t) for t in (brand_fields or []) if t]
    haystack = " ".join(tokens).casefold()
    for needle, brand in BRAND_PRIORITY:
        if needle in haystack:
            return brand
    return DEFAULT_BRAND


def derive_category(project_type_text: str | None) -> Category:
    """Strategic unless the project type reads tactical/operational or unclassified."""
    lower = str(project_type_text or "").casefold()
    if "tactical" in lower or "operational" in lower:
        return "Tactical"
    if "not yet" in lower:
        return "Ad hoc"
    return "Strategic"
