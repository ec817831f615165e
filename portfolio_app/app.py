"""Page registry and sidebar router."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import streamlit as st

SETUP_PAGE = "Setup / Connection"
PAGE_ORDER = ("Jira Dashboard", "Meeting Intelligence", SETUP_PAGE)

PAGES: dict[str, Callable[[], None]] = {}


def register_page(label: str):
    def decorator(func):
        PAGES[label] = func
        return func

    return decorator


def ordered_pages(labels: Iterable[str]) -> list[str]:
    """Known pages in menu order, anything else alphabetically after them."""
    names = set(labels)
    known = [name for name in PAGE_ORDER if name in names]
    return known + sorted(names.difference(PAGE_ORDER))


def default_page(pages: list[str], connected: bool) -> int:
    """Open on setup until a report service exists."""
    if not connected and SETUP_PAGE in pages:
        return pages.index(SETUP_PAGE)
    return 0


def main():
    st.sidebar.title("Portfolio Dashboard")
    pages = ordered_pages(PAGES)
    if not pages:
        st.write("No pages registered yet.")
        return
    index = default_page(pages, "report_service" in st.session_state)
    choice = st.sidebar.selectbox("Page", pages, index=index)
    PAGES[choice]()


if __name__ == "__main__":
    main()
