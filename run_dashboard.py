"""Convenience launcher for the Streamlit app.

Usage:
  streamlit run run_dashboard.py

Automatically imports every module in ``portfolio_app/pages`` so each page
decorated with ``@register_page`` registers itself without manual edits here.
"""

import logging
import os
from importlib import import_module
from pathlib import Path

import streamlit as st

from portfolio_app.app import main

st.set_page_config(layout="wide")
logger = logging.getLogger(__name__)


def _auto_init_report_service():
    """Initialize the report service from Streamlit secrets or the environment."""
    if "report_service" in st.session_state:
        return

    values = dict(os.environ)
    try:
        values.update(st.secrets.get("jira", {}))
    except FileNotFoundError:
        pass

    from portfolio_app.core.config import Settings
    from portfolio_app.pages.setup import init_service

    settings = Settings.from_mapping(values)
    if not settings.origin:
        st.sidebar.warning("APP_ORIGIN not configured. Please use the Setup page.")
        return
    init_service(settings)
    st.sidebar.success("Jira proxy configured.")


PAGES_DIR = Path(__file__).parent / "portfolio_app" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"portfolio_app.pages.{py.stem}"
    try:
        import_module(mod_name)
    except Exception as e:  # pragma: no cover
        logger.error("Failed importing page %s: %s", mod_name, e)

_auto_init_report_service()

if __name__ == "__main__":
    main()
