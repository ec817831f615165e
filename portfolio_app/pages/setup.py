"""Connection setup page: collect proxy settings and initialize ReportService."""

from __future__ import annotations

import streamlit as st

from portfolio_app.app import register_page
from portfolio_app.core.config import Settings
from portfolio_app.core.jira_client import JiraProxyAPI
from portfolio_app.core.service import ReportService


def init_service(settings: Settings) -> ReportService:
    """Build the service and store it (with its settings) in session state."""
    service = ReportService(JiraProxyAPI(settings), settings)
    st.session_state["settings"] = settings
    st.session_state["report_service"] = service
    st.session_state.pop("initial_refresh_done", None)
    return service


@register_page("Setup / Connection")
def setup_page():
    st.title("Jira Connection Setup")
    st.caption("Authentication is handled by the proxy; only routing and identity are set here.")

    current: Settings | None = st.session_state.get("settings")
    if current is None:
        try:
            current = Settings.from_mapping(st.secrets.get("jira", {}))
        except FileNotFoundError:
            current = Settings()

    origin = st.text_input("App origin (scheme://host)", value=current.origin)
    proxy_base = st.text_input("Jira proxy base", value=current.proxy_base)
    fallbacks = st.text_input("Fallback proxy bases (comma separated)", value=", ".join(current.extra_proxy_bases))
    user_id = st.text_input("X-User-ID", value=current.user_id)
    owner = st.text_input("Owner name (fallback query)", value=current.owner_name)
    timeout = st.number_input("Request timeout (seconds)", min_value=5, max_value=300, value=int(current.timeout))
    init_btn = st.button("Initialize Connection", type="primary")

    if init_btn:
        if not proxy_base:
            st.error("Proxy base is required.")
            return
        settings = Settings.from_mapping(
            {
                "APP_ORIGIN": origin,
                "JIRA_PROXY_BASE": proxy_base,
                "JIRA_PROXY_FALLBACKS": fallbacks,
                "USER_ID": user_id,
                "OWNER_NAME": owner,
                "HTTP_TIMEOUT": timeout,
                "JIRA_BROWSE_BASE": current.browse_base,
                "R2_URL": current.r2_url,
                "R2_SECRET": current.r2_secret,
                "OUTLOOK_BRIDGE_URL": current.outlook_bridge_url,
                "TICKET_PROJECT_KEY": current.ticket_project_key,
                "TICKET_ASSIGNEE_ID": current.ticket_assignee_id,
                "JIRA_PAGE_SIZE": current.page_size,
            }
        )
        init_service(settings)
        st.success("Connection initialized.")

    if "report_service" in st.session_state:
        bases = st.session_state["settings"].candidate_bases()
        st.info("ReportService ready. Endpoints tried in order: " + ", ".join(bases))
