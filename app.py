import streamlit as st
from contextlib import contextmanager
from typing import Optional

from core.charts import bar_chart
from core.config import AppSettings, configure_logging
from core.data import format_amount
from core.metrics_overview import (
    COMPONENT_CHART_COLOR,
    PROJECT_CHART_COLOR,
    compute_totals,
    group_by_field,
)
from core.runtime import DashboardRuntime

RUNTIME_KEY = "_dashboard_runtime"
FLASH_KEY = "_flash_message"


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .metric-card {border-radius: 12px;padding: 16px;color: #ffffff;}
        .metric-card .label {font-size: 1.0rem;}
        .metric-card .value {font-size: 1.8rem;font-weight: 700;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body


def metric_card(column, label: str, value: str, gradient: str, text_color: str = "#ffffff"):
    column.markdown(
        f"""
        <div class="metric-card" style="background: {gradient}; color: {text_color};">
          <div class="label">{label}</div>
          <div class="value">{value}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def get_runtime() -> DashboardRuntime:
    runtime: Optional[DashboardRuntime] = st.session_state.get(RUNTIME_KEY)
    if runtime is None or runtime.stale:
        settings = AppSettings.from_environment()
        configure_logging(settings)
        runtime = DashboardRuntime.start(settings)
        st.session_state[RUNTIME_KEY] = runtime
    return runtime


def restart_application(flash: Optional[str] = None):
    """Drop every piece of session state so the next run starts from storage."""
    for key in list(st.session_state.keys()):
        del st.session_state[key]
    if flash:
        st.session_state[FLASH_KEY] = flash
    st.cache_data.clear()
    st.cache_resource.clear()
    st.rerun()


# ---------- Pages ----------
def render_dashboard(runtime: DashboardRuntime):
    with st.spinner("Loading Solar Oasis Data..."):
        state = runtime.state
    if state.error:
        st.error(state.error)

    totals = compute_totals(state.components, state.projects, state.suppliers)
    cols = st.columns(4)
    metric_card(cols[0], "Total Components", f"{totals.component_count:,}", "linear-gradient(135deg, #3b82f6, #003366)")
    metric_card(cols[1], "Active Projects", f"{totals.active_project_count:,}", "linear-gradient(135deg, #22c55e, #15803d)")
    metric_card(cols[2], "Total Suppliers", f"{totals.supplier_count:,}", "linear-gradient(135deg, #a855f7, #7e22ce)")
    metric_card(
        cols[3],
        "Total Project Value",
        format_amount(totals.total_project_value, runtime.settings.currency),
        "linear-gradient(135deg, #facc15, #FFD700)",
        text_color="#003366",
    )

    left, right = st.columns(2)
    with left:
        with card("Components by Type"):
            series = group_by_field(state.components, "type")
            if series:
                st.altair_chart(bar_chart(series, title="", color=COMPONENT_CHART_COLOR), use_container_width=True)
            else:
                st.info("No components yet.")
    with right:
        with card("Project Status"):
            series = group_by_field(state.projects, "status")
            if series:
                st.altair_chart(bar_chart(series, title="", color=PROJECT_CHART_COLOR), use_container_width=True)
            else:
                st.info("No projects yet.")


SETUP_INSTRUCTIONS = """
1. Go to [sheets.new](https://sheets.new) to create a new Google Sheet. Name it "SolarOasisDB".
2. Create three tabs (sheets) at the bottom named exactly `Components`, `Projects` and `Suppliers`.
3. Ask your developer for the complete `Code.gs` backend script.
4. Click "Extensions" -> "Apps Script".
5. Delete any existing code in the `Code.gs` editor and paste the provided script.
6. Click the "Save project" icon.
7. Click the blue "Deploy" button -> "New deployment".
8. Select type "Web app". For "Who has access", select "Anyone".
9. Click "Deploy" and authorize the permissions when prompted.
10. Copy the "Web app URL", paste it into the field above and click save.
"""


def render_settings(runtime: DashboardRuntime):
    with card("Google Services Integration"):
        st.write(
            "This application uses Google Sheets as a database. To connect your data, deploy a "
            "Google Apps Script Web App and paste its URL below."
        )
        with st.form("endpoint_form"):
            url = st.text_input(
                "Your Deployed Google Apps Script URL",
                value=runtime.endpoint.url,
                placeholder="https://script.google.com/macros/s/...",
                help="Paste the URL from your deployed Web App here.",
            )
            submitted = st.form_submit_button("Save URL & Reload")
        if submitted:
            runtime.save_endpoint(url)
            restart_application(flash="URL saved! Reloaded the application to connect to your database.")

    with card("Backend Setup Instructions"):
        st.markdown(SETUP_INSTRUCTIONS)


# ---------- UI setup ----------
st.set_page_config(page_title="Solar Oasis Dashboard", layout="wide")
inject_base_styles()
st.title("Solar Oasis")

runtime = get_runtime()
flash = st.session_state.pop(FLASH_KEY, None)
if flash:
    st.success(flash)

with st.sidebar:
    st.markdown("### Navigate")
    default_page = "Dashboard" if runtime.endpoint.is_configured else "Settings"
    pages = ["Dashboard", "Settings"]
    nav_choice = st.radio("Navigate", pages, index=pages.index(default_page))
    st.markdown("---")
    if st.button("Refresh data"):
        runtime.load_data()

if nav_choice == "Settings":
    render_settings(runtime)
else:
    render_dashboard(runtime)
