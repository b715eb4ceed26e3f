"""
dashboard.py - Streamlit UI entrypoint and orchestration

This module wires the UI components (expense_tracker.ui.components) with the
business logic (expense_tracker.tracker). The main() function builds the
sidebar menu and routes actions to components and tracker methods.

Design notes:
 - Keep the dashboard responsible only for UI orchestration and presentation.
 - All persistence and business rules live in expense_tracker.tracker.
 - Tracker and dialog form live in st.session_state, one of each per browser session.
"""

import streamlit as st

from expense_tracker.config import Settings
from expense_tracker.form import ExpenseForm
from expense_tracker.storage import build_repository
from expense_tracker.tracker import ExpenseTracker
from expense_tracker.ui import components


def _session_objects():
    if "tracker" not in st.session_state:
        repository = build_repository(Settings.from_env())
        st.session_state["tracker"] = ExpenseTracker(repository)
    if "expense_form" not in st.session_state:
        st.session_state["expense_form"] = ExpenseForm(notify=st.toast)
    return st.session_state["tracker"], st.session_state["expense_form"]


def main():
    """
    Streamlit page: sidebar menu controls which view is shown.
    Views:
      - Expenses: running total, list with edit/delete, add dialog
      - Table & Export: table view with XLSX download
      - Spending over time: monthly totals chart
    """
    st.set_page_config(page_title="Expense Tracker")
    tracker, form = _session_objects()

    backend_name, backend_msg = tracker.storage_status()
    if backend_name == "google_sheets":
        st.sidebar.success(backend_msg)
    else:
        st.sidebar.warning(backend_msg)
        st.sidebar.caption(
            "For indefinite cloud persistence, set GOOGLE_SHEET_ID and "
            "GOOGLE_SERVICE_ACCOUNT_JSON in Streamlit app Secrets."
        )

    menu = ["Expenses", "Table & Export", "Spending over time"]
    choice = st.sidebar.selectbox("Select an option", menu)

    components.display_header(tracker.total())
    if choice == "Expenses":
        components.display_expense_list(tracker, form)
    elif choice == "Table & Export":
        components.display_expense_table(tracker.list_expenses())
    elif choice == "Spending over time":
        components.display_spending_over_time(tracker.list_expenses())


if __name__ == "__main__":
    main()
