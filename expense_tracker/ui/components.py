"""
components.py - reusable Streamlit components / dialog / displays

This module contains pure-UI helpers used by the dashboard:
 - display_header(total): title and running total
 - display_expense_list(tracker, form): one row per expense with edit/delete buttons
 - display_expense_dialog(tracker, form): modal add/edit form
 - display_expense_table / display_spending_over_time: table, XLSX export, chart

Validation lives in expense_tracker.validation; failures reach the user as
toasts through the form's notifier.
"""

from typing import List

import altair as alt
import streamlit as st

from expense_tracker.errors import StorageError
from expense_tracker.export import expenses_to_frame, monthly_totals, to_xlsx_bytes
from expense_tracker.form import ExpenseForm
from expense_tracker.formatting import format_amount, format_date, format_total
from expense_tracker.models import Expense
from expense_tracker.tracker import ExpenseTracker


def display_header(total: float):
    left, right = st.columns([3, 2])
    with left:
        st.title("Expense Tracker")
    with right:
        st.subheader(format_total(total))


def display_expense_list(tracker: ExpenseTracker, form: ExpenseForm):
    """
    Render each expense with edit/delete buttons, plus the add button.
    Opens the dialog when add or edit is clicked on this run.
    """
    expenses = tracker.list_expenses()
    open_dialog = False
    if not expenses:
        st.write("No expenses recorded.")
    for e in expenses:
        with st.container(border=True):
            info, edit_col, delete_col = st.columns([8, 1, 1])
            with info:
                st.markdown(f"**{e.name}**")
                st.caption(f"{format_amount(e.amount)} - {format_date(e.date)}")
            with edit_col:
                if st.button("✏️", key=f"edit_{e.id}", help="Edit expense"):
                    form.open_edit(e)
                    open_dialog = True
            with delete_col:
                # deletes immediately, no confirmation step
                if st.button("🗑️", key=f"delete_{e.id}", help="Delete expense"):
                    # on a failed save keep this run so the error stays visible
                    if _run_mutation(lambda: tracker.delete_expense(e.id)) is not None:
                        st.rerun()

    if st.button("➕ Add Expense", type="primary", key="add_expense"):
        form.open_add()
        open_dialog = True

    if open_dialog:
        display_expense_dialog(tracker, form)


def _run_mutation(action):
    try:
        return action()
    except StorageError as exc:
        st.error(f"Could not save expenses: {exc}")
        return None


def display_expense_dialog(tracker: ExpenseTracker, form: ExpenseForm):
    """Show the add/edit dialog for the current draft."""

    def body():
        # keys change with each opening so widgets start from the fresh draft
        suffix = form.revision
        name = st.text_input("Expense Name", value=form.draft.name, key=f"draft_name_{suffix}")
        amount = st.text_input("Amount", value=form.draft.amount, key=f"draft_amount_{suffix}")
        date = st.date_input("Date", value=form.draft.date, format="DD/MM/YYYY", key=f"draft_date_{suffix}")
        form.update(name=name, amount=amount, date=date)

        cancel_col, submit_col = st.columns(2)
        with cancel_col:
            if st.button("Cancel", key="dialog_cancel"):
                form.cancel()
                st.rerun()
        with submit_col:
            if st.button(form.submit_label, type="primary", key="dialog_submit"):
                _run_mutation(lambda: form.submit(tracker))
                if not form.is_open:
                    st.rerun()

    st.dialog(form.title)(body)()


def display_expense_table(expenses: List[Expense]):
    """Render expenses as a table with an XLSX export button."""
    st.header("Expense List (table)")
    if not expenses:
        st.write("No expenses recorded.")
        return
    df = expenses_to_frame(expenses)
    st.dataframe(df.style.format({"amount": "{:.2f}"}), use_container_width=True, hide_index=True)
    st.download_button(
        label="Download as XLSX",
        data=to_xlsx_bytes(expenses),
        file_name="expenses.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


def display_spending_over_time(expenses: List[Expense]):
    """Monthly bar chart of total spending."""
    st.header("Spending over time")
    agg = monthly_totals(expenses)
    if agg.empty:
        st.info("No expenses to chart.")
        return
    chart = alt.Chart(agg).mark_bar().encode(
        x=alt.X("month:T", title="Month", axis=alt.Axis(format="%Y-%m", labelAngle=-45)),
        y=alt.Y("amount:Q", title="Amount"),
        tooltip=[
            alt.Tooltip("month:T", title="Month", format="%Y-%m"),
            alt.Tooltip("amount:Q", title="Amount", format=".2f"),
        ],
    ).properties(width="container", height=300)
    st.altair_chart(chart, use_container_width=True)
