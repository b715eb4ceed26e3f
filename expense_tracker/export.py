"""
export.py - tabular views of the expense list

Builds the pandas DataFrames behind the table view, the XLSX download and the
monthly spending chart. Kept free of Streamlit so it can be tested directly.
"""

from io import BytesIO
from typing import List

import pandas as pd

from expense_tracker.models import Expense

COLUMNS = ["id", "date", "name", "amount"]


def expenses_to_frame(expenses: List[Expense]) -> pd.DataFrame:
    rows = [
        {"id": e.id, "date": e.date.isoformat(), "name": e.name, "amount": float(e.amount)}
        for e in expenses
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def monthly_totals(expenses: List[Expense]) -> pd.DataFrame:
    """
    Total amount per calendar month, oldest first.
    Columns: month (Timestamp of the month start), amount.
    """
    df = expenses_to_frame(expenses)
    if df.empty:
        return pd.DataFrame({"month": pd.Series(dtype="datetime64[ns]"), "amount": pd.Series(dtype=float)})
    df["month"] = pd.to_datetime(df["date"]).dt.to_period("M").dt.to_timestamp()
    return df.groupby("month", as_index=False)["amount"].sum().sort_values("month").reset_index(drop=True)


def to_xlsx_bytes(expenses: List[Expense]) -> bytes:
    """Workbook with an "expenses" sheet and a "totals_by_month" sheet."""
    df = expenses_to_frame(expenses)
    totals = monthly_totals(expenses)
    totals["month"] = totals["month"].dt.strftime("%Y-%m")
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="expenses")
        totals.to_excel(writer, index=False, sheet_name="totals_by_month")
    # context manager already saved into buffer
    return buffer.getvalue()
