import datetime
from io import BytesIO

import pandas as pd

from expense_tracker.export import expenses_to_frame, monthly_totals, to_xlsx_bytes
from expense_tracker.models import Expense, seed_expenses


def test_frame_columns_and_rows():
    df = expenses_to_frame(seed_expenses())
    assert list(df.columns) == ["id", "date", "name", "amount"]
    assert len(df) == 5
    assert df.iloc[0]["date"] == "2024-11-04"


def test_monthly_totals():
    expenses = seed_expenses() + [
        Expense(id=6, name="Gift", amount=20.0, date=datetime.date(2024, 12, 24)),
    ]
    totals = monthly_totals(expenses)
    assert list(totals["amount"]) == [700.0, 20.0]
    assert totals["month"].iloc[0] == pd.Timestamp(2024, 11, 1)


def test_monthly_totals_empty():
    assert monthly_totals([]).empty


def test_xlsx_has_both_sheets():
    data = to_xlsx_bytes(seed_expenses())
    sheets = pd.read_excel(BytesIO(data), sheet_name=None, engine="openpyxl")
    assert set(sheets) == {"expenses", "totals_by_month"}
    assert len(sheets["expenses"]) == 5
    assert sheets["totals_by_month"].iloc[0]["month"] == "2024-11"
