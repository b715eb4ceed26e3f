"""
models.py - Data model definitions

This file defines the Expense dataclass kept by the tracker and the
ExpenseDraft staging copy edited by the form. Expenses are serialized to/from
simple dicts so they can be persisted as JSON (see expense_tracker.storage).
"""

import datetime
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union


def parse_iso_date(value: Union[str, datetime.date, None]) -> datetime.date:
    """
    Coerce a stored date value to a calendar date.

    Accepts date objects, "YYYY-MM-DD" strings and full ISO timestamps
    ("2024-11-04T00:00:00.000Z", as written by browser storage); the time part
    is dropped. Raises ValueError for anything else.
    """
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"not a date: {value!r}")
    text = value.strip()
    # a time part must be separated by "T" or a space
    if len(text) > 10 and text[10] not in "T ":
        raise ValueError(f"not a date: {value!r}")
    return datetime.date.fromisoformat(text[:10])


@dataclass
class Expense:
    """
    Represents a single expense entry.

    Fields:
      - id: integer unique id assigned by the tracker (never reused)
      - name: non-empty label shown in the list
      - amount: positive amount (two-decimal display, no currency handling)
      - date: calendar date of the expense
    """
    id: int
    name: str
    amount: float
    date: datetime.date

    def to_dict(self) -> Dict:
        """
        Convert to a plain dict suitable for JSON serialization.
        Dates are written as ISO "YYYY-MM-DD" strings.
        """
        return {
            "id": self.id,
            "name": self.name,
            "amount": self.amount,
            "date": self.date.isoformat(),
        }

    @staticmethod
    def from_dict(d: Dict) -> "Expense":
        """
        Construct an Expense from a dict (inverse of to_dict).
        Raises ValueError/KeyError/TypeError on malformed records (including a
        blank name or an amount that is not a finite number > 0) so the caller
        can treat the whole slot as unparseable.
        """
        if not isinstance(d, dict):
            raise TypeError(f"expense record must be an object, got {type(d).__name__}")
        name = str(d["name"])
        if not name.strip():
            raise ValueError("expense name is blank")
        amount = d["amount"]
        if isinstance(amount, bool):
            raise TypeError("amount must be a number")
        amount = float(amount)
        if not math.isfinite(amount) or amount <= 0:
            raise ValueError(f"amount must be a finite number > 0, got {amount!r}")
        return Expense(
            id=int(d.get("id", 0) or 0),
            name=name,
            amount=amount,
            date=parse_iso_date(d["date"]),
        )


@dataclass
class ExpenseDraft:
    """
    In-progress copy of an expense while it is created or edited.

    amount is raw text as typed; it is only parsed when the draft is validated.
    date is normally a date (st.date_input) but may be text or None.
    """
    name: str = ""
    amount: str = ""
    date: Optional[Union[datetime.date, str]] = field(default_factory=datetime.date.today)

    @staticmethod
    def from_expense(expense: Expense) -> "ExpenseDraft":
        return ExpenseDraft(name=expense.name, amount=_amount_text(expense.amount), date=expense.date)


def _amount_text(amount: float) -> str:
    # 300.0 -> "300", 4.5 -> "4.5"
    text = repr(float(amount))
    return text[:-2] if text.endswith(".0") else text


# example records shown when nothing has been persisted yet
SEED_EXPENSES = [
    {"id": 1, "name": "Groceries", "amount": 300.0, "date": "2024-11-04"},
    {"id": 2, "name": "Dining Out", "amount": 100.0, "date": "2024-11-28"},
    {"id": 3, "name": "Internet Subscription", "amount": 50.0, "date": "2024-11-15"},
    {"id": 4, "name": "Transportation", "amount": 150.0, "date": "2024-11-18"},
    {"id": 5, "name": "Entertainment", "amount": 100.0, "date": "2024-11-22"},
]


def seed_expenses() -> List[Expense]:
    """Fresh copies of the example records."""
    return [Expense.from_dict(d) for d in SEED_EXPENSES]
