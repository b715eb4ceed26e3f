"""
form.py - state behind the add/edit expense dialog

ExpenseForm holds the draft being edited, whether the dialog is open and
which expense (if any) is being edited. It is kept in st.session_state so it
survives Streamlit reruns, but has no Streamlit dependency itself.
"""

import datetime
from typing import Callable, Optional

from expense_tracker.errors import ValidationError
from expense_tracker.models import Expense, ExpenseDraft
from expense_tracker.tracker import ExpenseTracker

Notifier = Callable[[str], None]


def _ignore(message: str) -> None:
    pass


class ExpenseForm:
    def __init__(self, notify: Optional[Notifier] = None, today: Callable[[], datetime.date] = datetime.date.today):
        self.notify = notify or _ignore
        self._today = today
        self.draft = ExpenseDraft(date=today())
        # only explicit cancel/submit close it; dismissing st.dialog with X or Esc
        # does not call back, so the view opens the dialog from button clicks instead
        self.is_open = False
        self.editing_id: Optional[int] = None
        # bumped whenever a new draft is started; lets the view key its widgets
        self.revision = 0

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    @property
    def title(self) -> str:
        return "Edit Expense" if self.is_editing else "Add Expense"

    @property
    def submit_label(self) -> str:
        return "Save Changes" if self.is_editing else "Add Expense"

    def reset(self):
        """Empty name and amount, today's date, not editing."""
        self.draft = ExpenseDraft(name="", amount="", date=self._today())
        self.editing_id = None
        self.revision += 1

    def open_add(self):
        self.reset()
        self.is_open = True

    def open_edit(self, expense: Expense):
        self.draft = ExpenseDraft.from_expense(expense)
        self.editing_id = expense.id
        self.revision += 1
        self.is_open = True

    def cancel(self):
        self.is_open = False
        self.reset()

    def update(self, **fields):
        """
        Store raw field values (name, amount, date) on the draft.
        Amount text is kept as typed and only parsed on submit.
        """
        for key, value in fields.items():
            if key not in ("name", "amount", "date"):
                raise TypeError(f"unknown draft field: {key}")
            setattr(self.draft, key, value)

    def submit(self, tracker: ExpenseTracker) -> Optional[Expense]:
        """
        Add or save the draft. On a validation failure the message goes to the
        notifier and the dialog stays open; on success the draft is cleared
        and the dialog closed.
        """
        try:
            if self.is_editing:
                saved = tracker.edit_expense(self.editing_id, self.draft)
            else:
                saved = tracker.add_expense(self.draft)
        except ValidationError as exc:
            self.notify(str(exc))
            return None
        self.reset()
        self.is_open = False
        return saved
