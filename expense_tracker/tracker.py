"""
tracker.py - core application logic and persistence

Responsibilities:
 - keep an in-memory, ordered list of Expense objects
 - load it from the injected repository (seed data when nothing is stored)
 - provide the APIs consumed by the UI: add_expense, edit_expense,
   delete_expense, list_expenses, total
 - re-save the whole list after every mutation
"""

import dataclasses
import logging
import math
from typing import Iterable, List, Optional, Tuple

from expense_tracker.errors import StorageError
from expense_tracker.models import Expense, ExpenseDraft, seed_expenses
from expense_tracker.storage import ExpenseRepository
from expense_tracker.validation import validate_draft

# ensure a logger is available
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


def total_amount(expenses: Iterable[Expense]) -> float:
    """Sum of all amounts. Recomputed on every call; the list is small."""
    return math.fsum(e.amount for e in expenses)


class ExpenseTracker:
    """
    Owns the record list for one session. The UI creates one ExpenseTracker
    with a repository and uses its methods to read/write data.
    """

    def __init__(self, repository: ExpenseRepository):
        self.repository = repository
        # in-memory list of Expense objects, in display order
        self.expenses: List[Expense] = []
        # next id for new expenses; only ever grows
        self._next_id = 1
        # True when the list came from the example records instead of storage
        self.seeded = False
        self.load()

    def storage_status(self) -> Tuple[str, str]:
        """Return current storage backend and a short diagnostic message for the UI."""
        return self.repository.name, self.repository.describe()

    def load(self):
        """
        Load the list from the repository. When nothing is stored, or the
        stored data cannot be read, fall back to the example records.
        IDs are kept stable; _next_id is set to at least max(existing_id) + 1.
        """
        try:
            state = self.repository.load()
        except StorageError as exc:
            logger.warning("Stored expenses unreadable, using example data: %s", exc)
            state = None

        if state is None:
            self.expenses = seed_expenses()
            self.seeded = True
            stored_next_id = None
        else:
            self.expenses = list(state.expenses)
            self.seeded = False
            stored_next_id = state.next_id

        # renumber missing, non-positive or duplicate ids
        seen = set()
        max_id = max([e.id for e in self.expenses if e.id > 0], default=0)
        for e in self.expenses:
            if e.id <= 0 or e.id in seen:
                max_id += 1
                logger.info("Renumbering expense %r (id=%s -> %s)", e.name, e.id, max_id)
                e.id = max_id
            seen.add(e.id)

        self._next_id = max(stored_next_id or 1, max_id + 1)

    def save(self):
        """
        Persist the whole list. An empty list is not written so an existing
        slot is never replaced by nothing.
        """
        if not self.expenses:
            logger.info("Expense list is empty; skipping save")
            return
        self.repository.save(list(self.expenses), self._next_id)

    def _commit(self, previous: List[Expense], previous_next_id: int):
        # persist; restore in-memory state if the write fails
        try:
            self.save()
        except StorageError:
            logger.exception("Error saving expenses; changes rolled back")
            self.expenses = previous
            self._next_id = previous_next_id
            raise

    def list_expenses(self) -> List[Expense]:
        return list(self.expenses)

    def get_expense(self, expense_id: int) -> Optional[Expense]:
        return next((e for e in self.expenses if e.id == expense_id), None)

    def total(self) -> float:
        return total_amount(self.expenses)

    def add_expense(self, draft: ExpenseDraft) -> Expense:
        """
        Validate the draft, append a new Expense and persist.
        Raises ValidationError (store unchanged) when the draft is invalid.
        """
        name, amount, date = validate_draft(draft)
        previous, previous_next_id = list(self.expenses), self._next_id
        exp = Expense(id=self._next_id, name=name, amount=amount, date=date)
        self._next_id += 1
        self.expenses.append(exp)
        self._commit(previous, previous_next_id)
        logger.info("Added expense id=%s (%s, %.2f)", exp.id, exp.name, exp.amount)
        return exp

    def edit_expense(self, expense_id: int, draft: ExpenseDraft) -> Optional[Expense]:
        """
        Replace name, amount and date of an existing expense, keeping its id
        and position. The draft is validated exactly like add_expense.
        Returns the updated Expense or None if id not found.
        """
        name, amount, date = validate_draft(draft)
        for i, e in enumerate(self.expenses):
            if e.id == expense_id:
                previous = list(self.expenses)
                updated = dataclasses.replace(e, name=name, amount=amount, date=date)
                self.expenses[i] = updated
                self._commit(previous, self._next_id)
                logger.info("Updated expense id=%s", expense_id)
                return updated
        logger.info("Expense id=%s not found", expense_id)
        return None

    def delete_expense(self, expense_id: int) -> bool:
        """Remove expense by id. Returns True if deleted, False if not found.

        IDs are not renumbered, to keep references stable across sessions.
        """
        remaining = [e for e in self.expenses if e.id != expense_id]
        if len(remaining) == len(self.expenses):
            logger.info("Expense id=%s not found", expense_id)
            return False
        previous = self.expenses
        self.expenses = remaining
        self._commit(previous, self._next_id)
        logger.info("Deleted expense id=%s. Remaining expenses=%d.", expense_id, len(self.expenses))
        return True
