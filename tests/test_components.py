import pytest

from expense_tracker.errors import StorageError
from expense_tracker.storage import InMemoryRepository, encode_state
from expense_tracker.tracker import ExpenseTracker
from expense_tracker.models import seed_expenses
from expense_tracker.ui import components


class FailingRepository(InMemoryRepository):
    def save(self, expenses, next_id=None):
        raise StorageError("disk full")


@pytest.fixture
def errors(monkeypatch):
    shown = []
    monkeypatch.setattr(components.st, "error", shown.append)
    return shown


def test_failed_delete_reports_error_and_skips_rerun(errors):
    tracker = ExpenseTracker(FailingRepository(slot=encode_state(seed_expenses(), 6)))
    result = components._run_mutation(lambda: tracker.delete_expense(1))
    # None tells the list view not to rerun, so the error stays on screen
    assert result is None
    assert errors == ["Could not save expenses: disk full"]
    assert len(tracker.expenses) == 5


def test_successful_delete_allows_rerun(errors):
    tracker = ExpenseTracker(InMemoryRepository())
    assert components._run_mutation(lambda: tracker.delete_expense(1)) is True
    assert components._run_mutation(lambda: tracker.delete_expense(99)) is False
    assert errors == []
