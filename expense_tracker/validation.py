"""
validation.py - draft validation shared by the add and edit paths

Rules run in order and the first failure wins:
 - name must be non-empty after trimming
 - amount must parse as a finite number greater than 0
 - date must be a date or an ISO "YYYY-MM-DD" string
"""

import datetime
import math
from typing import Tuple

from expense_tracker.errors import ValidationError
from expense_tracker.models import ExpenseDraft, parse_iso_date

NAME_REQUIRED = "Expense name is required."
AMOUNT_INVALID = "A valid amount is required."
DATE_INVALID = "A valid date is required."


def parse_amount(text) -> float:
    """Parse amount text; raises ValidationError unless it is a finite number > 0."""
    if isinstance(text, bool):
        raise ValidationError(AMOUNT_INVALID)
    try:
        value = float(str(text).strip())
    except (TypeError, ValueError):
        raise ValidationError(AMOUNT_INVALID)
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(AMOUNT_INVALID)
    return value


def parse_date(value) -> datetime.date:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(DATE_INVALID)
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(DATE_INVALID)


def validate_draft(draft: ExpenseDraft) -> Tuple[str, float, datetime.date]:
    """
    Validate a draft and return the cleaned (name, amount, date) triple.
    The returned name is trimmed. Raises ValidationError with the user-facing
    message of the first failing rule.
    """
    name = (draft.name or "").strip()
    if not name:
        raise ValidationError(NAME_REQUIRED)
    amount = parse_amount(draft.amount)
    date = parse_date(draft.date)
    return name, amount, date
