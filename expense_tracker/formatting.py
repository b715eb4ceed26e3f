"""Display helpers for amounts and dates."""

import datetime

DATE_FORMAT = "%d/%m/%Y"


def format_amount(amount: float) -> str:
    return f"${amount:.2f}"


def format_date(value: datetime.date, pattern: str = DATE_FORMAT) -> str:
    return value.strftime(pattern)


def format_total(total: float) -> str:
    return f"Total: {format_amount(total)}"
