"""Exceptions raised by the expense tracker core."""


class ExpenseTrackerError(Exception):
    """Base class for tracker errors."""


class ValidationError(ExpenseTrackerError, ValueError):
    """A draft failed validation; the message is shown to the user as-is."""


class StorageError(ExpenseTrackerError, IOError):
    """The persistent slot could not be read, parsed or written."""
