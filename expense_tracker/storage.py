"""
storage.py - persistent slot for the expense records

The tracker never touches files or sheets directly; it is handed an
ExpenseRepository and calls load()/save(). Implementations:
 - JsonFileRepository: local JSON file, written atomically (default)
 - GoogleSheetsRepository: durable backend when GOOGLE_SHEET_ID is configured
 - InMemoryRepository: keeps the serialized slot in memory (tests, previews)

Slot layout (JSON):
    {"next_id": 6, "expenses": [{"id": 1, "name": "...", "amount": 300.0, "date": "2024-11-04"}, ...]}
A bare array of records is accepted on load as well.
"""

import ast
import json
import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from expense_tracker.config import STORAGE_KEY, Settings
from expense_tracker.errors import StorageError
from expense_tracker.models import Expense

# Optional Google Sheets backend imports; the JSON file is used when missing
try:
    import gspread
    from google.oauth2.service_account import Credentials
except ImportError:
    gspread = None
    Credentials = None

logger = logging.getLogger(__name__)


@dataclass
class StoredState:
    """What a repository hands back on load."""
    expenses: List[Expense]
    next_id: Optional[int] = None


def encode_state(expenses: List[Expense], next_id: Optional[int]) -> str:
    data: Dict[str, Any] = {STORAGE_KEY: [e.to_dict() for e in expenses]}
    if next_id is not None:
        data["next_id"] = next_id
    return json.dumps(data, indent=2)


def decode_state(text: str) -> StoredState:
    """
    Parse slot text. Raises StorageError when the text is not JSON, has the
    wrong shape or holds a malformed record.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise StorageError(f"expense data is not valid JSON: {exc}") from exc

    next_id = None
    if isinstance(data, list):
        records = data
    elif isinstance(data, dict):
        records = data.get(STORAGE_KEY)
        raw_next = data.get("next_id")
        if raw_next is not None:
            try:
                next_id = int(raw_next)
            except (TypeError, ValueError, OverflowError):
                next_id = None
    else:
        records = None
    if not isinstance(records, list):
        raise StorageError(f"expense data has no '{STORAGE_KEY}' list")

    try:
        expenses = [Expense.from_dict(d) for d in records]
    except (KeyError, TypeError, ValueError, OverflowError) as exc:
        raise StorageError(f"malformed expense record: {exc!r}") from exc
    return StoredState(expenses=expenses, next_id=next_id)


class ExpenseRepository(ABC):
    """Load/save contract used by ExpenseTracker."""

    name = "repository"

    @abstractmethod
    def load(self) -> Optional[StoredState]:
        """
        Return the persisted state, or None when nothing has been saved yet.
        Raises StorageError when the slot exists but cannot be read or parsed.
        """

    @abstractmethod
    def save(self, expenses: List[Expense], next_id: Optional[int] = None) -> None:
        """Replace the slot with the given records. Raises StorageError on failure."""

    def describe(self) -> str:
        return self.name


class InMemoryRepository(ExpenseRepository):
    """
    Keeps the serialized slot text in memory. Useful as a test double: the
    slot goes through the same encode/decode path as the file backend.
    """

    name = "memory"

    def __init__(self, slot: Optional[str] = None):
        self.slot = slot
        self.save_count = 0

    def load(self) -> Optional[StoredState]:
        if self.slot is None:
            return None
        return decode_state(self.slot)

    def save(self, expenses: List[Expense], next_id: Optional[int] = None) -> None:
        self.slot = encode_state(expenses, next_id)
        self.save_count += 1

    def describe(self) -> str:
        return "In-memory storage (not persisted)."


class JsonFileRepository(ExpenseRepository):
    """JSON file persistence. Writes go to a temp file that is then moved into place."""

    name = "local_json"

    def __init__(self, path: str):
        self.path = path

    def load(self) -> Optional[StoredState]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as exc:
            raise StorageError(f"cannot read {self.path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise StorageError(f"{self.path} is not UTF-8 text: {exc}") from exc
        return decode_state(text)

    def save(self, expenses: List[Expense], next_id: Optional[int] = None) -> None:
        target = os.path.abspath(self.path)
        dirn = os.path.dirname(target)
        logger.info("Saving data to %s (expenses=%d)", target, len(expenses))
        text = encode_state(expenses, next_id)
        tmp_path = None
        try:
            os.makedirs(dirn, exist_ok=True)
            # atomic write: write to temp file then move
            fd, tmp_path = tempfile.mkstemp(prefix="tmp_expenses_", dir=dirn, text=True)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            shutil.move(tmp_path, target)
        except OSError as exc:
            logger.exception("Failed to save data file")
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.warning("Could not remove temp file %s", tmp_path)
            raise StorageError(f"cannot write {target}: {exc}") from exc

    def describe(self) -> str:
        return f"Local file storage: {os.path.abspath(self.path)}"


class GoogleSheetsRepository(ExpenseRepository):
    """
    Google Sheets persistence backend.

    Data layout:
      - worksheet "expenses": one row per record under the header id, name, amount, date
      - worksheet "meta": key/value rows (next_id)
    """

    name = "google_sheets"
    EXPENSES_SHEET_NAME = STORAGE_KEY
    META_SHEET_NAME = "meta"
    EXPENSE_HEADERS = ["id", "name", "amount", "date"]
    META_HEADERS = ["key", "value"]
    SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

    def __init__(self, settings: Settings, spreadsheet=None):
        self.available = False
        self.reason = ""
        self.settings = settings
        self._spreadsheet = spreadsheet
        self._expenses_ws = None
        self._meta_ws = None

        if self._spreadsheet is None:
            if not settings.google_sheet_id:
                self.reason = "GOOGLE_SHEET_ID is not set"
                return
            if gspread is None or Credentials is None:
                self.reason = "Google Sheets dependencies are unavailable"
                return

        try:
            if self._spreadsheet is None:
                client = gspread.authorize(self._build_credentials())
                self._spreadsheet = client.open_by_key(settings.google_sheet_id)
            self._expenses_ws = self._get_or_create_worksheet(
                self.EXPENSES_SHEET_NAME, rows=1000, cols=len(self.EXPENSE_HEADERS)
            )
            self._meta_ws = self._get_or_create_worksheet(self.META_SHEET_NAME, rows=20, cols=2)
            self._ensure_headers()
            self.available = True
        except Exception as exc:
            self.available = False
            self.reason = f"Google Sheets init failed ({exc.__class__.__name__})"
            logger.warning("Google Sheets backend unavailable: %s", self.reason)

    def _build_credentials(self):
        service_account_json = self.settings.google_service_account_json
        service_account_file = self.settings.google_service_account_file

        if service_account_json:
            try:
                info = json.loads(service_account_json)
            except json.JSONDecodeError:
                # tolerate Python-dict style strings often used by mistake in env vars
                info = ast.literal_eval(service_account_json)
            if not isinstance(info, dict):
                raise ValueError("GOOGLE_SERVICE_ACCOUNT_JSON must decode to an object")
            return Credentials.from_service_account_info(info, scopes=self.SCOPES)

        if service_account_file:
            return Credentials.from_service_account_file(service_account_file, scopes=self.SCOPES)

        # Fallback to application default credentials if available.
        import google.auth
        creds, _ = google.auth.default(scopes=self.SCOPES)
        return creds

    def _get_or_create_worksheet(self, title: str, rows: int, cols: int):
        try:
            return self._spreadsheet.worksheet(title)
        except Exception:
            return self._spreadsheet.add_worksheet(title=title, rows=rows, cols=cols)

    @staticmethod
    def _ensure_sheet_size(ws, min_rows: int, min_cols: int):
        new_rows = max(ws.row_count, min_rows)
        new_cols = max(ws.col_count, min_cols)
        if new_rows != ws.row_count or new_cols != ws.col_count:
            ws.resize(rows=new_rows, cols=new_cols)

    def _ensure_headers(self):
        for ws, headers in ((self._expenses_ws, self.EXPENSE_HEADERS), (self._meta_ws, self.META_HEADERS)):
            first = ws.row_values(1) or []
            if [str(x).strip() for x in first] != headers:
                self._ensure_sheet_size(ws, 2, len(headers))
                ws.update(range_name="A1", values=[headers], value_input_option="RAW")

    def load(self) -> Optional[StoredState]:
        if not self.available:
            raise StorageError(self.reason or "Google Sheets backend unavailable")
        try:
            exp_values = self._expenses_ws.get_all_values() or []
            meta_values = self._meta_ws.get_all_values() or []
        except Exception as exc:
            logger.exception("Failed to load expenses from Google Sheets")
            raise StorageError(f"Google Sheets read failed ({exc.__class__.__name__})") from exc

        rows = [row for row in exp_values[1:] if any(str(c).strip() for c in row)]
        if not rows:
            return None
        headers = [str(h).strip().lower() for h in exp_values[0]]
        expenses = []
        for row in rows:
            record = {h: (row[idx] if idx < len(row) else "") for idx, h in enumerate(headers) if h}
            try:
                record["id"] = int(float(str(record.get("id", "")).strip() or 0))
                record["amount"] = float(str(record["amount"]).strip())
                expenses.append(Expense.from_dict(record))
            except (KeyError, TypeError, ValueError, OverflowError) as exc:
                raise StorageError(f"malformed expense row {row!r}") from exc

        next_id = None
        for row in meta_values[1:]:
            if len(row) >= 2 and str(row[0]).strip() == "next_id":
                try:
                    next_id = int(str(row[1]).strip())
                except ValueError:
                    next_id = None
        return StoredState(expenses=expenses, next_id=next_id)

    def save(self, expenses: List[Expense], next_id: Optional[int] = None) -> None:
        if not self.available:
            raise StorageError(self.reason or "Google Sheets backend unavailable")
        expense_rows = [self.EXPENSE_HEADERS]
        for e in expenses:
            expense_rows.append([str(e.id), e.name, repr(float(e.amount)), e.date.isoformat()])
        meta_rows = [self.META_HEADERS, ["next_id", "" if next_id is None else str(next_id)]]

        logger.info("Saving data to Google Sheets (expenses=%d)", len(expenses))
        try:
            self._ensure_sheet_size(self._expenses_ws, len(expense_rows) + 10, len(self.EXPENSE_HEADERS))
            # Use RAW to store user content as plain values (not spreadsheet formulas).
            self._expenses_ws.clear()
            self._expenses_ws.update(range_name="A1", values=expense_rows, value_input_option="RAW")
            self._meta_ws.clear()
            self._meta_ws.update(range_name="A1", values=meta_rows, value_input_option="RAW")
        except Exception as exc:
            logger.exception("Failed to save expenses to Google Sheets")
            raise StorageError(f"Google Sheets write failed ({exc.__class__.__name__})") from exc

    def describe(self) -> str:
        return "Persistent storage active (Google Sheets)."


def build_repository(settings: Settings) -> ExpenseRepository:
    """Google Sheets when configured and reachable, otherwise the local JSON file."""
    if settings.google_sheets_configured:
        sheets = GoogleSheetsRepository(settings)
        if sheets.available:
            return sheets
        logger.warning("Using local file fallback: %s", sheets.reason)
    return JsonFileRepository(settings.data_file)
