import datetime
import json

import pytest

from expense_tracker.config import Settings
from expense_tracker.errors import StorageError
from expense_tracker.models import Expense
from expense_tracker.storage import (
    GoogleSheetsRepository,
    JsonFileRepository,
    build_repository,
    decode_state,
    encode_state,
)


def sample_expenses():
    return [
        Expense(id=1, name="Rent", amount=900.0, date=datetime.date(2024, 1, 1)),
        Expense(id=4, name="Coffee", amount=3.2, date=datetime.date(2024, 1, 2)),
    ]


def test_json_file_missing_returns_none(tmp_path):
    repo = JsonFileRepository(str(tmp_path / "expenses.json"))
    assert repo.load() is None


def test_json_file_round_trip(tmp_path):
    path = tmp_path / "data" / "expenses.json"
    repo = JsonFileRepository(str(path))
    repo.save(sample_expenses(), next_id=7)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["next_id"] == 7
    assert data["expenses"][1] == {"id": 4, "name": "Coffee", "amount": 3.2, "date": "2024-01-02"}
    state = repo.load()
    assert state.expenses == sample_expenses()
    assert state.next_id == 7
    # no temp files left behind
    assert [p.name for p in path.parent.iterdir()] == ["expenses.json"]


def test_json_file_corrupt_raises_storage_error(tmp_path):
    path = tmp_path / "expenses.json"
    path.write_text("{broken", encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileRepository(str(path)).load()


@pytest.mark.parametrize("text", ['{"other": []}', '"just a string"', '[{"id": 1}]', '[{"id": 1, "name": "x", "amount": true, "date": "2024-01-01"}]'])
def test_decode_rejects_wrong_shape(text):
    with pytest.raises(StorageError):
        decode_state(text)


def test_decode_ignores_bad_next_id():
    state = decode_state(json.dumps({"expenses": [], "next_id": "soon"}))
    assert state.expenses == []
    assert state.next_id is None


def test_encode_omits_missing_next_id():
    assert json.loads(encode_state(sample_expenses(), None)).keys() == {"expenses"}


def test_build_repository_defaults_to_json_file(tmp_path):
    repo = build_repository(Settings(data_file=str(tmp_path / "e.json")))
    assert isinstance(repo, JsonFileRepository)
    assert repo.name == "local_json"


class FakeWorksheet:
    def __init__(self, title, rows=0, cols=0):
        self.title = title
        self.row_count = rows
        self.col_count = cols
        self.values = []

    def row_values(self, index):
        return list(self.values[index - 1]) if len(self.values) >= index else []

    def resize(self, rows, cols):
        self.row_count, self.col_count = rows, cols

    def update(self, range_name, values, value_input_option):
        assert range_name == "A1"
        for i, row in enumerate(values):
            if i < len(self.values):
                self.values[i] = list(row)
            else:
                self.values.append(list(row))

    def clear(self):
        self.values = []

    def get_all_values(self):
        return [list(r) for r in self.values]


class FakeSpreadsheet:
    def __init__(self):
        self.sheets = {}

    def worksheet(self, title):
        if title not in self.sheets:
            raise LookupError(title)
        return self.sheets[title]

    def add_worksheet(self, title, rows, cols):
        self.sheets[title] = FakeWorksheet(title, rows, cols)
        return self.sheets[title]


def test_google_sheets_round_trip():
    spreadsheet = FakeSpreadsheet()
    repo = GoogleSheetsRepository(Settings(), spreadsheet=spreadsheet)
    assert repo.available
    # only headers so far: slot absent
    assert repo.load() is None
    assert spreadsheet.sheets["expenses"].values[0] == ["id", "name", "amount", "date"]

    repo.save(sample_expenses(), next_id=9)
    assert spreadsheet.sheets["expenses"].values[1] == ["1", "Rent", "900.0", "2024-01-01"]
    state = repo.load()
    assert state.expenses == sample_expenses()
    assert state.next_id == 9


def test_google_sheets_malformed_row_raises():
    spreadsheet = FakeSpreadsheet()
    repo = GoogleSheetsRepository(Settings(), spreadsheet=spreadsheet)
    spreadsheet.sheets["expenses"].values.append(["1", "Rent", "lots", "2024-01-01"])
    with pytest.raises(StorageError):
        repo.load()


def test_google_sheets_not_configured():
    repo = GoogleSheetsRepository(Settings())
    assert not repo.available
    assert repo.reason == "GOOGLE_SHEET_ID is not set"
    with pytest.raises(StorageError):
        repo.load()


def test_json_file_not_utf8_raises_storage_error(tmp_path):
    path = tmp_path / "expenses.json"
    path.write_bytes(b"\xff\xfe[garbage")
    with pytest.raises(StorageError):
        JsonFileRepository(str(path)).load()


def test_decode_rejects_overflowing_record_id():
    with pytest.raises(StorageError):
        decode_state('[{"id": 1e400, "name": "Rent", "amount": 900, "date": "2024-01-01"}]')


def test_decode_ignores_overflowing_next_id():
    state = decode_state('{"next_id": 1e400, "expenses": [{"id": 1, "name": "Rent", "amount": 900, "date": "2024-01-01"}]}')
    assert state.next_id is None
    assert [e.id for e in state.expenses] == [1]


@pytest.mark.parametrize("record", [
    '{"id": 1, "name": "", "amount": 5, "date": "2024-01-01"}',
    '{"id": 1, "name": "   ", "amount": 5, "date": "2024-01-01"}',
    '{"id": 1, "name": "Rent", "amount": Infinity, "date": "2024-01-01"}',
    '{"id": 1, "name": "Rent", "amount": NaN, "date": "2024-01-01"}',
    '{"id": 1, "name": "Rent", "amount": -5, "date": "2024-01-01"}',
    '{"id": 1, "name": "Rent", "amount": 5, "date": "2024-01-01garbage"}',
])
def test_decode_rejects_records_breaking_model_rules(record):
    with pytest.raises(StorageError):
        decode_state(f"[{record}]")


def test_google_sheets_overflowing_id_raises():
    spreadsheet = FakeSpreadsheet()
    repo = GoogleSheetsRepository(Settings(), spreadsheet=spreadsheet)
    spreadsheet.sheets["expenses"].values.append(["1e400", "Rent", "900", "2024-01-01"])
    with pytest.raises(StorageError):
        repo.load()
