"""
config.py - runtime settings read from environment variables

On Streamlit Cloud, app.py copies app Secrets into the environment before
anything here is read, so the same variables work locally and deployed.
"""

import os
from dataclasses import dataclass

# slot key for the record array, shared by every storage backend
STORAGE_KEY = "expenses"

# location of the JSON persistence file (relative to the project root)
DEFAULT_DATA_FILE = os.path.join(os.path.dirname(__file__), "..", "data", "expenses_data.json")


@dataclass
class Settings:
    data_file: str = DEFAULT_DATA_FILE
    google_sheet_id: str = ""
    google_service_account_json: str = ""
    google_service_account_file: str = ""

    @property
    def google_sheets_configured(self) -> bool:
        return bool(self.google_sheet_id)

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            data_file=(os.getenv("EXPENSES_DATA_FILE") or "").strip() or DEFAULT_DATA_FILE,
            google_sheet_id=(os.getenv("GOOGLE_SHEET_ID") or "").strip(),
            google_service_account_json=(os.getenv("GOOGLE_SERVICE_ACCOUNT_JSON") or "").strip(),
            google_service_account_file=(os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE") or "").strip(),
        )
