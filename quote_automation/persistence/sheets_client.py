"""
Sheets Client — raw Google Sheets API v4 access.
Authenticates with a service account; the connection is created lazily
on first use so the app can start without credentials.
"""

from __future__ import annotations

import logging
from typing import Any

from google.oauth2 import service_account
from googleapiclient.discovery import build

from quote_automation.config import Settings, get_settings
from quote_automation.models.errors import StoreNotConfiguredError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


def a1_range(tab: str, cells: str) -> str:
    """Quote the tab name so non-ASCII or spaced tab names are accepted."""
    return "'{}'!{}".format(tab.replace("'", "''"), cells)


class SheetsClient:
    """
    Thin synchronous wrapper around the googleapiclient Sheets resource.
    Callers in async code run these methods in the threadpool.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._service: Any = None

    @property
    def sheet_id(self) -> str:
        return self.settings.google_sheet_id

    def is_configured(self) -> bool:
        s = self.settings
        return bool(s.google_service_account_email and s.google_private_key and s.google_sheet_id)

    def connect(self) -> None:
        if not self.is_configured():
            raise StoreNotConfiguredError(
                "Google Sheets credentials not configured. Set GOOGLE_SERVICE_ACCOUNT_EMAIL, "
                "GOOGLE_PRIVATE_KEY, GOOGLE_SHEET_ID."
            )

        credentials = service_account.Credentials.from_service_account_info(
            {
                "client_email": self.settings.google_service_account_email,
                "private_key": self.settings.service_account_private_key,
                "token_uri": TOKEN_URI,
            },
            scopes=SCOPES,
        )
        self._service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        logger.info(f"Connected to Google Sheet {self.sheet_id}")

    def _values(self) -> Any:
        if self._service is None:
            self.connect()
        return self._service.spreadsheets().values()

    def get_values(self, range_: str) -> list[list[str]]:
        response = self._values().get(spreadsheetId=self.sheet_id, range=range_).execute()
        return response.get("values", [])

    def append_rows(self, range_: str, rows: list[list[Any]], input_option: str = "RAW") -> dict[str, Any]:
        return self._values().append(
            spreadsheetId=self.sheet_id,
            range=range_,
            valueInputOption=input_option,
            insertDataOption="INSERT_ROWS",
            body={"values": rows},
        ).execute()

    def update_values(self, range_: str, rows: list[list[Any]], input_option: str = "RAW") -> dict[str, Any]:
        return self._values().update(
            spreadsheetId=self.sheet_id,
            range=range_,
            valueInputOption=input_option,
            body={"values": rows},
        ).execute()
