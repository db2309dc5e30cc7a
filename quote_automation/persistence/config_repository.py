"""
Config Repository — key/value rows of the admin config tab.

    A key | B value | C description

Row 1 is a header.  Writing the defaults overwrites a fixed range, so
running it again updates values in place instead of adding rows.
"""

from __future__ import annotations

import logging

from fastapi.concurrency import run_in_threadpool

from quote_automation.persistence.sheets_client import SheetsClient, a1_range

logger = logging.getLogger(__name__)

CONFIG_HEADERS = ["key", "value", "description"]


class ConfigRepository:
    """Source of raw quote settings. Errors propagate to the resolver."""

    def __init__(self, client: SheetsClient, tab: str | None = None):
        self.client = client
        self.tab = tab or client.settings.google_config_tab

    async def fetch_raw(self) -> dict[str, str]:
        rows = await run_in_threadpool(self.client.get_values, a1_range(self.tab, "A:B"))
        raw: dict[str, str] = {}
        for row in rows:
            if len(row) < 2 or not row[0] or row[0] == CONFIG_HEADERS[0]:
                continue
            raw[row[0].strip()] = row[1]
        logger.debug(f"Read {len(raw)} config keys from '{self.tab}'")
        return raw

    async def write_rows(self, rows: list[list[str]]) -> None:
        values = [CONFIG_HEADERS] + rows
        await run_in_threadpool(
            self.client.update_values,
            a1_range(self.tab, f"A1:C{len(values)}"),
            values,
            "USER_ENTERED",
        )
