"""
Inquiry Repository — quote inquiries stored as rows of the inquiry tab.

Column order is fixed; the existing sheet depends on it:

    A date | B time | C quote number | D client name | E phone | F email
    G contact method | H industry | I purpose | J preferred color
    K tone & manner | L held assets | M prior-quote experience
    N additional links | O notes | P status | Q estimated price

Rows are located by a linear scan of column C.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi.concurrency import run_in_threadpool

from quote_automation.models.errors import PersistenceError
from quote_automation.models.schemas import LinkItem, QuoteSubmission
from quote_automation.persistence.sheets_client import SheetsClient, a1_range

logger = logging.getLogger(__name__)

INQUIRY_HEADERS = [
    "날짜",
    "시간",
    "견적번호",
    "고객명",
    "전화번호",
    "이메일",
    "연락방법",
    "업종",
    "목적",
    "선호색상",
    "톤앤매너",
    "보유항목",
    "견적경험",
    "추가링크",
    "요청사항",
    "상태",
    "예상금액",
]

COL_QUOTE_NUMBER = "C"
COL_LINKS = "N"
COL_NOTE = "O"
COL_STATUS = "P"
LAST_COLUMN = "Q"


def format_links(links: list[LinkItem]) -> str:
    """Newline-joined ``[type] url`` entries."""
    return "\n".join(f"[{link.label()}] {link.url}" for link in links)


def submission_to_row(inquiry: QuoteSubmission) -> list[str]:
    created = inquiry.created_at
    industry = inquiry.industry_custom or inquiry.industry
    return [
        f"{created.year}. {created.month}. {created.day}.",
        created.strftime("%H:%M"),
        inquiry.quote_number,
        inquiry.client_name,
        inquiry.client_phone,
        inquiry.client_email,
        inquiry.contact_method.value,
        industry,
        inquiry.purpose,
        inquiry.preferred_color,
        inquiry.tone_and_manner,
        ", ".join(inquiry.current_assets),
        inquiry.has_quote,
        format_links(inquiry.additional_links),
        inquiry.additional_note,
        inquiry.status.value,
        f"{inquiry.estimated_price_min:,}원 ~ {inquiry.estimated_price_max:,}원",
    ]


class InquiryRepository:
    """Append / find / update inquiry rows. All methods are async."""

    def __init__(self, client: SheetsClient, tab: str | None = None):
        self.client = client
        self.tab = tab or client.settings.google_sheet_tab

    async def append(self, inquiry: QuoteSubmission) -> None:
        row = submission_to_row(inquiry)
        try:
            await run_in_threadpool(
                self.client.append_rows, a1_range(self.tab, f"A:{LAST_COLUMN}"), [row]
            )
        except Exception as e:
            raise PersistenceError(f"Failed to append inquiry {inquiry.quote_number}: {e}") from e
        logger.info(f"Appended inquiry {inquiry.quote_number} to '{self.tab}'")

    async def find_row(self, quote_number: str) -> Optional[int]:
        """Return the 1-based sheet row holding quote_number, skipping the header."""
        try:
            column = await run_in_threadpool(
                self.client.get_values, a1_range(self.tab, f"{COL_QUOTE_NUMBER}:{COL_QUOTE_NUMBER}")
            )
        except Exception as e:
            raise PersistenceError(f"Failed to scan quote numbers: {e}") from e

        for index, row in enumerate(column):
            if index == 0:
                continue
            if row and row[0] == quote_number:
                return index + 1
        return None

    async def update_optional_fields(self, quote_number: str, links: str, note: str) -> bool:
        row = await self.find_row(quote_number)
        if row is None:
            logger.info(f"Inquiry {quote_number} not found, nothing updated")
            return False
        await self._write(f"{COL_LINKS}{row}:{COL_NOTE}{row}", [[links, note]])
        logger.info(f"Updated optional fields for {quote_number} (row {row})")
        return True

    async def get_status(self, row: int) -> str:
        try:
            values = await run_in_threadpool(
                self.client.get_values, a1_range(self.tab, f"{COL_STATUS}{row}")
            )
        except Exception as e:
            raise PersistenceError(f"Failed to read status at row {row}: {e}") from e
        return values[0][0] if values and values[0] else ""

    async def set_status(self, row: int, status: str) -> None:
        await self._write(f"{COL_STATUS}{row}", [[status]])

    async def initialize_headers(self) -> None:
        await self._write(f"A1:{LAST_COLUMN}1", [INQUIRY_HEADERS])
        logger.info(f"Inquiry headers written to '{self.tab}'")

    async def _write(self, cells: str, values: list[list[Any]]) -> None:
        try:
            await run_in_threadpool(self.client.update_values, a1_range(self.tab, cells), values)
        except Exception as e:
            raise PersistenceError(f"Failed to update {cells}: {e}") from e
