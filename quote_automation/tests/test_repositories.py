"""
Tests: spreadsheet row mapping and lookups.

Run with:
    pytest quote_automation/tests/test_repositories.py -v
"""

import asyncio
from datetime import datetime

import pytest

from quote_automation.models.errors import PersistenceError
from quote_automation.models.schemas import LinkItem, QuoteSubmission, ScreenBlocks
from quote_automation.persistence.config_repository import ConfigRepository
from quote_automation.persistence.inquiry_repository import (
    INQUIRY_HEADERS,
    InquiryRepository,
    submission_to_row,
)
from quote_automation.persistence.sheets_client import a1_range


class FakeSheetsClient:
    """Records calls; serves canned values per range."""

    def __init__(self, values: dict[str, list[list[str]]] | None = None):
        self.values = values or {}
        self.appended: list[tuple[str, list]] = []
        self.updated: list[tuple[str, list]] = []
        self.fail = False

    def get_values(self, range_):
        if self.fail:
            raise RuntimeError("503 backend error")
        return self.values.get(range_, [])

    def append_rows(self, range_, rows, input_option="RAW"):
        if self.fail:
            raise RuntimeError("503 backend error")
        self.appended.append((range_, rows))
        return {}

    def update_values(self, range_, rows, input_option="RAW"):
        if self.fail:
            raise RuntimeError("503 backend error")
        self.updated.append((range_, rows))
        return {}


def _inquiry(**overrides) -> QuoteSubmission:
    fields = dict(
        client_name="Blue Bottle",
        client_phone="010-1234-5678",
        contact_method="phone",
        industry="cafe",
        purpose="brand",
        current_assets=["logo", "photos"],
        has_quote="no",
        additional_links=[LinkItem(type="instagram", url="https://instagram.com/bb")],
        additional_note="hello",
        screen_blocks=ScreenBlocks(min=5, max=10),
        quote_number="IW-ABC-123",
        estimated_price_min=450000,
        estimated_price_max=700000,
        created_at=datetime(2025, 3, 7, 14, 5),
    )
    fields.update(overrides)
    return QuoteSubmission(**fields)


class TestRowMapping:
    def test_column_order(self):
        row = submission_to_row(_inquiry())
        assert len(row) == len(INQUIRY_HEADERS) == 17
        assert row == [
            "2025. 3. 7.",
            "14:05",
            "IW-ABC-123",
            "Blue Bottle",
            "010-1234-5678",
            "",
            "phone",
            "cafe",
            "brand",
            "auto",
            "auto",
            "logo, photos",
            "no",
            "[instagram] https://instagram.com/bb",
            "hello",
            "pending",
            "450,000원 ~ 700,000원",
        ]

    def test_custom_industry_preferred(self):
        row = submission_to_row(_inquiry(industry="other", industry_custom="pet salon"))
        assert row[7] == "pet salon"

    def test_tab_names_are_quoted(self):
        assert a1_range("시트1", "A:Q") == "'시트1'!A:Q"
        assert a1_range("Bob's", "C:C") == "'Bob''s'!C:C"


class TestInquiryRepository:
    def _repo(self, column=None):
        client = FakeSheetsClient({a1_range("Sheet1", "C:C"): column or []})
        return client, InquiryRepository(client, tab="Sheet1")

    def test_append_writes_one_row(self):
        client, repo = self._repo()
        asyncio.run(repo.append(_inquiry()))
        range_, rows = client.appended[0]
        assert range_ == "'Sheet1'!A:Q"
        assert rows[0][2] == "IW-ABC-123"

    def test_append_failure_raises_persistence_error(self):
        client, repo = self._repo()
        client.fail = True
        with pytest.raises(PersistenceError):
            asyncio.run(repo.append(_inquiry()))

    def test_find_row_skips_header(self):
        _, repo = self._repo([["견적번호"], ["IW-A"], [], ["IW-B"]])
        assert asyncio.run(repo.find_row("IW-B")) == 4
        assert asyncio.run(repo.find_row("견적번호")) is None
        assert asyncio.run(repo.find_row("IW-Z")) is None

    def test_update_optional_fields_targets_links_and_note(self):
        client, repo = self._repo([["견적번호"], ["IW-A"], ["IW-B"]])
        assert asyncio.run(repo.update_optional_fields("IW-B", "[blog] x", "note")) is True
        assert client.updated == [("'Sheet1'!N3:O3", [["[blog] x", "note"]])]

    def test_update_missing_quote_writes_nothing(self):
        client, repo = self._repo([["견적번호"], ["IW-A"]])
        assert asyncio.run(repo.update_optional_fields("IW-NOPE", "", "")) is False
        assert client.updated == []

    def test_status_read_and_write(self):
        client, repo = self._repo()
        client.values[a1_range("Sheet1", "P2")] = [["quote_sent"]]
        assert asyncio.run(repo.get_status(2)) == "quote_sent"
        asyncio.run(repo.set_status(2, "converted"))
        assert client.updated == [("'Sheet1'!P2", [["converted"]])]

    def test_initialize_headers(self):
        client, repo = self._repo()
        asyncio.run(repo.initialize_headers())
        assert client.updated == [("'Sheet1'!A1:Q1", [INQUIRY_HEADERS])]


class TestConfigRepository:
    def test_fetch_raw_skips_header_and_short_rows(self):
        client = FakeSheetsClient({
            a1_range("Sheet2", "A:B"): [
                ["key", "value"],
                ["feature_board", "250000"],
                ["orphan"],
                [" uiux_fancy ", "1.3"],
            ]
        })
        raw = asyncio.run(ConfigRepository(client, tab="Sheet2").fetch_raw())
        assert raw == {"feature_board": "250000", "uiux_fancy": "1.3"}

    def test_write_rows_overwrites_fixed_range(self):
        client = FakeSheetsClient()
        rows = [["a", "1", "first"], ["b", "2", "second"]]
        asyncio.run(ConfigRepository(client, tab="Sheet2").write_rows(rows))
        range_, values = client.updated[0]
        assert range_ == "'Sheet2'!A1:C3"
        assert values[0] == ["key", "value", "description"]
        assert values[1:] == rows
