"""
Shared fakes for the quote pipeline tests.

The spreadsheet and Gmail are replaced by in-memory stand-ins that
record every call, so tests can assert on side effects.
"""

from __future__ import annotations

import itertools

import pytest
from fastapi.testclient import TestClient

from quote_automation.api import create_app
from quote_automation.api.rate_limit import RateLimiter
from quote_automation.models.errors import NotificationError, PersistenceError
from quote_automation.models.schemas import QuoteSubmission
from quote_automation.rules.quote_settings import SettingsResolver
from quote_automation.services.quote_service import QuoteService


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeConfigSource:
    def __init__(self, raw: dict[str, str] | None = None):
        self.raw = raw or {}
        self.error: Exception | None = None
        self.fetch_calls = 0
        self.written: list[list[str]] | None = None

    async def fetch_raw(self) -> dict[str, str]:
        self.fetch_calls += 1
        if self.error is not None:
            raise self.error
        return dict(self.raw)

    async def write_rows(self, rows: list[list[str]]) -> None:
        self.written = rows


class FakeInquiryRepository:
    """Row 1 is the header, so the first inquiry lives on row 2."""

    def __init__(self):
        self.inquiries: list[QuoteSubmission] = []
        self.statuses: list[str] = []
        self.optional: dict[str, tuple[str, str]] = {}
        self.append_calls = 0
        self.fail_append = False
        self.headers_written = False

    async def append(self, inquiry: QuoteSubmission) -> None:
        self.append_calls += 1
        if self.fail_append:
            raise PersistenceError("sheet unavailable")
        self.inquiries.append(inquiry)
        self.statuses.append(inquiry.status.value)

    async def find_row(self, quote_number: str):
        for index, inquiry in enumerate(self.inquiries):
            if inquiry.quote_number == quote_number:
                return index + 2
        return None

    async def update_optional_fields(self, quote_number: str, links: str, note: str) -> bool:
        if await self.find_row(quote_number) is None:
            return False
        self.optional[quote_number] = (links, note)
        return True

    async def get_status(self, row: int) -> str:
        return self.statuses[row - 2]

    async def set_status(self, row: int, status: str) -> None:
        self.statuses[row - 2] = status

    async def initialize_headers(self) -> None:
        self.headers_written = True


class FakeNotifier:
    def __init__(self):
        self.sent: list[str] = []
        self.fail = False

    async def notify_new_inquiry(self, inquiry, quote_settings=None) -> None:
        if self.fail:
            raise NotificationError("smtp down")
        self.sent.append(inquiry.quote_number)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config_source():
    return FakeConfigSource()


@pytest.fixture
def resolver(config_source, clock):
    return SettingsResolver(config_source, ttl_seconds=300, clock=clock)


@pytest.fixture
def inquiries():
    return FakeInquiryRepository()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def quote_service(inquiries, resolver, notifier):
    counter = itertools.count(1)
    return QuoteService(
        inquiries,
        resolver,
        notifier,
        quote_number_factory=lambda: f"IW-TEST-{next(counter):03d}",
    )


@pytest.fixture
def client(quote_service, resolver):
    app = create_app(
        quote_service=quote_service,
        settings_resolver=resolver,
        rate_limiter=RateLimiter(max_requests=10, window_seconds=60),
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def valid_body() -> dict:
    return {
        "clientName": "  Blue Bottle Cafe ",
        "clientEmail": "Owner@BlueBottle.kr",
        "contactMethod": "email",
        "industry": "cafe",
        "purpose": "brand",
        "currentAssets": ["logo", "photos"],
        "hasQuote": "no",
        "screenBlocks": {"min": 5, "max": 10},
        "uiuxStyle": "normal",
        "features": ["board"],
        "specialNotes": [],
    }
