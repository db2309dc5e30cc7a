"""
Tests: the submission pipeline and follow-up updates.

Run with:
    pytest quote_automation/tests/test_quote_service.py -v
"""

import asyncio
import re

import pytest

from quote_automation.models.enums import InquiryStatus
from quote_automation.models.errors import (
    InvalidStatusTransition,
    PersistenceError,
    SubmissionValidationError,
)
from quote_automation.models.schemas import LinkItem
from quote_automation.services.quote_service import BLOCKED_QUOTE_NUMBER
from quote_automation.utils.quote_number import generate_quote_number, to_base36


def _submit(service, body, dispatch=None):
    async def run():
        outcome = await service.submit(body, dispatch=dispatch)
        await service.drain()
        return outcome

    return asyncio.run(run())


class TestSubmit:
    def test_happy_path_persists_and_notifies(self, quote_service, inquiries, notifier, valid_body):
        outcome = _submit(quote_service, valid_body)

        assert outcome.quote_number == "IW-TEST-001"
        assert (outcome.estimate.min, outcome.estimate.max) == (450000, 700000)
        assert outcome.formatted == "450,000원 ~ 700,000원"

        assert inquiries.append_calls == 1
        saved = inquiries.inquiries[0]
        assert saved.client_name == "Blue Bottle Cafe"
        assert saved.client_email == "owner@bluebottle.kr"
        assert saved.status == InquiryStatus.PENDING
        assert (saved.estimated_price_min, saved.estimated_price_max) == (450000, 700000)
        assert notifier.sent == ["IW-TEST-001"]

    def test_validation_failure_has_no_side_effects(self, quote_service, inquiries, notifier, config_source):
        with pytest.raises(SubmissionValidationError) as exc:
            _submit(quote_service, {"contactMethod": "email"})

        assert "clientName is required" in exc.value.errors
        assert len(exc.value.errors) == 4
        assert inquiries.append_calls == 0
        assert notifier.sent == []
        assert config_source.fetch_calls == 0

    def test_persistence_failure_propagates(self, quote_service, inquiries, notifier, valid_body):
        inquiries.fail_append = True

        with pytest.raises(PersistenceError):
            _submit(quote_service, valid_body)
        assert notifier.sent == []

    def test_notification_failure_is_swallowed(self, quote_service, inquiries, notifier, valid_body):
        notifier.fail = True

        outcome = _submit(quote_service, valid_body)

        assert outcome.quote_number == "IW-TEST-001"
        assert inquiries.append_calls == 1

    def test_dispatch_receives_notification_job(self, quote_service, notifier, valid_body):
        scheduled = []
        _submit(quote_service, valid_body, dispatch=lambda func, *args: scheduled.append((func, args)))

        assert len(scheduled) == 1
        assert notifier.sent == []  # not run until the caller runs it

        func, args = scheduled[0]
        asyncio.run(func(*args))
        assert notifier.sent == ["IW-TEST-001"]

    def test_uses_resolved_settings(self, quote_service, config_source, valid_body):
        config_source.raw = {"base_price_per_block": "100000", "feature_board": "0"}
        outcome = _submit(quote_service, valid_body)
        assert (outcome.estimate.min, outcome.estimate.max) == (500000, 1000000)
        assert outcome.estimate.breakdown.feature_details == []

    def test_settings_outage_still_prices_with_defaults(self, quote_service, config_source, valid_body):
        config_source.error = RuntimeError("sheet down")
        outcome = _submit(quote_service, valid_body)
        assert (outcome.estimate.min, outcome.estimate.max) == (450000, 700000)

    def test_honeypot_short_circuits(self, quote_service, inquiries, notifier, valid_body):
        valid_body["_gotcha"] = "http://spam.example"
        outcome = _submit(quote_service, valid_body)

        assert outcome.blocked is True
        assert outcome.quote_number == BLOCKED_QUOTE_NUMBER
        assert inquiries.append_calls == 0
        assert notifier.sent == []

    def test_honeypot_checked_before_validation(self, quote_service, inquiries):
        outcome = _submit(quote_service, {"_gotcha": "bot", "contactMethod": "fax"})

        assert outcome.blocked is True
        assert inquiries.append_calls == 0

    def test_links_and_options_carried(self, quote_service, inquiries, valid_body):
        valid_body["additionalLinks"] = [
            {"type": "other", "customType": "blog", "url": "https://blog.example"}
        ]
        valid_body["serverOption"] = {"status": "confirmed", "years": 2}
        _submit(quote_service, valid_body)

        saved = inquiries.inquiries[0]
        assert saved.additional_links[0].label() == "blog"
        assert saved.server_option.years == 2
        assert saved.domain_option.status.value == "pending"


class TestUpdate:
    def test_update_existing_quote(self, quote_service, inquiries, valid_body):
        _submit(quote_service, valid_body)

        updated = asyncio.run(quote_service.update(
            "IW-TEST-001",
            additional_links=[
                LinkItem(type="instagram", url="https://instagram.com/bb"),
                LinkItem(type="other", custom_type="naver", url="https://naver.me/x"),
            ],
            additional_note="Please call after 6pm",
        ))

        assert updated is True
        assert inquiries.optional["IW-TEST-001"] == (
            "[instagram] https://instagram.com/bb\n[naver] https://naver.me/x",
            "Please call after 6pm",
        )

    def test_unknown_quote_not_found(self, quote_service, inquiries):
        updated = asyncio.run(quote_service.update("IW-NOPE", additional_note="hi"))
        assert updated is False
        assert inquiries.optional == {}


class TestStatus:
    def test_forward_transitions(self, quote_service, inquiries, valid_body):
        _submit(quote_service, valid_body)

        assert asyncio.run(quote_service.update_status("IW-TEST-001", InquiryStatus.QUOTE_SENT))
        assert asyncio.run(quote_service.update_status("IW-TEST-001", InquiryStatus.CONVERTED))
        assert inquiries.statuses == ["converted"]

    def test_regression_rejected(self, quote_service, inquiries, valid_body):
        _submit(quote_service, valid_body)
        asyncio.run(quote_service.update_status("IW-TEST-001", InquiryStatus.REJECTED))

        with pytest.raises(InvalidStatusTransition):
            asyncio.run(quote_service.update_status("IW-TEST-001", InquiryStatus.PENDING))
        assert inquiries.statuses == ["rejected"]

    def test_same_status_is_noop(self, quote_service, valid_body):
        _submit(quote_service, valid_body)
        assert asyncio.run(quote_service.update_status("IW-TEST-001", InquiryStatus.PENDING))

    def test_unknown_quote(self, quote_service):
        assert asyncio.run(quote_service.update_status("IW-NOPE", InquiryStatus.QUOTE_SENT)) is False


class TestQuoteNumber:
    def test_format(self):
        number = generate_quote_number()
        assert re.fullmatch(r"IW-[0-9A-Z]+-[0-9A-Z]{3}", number)

    def test_timestamp_is_base36(self):
        number = generate_quote_number(now_ms=36 ** 3)
        assert number.startswith("IW-1000-")

    def test_base36(self):
        assert to_base36(0) == "0"
        assert to_base36(35) == "Z"
        assert to_base36(1_700_000_000_000) == "LOYW3V28"
