"""
Quote Service — the submission pipeline.

    validate → quote number → price estimate → append row → notify (background)

Only validation and persistence failures reach the caller.  Settings
problems degrade to defaults inside the resolver and notification
problems are logged by the background runner.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional

from quote_automation.models.enums import STATUS_TRANSITIONS, InquiryStatus
from quote_automation.models.errors import InvalidStatusTransition, SubmissionValidationError
from quote_automation.models.schemas import (
    DomainOption,
    LinkItem,
    PriceEstimate,
    QuoteSubmission,
    ScreenBlocks,
    ServerOption,
    SubmitOutcome,
)
from quote_automation.persistence.inquiry_repository import InquiryRepository, format_links
from quote_automation.rules.pricing_rules import calculate_estimated_price, format_price_range
from quote_automation.rules.quote_settings import QuoteSettings, SettingsResolver
from quote_automation.rules.validation_rules import validate_submission
from quote_automation.services.notification_service import NotificationService
from quote_automation.utils.quote_number import generate_quote_number

logger = logging.getLogger(__name__)

BLOCKED_QUOTE_NUMBER = "IW-BLOCKED"

# Schedules func(*args) to run after the response, e.g. BackgroundTasks.add_task
Dispatch = Callable[..., Any]


def parse_links(raw_links: Optional[list[dict[str, Any]]]) -> list[LinkItem]:
    return [
        LinkItem(
            type=str(link.get("type") or "other"),
            custom_type=link.get("customType"),
            url=str(link["url"]).strip(),
        )
        for link in raw_links or []
    ]


def _text(body: dict[str, Any], key: str, default: str = "") -> str:
    value = body.get(key)
    if value is None:
        return default
    return str(value).strip() or default


class QuoteService:
    """Orchestrates one quote submission and the follow-up updates."""

    def __init__(
        self,
        inquiries: InquiryRepository,
        resolver: SettingsResolver,
        notifier: NotificationService,
        quote_number_factory: Callable[[], str] = generate_quote_number,
    ):
        self.inquiries = inquiries
        self.resolver = resolver
        self.notifier = notifier
        self._new_quote_number = quote_number_factory
        self._pending: set[asyncio.Task] = set()

    # ── Submit ───────────────────────────────────────────

    async def submit(self, body: dict[str, Any], dispatch: Dispatch | None = None) -> SubmitOutcome:
        if isinstance(body, dict) and str(body.get("_gotcha") or "").strip():
            logger.warning("Honeypot field filled, submission dropped")
            return SubmitOutcome(
                quote_number=BLOCKED_QUOTE_NUMBER,
                estimate=PriceEstimate(),
                formatted="",
                blocked=True,
            )

        validation = validate_submission(body)
        if not validation.valid:
            raise SubmissionValidationError(validation.errors)

        quote_number = self._new_quote_number()
        quote_settings = await self.resolver.get_quote_settings()

        inquiry = self._build_inquiry(body, quote_number)
        estimate = calculate_estimated_price(
            inquiry.screen_blocks,
            inquiry.uiux_style,
            inquiry.features,
            quote_settings.pricing_rules(),
        )
        inquiry.estimated_price_min = estimate.min
        inquiry.estimated_price_max = estimate.max

        await self.inquiries.append(inquiry)
        logger.info(f"Inquiry {quote_number} saved ({estimate.min:,} ~ {estimate.max:,})")

        (dispatch or self._spawn)(self._notify_safely, inquiry, quote_settings)

        return SubmitOutcome(
            quote_number=quote_number,
            estimate=estimate,
            formatted=format_price_range(estimate),
        )

    @staticmethod
    def _build_inquiry(body: dict[str, Any], quote_number: str) -> QuoteSubmission:
        blocks = body["screenBlocks"]
        return QuoteSubmission(
            client_name=body["clientName"].strip(),
            client_phone=_text(body, "clientPhone"),
            client_email=_text(body, "clientEmail").lower(),
            contact_method=body["contactMethod"],
            industry=_text(body, "industry"),
            industry_custom=_text(body, "industryCustom"),
            purpose=_text(body, "purpose"),
            preferred_color=_text(body, "preferredColor", "auto"),
            tone_and_manner=_text(body, "toneAndManner", "auto"),
            current_assets=body.get("currentAssets") or [],
            has_quote=_text(body, "hasQuote"),
            additional_links=parse_links(body.get("additionalLinks")),
            additional_note=_text(body, "additionalNote"),
            screen_blocks=ScreenBlocks(min=blocks["min"], max=blocks["max"]),
            uiux_style=body["uiuxStyle"],
            features=body.get("features") or [],
            special_notes=body.get("specialNotes") or [],
            server_option=ServerOption.model_validate(body.get("serverOption") or {}),
            domain_option=DomainOption.model_validate(body.get("domainOption") or {}),
            quote_number=quote_number,
            created_at=datetime.now(),
            status=InquiryStatus.PENDING,
        )

    # ── Notification (fire-and-forget) ───────────────────

    async def _notify_safely(self, inquiry: QuoteSubmission, quote_settings: QuoteSettings) -> None:
        try:
            await self.notifier.notify_new_inquiry(inquiry, quote_settings)
        except Exception as e:
            logger.error(f"Notification failed for {inquiry.quote_number}: {e}")

    def _spawn(self, func: Callable[..., Any], *args: Any) -> None:
        """Run a coroutine function detached from the caller, keeping a reference until done."""
        task = asyncio.get_running_loop().create_task(func(*args))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for detached notifications (used on shutdown)."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    # ── Follow-up updates ────────────────────────────────

    async def update(
        self,
        quote_number: str,
        additional_links: Optional[list[LinkItem]] = None,
        additional_note: str = "",
    ) -> bool:
        """Attach links / note to an existing inquiry. False when not found."""
        return await self.inquiries.update_optional_fields(
            quote_number,
            format_links(additional_links or []),
            additional_note or "",
        )

    async def update_status(self, quote_number: str, status: InquiryStatus) -> bool:
        """Advance an inquiry's status. False when not found."""
        row = await self.inquiries.find_row(quote_number)
        if row is None:
            return False

        current_raw = await self.inquiries.get_status(row)
        try:
            current = InquiryStatus(current_raw or InquiryStatus.PENDING.value)
        except ValueError:
            raise InvalidStatusTransition(current_raw, status.value)

        if current == status:
            return True
        if status not in STATUS_TRANSITIONS[current]:
            raise InvalidStatusTransition(current.value, status.value)

        await self.inquiries.set_status(row, status.value)
        logger.info(f"Inquiry {quote_number}: {current.value} → {status.value}")
        return True
