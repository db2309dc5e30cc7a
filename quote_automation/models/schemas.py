"""
Data schemas for the quote pipeline.
Each schema represents a clearly-bounded data object passed between
the validator, the pricing rules, the quote service and the store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from .enums import (
    ContactMethod,
    UIUXStyle,
    InquiryStatus,
    OptionStatus,
    DomainType,
)


# ── Project scope ────────────────────────────────────────


class ScreenBlocks(BaseModel):
    """Client's estimate of how many page sections the site needs."""
    min: float = Field(ge=0)
    max: float = Field(ge=0)

    def __str__(self) -> str:
        return f"{self.min:g}~{self.max:g}"


class ServerOption(BaseModel):
    status: OptionStatus = OptionStatus.PENDING
    years: Optional[int] = Field(default=None, ge=1, le=3)


class DomainOption(BaseModel):
    status: OptionStatus = OptionStatus.PENDING
    type: Optional[DomainType] = None
    years: Optional[int] = Field(default=None, ge=1)


class LinkItem(BaseModel):
    type: str = "other"
    custom_type: Optional[str] = None
    url: str

    def label(self) -> str:
        if self.type == "other" and self.custom_type:
            return self.custom_type
        return self.type


# ── Pricing ──────────────────────────────────────────────


class PriceRange(BaseModel):
    min: int = 0
    max: int = 0


class FeatureLine(BaseModel):
    name: str
    price: int


class PriceBreakdown(BaseModel):
    base_price: PriceRange = Field(default_factory=PriceRange)
    feature_price: int = 0
    feature_details: list[FeatureLine] = []


class PriceEstimate(BaseModel):
    """Output of the pricing rules. min/max are whole KRW."""
    min: int = 0
    max: int = 0
    breakdown: PriceBreakdown = Field(default_factory=PriceBreakdown)


# ── Inquiry record ───────────────────────────────────────


class QuoteSubmission(BaseModel):
    """One customer inquiry, as persisted to the inquiry sheet."""

    # Contact
    client_name: str
    client_phone: str = ""
    client_email: str = ""
    contact_method: ContactMethod

    # Brief
    industry: str = ""
    industry_custom: str = ""
    purpose: str = ""
    preferred_color: str = "auto"
    tone_and_manner: str = "auto"
    current_assets: list[str] = []
    has_quote: str = ""
    additional_links: list[LinkItem] = []
    additional_note: str = ""

    # Project scope
    screen_blocks: ScreenBlocks
    uiux_style: UIUXStyle = UIUXStyle.NORMAL
    features: list[str] = []
    special_notes: list[str] = []
    server_option: ServerOption = Field(default_factory=ServerOption)
    domain_option: DomainOption = Field(default_factory=DomainOption)

    # Generated
    quote_number: str
    estimated_price_min: int = 0
    estimated_price_max: int = 0
    created_at: datetime = Field(default_factory=datetime.now)

    # Status tracking
    status: InquiryStatus = InquiryStatus.PENDING
    quote_sent_at: Optional[datetime] = None
    onedrive_folder_url: Optional[str] = None
    pdf_url: Optional[str] = None

    @property
    def contact(self) -> str:
        return self.client_phone or self.client_email or "-"


class SubmitOutcome(BaseModel):
    """What the caller gets back after a successful submission."""
    quote_number: str
    estimate: PriceEstimate
    formatted: str
    blocked: bool = False
