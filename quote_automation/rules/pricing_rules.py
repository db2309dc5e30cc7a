"""
Pricing Rules — estimate a price range for a website project.

Estimate = screen blocks × per-block rate × UI/UX multiplier, plus a flat
add-on per selected feature.  Feature costs are not range-scaled, so the
width of the range is decided by the base price alone.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable

from quote_automation.models.enums import UIUXStyle, OptionStatus, DomainType
from quote_automation.models.schemas import (
    DomainOption,
    FeatureLine,
    PriceBreakdown,
    PriceEstimate,
    PriceRange,
    ScreenBlocks,
    ServerOption,
)
from quote_automation.rules.quote_settings import DEFAULT_SETTINGS, PricingRules, QuoteSettings

logger = logging.getLogger(__name__)

DEFAULT_PRICING_RULES = DEFAULT_SETTINGS.pricing_rules()

FEATURE_LABELS: dict[str, str] = {
    "board": "게시판",
    "inquiry": "문의 폼",
    "login": "로그인/회원가입",
    "shopping": "쇼핑·결제",
    "admin": "관리자 페이지",
    "reservation": "예약 기능",
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_estimated_price(
    screen_blocks: ScreenBlocks,
    uiux_style: UIUXStyle | str,
    features: Iterable[str],
    rules: PricingRules | None = None,
) -> PriceEstimate:
    """
    Compute the min/max estimate and its itemized breakdown.
    Pure function: never raises for validated input.
    """
    rules = rules or DEFAULT_PRICING_RULES

    multiplier = rules.fancy_multiplier if UIUXStyle(uiux_style) == UIUXStyle.FANCY else 1.0

    base_price = PriceRange(
        min=_round_half_up(screen_blocks.min * rules.base_price_per_block * multiplier),
        max=_round_half_up(screen_blocks.max * rules.base_price_per_block * multiplier),
    )

    feature_details: list[FeatureLine] = []
    feature_price = 0
    for feature in features:
        price = rules.feature_prices.get(feature, 0)
        if price > 0:
            feature_details.append(FeatureLine(name=feature, price=price))
            feature_price += price

    return PriceEstimate(
        min=base_price.min + feature_price,
        max=base_price.max + feature_price,
        breakdown=PriceBreakdown(
            base_price=base_price,
            feature_price=feature_price,
            feature_details=feature_details,
        ),
    )


# ── Display helpers ──────────────────────────────────────

def format_krw(amount: int) -> str:
    return f"{amount:,}원"


def format_price_range(estimate: PriceEstimate) -> str:
    if estimate.min == estimate.max:
        return format_krw(estimate.min)
    return f"{format_krw(estimate.min)} ~ {format_krw(estimate.max)}"


def format_won(amount: int) -> str:
    """Short form in 만원 units, e.g. 150000 → '15만원'."""
    if amount >= 10000:
        man = amount / 10000
        return f"{man:,.0f}만원" if man == int(man) else f"{man:,.1f}만원"
    return format_krw(amount)


def get_feature_label(feature: str) -> str:
    return FEATURE_LABELS.get(feature, feature)


# ── Hosting options ──────────────────────────────────────

def server_cost(years: int, settings: QuoteSettings = DEFAULT_SETTINGS) -> int:
    costs = settings.server_cost
    return {1: costs.year1, 2: costs.year2, 3: costs.year3}.get(years, costs.year1)


def domain_cost(years: int, is_transfer: bool, settings: QuoteSettings = DEFAULT_SETTINGS) -> int:
    base = settings.domain_cost.per_year * years
    return base + settings.domain_cost.transfer if is_transfer else base


def hosting_summary(
    server_option: ServerOption,
    domain_option: DomainOption,
    settings: QuoteSettings = DEFAULT_SETTINGS,
) -> dict[str, str]:
    """Human-readable hosting lines for the admin notification."""
    if server_option.status == OptionStatus.CONFIRMED and server_option.years:
        server = f"{server_option.years}년 {format_won(server_cost(server_option.years, settings))}"
    else:
        s = settings.server_cost
        server = f"미정 (1년 {format_won(s.year1)} / 2년 {format_won(s.year2)} / 3년 {format_won(s.year3)})"

    if domain_option.status == OptionStatus.CONFIRMED and domain_option.years:
        is_transfer = domain_option.type == DomainType.TRANSFER
        cost = domain_cost(domain_option.years, is_transfer, settings)
        kind = "이전" if is_transfer else "신규"
        domain = f"{kind} {domain_option.years}년 {format_won(cost)}"
    else:
        d = settings.domain_cost
        domain = f"미정 (신규: 연 {format_won(d.per_year)} / 이전: +{format_won(d.transfer)})"

    return {"server": server, "domain": domain}
