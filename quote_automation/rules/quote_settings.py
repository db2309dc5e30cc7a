"""
Quote Settings — pricing and business configuration.

The admin keeps the live values as key/value rows in the config tab of
the Google Sheet.  SettingsResolver reads that tab, parses every field
independently (falling back to the compiled-in default when a value is
missing or unparsable) and caches the result for a bounded time.
If the sheet cannot be read the defaults are served instead.
"""

from __future__ import annotations

import logging
import math
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


# ── Config models ────────────────────────────────────────

class _Frozen(BaseModel):
    # camelCase aliases are for the JSON served to the browser
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class PageCostTier(_Frozen):
    min: int
    max: int
    cost: int


class PageCost(_Frozen):
    tiers: tuple[PageCostTier, ...]
    extra_per_two: int  # charged per two pages beyond the last tier


class UIUXMultiplier(_Frozen):
    normal: float = 1.0
    fancy: float = 1.5


class ServerCost(_Frozen):
    year1: int
    year2: int
    year3: int


class DomainCost(_Frozen):
    per_year: int
    transfer: int


class RevisionCost(_Frozen):
    content_revision: int
    layout_revision: int


class CompanyInfo(_Frozen):
    name: str
    representative: str
    business_number: str
    email: str
    address: str
    website: str


class BankInfo(_Frozen):
    bank_name: str
    account_number: str
    account_holder: str


class PricingRules(_Frozen):
    """The subset of settings the price estimate depends on."""
    base_price_per_block: int = 50000
    fancy_multiplier: float = 1.5
    feature_prices: dict[str, int] = {}


class QuoteSettings(_Frozen):
    """Fully populated configuration snapshot. Replaced wholesale, never mutated."""
    page_cost: PageCost
    base_price_per_block: int
    uiux_multiplier: UIUXMultiplier
    feature_cost: dict[str, int]
    server_cost: ServerCost
    domain_cost: DomainCost
    revision_cost: RevisionCost
    company_info: CompanyInfo
    bank_info: BankInfo

    def pricing_rules(self) -> PricingRules:
        return PricingRules(
            base_price_per_block=self.base_price_per_block,
            fancy_multiplier=self.uiux_multiplier.fancy,
            feature_prices=dict(self.feature_cost),
        )


DEFAULT_FEATURE_COST: dict[str, int] = {
    "board": 200000,
    "inquiry": 100000,
    "login": 300000,
    "shopping": 500000,
    "admin": 400000,
    "reservation": 350000,
}

DEFAULT_SETTINGS = QuoteSettings(
    page_cost=PageCost(
        tiers=(
            PageCostTier(min=1, max=15, cost=400000),
            PageCostTier(min=15, max=30, cost=500000),
            PageCostTier(min=30, max=45, cost=600000),
        ),
        extra_per_two=30000,
    ),
    base_price_per_block=50000,
    uiux_multiplier=UIUXMultiplier(normal=1.0, fancy=1.5),
    feature_cost=DEFAULT_FEATURE_COST,
    server_cost=ServerCost(year1=150000, year2=250000, year3=300000),
    domain_cost=DomainCost(per_year=30000, transfer=30000),
    revision_cost=RevisionCost(content_revision=50000, layout_revision=100000),
    company_info=CompanyInfo(
        name="Invisible Works",
        representative="오유택",
        business_number="377-44-01126",
        email="invisibleworks.office@gmail.com",
        address="대구광역시 중구 남산동 677-58, 명륜로21길 33-11",
        website="invisibleworks.co",
    ),
    bank_info=BankInfo(
        bank_name="카카오뱅크",
        account_number="3333-14-9478697",
        account_holder="오유택(엠지쓰studio)",
    ),
)


# ── Sheet row layout ─────────────────────────────────────

def default_config_rows(defaults: QuoteSettings = DEFAULT_SETTINGS) -> list[list[str]]:
    """Rows (key, value, description) written by the one-time init."""
    tiers = defaults.page_cost.tiers
    rows: list[tuple[str, Any, str]] = [
        ("page_cost_1_15", tiers[0].cost, "Page cost, 1-15 blocks"),
        ("page_cost_15_30", tiers[1].cost, "Page cost, 15-30 blocks"),
        ("page_cost_30_45", tiers[2].cost, "Page cost, 30-45 blocks"),
        ("page_cost_extra", defaults.page_cost.extra_per_two, "Extra cost per 2 pages over 45"),
        ("base_price_per_block", defaults.base_price_per_block, "Estimate: price per screen block"),
        ("uiux_normal", defaults.uiux_multiplier.normal, "UI/UX multiplier, normal"),
        ("uiux_fancy", defaults.uiux_multiplier.fancy, "UI/UX multiplier, fancy"),
    ]
    for name, cost in defaults.feature_cost.items():
        rows.append((f"feature_{name}", cost, f"Feature cost: {name}"))
    rows += [
        ("server_1year", defaults.server_cost.year1, "Server hosting, 1 year"),
        ("server_2year", defaults.server_cost.year2, "Server hosting, 2 years"),
        ("server_3year", defaults.server_cost.year3, "Server hosting, 3 years"),
        ("domain_per_year", defaults.domain_cost.per_year, "Domain cost per year"),
        ("domain_transfer", defaults.domain_cost.transfer, "Domain transfer fee"),
        ("revision_content", defaults.revision_cost.content_revision, "Content revision cost"),
        ("revision_layout", defaults.revision_cost.layout_revision, "Layout revision cost"),
        ("company_name", defaults.company_info.name, "Company name"),
        ("company_rep", defaults.company_info.representative, "Representative"),
        ("company_biznum", defaults.company_info.business_number, "Business registration number"),
        ("company_email", defaults.company_info.email, "Company email"),
        ("company_address", defaults.company_info.address, "Company address"),
        ("company_website", defaults.company_info.website, "Company website"),
        ("bank_name", defaults.bank_info.bank_name, "Bank name"),
        ("bank_account", defaults.bank_info.account_number, "Bank account number"),
        ("bank_holder", defaults.bank_info.account_holder, "Account holder"),
    ]
    return [[key, str(value), description] for key, value, description in rows]


# ── Parsing ──────────────────────────────────────────────

def _parse_number(raw: dict[str, str], key: str, fallback: float) -> float:
    value = raw.get(key)
    if value is None:
        return fallback
    try:
        parsed = float(str(value).replace(",", "").strip())
    except ValueError:
        return fallback
    if math.isnan(parsed) or math.isinf(parsed) or parsed < 0:
        return fallback
    return parsed


def _parse_int(raw: dict[str, str], key: str, fallback: int) -> int:
    return int(round(_parse_number(raw, key, fallback)))


def _parse_str(raw: dict[str, str], key: str, fallback: str) -> str:
    value = raw.get(key)
    if value is None or not str(value).strip():
        return fallback
    return str(value).strip()


def parse_raw_config(raw: dict[str, str], defaults: QuoteSettings = DEFAULT_SETTINGS) -> QuoteSettings:
    """Build a QuoteSettings from the config tab's key/value pairs."""
    tiers = defaults.page_cost.tiers
    tier_keys = ("page_cost_1_15", "page_cost_15_30", "page_cost_30_45")

    return QuoteSettings(
        page_cost=PageCost(
            tiers=tuple(
                PageCostTier(min=tier.min, max=tier.max, cost=_parse_int(raw, key, tier.cost))
                for tier, key in zip(tiers, tier_keys)
            ),
            extra_per_two=_parse_int(raw, "page_cost_extra", defaults.page_cost.extra_per_two),
        ),
        base_price_per_block=_parse_int(raw, "base_price_per_block", defaults.base_price_per_block),
        uiux_multiplier=UIUXMultiplier(
            normal=_parse_number(raw, "uiux_normal", defaults.uiux_multiplier.normal),
            fancy=_parse_number(raw, "uiux_fancy", defaults.uiux_multiplier.fancy),
        ),
        feature_cost={
            name: _parse_int(raw, f"feature_{name}", cost)
            for name, cost in defaults.feature_cost.items()
        },
        server_cost=ServerCost(
            year1=_parse_int(raw, "server_1year", defaults.server_cost.year1),
            year2=_parse_int(raw, "server_2year", defaults.server_cost.year2),
            year3=_parse_int(raw, "server_3year", defaults.server_cost.year3),
        ),
        domain_cost=DomainCost(
            per_year=_parse_int(raw, "domain_per_year", defaults.domain_cost.per_year),
            transfer=_parse_int(raw, "domain_transfer", defaults.domain_cost.transfer),
        ),
        revision_cost=RevisionCost(
            content_revision=_parse_int(raw, "revision_content", defaults.revision_cost.content_revision),
            layout_revision=_parse_int(raw, "revision_layout", defaults.revision_cost.layout_revision),
        ),
        company_info=CompanyInfo(
            name=_parse_str(raw, "company_name", defaults.company_info.name),
            representative=_parse_str(raw, "company_rep", defaults.company_info.representative),
            business_number=_parse_str(raw, "company_biznum", defaults.company_info.business_number),
            email=_parse_str(raw, "company_email", defaults.company_info.email),
            address=_parse_str(raw, "company_address", defaults.company_info.address),
            website=_parse_str(raw, "company_website", defaults.company_info.website),
        ),
        bank_info=BankInfo(
            bank_name=_parse_str(raw, "bank_name", defaults.bank_info.bank_name),
            account_number=_parse_str(raw, "bank_account", defaults.bank_info.account_number),
            account_holder=_parse_str(raw, "bank_holder", defaults.bank_info.account_holder),
        ),
    )


# ── Resolver ─────────────────────────────────────────────

class ConfigSource(Protocol):
    async def fetch_raw(self) -> dict[str, str]: ...

    async def write_rows(self, rows: list[list[str]]) -> None: ...


class SettingsSnapshot(BaseModel):
    settings: QuoteSettings
    cached_at: Optional[datetime] = None
    from_cache: bool = False
    fallback: bool = False
    error: Optional[str] = None


class SettingsResolver:
    """
    Process-local, TTL-gated cache around the config tab.
    One instance per application; failures are served as defaults
    and never cached.
    """

    def __init__(
        self,
        source: ConfigSource,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.time,
    ):
        self._source = source
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._cached: QuoteSettings | None = None
        self._cached_at: float = 0.0

    async def resolve(self) -> SettingsSnapshot:
        now = self._clock()
        if self._cached is not None and (now - self._cached_at) < self.ttl_seconds:
            return SettingsSnapshot(
                settings=self._cached,
                cached_at=self._as_datetime(self._cached_at),
                from_cache=True,
            )

        try:
            raw = await self._source.fetch_raw()
            settings = parse_raw_config(raw)
        except Exception as e:
            logger.error(f"Failed to load quote settings, serving defaults: {e}")
            return SettingsSnapshot(
                settings=DEFAULT_SETTINGS,
                fallback=True,
                error=str(e),
            )

        self._cached = settings
        self._cached_at = now
        logger.info(f"Quote settings refreshed ({len(raw)} keys)")
        return SettingsSnapshot(settings=settings, cached_at=self._as_datetime(now))

    async def get_quote_settings(self) -> QuoteSettings:
        return (await self.resolve()).settings

    def invalidate(self) -> None:
        self._cached = None
        self._cached_at = 0.0

    async def initialize_store(self) -> int:
        """Write the default rows to the config tab. Safe to re-run."""
        rows = default_config_rows()
        await self._source.write_rows(rows)
        self.invalidate()
        logger.info(f"Config tab initialized with {len(rows)} default rows")
        return len(rows)

    @staticmethod
    def _as_datetime(ts: float) -> datetime:
        return datetime.fromtimestamp(ts, tz=timezone.utc)
