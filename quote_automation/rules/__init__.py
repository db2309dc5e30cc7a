"""Rules — pricing, quote settings, submission validation."""

from quote_automation.rules.pricing_rules import calculate_estimated_price, format_price_range
from quote_automation.rules.quote_settings import DEFAULT_SETTINGS, QuoteSettings, SettingsResolver
from quote_automation.rules.validation_rules import ValidationResult, validate_submission

__all__ = [
    "calculate_estimated_price",
    "format_price_range",
    "DEFAULT_SETTINGS",
    "QuoteSettings",
    "SettingsResolver",
    "ValidationResult",
    "validate_submission",
]
