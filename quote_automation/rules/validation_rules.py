"""
Validation Rules — field checks applied to a raw quote request body
before anything is priced or persisted.

Every rule is evaluated independently so the caller sees the full list
of problems, not just the first one.
"""

from __future__ import annotations

import logging
import math
from numbers import Real
from typing import Any

from pydantic import BaseModel

from quote_automation.models.enums import ContactMethod, DomainType, OptionStatus, UIUXStyle

logger = logging.getLogger(__name__)

CONTACT_METHODS = tuple(m.value for m in ContactMethod)
UIUX_STYLES = tuple(s.value for s in UIUXStyle)
OPTION_STATUSES = tuple(s.value for s in OptionStatus)
DOMAIN_TYPES = tuple(t.value for t in DomainType)

MAX_SCREEN_BLOCKS = 1000


class ValidationResult(BaseModel):
    valid: bool
    errors: list[str] = []


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def _is_link(link: Any) -> bool:
    if not isinstance(link, dict) or _is_blank(link.get("url")):
        return False
    return all(link.get(key) is None or isinstance(link[key], str) for key in ("type", "customType"))


def _check_option(option: Any, field: str, max_years: int | None = None) -> list[str]:
    """Hosting choices are either pending or confirmed with a year count."""
    if option is None:
        return []
    if not isinstance(option, dict):
        return [f"{field} must be an object"]

    errors = []
    if option.get("status", OptionStatus.PENDING.value) not in OPTION_STATUSES:
        errors.append(f"{field}.status must be one of: {', '.join(OPTION_STATUSES)}")

    years = option.get("years")
    if years is not None:
        if not isinstance(years, int) or isinstance(years, bool) or years < 1:
            errors.append(f"{field}.years must be a positive whole number")
        elif max_years is not None and years > max_years:
            errors.append(f"{field}.years must be at most {max_years}")
    return errors


def validate_submission(body: Any) -> ValidationResult:
    if not isinstance(body, dict):
        return ValidationResult(valid=False, errors=["request body must be a JSON object"])

    errors: list[str] = []

    # ── Client ───────────────────────────────────────────
    if _is_blank(body.get("clientName")):
        errors.append("clientName is required")

    contact_method = body.get("contactMethod")
    if contact_method not in CONTACT_METHODS:
        errors.append(f"contactMethod must be one of: {', '.join(CONTACT_METHODS)}")

    if contact_method == ContactMethod.EMAIL.value and _is_blank(body.get("clientEmail")):
        errors.append("clientEmail is required when contactMethod is email")
    if contact_method in (ContactMethod.SMS.value, ContactMethod.PHONE.value) and _is_blank(body.get("clientPhone")):
        errors.append("clientPhone is required when contactMethod is sms or phone")

    # ── Project scope ────────────────────────────────────
    blocks = body.get("screenBlocks")
    if not isinstance(blocks, dict) or not _is_number(blocks.get("min")) or not _is_number(blocks.get("max")):
        errors.append("screenBlocks must be an object with numeric min and max")
    elif not (math.isfinite(blocks["min"]) and math.isfinite(blocks["max"])):
        errors.append("screenBlocks.min and screenBlocks.max must be finite numbers")
    else:
        if blocks["min"] < 0 or blocks["max"] < 0:
            errors.append("screenBlocks.min and screenBlocks.max must not be negative")
        if blocks["max"] > MAX_SCREEN_BLOCKS:
            errors.append(f"screenBlocks.max must be at most {MAX_SCREEN_BLOCKS}")
        if blocks["min"] > blocks["max"]:
            errors.append("screenBlocks.min must not exceed screenBlocks.max")

    if body.get("uiuxStyle") not in UIUX_STYLES:
        errors.append(f"uiuxStyle must be one of: {', '.join(UIUX_STYLES)}")

    # ── Optional fields (shape only) ─────────────────────
    if body.get("features") is not None and not _is_str_list(body["features"]):
        errors.append("features must be a list of strings")
    if body.get("specialNotes") is not None and not _is_str_list(body["specialNotes"]):
        errors.append("specialNotes must be a list of strings")
    if body.get("currentAssets") is not None and not _is_str_list(body["currentAssets"]):
        errors.append("currentAssets must be a list of strings")

    errors.extend(_check_option(body.get("serverOption"), "serverOption", max_years=3))
    errors.extend(_check_option(body.get("domainOption"), "domainOption"))
    domain = body.get("domainOption")
    if isinstance(domain, dict) and domain.get("type") is not None and domain["type"] not in DOMAIN_TYPES:
        errors.append(f"domainOption.type must be one of: {', '.join(DOMAIN_TYPES)}")

    links = body.get("additionalLinks")
    if links is not None and not (isinstance(links, list) and all(_is_link(link) for link in links)):
        errors.append("additionalLinks must be a list of objects with a url")

    if errors:
        logger.info(f"Submission rejected with {len(errors)} error(s)")
    return ValidationResult(valid=not errors, errors=errors)
