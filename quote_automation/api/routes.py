"""
API routes — thin HTTP layer that delegates to the quote service.

Routes:
  GET  /health                       → API health check
  POST /api/quote/submit             → Validate, price, store and notify one inquiry
  PUT  /api/quote/update             → Attach links / note to an existing inquiry
  PUT  /api/quote/status             → Advance an inquiry's status
  GET  /api/config/quote-settings    → Current quote settings (cached, never fails)
  POST /api/config/init              → Seed the config tab with defaults
  POST /api/config/init-sheet        → Write the inquiry tab header row
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from quote_automation.config import get_settings
from quote_automation.models.enums import InquiryStatus
from quote_automation.models.errors import InvalidStatusTransition, SubmissionValidationError
from quote_automation.rules.quote_settings import SettingsResolver
from quote_automation.services.quote_service import QuoteService, parse_links

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
quote_router = APIRouter()
config_router = APIRouter()


# ── Helpers ──────────────────────────────────────────────

def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message, **extra})


def _server_error(message: str, exc: Exception) -> JSONResponse:
    """500 with exception detail outside production only."""
    if get_settings().is_production:
        return _error(500, message)
    return _error(500, message, details=str(exc))


async def _json_body(request: Request) -> dict[str, Any] | None:
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _quote_service(request: Request) -> QuoteService:
    return request.app.state.quote_service


def _resolver(request: Request) -> SettingsResolver:
    return request.app.state.settings_resolver


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Quote submission ─────────────────────────────────────

@quote_router.post("/submit")
async def submit_quote(request: Request, background_tasks: BackgroundTasks):
    body = await _json_body(request)
    if body is None:
        return _error(400, "Validation failed", details=["request body must be a JSON object"])

    try:
        outcome = await _quote_service(request).submit(body, dispatch=background_tasks.add_task)
    except SubmissionValidationError as e:
        return _error(400, "Validation failed", details=e.errors)
    except Exception as e:
        logger.error(f"Quote submission failed: {e}")
        return _server_error("문의 접수 중 오류가 발생했습니다.", e)

    return {
        "success": True,
        "quoteNumber": outcome.quote_number,
        "estimatedPrice": {
            "min": outcome.estimate.min,
            "max": outcome.estimate.max,
            "formatted": outcome.formatted,
        },
        "message": "문의가 접수되었습니다.",
    }


@quote_router.put("/update")
async def update_quote(request: Request):
    body = await _json_body(request)
    quote_number = (body or {}).get("quoteNumber")
    if not isinstance(quote_number, str) or not quote_number.strip():
        return _error(400, "quoteNumber is required")

    try:
        links = parse_links(body.get("additionalLinks"))
    except (KeyError, TypeError, AttributeError, ValidationError):
        return _error(400, "additionalLinks must be a list of objects with a url")

    try:
        updated = await _quote_service(request).update(
            quote_number.strip(),
            additional_links=links,
            additional_note=str(body.get("additionalNote") or ""),
        )
    except Exception as e:
        logger.error(f"Quote update failed: {e}")
        return _server_error("Failed to update quote", e)

    if not updated:
        return _error(404, "Quote not found or update failed")

    logger.info(f"[QuoteUpdate] Updated optional fields for: {quote_number}")
    return {"success": True, "message": "Optional fields updated successfully"}


@quote_router.put("/status")
async def update_quote_status(request: Request):
    body = await _json_body(request) or {}
    quote_number = body.get("quoteNumber")
    if not isinstance(quote_number, str) or not quote_number.strip():
        return _error(400, "quoteNumber is required")
    try:
        status = InquiryStatus(body.get("status"))
    except ValueError:
        allowed = ", ".join(s.value for s in InquiryStatus)
        return _error(400, f"status must be one of: {allowed}")

    try:
        updated = await _quote_service(request).update_status(quote_number.strip(), status)
    except InvalidStatusTransition as e:
        return _error(409, str(e))
    except Exception as e:
        logger.error(f"Status update failed: {e}")
        return _server_error("Failed to update status", e)

    if not updated:
        return _error(404, "Quote not found")
    return {"success": True, "status": status.value}


# ── Config ───────────────────────────────────────────────

@config_router.get("/quote-settings")
async def get_quote_settings(request: Request):
    snapshot = await _resolver(request).resolve()
    content: dict[str, Any] = {
        "success": True,
        "data": snapshot.settings.model_dump(mode="json", by_alias=True),
        "cachedAt": snapshot.cached_at.isoformat() if snapshot.cached_at else None,
        "fromCache": snapshot.from_cache,
        "clientTtlSeconds": get_settings().client_settings_ttl_seconds,
    }
    if snapshot.fallback:
        content["fallback"] = True
        content["error"] = snapshot.error
    return content


@config_router.post("/init")
async def init_config(request: Request):
    try:
        count = await _resolver(request).initialize_store()
    except Exception as e:
        logger.error(f"Failed to initialize config tab: {e}")
        return _error(500, str(e))
    return {
        "success": True,
        "message": "Config sheet initialized with default values",
        "rows": count,
    }


@config_router.post("/init-sheet")
async def init_inquiry_sheet(request: Request):
    try:
        await _quote_service(request).inquiries.initialize_headers()
    except Exception as e:
        logger.error(f"Failed to initialize inquiry headers: {e}")
        return _error(500, str(e))
    return {"success": True, "message": "Sheet headers initialized successfully"}
