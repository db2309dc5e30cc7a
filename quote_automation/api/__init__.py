"""
FastAPI application factory and API package.

Run with:
    uvicorn quote_automation.api:app --reload --port 8000

Or via main.py:
    python -m quote_automation.main --serve
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quote_automation.config import get_settings
from quote_automation.api.rate_limit import RateLimiter, RateLimitMiddleware, sweep_periodically
from quote_automation.api.routes import config_router, health_router, quote_router
from quote_automation.persistence import ConfigRepository, InquiryRepository, SheetsClient
from quote_automation.rules.quote_settings import SettingsResolver
from quote_automation.services import NotificationService, QuoteService
from quote_automation.utils.logger import setup_logging

logger = logging.getLogger(__name__)


def create_app(
    quote_service: QuoteService | None = None,
    settings_resolver: SettingsResolver | None = None,
    rate_limiter: RateLimiter | None = None,
) -> FastAPI:
    """Application factory — create and configure the FastAPI instance."""
    settings = get_settings()
    setup_logging(settings.log_level)

    application = FastAPI(
        title="Invisible Works Quote API",
        description="Quote pricing and submission endpoints for the agency website",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ── Components (one instance per app) ───────────────
    if settings_resolver is None or quote_service is None:
        sheets = SheetsClient(settings)
        if settings_resolver is None:
            settings_resolver = SettingsResolver(
                ConfigRepository(sheets),
                ttl_seconds=settings.settings_cache_ttl_seconds,
            )
        if quote_service is None:
            quote_service = QuoteService(
                InquiryRepository(sheets),
                settings_resolver,
                NotificationService(settings),
            )
    rate_limiter = rate_limiter or RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )

    application.state.settings_resolver = settings_resolver
    application.state.quote_service = quote_service
    application.state.rate_limiter = rate_limiter

    # CORS — the marketing site calls these endpoints from the browser
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(
        RateLimitMiddleware,
        limiter=rate_limiter,
        paths=settings.rate_limited_paths,
    )

    # Register route groups
    application.include_router(health_router, tags=["Health"])
    application.include_router(quote_router, prefix="/api/quote", tags=["Quote"])
    application.include_router(config_router, prefix="/api/config", tags=["Config"])

    @application.on_event("startup")
    async def startup():
        application.state.sweep_task = asyncio.create_task(
            sweep_periodically(rate_limiter, settings.rate_limit_sweep_seconds)
        )
        logger.info(f"Starting {settings.app_name} ({settings.environment})")

    @application.on_event("shutdown")
    async def shutdown():
        task = getattr(application.state, "sweep_task", None)
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await quote_service.drain()

    return application


# Module-level instance for `uvicorn quote_automation.api:app`
app = create_app()
