"""
Quote API — Main Entry Point

Run as an API server:
    python -m quote_automation.main --serve
    # or: uvicorn quote_automation.api:app --reload --port 8000

Seed the spreadsheet (config tab defaults + inquiry header row):
    python -m quote_automation.main --init
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys

from quote_automation.config import get_settings
from quote_automation.utils.logger import setup_logging


def serve(host: str = "0.0.0.0", port: int | None = None) -> None:
    """Start the FastAPI server."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)
    port = port or int(os.getenv("PORT", "8000"))
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run(
        "quote_automation.api:app",
        host=host,
        port=port,
        reload=not settings.is_production,
    )


def init_sheets() -> None:
    """Write default config rows and the inquiry header row."""
    from quote_automation.persistence import ConfigRepository, InquiryRepository, SheetsClient
    from quote_automation.rules.quote_settings import SettingsResolver

    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    sheets = SheetsClient(settings)

    async def _run() -> None:
        count = await SettingsResolver(ConfigRepository(sheets)).initialize_store()
        await InquiryRepository(sheets).initialize_headers()
        logger.info(f"Spreadsheet initialized: {count} config rows, inquiry headers written")

    asyncio.run(_run())


if __name__ == "__main__":
    if "--init" in sys.argv:
        init_sheets()
    else:
        serve()
