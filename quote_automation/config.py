"""
Application configuration using Pydantic Settings.
All environment-specific values are centralized here.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "Invisible Works Quote API"
    environment: str = "development"  # "development" | "production"

    # ── Google Sheets (system of record) ─────────────────
    google_service_account_email: str = ""
    google_private_key: str = ""
    google_sheet_id: str = ""
    google_sheet_tab: str = "Sheet1"
    google_config_tab: str = "Sheet2"

    # ── Gmail notifications ──────────────────────────────
    google_client_id: str = ""
    google_client_secret: str = ""
    google_refresh_token: str = ""
    mail_sender: str = "mzstudio104@gmail.com"
    mail_sender_name: str = "Invisible Works"
    admin_email: str = "invisibleworks.office@gmail.com"

    # ── Quote settings cache ─────────────────────────────
    settings_cache_ttl_seconds: float = 300.0
    client_settings_ttl_seconds: float = 60.0

    # ── Rate limiting ────────────────────────────────────
    rate_limit_max_requests: int = 10
    rate_limit_window_seconds: float = 60.0
    rate_limit_sweep_seconds: float = 300.0
    rate_limited_paths: list[str] = ["/api/quote/submit"]

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def service_account_private_key(self) -> str:
        """Private key with escaped newlines restored (as stored in .env files)."""
        return self.google_private_key.replace("\\n", "\n")


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
