# app/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Local cache ───────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./fleet_cache.db"

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_IP: str = "0.0.0.0"
    BACKEND_PORT: int = 8080

    # ── Shared remote document ────────────────────────────────────────────
    REMOTE_DOCUMENT_URL: str = "https://api.npoint.io/e089285093556d11e54a"
    REMOTE_TIMEOUT_SECONDS: float = 8.0
    REMOTE_MAX_RETRIES: int = 2                 # retries after the first attempt
    REMOTE_RETRY_BACKOFF_SECONDS: float = 1.0

    # ── Sync ──────────────────────────────────────────────────────────────
    SYNC_INTERVAL_SECONDS: float = 10.0
    WRITE_CONFLICT_CHECK: bool = True           # reject writes on revision mismatch

    # ── Session ───────────────────────────────────────────────────────────
    NETWORK_ID: Optional[str] = None            # office identifier; generated if unset

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
