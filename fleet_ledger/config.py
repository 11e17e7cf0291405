"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # ── Database ──────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./fleet_ledger.db"

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8080

    # ── Security ──────────────────────────────────────────────────────────
    API_KEY: Optional[str] = None   # Set in .env to enable auth on API endpoints

    # ── Audit ─────────────────────────────────────────────────────────────
    AUDIT_FUNCTION_URL: Optional[str] = None     # e.g. http://localhost:8080/api/v1/functions/create-audit-log
    AUDIT_FUNCTION_KEY: Optional[str] = None     # Sent as X-API-Key to the audit procedure
    AUDIT_PRIMARY_TIMEOUT_SECONDS: float = 10.0  # Hard limit before falling back to direct insert
    AUDIT_READ_ACTIONS: List[str] = ["load_all"] # READs are only audited for these actions
    USER_AGENT: str = "fleet-ledger/1.0"

    # ── Domain rules ──────────────────────────────────────────────────────
    PLATE_PATTERN: str = r"^[A-Z0-9]{2,4}-?[A-Z0-9]{2,4}$"
    MIN_VEHICLE_YEAR: int = 1900

    # ── Presentation ──────────────────────────────────────────────────────
    LOCALE: str = "es"                # es | en
    EXPORT_DIR: str = "exports"

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True
    LOG_DIR: Optional[str] = None     # defaults to ./logs
    LOG_FILE: str = "fleet.log"
    LOG_MAX_BYTES: int = 5 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 10

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
