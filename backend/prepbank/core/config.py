"""
Pydantic Settings — centralized configuration loaded from environment variables.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Database ──────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./prepbank.db"
    DATABASE_ECHO: bool = False
    DB_MAX_CONCURRENT_WRITES: int = 4

    # ── Logging ───────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ── Company resolution ────────────────────
    LOGO_URL_TEMPLATE: str = "https://logo.clearbit.com/{slug}.com"
    BULK_COMPANY_DESCRIPTION: str = "Added via Bulk Upload."
    RESOLVER_TIMEOUT_SECONDS: float = 30.0

    # ── Upload behaviour ──────────────────────
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024   # advisory only
    STRICT_ENUMS: bool = False
    STRICT_CSV: bool = False
    DEFAULT_FACULTY_NAME: str = "Faculty Member"

    # ── Access ────────────────────────────────
    INSTITUTION_EMAIL_DOMAIN: str = "pilani.bits-pilani.ac.in"

    # ── Application ───────────────────────────
    APP_ENV: str = "development"

    model_config = {"env_file": ["../.env", ".env"], "extra": "ignore"}


settings = Settings()
