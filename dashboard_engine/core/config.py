"""
Application configuration — Pydantic Settings.

Loads from .env with strict validation. Single source of truth
for all environment-dependent values.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────────
    APP_NAME: str = "DashboardEngine"
    APP_ENV: str = "development"
    DEBUG: bool = False
    API_PORT: int = 8000
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # ── Database ─────────────────────────────────────────────────
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_NAME: str = "dashboard_engine"
    DB_USER: str = "root"
    DB_PASSWORD: str = ""

    # ── Caching (seconds) ────────────────────────────────────────
    DATA_SOURCE_CACHE_SECONDS: int = 300
    WIDGET_CATALOG_CACHE_SECONDS: int = 3600

    # ── Dashboard builder ────────────────────────────────────────
    DEFAULT_DASHBOARD_NAME: str = "My Dashboard"
    DEFAULT_WIDGETS_FILE: str = ""

    # ── Logging ──────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # ── URL Builders ─────────────────────────────────────────────

    def _build_url(self, driver: str) -> str:
        """Build a SQLAlchemy database URL."""
        cred = f"{self.DB_USER}:{self.DB_PASSWORD}" if self.DB_PASSWORD else self.DB_USER
        return f"mysql+{driver}://{cred}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def db_url(self) -> str:
        return self._build_url("aiomysql")


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
