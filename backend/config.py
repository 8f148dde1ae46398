"""
Pagesmith configuration — all environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        return default


class Settings:
    """Application settings from environment variables."""

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")

    # Editor scroll sync
    SCROLL_SYNC_DELAY_MS: int = _int_env("SCROLL_SYNC_DELAY_MS", 50)

    # Browser storage key for a visitor's light/dark preference
    COLOR_MODE_STORAGE_KEY: str = os.environ.get("COLOR_MODE_STORAGE_KEY", "site-color-mode")

    # Public pages: 5-min browser TTL, 1-hour shared cache, 24h stale-while-revalidate
    CACHE_CONTROL: str = os.environ.get(
        "CACHE_CONTROL", "public, max-age=300, s-maxage=3600, stale-while-revalidate=86400"
    )
    PREVIEW_CACHE_CONTROL: str = "no-store"

    @property
    def PUBLIC_URL(self) -> str:
        url = os.environ.get("PUBLIC_URL")
        if url:
            return url.rstrip("/")
        return "http://localhost:8000" if self.ENVIRONMENT == "development" else "https://pagesmith.site"


# Singleton instance
settings = Settings()
