"""
Application Settings

Centralized configuration for the contest backend.
All values are loaded from environment variables (a project-root .env is
read first by python-dotenv).
"""
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(dotenv_path=PROJECT_ROOT / ".env")


def get_bool_env(key: str, default: bool = False) -> bool:
    """Get a boolean value from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on', 'enabled')


def get_int_env(key: str, default: int) -> int:
    """Get an integer value from environment variable, falling back on bad input."""
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def get_list_env(key: str, default: str = "") -> List[str]:
    """Get a comma-separated list from environment variable."""
    return [item.strip() for item in os.getenv(key, default).split(",") if item.strip()]


class Settings:
    """
    Runtime settings.

    To add a new setting:
    1. Add it here as a class attribute
    2. Load it from an environment variable
    3. Read it through the `settings` singleton
    """

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS: List[str] = get_list_env("CORS_ORIGINS", "http://localhost:3000")

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./contest.db")

    # Instagram Graph API (tagged media of the contest account)
    IG_ACCESS_TOKEN: str = os.getenv("IG_ACCESS_TOKEN", "")
    IG_USER_ID: str = os.getenv("IG_USER_ID", "")
    INSTAGRAM_GRAPH_URL: str = os.getenv("INSTAGRAM_GRAPH_URL", "https://graph.facebook.com/v18.0")
    INSTAGRAM_TIMEOUT_SECONDS: int = get_int_env("INSTAGRAM_TIMEOUT_SECONDS", 15)
    INSTAGRAM_PAGE_LIMIT: int = get_int_env("INSTAGRAM_PAGE_LIMIT", 50)

    # Public ranking
    SYNC_INTERVAL_MS: int = get_int_env("SYNC_INTERVAL_MS", 30000)
    RANKING_TOP_N: int = get_int_env("RANKING_TOP_N", 5)
    RANKING_RATE_LIMIT: str = os.getenv("RANKING_RATE_LIMIT", "60/minute")

    # Storage collaborator
    PUBLIC_STORAGE_BASE_URL: str = os.getenv("PUBLIC_STORAGE_BASE_URL", "")

    # Admin token verification (tokens are issued by the auth service)
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
    JWT_ALGORITHM: str = "HS256"

    @classmethod
    def instagram_configured(cls) -> bool:
        return bool(cls.IG_ACCESS_TOKEN and cls.IG_USER_ID)

    @classmethod
    def as_dict(cls) -> dict:
        """Non-secret settings, for diagnostics."""
        return {
            "environment": cls.ENVIRONMENT,
            "sync_interval_ms": cls.SYNC_INTERVAL_MS,
            "ranking_top_n": cls.RANKING_TOP_N,
            "instagram_configured": cls.instagram_configured(),
        }


# Singleton instance for easy importing
settings = Settings()
