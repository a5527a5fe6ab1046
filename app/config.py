"""Configuration module centralizing environment access.

A plain Settings object read from environment variables; no settings
framework involved.
"""
import os
from typing import Optional


class Settings:
    def __init__(self) -> None:
        # Core
        inferred_testing = (
            os.getenv("PYTEST_CURRENT_TEST")
            or os.getenv("PYTEST_RUNNING") == "1"
            or os.getenv("ENVIRONMENT") == "testing"
            or os.getenv("TESTING") == "1"
        )
        self.environment: str = "testing" if inferred_testing else os.getenv("ENVIRONMENT", "development")
        self.port: int = int(os.getenv("PORT", "8000"))
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Database
        self.database_url: str = os.getenv("DATABASE_URL") or "sqlite:///./app.db"
        self.sql_echo: bool = os.getenv("SQL_ECHO", "false").lower() == "true"

        # Authenticated actor identity, injected by the upstream auth gateway
        self.actor_header: str = os.getenv("ACTOR_HEADER", "X-User-Id")


_SETTINGS_CACHE: Optional[Settings] = None


def get_settings(refresh: bool = False) -> Settings:
    """Return a (possibly cached) Settings instance.

    Pass refresh=True in tests after modifying environment variables to force
    re-evaluation.
    """
    global _SETTINGS_CACHE
    if refresh or _SETTINGS_CACHE is None:
        _SETTINGS_CACHE = Settings()
    return _SETTINGS_CACHE
