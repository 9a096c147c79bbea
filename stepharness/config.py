"""
Step Harness Configuration

Settings are loaded from environment variables (or a .env file in the
working directory) using pydantic-settings.
"""

import logging
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for step tests against a mini cluster."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Cluster endpoints
    ROUTER_HTTP_BASE: str = "http://127.0.0.1:8080"
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Polling (eventual consistency waits)
    POLL_TICK_INTERVAL_SECONDS: float = 1.0
    POLL_TIMEOUT_SECONDS: float = 20.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: Optional[str] = None


settings = Settings()


def configure_logging() -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(settings.LOG_FILE)
            if settings.LOG_FILE
            else logging.NullHandler(),
        ],
    )

    # httpx logs every request at INFO; the poller would flood the output.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
