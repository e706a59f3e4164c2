"""
Configuration — environment-driven settings.

    from artiflare.config import get_settings

    settings = get_settings()
    store = SQLAlchemyDocumentStore.from_url(settings.database_url)

Every value can be overridden with an ``ARTIFLARE_``-prefixed environment
variable or a ``.env`` file next to the process working directory.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ARTIFLARE_",
        env_file=".env",
        extra="ignore",
    )

    # Storage
    database_url: str = "sqlite+aiosqlite:///./artiflare.db"

    # Pricing
    tax_rate: float = Field(default=0.08, ge=0)
    shipping_policy: Literal["threshold", "flat"] = "threshold"

    # Order placement retries (TransactionAborted only)
    order_retry_attempts: int = Field(default=3, ge=1)
    order_retry_backoff_initial: float = Field(default=0.05, ge=0)
    order_retry_backoff_max: float = Field(default=1.0, ge=0)
    order_retry_jitter: bool = True

    # Order email notification (client side)
    order_email_endpoint: str = "http://localhost:5000/api/send-order-emails"
    notify_timeout_seconds: float = Field(default=10.0, gt=0)

    # Mailer service
    mail_provider: Literal["log", "http"] = "log"
    mail_api_url: str | None = None
    mail_api_key: str | None = None
    mail_from: str = "orders@artiflare.local"
    cors_origins: list[str] = ["*"]
    mailer_host: str = "0.0.0.0"
    mailer_port: int = 5000

    # Logging
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings()


__all__ = ("Settings", "get_settings")
