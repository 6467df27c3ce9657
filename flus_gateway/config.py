"""Configuration management using Pydantic Settings"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (session-scoped notification fire-record)
    database_url: str = "sqlite:///./flus_gateway.db"

    # External Services
    delivery_webhook_url: Optional[str] = None  # unset: notifications are returned, not delivered

    # Service
    service_name: str = "flus-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0
    webhook_max_retries: int = 5
    webhook_backoff_base: float = 1.0  # Exponential backoff base in seconds

    # Billing / notifications
    default_currency: str = "USD"
    max_days_after_closing: int = 31


settings = Settings()
