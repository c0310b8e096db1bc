"""Configuration utilities for the automation service."""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AutomationSettings(BaseSettings):
    """Settings read from the environment and an optional ``.env`` file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "automation-core"
    cors_origins: List[str] = ["http://localhost:3000"]

    # Persistence
    storage_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "automation"

    # Outbound collaborators. Unset URLs fall back to in-process defaults.
    notification_webhook_url: Optional[str] = None
    email_webhook_url: Optional[str] = None
    integration_sync_url: Optional[str] = None
    http_timeout_seconds: float = 10.0
    http_max_attempts: int = 3

    custom_script_max_length: int = 10_000
    custom_script_timeout_seconds: float = 5.0


@lru_cache
def get_settings() -> AutomationSettings:
    """Return cached AutomationSettings to avoid repeated environment parsing."""

    return AutomationSettings()
