"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    admin_identity: str
    asset_ledger_url: str
    asset_ledger_api_key: str | None = None
    colorization_fee: int = 10**16
    adjustment_fee: int = 5 * 10**15
    mint_fee: int = 2 * 10**16
    processor_share_percent: int = 70
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_identity(raw: str | None) -> str | None:
    """Normalize an actor identity from a header or env value."""
    if raw is None:
        return None
    cleaned = raw.strip().lower()
    return cleaned or None
