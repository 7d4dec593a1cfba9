"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "landed_stock.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class ChannelSettings(BaseSettings):
    """Marketplace (MercadoLibre) integration configuration."""

    model_config = SettingsConfigDict(env_prefix="CHANNEL_")

    app_id: str = ""
    client_secret: str = ""
    redirect_uri: str = ""
    site_id: str = "MLA"
    api_url: str = "https://api.mercadolibre.com"
    auth_url: str = "https://auth.mercadolibre.com.ar/authorization"

    # Every outbound call is bounded by this timeout (seconds)
    timeout: float = 15.0

    # Retries apply to idempotent reads only, never to stock pushes
    read_retries: int = 3
    read_retry_delay: float = 0.5

    max_available_quantity: int = 99999
    token_refresh_margin_seconds: int = 0
    default_identity: str = "default"


class PricingSettings(BaseSettings):
    """Landed cost and sale price configuration."""

    model_config = SettingsConfigDict(env_prefix="PRICING_")

    usd_to_ars_rate: float = 1000.0
    default_markup_percentage: float = 30.0
    proration_method: Literal["value", "quantity"] = "value"


class SyncSettings(BaseSettings):
    """Listing stock synchronization configuration."""

    model_config = SettingsConfigDict(env_prefix="SYNC_")

    max_concurrency: int = 5

    # An in-flight claim older than this is considered abandoned
    claim_timeout_seconds: int = 120


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Landed Stock Engine"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    channel: ChannelSettings = Field(default_factory=ChannelSettings)
    pricing: PricingSettings = Field(default_factory=PricingSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
