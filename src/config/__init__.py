"""Configuration module."""

from src.config.logging import configure_logging, get_logger
from src.config.settings import (
    ChannelSettings,
    PricingSettings,
    Settings,
    StorageSettings,
    SyncSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "Settings",
    "StorageSettings",
    "ChannelSettings",
    "PricingSettings",
    "SyncSettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "get_logger",
]
