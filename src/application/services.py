"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from src.config import get_settings
from src.core.entities.product import PricingPolicy
from src.core.services import ChannelSynchronizer, CredentialManager, ProrationMethod

if TYPE_CHECKING:
    from src.core.interfaces import IChannelClient, ICredentialStore, IListingStore


# Singleton service instances
_credential_manager: CredentialManager | None = None
_channel_synchronizer: ChannelSynchronizer | None = None


def get_pricing_policy() -> PricingPolicy:
    """FX rate and default markup from PRICING_* settings."""
    pricing = get_settings().pricing
    return PricingPolicy(
        usd_to_ars_rate=pricing.usd_to_ars_rate,
        default_markup_percentage=pricing.default_markup_percentage,
    )


def get_proration_method() -> ProrationMethod:
    return ProrationMethod(get_settings().pricing.proration_method)


async def get_credential_manager(
    credential_store: "ICredentialStore | None" = None,
    channel_client: "IChannelClient | None" = None,
) -> CredentialManager:
    """
    Get or create the CredentialManager.

    The singleton owns the per-identity refresh locks, so every caller in
    the process must share it.
    """
    global _credential_manager

    if _credential_manager is not None and credential_store is None and channel_client is None:
        return _credential_manager

    # Lazy import infrastructure to avoid circular imports
    from src.infrastructure.channel import get_channel_client
    from src.infrastructure.storage.sqlite import get_credential_store

    settings = get_settings()
    manager = CredentialManager(
        store=credential_store or await get_credential_store(),
        client=channel_client or get_channel_client(),
        refresh_margin_seconds=settings.channel.token_refresh_margin_seconds,
        default_identity=settings.channel.default_identity,
    )

    if credential_store is None and channel_client is None:
        _credential_manager = manager

    return manager


async def get_channel_synchronizer(
    listing_store: "IListingStore | None" = None,
    credential_manager: CredentialManager | None = None,
    channel_client: "IChannelClient | None" = None,
) -> ChannelSynchronizer:
    """Get or create the ChannelSynchronizer."""
    global _channel_synchronizer

    overrides = (listing_store, credential_manager, channel_client)
    if _channel_synchronizer is not None and all(o is None for o in overrides):
        return _channel_synchronizer

    from src.infrastructure.channel import get_channel_client
    from src.infrastructure.storage.sqlite import get_listing_store

    settings = get_settings()
    synchronizer = ChannelSynchronizer(
        listing_store=listing_store or await get_listing_store(),
        credentials=credential_manager or await get_credential_manager(),
        client=channel_client or get_channel_client(),
        max_concurrency=settings.sync.max_concurrency,
        claim_timeout_seconds=settings.sync.claim_timeout_seconds,
        max_available_quantity=settings.channel.max_available_quantity,
        identity=settings.channel.default_identity,
    )

    if all(o is None for o in overrides):
        _channel_synchronizer = synchronizer

    return synchronizer


def reset_services() -> None:
    """Reset all service singletons (for testing)."""
    global _credential_manager, _channel_synchronizer
    _credential_manager = None
    _channel_synchronizer = None
