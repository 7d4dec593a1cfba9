"""Marketplace channel clients."""

from src.infrastructure.channel.mercadolibre import MercadoLibreClient

_channel_client: MercadoLibreClient | None = None


def get_channel_client() -> MercadoLibreClient:
    """Get singleton channel client instance."""
    global _channel_client
    if _channel_client is None:
        _channel_client = MercadoLibreClient()
    return _channel_client


def reset_channel_client() -> None:
    """Reset client (for testing)."""
    global _channel_client
    _channel_client = None


__all__ = ["MercadoLibreClient", "get_channel_client", "reset_channel_client"]
