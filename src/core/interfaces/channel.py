"""
Abstract interface for the external marketplace channel.

Implementations translate transport and HTTP failures into the channel
exceptions (RecoverableChannelError, HardChannelError, ChannelTimeoutError).
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from src.core.entities.channel import CategoryAttribute


class TokenGrant(BaseModel):
    """Token pair returned by an authorization or refresh exchange."""

    access_token: str
    refresh_token: str
    expires_in: int = Field(..., description="Lifetime of the access token in seconds")
    user_id: str | None = None


class ListingSnapshot(BaseModel):
    """Listing state as returned by the channel."""

    channel_item_id: str
    title: str
    category_id: str | None = None
    price: float = 0.0
    currency: str = "ARS"
    status: str = "active"
    permalink: str | None = None
    thumbnail: str | None = None
    available_quantity: int = 0
    attributes: dict[str, Any] = Field(default_factory=dict)


class IChannelClient(ABC):
    """Interface for marketplace API calls."""

    @abstractmethod
    def authorization_url(self, state: str | None = None) -> str:
        """URL the operator visits to grant access."""

    @abstractmethod
    async def exchange_auth_code(self, code: str) -> TokenGrant:
        """Exchange an authorization code for a token pair."""

    @abstractmethod
    async def refresh(self, refresh_token: str) -> TokenGrant:
        """Exchange a refresh token for a new token pair."""

    @abstractmethod
    async def update_listing_stock(
        self, access_token: str, channel_item_id: str, quantity: int
    ) -> None:
        """
        Set the available quantity of a listing.

        Raises:
            RecoverableChannelError: Channel refuses stock changes right now
            HardChannelError: Any other failure, timeouts included
        """

    @abstractmethod
    async def fetch_listing(self, access_token: str, channel_item_id: str) -> ListingSnapshot:
        """Fetch one listing."""

    @abstractmethod
    async def fetch_category_attributes(
        self, access_token: str, category_id: str
    ) -> list[CategoryAttribute]:
        """Fetch attribute definitions for a category."""

    @abstractmethod
    async def create_listing(
        self, access_token: str, payload: dict[str, Any]
    ) -> ListingSnapshot:
        """Publish a new listing."""

    @abstractmethod
    async def update_listing(
        self, access_token: str, channel_item_id: str, payload: dict[str, Any]
    ) -> ListingSnapshot:
        """Update an existing listing."""
