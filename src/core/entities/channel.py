"""Marketplace channel listing entities."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from src.core.clock import utc_now
from src.core.exceptions import ValidationError


class ListingStatus(str, Enum):
    """Listing status as reported by the channel."""

    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"
    UNDER_REVIEW = "under_review"
    INACTIVE = "inactive"


# Only these statuses take part in bulk synchronization
SYNCABLE_STATUSES: tuple[str, ...] = (ListingStatus.ACTIVE.value, ListingStatus.PAUSED.value)


class SyncErrorKind(str, Enum):
    """Severity of a persisted synchronization error."""

    WARNING = "WARNING"
    ERROR = "ERROR"


class SyncError(BaseModel):
    """Persisted sync error: ``"WARNING: <message>"`` or ``"ERROR: <message>"``."""

    kind: SyncErrorKind
    message: str

    @property
    def is_warning(self) -> bool:
        return self.kind == SyncErrorKind.WARNING

    def serialize(self) -> str:
        return f"{self.kind.value}: {self.message}"

    @classmethod
    def warning(cls, message: str) -> "SyncError":
        return cls(kind=SyncErrorKind.WARNING, message=message)

    @classmethod
    def error(cls, message: str) -> "SyncError":
        return cls(kind=SyncErrorKind.ERROR, message=message)

    @classmethod
    def parse(cls, raw: str | None) -> "SyncError | None":
        """Parse a stored value. Unprefixed legacy text counts as an error."""
        if not raw:
            return None
        for kind in SyncErrorKind:
            prefix = f"{kind.value}: "
            if raw.startswith(prefix):
                return cls(kind=kind, message=raw[len(prefix):])
        return cls(kind=SyncErrorKind.ERROR, message=raw)


class StockMapping(BaseModel):
    """Units of one product consumed by a single sale of a listing.

    ``priority`` orders mappings for display only; it does not take part in
    the availability computation.
    """

    id: int | None = None
    listing_id: int | None = None
    product_id: int
    quantity_per_sale: int = 1
    priority: int = 0
    enabled: bool = True
    # Joined from products
    product_name: str | None = None
    product_stock: int = 0


class CategoryAttribute(BaseModel):
    """Attribute definition published by the channel for one category."""

    id: str
    name: str
    required: bool = False
    value_type: str | None = None
    allowed_values: list[str] = Field(default_factory=list)


class ListingAttribute(BaseModel):
    """One attribute value tagged with its definition's required flag."""

    id: str
    name: str
    value: str | None = None
    required: bool = False


class AttributeSet(BaseModel):
    """Tagged map of attribute id to value for a listing."""

    category_id: str
    attributes: dict[str, ListingAttribute] = Field(default_factory=dict)

    @classmethod
    def from_definitions(
        cls,
        category_id: str,
        definitions: list[CategoryAttribute],
        values: dict[str, str],
    ) -> "AttributeSet":
        """Bind supplied values to the category's attribute definitions.

        Raises:
            ValidationError: if a value names an attribute the category lacks
        """
        by_id = {definition.id: definition for definition in definitions}
        unknown = sorted(set(values) - set(by_id))
        if unknown:
            raise ValidationError(
                "attributes",
                f"Unknown attributes for category {category_id}: {', '.join(unknown)}",
                unknown,
            )

        attributes = {
            definition.id: ListingAttribute(
                id=definition.id,
                name=definition.name,
                value=values.get(definition.id),
                required=definition.required,
            )
            for definition in definitions
        }
        return cls(category_id=category_id, attributes=attributes)

    def missing_required(self) -> list[str]:
        return [
            attr.id
            for attr in self.attributes.values()
            if attr.required and not (attr.value and attr.value.strip())
        ]

    def to_payload(self) -> list[dict[str, str]]:
        """Channel wire format; attributes without a value are omitted."""
        return [
            {"id": attr.id, "value_name": attr.value}
            for attr in self.attributes.values()
            if attr.value
        ]

    def values(self) -> dict[str, str]:
        return {attr.id: attr.value for attr in self.attributes.values() if attr.value}


class ChannelListing(BaseModel):
    """External marketplace offer whose quantity is derived from stock."""

    id: int | None = None
    channel_item_id: str
    title: str
    category_id: str | None = None
    price: float = 0.0
    currency: str = "ARS"
    status: str = ListingStatus.ACTIVE.value
    permalink: str | None = None
    thumbnail: str | None = None
    sync_enabled: bool = True
    last_sync_at: datetime | None = None
    sync_error: str | None = None
    sync_started_at: datetime | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    mappings: list[StockMapping] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def parsed_sync_error(self) -> SyncError | None:
        return SyncError.parse(self.sync_error)

    @property
    def enabled_mappings(self) -> list[StockMapping]:
        return [mapping for mapping in self.mappings if mapping.enabled]
