"""
Domain exceptions for the landed stock engine.

Every error raised across a layer boundary is one of these; raw I/O errors
are translated by the storage and channel adapters before they escape.
"""

from typing import Any


class StockEngineError(Exception):
    """Base exception for all engine errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(StockEngineError):
    """Input validation failed. Raised before any write."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


# Not Found Exceptions
class NotFoundError(StockEngineError):
    """Base exception for missing aggregates."""

    pass


class OrderNotFoundError(NotFoundError):
    """Purchase order not found."""

    def __init__(self, order_id: int):
        super().__init__(
            f"Purchase order not found: {order_id}",
            code="ORDER_NOT_FOUND",
            details={"order_id": order_id},
        )


class ProductNotFoundError(NotFoundError):
    """Inventory product not found."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id},
        )


class ProductLeadNotFoundError(NotFoundError):
    """Catalog product lead not found."""

    def __init__(self, product_lead_id: int):
        super().__init__(
            f"Product lead not found: {product_lead_id}",
            code="PRODUCT_LEAD_NOT_FOUND",
            details={"product_lead_id": product_lead_id},
        )


class ListingNotFoundError(NotFoundError):
    """Channel listing not found."""

    def __init__(self, listing_id: int):
        super().__init__(
            f"Channel listing not found: {listing_id}",
            code="LISTING_NOT_FOUND",
            details={"listing_id": listing_id},
        )


# State Exceptions
class StateError(StockEngineError):
    """Operation is not allowed in the aggregate's current state."""

    pass


class InvalidOrderStateError(StateError):
    """Order is not in the status required by the operation."""

    def __init__(self, order_id: int, status: str, required: str):
        super().__init__(
            f"Order {order_id} is '{status}', must be '{required}'",
            code="INVALID_ORDER_STATE",
            details={"order_id": order_id, "status": status, "required": required},
        )


class OrderAlreadyProcessedError(StateError):
    """Order was already moved into stock."""

    def __init__(self, order_id: int):
        super().__init__(
            f"Order {order_id} was already processed into stock",
            code="ORDER_ALREADY_PROCESSED",
            details={"order_id": order_id},
        )


class InvalidStatusTransitionError(StateError):
    """Requested order status change is not a permitted transition."""

    def __init__(self, order_id: int, current: str, requested: str):
        super().__init__(
            f"Order {order_id} cannot move from '{current}' to '{requested}'",
            code="INVALID_STATUS_TRANSITION",
            details={"order_id": order_id, "current": current, "requested": requested},
        )


class ListingAlreadyImportedError(StateError):
    """Channel item is already tracked as a listing."""

    def __init__(self, channel_item_id: str, listing_id: int):
        super().__init__(
            f"Channel item {channel_item_id} is already imported",
            code="LISTING_ALREADY_IMPORTED",
            details={"channel_item_id": channel_item_id, "listing_id": listing_id},
        )


# Channel Exceptions
class ChannelError(StockEngineError):
    """Base exception for marketplace channel calls."""

    pass


class RecoverableChannelError(ChannelError):
    """Channel refused the change for now; retrying later may succeed."""

    def __init__(self, channel_item_id: str, reason: str):
        super().__init__(
            reason,
            code="CHANNEL_RECOVERABLE",
            details={"channel_item_id": channel_item_id},
        )


class HardChannelError(ChannelError):
    """Channel call failed and needs investigation."""

    def __init__(
        self,
        operation: str,
        reason: str,
        status_code: int | None = None,
    ):
        super().__init__(
            f"Channel {operation} failed: {reason}",
            code="CHANNEL_ERROR",
            details={"operation": operation, "status_code": status_code},
        )
        self.status_code = status_code


class ChannelTimeoutError(HardChannelError):
    """Channel call exceeded the configured timeout."""

    def __init__(self, operation: str, timeout: float):
        super().__init__(operation, f"timed out after {timeout} seconds")
        self.code = "CHANNEL_TIMEOUT"
        self.details["timeout"] = timeout


# Credential Exceptions
class CredentialError(StockEngineError):
    """Base exception for channel credential problems."""

    pass


class NoCredentialError(CredentialError):
    """No usable credential: the integration is not connected."""

    def __init__(self, identity: str = "default"):
        super().__init__(
            "Marketplace account is not connected",
            code="NOT_CONNECTED",
            details={"identity": identity},
        )


# Storage Exceptions
class StorageError(StockEngineError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(StockEngineError):
    """Configuration error."""

    pass
