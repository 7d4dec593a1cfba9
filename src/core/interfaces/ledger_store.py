"""Abstract interface for the product batch ledger."""

from abc import ABC, abstractmethod

from src.core.entities.product import (
    BatchReceipt,
    PricingPolicy,
    Product,
    ProductBatch,
)


class ILedgerStore(ABC):
    """
    Interface for products and their receipt batches.

    Every write appends batches and updates the owning product aggregate
    in one atomic unit.
    """

    @abstractmethod
    async def get_product(self, product_id: int) -> Product | None:
        """Get product by ID."""
        pass

    @abstractmethod
    async def get_product_by_lead(self, product_lead_id: int) -> Product | None:
        """Get product by its product lead."""
        pass

    @abstractmethod
    async def list_products(self, limit: int = 100, offset: int = 0) -> list[Product]:
        """List products with pagination."""
        pass

    @abstractmethod
    async def list_batches(
        self, product_id: int, limit: int = 100, offset: int = 0
    ) -> list[ProductBatch]:
        """Get batches of a product, oldest first."""
        pass

    @abstractmethod
    async def receive(
        self, receipt: BatchReceipt, pricing: PricingPolicy
    ) -> tuple[Product, ProductBatch]:
        """Append one batch and fold it into the product aggregate."""
        pass

    @abstractmethod
    async def stock_order(
        self,
        order_id: int,
        receipts: list[BatchReceipt],
        pricing: PricingPolicy,
    ) -> list[ProductBatch]:
        """
        Receive every batch of an order and set its stocked latch.

        All batches and the latch commit together or not at all.

        Raises:
            OrderNotFoundError: Order does not exist
            InvalidOrderStateError: Order is not received
            OrderAlreadyProcessedError: Order was stocked already
        """
        pass
