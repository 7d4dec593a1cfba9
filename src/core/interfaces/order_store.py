"""Abstract interface for purchase order storage."""

from abc import ABC, abstractmethod

from src.core.entities.order import (
    ImportCost,
    OrderItem,
    OrderStatus,
    ProductLead,
    PurchaseOrder,
)


class IOrderStore(ABC):
    """Interface for product leads, purchase orders, items and import costs."""

    @abstractmethod
    async def create_lead(self, lead: ProductLead) -> ProductLead:
        """Create a catalog product lead."""
        pass

    @abstractmethod
    async def get_lead(self, lead_id: int) -> ProductLead | None:
        """Get product lead by ID."""
        pass

    @abstractmethod
    async def create_order(self, order: PurchaseOrder) -> PurchaseOrder:
        """Create an order together with its items and import costs."""
        pass

    @abstractmethod
    async def get_order(self, order_id: int) -> PurchaseOrder | None:
        """Get order by ID with items and import costs loaded."""
        pass

    @abstractmethod
    async def list_orders(
        self,
        status: OrderStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PurchaseOrder]:
        """List orders (without items), newest first."""
        pass

    @abstractmethod
    async def add_item(self, order_id: int, item: OrderItem) -> OrderItem:
        """
        Append a line item to an order.

        Raises:
            OrderAlreadyProcessedError: Order is stocked.
            InvalidOrderStateError: Order has reached the received status.
        """
        pass

    @abstractmethod
    async def add_import_cost(self, order_id: int, cost: ImportCost) -> ImportCost:
        """Append an import charge; frozen under the same rules as add_item."""
        pass

    @abstractmethod
    async def update_status(
        self,
        order_id: int,
        new_status: OrderStatus,
        expected_status: OrderStatus,
    ) -> bool:
        """
        Move an unstocked order from expected_status to new_status.

        Returns:
            False if the order changed concurrently and nothing was written.
        """
        pass
