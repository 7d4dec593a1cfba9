"""Receive Batch Use Case: manual receipt with weighted-average recalculation."""

from dataclasses import dataclass

from src.application.dto.converters import batch_to_response, product_to_response
from src.application.dto.requests import ReceiveBatchRequest
from src.application.dto.responses import ReceiveBatchResponse
from src.config import get_logger
from src.core.entities.product import BatchReceipt, PricingPolicy, Product, ProductBatch
from src.core.exceptions import ProductLeadNotFoundError
from src.core.interfaces.ledger_store import ILedgerStore
from src.core.interfaces.order_store import IOrderStore

logger = get_logger(__name__)


@dataclass
class ReceiveBatchResult:
    """Result of receiving a batch."""

    product: Product
    batch: ProductBatch
    created: bool = False  # True if this receipt created the product


class ReceiveBatchUseCase:
    """Receive a batch of a product lead into stock outside of an order."""

    def __init__(
        self,
        ledger_store: ILedgerStore | None = None,
        order_store: IOrderStore | None = None,
        pricing: PricingPolicy | None = None,
    ):
        self._ledger_store = ledger_store
        self._order_store = order_store
        self._pricing = pricing

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from src.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def _get_order_store(self) -> IOrderStore:
        if self._order_store is None:
            from src.infrastructure.storage.sqlite import get_order_store

            self._order_store = await get_order_store()
        return self._order_store

    def _get_pricing(self) -> PricingPolicy:
        if self._pricing is None:
            from src.application.services import get_pricing_policy

            self._pricing = get_pricing_policy()
        return self._pricing

    async def execute(self, request: ReceiveBatchRequest) -> ReceiveBatchResult:
        """Execute receive batch use case."""
        logger.info(
            "receive_batch_started",
            product_lead_id=request.product_lead_id,
            quantity=request.quantity,
        )

        order_store = await self._get_order_store()
        lead = await order_store.get_lead(request.product_lead_id)
        if lead is None:
            raise ProductLeadNotFoundError(request.product_lead_id)

        ledger = await self._get_ledger_store()
        existing = await ledger.get_product_by_lead(request.product_lead_id)

        product, batch = await ledger.receive(
            BatchReceipt(
                product_lead_id=lead.id,  # type: ignore[arg-type]
                product_name=lead.name,
                quantity=request.quantity,
                unit_cost_usd=request.unit_cost_usd,
                batch_number=request.batch_number,
                notes=request.notes,
            ),
            self._get_pricing(),
        )

        logger.info(
            "receive_batch_complete",
            product_id=product.id,
            stock=product.stock,
            average_unit_cost_usd=round(product.average_unit_cost_usd, 4),
        )
        return ReceiveBatchResult(product=product, batch=batch, created=existing is None)

    def to_response(self, result: ReceiveBatchResult) -> ReceiveBatchResponse:
        """Convert result to API response."""
        return ReceiveBatchResponse(
            status="success",
            message=(
                f"Received {result.batch.quantity} units; stock is now "
                f"{result.product.stock}"
            ),
            product=product_to_response(result.product),
            batch=batch_to_response(result.batch),
        )
