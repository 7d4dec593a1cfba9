"""Inventory endpoints: products, batches and manual receipts."""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_ledger, get_receive_batch_use_case
from src.application.dto.converters import batch_to_response, product_to_response
from src.application.dto.requests import ReceiveBatchRequest
from src.application.dto.responses import (
    ErrorResponse,
    ProductBatchResponse,
    ProductListResponse,
    ProductResponse,
    ReceiveBatchResponse,
)
from src.application.use_cases import ReceiveBatchUseCase
from src.core.exceptions import ProductNotFoundError
from src.core.interfaces import ILedgerStore

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.post(
    "/receive",
    response_model=ReceiveBatchResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def receive_batch(
    request: ReceiveBatchRequest,
    use_case: ReceiveBatchUseCase = Depends(get_receive_batch_use_case),
) -> ReceiveBatchResponse:
    """Receive a batch with weighted-average cost recalculation."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("/products", response_model=ProductListResponse)
async def list_products(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: ILedgerStore = Depends(get_ledger),
) -> ProductListResponse:
    """Current stock, average cost and price of every product."""
    products = await store.list_products(limit=limit, offset=offset)
    return ProductListResponse(
        products=[product_to_response(product) for product in products],
        total=len(products),
    )


@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(
    product_id: int,
    store: ILedgerStore = Depends(get_ledger),
) -> ProductResponse:
    product = await store.get_product(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product_to_response(product)


@router.get(
    "/products/{product_id}/batches",
    response_model=list[ProductBatchResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_batches(
    product_id: int,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: ILedgerStore = Depends(get_ledger),
) -> list[ProductBatchResponse]:
    """Receipt history of a product, oldest first."""
    if await store.get_product(product_id) is None:
        raise ProductNotFoundError(product_id)
    batches = await store.list_batches(product_id, limit=limit, offset=offset)
    return [batch_to_response(batch) for batch in batches]
