"""Purchase order endpoints: leads, orders, landed cost and finalization."""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    get_add_import_cost_use_case,
    get_add_item_use_case,
    get_cost_breakdown_use_case,
    get_create_lead_use_case,
    get_create_order_use_case,
    get_finalize_order_use_case,
    get_orders,
    get_update_status_use_case,
)
from src.application.dto.converters import order_to_response
from src.application.dto.requests import (
    CreateOrderRequest,
    CreateProductLeadRequest,
    ImportCostRequest,
    OrderItemRequest,
    UpdateOrderStatusRequest,
)
from src.application.dto.responses import (
    CostBreakdownResponse,
    ErrorResponse,
    FinalizeOrderResponse,
    OrderListResponse,
    OrderResponse,
    ProductLeadResponse,
)
from src.application.use_cases import (
    AddImportCostUseCase,
    AddOrderItemUseCase,
    CreateOrderUseCase,
    CreateProductLeadUseCase,
    FinalizeOrderUseCase,
    GetCostBreakdownUseCase,
    UpdateOrderStatusUseCase,
)
from src.core.entities.order import OrderStatus
from src.core.exceptions import OrderNotFoundError
from src.core.interfaces import IOrderStore

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post(
    "/leads",
    response_model=ProductLeadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_lead(
    request: CreateProductLeadRequest,
    use_case: CreateProductLeadUseCase = Depends(get_create_lead_use_case),
) -> ProductLeadResponse:
    """Register a sourced product in the catalog."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_order(
    request: CreateOrderRequest,
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case),
) -> OrderResponse:
    """Create a draft purchase order."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=OrderListResponse)
async def list_orders(
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: IOrderStore = Depends(get_orders),
) -> OrderListResponse:
    """List purchase orders, newest first."""
    orders = await store.list_orders(status=status_filter, limit=limit, offset=offset)
    return OrderListResponse(
        orders=[order_to_response(order) for order in orders],
        total=len(orders),
    )


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_order(
    order_id: int,
    store: IOrderStore = Depends(get_orders),
) -> OrderResponse:
    order = await store.get_order(order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    return order_to_response(order)


@router.post(
    "/{order_id}/items",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def add_item(
    order_id: int,
    request: OrderItemRequest,
    use_case: AddOrderItemUseCase = Depends(get_add_item_use_case),
) -> OrderResponse:
    """Append a line item to an order that is not yet in stock."""
    result = await use_case.execute(order_id, request)
    return use_case.to_response(result)


@router.post(
    "/{order_id}/import-costs",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def add_import_cost(
    order_id: int,
    request: ImportCostRequest,
    use_case: AddImportCostUseCase = Depends(get_add_import_cost_use_case),
) -> OrderResponse:
    """Append an import charge to an order that is not yet in stock."""
    result = await use_case.execute(order_id, request)
    return use_case.to_response(result)


@router.patch(
    "/{order_id}/status",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_status(
    order_id: int,
    request: UpdateOrderStatusRequest,
    use_case: UpdateOrderStatusUseCase = Depends(get_update_status_use_case),
) -> OrderResponse:
    """Advance the order one step or cancel it."""
    result = await use_case.execute(order_id, request)
    return use_case.to_response(result)


@router.get(
    "/{order_id}/cost-breakdown",
    response_model=CostBreakdownResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def cost_breakdown(
    order_id: int,
    use_case: GetCostBreakdownUseCase = Depends(get_cost_breakdown_use_case),
) -> CostBreakdownResponse:
    """Preview landed cost per item without touching inventory."""
    result = await use_case.execute(order_id)
    return use_case.to_response(result)


@router.post(
    "/{order_id}/finalize",
    response_model=FinalizeOrderResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def finalize_order(
    order_id: int,
    use_case: FinalizeOrderUseCase = Depends(get_finalize_order_use_case),
) -> FinalizeOrderResponse:
    """Move a received order into stock. Succeeds at most once per order."""
    result = await use_case.execute(order_id)
    return use_case.to_response(result)
