"""Entity to response DTO conversion shared by use cases."""

from src.application.dto.responses import (
    ActionStatus,
    ImportCostResponse,
    ListingResponse,
    ListingSyncResponse,
    OrderItemResponse,
    OrderResponse,
    ProductBatchResponse,
    ProductResponse,
    StockMappingResponse,
)
from src.core.entities.channel import ChannelListing
from src.core.entities.order import PurchaseOrder
from src.core.entities.product import Product, ProductBatch
from src.core.services.channel_synchronizer import ListingSyncResult, SyncStatus

SYNC_ACTION_STATUS: dict[SyncStatus, ActionStatus] = {
    SyncStatus.SYNCED: "success",
    SyncStatus.NOTHING_TO_RETRY: "success",
    SyncStatus.WARNING: "warning",
    SyncStatus.UNMAPPED: "warning",
    SyncStatus.IN_PROGRESS: "warning",
    SyncStatus.FAILED: "failure",
}


def order_to_response(order: PurchaseOrder) -> OrderResponse:
    return OrderResponse(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        status=order.status.value,
        stocked=order.stocked,
        stocked_at=order.stocked_at,
        order_date=order.order_date,
        items=[
            OrderItemResponse(
                id=item.id,  # type: ignore[arg-type]
                product_lead_id=item.product_lead_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price_usd=item.unit_price_usd,
                discount_percent=item.discount_percent,
                net_unit_price_usd=round(item.net_unit_price_usd, 4),
            )
            for item in order.items
        ],
        import_costs=[
            ImportCostResponse(
                id=cost.id,  # type: ignore[arg-type]
                category=cost.category.value,
                amount_usd=cost.amount_usd,
                description=cost.description,
            )
            for cost in order.import_costs
        ],
        total_import_costs_usd=round(order.total_import_costs_usd, 2),
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def product_to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,  # type: ignore[arg-type]
        product_lead_id=product.product_lead_id,
        name=product.name,
        stock=product.stock,
        average_unit_cost_usd=round(product.average_unit_cost_usd, 4),
        markup_percentage=product.markup_percentage,
        final_unit_cost_ars=product.final_unit_cost_ars,
        final_price_ars=product.final_price_ars,
        inventory_value_usd=round(product.inventory_value_usd, 2),
        updated_at=product.updated_at,
    )


def batch_to_response(batch: ProductBatch) -> ProductBatchResponse:
    return ProductBatchResponse(
        id=batch.id,  # type: ignore[arg-type]
        product_id=batch.product_id,
        order_id=batch.order_id,
        batch_number=batch.batch_number,
        quantity=batch.quantity,
        unit_cost_usd=batch.unit_cost_usd,
        total_cost_usd=batch.total_cost_usd,
        notes=batch.notes,
        created_at=batch.created_at,
    )


def listing_to_response(listing: ChannelListing) -> ListingResponse:
    parsed = listing.parsed_sync_error
    return ListingResponse(
        id=listing.id,  # type: ignore[arg-type]
        channel_item_id=listing.channel_item_id,
        title=listing.title,
        category_id=listing.category_id,
        price=listing.price,
        currency=listing.currency,
        status=listing.status,
        permalink=listing.permalink,
        sync_enabled=listing.sync_enabled,
        last_sync_at=listing.last_sync_at,
        sync_error=listing.sync_error,
        sync_error_kind=parsed.kind.value if parsed else None,
        sync_error_message=parsed.message if parsed else None,
        attributes=listing.attributes,
        mappings=[
            StockMappingResponse(
                id=mapping.id,
                product_id=mapping.product_id,
                product_name=mapping.product_name,
                product_stock=mapping.product_stock,
                quantity_per_sale=mapping.quantity_per_sale,
                priority=mapping.priority,
                enabled=mapping.enabled,
            )
            for mapping in listing.mappings
        ],
    )


def sync_result_to_response(result: ListingSyncResult) -> ListingSyncResponse:
    return ListingSyncResponse(
        status=SYNC_ACTION_STATUS[result.status],
        message=result.message or result.status.value,
        listing_id=result.listing_id,
        sync_status=result.status.value,
        available=result.available,
    )
