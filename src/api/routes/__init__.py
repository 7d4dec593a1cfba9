"""API route modules."""

from src.api.routes.channel import router as channel_router
from src.api.routes.health import router as health_router
from src.api.routes.inventory import router as inventory_router
from src.api.routes.listings import router as listings_router
from src.api.routes.orders import router as orders_router

__all__ = [
    "health_router",
    "orders_router",
    "inventory_router",
    "channel_router",
    "listings_router",
]
