"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection

Use cases are the only entry point for API handlers.
"""

from src.application.services import (
    get_channel_synchronizer,
    get_credential_manager,
    get_pricing_policy,
    get_proration_method,
    reset_services,
)
from src.application.use_cases import (
    ChannelConnectionUseCase,
    ConnectListingUseCase,
    CreateOrderUseCase,
    FinalizeOrderUseCase,
    ImportListingUseCase,
    PublishListingUseCase,
    ReceiveBatchUseCase,
    SyncAllListingsUseCase,
    SyncListingStockUseCase,
)

__all__ = [
    # Use Cases
    "CreateOrderUseCase",
    "FinalizeOrderUseCase",
    "ReceiveBatchUseCase",
    "ChannelConnectionUseCase",
    "ImportListingUseCase",
    "ConnectListingUseCase",
    "PublishListingUseCase",
    "SyncListingStockUseCase",
    "SyncAllListingsUseCase",
    # Service factories
    "get_pricing_policy",
    "get_proration_method",
    "get_credential_manager",
    "get_channel_synchronizer",
    "reset_services",
]
