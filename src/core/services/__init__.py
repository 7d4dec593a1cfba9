"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from src.core.services.channel_synchronizer import (
    BulkSyncResult,
    ChannelSynchronizer,
    ListingSyncResult,
    SyncStatus,
)
from src.core.services.cost_allocator import (
    ItemCostAllocation,
    OrderCostCalculation,
    ProrationMethod,
    allocate_import_costs,
)
from src.core.services.credential_manager import ConnectionStatus, CredentialManager
from src.core.services.stock_allocation import StockAllocation, calculate_available

__all__ = [
    # Cost Allocator
    "allocate_import_costs",
    "ProrationMethod",
    "ItemCostAllocation",
    "OrderCostCalculation",
    # Stock Allocation
    "calculate_available",
    "StockAllocation",
    # Credential Manager
    "CredentialManager",
    "ConnectionStatus",
    # Channel Synchronizer
    "ChannelSynchronizer",
    "ListingSyncResult",
    "BulkSyncResult",
    "SyncStatus",
]
