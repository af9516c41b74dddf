"""
Order reconciliation models.

Usage:
    from app.models import SynchronizedOrder, SyncResult
"""
from app.models.orders import (
    FieldChange,
    MatchConfidence,
    OrderListParams,
    OrderUpdate,
    SyncErrorEntry,
    SyncErrorKind,
    SyncOrderRequest,
    SyncResult,
    SyncStatus,
    SynchronizedOrder,
)

__all__ = [
    "FieldChange",
    "MatchConfidence",
    "OrderListParams",
    "OrderUpdate",
    "SyncErrorEntry",
    "SyncErrorKind",
    "SyncOrderRequest",
    "SyncResult",
    "SyncStatus",
    "SynchronizedOrder",
]
