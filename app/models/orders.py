"""Order reconciliation value objects.

These models are created fresh on every reconciliation run and live only for
the duration of a request; nothing here is persisted.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class MatchConfidence(str, Enum):
    """How likely two records describe the same real-world order."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SyncStatus(str, Enum):
    """Synchronization state of a unified order."""
    SYNCED = "synced"
    PENDING = "pending"
    CONFLICT = "conflict"
    ERROR = "error"


class SyncErrorKind(str, Enum):
    """Failure classification surfaced to callers of the single-order operations."""
    TIMEOUT = "timeout"
    REJECTED = "rejected"
    UNAVAILABLE = "unavailable"
    CONFIGURATION = "configuration"
    INVALID_RESPONSE = "invalid_response"
    INVALID_REQUEST = "invalid_request"


class SyncErrorEntry(BaseModel):
    """A propagation failure recorded against a synchronized order."""
    timestamp: datetime
    message: str
    source: str


class FieldChange(BaseModel):
    """A single field written to the counterpart platform."""
    field: str
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None


class SynchronizedOrder(BaseModel):
    """Unified record pairing at most one source order with at most one counterpart order."""
    id: str = Field(..., min_length=1)
    source_order: Optional[Dict[str, Any]] = Field(None, description="WeareCloud order, common shape")
    counterpart_order: Optional[Dict[str, Any]] = Field(None, description="JumpSeller order as returned by the API")
    match_confidence: MatchConfidence = MatchConfidence.LOW
    match_reason: Optional[str] = None
    sync_status: SyncStatus
    last_synced_at: datetime
    sync_errors: List[SyncErrorEntry] = Field(default_factory=list)

    def add_sync_error(self, message: str, source: str) -> SyncErrorEntry:
        """Append a propagation failure. Entries are never removed."""
        entry = SyncErrorEntry(
            timestamp=datetime.now(timezone.utc),
            message=message,
            source=source,
        )
        self.sync_errors.append(entry)
        return entry


class SyncResult(BaseModel):
    """Outcome of a single-order sync or update."""
    success: bool
    order: Optional[SynchronizedOrder] = None
    changes: List[FieldChange] = Field(default_factory=list)
    error: Optional[str] = None
    error_kind: Optional[SyncErrorKind] = None
    status_code: Optional[int] = Field(None, description="HTTP status reported by the order source")


class OrderUpdate(BaseModel):
    """Partial update accepted by the JumpSeller ``PUT /orders/{id}`` endpoint."""
    status: Optional[str] = None
    customer_note: Optional[str] = None
    internal_note: Optional[str] = None
    shipping_method: Optional[str] = None
    shipping_method_title: Optional[str] = None
    line_items: Optional[List[Dict[str, Any]]] = None
    meta_data: Optional[List[Dict[str, Any]]] = None

    def to_fields(self) -> Dict[str, Any]:
        """Only the fields the caller actually provided."""
        return self.model_dump(exclude_none=True)


class OrderListParams(BaseModel):
    """Query parameters for listing JumpSeller orders."""
    page: Optional[int] = Field(None, ge=1)
    per_page: Optional[int] = Field(None, ge=1, le=200)
    status: Optional[str] = None
    customer_id: Optional[int] = None
    created_at_min: Optional[str] = None
    created_at_max: Optional[str] = None
    updated_at_min: Optional[str] = None
    updated_at_max: Optional[str] = None

    def to_query(self) -> Dict[str, str]:
        return {k: str(v) for k, v in self.model_dump(exclude_none=True).items()}


class SyncOrderRequest(BaseModel):
    """Request body for reconciling a single order pair on demand."""
    source_id: Optional[str] = Field(None, description="WeareCloud order id")
    counterpart_id: Optional[int] = Field(None, description="JumpSeller order id")
    force: bool = False

    @model_validator(mode="after")
    def _require_an_id(self):
        if self.source_id is None and self.counterpart_id is None:
            raise ValueError("source_id or counterpart_id is required")
        return self
