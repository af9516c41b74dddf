"""Assembly of SynchronizedOrder values."""
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from app.models.orders import MatchConfidence, SynchronizedOrder, SyncStatus
from app.services.sync.utils.confidence_scorer import MatchResult

NO_MATCH_REASON = "no match"


def build_synchronized_order(
    source_order: Optional[Dict[str, Any]] = None,
    counterpart_order: Optional[Dict[str, Any]] = None,
    match_info: Optional[MatchResult] = None,
    reason: Optional[str] = None,
    fallback_id: Optional[str] = None,
) -> SynchronizedOrder:
    """
    Build the unified record for one (source, counterpart) pairing.

    The id comes from the counterpart (JumpSeller) order when it has one,
    then the source order, then ``fallback_id``, then a generated temporary
    id. Status is ``synced`` whenever both sides are present, whatever the
    confidence tier, and ``pending`` otherwise.

    Args:
        source_order: WeareCloud order, if any
        counterpart_order: JumpSeller order, if any
        match_info: Scorer output for this pair
        reason: Overrides match_info's reason (used for unmatched orders)
        fallback_id: Synthetic id a caller must supply when neither side exists

    Returns:
        SynchronizedOrder with empty sync_errors
    """
    assert source_order is not None or counterpart_order is not None or fallback_id, (
        "a synchronized order needs a source order, a counterpart order or a fallback id"
    )

    if match_info is not None:
        confidence = match_info.confidence
        match_reason = reason or match_info.reason
    else:
        confidence = MatchConfidence.LOW
        match_reason = reason or NO_MATCH_REASON

    both_sides = source_order is not None and counterpart_order is not None

    return SynchronizedOrder(
        id=derive_order_id(source_order, counterpart_order, fallback_id),
        source_order=source_order,
        counterpart_order=counterpart_order,
        match_confidence=confidence,
        match_reason=match_reason,
        sync_status=SyncStatus.SYNCED if both_sides else SyncStatus.PENDING,
        last_synced_at=datetime.now(timezone.utc),
    )


def derive_order_id(
    source_order: Optional[Dict[str, Any]],
    counterpart_order: Optional[Dict[str, Any]],
    fallback_id: Optional[str] = None,
) -> str:
    for order in (counterpart_order, source_order):
        if order:
            order_id = order.get("id")
            if order_id is not None and str(order_id).strip():
                return str(order_id).strip()

    return fallback_id or temporary_order_id()


def temporary_order_id() -> str:
    # Timestamp keeps ids sortable, the suffix keeps them distinct within a run
    return f"temp-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
