"""Order sync API routes.

Provides endpoints for:
- Reconciling all WeareCloud and JumpSeller orders
- Reconciling one order pair on demand
- Pushing field updates to JumpSeller
"""
from typing import AsyncIterator, Dict

from fastapi import APIRouter, Depends, Response

from app.core.logging import get_logger
from app.models.orders import OrderUpdate, SyncErrorKind, SyncOrderRequest, SyncResult
from app.services.sync.orchestrator import OrderSyncOrchestrator, summarize_orders

logger = get_logger(__name__)

router = APIRouter(prefix="/operations/orders", tags=["orders"])

_STATUS_BY_ERROR_KIND = {
    SyncErrorKind.TIMEOUT: 504,
    SyncErrorKind.UNAVAILABLE: 502,
    SyncErrorKind.CONFIGURATION: 503,
    SyncErrorKind.INVALID_RESPONSE: 502,
    SyncErrorKind.INVALID_REQUEST: 400,
}


async def get_orchestrator() -> AsyncIterator[OrderSyncOrchestrator]:
    """Dependency yielding a request-scoped orchestrator."""
    async with OrderSyncOrchestrator() as orchestrator:
        yield orchestrator


def status_for_result(result: SyncResult) -> int:
    """HTTP status for a SyncResult; 200 on success."""
    if result.success:
        return 200
    if result.error_kind == SyncErrorKind.REJECTED:
        if result.status_code and 400 <= result.status_code < 500:
            return result.status_code
        return 422
    return _STATUS_BY_ERROR_KIND.get(result.error_kind, 500)


@router.get("/sync")
async def sync_orders(
    orchestrator: OrderSyncOrchestrator = Depends(get_orchestrator)
) -> Dict:
    """
    Match every WeareCloud order against JumpSeller.

    Always answers 200: when one source is down its side is simply empty
    and the other side's orders come back as pending.
    """
    orders = await orchestrator.sync_orders()

    return {
        'summary': summarize_orders(orders),
        'orders': [order.model_dump(mode="json") for order in orders],
    }


@router.post("/sync/one", response_model=SyncResult)
async def sync_order(
    request: SyncOrderRequest,
    response: Response,
    orchestrator: OrderSyncOrchestrator = Depends(get_orchestrator)
) -> SyncResult:
    """
    Reconcile a single order.

    Either id may be omitted, but not both. Failures keep the SyncResult
    body and set an HTTP status matching the failure kind.
    """
    result = await orchestrator.sync_order(
        source_id=request.source_id,
        counterpart_id=request.counterpart_id,
        force=request.force,
    )
    response.status_code = status_for_result(result)
    return result


@router.put("/{order_id}", response_model=SyncResult)
async def update_counterpart_order(
    order_id: int,
    updates: OrderUpdate,
    response: Response,
    orchestrator: OrderSyncOrchestrator = Depends(get_orchestrator)
) -> SyncResult:
    """
    Update a JumpSeller order.

    Timeouts answer 504 so the client can retry; validation failures from
    JumpSeller keep JumpSeller's 4xx status.
    """
    result = await orchestrator.update_counterpart_order(order_id, updates)
    if not result.success:
        logger.warning(f"Update of JumpSeller order {order_id} failed: {result.error}")
    response.status_code = status_for_result(result)
    return result
