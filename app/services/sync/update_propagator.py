"""Field-level updates pushed to JumpSeller.

Each update is bounded by a total deadline (``UPDATE_TIMEOUT_SECONDS``,
30s by default). The result distinguishes:
- timeout: the deadline passed, the caller may retry
- rejected: JumpSeller refused the update (4xx), show the message to the user
- unavailable: JumpSeller could not be reached or failed (5xx)

Updates are never retried here. No pre-read is made, so ``old_value`` in
the reported changes is always None.
"""
import asyncio
from typing import Any, Dict, Mapping, Optional, Union

from app.core.config import settings
from app.core.logging import get_logger
from app.models.orders import FieldChange, OrderUpdate, SyncErrorKind, SyncResult
from app.services.sync.adapters.jumpseller_adapter import JumpSellerAdapter
from app.services.sync.errors import OrderSourceError, OrderSourceTimeoutError
from app.services.sync.utils.order_builder import build_synchronized_order

logger = get_logger(__name__)


class UpdatePropagator:
    """Applies partial updates to JumpSeller orders with a bounded wait."""

    def __init__(self, adapter: JumpSellerAdapter, timeout: Optional[float] = None):
        """
        Args:
            adapter: JumpSeller adapter used for the PUT
            timeout: Total deadline in seconds (defaults to settings)
        """
        self.adapter = adapter
        self.timeout = timeout if timeout is not None else settings.UPDATE_TIMEOUT_SECONDS

    async def apply_update(
        self,
        order_id: int,
        fields: Union[OrderUpdate, Mapping[str, Any]],
    ) -> SyncResult:
        """
        Update a JumpSeller order.

        Args:
            order_id: JumpSeller order id
            fields: OrderUpdate or a plain dict of the fields to change

        Returns:
            SyncResult; never raises for remote failures
        """
        if isinstance(fields, OrderUpdate):
            payload: Dict[str, Any] = fields.to_fields()
        else:
            payload = {k: v for k, v in dict(fields).items() if v is not None}

        if not payload:
            return SyncResult(
                success=False,
                error="No fields to update",
                error_kind=SyncErrorKind.INVALID_REQUEST,
            )

        try:
            updated = await asyncio.wait_for(
                self.adapter.update_order(order_id, payload, timeout=self.timeout),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            error = OrderSourceTimeoutError(
                f"Timeout: JumpSeller update for order {order_id} took more than {self.timeout:g} seconds",
                self.adapter.source,
            )
            return self._failure(order_id, error)
        except OrderSourceError as e:
            return self._failure(order_id, e)

        logger.info(f"Updated JumpSeller order {order_id}: {', '.join(payload)}")

        return SyncResult(
            success=True,
            order=build_synchronized_order(None, updated),
            changes=[
                FieldChange(field=name, old_value=None, new_value=value)
                for name, value in payload.items()
            ],
        )

    def _failure(self, order_id: int, error: OrderSourceError) -> SyncResult:
        log = logger.warning if error.kind == SyncErrorKind.TIMEOUT else logger.error
        log(
            f"JumpSeller update for order {order_id} failed ({error.kind.value}): {error}",
            extra={"order_id": order_id, "status_code": error.status_code},
        )
        return SyncResult(
            success=False,
            error=str(error),
            error_kind=error.kind,
            status_code=error.status_code,
        )
