"""Sync orchestrator for reconciling WeareCloud and JumpSeller orders.

This orchestrator coordinates:
- Concurrent order fetching from both sources
- Matching via OrderMatcher
- On-demand reconciliation of a single order pair
- Field updates pushed to JumpSeller via UpdatePropagator

Matching is computed on demand and never stored: every call fetches fresh
data. A source that is down or slow yields an empty list for that side
only, so the other side is still returned (as pending orders).
"""
import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from app.core.config import settings
from app.core.logging import get_logger
from app.models.orders import (
    MatchConfidence,
    OrderUpdate,
    SyncErrorKind,
    SyncResult,
    SyncStatus,
    SynchronizedOrder,
)
from app.services.sync.adapters.jumpseller_adapter import JumpSellerAdapter
from app.services.sync.adapters.wearecloud_adapter import WeareCloudAdapter
from app.services.sync.errors import OrderSourceError
from app.services.sync.matchers.order_matcher import (
    OrderMatcher,
    find_best_match,
    find_best_source_match,
)
from app.services.sync.update_propagator import UpdatePropagator
from app.services.sync.utils.confidence_scorer import MatchResult, match_orders
from app.services.sync.utils.order_builder import build_synchronized_order
from app.services.sync.utils.order_normalizer import normalize_order

logger = get_logger(__name__)


class OrderSyncOrchestrator:
    """
    Entry point for order reconciliation.

    Exposes the three operations the rest of the application uses:
    sync_orders, sync_order and update_counterpart_order.
    """

    def __init__(
        self,
        source_adapter: Optional[WeareCloudAdapter] = None,
        counterpart_adapter: Optional[JumpSellerAdapter] = None,
        matcher: Optional[OrderMatcher] = None,
        propagator: Optional[UpdatePropagator] = None,
        page_size: Optional[int] = None,
        single_page_size: Optional[int] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            source_adapter: WeareCloud adapter (created from settings if omitted)
            counterpart_adapter: JumpSeller adapter (created from settings if omitted)
            matcher: OrderMatcher (exclusivity from settings if omitted)
            propagator: UpdatePropagator wrapping the JumpSeller adapter
            page_size: JumpSeller page size for full syncs
            single_page_size: Candidate page size for single-order syncs
        """
        self.source_adapter = source_adapter or WeareCloudAdapter()
        self.counterpart_adapter = counterpart_adapter or JumpSellerAdapter()
        self.matcher = matcher or OrderMatcher(exclusive=settings.SYNC_EXCLUSIVE_MATCHING)
        self.propagator = propagator or UpdatePropagator(self.counterpart_adapter)
        self.page_size = page_size or settings.SYNC_PAGE_SIZE
        self.single_page_size = single_page_size or settings.SINGLE_SYNC_PAGE_SIZE

    async def __aenter__(self) -> "OrderSyncOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def sync_orders(self) -> List[SynchronizedOrder]:
        """
        Reconcile every order currently visible in both sources.

        Both fetches run concurrently. A failure on either side degrades to
        an empty list for that side and is logged, never raised.

        Returns:
            Matched and unmatched WeareCloud orders, then unmatched JumpSeller orders
        """
        start_time = datetime.now(timezone.utc)
        logger.info("Starting order sync")

        source_result, counterpart_result = await asyncio.gather(
            self.source_adapter.fetch_orders(),
            self.counterpart_adapter.fetch_orders(per_page=self.page_size),
            return_exceptions=True,
        )
        source_orders = self._degrade(source_result, "WeareCloud")
        counterpart_orders = self._degrade(counterpart_result, "JumpSeller")

        logger.info(
            f"Orders fetched: WeareCloud={len(source_orders)}, JumpSeller={len(counterpart_orders)}"
        )

        synced = self.matcher.reconcile(source_orders, counterpart_orders)

        duration_ms = int((datetime.now(timezone.utc) - start_time).total_seconds() * 1000)
        logger.info(f"Order sync complete: {len(synced)} orders ({duration_ms}ms)")
        return synced

    async def sync_order(
        self,
        source_id: Optional[str] = None,
        counterpart_id: Optional[int] = None,
        force: bool = False
    ) -> SyncResult:
        """
        Reconcile a single order on demand.

        With both ids, both orders are fetched and scored against each
        other; the pair is reported whatever the confidence tier. With one
        id, that order is fetched and the best medium-or-better match is
        searched for in a bounded page of the other source.

        Args:
            source_id: WeareCloud order id
            counterpart_id: JumpSeller order id
            force: Accepted from callers; every call already fetches fresh data

        Returns:
            SyncResult; fetch failures come back as success=False, never raised
        """
        if source_id is None and counterpart_id is None:
            return SyncResult(
                success=False,
                error="source_id or counterpart_id is required",
                error_kind=SyncErrorKind.INVALID_REQUEST,
            )

        logger.info(
            f"Syncing single order (source_id={source_id}, counterpart_id={counterpart_id}, force={force})"
        )

        source_order: Optional[Dict[str, Any]] = None
        counterpart_order: Optional[Dict[str, Any]] = None

        try:
            if counterpart_id is not None:
                counterpart_order = await self.counterpart_adapter.fetch_order(counterpart_id)
            if source_id is not None:
                source_order = await self.source_adapter.fetch_order(source_id)
        except OrderSourceError as e:
            logger.error(f"Single order sync failed: {e}")
            return SyncResult(
                success=False,
                order=self._partial_order(source_order, counterpart_order, e),
                error=str(e),
                error_kind=e.kind,
                status_code=e.status_code,
            )
        except Exception as e:
            logger.exception(f"Unexpected error syncing order: {e}")
            return SyncResult(success=False, error=str(e))

        match_info: Optional[MatchResult] = None
        if source_order is not None and counterpart_order is not None:
            match_info = match_orders(source_order, counterpart_order)
        elif source_order is not None:
            counterpart_order, match_info = await self._search_counterpart(source_order)
        else:
            source_order, match_info = await self._search_source(counterpart_order)

        return SyncResult(
            success=True,
            order=build_synchronized_order(source_order, counterpart_order, match_info),
        )

    async def update_counterpart_order(
        self,
        order_id: int,
        updates: Union[OrderUpdate, Mapping[str, Any]]
    ) -> SyncResult:
        """
        Push a field update to JumpSeller.

        Args:
            order_id: JumpSeller order id
            updates: Fields to change

        Returns:
            SyncResult with the changes applied, or the classified failure
        """
        return await self.propagator.apply_update(order_id, updates)

    async def close(self):
        """Close both adapters' HTTP clients."""
        await asyncio.gather(
            self.source_adapter.close(),
            self.counterpart_adapter.close(),
        )

    async def _search_counterpart(self, source_order: Dict[str, Any]):
        candidates = await self.counterpart_adapter.fetch_orders(per_page=self.single_page_size)
        best = find_best_match(
            normalize_order(source_order),
            [normalize_order(order) for order in candidates],
        )
        if best is None or best[1].confidence == MatchConfidence.LOW:
            return None, None
        return candidates[best[0]], best[1]

    async def _search_source(self, counterpart_order: Dict[str, Any]):
        candidates = await self.source_adapter.fetch_orders(per_page=self.single_page_size)
        best = find_best_source_match(
            normalize_order(counterpart_order),
            [normalize_order(order) for order in candidates],
        )
        if best is None or best[1].confidence == MatchConfidence.LOW:
            return None, None
        return candidates[best[0]], best[1]

    @staticmethod
    def _partial_order(
        source_order: Optional[Dict[str, Any]],
        counterpart_order: Optional[Dict[str, Any]],
        error: OrderSourceError
    ) -> Optional[SynchronizedOrder]:
        if source_order is None and counterpart_order is None:
            return None
        order = build_synchronized_order(source_order, counterpart_order)
        order.add_sync_error(str(error), error.source)
        return order

    @staticmethod
    def _degrade(result: Any, source_name: str) -> List[Dict[str, Any]]:
        if isinstance(result, Exception):
            logger.error(f"Error fetching {source_name} orders: {result}")
            return []
        if isinstance(result, BaseException):
            raise result
        return list(result or [])


def summarize_orders(orders: List[SynchronizedOrder]) -> Dict[str, Any]:
    """
    Count synchronized orders by pairing and confidence.

    Returns:
        Dict with total, matched, source_only, counterpart_only and by_confidence
    """
    summary = {
        'total': len(orders),
        'matched': 0,
        'source_only': 0,
        'counterpart_only': 0,
        'by_confidence': {confidence.value: 0 for confidence in MatchConfidence},
    }

    for order in orders:
        if order.sync_status == SyncStatus.SYNCED:
            summary['matched'] += 1
        elif order.source_order is not None:
            summary['source_only'] += 1
        else:
            summary['counterpart_only'] += 1
        summary['by_confidence'][order.match_confidence.value] += 1

    return summary
