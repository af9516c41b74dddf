"""Order matching between WeareCloud and JumpSeller.

Matching strategy (greedy, two passes):
1. For every WeareCloud order, score it against the JumpSeller orders and
   keep the candidate with the highest confidence rank (first seen wins
   ties). A medium or high best match pairs the two orders and marks the
   JumpSeller order as consumed; otherwise the WeareCloud order is emitted
   alone.
2. Every JumpSeller order not consumed in pass 1 is emitted alone.

Pass 1 output keeps the WeareCloud input order, pass 2 output keeps the
JumpSeller input order. Pairwise scoring is O(n*m), fine for the hundred
or so orders a sync handles.

The consumed set is local to each call, so one OrderMatcher can serve
concurrent requests.
"""
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from app.core.logging import get_logger
from app.models.orders import MatchConfidence, SynchronizedOrder
from app.services.sync.utils.confidence_scorer import MatchResult, score_orders
from app.services.sync.utils.order_builder import build_synchronized_order
from app.services.sync.utils.order_normalizer import NormalizedOrder, normalize_order

logger = get_logger(__name__)

NO_COUNTERPART_MATCH = "no match found on counterpart side"
NO_SOURCE_MATCH = "no match found on source side"

Order = Dict[str, Any]


def find_best_match(
    source: NormalizedOrder,
    candidates: Sequence[NormalizedOrder],
) -> Optional[Tuple[int, MatchResult]]:
    """
    Find the candidate with the strictly highest confidence rank.

    Args:
        source: Normalized WeareCloud order (side A of every comparison)
        candidates: Normalized JumpSeller orders

    Returns:
        (candidate index, MatchResult) or None when there are no candidates
    """
    best: Optional[Tuple[int, MatchResult]] = None

    for index, candidate in enumerate(candidates):
        result = score_orders(source, candidate)
        if best is None or result.rank > best[1].rank:
            best = (index, result)

    return best


def find_best_source_match(
    counterpart: NormalizedOrder,
    candidates: Sequence[NormalizedOrder],
) -> Optional[Tuple[int, MatchResult]]:
    """Like find_best_match, searching WeareCloud candidates for one JumpSeller order.

    Candidates stay on side A so the total tolerance is always based on the
    WeareCloud total.
    """
    best: Optional[Tuple[int, MatchResult]] = None

    for index, candidate in enumerate(candidates):
        result = score_orders(candidate, counterpart)
        if best is None or result.rank > best[1].rank:
            best = (index, result)

    return best


def counterpart_key(order: Order, index: int) -> str:
    """Key for the consumed set: the JumpSeller id, or the position when it has none."""
    order_id = order.get("id") if isinstance(order, dict) else None
    if order_id is not None and str(order_id).strip():
        return f"id:{order_id}"
    return f"index:{index}"


class OrderMatcher:
    """
    Reconciles WeareCloud orders against JumpSeller orders.

    Args:
        exclusive: When True, a JumpSeller order consumed by an earlier
            WeareCloud order is no longer offered to later ones. When False
            (default) every WeareCloud order is scored against every
            JumpSeller order, so two WeareCloud orders may pair with the
            same JumpSeller order.
    """

    def __init__(self, exclusive: bool = False):
        self.exclusive = exclusive

    def reconcile(
        self,
        source_orders: Sequence[Order],
        counterpart_orders: Sequence[Order],
    ) -> List[SynchronizedOrder]:
        """
        Produce one SynchronizedOrder per input order (pairs count once).

        Args:
            source_orders: WeareCloud orders, common shape
            counterpart_orders: JumpSeller orders

        Returns:
            Pass-1 results followed by unmatched JumpSeller orders
        """
        normalized_counterparts = [normalize_order(order) for order in counterpart_orders]

        matched, consumed = self.match_source_orders(
            source_orders, counterpart_orders, normalized_counterparts
        )
        unmatched = self.unmatched_counterparts(counterpart_orders, consumed)

        logger.info(
            f"Order matching complete: {len(source_orders)} WeareCloud, "
            f"{len(counterpart_orders)} JumpSeller, {len(consumed)} JumpSeller consumed, "
            f"{len(matched) + len(unmatched)} synchronized orders"
        )
        return matched + unmatched

    def match_source_orders(
        self,
        source_orders: Sequence[Order],
        counterpart_orders: Sequence[Order],
        normalized_counterparts: Optional[Sequence[NormalizedOrder]] = None,
    ) -> Tuple[List[SynchronizedOrder], Set[str]]:
        """
        Pass 1: pair each WeareCloud order with its best JumpSeller order.

        Returns:
            (synchronized orders in WeareCloud input order, consumed JumpSeller keys)
        """
        if normalized_counterparts is None:
            normalized_counterparts = [normalize_order(order) for order in counterpart_orders]

        results: List[SynchronizedOrder] = []
        consumed: Set[str] = set()

        for source_order in source_orders:
            available = [
                index for index, order in enumerate(counterpart_orders)
                if not (self.exclusive and counterpart_key(order, index) in consumed)
            ]
            best = find_best_match(
                normalize_order(source_order),
                [normalized_counterparts[index] for index in available],
            )

            if best is not None and best[1].confidence != MatchConfidence.LOW:
                position, match = best
                index = available[position]
                consumed.add(counterpart_key(counterpart_orders[index], index))
                logger.debug(
                    f"Matched WeareCloud order {source_order.get('id')} to JumpSeller "
                    f"order {counterpart_orders[index].get('id')} "
                    f"({match.confidence.value}, score {match.score}: {match.reason})"
                )
                results.append(build_synchronized_order(source_order, counterpart_orders[index], match))
            else:
                results.append(build_synchronized_order(
                    source_order,
                    None,
                    reason=NO_COUNTERPART_MATCH,
                ))

        return results, consumed

    def unmatched_counterparts(
        self,
        counterpart_orders: Sequence[Order],
        consumed: Set[str],
    ) -> List[SynchronizedOrder]:
        """Pass 2: JumpSeller orders nobody claimed, in input order."""
        return [
            build_synchronized_order(None, order, reason=NO_SOURCE_MATCH)
            for index, order in enumerate(counterpart_orders)
            if counterpart_key(order, index) not in consumed
        ]
