"""Confidence scoring for order matches.

Scores a WeareCloud order against a JumpSeller order with additive,
non-negative signals and maps the integer score to a confidence tier.

Signals:
- Order number equal: +50 (or +30 when one contains the other)
- Customer email equal (case-insensitive): +30
- Created within 1 day: +10 (or within 7 days: +5)
- Total within 5% of side A's total: +10

Tiers:
- high: score >= 50
- medium: score >= 30
- low: anything else
"""
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import List, Mapping, Any

from app.models.orders import MatchConfidence
from app.services.sync.utils.order_normalizer import NormalizedOrder, normalize_order

IDENTIFIER_EXACT_POINTS = 50
IDENTIFIER_SIMILAR_POINTS = 30
EMAIL_POINTS = 30
DATE_ONE_DAY_POINTS = 10
DATE_SEVEN_DAYS_POINTS = 5
TOTAL_POINTS = 10

HIGH_CONFIDENCE_SCORE = 50
MEDIUM_CONFIDENCE_SCORE = 30

TOTAL_TOLERANCE = Decimal("0.05")

NO_SIGNIFICANT_MATCH = "no significant match"

_CONFIDENCE_RANK = {
    MatchConfidence.HIGH: 3,
    MatchConfidence.MEDIUM: 2,
    MatchConfidence.LOW: 1,
}


@dataclass(frozen=True)
class MatchResult:
    """Score, tier and contributing signals for one evaluated pair."""
    score: int
    confidence: MatchConfidence
    reasons: List[str] = field(default_factory=list)

    @property
    def reason(self) -> str:
        """Reasons joined in evaluation order, or the no-match sentinel."""
        return ", ".join(self.reasons) or NO_SIGNIFICANT_MATCH

    @property
    def rank(self) -> int:
        return confidence_rank(self.confidence)


def confidence_rank(confidence: MatchConfidence) -> int:
    """Discrete rank used to pick the best candidate (high=3, medium=2, low=1)."""
    return _CONFIDENCE_RANK[confidence]


def confidence_for_score(score: int) -> MatchConfidence:
    if score >= HIGH_CONFIDENCE_SCORE:
        return MatchConfidence.HIGH
    if score >= MEDIUM_CONFIDENCE_SCORE:
        return MatchConfidence.MEDIUM
    return MatchConfidence.LOW


def score_orders(a: NormalizedOrder, b: NormalizedOrder) -> MatchResult:
    """
    Score two normalized orders.

    Side A is the source (WeareCloud) order: the total tolerance is 5% of
    A's total, so swapping the arguments can change whether that signal
    fires. Every signal guards its own inputs, so this never raises.

    Args:
        a: Normalized source order
        b: Normalized counterpart order

    Returns:
        MatchResult with score, confidence tier and reasons
    """
    score = 0
    reasons: List[str] = []

    for points, reason in (
        _identifier_signal(a, b),
        _email_signal(a, b),
        _date_signal(a, b),
        _total_signal(a, b),
    ):
        if points:
            score += points
            reasons.append(reason)

    return MatchResult(
        score=score,
        confidence=confidence_for_score(score),
        reasons=reasons,
    )


def match_orders(source_order: Mapping[str, Any], counterpart_order: Mapping[str, Any]) -> MatchResult:
    """Normalize two raw orders and score them."""
    return score_orders(normalize_order(source_order), normalize_order(counterpart_order))


def _identifier_signal(a: NormalizedOrder, b: NormalizedOrder):
    if not a.identifier or not b.identifier:
        return 0, ""
    if a.identifier == b.identifier:
        return IDENTIFIER_EXACT_POINTS, "order number matches"
    if a.identifier in b.identifier or b.identifier in a.identifier:
        return IDENTIFIER_SIMILAR_POINTS, "order number similar"
    return 0, ""


def _email_signal(a: NormalizedOrder, b: NormalizedOrder):
    if a.email and b.email and a.email.lower() == b.email.lower():
        return EMAIL_POINTS, "customer email matches"
    return 0, ""


def _date_signal(a: NormalizedOrder, b: NormalizedOrder):
    if a.created_at is None or b.created_at is None:
        return 0, ""

    try:
        difference = abs(a.created_at - b.created_at)
    except (TypeError, OverflowError):
        return 0, ""

    if difference <= timedelta(days=1):
        return DATE_ONE_DAY_POINTS, "dates within 1 day"
    if difference <= timedelta(days=7):
        return DATE_SEVEN_DAYS_POINTS, "dates within 7 days"
    return 0, ""


def _total_signal(a: NormalizedOrder, b: NormalizedOrder):
    if a.total is None or b.total is None:
        return 0, ""

    try:
        tolerance = a.total * TOTAL_TOLERANCE
        within = abs(a.total - b.total) <= tolerance
    except (ArithmeticError, TypeError):
        return 0, ""

    if within:
        return TOTAL_POINTS, "total matches within tolerance"
    return 0, ""
