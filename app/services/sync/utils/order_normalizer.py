"""Field extraction for order matching.

Both order sources return loosely-typed records. This module pulls out the
four attributes the confidence scorer compares (order number, customer
email, creation time, total) and never raises: anything missing or
unparseable simply comes back as None.
"""
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

# Order-number-like field first, then the secondary identifier, then the
# platform's own id.
IDENTIFIER_FIELDS = ("order_number", "pedido_ecommerce", "id")

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
# Leading number of a cleaned total ("19.990" -> 19.990, "12.5.1" -> 12.5)
_NUMERIC_PREFIX = re.compile(r"^-?(?:\d+(?:\.\d*)?|\.\d+)")


@dataclass(frozen=True)
class NormalizedOrder:
    """Comparable attributes of an order, each possibly absent."""
    identifier: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    total: Optional[Decimal] = None


def normalize_order(raw: Optional[Mapping[str, Any]]) -> NormalizedOrder:
    """
    Extract comparable fields from a raw order record.

    Args:
        raw: Order dict from either adapter (may be None or partial)

    Returns:
        NormalizedOrder with every field that could be extracted
    """
    if not isinstance(raw, Mapping):
        return NormalizedOrder()

    return NormalizedOrder(
        identifier=extract_identifier(raw),
        email=extract_email(raw),
        created_at=parse_timestamp(raw.get("created_at")),
        total=parse_total(raw.get("total")),
    )


def extract_identifier(raw: Mapping[str, Any]) -> Optional[str]:
    for field in IDENTIFIER_FIELDS:
        value = _as_text(raw.get(field))
        if value:
            return value
    return None


def extract_email(raw: Mapping[str, Any]) -> Optional[str]:
    customer = raw.get("customer")
    if not isinstance(customer, Mapping):
        return None

    email = customer.get("email")
    if not isinstance(email, str):
        return None

    email = email.strip().lower()
    return email or None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-like timestamp into an aware UTC datetime.

    Accepts ``2024-03-01T10:00:00Z``, ``2024-03-01 10:00:00 UTC``,
    offset-aware strings and plain dates. Naive values are taken as UTC so
    that any two parsed timestamps can be subtracted.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(" UTC"):
            text = text[:-4]
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        # Offset pushes the instant outside the representable range
        return None


def parse_total(value: Any) -> Optional[Decimal]:
    """
    Parse a monetary total that may carry currency symbols or separators.

    Every character other than digits, '.' and '-' is stripped, then the
    leading number is converted. ``"$19.990"`` becomes ``Decimal("19.990")``;
    ``"CLP"`` or ``None`` become None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        try:
            total = Decimal(str(value))
        except InvalidOperation:
            return None
        return total if total.is_finite() else None

    if not isinstance(value, str):
        return None

    match = _NUMERIC_PREFIX.match(_NON_NUMERIC.sub("", value))
    if not match:
        return None

    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return None


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (str, int)):
        text = str(value).strip()
        return text or None
    return None
