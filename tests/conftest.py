"""Shared pytest fixtures for order reconciliation tests."""
import sys
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import pytest

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


BASE_TIME = datetime(2026, 3, 2, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def base_time() -> datetime:
    """Fixed reference timestamp for order creation dates."""
    return BASE_TIME


@pytest.fixture
def source_order_factory() -> Callable[..., Dict[str, Any]]:
    """Build WeareCloud orders already mapped to the common shape."""

    def _make(
        order_id: Optional[str] = "WC-1",
        order_number: Optional[str] = "1001",
        email: Optional[str] = "a@x.com",
        total: Optional[str] = "19990",
        created_at: Optional[str] = BASE_TIME.isoformat(),
        **overrides: Any
    ) -> Dict[str, Any]:
        order = {
            'id': order_id,
            'order_number': order_number,
            'status': 'pendiente',
            'created_at': created_at,
            'updated_at': created_at,
            'customer': {'email': email, 'name': 'Ana Pérez'} if email is not None else None,
            'line_items': [],
            'total': total,
            'warecloud_id': order_id,
            'pedido_ecommerce': order_number,
        }
        order.update(overrides)
        return order

    return _make


@pytest.fixture
def counterpart_order_factory() -> Callable[..., Dict[str, Any]]:
    """Build JumpSeller orders as returned by the orders API."""

    def _make(
        order_id: Optional[int] = 5001,
        order_number: Optional[str] = "1001",
        email: Optional[str] = "a@x.com",
        total: Any = "20000",
        created_at: Optional[str] = BASE_TIME.isoformat(),
        **overrides: Any
    ) -> Dict[str, Any]:
        order = {
            'id': order_id,
            'order_number': order_number,
            'status': 'Pending Payment',
            'created_at': created_at,
            'updated_at': created_at,
            'currency': 'CLP',
            'total': total,
            'customer': {'id': 77, 'email': email} if email is not None else None,
            'line_items': [{'id': 1, 'name': 'Libro', 'qty': 1}],
        }
        order.update(overrides)
        return order

    return _make
