"""Unit tests for UpdatePropagator.

Test Strategy:
1. Successful update reports one change per field sent
2. Empty payloads are refused without calling JumpSeller
3. The total deadline turns a slow call into a timeout result
4. Rejections keep JumpSeller's message and status code
5. Remote failures are returned, never raised
"""
import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from app.models.orders import OrderUpdate, SyncErrorKind, SyncStatus
from app.services.sync.errors import (
    OrderSourceConfigError,
    OrderSourceRejectedError,
    OrderSourceUnavailableError,
)
from app.services.sync.update_propagator import UpdatePropagator


@pytest.fixture
def adapter():
    """JumpSeller adapter double."""
    mock = Mock()
    mock.source = 'jumpseller'
    mock.update_order = AsyncMock(return_value={'id': 5001, 'order_number': '1001', 'status': 'Paid'})
    return mock


class TestUpdatePropagator:
    """Test suite for JumpSeller update propagation."""

    @pytest.mark.asyncio
    async def test_successful_update(self, adapter):
        propagator = UpdatePropagator(adapter, timeout=5)

        result = await propagator.apply_update(5001, OrderUpdate(status='Paid', internal_note='ok'))

        assert result.success is True
        assert result.error is None
        assert [(c.field, c.old_value, c.new_value) for c in result.changes] == [
            ('status', None, 'Paid'),
            ('internal_note', None, 'ok'),
        ]
        assert result.order.id == '5001'
        assert result.order.source_order is None
        assert result.order.sync_status == SyncStatus.PENDING
        adapter.update_order.assert_awaited_once_with(
            5001, {'status': 'Paid', 'internal_note': 'ok'}, timeout=5
        )

    @pytest.mark.asyncio
    async def test_plain_dict_drops_none_values(self, adapter):
        propagator = UpdatePropagator(adapter, timeout=5)

        result = await propagator.apply_update(5001, {'status': 'Paid', 'customer_note': None})

        assert result.success is True
        assert [c.field for c in result.changes] == ['status']

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fields", [OrderUpdate(), {}, {'status': None}])
    async def test_empty_update_is_refused(self, adapter, fields):
        propagator = UpdatePropagator(adapter, timeout=5)

        result = await propagator.apply_update(5001, fields)

        assert result.success is False
        assert result.error_kind == SyncErrorKind.INVALID_REQUEST
        adapter.update_order.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_deadline_exceeded_is_timeout(self, adapter):
        async def slow_update(*args, **kwargs):
            await asyncio.sleep(5)

        adapter.update_order = AsyncMock(side_effect=slow_update)
        propagator = UpdatePropagator(adapter, timeout=0.05)

        result = await propagator.apply_update(5001, {'status': 'Paid'})

        assert result.success is False
        assert result.error_kind == SyncErrorKind.TIMEOUT
        assert result.error.startswith('Timeout')
        assert result.status_code == 504
        assert result.changes == []

    @pytest.mark.asyncio
    async def test_rejection_keeps_status_and_message(self, adapter):
        adapter.update_order.side_effect = OrderSourceRejectedError(
            'jumpseller: Invalid status', 'jumpseller', status_code=422
        )
        propagator = UpdatePropagator(adapter, timeout=5)

        result = await propagator.apply_update(5001, {'status': 'Bogus'})

        assert result.success is False
        assert result.error_kind == SyncErrorKind.REJECTED
        assert result.status_code == 422
        assert 'Invalid status' in result.error
        assert result.order is None

    @pytest.mark.asyncio
    async def test_unavailable(self, adapter):
        adapter.update_order.side_effect = OrderSourceUnavailableError(
            'jumpseller: HTTP error! status: 503', 'jumpseller', status_code=503
        )
        propagator = UpdatePropagator(adapter, timeout=5)

        result = await propagator.apply_update(5001, {'status': 'Paid'})

        assert result.success is False
        assert result.error_kind == SyncErrorKind.UNAVAILABLE
        assert result.status_code == 503

    @pytest.mark.asyncio
    async def test_missing_credentials(self, adapter):
        adapter.update_order.side_effect = OrderSourceConfigError(
            'JumpSeller API key (Login) is not configured', 'jumpseller'
        )
        propagator = UpdatePropagator(adapter, timeout=5)

        result = await propagator.apply_update(5001, {'status': 'Paid'})

        assert result.success is False
        assert result.error_kind == SyncErrorKind.CONFIGURATION

    @pytest.mark.asyncio
    async def test_update_is_not_retried(self, adapter):
        adapter.update_order.side_effect = OrderSourceUnavailableError('down', 'jumpseller', status_code=502)
        propagator = UpdatePropagator(adapter, timeout=5)

        await propagator.apply_update(5001, {'status': 'Paid'})

        assert adapter.update_order.await_count == 1
