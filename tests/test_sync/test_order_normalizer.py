"""Unit tests for order_normalizer utility.

Test Strategy:
1. Identifier precedence (order_number > pedido_ecommerce > id)
2. Email extraction and lower-casing
3. Timestamp parsing of the formats both sources emit
4. Total parsing with currency symbols and separators
5. Missing / malformed data never raises
"""
from datetime import datetime, timezone, timedelta
from decimal import Decimal

import pytest

from app.services.sync.utils.order_normalizer import (
    NormalizedOrder,
    normalize_order,
    parse_timestamp,
    parse_total,
)


class TestOrderNormalizer:
    """Test suite for order field extraction."""

    # Identifier Tests
    # ─────────────────────────────────────────────────────────────

    def test_identifier_prefers_order_number(self):
        raw = {'order_number': '1001', 'pedido_ecommerce': 'P-9', 'id': 55}
        assert normalize_order(raw).identifier == '1001'

    def test_identifier_falls_back_to_secondary_field(self):
        raw = {'order_number': '', 'pedido_ecommerce': 'P-9', 'id': 55}
        assert normalize_order(raw).identifier == 'P-9'

    def test_identifier_falls_back_to_platform_id(self):
        raw = {'order_number': None, 'id': 55}
        assert normalize_order(raw).identifier == '55'

    def test_numeric_order_number_rendered_as_string(self):
        assert normalize_order({'order_number': 1001}).identifier == '1001'

    # Email Tests
    # ─────────────────────────────────────────────────────────────

    def test_email_lower_cased(self):
        raw = {'customer': {'email': '  Ana.Perez@Example.COM '}}
        assert normalize_order(raw).email == 'ana.perez@example.com'

    @pytest.mark.parametrize("raw", [
        {},
        {'customer': None},
        {'customer': {}},
        {'customer': {'email': ''}},
        {'customer': {'email': 42}},
        {'customer': 'ana@example.com'},
    ])
    def test_email_absent(self, raw):
        assert normalize_order(raw).email is None

    # Timestamp Tests
    # ─────────────────────────────────────────────────────────────

    def test_parse_zulu_timestamp(self):
        parsed = parse_timestamp('2026-03-02T15:30:00Z')
        assert parsed == datetime(2026, 3, 2, 15, 30, tzinfo=timezone.utc)

    def test_parse_jumpseller_utc_suffix(self):
        parsed = parse_timestamp('2026-03-02 15:30:00 UTC')
        assert parsed == datetime(2026, 3, 2, 15, 30, tzinfo=timezone.utc)

    def test_parse_offset_converted_to_utc(self):
        parsed = parse_timestamp('2026-03-02T12:30:00-03:00')
        assert parsed == datetime(2026, 3, 2, 15, 30, tzinfo=timezone.utc)

    def test_naive_timestamp_taken_as_utc(self):
        parsed = parse_timestamp('2026-03-02T15:30:00')
        assert parsed.tzinfo is not None
        assert parsed.utcoffset() == timedelta(0)

    def test_date_only(self):
        assert parse_timestamp('2026-03-02') == datetime(2026, 3, 2, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [
        None, '', 'yesterday', '2026-13-45', 12345, ['2026-03-02'],
        '0001-01-01T00:00:00+05:00', '9999-12-31T23:00:00-05:00',
    ])
    def test_unparseable_timestamp_is_absent(self, value):
        assert parse_timestamp(value) is None

    # Total Tests
    # ─────────────────────────────────────────────────────────────

    @pytest.mark.parametrize("value,expected", [
        ('19990', Decimal('19990')),
        ('$19990', Decimal('19990')),
        ('CLP 19,990', Decimal('19990')),
        ('19.99', Decimal('19.99')),
        ('-150.5', Decimal('-150.5')),
        (20000, Decimal('20000')),
        (19.5, Decimal('19.5')),
        ('12.5.1', Decimal('12.5')),
    ])
    def test_parse_total(self, value, expected):
        assert parse_total(value) == expected

    @pytest.mark.parametrize("value", [None, '', 'CLP', '-', True, float('nan'), {'amount': 1}])
    def test_unparseable_total_is_absent(self, value):
        assert parse_total(value) is None

    # Edge Cases
    # ─────────────────────────────────────────────────────────────

    @pytest.mark.parametrize("raw", [None, [], 'order', 42])
    def test_non_mapping_input_gives_empty_order(self, raw):
        assert normalize_order(raw) == NormalizedOrder()

    def test_out_of_range_created_at_leaves_other_fields(self):
        normalized = normalize_order({'order_number': '1', 'created_at': '0001-01-01T00:00:00+05:00', 'total': '10'})

        assert normalized.created_at is None
        assert normalized.identifier == '1'
        assert normalized.total == Decimal('10')

    def test_full_order(self, counterpart_order_factory):
        normalized = normalize_order(counterpart_order_factory())

        assert normalized.identifier == '1001'
        assert normalized.email == 'a@x.com'
        assert normalized.created_at == datetime(2026, 3, 2, 15, 30, tzinfo=timezone.utc)
        assert normalized.total == Decimal('20000')
