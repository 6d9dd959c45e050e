"""
Tests for booking price calculation.
"""

import pytest
from datetime import date, timedelta

from models.pricing import (
    FeeSchedule, PriceQuote, PricingVariation, compute_total,
    nightly_price, quote_for_listing, round_currency
)
from models.results import Invalid


def variation(id, start, end, price):
    return PricingVariation(id=id, listing_id=1, start_date=start, end_date=end, price=price)


class TestComputeTotal:
    """Tests for compute_total."""

    def test_three_nights_base_occupancy(self):
        """2000 x 3 nights, 2 guests: cleaning floor 500, service 325."""
        quote = compute_total(2000, date(2025, 6, 1), date(2025, 6, 4), 2)

        assert isinstance(quote, PriceQuote)
        assert quote.nights == 3
        assert quote.subtotal == 6000
        assert quote.cleaning_fee == 500
        assert quote.extra_guest_fee == 0
        assert quote.service_fee == 325
        assert quote.total == 6825

    def test_variation_inside_stay(self):
        """Variation 24..26 Dec at 5000, stay 23 -> 28 Dec: five nights."""
        variations = [variation(1, date(2025, 12, 24), date(2025, 12, 26), 5000)]
        quote = compute_total(2000, '2025-12-23', '2025-12-28', 2, variations)

        assert [price for _, price in quote.nightly_rates] == [2000, 5000, 5000, 5000, 2000]
        assert quote.subtotal == 19000
        assert quote.service_fee == 975
        assert quote.total == 19000 + 500 + 975

    def test_extra_guests(self):
        quote = compute_total(2000, date(2025, 6, 1), date(2025, 6, 4), 4)
        assert quote.extra_guest_fee == 2 * 200 * 3

    def test_cleaning_fee_above_floor(self):
        quote = compute_total(8000, date(2025, 6, 1), date(2025, 6, 2), 1)
        assert quote.cleaning_fee == 800

    def test_custom_fee_schedule(self):
        fees = FeeSchedule(cleaning_fee_percent=0, min_cleaning_fee=0, service_fee_percent=0)
        quote = compute_total(1500, date(2025, 6, 1), date(2025, 6, 3), 2, fees=fees)
        assert quote.total == 3000

    def test_total_monotonic_in_nights(self):
        start = date(2025, 6, 1)
        variations = [variation(1, date(2025, 6, 10), date(2025, 6, 12), 500)]
        totals = [
            compute_total(2000, start, start + timedelta(days=n), 3, variations).total
            for n in range(1, 31)
        ]
        assert totals == sorted(totals)

    def test_invalid_range(self):
        result = compute_total(2000, '2025-06-05', '2025-06-01', 2)
        assert isinstance(result, Invalid)
        assert result.field is None or result.field in ('startDate', 'endDate')

    def test_invalid_guests_and_price(self):
        assert isinstance(compute_total(2000, '2025-06-01', '2025-06-02', 0), Invalid)
        assert compute_total(0, '2025-06-01', '2025-06-02', 1).field == 'basePrice'

    def test_to_dict(self):
        data = compute_total(2000, '2025-06-01', '2025-06-03', 2).to_dict()
        assert data['nights'] == 2
        assert data['nightlyRates'][0] == {'date': '2025-06-01', 'price': 2000}


class TestRounding:
    """Fees round half-up to whole currency units."""

    def test_half_up(self):
        assert round_currency(2.5) == 3
        assert round_currency(0.5) == 1
        assert round_currency(500.5) == 501
        assert round_currency(500.49) == 500

    def test_fee_rounded_before_sum(self):
        fees = FeeSchedule(cleaning_fee_percent=0, min_cleaning_fee=0, service_fee_percent=0.5)
        quote = compute_total(1001, date(2025, 6, 1), date(2025, 6, 2), 1, fees=fees)
        assert quote.service_fee == 501
        assert quote.total == 1502


class TestNightlyPrice:
    """Tests for per-night rate resolution."""

    def test_base_price_outside_variations(self):
        variations = [variation(1, date(2025, 12, 24), date(2025, 12, 26), 5000)]
        assert nightly_price(date(2025, 12, 27), 2000, variations) == 2000
        assert nightly_price(date(2025, 12, 26), 2000, variations) == 5000

    def test_most_recent_variation_wins(self):
        variations = [
            variation(2, date(2025, 12, 25), date(2025, 12, 25), 9000),
            variation(1, date(2025, 12, 20), date(2025, 12, 31), 4000),
        ]
        assert nightly_price(date(2025, 12, 25), 2000, variations) == 9000
        assert nightly_price(date(2025, 12, 24), 2000, variations) == 4000


class TestQuoteForListing:
    """Quotes for a stored listing."""

    def test_uses_stored_variations(self, app_ctx):
        from models.availability import set_pricing_variation

        set_pricing_variation(1, '2025-12-24', '2025-12-26', 5000, 'Christmas')
        quote = quote_for_listing(1, '2025-12-23', '2025-12-28', 2)

        assert quote.subtotal == 19000
        assert quote.base_price == 2000

    def test_unknown_listing(self, app_ctx):
        from utils.errors import NotFoundError

        with pytest.raises(NotFoundError):
            quote_for_listing(999, '2025-12-23', '2025-12-28', 2)
