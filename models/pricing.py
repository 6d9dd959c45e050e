"""
Booking price calculation.

Handles:
- Per-night rate resolution (base price vs. host pricing variations)
- Cleaning, extra-guest and service fees
- Quotes for a listing loaded from the database

Each fee is rounded half-up to a whole currency unit before summing;
the total is never rounded a second time.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Union

from flask import current_app

from database import get_db
from models.date_range import DateRange, parse_date
from models.listing import require_listing
from models.results import Invalid
from utils.errors import AvailabilityError
from utils.messages import MESSAGES

logger = logging.getLogger(__name__)

Number = Union[int, float]


def round_currency(value: Number) -> int:
    """Round half-up to a whole currency unit (2.5 -> 3, not banker's 2)."""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def plain_amount(value: Number) -> Number:
    """Return ints for whole amounts so JSON shows 2000, not 2000.0."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


# =============================================================================
# PRICING VARIATIONS
# =============================================================================

@dataclass(frozen=True)
class PricingVariation:
    """
    Host override of the nightly price for an inclusive span of days.

    start_date and end_date are both priced days.
    """

    id: Optional[int]
    listing_id: Optional[int]
    start_date: date
    end_date: date
    price: Number
    reason: str = 'Custom Pricing'
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> 'PricingVariation':
        return cls(
            id=row['id'],
            listing_id=row['listing_id'],
            start_date=parse_date(row['start_date']),
            end_date=parse_date(row['end_date']),
            price=plain_amount(row['price']),
            reason=row['reason'],
            created_at=row['created_at'],
        )

    @property
    def range(self) -> DateRange:
        return DateRange.inclusive(self.start_date, self.end_date)

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'listingId': self.listing_id,
            'startDate': self.start_date.isoformat(),
            'endDate': self.end_date.isoformat(),
            'price': self.price,
            'reason': self.reason,
            'createdAt': self.created_at,
        }


def get_variations_for_listing(listing_id: int, conn=None) -> list:
    """Load a listing's pricing variations, oldest first."""
    conn = conn or get_db()
    rows = conn.execute('''
        SELECT * FROM pricing_variations
        WHERE listing_id = ?
        ORDER BY start_date, id
    ''', (listing_id,)).fetchall()
    return [PricingVariation.from_row(row) for row in rows]


def nightly_price(day: date, base_price: Number, variations: Iterable[PricingVariation]) -> Number:
    """
    Price charged for the night starting on `day`.

    If several variations cover the day, the most recently created one
    (highest id) wins.
    """
    covering = [v for v in variations if v.covers(day)]
    if not covering:
        return base_price
    return max(covering, key=lambda v: v.id or 0).price


# =============================================================================
# FEES AND QUOTES
# =============================================================================

@dataclass(frozen=True)
class FeeSchedule:
    """Fee parameters applied on top of the nightly rates."""

    cleaning_fee_percent: float = 0.10
    min_cleaning_fee: int = 500
    base_occupancy: int = 2
    extra_guest_fee_per_night: int = 200
    service_fee_percent: float = 0.05

    @classmethod
    def from_config(cls, config) -> 'FeeSchedule':
        defaults = cls()
        return cls(
            cleaning_fee_percent=config.get('CLEANING_FEE_PERCENT', defaults.cleaning_fee_percent),
            min_cleaning_fee=config.get('MIN_CLEANING_FEE', defaults.min_cleaning_fee),
            base_occupancy=config.get('BASE_OCCUPANCY', defaults.base_occupancy),
            extra_guest_fee_per_night=config.get(
                'EXTRA_GUEST_FEE_PER_NIGHT', defaults.extra_guest_fee_per_night
            ),
            service_fee_percent=config.get('SERVICE_FEE_PERCENT', defaults.service_fee_percent),
        )


@dataclass(frozen=True)
class PriceQuote:
    """Price breakdown for a candidate booking."""

    base_price: Number
    start: date
    end: date
    guests: int
    nights: int
    nightly_rates: tuple
    subtotal: Number
    cleaning_fee: int
    extra_guest_fee: int
    service_fee: int
    total: Number

    ok = True

    def to_dict(self) -> dict:
        return {
            'basePrice': self.base_price,
            'startDate': self.start.isoformat(),
            'endDate': self.end.isoformat(),
            'guests': self.guests,
            'nights': self.nights,
            'nightlyRates': [
                {'date': day.isoformat(), 'price': price}
                for day, price in self.nightly_rates
            ],
            'subtotal': self.subtotal,
            'cleaningFee': self.cleaning_fee,
            'extraGuestFee': self.extra_guest_fee,
            'serviceFee': self.service_fee,
            'total': self.total,
        }


def compute_total(
    base_price: Number,
    start,
    end,
    guest_count: int,
    variations: Iterable[PricingVariation] = (),
    fees: FeeSchedule = None
):
    """
    Compute the total price of a stay [start, end).

    Args:
        base_price: Nightly base price of the listing
        start: Check-in date
        end: Checkout date (not a charged night)
        guest_count: Number of guests
        variations: Pricing variations of the listing
        fees: Fee parameters (defaults to FeeSchedule())

    Returns:
        PriceQuote on success, Invalid when the input cannot be priced
    """
    fees = fees or FeeSchedule()

    try:
        stay = DateRange(parse_date(start, 'startDate'), parse_date(end, 'endDate'))
    except AvailabilityError as e:
        return Invalid(e.message, e.details.get('field'))

    if base_price is None or base_price <= 0:
        return Invalid(MESSAGES['invalid_price'], 'basePrice')

    if guest_count is None or guest_count < 1:
        return Invalid(MESSAGES['invalid_guests'], 'guests')

    variations = list(variations)
    rates = tuple((day, nightly_price(day, base_price, variations)) for day in stay.dates())
    subtotal = plain_amount(sum(price for _, price in rates))

    cleaning_fee = max(round_currency(base_price * fees.cleaning_fee_percent), fees.min_cleaning_fee)
    extra_guests = max(0, guest_count - fees.base_occupancy)
    extra_guest_fee = round_currency(extra_guests * fees.extra_guest_fee_per_night * stay.nights)
    service_fee = round_currency((subtotal + cleaning_fee + extra_guest_fee) * fees.service_fee_percent)

    return PriceQuote(
        base_price=plain_amount(base_price),
        start=stay.start,
        end=stay.end,
        guests=guest_count,
        nights=stay.nights,
        nightly_rates=rates,
        subtotal=subtotal,
        cleaning_fee=cleaning_fee,
        extra_guest_fee=extra_guest_fee,
        service_fee=service_fee,
        total=plain_amount(subtotal + cleaning_fee + extra_guest_fee + service_fee),
    )


def quote_for_listing(listing_id: int, start, end, guest_count: int, conn=None):
    """
    Price a stay for a stored listing using its variations and the app's fees.

    Raises:
        NotFoundError: If the listing does not exist

    Returns:
        PriceQuote or Invalid
    """
    listing = require_listing(listing_id, conn)
    variations = get_variations_for_listing(listing_id, conn)
    quote = compute_total(
        listing['base_price'], start, end, guest_count,
        variations, FeeSchedule.from_config(current_app.config)
    )

    if isinstance(quote, PriceQuote):
        logger.info(
            f"[Pricing] Listing {listing_id} {quote.start}..{quote.end} "
            f"guests={guest_count} nights={quote.nights} total={quote.total}"
        )
    return quote
