"""
Availability analytics.
Occupancy and revenue statistics over a trailing window of days.

Read-only: nothing here writes to the database.
"""

from datetime import date

from models.availability import get_blocked_dates, get_booked_nights
from models.date_range import daterange
from models.listing import require_listing
from models.pricing import get_variations_for_listing, nightly_price, plain_amount
from utils.datetime_helpers import get_today, window_end


def summarize_window(days, base_price, blocked, booked, variations) -> dict:
    """
    Compute window statistics from already loaded state.

    Args:
        days: List of dates in the window
        base_price: Listing base price
        blocked: Set of blocked dates
        booked: Set (or dict keyed by date) of booked nights
        variations: Pricing variations

    Returns:
        dict: Analytics payload (camelCase keys, as served by the API)
    """
    total = len(days)
    booked_days = [d for d in days if d in booked]
    # A booked date is never counted as blocked
    blocked_days = [d for d in days if d in blocked and d not in booked]
    available_days = [d for d in days if d not in booked and d not in blocked]

    occupancy = (len(blocked_days) + len(booked_days)) / total if total else 0.0

    return {
        'totalDays': total,
        'blockedDays': len(blocked_days),
        'bookedDays': len(booked_days),
        'availableDays': len(available_days),
        'occupancyRate': round(occupancy, 4),
        'occupancyPercent': round(occupancy * 100, 1),
        'basePrice': base_price,
        'estimatedLoss': len(blocked_days) * base_price,
        'projectedRevenue': sum(nightly_price(d, base_price, variations) for d in booked_days),
        'potentialRevenue': sum(nightly_price(d, base_price, variations) for d in available_days),
    }


def get_availability_analytics(listing_id: int, days: int, today: date = None) -> dict:
    """
    Analytics for the N days starting today (today .. today+N-1).

    Args:
        listing_id: Listing ID
        days: Window length (N > 0)
        today: Override for the current date (defaults to configured timezone)

    Returns:
        dict: Analytics payload
    """
    listing = require_listing(listing_id)
    today = today or get_today()
    last = window_end(today, days)

    result = summarize_window(
        list(daterange(today, last)),
        plain_amount(listing['base_price']),
        get_blocked_dates(listing_id, today, last),
        get_booked_nights(listing_id, today, last),
        get_variations_for_listing(listing_id),
    )
    result['totalPotential'] = result['projectedRevenue'] + result['potentialRevenue']
    result['windowStart'] = today.isoformat()
    result['windowEnd'] = last.isoformat()
    return result
