"""
Booking conflict resolution.

Decides whether a proposed stay [start, end) may become a booking:
1. No overlap with a non-cancelled booking (half-open interval test)
2. No night inside the stay blocked by the host

can_book() only reads. To make check-and-insert atomic, call it with the
connection of an open write_transaction() (see models.booking).
"""

import logging
from typing import Iterable

from database import get_db
from models.date_range import DateRange, parse_date
from models.results import Ok, Conflict, Invalid
from utils.errors import AvailabilityError

logger = logging.getLogger(__name__)


def find_conflict(bookings: Iterable[dict], blocked_dates: Iterable, stay: DateRange):
    """
    Check a stay against in-memory bookings and blocked dates.

    Args:
        bookings: Dicts with id, start_date, end_date, status
        blocked_dates: Blocked calendar dates
        stay: Requested range

    Returns:
        Ok or Conflict
    """
    for booking in bookings:
        if booking.get('status') == 'cancelled':
            continue
        existing = DateRange(parse_date(booking['start_date']), parse_date(booking['end_date']))
        if existing.start < stay.end and stay.start < existing.end:
            return Conflict('booked', booking_id=booking['id'])

    blocked_hits = tuple(sorted(d for d in set(blocked_dates) if stay.contains(d)))
    if blocked_hits:
        return Conflict('blocked', dates=blocked_hits)

    return Ok()


def get_overlapping_bookings(listing_id: int, stay: DateRange, conn=None) -> list:
    """
    Get non-cancelled bookings of a listing intersecting [start, end).

    Returns:
        list: Booking dicts ordered by start date
    """
    conn = conn or get_db()
    rows = conn.execute('''
        SELECT id, listing_id, guest_id, start_date, end_date, status
        FROM bookings
        WHERE listing_id = ?
          AND status != 'cancelled'
          AND start_date < ?
          AND ? < end_date
        ORDER BY start_date
    ''', (listing_id, stay.end.isoformat(), stay.start.isoformat())).fetchall()
    return [dict(row) for row in rows]


def get_blocked_in_range(listing_id: int, stay: DateRange, conn=None) -> tuple:
    """Blocked dates of a listing falling inside [start, end)."""
    conn = conn or get_db()
    rows = conn.execute('''
        SELECT blocked_date FROM listing_blocked_dates
        WHERE listing_id = ?
          AND blocked_date >= ?
          AND blocked_date < ?
        ORDER BY blocked_date
    ''', (listing_id, stay.start.isoformat(), stay.end.isoformat())).fetchall()
    return tuple(parse_date(row['blocked_date']) for row in rows)


def can_book(listing_id: int, start, end, conn=None):
    """
    Decide whether [start, end) may be booked on a listing.

    Args:
        listing_id: Listing ID
        start: Check-in date
        end: Checkout date
        conn: Connection of an enclosing transaction (optional)

    Returns:
        Ok, Conflict(reason, booking_id, dates) or Invalid(message)
    """
    try:
        stay = DateRange(parse_date(start, 'startDate'), parse_date(end, 'endDate'))
    except AvailabilityError as e:
        return Invalid(e.message, e.details.get('field'))

    result = find_conflict(
        get_overlapping_bookings(listing_id, stay, conn),
        get_blocked_in_range(listing_id, stay, conn),
        stay
    )

    if isinstance(result, Conflict):
        logger.info(
            f"[Conflict] Listing {listing_id} {stay} rejected: {result.reason} "
            f"(booking={result.booking_id}, blocked={len(result.dates)})"
        )
    return result
