"""
Booking model.

Bookings are half-open stays [start_date, end_date): the checkout day is
not an occupied night. Every non-cancelled booking owns one booking_nights
row per occupied night; the unique (listing_id, night_date) index on that
table is what makes a double booking impossible.

Status lifecycle:
    created -> paid        (payment confirmation)
    created -> cancelled   (guest or host; unpaid payment becomes failed)
    paid    -> cancelled
"""

import logging
import sqlite3
from typing import Optional

from database import get_db, write_transaction
from models.conflict import can_book
from models.date_range import DateRange, parse_date
from models.listing import require_listing
from models.pricing import plain_amount
from models.results import Conflict, Invalid
from utils.errors import ConflictError, NotFoundError, ValidationError
from utils.messages import MESSAGES

logger = logging.getLogger(__name__)

STATUS_CREATED = 'created'
STATUS_PAID = 'paid'
STATUS_CANCELLED = 'cancelled'

PAYMENT_PENDING = 'pending'
PAYMENT_PAID = 'paid'
PAYMENT_FAILED = 'failed'


def _conflict_error(conflict: Conflict) -> ConflictError:
    message = MESSAGES['dates_booked'] if conflict.reason == 'booked' else MESSAGES['dates_blocked']
    return ConflictError(message, conflict=conflict.to_dict())


# =============================================================================
# READ
# =============================================================================

def get_booking_by_id(booking_id: int, conn=None) -> Optional[dict]:
    """
    Get a booking with its listing title and host.

    Args:
        booking_id: Booking ID
        conn: Optional connection inside a transaction

    Returns:
        dict or None: Booking data
    """
    conn = conn or get_db()
    row = conn.execute('''
        SELECT b.*, l.title AS listing_title, l.owner_id AS host_id
        FROM bookings b
        JOIN listings l ON b.listing_id = l.id
        WHERE b.id = ?
    ''', (booking_id,)).fetchone()
    return dict(row) if row else None


def get_bookings_for_listing(listing_id: int, include_cancelled: bool = False) -> list:
    """
    Get a listing's bookings ordered by check-in date.

    Args:
        listing_id: Listing ID
        include_cancelled: Include cancelled bookings

    Returns:
        list: Booking dicts
    """
    query = 'SELECT * FROM bookings WHERE listing_id = ?'
    if not include_cancelled:
        query += " AND status != 'cancelled'"
    query += ' ORDER BY start_date, id'

    rows = get_db().execute(query, (listing_id,)).fetchall()
    return [dict(row) for row in rows]


# =============================================================================
# CREATE
# =============================================================================

def create_booking(
    listing_id: int,
    guest_id: int,
    start,
    end,
    guest_count: int,
    total_price: float
) -> int:
    """
    Create a booking if, and only if, its nights are still free.

    The conflict check and both inserts run in one BEGIN IMMEDIATE
    transaction, so two requests for overlapping dates are serialized and
    the second one sees the first one's nights.

    Args:
        listing_id: Listing ID
        guest_id: Guest user ID
        start: Check-in date
        end: Checkout date
        guest_count: Number of guests
        total_price: Server-computed total

    Returns:
        int: New booking ID

    Raises:
        ValidationError: Invalid date range
        NotFoundError: Listing does not exist
        ConflictError: Dates overlap a booking or a blocked date
    """
    stay = DateRange(parse_date(start, 'startDate'), parse_date(end, 'endDate'))

    try:
        with write_transaction() as conn:
            require_listing(listing_id, conn)

            result = can_book(listing_id, stay.start, stay.end, conn=conn)
            if isinstance(result, Invalid):
                raise ValidationError(result.message, field=result.field)
            if isinstance(result, Conflict):
                raise _conflict_error(result)

            cursor = conn.execute('''
                INSERT INTO bookings
                (listing_id, guest_id, start_date, end_date, guest_count, nights, total_price)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            ''', (
                listing_id, guest_id, stay.start.isoformat(), stay.end.isoformat(),
                guest_count, stay.nights, total_price
            ))
            booking_id = cursor.lastrowid

            conn.executemany('''
                INSERT INTO booking_nights (booking_id, listing_id, night_date)
                VALUES (?, ?, ?)
            ''', [(booking_id, listing_id, night.isoformat()) for night in stay.dates()])

    except sqlite3.IntegrityError:
        logger.warning(
            f"[Booking] Listing {listing_id} {stay}: night already taken at insert",
            exc_info=True
        )
        raise ConflictError(
            MESSAGES['dates_booked'],
            conflict={'reason': 'booked', 'existingBookingId': None, 'dates': []}
        )

    logger.info(
        f"[Booking] Created booking {booking_id} for listing {listing_id} "
        f"{stay} guest={guest_id} total={total_price}"
    )
    return booking_id


# =============================================================================
# LIFECYCLE
# =============================================================================

def attach_checkout_session(booking_id: int, session_id: str, checkout_url: str) -> None:
    """Store the payment processor's session reference on a booking."""
    db = get_db()
    db.execute('''
        UPDATE bookings
        SET checkout_session_id = ?, checkout_url = ?, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (session_id, checkout_url, booking_id))
    db.commit()


def mark_booking_paid(booking_id: int) -> dict:
    """
    Confirm payment of a booking.

    Idempotent for already paid bookings.

    Raises:
        NotFoundError: Unknown booking
        ConflictError: Booking was cancelled
    """
    with write_transaction() as conn:
        booking = get_booking_by_id(booking_id, conn)
        if not booking:
            raise NotFoundError(MESSAGES['booking_not_found'], bookingId=booking_id)
        if booking['status'] == STATUS_CANCELLED:
            raise ConflictError(MESSAGES['booking_not_payable'], bookingId=booking_id)

        if booking['status'] != STATUS_PAID:
            conn.execute('''
                UPDATE bookings
                SET status = ?, payment_status = ?, paid_at = CURRENT_TIMESTAMP,
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
            ''', (STATUS_PAID, PAYMENT_PAID, booking_id))

    logger.info(f"[Booking] Booking {booking_id} paid")
    return get_booking_by_id(booking_id)


def mark_payment_failed(booking_id: int) -> None:
    """
    Record a failed payment attempt.

    The booking stays 'created' and keeps holding its nights until it is
    paid or cancelled.
    """
    db = get_db()
    db.execute('''
        UPDATE bookings
        SET payment_status = ?, updated_at = CURRENT_TIMESTAMP
        WHERE id = ? AND status = ?
    ''', (PAYMENT_FAILED, booking_id, STATUS_CREATED))
    db.commit()
    logger.warning(f"[Booking] Payment failed for booking {booking_id}")


def cancel_booking(booking_id: int) -> dict:
    """
    Cancel a booking and release its nights.

    An unpaid booking's payment status becomes 'failed'; a paid one keeps
    'paid' (refunds belong to the payment processor).

    Raises:
        NotFoundError: Unknown booking
        ConflictError: Booking already cancelled

    Returns:
        dict: Updated booking
    """
    with write_transaction() as conn:
        booking = get_booking_by_id(booking_id, conn)
        if not booking:
            raise NotFoundError(MESSAGES['booking_not_found'], bookingId=booking_id)
        if booking['status'] == STATUS_CANCELLED:
            raise ConflictError(MESSAGES['booking_cancelled_already'], bookingId=booking_id)

        payment_status = booking['payment_status']
        if payment_status != PAYMENT_PAID:
            payment_status = PAYMENT_FAILED

        conn.execute('''
            UPDATE bookings
            SET status = ?, payment_status = ?, cancelled_at = CURRENT_TIMESTAMP,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (STATUS_CANCELLED, payment_status, booking_id))
        conn.execute('DELETE FROM booking_nights WHERE booking_id = ?', (booking_id,))

    logger.info(f"[Booking] Booking {booking_id} cancelled")
    return get_booking_by_id(booking_id)


def booking_to_dict(booking: dict) -> dict:
    """Serialize a booking row for API responses."""
    return {
        'id': booking['id'],
        'listingId': booking['listing_id'],
        'guestId': booking['guest_id'],
        'startDate': booking['start_date'],
        'endDate': booking['end_date'],
        'guests': booking['guest_count'],
        'nights': booking['nights'],
        'totalPrice': plain_amount(booking['total_price']),
        'status': booking['status'],
        'paymentStatus': booking['payment_status'],
        'checkoutUrl': booking.get('checkout_url'),
    }
