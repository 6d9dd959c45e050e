"""
Availability store.

Authoritative per-listing calendar state, kept entirely in the database:
- blocked dates (host-curated, independent of bookings)
- booked nights (derived from non-cancelled bookings)
- pricing variations (date-range overrides of the base price)

A date's state is 'booked', 'blocked' or 'available'; booked wins over
blocked, and a booked date can never be added to the blocked set.
Every mutation runs in one write transaction so the booked-date check and
the write cannot interleave with a booking insert.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from database import get_db, write_transaction
from models.date_range import DateRange, daterange, parse_date, parse_dates
from models.listing import require_listing
from models.pricing import PricingVariation, get_variations_for_listing
from utils.errors import ConflictError, NotFoundError, ValidationError
from utils.messages import MESSAGES
from utils.validators import sanitize_input, validate_price, validate_window

logger = logging.getLogger(__name__)

AVAILABLE = 'available'
BLOCKED = 'blocked'
BOOKED = 'booked'

BULK_ACTIONS = ('add', 'remove', 'clear', 'range')


def _iso_list(dates: Iterable[date]) -> list:
    return [d.isoformat() for d in sorted(dates)]


# =============================================================================
# READS
# =============================================================================

@dataclass(frozen=True)
class DayStatus:
    """
    Status of one calendar day.

    priced is an overlay: true only for available days covered by a
    variation. price still reports the variation price on booked or
    blocked days so the calendar can show it.
    """

    day: date
    state: str
    priced: bool = False
    price: Optional[float] = None
    booking_id: Optional[int] = None
    variation_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            'date': self.day.isoformat(),
            'status': self.state,
            'priced': self.priced,
            'price': self.price,
            'bookingId': self.booking_id,
            'variationId': self.variation_id,
        }


def get_blocked_dates(listing_id: int, first: date = None, last: date = None, conn=None) -> set:
    """
    Get a listing's blocked dates, optionally limited to first..last.

    Returns:
        set: Blocked dates
    """
    conn = conn or get_db()
    query = 'SELECT blocked_date FROM listing_blocked_dates WHERE listing_id = ?'
    params = [listing_id]

    if first:
        query += ' AND blocked_date >= ?'
        params.append(first.isoformat())

    if last:
        query += ' AND blocked_date <= ?'
        params.append(last.isoformat())

    rows = conn.execute(query, params).fetchall()
    return {parse_date(row['blocked_date']) for row in rows}


def get_booked_nights(listing_id: int, first: date = None, last: date = None, conn=None) -> dict:
    """
    Get the occupied nights of a listing, optionally limited to first..last.

    Returns:
        dict: {night date: booking_id}
    """
    conn = conn or get_db()
    query = 'SELECT night_date, booking_id FROM booking_nights WHERE listing_id = ?'
    params = [listing_id]

    if first:
        query += ' AND night_date >= ?'
        params.append(first.isoformat())

    if last:
        query += ' AND night_date <= ?'
        params.append(last.isoformat())

    rows = conn.execute(query, params).fetchall()
    return {parse_date(row['night_date']): row['booking_id'] for row in rows}


def _day_status(day, blocked, booked, variations) -> DayStatus:
    covering = [v for v in variations if v.covers(day)]
    variation = max(covering, key=lambda v: v.id or 0) if covering else None

    if day in booked:
        state = BOOKED
    elif day in blocked:
        state = BLOCKED
    else:
        state = AVAILABLE

    return DayStatus(
        day=day,
        state=state,
        priced=variation is not None and state == AVAILABLE,
        price=variation.price if variation else None,
        booking_id=booked.get(day),
        variation_id=variation.id if variation else None,
    )


def status(listing_id: int, day) -> DayStatus:
    """
    Get the status of a single day.

    Args:
        listing_id: Listing ID
        day: Calendar date (date or ISO string)

    Returns:
        DayStatus
    """
    day = parse_date(day)
    return _day_status(
        day,
        get_blocked_dates(listing_id, day, day),
        get_booked_nights(listing_id, day, day),
        get_variations_for_listing(listing_id),
    )


def calendar(listing_id: int, first, last) -> list:
    """
    Get the status of every day from first to last (inclusive).

    Returns:
        list: DayStatus per day
    """
    first = parse_date(first, 'start')
    last = parse_date(last, 'end')
    validate_window(first, last)

    blocked = get_blocked_dates(listing_id, first, last)
    booked = get_booked_nights(listing_id, first, last)
    variations = get_variations_for_listing(listing_id)
    return [_day_status(day, blocked, booked, variations) for day in daterange(first, last)]


# =============================================================================
# BLOCKED DATES
# =============================================================================

def apply_blocks(conn, listing_id: int, dates: Iterable[date]) -> tuple:
    """
    Add dates to the blocked set on an open transaction.

    Booked dates are rejected, never merged. Already-blocked dates count
    as applied.

    Returns:
        tuple: (applied dates, rejected dates) as sets
    """
    dates = set(dates)
    if not dates:
        return set(), set()

    booked = get_booked_nights(listing_id, min(dates), max(dates), conn)
    rejected = {d for d in dates if d in booked}
    applied = dates - rejected

    conn.executemany('''
        INSERT OR IGNORE INTO listing_blocked_dates (listing_id, blocked_date)
        VALUES (?, ?)
    ''', [(listing_id, d.isoformat()) for d in sorted(applied)])

    if rejected:
        logger.info(
            f"[Availability] Listing {listing_id}: rejected {len(rejected)} booked date(s) "
            f"from block request: {_iso_list(rejected)}"
        )
    return applied, rejected


def remove_blocks(conn, listing_id: int, dates: Iterable[date]) -> set:
    """
    Remove dates from the blocked set on an open transaction.

    Returns:
        set: Dates that were actually blocked and are now removed
    """
    dates = set(dates)
    if not dates:
        return set()

    currently = get_blocked_dates(listing_id, min(dates), max(dates), conn)
    removed = dates & currently

    conn.executemany('''
        DELETE FROM listing_blocked_dates
        WHERE listing_id = ? AND blocked_date = ?
    ''', [(listing_id, d.isoformat()) for d in sorted(removed)])
    return removed


def set_blocked(listing_id: int, dates) -> dict:
    """
    Block a set of dates (partial success).

    Args:
        listing_id: Listing ID
        dates: Dates to block (date objects or ISO strings)

    Returns:
        dict: {'applied': [...], 'rejected': [...]} as ISO strings
    """
    dates = parse_dates(dates)

    with write_transaction() as conn:
        require_listing(listing_id, conn)
        applied, rejected = apply_blocks(conn, listing_id, dates)

    return {'applied': _iso_list(applied), 'rejected': _iso_list(rejected)}


def clear_blocked(listing_id: int, dates) -> dict:
    """
    Unblock a set of dates. Idempotent: never-blocked dates are a no-op.

    Returns:
        dict: {'removed': [...]}
    """
    dates = parse_dates(dates)

    with write_transaction() as conn:
        require_listing(listing_id, conn)
        removed = remove_blocks(conn, listing_id, dates)

    return {'removed': _iso_list(removed)}


def replace_blocked(listing_id: int, dates) -> dict:
    """
    Make the blocked set exactly `dates` (minus booked dates).

    This is what the calendar editor's save sends: the whole local
    blocked set.

    Returns:
        dict: {'applied': [...], 'rejected': [...], 'removed': [...]}
    """
    dates = parse_dates(dates, 'unavailableDates')

    with write_transaction() as conn:
        require_listing(listing_id, conn)
        current = get_blocked_dates(listing_id, conn=conn)
        removed = remove_blocks(conn, listing_id, current - dates)
        applied, rejected = apply_blocks(conn, listing_id, dates)

    logger.info(
        f"[Availability] Listing {listing_id} calendar saved: "
        f"{len(applied)} blocked, {len(removed)} unblocked, {len(rejected)} rejected"
    )
    return {
        'applied': _iso_list(applied),
        'rejected': _iso_list(rejected),
        'removed': _iso_list(removed),
    }


def bulk_update(listing_id: int, action: str, dates=None, start_date=None, end_date=None) -> dict:
    """
    Bulk availability operation.

    Actions:
        add:    block `dates`
        remove: unblock `dates`
        clear:  unblock every blocked date
        range:  block every day from start_date to end_date (inclusive)

    Returns:
        dict: applied / rejected / removed lists and the resulting blocked count
    """
    if action not in BULK_ACTIONS:
        raise ValidationError(MESSAGES['invalid_action'], field='action')

    if action in ('add', 'remove'):
        targets = parse_dates(dates)
    elif action == 'range':
        first = parse_date(start_date, 'startDate')
        last = parse_date(end_date, 'endDate')
        validate_window(first, last)
        targets = set(daterange(first, last))
    else:
        targets = set()

    applied, rejected, removed = set(), set(), set()

    with write_transaction() as conn:
        require_listing(listing_id, conn)

        if action in ('add', 'range'):
            applied, rejected = apply_blocks(conn, listing_id, targets)
        elif action == 'remove':
            removed = remove_blocks(conn, listing_id, targets)
        else:
            removed = remove_blocks(conn, listing_id, get_blocked_dates(listing_id, conn=conn))

        count = conn.execute(
            'SELECT COUNT(*) FROM listing_blocked_dates WHERE listing_id = ?',
            (listing_id,)
        ).fetchone()[0]

    return {
        'applied': _iso_list(applied),
        'rejected': _iso_list(rejected),
        'removed': _iso_list(removed),
        'count': count,
    }


# =============================================================================
# PRICING VARIATIONS
# =============================================================================

def get_pricing_variations(listing_id: int) -> list:
    """Get a listing's pricing variations (listing must exist)."""
    require_listing(listing_id)
    return get_variations_for_listing(listing_id)


def _variation_fields(start_date, end_date, price, reason) -> tuple:
    first = parse_date(start_date, 'startDate')
    last = parse_date(end_date, 'endDate')
    validate_window(first, last)
    price = validate_price(price)
    reason = sanitize_input(reason, max_length=200) or 'Custom Pricing'
    return first, last, price, reason


def _check_variation_overlap(conn, listing_id: int, first, last, exclude_id: int = None) -> None:
    span = DateRange.inclusive(first, last)
    for existing in get_variations_for_listing(listing_id, conn):
        if existing.id != exclude_id and existing.range.overlaps(span):
            raise ConflictError(
                MESSAGES['variation_overlap'],
                conflict={'reason': 'variation', 'variation': existing.to_dict()}
            )


def set_pricing_variation(listing_id: int, start_date, end_date, price, reason: str = None) -> PricingVariation:
    """
    Store a price override for the inclusive span start_date..end_date.

    Raises:
        ValidationError: Bad dates or non-positive price
        ConflictError: Span overlaps an existing variation of the listing

    Returns:
        PricingVariation: The stored variation
    """
    first, last, price, reason = _variation_fields(start_date, end_date, price, reason)

    with write_transaction() as conn:
        require_listing(listing_id, conn)
        _check_variation_overlap(conn, listing_id, first, last)

        cursor = conn.execute('''
            INSERT INTO pricing_variations (listing_id, start_date, end_date, price, reason)
            VALUES (?, ?, ?, ?, ?)
        ''', (listing_id, first.isoformat(), last.isoformat(), price, reason))

        row = conn.execute(
            'SELECT * FROM pricing_variations WHERE id = ?', (cursor.lastrowid,)
        ).fetchone()

    logger.info(f"[Availability] Listing {listing_id}: price {price} set for {first}..{last}")
    return PricingVariation.from_row(row)


def update_pricing_variation(
    listing_id: int,
    variation_id: int,
    start_date,
    end_date,
    price,
    reason: str = None
) -> PricingVariation:
    """
    Replace an existing variation's span, price and reason in place.

    The overlap check ignores the row being replaced. On any error the
    stored variation is left untouched.

    Raises:
        ValidationError: Bad dates or non-positive price
        NotFoundError: If the variation does not belong to the listing
        ConflictError: New span overlaps another variation of the listing
    """
    first, last, price, reason = _variation_fields(start_date, end_date, price, reason)

    with write_transaction() as conn:
        current = conn.execute('''
            SELECT id FROM pricing_variations WHERE id = ? AND listing_id = ?
        ''', (variation_id, listing_id)).fetchone()
        if current is None:
            raise NotFoundError(MESSAGES['variation_not_found'], variationId=variation_id)

        _check_variation_overlap(conn, listing_id, first, last, exclude_id=variation_id)

        conn.execute('''
            UPDATE pricing_variations
            SET start_date = ?, end_date = ?, price = ?, reason = ?
            WHERE id = ?
        ''', (first.isoformat(), last.isoformat(), price, reason, variation_id))

        row = conn.execute(
            'SELECT * FROM pricing_variations WHERE id = ?', (variation_id,)
        ).fetchone()

    logger.info(f"[Availability] Listing {listing_id}: variation {variation_id} now {price} for {first}..{last}")
    return PricingVariation.from_row(row)


def remove_pricing_variation(listing_id: int, variation_id: int) -> None:
    """
    Delete a pricing variation of a listing.

    Raises:
        NotFoundError: If the variation does not belong to the listing
    """
    with write_transaction() as conn:
        cursor = conn.execute('''
            DELETE FROM pricing_variations WHERE id = ? AND listing_id = ?
        ''', (variation_id, listing_id))

        if cursor.rowcount == 0:
            raise NotFoundError(MESSAGES['variation_not_found'], variationId=variation_id)
