"""
Recurring block patterns.

A pattern (weekly or monthly) is expanded once, at apply time, into
concrete blocked dates. The stored recurring_blocks row is only a record
of what was applied; it is never re-expanded, and removing it leaves the
dates it blocked in place.

Selectors:
    weekly:  weekday indices, 0=Sunday .. 6=Saturday
    monthly: day-of-month numbers, 1 .. 31 (a day a month lacks never matches)
"""

import json
import logging
from datetime import date
from typing import Iterable

from database import get_db, write_transaction
from models.availability import apply_blocks
from models.date_range import daterange, parse_date
from models.listing import require_listing
from utils.errors import NotFoundError, ValidationError
from utils.messages import MESSAGES
from utils.validators import sanitize_input, validate_window

logger = logging.getLogger(__name__)

PATTERN_TYPES = {
    'weekly': {'min': 0, 'max': 6, 'kind': 'weekday numbers (0-6)'},
    'monthly': {'min': 1, 'max': 31, 'kind': 'days of month (1-31)'},
}


def sunday_based_weekday(day: date) -> int:
    """Weekday index with 0=Sunday (Python's weekday() has 0=Monday)."""
    return (day.weekday() + 1) % 7


def validate_selectors(pattern_type: str, selectors: Iterable) -> frozenset:
    """
    Validate pattern type and selectors.

    Returns:
        frozenset: The selector values as ints

    Raises:
        ValidationError: Unknown type, empty or out-of-range selectors
    """
    if pattern_type not in PATTERN_TYPES:
        raise ValidationError(MESSAGES['invalid_pattern_type'], field='type')

    rule = PATTERN_TYPES[pattern_type]
    error = ValidationError(MESSAGES['invalid_pattern'].format(kind=rule['kind']), field='pattern')

    if not selectors or isinstance(selectors, (str, bytes, dict)):
        raise error

    values = set()
    for selector in selectors:
        if isinstance(selector, bool):
            raise error
        try:
            value = int(selector)
        except (TypeError, ValueError):
            raise error
        if value != selector and str(value) != str(selector).strip():
            raise error
        if not rule['min'] <= value <= rule['max']:
            raise error
        values.add(value)

    return frozenset(values)


def expand(pattern_type: str, selectors: Iterable, window_start, window_end) -> set:
    """
    Expand a pattern into the concrete dates it selects.

    Args:
        pattern_type: 'weekly' or 'monthly'
        selectors: Weekday indices or days of month
        window_start: First day of the window (inclusive)
        window_end: Last day of the window (inclusive)

    Returns:
        set: Selected dates inside the window
    """
    values = validate_selectors(pattern_type, selectors)
    first = parse_date(window_start, 'startDate')
    last = parse_date(window_end, 'endDate')

    if last < first:
        raise ValidationError(MESSAGES['invalid_window'], field='endDate')

    if pattern_type == 'weekly':
        return {d for d in daterange(first, last) if sunday_based_weekday(d) in values}
    return {d for d in daterange(first, last) if d.day in values}


def apply_recurring_pattern(
    listing_id: int,
    pattern_type: str,
    selectors: Iterable,
    window_start,
    window_end,
    description: str = None
) -> dict:
    """
    Expand a pattern and block the resulting dates.

    Booked dates are rejected exactly as in set_blocked().

    Returns:
        dict: {'dates_added', 'applied', 'rejected', 'block_id'}
    """
    first = parse_date(window_start, 'startDate')
    last = parse_date(window_end, 'endDate')
    validate_window(first, last)
    values = validate_selectors(pattern_type, selectors)
    dates = expand(pattern_type, values, first, last)

    with write_transaction() as conn:
        require_listing(listing_id, conn)
        applied, rejected = apply_blocks(conn, listing_id, dates)

        cursor = conn.execute('''
            INSERT INTO recurring_blocks
            (listing_id, type, pattern, start_date, end_date, description, dates_added)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        ''', (
            listing_id, pattern_type, json.dumps(sorted(values)),
            first.isoformat(), last.isoformat(),
            sanitize_input(description, max_length=200) or 'Recurring Block',
            len(applied)
        ))
        block_id = cursor.lastrowid

    logger.info(
        f"[Recurring] Listing {listing_id}: {pattern_type} {sorted(values)} "
        f"{first}..{last} -> {len(applied)} blocked, {len(rejected)} rejected"
    )
    return {
        'dates_added': len(applied),
        'applied': [d.isoformat() for d in sorted(applied)],
        'rejected': [d.isoformat() for d in sorted(rejected)],
        'block_id': block_id,
    }


def get_recurring_blocks(listing_id: int) -> list:
    """Get the applied patterns of a listing, newest first."""
    require_listing(listing_id)
    rows = get_db().execute('''
        SELECT * FROM recurring_blocks WHERE listing_id = ? ORDER BY id DESC
    ''', (listing_id,)).fetchall()

    return [{
        'id': row['id'],
        'type': row['type'],
        'pattern': json.loads(row['pattern']),
        'startDate': row['start_date'],
        'endDate': row['end_date'],
        'description': row['description'],
        'datesAdded': row['dates_added'],
        'createdAt': row['created_at'],
    } for row in rows]


def remove_recurring_block(listing_id: int, block_id: int) -> None:
    """
    Delete a recurring pattern record. Already blocked dates stay blocked.

    Raises:
        NotFoundError: If the record does not belong to the listing
    """
    with write_transaction() as conn:
        cursor = conn.execute(
            'DELETE FROM recurring_blocks WHERE id = ? AND listing_id = ?',
            (block_id, listing_id)
        )
        if cursor.rowcount == 0:
            raise NotFoundError(MESSAGES['recurring_not_found'], blockId=block_id)
