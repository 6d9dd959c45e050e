"""
Listing model.
CRUD operations for rental listings (the single resource being booked).
"""

from typing import Optional

from database import get_db
from utils.errors import NotFoundError, ValidationError
from utils.messages import MESSAGES


def get_listing_by_id(listing_id: int) -> Optional[dict]:
    """
    Get a listing by ID.

    Args:
        listing_id: Listing ID

    Returns:
        dict or None: Listing data
    """
    row = get_db().execute(
        'SELECT * FROM listings WHERE id = ?', (listing_id,)
    ).fetchone()
    return dict(row) if row else None


def require_listing(listing_id: int, conn=None) -> dict:
    """
    Get a listing or raise NotFoundError.

    Args:
        listing_id: Listing ID
        conn: Optional connection already inside a transaction

    Returns:
        dict: Listing data
    """
    conn = conn or get_db()
    row = conn.execute('SELECT * FROM listings WHERE id = ?', (listing_id,)).fetchone()
    if row is None:
        raise NotFoundError(MESSAGES['listing_not_found'], listingId=listing_id)
    return dict(row)


def create_listing(
    owner_id: int,
    title: str,
    base_price: float,
    location: str = None,
    currency: str = 'INR'
) -> int:
    """
    Create a new listing.

    Args:
        owner_id: Host user ID
        title: Listing title
        base_price: Nightly base price (positive)
        location: Free text location
        currency: ISO currency code

    Returns:
        int: Listing ID

    Raises:
        ValidationError: If base price is not positive
    """
    if base_price is None or base_price <= 0:
        raise ValidationError(MESSAGES['invalid_price'], field='basePrice')

    db = get_db()
    cursor = db.execute('''
        INSERT INTO listings (owner_id, title, location, base_price, currency)
        VALUES (?, ?, ?, ?, ?)
    ''', (owner_id, title, location, base_price, currency))
    db.commit()
    return cursor.lastrowid


def is_listing_host(listing: dict, user_id: int) -> bool:
    """Whether the user hosts (owns) the listing."""
    return listing is not None and user_id is not None and listing['owner_id'] == user_id
