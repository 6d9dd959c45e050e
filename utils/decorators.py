"""
Route decorators for authentication and authorization.
Calendar routes are restricted to the host of the listing in the URL.
"""

from functools import wraps

from flask import g
from flask_login import login_required, current_user

from models.listing import require_listing, is_listing_host
from utils.errors import AuthorizationError
from utils.messages import MESSAGES


def host_required(func):
    """
    Decorator to restrict a listing route to the listing's host.

    Loads the listing into g.listing. Raises NotFoundError for an unknown
    listing and AuthorizationError when the current user is not its host.

    Usage:
        @availability_bp.route('/listings/<int:listing_id>/availability', methods=['POST'])
        @login_required
        @host_required
        def update_availability(listing_id):
            ...
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        listing = require_listing(kwargs['listing_id'])

        if not is_listing_host(listing, current_user.id):
            raise AuthorizationError(MESSAGES['not_host'], listingId=listing['id'])

        g.listing = listing
        return func(*args, **kwargs)
    return wrapper


# Re-export login_required for convenience
__all__ = ['login_required', 'host_required']
