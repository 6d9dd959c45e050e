"""
Guest booking API routes package.
"""

from flask import Blueprint

# Create the bookings blueprint (mounted under /bookings)
bookings_bp = Blueprint('bookings', __name__)

# Import and register routes from submodules
from blueprints.bookings import checkout
from blueprints.bookings import payments

# Register all route functions on the blueprint
checkout.register_routes(bookings_bp)
payments.register_routes(bookings_bp)
