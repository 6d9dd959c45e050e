"""
Host calendar API routes package.
Split into smaller modules by concern for maintainability.
"""

from flask import Blueprint

# Create the availability blueprint (mounted under /listings)
availability_bp = Blueprint('availability', __name__)

# Import and register routes from submodules
from blueprints.availability import calendar
from blueprints.availability import pricing
from blueprints.availability import recurring

# Register all route functions on the blueprint
calendar.register_routes(availability_bp)
pricing.register_routes(availability_bp)
recurring.register_routes(availability_bp)
