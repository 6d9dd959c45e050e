"""
Pricing variation API routes.
Host overrides of the nightly price for date spans.
"""

from flask import g
from flask_login import login_required

from models.availability import (
    get_pricing_variations, set_pricing_variation, update_pricing_variation,
    remove_pricing_variation
)
from models.pricing import plain_amount
from utils.api_response import api_success
from utils.decorators import host_required
from utils.messages import MESSAGES
from utils.validators import get_json_body


def register_routes(bp):
    """Register pricing variation routes on the blueprint."""

    @bp.route('/<int:listing_id>/availability/pricing-variations', methods=['GET'])
    @login_required
    @host_required
    def list_pricing_variations(listing_id):
        """Base price and all variations of the listing."""
        variations = get_pricing_variations(listing_id)
        return api_success(
            basePrice=plain_amount(g.listing['base_price']),
            variations=[v.to_dict() for v in variations]
        )

    @bp.route('/<int:listing_id>/availability/pricing-variations', methods=['POST'])
    @login_required
    @host_required
    def add_pricing_variation(listing_id):
        """
        Add a pricing variation.

        Request body:
            startDate: First priced day
            endDate: Last priced day (inclusive)
            price: Nightly price (positive)
            reason: Optional label
        """
        data = get_json_body()
        variation = set_pricing_variation(
            listing_id,
            data.get('startDate'),
            data.get('endDate'),
            data.get('price'),
            data.get('reason'),
        )
        return api_success(
            message=MESSAGES['variation_added'],
            status=201,
            variation=variation.to_dict()
        )

    @bp.route('/<int:listing_id>/availability/pricing-variations/<int:variation_id>', methods=['PUT'])
    @login_required
    @host_required
    def replace_pricing_variation(listing_id, variation_id):
        """
        Replace a variation's span and price in one transaction.

        Request body:
            startDate, endDate, price, reason (as for POST)
        """
        data = get_json_body()
        variation = update_pricing_variation(
            listing_id,
            variation_id,
            data.get('startDate'),
            data.get('endDate'),
            data.get('price'),
            data.get('reason'),
        )
        return api_success(message=MESSAGES['variation_updated'], variation=variation.to_dict())

    @bp.route('/<int:listing_id>/availability/pricing-variations/<int:variation_id>', methods=['DELETE'])
    @login_required
    @host_required
    def delete_pricing_variation(listing_id, variation_id):
        """Remove a pricing variation."""
        remove_pricing_variation(listing_id, variation_id)
        return api_success(message=MESSAGES['variation_removed'])
