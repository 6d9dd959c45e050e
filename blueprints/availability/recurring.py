"""
Recurring block API routes.
Weekly/monthly patterns expanded into blocked dates at apply time.
"""

from flask_login import login_required

from models.recurring import (
    apply_recurring_pattern, get_recurring_blocks, remove_recurring_block
)
from utils.api_response import api_success
from utils.decorators import host_required
from utils.messages import MESSAGES
from utils.validators import get_json_body


def register_routes(bp):
    """Register recurring block routes on the blueprint."""

    @bp.route('/<int:listing_id>/availability/recurring-blocks', methods=['POST'])
    @login_required
    @host_required
    def add_recurring_block(listing_id):
        """
        Apply a recurring pattern.

        Request body:
            type: weekly or monthly
            pattern: Weekday indices (0=Sunday) or days of month (1-31)
            startDate, endDate: Inclusive window
            description: Optional label

        Returns:
            JSON with datesAdded, the applied and rejected dates and blockId
        """
        data = get_json_body()
        result = apply_recurring_pattern(
            listing_id,
            data.get('type'),
            data.get('pattern'),
            data.get('startDate'),
            data.get('endDate'),
            data.get('description'),
        )
        return api_success(
            message=MESSAGES['recurring_applied'],
            datesAdded=result['dates_added'],
            applied=result['applied'],
            rejected=result['rejected'],
            blockId=result['block_id'],
        )

    @bp.route('/<int:listing_id>/availability/recurring-blocks', methods=['GET'])
    @login_required
    @host_required
    def list_recurring_blocks(listing_id):
        """Applied patterns of the listing."""
        return api_success(recurringBlocks=get_recurring_blocks(listing_id))

    @bp.route('/<int:listing_id>/availability/recurring-blocks/<int:block_id>', methods=['DELETE'])
    @login_required
    @host_required
    def delete_recurring_block(listing_id, block_id):
        """Remove a pattern record (blocked dates stay blocked)."""
        remove_recurring_block(listing_id, block_id)
        return api_success(message=MESSAGES['recurring_removed'])
