"""
Calendar API routes.
Blocked-date saves, bulk actions, per-day status, analytics and iCal export.
"""

from flask import Response, current_app, g, request
from flask_login import login_required

from models.analytics import get_availability_analytics
from models.availability import bulk_update, calendar, replace_blocked
from models.calendar_export import export_ical
from models.date_range import parse_date
from utils.api_response import api_success
from utils.datetime_helpers import get_today, window_end
from utils.decorators import host_required
from utils.errors import ValidationError
from utils.messages import MESSAGES
from utils.validators import get_json_body, validate_days


def register_routes(bp):
    """Register calendar routes on the blueprint."""

    @bp.route('/<int:listing_id>/availability', methods=['POST'])
    @login_required
    @host_required
    def update_availability(listing_id):
        """
        Replace the listing's blocked dates with the editor's set.

        Request body:
            unavailableDates: List of ISO dates (timestamps accepted)

        Returns:
            JSON with applied and rejected (booked) dates
        """
        data = get_json_body()
        dates = data.get('unavailableDates')
        # Only an explicit empty list clears the calendar
        if not isinstance(dates, list):
            raise ValidationError(
                MESSAGES['date_required'].format(field='unavailableDates'), field='unavailableDates'
            )
        result = replace_blocked(listing_id, dates)

        if result['rejected']:
            return api_success(
                message=MESSAGES['availability_partial'].format(count=len(result['rejected'])),
                **result
            )
        return api_success(message=MESSAGES['availability_updated'], **result)

    @bp.route('/<int:listing_id>/availability/calendar', methods=['GET'])
    @login_required
    @host_required
    def get_calendar(listing_id):
        """
        Per-day status between start and end (inclusive).

        Query params:
            start: First day (default today)
            end: Last day (default start + 89 days)
        """
        start = parse_date(request.args.get('start') or get_today(), 'start')
        end = parse_date(request.args.get('end') or window_end(start, 90), 'end')

        days = calendar(listing_id, start, end)
        return api_success(
            listingId=listing_id,
            basePrice=g.listing['base_price'],
            currency=g.listing['currency'],
            days=[day.to_dict() for day in days]
        )

    @bp.route('/<int:listing_id>/availability/bulk', methods=['POST'])
    @login_required
    @host_required
    def bulk_availability(listing_id):
        """
        Bulk update.

        Request body:
            action: add, remove, clear or range
            dates: ISO dates (add/remove)
            startDate, endDate: Inclusive window (range)
        """
        data = get_json_body()
        result = bulk_update(
            listing_id,
            data.get('action'),
            dates=data.get('dates'),
            start_date=data.get('startDate'),
            end_date=data.get('endDate'),
        )
        return api_success(message=MESSAGES['bulk_update_done'], **result)

    @bp.route('/<int:listing_id>/availability/analytics', methods=['GET'])
    @login_required
    @host_required
    def availability_analytics(listing_id):
        """
        Occupancy and revenue statistics for the next N days.

        Query params:
            days: Window length (default 90)
        """
        days = validate_days(
            request.args.get('days'),
            current_app.config['ANALYTICS_DEFAULT_DAYS'],
            current_app.config['ANALYTICS_MAX_DAYS']
        )
        return api_success(analytics=get_availability_analytics(listing_id, days))

    @bp.route('/<int:listing_id>/availability/export', methods=['GET'])
    @login_required
    @host_required
    def export_availability(listing_id):
        """Download blocked dates as an iCalendar file."""
        ical, filename = export_ical(listing_id)
        return Response(
            ical,
            mimetype='text/calendar',
            headers={'Content-Disposition': f'attachment; filename="{filename}"'}
        )
