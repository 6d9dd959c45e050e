"""
Booking API routes.
Availability checks, quotes, checkout sessions and cancellation.
"""

import logging

from flask import current_app
from flask_login import login_required, current_user

from models.booking import (
    attach_checkout_session, booking_to_dict, cancel_booking,
    create_booking, get_booking_by_id
)
from models.conflict import can_book
from models.date_range import DateRange, parse_date
from models.listing import require_listing, is_listing_host
from models.pricing import PriceQuote, quote_for_listing
from models.results import Conflict, Invalid
from services.payments import PaymentError, get_payment_processor
from utils.api_response import api_success, api_error
from utils.datetime_helpers import get_today
from utils.errors import AuthorizationError, NotFoundError, ValidationError
from utils.messages import MESSAGES
from utils.validators import get_json_body, validate_guest_count

logger = logging.getLogger(__name__)


def _read_stay(data: dict) -> tuple:
    """Listing ID and stay from a request body. Stays may not start in the past."""
    listing_id = data.get('listingId')
    if listing_id is None:
        raise ValidationError(MESSAGES['date_required'].format(field='listingId'), field='listingId')
    try:
        listing_id = int(listing_id)
    except (TypeError, ValueError):
        raise ValidationError(MESSAGES['listing_not_found'], field='listingId')

    stay = DateRange(
        parse_date(data.get('startDate'), 'startDate'),
        parse_date(data.get('endDate'), 'endDate')
    )
    if stay.start < get_today():
        raise ValidationError(MESSAGES['past_date'], field='startDate')
    return listing_id, stay


def _same_number(value, expected, tolerance=0.0) -> bool:
    try:
        return abs(float(value) - float(expected)) <= tolerance
    except (TypeError, ValueError):
        return False


def _quote_or_raise(listing_id: int, stay: DateRange, guests: int) -> PriceQuote:
    quote = quote_for_listing(listing_id, stay.start, stay.end, guests)
    if isinstance(quote, Invalid):
        raise ValidationError(quote.message, field=quote.field)
    return quote


def register_routes(bp):
    """Register booking routes on the blueprint."""

    @bp.route('/check-availability', methods=['POST'])
    @login_required
    def check_availability():
        """
        Check whether a stay can be booked.

        Request body:
            listingId, startDate, endDate (checkout day, not a night)

        Returns:
            JSON with available flag and the conflict when unavailable
        """
        listing_id, stay = _read_stay(get_json_body())
        require_listing(listing_id)

        result = can_book(listing_id, stay.start, stay.end)
        if isinstance(result, Invalid):
            raise ValidationError(result.message, field=result.field)
        if isinstance(result, Conflict):
            message = MESSAGES['dates_booked'] if result.reason == 'booked' else MESSAGES['dates_blocked']
            return api_success(message=message, available=False, conflict=result.to_dict())

        return api_success(available=True, nights=stay.nights)

    @bp.route('/quote', methods=['POST'])
    @login_required
    def quote():
        """
        Price breakdown for a stay.

        Request body:
            listingId, startDate, endDate, guests
        """
        data = get_json_body()
        listing_id, stay = _read_stay(data)
        guests = validate_guest_count(data.get('guests'))

        price = _quote_or_raise(listing_id, stay, guests)
        return api_success(quote=price.to_dict(), currency=current_app.config['CURRENCY'])

    @bp.route('/create-checkout-session', methods=['POST'])
    @login_required
    def create_checkout_session():
        """
        Create a booking and a hosted checkout session for it.

        The total is recomputed here; a client total or night count that
        disagrees with the server is rejected with the fresh quote.

        Request body:
            listingId, startDate, endDate, guests, totalPrice, nights

        Returns:
            JSON with the checkout url and bookingId
        """
        data = get_json_body()
        listing_id, stay = _read_stay(data)
        guests = validate_guest_count(data.get('guests'))

        listing = require_listing(listing_id)
        if is_listing_host(listing, current_user.id):
            raise ValidationError(MESSAGES['own_listing'], field='listingId')

        price = _quote_or_raise(listing_id, stay, guests)

        nights = data.get('nights')
        if nights is not None and not _same_number(nights, price.nights):
            return api_error(MESSAGES['nights_mismatch'], status=400, quote=price.to_dict())

        total = data.get('totalPrice')
        if total is not None and not _same_number(total, price.total, tolerance=0.5):
            return api_error(MESSAGES['price_changed'], status=400, quote=price.to_dict())

        # Conflicts surface as ConflictError (409) from the atomic insert
        booking_id = create_booking(
            listing_id, current_user.id, stay.start, stay.end, guests, price.total
        )

        try:
            session = get_payment_processor().create_checkout_session(
                booking_id, price.total, listing['currency'],
                description=f"{listing['title']} {stay}"
            )
        except PaymentError:
            # Release the nights; the guest can retry immediately
            cancel_booking(booking_id)
            return api_error(MESSAGES['payment_unavailable'], status=502)

        attach_checkout_session(booking_id, session.session_id, session.url)
        logger.info(f"[Booking] Checkout session {session.session_id} for booking {booking_id}")

        return api_success(
            status=201,
            url=session.url,
            bookingId=booking_id,
            quote=price.to_dict()
        )

    @bp.route('/<int:booking_id>', methods=['GET'])
    @login_required
    def get_booking(booking_id):
        """Booking details for its guest or the listing's host."""
        booking = get_booking_by_id(booking_id)
        if not booking:
            raise NotFoundError(MESSAGES['booking_not_found'], bookingId=booking_id)
        if current_user.id not in (booking['guest_id'], booking['host_id']):
            raise AuthorizationError(MESSAGES['booking_not_found'], bookingId=booking_id)
        return api_success(booking=booking_to_dict(booking))

    @bp.route('/<int:booking_id>/cancel', methods=['POST'])
    @login_required
    def cancel(booking_id):
        """Cancel a booking (guest or host). Its nights become free again."""
        booking = get_booking_by_id(booking_id)
        if not booking:
            raise NotFoundError(MESSAGES['booking_not_found'], bookingId=booking_id)
        if current_user.id not in (booking['guest_id'], booking['host_id']):
            raise AuthorizationError(MESSAGES['booking_not_found'], bookingId=booking_id)

        booking = cancel_booking(booking_id)
        return api_success(message=MESSAGES['booking_cancelled'], booking=booking_to_dict(booking))
