"""
Payment processor callback.

The processor confirms (or fails) a checkout asynchronously by posting
here. Requests are authenticated with an HMAC-SHA256 signature of the raw
body, keyed with PAYMENT_WEBHOOK_SECRET, in the X-Payment-Signature header.
"""

import hashlib
import hmac
import logging

from flask import current_app, request

from extensions import csrf
from models.booking import booking_to_dict, get_booking_by_id, mark_booking_paid, mark_payment_failed
from utils.api_response import api_success
from utils.errors import AuthorizationError, NotFoundError, ValidationError
from utils.messages import MESSAGES
from utils.validators import get_json_body

logger = logging.getLogger(__name__)

PAYMENT_EVENTS = ('paid', 'failed')


def sign_payload(secret: str, body: bytes) -> str:
    """Hex HMAC-SHA256 of a webhook body."""
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def register_routes(bp):
    """Register payment callback routes on the blueprint."""

    @bp.route('/payment-webhook', methods=['POST'])
    @csrf.exempt
    def payment_webhook():
        """
        Payment confirmation callback.

        Request body:
            bookingId: Booking the checkout belongs to
            sessionId: Checkout session ID (optional, checked when present)
            status: paid or failed
        """
        secret = current_app.config.get('PAYMENT_WEBHOOK_SECRET')
        signature = request.headers.get('X-Payment-Signature', '')
        if not secret or not hmac.compare_digest(sign_payload(secret, request.get_data()), signature):
            logger.warning('[Payments] Webhook rejected: bad signature')
            raise AuthorizationError('Invalid signature')

        data = get_json_body()
        status = data.get('status')
        if status not in PAYMENT_EVENTS:
            raise ValidationError(MESSAGES['invalid_action'], field='status')

        booking = get_booking_by_id(data.get('bookingId'))
        if not booking:
            raise NotFoundError(MESSAGES['booking_not_found'], bookingId=data.get('bookingId'))

        session_id = data.get('sessionId')
        if session_id and session_id != booking['checkout_session_id']:
            raise ValidationError('Checkout session does not match booking', field='sessionId')

        if status == 'paid':
            booking = mark_booking_paid(booking['id'])
        else:
            mark_payment_failed(booking['id'])
            booking = get_booking_by_id(booking['id'])

        return api_success(booking=booking_to_dict(booking))
