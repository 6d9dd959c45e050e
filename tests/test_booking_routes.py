"""
Tests for the booking API routes: checks, quotes, checkout and payment
callbacks.
"""

import json

import pytest

from blueprints.bookings.payments import sign_payload
from services.payments import PaymentError

STAY = {'listingId': 1, 'startDate': '2030-06-01', 'endDate': '2030-06-04', 'guests': 2}


def checkout(client, **overrides):
    return client.post('/bookings/create-checkout-session', json={**STAY, **overrides})


def post_webhook(client, payload, secret='test-webhook-secret'):
    body = json.dumps(payload).encode()
    return client.post(
        '/bookings/payment-webhook',
        data=body,
        content_type='application/json',
        headers={'X-Payment-Signature': sign_payload(secret, body)}
    )


class FailingProcessor:
    def create_checkout_session(self, *args, **kwargs):
        raise PaymentError('processor down')


class TestCheckAvailability:
    """POST /bookings/check-availability"""

    def test_requires_login(self, client):
        response = client.post('/bookings/check-availability', json=STAY)
        assert response.status_code == 401
        assert response.get_json()['message'] == 'Please sign in to continue'

    def test_free_dates(self, guest_client):
        data = guest_client.post('/bookings/check-availability', json=STAY).get_json()

        assert data['available'] is True
        assert data['nights'] == 3

    def test_blocked_dates(self, host_client, guest_client):
        host_client.post('/listings/1/availability', json={'unavailableDates': ['2030-06-02']})

        data = guest_client.post('/bookings/check-availability', json=STAY).get_json()

        assert data['available'] is False
        assert data['conflict']['reason'] == 'blocked'
        assert data['conflict']['dates'] == ['2030-06-02']

    def test_checkout_day_may_be_blocked(self, host_client, guest_client):
        host_client.post('/listings/1/availability', json={'unavailableDates': ['2030-06-04']})

        data = guest_client.post('/bookings/check-availability', json=STAY).get_json()

        assert data['available'] is True

    def test_past_start(self, guest_client):
        response = guest_client.post('/bookings/check-availability', json={
            **STAY, 'startDate': '2001-01-01', 'endDate': '2001-01-03'
        })
        assert response.status_code == 400
        assert response.get_json()['message'] == 'You cannot book for a past date'

    def test_end_before_start(self, guest_client):
        response = guest_client.post('/bookings/check-availability', json={
            **STAY, 'startDate': '2030-06-04', 'endDate': '2030-06-01'
        })
        assert response.status_code == 400


class TestQuote:
    """POST /bookings/quote"""

    def test_quote(self, guest_client):
        data = guest_client.post('/bookings/quote', json=STAY).get_json()

        assert data['currency'] == 'INR'
        assert data['quote']['subtotal'] == 6000
        assert data['quote']['serviceFee'] == 325
        assert data['quote']['total'] == 6825

    def test_invalid_guests(self, guest_client):
        response = guest_client.post('/bookings/quote', json={**STAY, 'guests': 0})
        assert response.status_code == 400

    def test_unknown_listing(self, guest_client):
        response = guest_client.post('/bookings/quote', json={**STAY, 'listingId': 42})
        assert response.status_code == 404


class TestCreateCheckoutSession:
    """POST /bookings/create-checkout-session"""

    def test_emulated_checkout(self, guest_client):
        response = checkout(guest_client, totalPrice=6825, nights=3)
        data = response.get_json()

        assert response.status_code == 201
        assert '/checkout/cs_test_' in data['url']
        assert data['quote']['total'] == 6825

        booking = guest_client.get(f"/bookings/{data['bookingId']}").get_json()['booking']
        assert booking['status'] == 'created'
        assert booking['paymentStatus'] == 'pending'
        assert booking['checkoutUrl'] == data['url']

    def test_overlap_is_conflict(self, guest_client):
        first = checkout(guest_client).get_json()

        response = checkout(guest_client, startDate='2030-06-03', endDate='2030-06-06')
        data = response.get_json()

        assert response.status_code == 409
        assert data['conflict']['reason'] == 'booked'
        assert data['conflict']['existingBookingId'] == first['bookingId']

    def test_back_to_back_stays(self, guest_client):
        assert checkout(guest_client).status_code == 201
        response = checkout(guest_client, startDate='2030-06-04', endDate='2030-06-06')
        assert response.status_code == 201

    def test_blocked_is_conflict(self, host_client, guest_client):
        host_client.post('/listings/1/availability', json={'unavailableDates': ['2030-06-03']})

        response = checkout(guest_client)

        assert response.status_code == 409
        assert response.get_json()['conflict']['reason'] == 'blocked'

    def test_price_mismatch(self, guest_client):
        response = checkout(guest_client, totalPrice=100)
        data = response.get_json()

        assert response.status_code == 400
        assert data['message'] == 'The price for these dates has changed, please review it'
        assert data['quote']['total'] == 6825

    def test_nights_mismatch(self, guest_client):
        response = checkout(guest_client, nights=2)
        assert response.status_code == 400
        assert response.get_json()['quote']['nights'] == 3

    def test_host_cannot_book_own_listing(self, host_client):
        response = checkout(host_client)
        assert response.status_code == 400
        assert response.get_json()['message'] == 'You cannot book your own listing'

    def test_payment_failure_releases_dates(self, app, guest_client):
        app.extensions['payments'] = FailingProcessor()

        response = checkout(guest_client)

        assert response.status_code == 502
        data = guest_client.post('/bookings/check-availability', json=STAY).get_json()
        assert data['available'] is True


class TestBookingAccess:
    """GET /bookings/<id> and POST /bookings/<id>/cancel"""

    @pytest.fixture
    def booking_id(self, guest_client):
        return checkout(guest_client).get_json()['bookingId']

    @pytest.fixture
    def stranger_client(self, app):
        from models.user import create_user

        with app.app_context():
            create_user('stranger', 'stranger@example.com', 'stranger123')

        client = app.test_client()
        client.post('/login', json={'username': 'stranger', 'password': 'stranger123'})
        return client

    def test_host_can_view(self, host_client, booking_id):
        response = host_client.get(f'/bookings/{booking_id}')
        assert response.status_code == 200

    def test_stranger_cannot_view_or_cancel(self, stranger_client, booking_id):
        assert stranger_client.get(f'/bookings/{booking_id}').status_code == 403
        assert stranger_client.post(f'/bookings/{booking_id}/cancel').status_code == 403

    def test_unknown_booking(self, guest_client):
        assert guest_client.get('/bookings/999').status_code == 404

    def test_cancel_frees_dates(self, guest_client, booking_id):
        response = guest_client.post(f'/bookings/{booking_id}/cancel')
        booking = response.get_json()['booking']

        assert booking['status'] == 'cancelled'
        assert booking['paymentStatus'] == 'failed'
        assert checkout(guest_client).status_code == 201

    def test_cancel_twice(self, guest_client, booking_id):
        guest_client.post(f'/bookings/{booking_id}/cancel')
        assert guest_client.post(f'/bookings/{booking_id}/cancel').status_code == 409


class TestPaymentWebhook:
    """POST /bookings/payment-webhook"""

    @pytest.fixture
    def booking_id(self, guest_client):
        return checkout(guest_client).get_json()['bookingId']

    def test_paid(self, client, guest_client, booking_id):
        response = post_webhook(client, {'bookingId': booking_id, 'status': 'paid'})
        booking = response.get_json()['booking']

        assert response.status_code == 200
        assert booking['status'] == 'paid'
        assert booking['paymentStatus'] == 'paid'

    def test_paid_is_idempotent(self, client, booking_id):
        post_webhook(client, {'bookingId': booking_id, 'status': 'paid'})
        response = post_webhook(client, {'bookingId': booking_id, 'status': 'paid'})
        assert response.get_json()['booking']['status'] == 'paid'

    def test_failed_keeps_dates_held(self, client, guest_client, booking_id):
        booking = post_webhook(client, {'bookingId': booking_id, 'status': 'failed'}).get_json()['booking']

        assert booking['status'] == 'created'
        assert booking['paymentStatus'] == 'failed'
        assert checkout(guest_client).status_code == 409

    def test_bad_signature(self, client, booking_id):
        response = post_webhook(client, {'bookingId': booking_id, 'status': 'paid'}, secret='wrong')
        assert response.status_code == 403

    def test_session_mismatch(self, client, booking_id):
        response = post_webhook(client, {
            'bookingId': booking_id, 'sessionId': 'cs_other', 'status': 'paid'
        })
        assert response.status_code == 400

    def test_unknown_status(self, client, booking_id):
        response = post_webhook(client, {'bookingId': booking_id, 'status': 'refunded'})
        assert response.status_code == 400
