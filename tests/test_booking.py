"""
Tests for booking creation and lifecycle.
"""

import pytest

from database import get_db
from models.availability import get_booked_nights, set_blocked
from models.booking import (
    attach_checkout_session, booking_to_dict, cancel_booking, create_booking,
    get_booking_by_id, get_bookings_for_listing, mark_booking_paid, mark_payment_failed
)
from utils.errors import ConflictError, NotFoundError, ValidationError


class TestCreateBooking:
    """Tests for atomic booking creation."""

    def test_creates_booking_and_nights(self, app_ctx):
        booking_id = create_booking(1, 2, '2025-06-01', '2025-06-04', 2, 6825)

        booking = get_booking_by_id(booking_id)
        assert booking['status'] == 'created'
        assert booking['payment_status'] == 'pending'
        assert booking['nights'] == 3
        assert booking['host_id'] == 1
        assert sorted(d.isoformat() for d in get_booked_nights(1)) == [
            '2025-06-01', '2025-06-02', '2025-06-03'
        ]

    def test_overlap_raises_conflict(self, app_ctx):
        first = create_booking(1, 2, '2025-06-01', '2025-06-05', 2, 8000)

        with pytest.raises(ConflictError) as exc:
            create_booking(1, 2, '2025-06-03', '2025-06-07', 2, 8000)

        assert exc.value.status == 409
        assert exc.value.details['conflict']['existingBookingId'] == first
        assert len(get_bookings_for_listing(1)) == 1

    def test_blocked_raises_conflict(self, app_ctx):
        set_blocked(1, ['2025-07-05'])

        with pytest.raises(ConflictError) as exc:
            create_booking(1, 2, '2025-07-05', '2025-07-06', 1, 2000)
        assert exc.value.details['conflict'] == {
            'reason': 'blocked', 'existingBookingId': None, 'dates': ['2025-07-05']
        }

    def test_invalid_range(self, app_ctx):
        with pytest.raises(ValidationError):
            create_booking(1, 2, '2025-06-05', '2025-06-01', 2, 8000)

    def test_unknown_listing(self, app_ctx):
        with pytest.raises(NotFoundError):
            create_booking(42, 2, '2025-06-01', '2025-06-05', 2, 8000)

    def test_unique_night_index_is_last_line_of_defence(self, app_ctx):
        """A night row left without a live booking still blocks the insert."""
        db = get_db()
        cursor = db.execute('''
            INSERT INTO bookings (listing_id, guest_id, start_date, end_date, nights, total_price, status)
            VALUES (1, 2, '2025-09-02', '2025-09-03', 1, 2000, 'cancelled')
        ''')
        db.execute(
            "INSERT INTO booking_nights (booking_id, listing_id, night_date) VALUES (?, 1, '2025-09-02')",
            (cursor.lastrowid,)
        )
        db.commit()

        with pytest.raises(ConflictError):
            create_booking(1, 2, '2025-09-01', '2025-09-04', 2, 6000)
        assert get_bookings_for_listing(1) == []


class TestLifecycle:
    """Tests for payment and cancellation transitions."""

    def test_mark_paid(self, app_ctx):
        booking_id = create_booking(1, 2, '2025-06-01', '2025-06-04', 2, 6825)
        attach_checkout_session(booking_id, 'cs_test_1', 'https://pay.example/cs_test_1')

        booking = mark_booking_paid(booking_id)

        assert booking['status'] == 'paid'
        assert booking['payment_status'] == 'paid'
        assert booking['checkout_session_id'] == 'cs_test_1'
        assert mark_booking_paid(booking_id)['status'] == 'paid'

    def test_cancel_unpaid_releases_nights(self, app_ctx):
        booking_id = create_booking(1, 2, '2025-06-01', '2025-06-04', 2, 6825)

        booking = cancel_booking(booking_id)

        assert booking['status'] == 'cancelled'
        assert booking['payment_status'] == 'failed'
        assert get_booked_nights(1) == {}
        create_booking(1, 2, '2025-06-01', '2025-06-04', 2, 6825)

    def test_cancel_paid_keeps_payment_status(self, app_ctx):
        booking_id = create_booking(1, 2, '2025-06-01', '2025-06-04', 2, 6825)
        mark_booking_paid(booking_id)
        assert cancel_booking(booking_id)['payment_status'] == 'paid'

    def test_cancel_twice(self, app_ctx):
        booking_id = create_booking(1, 2, '2025-06-01', '2025-06-04', 2, 6825)
        cancel_booking(booking_id)
        with pytest.raises(ConflictError):
            cancel_booking(booking_id)

    def test_cancelled_booking_cannot_be_paid(self, app_ctx):
        booking_id = create_booking(1, 2, '2025-06-01', '2025-06-04', 2, 6825)
        cancel_booking(booking_id)
        with pytest.raises(ConflictError):
            mark_booking_paid(booking_id)

    def test_failed_payment_keeps_nights(self, app_ctx):
        booking_id = create_booking(1, 2, '2025-06-01', '2025-06-04', 2, 6825)
        mark_payment_failed(booking_id)

        booking = get_booking_by_id(booking_id)
        assert booking['status'] == 'created'
        assert booking['payment_status'] == 'failed'
        assert len(get_booked_nights(1)) == 3

    def test_unknown_booking(self, app_ctx):
        with pytest.raises(NotFoundError):
            cancel_booking(999)

    def test_to_dict(self, app_ctx):
        booking_id = create_booking(1, 2, '2025-06-01', '2025-06-04', 3, 7245)
        data = booking_to_dict(get_booking_by_id(booking_id))
        assert data['totalPrice'] == 7245
        assert data['guests'] == 3
        assert data['startDate'] == '2025-06-01'
