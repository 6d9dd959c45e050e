"""
Tests for booking conflict resolution.
"""

import threading
from datetime import date

from models.availability import set_blocked
from models.booking import cancel_booking, create_booking
from models.conflict import can_book, find_conflict
from models.date_range import DateRange
from models.results import Conflict, Invalid, Ok
from utils.errors import ConflictError


class TestCanBook:
    """Tests for can_book against stored state."""

    def test_free_dates(self, app_ctx):
        assert isinstance(can_book(1, '2025-06-01', '2025-06-05'), Ok)

    def test_overlapping_booking(self, app_ctx):
        """A books 1-5 June; 3-7 June is rejected as booked."""
        booking_id = create_booking(1, 2, '2025-06-01', '2025-06-05', 2, 8000)

        result = can_book(1, '2025-06-03', '2025-06-07')

        assert isinstance(result, Conflict)
        assert result.reason == 'booked'
        assert result.booking_id == booking_id

    def test_checkout_day_is_free(self, app_ctx):
        create_booking(1, 2, '2025-06-01', '2025-06-05', 2, 8000)
        assert isinstance(can_book(1, '2025-06-05', '2025-06-08'), Ok)
        assert isinstance(can_book(1, '2025-05-28', '2025-06-01'), Ok)

    def test_blocked_dates(self, app_ctx):
        """Host blocks 1-10 July; a 5-6 July stay is rejected as blocked."""
        set_blocked(1, [date(2025, 7, d) for d in range(1, 11)])

        result = can_book(1, '2025-07-05', '2025-07-06')

        assert isinstance(result, Conflict)
        assert result.reason == 'blocked'
        assert result.dates == (date(2025, 7, 5),)
        assert result.booking_id is None

    def test_cancelled_booking_ignored(self, app_ctx):
        booking_id = create_booking(1, 2, '2025-06-01', '2025-06-05', 2, 8000)
        cancel_booking(booking_id)
        assert isinstance(can_book(1, '2025-06-03', '2025-06-07'), Ok)

    def test_invalid_range(self, app_ctx):
        assert isinstance(can_book(1, '2025-06-05', '2025-06-05'), Invalid)
        assert isinstance(can_book(1, 'soon', '2025-06-05'), Invalid)

    def test_other_listing_unaffected(self, app_ctx):
        from models.listing import create_listing

        other = create_listing(1, 'Hill Cabin', 1500)
        create_booking(1, 2, '2025-06-01', '2025-06-05', 2, 8000)
        assert isinstance(can_book(other, '2025-06-01', '2025-06-05'), Ok)


class TestFindConflict:
    """Tests for the in-memory check."""

    def test_booked_before_blocked(self):
        bookings = [{'id': 4, 'start_date': '2025-06-01', 'end_date': '2025-06-05', 'status': 'paid'}]
        stay = DateRange(date(2025, 6, 4), date(2025, 6, 6))

        result = find_conflict(bookings, {date(2025, 6, 5)}, stay)

        assert result.reason == 'booked'
        assert result.to_dict() == {'reason': 'booked', 'existingBookingId': 4, 'dates': []}

    def test_cancelled_skipped(self):
        bookings = [{'id': 4, 'start_date': '2025-06-01', 'end_date': '2025-06-05', 'status': 'cancelled'}]
        stay = DateRange(date(2025, 6, 2), date(2025, 6, 3))
        assert find_conflict(bookings, set(), stay).ok


class TestNoDoubleAccept:
    """Overlapping bookings can never both be accepted."""

    def test_sequential(self, app_ctx):
        create_booking(1, 2, '2025-06-01', '2025-06-05', 2, 8000)
        try:
            create_booking(1, 2, '2025-06-04', '2025-06-06', 2, 4000)
            accepted = True
        except ConflictError:
            accepted = False
        assert not accepted

    def test_concurrent_requests(self, app):
        """Two threads race for overlapping stays; exactly one wins."""
        barrier = threading.Barrier(2)
        results = []
        lock = threading.Lock()

        def attempt(start, end):
            with app.app_context():
                barrier.wait()
                try:
                    outcome = create_booking(1, 2, start, end, 2, 8000)
                except ConflictError:
                    outcome = 'conflict'
                with lock:
                    results.append(outcome)

        threads = [
            threading.Thread(target=attempt, args=('2025-06-01', '2025-06-05')),
            threading.Thread(target=attempt, args=('2025-06-03', '2025-06-07')),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert sorted(results, key=str).count('conflict') == 1
        assert len([r for r in results if isinstance(r, int)]) == 1
