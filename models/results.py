"""
Typed results returned by the conflict resolver and the price calculator.

Callers branch on the result type instead of catching exceptions, so a
conflict, a validation failure and a success stay distinguishable:

    result = can_book(listing_id, start, end)
    if isinstance(result, Conflict):
        ...
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Ok:
    """The requested dates are free."""

    ok = True


@dataclass(frozen=True)
class Conflict:
    """
    The requested dates collide with existing state.

    reason is 'booked' (overlaps a non-cancelled booking, booking_id set)
    or 'blocked' (one or more dates blocked by the host).
    """

    reason: str
    booking_id: Optional[int] = None
    dates: tuple = field(default_factory=tuple)

    ok = False

    def to_dict(self) -> dict:
        return {
            'reason': self.reason,
            'existingBookingId': self.booking_id,
            'dates': [d.isoformat() for d in self.dates],
        }


@dataclass(frozen=True)
class Invalid:
    """The request itself is malformed (bad range, bad guest count...)."""

    message: str
    field: Optional[str] = None

    ok = False
