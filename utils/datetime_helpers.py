"""
Calendar-date helpers for the availability service.

"Today" is the listing market's date (TIMEZONE), not the server's, so a
night that has started in the market can no longer be booked.
"""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from flask import current_app


def get_timezone() -> ZoneInfo:
    """Get the configured timezone."""
    return ZoneInfo(current_app.config.get('TIMEZONE', 'Asia/Kolkata'))


def get_today() -> date:
    """Today's calendar date in the configured timezone."""
    return datetime.now(get_timezone()).date()


def window_end(first: date, days: int) -> date:
    """Last day of an inclusive window of `days` days starting at first."""
    return first + timedelta(days=days - 1)
