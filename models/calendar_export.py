"""
iCalendar export of a listing's blocked dates.
One all-day VEVENT per blocked date so external calendars can import them.
"""

import re

from icalendar import Calendar, Event

from models.availability import get_blocked_dates
from models.date_range import ONE_DAY
from models.listing import require_listing

PRODID = '-//WanderLust//Availability Calendar//EN'
UID_DOMAIN = 'wanderlust.com'


def export_filename(title: str) -> str:
    """Download filename: non alphanumeric characters become underscores."""
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', title)}_blocked_dates.ics"


def build_ical(listing: dict, blocked_dates) -> bytes:
    """
    Render a VCALENDAR document.

    Args:
        listing: Listing dict (id, title)
        blocked_dates: Iterable of blocked dates

    Returns:
        bytes: iCalendar content (CRLF line endings, folded lines)
    """
    cal = Calendar()
    cal.add('prodid', PRODID)
    cal.add('version', '2.0')
    cal.add('x-wr-calname', f"{listing['title']} - Blocked Dates")

    for day in sorted(blocked_dates):
        event = Event()
        event.add('uid', f"blocked-{listing['id']}-{day:%Y%m%d}@{UID_DOMAIN}")
        event.add('dtstart', day)
        event.add('dtend', day + ONE_DAY)
        event.add('summary', f"Blocked - {listing['title']}")
        event.add('status', 'CONFIRMED')
        event.add('transp', 'OPAQUE')
        cal.add_component(event)

    return cal.to_ical()


def export_ical(listing_id: int) -> tuple:
    """
    Export a listing's blocked dates.

    Raises:
        NotFoundError: If the listing does not exist

    Returns:
        tuple: (ical bytes, download filename)
    """
    listing = require_listing(listing_id)
    return build_ical(listing, get_blocked_dates(listing_id)), export_filename(listing['title'])
