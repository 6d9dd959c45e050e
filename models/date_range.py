"""
Day-granularity date handling.

Every date entering the availability core goes through parse_date(), so
comparisons never see a time-of-day component or a timezone shift.
Bookings use the half-open convention [start, end): the end date is the
checkout day and is not an occupied night.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, Union

from utils.errors import ValidationError
from utils.messages import MESSAGES

DateLike = Union[str, date, datetime]

ONE_DAY = timedelta(days=1)


def parse_date(value: DateLike, field: str = 'date') -> date:
    """
    Normalize a date value to a calendar date.

    Accepts date objects, datetimes (time part dropped as-is, no timezone
    conversion) and ISO strings, either plain 'YYYY-MM-DD' or full
    timestamps such as '2025-06-01T00:00:00.000Z' (date part taken).

    Args:
        value: Value to parse
        field: Field name used in the error message

    Returns:
        date: The calendar date

    Raises:
        ValidationError: If the value is missing or not a date
    """
    if value is None or value == '':
        raise ValidationError(MESSAGES['date_required'].format(field=field), field=field)

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            if len(text) > 10 and text[10] in 'T ':
                # Date part of the timestamp as written, no timezone shift
                return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
        except ValueError:
            pass

    raise ValidationError(MESSAGES['invalid_date'].format(value=value), field=field)


def parse_dates(values: Iterable[DateLike], field: str = 'dates') -> set:
    """Parse a collection of date values into a set of dates."""
    if values is None:
        raise ValidationError(MESSAGES['date_required'].format(field=field), field=field)
    if isinstance(values, (str, bytes)):
        raise ValidationError(MESSAGES['invalid_date'].format(value=values), field=field)
    return {parse_date(value, field) for value in values}


def daterange(first: date, last: date) -> Iterator[date]:
    """Yield every day from first to last, both inclusive."""
    current = first
    while current <= last:
        yield current
        current += ONE_DAY


@dataclass(frozen=True)
class DateRange:
    """
    Half-open range of days [start, end).

    DateRange(2025-06-01, 2025-06-05) covers the nights of June 1-4.
    Adjacent ranges (one ending the day the other starts) do not overlap.
    """

    start: date
    end: date

    def __post_init__(self):
        if self.end <= self.start:
            raise ValidationError(
                MESSAGES['invalid_date_range'],
                startDate=self.start.isoformat(),
                endDate=self.end.isoformat()
            )

    @classmethod
    def parse(cls, start: DateLike, end: DateLike) -> 'DateRange':
        """Build a range from raw request values."""
        return cls(parse_date(start, 'startDate'), parse_date(end, 'endDate'))

    @classmethod
    def inclusive(cls, first: date, last: date) -> 'DateRange':
        """Range covering first..last with both days included."""
        return cls(first, last + ONE_DAY)

    @property
    def nights(self) -> int:
        return (self.end - self.start).days

    @property
    def last(self) -> date:
        """Last day inside the range."""
        return self.end - ONE_DAY

    def dates(self) -> list:
        return list(daterange(self.start, self.last))

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end

    def overlaps(self, other: 'DateRange') -> bool:
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> dict:
        return {'startDate': self.start.isoformat(), 'endDate': self.end.isoformat()}

    def __len__(self) -> int:
        return self.nights

    def __str__(self):
        return f"{self.start.isoformat()} -> {self.end.isoformat()}"
