"""
Input validation helper functions.
Turns raw request values into typed values or raises ValidationError.
"""

from datetime import date

from flask import current_app, request

from utils.errors import ValidationError
from utils.messages import MESSAGES


def validate_window(first: date, last: date, max_days: int = None) -> int:
    """
    Validate an inclusive window of days.

    Args:
        first: First day of the window
        last: Last day of the window (inclusive)
        max_days: Maximum allowed length (defaults to RECURRING_MAX_WINDOW_DAYS)

    Returns:
        int: Number of days in the window

    Raises:
        ValidationError: If last is before first or the window is too long
    """
    if last < first:
        raise ValidationError(MESSAGES['invalid_window'], field='endDate')

    if max_days is None:
        max_days = current_app.config.get('RECURRING_MAX_WINDOW_DAYS', 730)

    length = (last - first).days + 1
    if length > max_days:
        raise ValidationError(MESSAGES['window_too_long'].format(days=max_days), field='endDate')
    return length


def validate_price(value, field: str = 'price') -> float:
    """
    Validate a price value.

    Accepts numbers and numeric strings; rejects missing, zero, negative,
    non-numeric and boolean values.

    Returns:
        float or int: The price
    """
    if value is None or value == '' or isinstance(value, bool):
        raise ValidationError(MESSAGES['invalid_price'], field=field)

    try:
        price = float(value)
    except (TypeError, ValueError):
        raise ValidationError(MESSAGES['invalid_price'], field=field)

    if price != price or price <= 0 or price == float('inf'):
        raise ValidationError(MESSAGES['invalid_price'], field=field)

    return int(price) if price.is_integer() else price


def validate_guest_count(value, default: int = 1) -> int:
    """
    Validate a guest count (at least 1).

    Missing values fall back to the default.
    """
    if value is None or value == '':
        return default

    if isinstance(value, bool):
        raise ValidationError(MESSAGES['invalid_guests'], field='guests')

    try:
        guests = int(value)
    except (TypeError, ValueError):
        raise ValidationError(MESSAGES['invalid_guests'], field='guests')

    if guests < 1 or guests != float(value):
        raise ValidationError(MESSAGES['invalid_guests'], field='guests')
    return guests


def validate_days(value, default: int, max_days: int) -> int:
    """Validate the trailing-window length for analytics."""
    if value is None or value == '':
        return default

    try:
        days = int(value)
    except (TypeError, ValueError):
        raise ValidationError(MESSAGES['invalid_days'].format(max_days=max_days), field='days')

    if days < 1 or days > max_days:
        raise ValidationError(MESSAGES['invalid_days'].format(max_days=max_days), field='days')
    return days


def sanitize_input(text: str, max_length: int = None) -> str:
    """
    Sanitize text input by trimming and limiting length.

    Args:
        text: Text to sanitize
        max_length: Maximum length (optional)

    Returns:
        Sanitized text
    """
    if not text:
        return ''

    sanitized = str(text).strip()

    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized


def get_json_body() -> dict:
    """
    Get the JSON object body of the current request.

    Raises:
        ValidationError: If the body is missing or not a JSON object
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        raise ValidationError(MESSAGES['data_required'])
    return data
