"""
JSON envelope shared by every API endpoint.

    Success:  {"success": true, "message": "...", <payload fields>}
    Error:    {"success": false, "message": "...", <detail fields>}

Payload fields sit at the top level because the calendar client reads them
there (analytics, variations, datesAdded, url...).

Usage:
    return api_success(message='Calendar updated', applied=['2025-06-01'])
    return api_error('End date must be after start date', status=400)
"""

from flask import jsonify
from typing import Any


def api_success(message: str | None = None, status: int = 200, **fields: Any) -> tuple:
    """
    Build a success response.

    Args:
        message: Optional message for the host or guest
        status: HTTP status code (default 200)
        **fields: Top-level payload fields

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': True}
    if message:
        response['message'] = message
    response.update(fields)
    return jsonify(response), status


def api_error(message: str, status: int = 400, **details: Any) -> tuple:
    """
    Build an error response.

    Args:
        message: Human readable error message
        status: HTTP status code (default 400)
        **details: Extra fields (conflict, quote, field...)
    """
    response = {'success': False, 'message': message}
    response.update(details)
    return jsonify(response), status
