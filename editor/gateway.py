"""
HTTP client the calendar editor uses to talk to the availability API.

Every call returns the decoded JSON body of a successful response. Network
failures, timeouts, non-2xx statuses and `success: false` bodies all raise
GatewayError carrying a message fit to show to the host.
"""

import logging

import requests

from utils.messages import MESSAGES

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """A request to the availability API failed."""

    def __init__(self, message: str, status: int = None, payload: dict = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload or {}


class AvailabilityGateway:
    """
    requests-based client bound to one server.

    Args:
        base_url: Server root, e.g. 'http://localhost:5000'
        timeout: Per-request timeout in seconds
        session: Optional requests.Session (cookies carry the login)
    """

    def __init__(self, base_url: str, timeout: float = 10, session: requests.Session = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"[Gateway] {method} {path} failed: {e}")
            raise GatewayError(MESSAGES['connection_error']) from e

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"[Gateway] {method} {path}: non-JSON response ({response.status_code})")
            raise GatewayError(MESSAGES['connection_error'], status=response.status_code)

        if not response.ok or not data.get('success'):
            raise GatewayError(
                data.get('message') or MESSAGES['persistence_failed'],
                status=response.status_code,
                payload=data,
            )
        return data

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def login(self, username: str, password: str) -> dict:
        """Sign in and keep the CSRF token for later writes."""
        token = self._request('GET', '/csrf-token')['csrfToken']
        self.session.headers['X-CSRFToken'] = token
        return self._request('POST', '/login', json={'username': username, 'password': password})

    # -------------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------------

    def save_availability(self, listing_id: int, dates) -> dict:
        return self._request(
            'POST', f"/listings/{listing_id}/availability",
            json={'unavailableDates': [d.isoformat() for d in sorted(dates)]}
        )

    def get_calendar(self, listing_id: int, start, end) -> dict:
        return self._request(
            'GET', f"/listings/{listing_id}/availability/calendar",
            params={'start': start.isoformat(), 'end': end.isoformat()}
        )

    def get_analytics(self, listing_id: int, days: int = 90) -> dict:
        return self._request(
            'GET', f"/listings/{listing_id}/availability/analytics", params={'days': days}
        )

    def apply_recurring_pattern(self, listing_id: int, pattern_type: str, selectors, start, end) -> dict:
        return self._request(
            'POST', f"/listings/{listing_id}/availability/recurring-blocks",
            json={
                'type': pattern_type,
                'pattern': sorted(selectors),
                'startDate': start.isoformat(),
                'endDate': end.isoformat(),
            }
        )

    # -------------------------------------------------------------------------
    # Pricing variations
    # -------------------------------------------------------------------------

    def get_pricing_variations(self, listing_id: int) -> dict:
        return self._request('GET', f"/listings/{listing_id}/availability/pricing-variations")

    def add_pricing_variation(self, listing_id: int, start, end, price, reason: str = '') -> dict:
        return self._request(
            'POST', f"/listings/{listing_id}/availability/pricing-variations",
            json={
                'startDate': start.isoformat(),
                'endDate': end.isoformat(),
                'price': price,
                'reason': reason,
            }
        )

    def update_pricing_variation(
        self, listing_id: int, variation_id: int, start, end, price, reason: str = ''
    ) -> dict:
        return self._request(
            'PUT', f"/listings/{listing_id}/availability/pricing-variations/{variation_id}",
            json={
                'startDate': start.isoformat(),
                'endDate': end.isoformat(),
                'price': price,
                'reason': reason,
            }
        )

    def remove_pricing_variation(self, listing_id: int, variation_id: int) -> dict:
        return self._request(
            'DELETE', f"/listings/{listing_id}/availability/pricing-variations/{variation_id}"
        )
