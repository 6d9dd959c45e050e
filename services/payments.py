"""
Payment processor client.

The booking core only hands a price to the processor and gets a hosted
checkout URL back; capture and confirmation happen on the processor side.
Without PAYMENT_API_KEY the processor is emulated so development and tests
never leave the process.
"""

import logging
import uuid
from dataclasses import dataclass

import requests
from flask import current_app

logger = logging.getLogger(__name__)


class PaymentError(Exception):
    """The payment processor could not create a checkout session."""


@dataclass(frozen=True)
class CheckoutSession:
    """Hosted checkout session returned by the processor."""

    session_id: str
    url: str
    emulated: bool = False


class PaymentProcessor:
    """
    Client for the hosted checkout API.

    Args:
        api_url: Base URL of the processor API
        api_key: Secret key (empty means emulated mode)
        site_url: Public URL of this site, used for return URLs
        timeout: Request timeout in seconds
    """

    def __init__(self, api_url: str, api_key: str, site_url: str, timeout: float = 10):
        self.api_url = (api_url or '').rstrip('/')
        self.api_key = api_key
        self.site_url = (site_url or '').rstrip('/')
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> 'PaymentProcessor':
        return cls(
            api_url=config.get('PAYMENT_API_URL', ''),
            api_key=config.get('PAYMENT_API_KEY', ''),
            site_url=config.get('SITE_URL', 'http://localhost:5000'),
            timeout=config.get('PAYMENT_TIMEOUT', 10),
        )

    @property
    def emulated(self) -> bool:
        return not self.api_key or not self.api_url

    def create_checkout_session(
        self,
        booking_id: int,
        amount,
        currency: str,
        description: str = ''
    ) -> CheckoutSession:
        """
        Create a hosted checkout session for a booking.

        Raises:
            PaymentError: Processor unreachable or returned an error
        """
        logger.info(f"[Payments] Checkout for booking {booking_id}: {amount} {currency}")

        if self.emulated:
            session_id = f"cs_test_{uuid.uuid4().hex[:16]}"
            logger.warning('[Payments] PAYMENT_API_KEY not set, using emulated checkout')
            return CheckoutSession(
                session_id=session_id,
                url=f"{self.site_url}/bookings/{booking_id}/checkout/{session_id}",
                emulated=True,
            )

        payload = {
            'client_reference_id': str(booking_id),
            'amount': int(round(float(amount) * 100)),
            'currency': currency.lower(),
            'description': description or f"Booking #{booking_id}",
            'success_url': f"{self.site_url}/bookings/{booking_id}/success",
            'cancel_url': f"{self.site_url}/bookings/{booking_id}/cancel",
        }
        headers = {
            'Authorization': f"Bearer {self.api_key}",
            'Accept': 'application/json',
        }

        try:
            response = requests.post(
                f"{self.api_url}/checkout/sessions",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json()
        except requests.RequestException as e:
            logger.error(f"[Payments] Checkout request failed for booking {booking_id}: {e}")
            raise PaymentError(str(e)) from e
        except ValueError as e:
            logger.error(f"[Payments] Invalid processor response for booking {booking_id}")
            raise PaymentError('Invalid response from payment processor') from e

        if not result.get('id') or not result.get('url'):
            logger.error(f"[Payments] Incomplete processor response: {result}")
            raise PaymentError('Incomplete response from payment processor')

        return CheckoutSession(session_id=result['id'], url=result['url'])


def get_payment_processor() -> PaymentProcessor:
    """Get the processor registered on the current app."""
    return current_app.extensions['payments']
