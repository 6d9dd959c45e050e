"""
Error taxonomy for availability and booking operations.

Every error carries the HTTP status it maps to, so route handlers can let
them propagate and the app-level error handlers build the JSON response.
"""


class AvailabilityError(Exception):
    """Base class for all availability/booking errors."""

    status = 500

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Extra fields merged into the error response."""
        return dict(self.details)


class ValidationError(AvailabilityError):
    """Malformed or missing input (bad dates, end <= start, negative price)."""

    status = 400


class NotFoundError(AvailabilityError):
    """Listing, booking or variation does not exist."""

    status = 404


class ConflictError(AvailabilityError):
    """Requested dates overlap an existing booking, block or variation."""

    status = 409


class AuthorizationError(AvailabilityError):
    """User is not authenticated, or is not the listing's host."""

    status = 403


class PersistenceError(AvailabilityError):
    """Database failure. The message shown to users is always generic."""

    status = 500
