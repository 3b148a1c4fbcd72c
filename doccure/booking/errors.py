"""
Booking errors — every failure the booking core reports to callers.

Each error carries the HTTP status the routers translate it to.
"""

from __future__ import annotations


class BookingError(Exception):
    """Base class for booking-core failures."""

    status_code = 500


class NotFoundError(BookingError):
    """Referenced test offering or booking does not exist."""

    status_code = 404


class CapacityExhaustedError(BookingError):
    """No slots remain on the test offering."""

    status_code = 409


class ForbiddenError(BookingError):
    """Principal lacks rights for the requested mutation."""

    status_code = 403


class UnauthorizedError(BookingError):
    """Request carries no valid credentials."""

    status_code = 401


class BookingValidationError(BookingError):
    """Malformed request content the schema layer could not catch."""

    status_code = 400


class GatewayError(BookingError):
    """Payment provider failure. Never retried by the core."""

    status_code = 502


class StoreUnavailableError(BookingError):
    """Document store is not connected."""

    status_code = 503


class StoreConflictError(BookingError):
    """A document kept changing under a conditional write."""

    status_code = 503
