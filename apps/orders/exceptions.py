"""Errors raised by the order lifecycle."""

from __future__ import annotations


class OrderError(Exception):
    """Base class for order workflow failures."""


class OrderValidationError(OrderError):
    """Bad dates, non positive night count or an impossible request."""


class BookingConflictError(OrderError):
    """Raised when a room or accommodation is busy for the requested dates."""


class OrderNotFound(OrderError):
    """Unknown order, accommodation or room."""


class OrderPermissionDenied(OrderError):
    """The acting user may not perform this transition."""


class CancellationWindowExpired(OrderPermissionDenied):
    """Guests can only cancel shortly after booking; later an admin must do it."""


class AvailabilityCheckError(OrderError):
    """The reservation store could not be queried; never treat as available."""
