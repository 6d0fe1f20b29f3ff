"""
Domain-specific exception hierarchy for the availability engine.
"""

from typing import List


class AvailabilityError(Exception):
    """Base class for all application-level errors."""


class InvalidTimeError(AvailabilityError, ValueError):
    """Raised when an HH:MM value cannot be parsed or is out of range."""


class InvalidIntervalError(AvailabilityError, ValueError):
    """Raised when an interval does not start strictly before it ends."""


class UnknownPeriodError(AvailabilityError, ValueError):
    """Raised when a period label does not name one of the daily periods."""


class BookingRuleError(AvailabilityError):
    """Raised when a requested booking violates a business rule."""


class OutsideBusinessHoursError(BookingRuleError):
    """Raised when a requested booking falls outside business hours."""


class DurationOutOfRangeError(BookingRuleError):
    """Raised when a requested booking is too short or too long."""


class BookingConflictError(AvailabilityError):
    """Raised when a requested booking overlaps active bookings."""

    def __init__(self, message: str, conflicts: List) -> None:
        super().__init__(message)
        self.conflicts = conflicts


class ApiError(AvailabilityError):
    """Raised when marketplace data cannot be fetched or parsed."""


class ProviderUnavailableError(BookingRuleError):
    """Raised when the provider's availability feed does not cover a request."""
