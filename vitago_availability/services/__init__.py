"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking_availability import BookingAvailabilityService, BookingSourceProtocol, ProviderSnapshot

__all__ = ["BookingAvailabilityService", "BookingSourceProtocol", "ProviderSnapshot"]
