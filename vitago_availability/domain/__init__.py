"""
Domain layer - Pure availability logic without external dependencies.
"""

from .conflicts import active_bookings_on, conflicting_bookings, has_conflict
from .models import (
    PERIODS,
    AvailabilityOverride,
    AvailabilityVerdict,
    Booking,
    BusinessHours,
    ConflictLevel,
    Period,
    PeriodLabel,
    TimeRange,
    format_time,
    get_period,
    overlaps,
    parse_date,
    parse_time,
)
from .period_resolver import PeriodBadge, PeriodStatus, resolve_day, resolve_period
from .service_catalog import ServiceCatalog
from .slot_enumerator import TimeSlotEnumerator
from .weekly_availability import (
    WeeklyAvailability,
    is_day_period_available,
    normalize_weekly_availability,
)

__all__ = [
    "PERIODS",
    "AvailabilityOverride",
    "AvailabilityVerdict",
    "Booking",
    "BusinessHours",
    "ConflictLevel",
    "Period",
    "PeriodBadge",
    "PeriodLabel",
    "PeriodStatus",
    "ServiceCatalog",
    "TimeRange",
    "TimeSlotEnumerator",
    "WeeklyAvailability",
    "active_bookings_on",
    "conflicting_bookings",
    "format_time",
    "get_period",
    "has_conflict",
    "is_day_period_available",
    "normalize_weekly_availability",
    "overlaps",
    "parse_date",
    "parse_time",
    "resolve_day",
    "resolve_period",
]
