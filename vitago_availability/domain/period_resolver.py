"""
Period availability: can a given daily period still host the selected service?

This is pure domain logic: the caller supplies the bookings snapshot, the
weekly availability and the date, and nothing is read from the clock or
from the network.
"""

from dataclasses import dataclass
from datetime import date as date_type
from enum import Enum
from typing import Any, Iterable, List, Optional, Union

from .conflicts import active_bookings_on
from .models import (
    PERIODS,
    AvailabilityVerdict,
    Booking,
    ConflictLevel,
    Period,
    PeriodLabel,
    TimeRange,
    day_name,
    get_period,
    parse_date,
)
from .weekly_availability import WeeklyAvailability, normalize_weekly_availability


def hours_to_minutes(hours: float) -> int:
    """Convert a (possibly fractional) hour duration to whole minutes."""
    if hours <= 0:
        raise ValueError(f"Service duration must be positive, got {hours}")
    return int(round(hours * 60))


def resolve_period(
    period: Union[Period, PeriodLabel, str],
    on_date: Union[str, date_type],
    bookings: Iterable[Booking],
    weekly_availability: Any,
    service_duration: float,
) -> AvailabilityVerdict:
    """
    Annotate a period with how much of it is still bookable.

    Algorithm:
    1. A period shorter than the service can never host it
    2. Without active bookings that day the period is entirely free
    3. Subtract every overlapping booking from the free intervals
    4. Keep the free pieces long enough for the service (>=, not >)
    5. Report none / partial / full

    The weekly matrix never changes the conflict level; it only sets
    ``provider_available`` on the verdict.

    Args:
        period: Period, or its label
        on_date: Calendar date being booked
        bookings: Snapshot of the provider's bookings
        weekly_availability: Provider weekly matrix in any supported
            encoding, or None if unknown
        service_duration: Required duration in hours

    Returns:
        AvailabilityVerdict
    """
    if not isinstance(period, Period):
        period = get_period(period)
    on_date = parse_date(on_date)
    weekly_availability = normalize_weekly_availability(weekly_availability)

    provider_available = _provider_available(weekly_availability, period, on_date)
    required_minutes = hours_to_minutes(service_duration)

    if period.duration_minutes() < required_minutes:
        return AvailabilityVerdict(
            available=False,
            conflict_level=ConflictLevel.FULL,
            provider_available=provider_available,
        )

    day_bookings = active_bookings_on(on_date, bookings)
    if not day_bookings:
        return AvailabilityVerdict(
            available=True,
            conflict_level=ConflictLevel.NONE,
            provider_available=provider_available,
        )

    period_range = period.time_range()
    free: List[TimeRange] = [period_range]
    conflicts: List[Booking] = []

    for booking in day_bookings:
        busy = booking.time_range()
        if not period_range.overlaps(busy):
            continue
        conflicts.append(booking)
        free = [piece for slot in free for piece in slot.subtract(busy)]

    if not conflicts:
        return AvailabilityVerdict(
            available=True,
            conflict_level=ConflictLevel.NONE,
            provider_available=provider_available,
        )

    qualifying = [slot for slot in free if slot.duration_minutes() >= required_minutes]

    if qualifying:
        return AvailabilityVerdict(
            available=True,
            conflict_level=ConflictLevel.PARTIAL,
            available_slots=sorted(qualifying, key=lambda slot: slot.start),
            conflicting_bookings=conflicts,
            provider_available=provider_available,
        )

    return AvailabilityVerdict(
        available=False,
        conflict_level=ConflictLevel.FULL,
        conflicting_bookings=conflicts,
        provider_available=provider_available,
    )


def _provider_available(
    weekly: WeeklyAvailability,
    period: Period,
    on_date: date_type,
) -> bool:
    # No weekly data at all does not restrict the provider
    if weekly.is_empty:
        return True
    return weekly.is_available(day_name(on_date), period.label)


class PeriodStatus(str, Enum):
    AVAILABLE = "available"
    PARTIALLY_AVAILABLE = "partially_available"
    FULLY_BOOKED = "fully_booked"
    PROVIDER_UNAVAILABLE = "provider_unavailable"


@dataclass
class PeriodBadge:
    """What the booking UI shows for one period of the day."""
    period: Period
    status: PeriodStatus
    verdict: Optional[AvailabilityVerdict] = None

    @property
    def selectable(self) -> bool:
        return self.status in (PeriodStatus.AVAILABLE, PeriodStatus.PARTIALLY_AVAILABLE)


def resolve_day(
    on_date: Union[str, date_type],
    bookings: Iterable[Booking],
    weekly_availability: Any,
    service_duration: float,
    general_request: bool = False,
) -> List[PeriodBadge]:
    """
    Resolve all four periods of a day into UI badges.

    General requests have no single provider to check against, so every
    period is reported as available.
    """
    if general_request:
        return [PeriodBadge(period=period, status=PeriodStatus.AVAILABLE) for period in PERIODS]

    on_date = parse_date(on_date)
    weekly_availability = normalize_weekly_availability(weekly_availability)
    snapshot = list(bookings)
    badges: List[PeriodBadge] = []

    for period in PERIODS:
        verdict = resolve_period(period, on_date, snapshot, weekly_availability, service_duration)

        if not verdict.provider_available:
            status = PeriodStatus.PROVIDER_UNAVAILABLE
        elif not verdict.available:
            status = PeriodStatus.FULLY_BOOKED
        elif verdict.conflict_level is ConflictLevel.PARTIAL:
            status = PeriodStatus.PARTIALLY_AVAILABLE
        else:
            status = PeriodStatus.AVAILABLE

        badges.append(PeriodBadge(period=period, status=status, verdict=verdict))

    return badges
