"""
Enumerates the concrete start and end times a client may pick.
"""

from datetime import date as date_type
from typing import Any, Iterable, List, Optional, Sequence, Union

from .conflicts import active_bookings_on
from .models import (
    AvailabilityOverride,
    Booking,
    BusinessHours,
    Period,
    PeriodLabel,
    TimeLike,
    TimeRange,
    as_time_of_day,
    day_name,
    format_time,
    get_period,
    parse_date,
)
from .weekly_availability import normalize_weekly_availability


DEFAULT_GRANULARITY_MINUTES = 5


class TimeSlotEnumerator:
    """
    Generates selectable "HH:MM" options at a fixed granularity.

    Times are removed when they fall inside an active booking, when the
    provider's weekly matrix disables the period, or when a date-specific
    availability override feed exists and does not cover them.

    An empty result for a missing period is a sentinel meaning "no period
    selected, so nothing narrows the choice"; general requests (no single
    provider) get every option within business hours instead.
    """

    def __init__(
        self,
        granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES,
        business_hours: Optional[BusinessHours] = None,
    ):
        if granularity_minutes <= 0:
            raise ValueError(f"Granularity must be positive, got {granularity_minutes}")
        self.granularity = granularity_minutes
        self.business_hours = business_hours or BusinessHours()

    def enumerate_start_times(
        self,
        period_label: Optional[Union[str, PeriodLabel]],
        on_date: Union[str, date_type],
        bookings: Iterable[Booking],
        weekly_availability: Any = None,
        availability_overrides: Optional[Sequence[AvailabilityOverride]] = None,
        general_request: bool = False,
    ) -> List[str]:
        """
        List start times within the period's [start, end) range.

        Args:
            period_label: Selected period, or None/"" if none is selected
            on_date: Calendar date being booked
            bookings: Snapshot of the provider's bookings
            weekly_availability: Provider weekly matrix in any supported encoding
            availability_overrides: Date-specific provider availability feed
            general_request: True if the request has no specific provider

        Returns:
            Sorted list of "HH:MM" strings
        """
        if general_request:
            hours = self.business_hours
            return [format_time(t) for t in range(hours.start, hours.end, self.granularity)]

        if not period_label:
            return []

        period = get_period(period_label)
        on_date = parse_date(on_date)
        if not self._period_enabled(period, on_date, weekly_availability):
            return []

        busy = self._busy_ranges(on_date, bookings)
        overrides = self._overrides_for(on_date, availability_overrides)

        times: List[str] = []
        for minute in range(period.start, period.end, self.granularity):
            if any(booking.contains(minute) for booking in busy):
                continue
            if not self._override_allows(minute, overrides):
                continue
            times.append(format_time(minute))

        return times

    def enumerate_end_times(
        self,
        start_time: Optional[TimeLike],
        period_label: Optional[Union[str, PeriodLabel]],
        on_date: Union[str, date_type],
        bookings: Iterable[Booking],
        weekly_availability: Any = None,
        availability_overrides: Optional[Sequence[AvailabilityOverride]] = None,
        general_request: bool = False,
    ) -> List[str]:
        """
        List end times for a chosen start time.

        Candidates begin one step after ``start_time`` and run up to and
        including the period end. A candidate is dropped if the resulting
        window is shorter than the minimum or longer than the maximum booking
        duration, overlaps an active booking, or ends at a time the override
        feed does not cover.
        """
        if start_time is None or start_time == "":
            return []

        start = as_time_of_day(start_time)
        hours = self.business_hours

        if general_request:
            return [
                format_time(t)
                for t in range(start + self.granularity, hours.end + 1, self.granularity)
                if self._duration_allowed(start, t)
            ]

        if not period_label:
            return []

        period = get_period(period_label)
        on_date = parse_date(on_date)
        if not self._period_enabled(period, on_date, weekly_availability):
            return []

        busy = self._busy_ranges(on_date, bookings)
        overrides = self._overrides_for(on_date, availability_overrides)

        times: List[str] = []
        for minute in range(start + self.granularity, period.end + 1, self.granularity):
            if not self._duration_allowed(start, minute):
                continue
            window = TimeRange(start=start, end=minute)
            if any(window.overlaps(booking) for booking in busy):
                continue
            if not self._override_allows(minute, overrides):
                continue
            times.append(format_time(minute))

        return times

    def _duration_allowed(self, start: int, end: int) -> bool:
        duration = end - start
        return (
            self.business_hours.min_duration_minutes
            <= duration
            <= self.business_hours.max_duration_minutes
        )

    @staticmethod
    def _period_enabled(
        period: Period,
        on_date: date_type,
        weekly: Any,
    ) -> bool:
        weekly = normalize_weekly_availability(weekly)
        if weekly.is_empty:
            return True
        return weekly.is_available(day_name(on_date), period.label)

    @staticmethod
    def _busy_ranges(on_date: date_type, bookings: Iterable[Booking]) -> List[TimeRange]:
        return [booking.time_range() for booking in active_bookings_on(on_date, bookings)]

    @staticmethod
    def _overrides_for(
        on_date: date_type,
        overrides: Optional[Sequence[AvailabilityOverride]],
    ) -> List[AvailabilityOverride]:
        """Only records for the booked date apply; none at all means unrestricted."""
        if not overrides:
            return []
        return [override for override in overrides if override.date == on_date]

    @staticmethod
    def _override_allows(minute: int, overrides: List[AvailabilityOverride]) -> bool:
        if not overrides:
            return True
        return any(override.covers(minute) for override in overrides)
