"""
Application services for answering booking-availability questions.

The service coordinates fetching a provider snapshot (bookings, weekly
availability, date-specific overrides) via a booking source adapter and
delegates every availability decision to the pure domain layer. The
snapshot is fetched per call and never refreshed behind the caller's back;
re-fetch when the date, provider or service selection changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date as date_type
from typing import Any, List, Optional, Protocol, Sequence, Union

from ..domain.conflicts import conflicting_bookings
from ..domain.exceptions import ApiError, BookingConflictError, ProviderUnavailableError
from ..domain.models import (
    AvailabilityOverride,
    Booking,
    PeriodLabel,
    TimeLike,
    TimeRange,
    format_time,
)
from ..domain.period_resolver import PeriodBadge, resolve_day
from ..domain.service_catalog import ServiceCatalog
from ..domain.slot_enumerator import TimeSlotEnumerator
from ..domain.weekly_availability import WeeklyAvailability, normalize_weekly_availability

logger = logging.getLogger(__name__)

DEFAULT_BOOKING_HORIZON_DAYS = 30


class BookingSourceProtocol(Protocol):
    """Protocol describing the marketplace data the service needs."""

    def get_provider_bookings(self, provider_id: str) -> List[Booking]:
        """Return all bookings of a provider."""

    def get_provider_availability(self, provider_id: str) -> Any:
        """Return the provider's raw weekly availability table."""

    def get_availability_overrides(
        self,
        provider_id: str,
        on_date: date_type,
    ) -> List[AvailabilityOverride]:
        """Return date-specific availability records."""


@dataclass
class ProviderSnapshot:
    """Everything the engine needs to answer questions about one provider."""
    provider_id: Optional[str]
    bookings: List[Booking] = field(default_factory=list)
    weekly_availability: WeeklyAvailability = field(default_factory=WeeklyAvailability)
    overrides: List[AvailabilityOverride] = field(default_factory=list)

    @property
    def general_request(self) -> bool:
        """A request without a specific provider."""
        return self.provider_id is None


class BookingAvailabilityService:
    """
    Orchestrates snapshot retrieval and availability calculation.

    Dependency inversion toward a protocol makes it easy to plug in the real
    REST adapter or the mock implementation in tests.
    """

    def __init__(
        self,
        booking_source: BookingSourceProtocol,
        catalog: Optional[ServiceCatalog] = None,
        enumerator: Optional[TimeSlotEnumerator] = None,
    ) -> None:
        self._booking_source = booking_source
        self._catalog = catalog or ServiceCatalog()
        self._enumerator = enumerator or TimeSlotEnumerator()

    @property
    def business_hours(self):
        return self._enumerator.business_hours

    def fetch_snapshot(self, provider_id: Optional[str], on_date: date_type) -> ProviderSnapshot:
        """
        Fetch bookings, weekly availability and overrides for a provider.

        A missing ``provider_id`` describes a general request, which has no
        schedule to fetch. Failing to fetch overrides is not critical and
        degrades to "no overrides"; failing to fetch bookings is an error.
        """
        if provider_id is None:
            return ProviderSnapshot(provider_id=None)

        bookings = self._booking_source.get_provider_bookings(provider_id)
        weekly = normalize_weekly_availability(
            self._booking_source.get_provider_availability(provider_id)
        )

        try:
            overrides = self._booking_source.get_availability_overrides(provider_id, on_date)
        except ApiError as exc:
            logger.warning("Could not fetch availability overrides for %s: %s", provider_id, exc)
            overrides = []

        logger.debug(
            "Snapshot for provider %s on %s: %d bookings, %d overrides",
            provider_id,
            on_date,
            len(bookings),
            len(overrides),
        )

        return ProviderSnapshot(
            provider_id=provider_id,
            bookings=list(bookings),
            weekly_availability=weekly,
            overrides=list(overrides),
        )

    def annotate_periods(
        self,
        snapshot: ProviderSnapshot,
        on_date: date_type,
        service_types: Sequence[str],
    ) -> List[PeriodBadge]:
        """Badge every period of the day for the selected services."""
        return resolve_day(
            on_date,
            snapshot.bookings,
            snapshot.weekly_availability,
            self._catalog.duration_for_selection(service_types),
            general_request=snapshot.general_request,
        )

    def start_times(
        self,
        snapshot: ProviderSnapshot,
        on_date: date_type,
        period_label: Optional[Union[str, PeriodLabel]],
    ) -> List[str]:
        """Selectable start times within the chosen period."""
        return self._enumerator.enumerate_start_times(
            period_label,
            on_date,
            snapshot.bookings,
            snapshot.weekly_availability,
            snapshot.overrides,
            general_request=snapshot.general_request,
        )

    def end_times(
        self,
        snapshot: ProviderSnapshot,
        on_date: date_type,
        period_label: Optional[Union[str, PeriodLabel]],
        start_time: TimeLike,
    ) -> List[str]:
        """Selectable end times for the chosen start time."""
        return self._enumerator.enumerate_end_times(
            start_time,
            period_label,
            on_date,
            snapshot.bookings,
            snapshot.weekly_availability,
            snapshot.overrides,
            general_request=snapshot.general_request,
        )

    def suggest_end_time(self, start_time: TimeLike, service_types: Sequence[str]) -> str:
        """Proposed end time for the first selected service."""
        service_type = service_types[0] if service_types else None
        return self._catalog.suggest_end_time(start_time, service_type)

    def validate_request(
        self,
        snapshot: ProviderSnapshot,
        on_date: date_type,
        start_time: TimeLike,
        end_time: TimeLike,
    ) -> TimeRange:
        """
        Final validation before a booking is submitted.

        Returns:
            The requested window

        Raises:
            InvalidIntervalError: If end is not after start
            BookingRuleError: If business hours, duration or the override feed
                rule the request out
            BookingConflictError: If the window overlaps active bookings
        """
        requested = self.business_hours.validate_request(start_time, end_time)

        if snapshot.general_request:
            return requested

        day_overrides = [o for o in snapshot.overrides if o.date == on_date]
        if day_overrides and not any(o.covers(requested.start) for o in day_overrides):
            raise ProviderUnavailableError(
                f"Provider is not available at {format_time(requested.start)} on {on_date}"
            )

        conflicts = conflicting_bookings(requested.start, requested.end, on_date, snapshot.bookings)
        if conflicts:
            raise BookingConflictError(
                f"{requested} on {on_date} conflicts with {len(conflicts)} existing booking(s)",
                conflicts,
            )

        return requested

    def is_date_bookable(
        self,
        snapshot: ProviderSnapshot,
        on_date: date_type,
        today: date_type,
        horizon_days: int = DEFAULT_BOOKING_HORIZON_DAYS,
    ) -> bool:
        """
        Whether the date picker should offer ``on_date``.

        The date must lie within the booking horizon and must not be marked
        unavailable by an override. For a specific provider, the weekday must
        also have at least one enabled period, unless no weekly data exists.
        """
        days_ahead = on_date.toordinal() - today.toordinal()
        if days_ahead < 0 or days_ahead > horizon_days:
            return False

        if any(o.date == on_date and not o.is_available for o in snapshot.overrides):
            return False

        if snapshot.general_request or snapshot.weekly_availability.is_empty:
            return True

        return snapshot.weekly_availability.is_day_available(on_date)
