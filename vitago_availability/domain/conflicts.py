"""
Conflict detection against a snapshot of existing bookings.
"""

import logging
from datetime import date as date_type
from typing import Iterable, List, Union

from .models import Booking, TimeLike, TimeRange, as_time_of_day, parse_date

logger = logging.getLogger(__name__)


def active_bookings_on(on_date: Union[str, date_type], bookings: Iterable[Booking]) -> List[Booking]:
    """
    Keep bookings on ``on_date`` with an active status and a usable interval.

    Bookings with a missing or inverted interval are corrupt upstream data;
    they are skipped rather than treated as errors.
    """
    on_date = parse_date(on_date)
    active: List[Booking] = []

    for booking in bookings:
        if booking.date != on_date or not booking.is_active:
            continue
        if booking.time_range() is None:
            logger.warning("Ignoring booking %s with invalid time range", booking.id or "<no id>")
            continue
        active.append(booking)

    return active


def conflicting_bookings(
    candidate_start: TimeLike,
    candidate_end: TimeLike,
    on_date: Union[str, date_type],
    bookings: Iterable[Booking],
) -> List[Booking]:
    """
    Return the active bookings on ``on_date`` that overlap the candidate window.

    Raises:
        InvalidIntervalError: If the candidate does not start before it ends
    """
    candidate = TimeRange(start=as_time_of_day(candidate_start), end=as_time_of_day(candidate_end))

    return [
        booking for booking in active_bookings_on(on_date, bookings)
        if candidate.overlaps(booking.time_range())
    ]


def has_conflict(
    candidate_start: TimeLike,
    candidate_end: TimeLike,
    on_date: Union[str, date_type],
    bookings: Iterable[Booking],
) -> bool:
    """Check whether the candidate window overlaps any active booking that day."""
    return bool(conflicting_bookings(candidate_start, candidate_end, on_date, bookings))
