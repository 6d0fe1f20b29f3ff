"""
Domain models for time-of-day intervals, periods and bookings.

All times are wall-clock minutes since midnight on a single calendar date.
There is no time zone handling and no interval ever spans midnight.
"""

import re
from dataclasses import dataclass, field
from datetime import date as date_type, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

import pendulum

from .exceptions import (
    DurationOutOfRangeError,
    InvalidIntervalError,
    InvalidTimeError,
    OutsideBusinessHoursError,
    UnknownPeriodError,
)

MINUTES_PER_DAY = 24 * 60

DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")

TimeLike = Union[int, str]


def parse_time(value: str) -> int:
    """
    Convert an "HH:MM" string to minutes since midnight.

    Raises:
        InvalidTimeError: If the value is malformed or outside 00:00-23:59
    """
    if not isinstance(value, str):
        raise InvalidTimeError(f"Time must be an HH:MM string, got {value!r}")

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise InvalidTimeError(f"Time must be in HH:MM format, got {value!r}")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeError(f"Time out of range: {value!r}")

    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    """Convert minutes since midnight back to "HH:MM"."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise InvalidTimeError(f"Minutes must be between 0 and 1439, got {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def as_time_of_day(value: TimeLike) -> int:
    """Accept either minutes or an "HH:MM" string."""
    if isinstance(value, bool):
        raise InvalidTimeError(f"Not a time of day: {value!r}")
    if isinstance(value, int):
        if not 0 <= value <= MINUTES_PER_DAY:
            raise InvalidTimeError(f"Minutes must be between 0 and 1440, got {value}")
        return value
    return parse_time(value)


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open overlap test: intervals that only touch do not overlap."""
    return a_start < b_end and b_start < a_end


def parse_date(value: Union[str, date_type]) -> pendulum.Date:
    """
    Normalize a calendar date given as a string, date or datetime.

    Datetime strings (e.g. "2024-11-25T00:00:00.000Z") are reduced to their date.
    """
    if isinstance(value, datetime):
        return pendulum.date(value.year, value.month, value.day)
    if isinstance(value, date_type):
        return pendulum.date(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Not a calendar date: {value!r}")

    parsed = pendulum.parse(value.strip(), exact=True)
    if isinstance(parsed, datetime):
        return pendulum.date(parsed.year, parsed.month, parsed.day)
    if isinstance(parsed, date_type):
        return pendulum.date(parsed.year, parsed.month, parsed.day)
    raise ValueError(f"Not a calendar date: {value!r}")


def day_name(value: date_type) -> str:
    """Full English weekday name for a date."""
    return DAY_NAMES[value.weekday()]


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time-of-day range in minutes since midnight.

    Invariant: start must be before end.
    """
    start: int
    end: int

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidIntervalError(
                f"Start time {self.start} must be before end time {self.end}"
            )

    @classmethod
    def from_strings(cls, start: str, end: str) -> "TimeRange":
        """Build a range from two "HH:MM" strings."""
        return cls(start=parse_time(start), end=as_time_of_day(end))

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end - self.start

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return overlaps(self.start, self.end, other.start, other.end)

    def contains(self, minute: int) -> bool:
        """Half-open membership: the end minute is not part of the range."""
        return self.start <= minute < self.end

    def intersect(self, other: "TimeRange") -> "TimeRange | None":
        """
        Calculate the intersection of two time ranges.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        return TimeRange(start=max(self.start, other.start), end=min(self.end, other.end))

    def subtract(self, other: "TimeRange") -> List["TimeRange"]:
        """
        Remove another range from this one.

        Example:
        Free: 07:00 - 11:00
        Busy: 08:00 - 09:00
        Result: [07:00-08:00, 09:00-11:00]
        """
        if not self.overlaps(other):
            return [self]

        pieces: List[TimeRange] = []
        if other.start > self.start:
            pieces.append(TimeRange(start=self.start, end=other.start))
        if other.end < self.end:
            pieces.append(TimeRange(start=other.end, end=self.end))
        return pieces

    def as_strings(self) -> Dict[str, str]:
        """Render as {"start": "HH:MM", "end": "HH:MM"}."""
        return {"start": format_time(self.start), "end": _format_bound(self.end)}

    def __str__(self) -> str:
        return f"{format_time(self.start)} - {_format_bound(self.end)}"


def _format_bound(minutes: int) -> str:
    # 24:00 is only meaningful as an end bound
    if minutes == MINUTES_PER_DAY:
        return "24:00"
    return format_time(minutes)


class PeriodLabel(str, Enum):
    """The four daily periods requests are bucketed into."""
    MORNING = "Morning"
    NOON = "Noon"
    AFTERNOON = "Afternoon"
    EVENING = "Evening"

    @classmethod
    def parse(cls, value: Union[str, "PeriodLabel"]) -> "PeriodLabel":
        """Parse a label case-insensitively; "Night" names the evening slot."""
        if isinstance(value, PeriodLabel):
            return value
        key = str(value).strip().lower()
        if key == "night":
            return cls.EVENING
        for label in cls:
            if label.value.lower() == key:
                return label
        raise UnknownPeriodError(f"Unknown period: {value!r}")


@dataclass(frozen=True)
class Period:
    """A named, fixed daily window."""
    label: PeriodLabel
    start: int
    end: int

    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    def duration_minutes(self) -> int:
        return self.end - self.start


PERIODS: Tuple[Period, ...] = (
    Period(PeriodLabel.MORNING, parse_time("07:00"), parse_time("11:00")),
    Period(PeriodLabel.NOON, parse_time("11:00"), parse_time("15:00")),
    Period(PeriodLabel.AFTERNOON, parse_time("15:00"), parse_time("18:00")),
    Period(PeriodLabel.EVENING, parse_time("18:00"), parse_time("23:00")),
)


def get_period(label: Union[str, PeriodLabel]) -> Period:
    """Look up one of the canonical periods by label."""
    wanted = PeriodLabel.parse(label)
    for period in PERIODS:
        if period.label is wanted:
            return period
    raise UnknownPeriodError(f"Unknown period: {label!r}")


class BookingStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


# Only these statuses block new bookings
ACTIVE_STATUSES = frozenset(
    {BookingStatus.SCHEDULED.value, BookingStatus.CONFIRMED.value, BookingStatus.IN_PROGRESS.value}
)


@dataclass(frozen=True)
class Booking:
    """
    A snapshot of an existing booking as read from the marketplace.

    Start and end are None when the upstream record could not be parsed;
    such bookings never contribute to conflicts.
    """
    id: str
    date: Optional[pendulum.Date]
    start_time: Optional[int]
    end_time: Optional[int]
    status: str

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def time_range(self) -> Optional[TimeRange]:
        """Return the booking interval, or None if it is missing or inverted."""
        if self.start_time is None or self.end_time is None:
            return None
        if self.start_time >= self.end_time:
            return None
        return TimeRange(start=self.start_time, end=self.end_time)

    def as_dict(self) -> Dict[str, Any]:
        """Render in the REST shape; unparseable fields come back as None."""
        return {
            "_id": self.id,
            "bookingDate": self.date.isoformat() if self.date else None,
            "proposedStartTime": None if self.start_time is None else _format_bound(self.start_time),
            "proposedEndTime": None if self.end_time is None else _format_bound(self.end_time),
            "status": self.status,
        }

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Booking":
        """
        Build a booking from the REST shape.

        Unparseable fields are kept as None instead of raising, so corrupt
        upstream records can be skipped downstream.
        """
        booking_id = str(payload.get("_id") or payload.get("id") or "")

        try:
            booking_date = parse_date(payload.get("bookingDate"))
        except ValueError:
            booking_date = None

        return cls(
            id=booking_id,
            date=booking_date,
            start_time=_optional_time(payload.get("proposedStartTime")),
            end_time=_optional_time(payload.get("proposedEndTime")),
            status=str(payload.get("status") or "").lower(),
        )


def _optional_time(value: Any) -> Optional[int]:
    try:
        return parse_time(value)
    except InvalidTimeError:
        return None


@dataclass(frozen=True)
class AvailabilityOverride:
    """A provider's one-off, date-specific availability record."""
    date: pendulum.Date
    start_time: int
    end_time: int
    is_available: bool

    def covers(self, minute: int) -> bool:
        """Both bounds are inclusive."""
        return self.is_available and self.start_time <= minute <= self.end_time

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "AvailabilityOverride":
        """
        Build an override from the REST shape.

        Raises:
            ValueError: If the record is malformed
        """
        return cls(
            date=parse_date(payload.get("date")),
            start_time=parse_time(payload.get("startTime")),
            end_time=parse_time(payload.get("endTime")),
            is_available=payload.get("isAvailable") is True,
        )


@dataclass(frozen=True)
class BusinessHours:
    """
    System-wide booking bounds.
    """
    start: int = parse_time("07:00")
    end: int = parse_time("23:00")
    min_duration_minutes: int = 60
    max_duration_minutes: int = 8 * 60

    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    def validate_request(self, start: TimeLike, end: TimeLike) -> TimeRange:
        """
        Check a requested window against business rules.

        Returns:
            The requested window as a TimeRange

        Raises:
            InvalidIntervalError: If end is not after start
            OutsideBusinessHoursError: If the window leaves business hours
            DurationOutOfRangeError: If the window is too short or too long
        """
        requested = TimeRange(start=as_time_of_day(start), end=as_time_of_day(end))

        if requested.start < self.start or requested.end > self.end:
            raise OutsideBusinessHoursError(
                f"Booking {requested} is outside business hours "
                f"{format_time(self.start)} - {format_time(self.end)}"
            )

        duration = requested.duration_minutes()
        if duration < self.min_duration_minutes:
            raise DurationOutOfRangeError(
                f"Minimum booking duration is {self.min_duration_minutes} minutes, got {duration}"
            )
        if duration > self.max_duration_minutes:
            raise DurationOutOfRangeError(
                f"Maximum booking duration is {self.max_duration_minutes} minutes, got {duration}"
            )

        return requested


class ConflictLevel(str, Enum):
    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"


@dataclass
class AvailabilityVerdict:
    """
    Result of resolving one period against existing bookings.
    """
    available: bool
    conflict_level: ConflictLevel
    available_slots: List[TimeRange] = field(default_factory=list)
    conflicting_bookings: List[Booking] = field(default_factory=list)
    provider_available: bool = True

    def as_dict(self) -> Dict[str, Any]:
        """Render in the shape the booking UI consumes."""
        result: Dict[str, Any] = {
            "available": self.available,
            "conflictLevel": self.conflict_level.value,
        }
        if self.conflict_level is ConflictLevel.PARTIAL:
            result["availableSlots"] = [slot.as_strings() for slot in self.available_slots]
        if self.conflict_level is not ConflictLevel.NONE and self.conflicting_bookings:
            result["conflictingBookings"] = [booking.as_dict() for booking in self.conflicting_bookings]
        return result
