"""
Tests for the period availability resolver.
"""

import pendulum
import pytest

from vitago_availability.domain.models import (
    PERIODS,
    Booking,
    ConflictLevel,
    TimeRange,
    get_period,
    parse_time,
)
from vitago_availability.domain.period_resolver import PeriodStatus, resolve_day, resolve_period
from vitago_availability.domain.weekly_availability import normalize_weekly_availability

MONDAY = pendulum.date(2024, 11, 25)


def make_booking(booking_id, start, end, status="confirmed", day=MONDAY):
    return Booking(
        id=booking_id,
        date=day,
        start_time=parse_time(start),
        end_time=parse_time(end),
        status=status,
    )


class TestResolvePeriod:
    """Tests for resolve_period."""

    def test_no_bookings_is_fully_available(self):
        """Morning, 2h service, no bookings."""
        verdict = resolve_period(get_period("Morning"), MONDAY, [], None, 2)

        assert verdict.available
        assert verdict.conflict_level is ConflictLevel.NONE
        assert verdict.as_dict() == {"available": True, "conflictLevel": "none"}

    def test_partial_when_a_long_enough_gap_remains(self):
        """Morning, booking 08:00-09:00, 2h service: only 09:00-11:00 qualifies."""
        booking = make_booking("b1", "08:00", "09:00")

        verdict = resolve_period(get_period("Morning"), MONDAY, [booking], None, 2)

        assert verdict.available
        assert verdict.conflict_level is ConflictLevel.PARTIAL
        assert verdict.available_slots == [TimeRange.from_strings("09:00", "11:00")]
        assert verdict.conflicting_bookings == [booking]
        assert verdict.as_dict()["availableSlots"] == [{"start": "09:00", "end": "11:00"}]

    def test_full_when_booking_covers_period(self):
        """Noon fully booked, 1h service."""
        booking = make_booking("b1", "11:00", "15:00")

        verdict = resolve_period(get_period("Noon"), MONDAY, [booking], None, 1)

        assert not verdict.available
        assert verdict.conflict_level is ConflictLevel.FULL
        assert verdict.conflicting_bookings == [booking]

    def test_period_shorter_than_service(self):
        """A 6h service never fits in a 4h period."""
        verdict = resolve_period(get_period("Morning"), MONDAY, [], None, 6)

        assert not verdict.available
        assert verdict.conflict_level is ConflictLevel.FULL
        assert verdict.conflicting_bookings == []

    def test_slot_exactly_as_long_as_service_accommodates(self):
        booking = make_booking("b1", "07:00", "09:00")

        verdict = resolve_period(get_period("Morning"), MONDAY, [booking], None, 2)

        assert verdict.conflict_level is ConflictLevel.PARTIAL
        assert verdict.available_slots == [TimeRange.from_strings("09:00", "11:00")]

    def test_fractional_service_duration(self):
        booking = make_booking("b1", "08:30", "11:00")

        verdict = resolve_period(get_period("Morning"), MONDAY, [booking], None, 1.5)

        assert verdict.conflict_level is ConflictLevel.PARTIAL
        assert verdict.available_slots == [TimeRange.from_strings("07:00", "08:30")]

    def test_abutting_bookings_are_not_merged(self):
        """Back-to-back bookings each carve out their own window."""
        first = make_booking("b1", "07:00", "08:00")
        second = make_booking("b2", "08:00", "09:00")

        verdict = resolve_period(get_period("Morning"), MONDAY, [first, second], None, 1)

        assert verdict.conflicting_bookings == [first, second]
        assert verdict.available_slots == [TimeRange.from_strings("09:00", "11:00")]

    def test_bookings_outside_period_report_none(self):
        """Active bookings elsewhere in the day do not touch the period."""
        booking = make_booking("b1", "15:00", "16:00")

        verdict = resolve_period(get_period("Morning"), MONDAY, [booking], None, 2)

        assert verdict.conflict_level is ConflictLevel.NONE
        assert verdict.available

    def test_booking_abutting_period_edge_is_not_a_conflict(self):
        booking = make_booking("b1", "11:00", "12:00")

        verdict = resolve_period(get_period("Morning"), MONDAY, [booking], None, 2)

        assert verdict.conflict_level is ConflictLevel.NONE

    def test_inactive_and_other_day_bookings_ignored(self):
        bookings = [
            make_booking("c", "07:00", "11:00", status="cancelled"),
            make_booking("t", "07:00", "11:00", day=MONDAY.add(days=1)),
        ]

        verdict = resolve_period("Morning", MONDAY, bookings, None, 2)

        assert verdict.conflict_level is ConflictLevel.NONE

    def test_multiple_gaps_all_too_short(self):
        bookings = [make_booking("b1", "08:00", "09:00"), make_booking("b2", "10:00", "10:30")]

        verdict = resolve_period(get_period("Morning"), MONDAY, bookings, None, 2)

        assert not verdict.available
        assert verdict.conflict_level is ConflictLevel.FULL
        assert verdict.available_slots == []

    def test_is_idempotent(self):
        bookings = [make_booking("b1", "08:00", "09:00")]

        first = resolve_period(get_period("Morning"), MONDAY, bookings, None, 2)
        second = resolve_period(get_period("Morning"), MONDAY, bookings, None, 2)

        assert first == second

    @pytest.mark.parametrize("start,end", [("07:00", "07:30"), ("08:15", "09:40"), ("10:00", "11:00")])
    def test_returned_slots_always_fit_the_service(self, start, end):
        bookings = [make_booking("b1", start, end)]

        for hours in (1, 1.5, 2, 3):
            verdict = resolve_period(get_period("Morning"), MONDAY, bookings, None, hours)
            assert all(slot.duration_minutes() >= hours * 60 for slot in verdict.available_slots)

    def test_weekly_availability_only_sets_provider_flag(self):
        weekly = normalize_weekly_availability({"Morning": {"Tue": True}})

        verdict = resolve_period(get_period("Morning"), MONDAY, [], weekly, 2)

        assert verdict.conflict_level is ConflictLevel.NONE
        assert not verdict.provider_available

    def test_raw_weekly_tables_are_accepted(self):
        """Either source encoding can be passed without normalizing it first."""
        provider_table = {"Morning": {"Mon": True}, "Night": {"Mon": False}}
        client_table = {"Monday": {"Morning": False, "Evening": True}}

        assert resolve_period("Morning", MONDAY, [], provider_table, 2).provider_available
        assert not resolve_period("Evening", MONDAY, [], provider_table, 2).provider_available
        assert not resolve_period("Morning", MONDAY, [], client_table, 2).provider_available
        assert resolve_period("Evening", MONDAY, [], client_table, 2).provider_available

    def test_date_string_is_accepted(self):
        booking = make_booking("b1", "08:00", "09:00")

        verdict = resolve_period("Morning", "2024-11-25", [booking], None, 2)

        assert verdict.conflict_level is ConflictLevel.PARTIAL

    def test_conflicting_bookings_render_in_rest_shape(self):
        booking = make_booking("b1", "11:00", "15:00")

        verdict = resolve_period(get_period("Noon"), MONDAY, [booking], None, 1)

        assert verdict.as_dict()["conflictingBookings"] == [{
            "_id": "b1",
            "bookingDate": "2024-11-25",
            "proposedStartTime": "11:00",
            "proposedEndTime": "15:00",
            "status": "confirmed",
        }]

    def test_invalid_service_duration(self):
        with pytest.raises(ValueError):
            resolve_period(get_period("Morning"), MONDAY, [], None, 0)


class TestResolveDay:
    """Tests for per-period badges."""

    def test_badges_cover_every_status(self):
        weekly = normalize_weekly_availability({
            "Morning": {"Mon": True},
            "Noon": {"Mon": True},
            "Afternoon": {"Mon": True},
            "Night": {"Mon": False},
        })
        bookings = [
            make_booking("b1", "08:00", "09:00"),
            make_booking("b2", "11:00", "15:00"),
        ]

        badges = resolve_day(MONDAY, bookings, weekly, 2)

        assert [badge.period for badge in badges] == list(PERIODS)
        assert [badge.status for badge in badges] == [
            PeriodStatus.PARTIALLY_AVAILABLE,
            PeriodStatus.FULLY_BOOKED,
            PeriodStatus.AVAILABLE,
            PeriodStatus.PROVIDER_UNAVAILABLE,
        ]
        assert [badge.selectable for badge in badges] == [True, False, True, False]

    def test_general_request_is_always_available(self):
        bookings = [make_booking("b1", "07:00", "23:00")]

        badges = resolve_day(MONDAY, bookings, None, 2, general_request=True)

        assert all(badge.status is PeriodStatus.AVAILABLE for badge in badges)

    def test_missing_weekly_data_does_not_restrict(self):
        badges = resolve_day(MONDAY, [], normalize_weekly_availability(None), 2)

        assert all(badge.status is PeriodStatus.AVAILABLE for badge in badges)

    def test_raw_provider_table_with_string_date(self):
        badges = resolve_day("2024-11-25", [], {"Morning": {"Mon": True}, "Night": {"Mon": False}}, 2)

        assert badges[0].status is PeriodStatus.AVAILABLE
        assert badges[3].status is PeriodStatus.PROVIDER_UNAVAILABLE
