"""
Provider weekly availability: which periods a provider nominally works, per weekday.

The marketplace stores this table in more than one shape. Everything is
normalized into ``WeeklyAvailability`` before it is queried, so the rest of
the engine only ever sees one representation.
"""

import logging
from dataclasses import dataclass, field
from datetime import date as date_type
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .models import DAY_NAMES, PeriodLabel, day_name

logger = logging.getLogger(__name__)

# Sunday-first order used by the client-facing index form
SUNDAY_FIRST_DAYS = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

DAY_ALIASES: Dict[str, str] = {
    alias: name for name in DAY_NAMES for alias in (name.lower(), name[:3].lower())
}

# Fixed rename table from source period names to canonical labels.
# Provider profiles call the evening slot "Night".
PERIOD_ALIASES: Dict[str, PeriodLabel] = {
    "morning": PeriodLabel.MORNING,
    "noon": PeriodLabel.NOON,
    "afternoon": PeriodLabel.AFTERNOON,
    "evening": PeriodLabel.EVENING,
    "night": PeriodLabel.EVENING,
}


def _empty_day() -> Dict[PeriodLabel, bool]:
    return {label: False for label in PeriodLabel}


@dataclass
class WeeklyAvailability:
    """
    Canonical weekly matrix: full day name -> period label -> available.

    A model built from no data at all is *empty*; callers treat that as
    "nothing restricts this provider". A model built from data fails closed:
    any day or period the source did not mention is unavailable.
    """
    days: Dict[str, Dict[PeriodLabel, bool]] = field(default_factory=dict)

    def __post_init__(self):
        # Never mutate the mapping the caller passed in
        self.days = {day: dict(entries) for day, entries in self.days.items()}
        if self.days:
            for name in DAY_NAMES:
                entries = self.days.setdefault(name, _empty_day())
                for label in PeriodLabel:
                    entries.setdefault(label, False)

    @property
    def is_empty(self) -> bool:
        return not self.days

    def is_available(self, day: str, period: Union[str, PeriodLabel]) -> bool:
        canonical_day = DAY_ALIASES.get(str(day).strip().lower())
        if canonical_day is None:
            return False
        label = PERIOD_ALIASES.get(str(getattr(period, "value", period)).strip().lower())
        if label is None:
            return False
        return self.days.get(canonical_day, {}).get(label, False)

    def available_periods(self, on_date: date_type) -> List[PeriodLabel]:
        """Periods enabled on the weekday of ``on_date``, in daily order."""
        entries = self.days.get(day_name(on_date), {})
        return [label for label in PeriodLabel if entries.get(label, False)]

    def is_day_available(self, on_date: date_type) -> bool:
        return bool(self.available_periods(on_date))


def is_day_period_available(
    weekly: WeeklyAvailability,
    day: str,
    period: Union[str, PeriodLabel],
) -> bool:
    """Fail-closed lookup: unknown day, period or entry means unavailable."""
    return weekly.is_available(day, period)


def normalize_weekly_availability(raw: Any) -> WeeklyAvailability:
    """
    Normalize any supported source encoding into ``WeeklyAvailability``.

    Supported shapes:
    - provider-facing, period first: {"Morning": {"Mon": true, ...}, ..., "Night": {...}}
    - client-facing, day first: {"Sunday": {"Morning": true, ..., "Evening": false}, ...}
    - client-facing index form: seven per-period dicts, Sunday first
    - an existing WeeklyAvailability (returned unchanged)

    Only values that are exactly ``True`` count as available.
    """
    if isinstance(raw, WeeklyAvailability):
        return raw

    if not raw:
        return WeeklyAvailability()

    if isinstance(raw, Mapping):
        if any(_period_key(key) is not None for key in raw):
            return _from_period_first(raw)
        return _from_day_first(raw)

    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        return _from_sunday_index(raw)

    logger.debug("Ignoring weekly availability of unsupported type %s", type(raw).__name__)
    return WeeklyAvailability()


def _period_key(key: Any) -> Optional[PeriodLabel]:
    return PERIOD_ALIASES.get(str(key).strip().lower())


def _day_key(key: Any) -> Optional[str]:
    return DAY_ALIASES.get(str(key).strip().lower())


def _from_period_first(raw: Mapping) -> WeeklyAvailability:
    days: Dict[str, Dict[PeriodLabel, bool]] = {name: _empty_day() for name in DAY_NAMES}

    for period_key, per_day in raw.items():
        label = _period_key(period_key)
        if label is None or not isinstance(per_day, Mapping):
            logger.debug("Skipping unknown weekly availability period %r", period_key)
            continue
        for key, value in per_day.items():
            name = _day_key(key)
            if name is None:
                logger.debug("Skipping unknown weekly availability day %r", key)
                continue
            days[name][label] = days[name][label] or value is True

    return WeeklyAvailability(days=days)


def _from_day_first(raw: Mapping) -> WeeklyAvailability:
    days: Dict[str, Dict[PeriodLabel, bool]] = {name: _empty_day() for name in DAY_NAMES}

    for key, per_period in raw.items():
        name = _day_key(key)
        if name is None or not isinstance(per_period, Mapping):
            logger.debug("Skipping unknown weekly availability day %r", key)
            continue
        _merge_periods(days[name], per_period)

    return WeeklyAvailability(days=days)


def _from_sunday_index(raw: Sequence) -> WeeklyAvailability:
    days: Dict[str, Dict[PeriodLabel, bool]] = {name: _empty_day() for name in DAY_NAMES}

    if len(raw) != len(SUNDAY_FIRST_DAYS):
        logger.debug("Weekly availability index form has %d entries, expected 7", len(raw))

    for name, per_period in zip(SUNDAY_FIRST_DAYS, raw):
        if isinstance(per_period, Mapping):
            _merge_periods(days[name], per_period)

    return WeeklyAvailability(days=days)


def _merge_periods(target: Dict[PeriodLabel, bool], per_period: Mapping) -> None:
    for period_key, value in per_period.items():
        label = _period_key(period_key)
        if label is None:
            logger.debug("Skipping unknown weekly availability period %r", period_key)
            continue
        target[label] = target[label] or value is True
