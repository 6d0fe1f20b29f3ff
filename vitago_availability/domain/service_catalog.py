"""
Expected durations for the cleaning services offered on the marketplace.
"""

from typing import Dict, Mapping, Optional, Sequence

from .models import MINUTES_PER_DAY, TimeLike, as_time_of_day, format_time

DEFAULT_SERVICE_DURATION_HOURS = 2.0

DEFAULT_SERVICE_DURATIONS: Dict[str, float] = {
    "Regular Cleaning": 2,
    "Deep Cleaning": 4,
    "Window Cleaning": 1.5,
    "Move Out Cleaning": 5,
    "Office Cleaning": 3,
    "Post Construction": 6,
}


class ServiceCatalog:
    """Maps service-type names to an expected duration in hours."""

    def __init__(
        self,
        durations: Optional[Mapping[str, float]] = None,
        default_hours: float = DEFAULT_SERVICE_DURATION_HOURS,
    ):
        if default_hours <= 0:
            raise ValueError(f"Default duration must be positive, got {default_hours}")
        source = DEFAULT_SERVICE_DURATIONS if durations is None else durations
        self._durations = {name.strip().lower(): float(hours) for name, hours in source.items()}
        self.default_hours = float(default_hours)

    def duration_for(self, service_type: Optional[str]) -> float:
        """Unknown or missing service types silently get the default duration."""
        if not service_type:
            return self.default_hours
        return self._durations.get(service_type.strip().lower(), self.default_hours)

    def duration_for_selection(self, service_types: Sequence[str]) -> float:
        """The first selected service determines the duration."""
        if not service_types:
            return self.default_hours
        return self.duration_for(service_types[0])

    def suggest_end_time(self, start_time: TimeLike, service_type: Optional[str]) -> str:
        """Start time plus the service duration, capped at 23:59."""
        start = as_time_of_day(start_time)
        end = start + int(round(self.duration_for(service_type) * 60))
        return format_time(min(end, MINUTES_PER_DAY - 1))
