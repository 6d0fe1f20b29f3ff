"""
Mock marketplace client for working without a running backend.
"""

import json
import logging
from datetime import date as date_type
from pathlib import Path
from typing import Any, Dict, List

from ..domain.models import AvailabilityOverride, Booking

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_provider_data.json"


class MockVitagoClient:
    """
    Mock client that serves provider data from a JSON file.

    The file maps provider ids to their profile availability, bookings and
    date-specific overrides, in the same shapes the REST API returns.
    """

    def __init__(self, data_file: Path | None = None):
        """
        Initialize the mock client.

        Args:
            data_file: Optional path to a JSON file; defaults to the bundled sample
        """
        self.data_file = data_file or DEFAULT_DATA_FILE
        self.providers: Dict[str, Dict[str, Any]] = self._load_provider_data()

    def _load_provider_data(self) -> Dict[str, Dict[str, Any]]:
        """Load mock provider data from the JSON file."""
        if not self.data_file.exists():
            logger.warning("Mock data file %s not found, serving no providers", self.data_file)
            return {}

        with open(self.data_file, "r", encoding="utf-8") as f:
            data = json.load(f)

        return data.get("providers", {})

    def get_provider_bookings(self, provider_id: str) -> List[Booking]:
        records = self.providers.get(provider_id, {}).get("bookings", [])
        return [Booking.from_api(record) for record in records]

    def get_provider_availability(self, provider_id: str) -> Any:
        return self.providers.get(provider_id, {}).get("availability")

    def get_availability_overrides(
        self,
        provider_id: str,
        on_date: date_type,
    ) -> List[AvailabilityOverride]:
        overrides: List[AvailabilityOverride] = []

        for record in self.providers.get(provider_id, {}).get("overrides", []):
            try:
                override = AvailabilityOverride.from_api(record)
            except ValueError as exc:
                logger.warning("Skipping mock availability record %r: %s", record, exc)
                continue
            if override.date == on_date:
                overrides.append(override)

        return overrides
