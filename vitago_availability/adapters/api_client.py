"""
Vitago marketplace REST client for fetching bookings and provider availability.
"""

import logging
from datetime import date as date_type
from typing import Any, Dict, List

import requests

from ..domain.exceptions import ApiError
from ..domain.models import AvailabilityOverride, Booking

logger = logging.getLogger(__name__)


class VitagoApiClient:
    """
    Read-only client for the marketplace backend.

    Only the endpoints the availability engine needs are covered; bookings
    are never created or modified here.
    """

    def __init__(self, base_url: str, timeout: float = 30, session: requests.Session | None = None):
        """
        Initialize the API client.

        Args:
            base_url: Base URL of the marketplace API (e.g. https://api.example.com/api)
            timeout: Request timeout in seconds
            session: Optional requests session to reuse connections
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Accept": "application/json"}

    def get_provider_bookings(self, provider_id: str) -> List[Booking]:
        """
        Get all bookings of a provider.

        Records that cannot be parsed into a booking are skipped.

        Raises:
            ApiError: If the API call fails
        """
        data = self._get(f"/booking/provider/{provider_id}")
        records = _unwrap_list(data, "bookings")

        bookings: List[Booking] = []
        for record in records:
            if not isinstance(record, dict):
                logger.warning("Skipping booking record of type %s", type(record).__name__)
                continue
            bookings.append(Booking.from_api(record))

        return bookings

    def get_provider_availability(self, provider_id: str) -> Any:
        """
        Get the raw weekly availability table from the provider profile.

        Raises:
            ApiError: If the API call fails
        """
        data = self._get(f"/provider/{provider_id}")
        if not isinstance(data, dict):
            return None

        profile = data.get("provider") if isinstance(data.get("provider"), dict) else data
        return profile.get("availability")

    def get_availability_overrides(
        self,
        provider_id: str,
        on_date: date_type,
    ) -> List[AvailabilityOverride]:
        """
        Get the provider's date-specific availability records.

        Raises:
            ApiError: If the API call fails
        """
        data = self._get(
            f"/provider/{provider_id}/availability",
            params={"date": on_date.isoformat()},
        )

        overrides: List[AvailabilityOverride] = []
        for record in _unwrap_list(data, "availability"):
            try:
                overrides.append(AvailabilityOverride.from_api(record))
            except (AttributeError, ValueError) as exc:
                logger.warning("Skipping availability record %r: %s", record, exc)
                continue

        return overrides

    def _get(self, path: str, params: Dict[str, str] | None = None) -> Any:
        url = f"{self.base_url}{path}"

        try:
            response = self.session.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()

        except requests.exceptions.RequestException as e:
            raise ApiError(f"Failed to fetch {url}: {e}") from e
        except ValueError as e:
            raise ApiError(f"Invalid JSON from {url}: {e}") from e


def _unwrap_list(data: Any, key: str) -> List[Any]:
    """Accept either a bare list or an object wrapping it under ``key`` or "data"."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for candidate in (key, "data"):
            if isinstance(data.get(candidate), list):
                return data[candidate]
    return []
