"""
Geocodio client.

Resolves street addresses to coordinates, zip code and elementary school
district, which drive listing visibility. Failures never block a profile or
listing write: callers log the error and keep whatever location they had.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from mowsy.core.config import Settings, get_settings
from mowsy.services.errors import UpstreamError

logger = logging.getLogger(__name__)


class GeocodeResult(BaseModel):
    """First match returned by Geocodio."""
    latitude: float
    longitude: float
    zip_code: Optional[str] = None
    formatted_address: Optional[str] = None
    district_name: Optional[str] = None
    district_code: Optional[str] = None


class GeocodioService:
    """Thin async wrapper over the Geocodio geocode endpoint."""

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        settings = settings or get_settings()
        self.api_key = settings.geocodio_api_key
        self.base_url = settings.geocodio_base_url.rstrip("/")
        self.timeout = settings.geocodio_timeout_seconds
        self._transport = transport

    async def geocode(self, query: str) -> GeocodeResult:
        """Forward-geocode an address, returning the first match."""
        if not self.api_key:
            logger.warning("[GEOCODE] GEOCODIO_API_KEY not set, skipping lookup")
            raise UpstreamError("geocodio API key not configured")

        params = {"q": query, "api_key": self.api_key, "fields": "school_districts"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}/geocode", params=params)
        except httpx.HTTPError as e:
            logger.warning(f"[GEOCODE] Request failed: {e}")
            raise UpstreamError(f"failed to make geocoding request: {e}")

        if response.status_code != 200:
            logger.warning(
                f"[GEOCODE] API returned status {response.status_code}: {response.text[:200]}"
            )
            raise UpstreamError(f"geocoding API returned status {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            raise UpstreamError("failed to parse geocoding response")

        results = data.get("results") or []
        if not results:
            raise UpstreamError(f"no geocoding results found for: {query}")

        return self._parse_result(results[0])

    @staticmethod
    def _parse_result(result: dict[str, Any]) -> GeocodeResult:
        location = result.get("location") or {}
        components = result.get("address_components") or {}
        schools = (result.get("fields") or {}).get("school_districts") or {}
        elementary = schools.get("elementary") or []
        first_district = elementary[0] if elementary else {}

        if location.get("lat") is None or location.get("lng") is None:
            raise UpstreamError("geocoding result has no location")

        return GeocodeResult(
            latitude=location.get("lat"),
            longitude=location.get("lng"),
            zip_code=components.get("zip") or None,
            formatted_address=result.get("formatted_address"),
            district_name=first_district.get("name"),
            district_code=first_district.get("lea_code"),
        )


def user_geocode_query(address: str, city: Optional[str], state: Optional[str], zip_code: Optional[str]) -> str:
    """Full one-line address used to geocode a user profile."""
    return f"{address}, {city or ''}, {state or ''} {zip_code or ''}".strip()


def apply_location(target: Any, result: GeocodeResult, include_code: bool = False) -> None:
    """Copy a geocode result onto a user, job or equipment row."""
    target.latitude = result.latitude
    target.longitude = result.longitude
    if result.zip_code:
        target.zip_code = result.zip_code
    if result.district_name:
        target.elementary_school_district_name = result.district_name
        if include_code:
            target.elementary_school_district_code = result.district_code


def copy_owner_location(target: Any, owner: Any) -> None:
    """Fallback location for a listing: the owner's stored profile values."""
    target.latitude = owner.latitude
    target.longitude = owner.longitude
    target.zip_code = owner.zip_code
    target.elementary_school_district_name = owner.elementary_school_district_name


def get_geocoding_service() -> GeocodioService:
    return GeocodioService()
