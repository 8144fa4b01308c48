"""
Geocoding Client - Nominatim (OpenStreetMap)

Provides:
- reverse(lat, lng): short address (first three address components)
- forward(text): coordinates for a free-text place
"""
from typing import Any, Dict, Optional

import httpx

from civicai.config import get_settings, Settings
from civicai.exceptions import GeocodingError
from civicai.models.ticket import Coordinates
from civicai.utils.logger import get_logger

logger = get_logger(__name__)

ADDRESS_COMPONENTS = 3


def shorten_address(display_name: str, components: int = ADDRESS_COMPONENTS) -> str:
    """Keep the first address components of a comma-separated display name"""
    parts = [p.strip() for p in display_name.split(",") if p.strip()]
    return ", ".join(parts[:components])


def format_coordinates(location: Coordinates) -> str:
    """Coordinate text used when no address can be resolved"""
    return f"{location.lat:.4f}, {location.lng:.4f}"


class GeocodingClient:
    """
    Nominatim HTTP client

    Args:
        settings: Application settings (base URL, user agent, timeout)
    """

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.base_url = settings.nominatim_url.rstrip("/")
        self.headers = {"User-Agent": settings.geocoding_user_agent}
        self.timeout = settings.geocoding_timeout

    async def _get(self, endpoint: str, params: Dict[str, Any]) -> Any:
        """
        GET a Nominatim endpoint

        Raises:
            GeocodingError: On HTTP or transport errors
        """
        url = f"{self.base_url}/{endpoint}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params, headers=self.headers)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Geocoding request failed: HTTP {e.response.status_code}")
            raise GeocodingError(f"HTTP {e.response.status_code} from {endpoint}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Geocoding request failed: {e}")
            raise GeocodingError(str(e)) from e

    async def reverse(self, location: Coordinates) -> str:
        """
        Reverse geocode to a short address

        Returns:
            First three address components, or formatted coordinates when
            Nominatim has no display name

        Raises:
            GeocodingError: On request failure
        """
        data = await self._get("reverse", {
            "format": "json",
            "lat": location.lat,
            "lon": location.lng,
        })

        display_name = data.get("display_name") if isinstance(data, dict) else None
        if not display_name:
            return format_coordinates(location)
        return shorten_address(display_name)

    async def forward(self, query: str) -> Optional[Coordinates]:
        """
        Forward geocode free text

        Returns:
            Coordinates of the best match, None if nothing matched

        Raises:
            GeocodingError: On request failure
        """
        data = await self._get("search", {"format": "json", "q": query, "limit": 1})
        if not data:
            return None

        first = data[0]
        try:
            return Coordinates(lat=float(first["lat"]), lng=float(first["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodingError(f"Malformed geocoding result: {e}") from e

    async def resolve_address(self, location: Optional[Coordinates]) -> str:
        """
        Address for drafting; never raises

        Returns:
            Short address, formatted coordinates, or "Unknown Location"
        """
        if location is None or location.is_unknown:
            return "Unknown Location"
        try:
            return await self.reverse(location)
        except GeocodingError as e:
            logger.warning(f"Reverse geocoding failed, using coordinates: {e}")
            return format_coordinates(location)
