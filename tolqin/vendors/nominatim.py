"""Client utilities for the Nominatim reverse geocoding API."""

import logging
from typing import Any, Dict

import requests

from tolqin.models import Coordinates, Location

logger = logging.getLogger(__name__)
_SESSION = requests.Session()

# Most specific first.
_LOCALITY_KEYS = (
    "hamlet",
    "village",
    "town",
    "city",
    "city_district",
    "municipality",
    "county",
    "state",
    "territory",
    "region",
)


class NominatimError(RuntimeError):
    """Raised when the Nominatim API returns a non-successful response."""


class LocationNotFoundError(NominatimError):
    """Raised when Nominatim has no address for the given coordinates."""


def reverse_geocode(coordinates: Coordinates, base_url: str, timeout: float = 10) -> Location:
    params = {
        "lat": repr(coordinates.latitude),
        "lon": repr(coordinates.longitude),
        "format": "json",
    }
    response = _SESSION.get(
        f"{base_url.rstrip('/')}/reverse",
        params=params,
        headers={"Accept-Language": "en"},
        timeout=timeout,
    )
    if response.status_code != 200:
        logger.error("reverse_geocode failed: status=%s body=%s", response.status_code, response.text[:200])
        raise NominatimError(f"unsuccessful response: {response.status_code} {response.text[:200]}")

    payload = response.json()
    if payload.get("error"):
        logger.debug("No location for %s: %s", coordinates, payload.get("error"))
        raise LocationNotFoundError("location not found")

    address = payload.get("address") or {}
    return Location(
        locality=_locality(address),
        country_code=address.get("country_code") or "",
        coordinates=coordinates,
    )


def _locality(address: Dict[str, Any]) -> str:
    for key in _LOCALITY_KEYS:
        value = address.get(key)
        if value:
            return value
    return ""
