"""Create single spots, filling in locality and country from reverse geocoding."""

import logging
from typing import Optional

from tolqin.core import geo
from tolqin.core.config import Settings, get_settings
from tolqin.core.spot_store import SpotStore
from tolqin.models import Coordinates, Spot, SpotEntry
from tolqin.vendors import nominatim

logger = logging.getLogger(__name__)


class InvalidSpotError(ValueError):
    """Raised when a spot creation request carries invalid fields."""


def create_spot(
    name: str,
    latitude: float,
    longitude: float,
    store: SpotStore,
    settings: Optional[Settings] = None,
) -> Spot:
    name = (name or "").strip()
    if not name:
        raise InvalidSpotError("invalid spot name")
    if not geo.is_latitude(latitude):
        raise InvalidSpotError("invalid latitude")
    if not geo.is_longitude(longitude):
        raise InvalidSpotError("invalid longitude")

    settings = settings or get_settings()
    coordinates = Coordinates(latitude=latitude, longitude=longitude)
    location = nominatim.reverse_geocode(
        coordinates,
        base_url=settings.nominatim_base_url,
        timeout=settings.nominatim_timeout,
    )
    logger.info("Resolved %s to %s, %s", coordinates, location.locality, location.country_code)

    return store.create_spot(SpotEntry(name=name, location=location))
