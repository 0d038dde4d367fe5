"""Core data models shared by the spot importer and spot storage."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class Location:
    locality: str
    country_code: str
    coordinates: Coordinates


@dataclass(frozen=True, slots=True)
class SpotEntry:
    """A spot that has not been persisted yet."""

    name: str
    location: Location


@dataclass(frozen=True, slots=True)
class Spot:
    """A spot as stored in the database."""

    id: str
    name: str
    location: Location
    created_at: datetime


@dataclass(frozen=True, slots=True)
class SpotUpdateEntry:
    """Partial or full update of a stored spot; ``None`` fields are left untouched."""

    id: str
    name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    locality: Optional[str] = None
    country_code: Optional[str] = None

    def values(self) -> dict:
        fields = {
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "locality": self.locality,
            "country_code": self.country_code,
        }
        return {column: value for column, value in fields.items() if value is not None}
