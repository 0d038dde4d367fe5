"""Utilities for cleaning and checking spot entries before they are stored."""

import logging
from dataclasses import replace
from typing import Iterable, List, Optional

from tolqin.core import geo
from tolqin.core.errors import EntryValidationError
from tolqin.models import SpotEntry

logger = logging.getLogger(__name__)


def sanitize_entry(entry: SpotEntry) -> SpotEntry:
    """Return a copy of the entry with surrounding whitespace stripped from text fields."""
    location = replace(
        entry.location,
        locality=entry.location.locality.strip(),
        country_code=entry.location.country_code.strip(),
    )
    return replace(entry, name=entry.name.strip(), location=location)


def validate_entry(entry: SpotEntry) -> Optional[str]:
    """Return the first constraint the entry violates, or None when it is valid."""
    if not entry.name:
        return "invalid spot name"
    if not entry.location.locality:
        return "invalid locality"
    if not geo.is_country(entry.location.country_code):
        return "invalid country code"
    if not geo.is_latitude(entry.location.coordinates.latitude):
        return "invalid latitude"
    if not geo.is_longitude(entry.location.coordinates.longitude):
        return "invalid longitude"
    return None


def prepare_entries(entries: Iterable[SpotEntry], collect_all: bool = False) -> List[SpotEntry]:
    """Sanitize and validate entries, raising EntryValidationError on the first problem.

    With ``collect_all`` every entry is checked and the error lists all problems.
    """
    prepared: List[SpotEntry] = []
    problems: List[str] = []

    for position, entry in enumerate(entries, start=1):
        entry = sanitize_entry(entry)
        problem = validate_entry(entry)
        if problem is None:
            prepared.append(entry)
            continue

        message = f"invalid entry #{position}: {problem}"
        if not collect_all:
            raise EntryValidationError(message)
        problems.append(message)

    if problems:
        logger.debug("Rejected %d entries", len(problems))
        raise EntryValidationError(
            f"{len(problems)} invalid entries, first: {problems[0]}",
            errors=problems,
        )

    return prepared
