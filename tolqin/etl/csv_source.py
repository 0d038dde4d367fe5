"""CSV-backed source of spot entries.

Expected columns: name, latitude, longitude, locality, country code. The first
row is a header and is skipped.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import List, Optional, TextIO

from tolqin.core.errors import SourceReadError
from tolqin.models import Coordinates, Location, SpotEntry

logger = logging.getLogger(__name__)

FIELD_COUNT = 5


class CsvSpotEntrySource:
    """Entries from an open text stream, or from a file read when entries are requested."""

    def __init__(self, stream: Optional[TextIO] = None, path: Optional[str] = None) -> None:
        if (stream is None) == (path is None):
            raise ValueError("exactly one of stream or path is required")
        self._stream = stream
        self._path = path

    @classmethod
    def from_path(cls, path: str) -> "CsvSpotEntrySource":
        return cls(path=path)

    def _open_stream(self) -> TextIO:
        if self._stream is not None:
            return self._stream
        # Read the whole file so no handle outlives the call.
        try:
            with open(self._path, "r", encoding="utf-8", newline="") as fh:
                content = fh.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceReadError(f"failed to read csv file {self._path}: {exc}") from exc
        return io.StringIO(content, newline="")

    def spot_entries(self) -> List[SpotEntry]:
        """Parse every record; a single malformed row fails the whole read."""
        reader = csv.reader(self._open_stream())
        try:
            # Blank lines carry no record and are skipped.
            records = [(reader.line_num, record) for record in reader if record]
        except csv.Error as exc:
            raise SourceReadError(f"failed to read csv: {exc}") from exc

        entries: List[SpotEntry] = [_to_entry(record, line_number) for line_number, record in records[1:]]

        logger.debug("Read %d spot entries from csv", len(entries))
        return entries


def _to_entry(record: List[str], line_number: int) -> SpotEntry:
    if len(record) != FIELD_COUNT:
        raise SourceReadError(
            f"invalid csv record on line {line_number}: "
            f"expected {FIELD_COUNT} fields, got {len(record)}"
        )

    name, latitude_raw, longitude_raw, locality, country_code = record
    latitude = _parse_float(latitude_raw, "latitude", line_number)
    longitude = _parse_float(longitude_raw, "longitude", line_number)

    return SpotEntry(
        name=name,
        location=Location(
            locality=locality,
            country_code=country_code,
            coordinates=Coordinates(latitude=latitude, longitude=longitude),
        ),
    )


def _parse_float(value: str, field: str, line_number: int) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise SourceReadError(f"invalid {field} on line {line_number}: {value!r}") from exc
