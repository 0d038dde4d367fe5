"""PostgreSQL storage for spots."""

import logging
import threading
import time
from typing import Any, List, Optional, Sequence, Tuple

import psycopg2

from tolqin.core import db
from tolqin.core.batch import Batch, Batcher
from tolqin.core.config import DEFAULT_BATCH_SIZE, validate_batch_size
from tolqin.core.errors import (
    EmptySpotUpdateError,
    ImportCancelledError,
    NothingToImportError,
    SpotNotFoundError,
    SpotStoreError,
)
from tolqin.models import Coordinates, Location, Spot, SpotEntry, SpotUpdateEntry

logger = logging.getLogger(__name__)

_SPOT_COLUMNS = "id, name, latitude, longitude, locality, country_code, created_at"

_INSERT_SPOTS = "INSERT INTO spots (name, latitude, longitude, locality, country_code) VALUES "
_ROW_PLACEHOLDER = "(%s, %s, %s, %s, %s)"

_INSERT_SPOT = f"""
INSERT INTO spots (name, latitude, longitude, locality, country_code)
VALUES (%s, %s, %s, %s, %s)
RETURNING {_SPOT_COLUMNS};
"""

_SELECT_SPOT = f"""
SELECT {_SPOT_COLUMNS}
FROM spots
WHERE CAST(id AS VARCHAR) = %s;
"""

_DELETE_SPOT = "DELETE FROM spots WHERE CAST(id AS VARCHAR) = %s;"

# Update payloads are restricted to these columns before they reach SQL.
_UPDATABLE_COLUMNS = ("name", "latitude", "longitude", "locality", "country_code")


def _entry_params(entry: SpotEntry) -> Tuple[Any, ...]:
    return (
        entry.name,
        entry.location.coordinates.latitude,
        entry.location.coordinates.longitude,
        entry.location.locality,
        entry.location.country_code,
    )


def _to_spot(row: Sequence[Any]) -> Spot:
    spot_id, name, latitude, longitude, locality, country_code, created_at = row
    return Spot(
        id=str(spot_id),
        name=name,
        location=Location(
            locality=locality or "",
            country_code=country_code or "",
            coordinates=Coordinates(latitude=float(latitude), longitude=float(longitude)),
        ),
        created_at=created_at,
    )


class SpotStore:
    """Reads and writes spots, including the transactional bulk insert used by imports.

    ``timeout`` bounds a whole :meth:`create_spots` run in seconds; 0 disables it.
    """

    def __init__(self, batch_size: int = DEFAULT_BATCH_SIZE, timeout: float = 0.0) -> None:
        self.batch_size = validate_batch_size(batch_size)
        self.timeout = timeout

    # ---------- bulk path ----------

    def create_spots(self, entries: Sequence[SpotEntry], cancel: Optional[threading.Event] = None) -> int:
        """Insert all entries in batches inside one transaction and return the row count.

        Either every entry is committed or none is: any failing batch rolls back
        the batches that ran before it.
        """
        if not entries:
            raise NothingToImportError("nothing to import")

        deadline = time.monotonic() + self.timeout if self.timeout > 0 else None

        try:
            with db.get_connection() as conn:
                return self._create_spots_in_transaction(conn, entries, cancel, deadline)
        except psycopg2.Error as exc:
            raise SpotStoreError(f"failed to begin transaction: {exc}") from exc

    def _create_spots_in_transaction(
        self,
        conn,
        entries: Sequence[SpotEntry],
        cancel: Optional[threading.Event],
        deadline: Optional[float],
    ) -> int:
        count = 0
        try:
            with conn.cursor() as cur:
                for batch in Batcher(len(entries), self.batch_size):
                    _check_cancelled(cancel, deadline)
                    count += self._insert_batch(cur, entries[batch.slice()], batch)
            conn.commit()
        except psycopg2.Error as exc:
            _rollback(conn)
            raise SpotStoreError(f"failed to import spots: {exc}") from exc
        except SpotStoreError:
            _rollback(conn)
            raise

        logger.info("Committed %d spots in batches of %d", count, self.batch_size)
        return count

    def _insert_batch(self, cur, entries: Sequence[SpotEntry], batch: Batch) -> int:
        params: List[Any] = []
        for entry in entries:
            params.extend(_entry_params(entry))

        cur.execute(_INSERT_SPOTS + ", ".join([_ROW_PLACEHOLDER] * len(entries)), params)

        # A short count means the store silently dropped rows.
        if cur.rowcount != batch.size:
            raise SpotStoreError(
                f"failed to import spots: batch [{batch.i}, {batch.j}] "
                f"affected {cur.rowcount} rows, expected {batch.size}"
            )
        logger.debug("Inserted batch [%d, %d]", batch.i, batch.j)
        return cur.rowcount

    # ---------- single spot ----------

    def create_spot(self, entry: SpotEntry) -> Spot:
        with db.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(_INSERT_SPOT, _entry_params(entry))
                row = cur.fetchone()
            conn.commit()
        spot = _to_spot(row)
        logger.debug("Created spot %s", spot.id)
        return spot

    def spot(self, spot_id: str) -> Spot:
        with db.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(_SELECT_SPOT, (spot_id,))
                row = cur.fetchone()
        if row is None:
            raise SpotNotFoundError(f"spot {spot_id} not found")
        return _to_spot(row)

    def update_spot(self, update: SpotUpdateEntry) -> Spot:
        values = update.values()
        if not values:
            raise EmptySpotUpdateError("empty spot update entry")

        columns = [column for column in _UPDATABLE_COLUMNS if column in values]
        assignments = ", ".join(f"{column} = %s" for column in columns)
        query = (
            f"UPDATE spots SET {assignments} "
            f"WHERE CAST(id AS VARCHAR) = %s RETURNING {_SPOT_COLUMNS};"
        )
        params = [values[column] for column in columns] + [update.id]

        with db.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                row = cur.fetchone()
            conn.commit()
        if row is None:
            raise SpotNotFoundError(f"spot {update.id} not found")
        return _to_spot(row)

    def delete_spot(self, spot_id: str) -> None:
        with db.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(_DELETE_SPOT, (spot_id,))
                deleted = cur.rowcount
            conn.commit()
        if deleted == 0:
            raise SpotNotFoundError(f"spot {spot_id} not found")


def _check_cancelled(cancel: Optional[threading.Event], deadline: Optional[float]) -> None:
    if cancel is not None and cancel.is_set():
        raise ImportCancelledError("import cancelled")
    if deadline is not None and time.monotonic() > deadline:
        raise ImportCancelledError("import timed out")


def _rollback(conn) -> None:
    try:
        conn.rollback()
    except psycopg2.Error as exc:
        # The server discards the open transaction once the session drops.
        logger.error("Rollback failed: %s", exc)
    else:
        logger.warning("Rolled back spot import transaction")
