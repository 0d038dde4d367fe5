"""CLI job that bulk-loads spots from a CSV file into the database."""

import argparse
import logging
import threading
import time
from typing import List, Optional, Protocol

from tolqin.core.config import ConfigError, get_settings, validate_batch_size
from tolqin.core.db import close_pool
from tolqin.core.errors import (
    STAGE_READ,
    STAGE_VALIDATE,
    STAGE_WRITE,
    NothingToImportError,
    SourceReadError,
    SpotImportError,
)
from tolqin.core.log import configure_logging
from tolqin.core.spot_store import SpotStore
from tolqin.etl.csv_source import CsvSpotEntrySource
from tolqin.etl.transform import prepare_entries
from tolqin.models import SpotEntry

logger = logging.getLogger(__name__)


class SpotEntrySource(Protocol):
    def spot_entries(self) -> List[SpotEntry]:
        ...


class MultiSpotWriter(Protocol):
    def create_spots(self, entries: List[SpotEntry], cancel: Optional[threading.Event] = None) -> int:
        ...


def import_spots(
    source: SpotEntrySource,
    store: MultiSpotWriter,
    *,
    collect_all: bool = False,
    cancel: Optional[threading.Event] = None,
) -> int:
    """Read, validate and persist every entry from ``source``; return how many were stored.

    Nothing is persisted unless every step succeeds. Failures are raised as
    SpotImportError subclasses whose message names the failing stage.
    """
    try:
        raw_entries = source.spot_entries()
    except SpotImportError as exc:
        raise exc.with_context(STAGE_READ) from exc
    except (OSError, ValueError) as exc:
        raise SourceReadError(f"{STAGE_READ}: failed to read spot entries from source: {exc}") from exc
    logger.info("Read %d spot entries", len(raw_entries))

    try:
        entries = prepare_entries(raw_entries, collect_all=collect_all)
    except SpotImportError as exc:
        raise exc.with_context(STAGE_VALIDATE) from exc

    try:
        count = store.create_spots(entries, cancel=cancel)
    except SpotImportError as exc:
        raise exc.with_context(STAGE_WRITE) from exc

    logger.info("Imported %d spots", count)
    return count


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Import spots from a CSV file into the database")
    parser.add_argument("--csv", dest="csv_file", help="CSV file to import spots from (defaults to CSV_FILE)")
    parser.add_argument(
        "--batch-size",
        dest="batch_size",
        type=int,
        help="Number of spots per insert statement (defaults to BATCH_SIZE)",
    )
    parser.add_argument(
        "--report-all",
        dest="collect_all",
        action="store_true",
        help="Report every invalid entry instead of stopping at the first one",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    configure_logging()
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
        batch_size = validate_batch_size(args.batch_size or settings.batch_size)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc

    configure_logging(settings.log_level, settings.log_format)

    csv_file = args.csv_file or settings.csv_file
    if not csv_file:
        logger.error("Configuration error: pass --csv or set CSV_FILE")
        raise SystemExit(2)

    start = time.monotonic()
    try:
        count = import_spots(
            CsvSpotEntrySource.from_path(csv_file),
            SpotStore(batch_size=batch_size, timeout=settings.import_timeout),
            collect_all=args.collect_all,
        )
    except NothingToImportError:
        logger.warning("Nothing to import from %s", csv_file)
        count = 0
    except SpotImportError as exc:
        logger.error("Failed to import spots: %s", exc)
        raise SystemExit(1) from exc
    finally:
        close_pool()

    print(f"{count} spot(s) imported in {time.monotonic() - start:.3f}s")


if __name__ == "__main__":
    main()
