"""Application configuration helpers.

Settings come from the environment (optionally seeded from a `.env` file).
Database coordinates are mandatory because every importer run needs a store.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# PostgreSQL refuses statements with more than 65535 bind parameters.
MAX_BIND_PARAMETERS = 65535
SPOT_INSERT_COLUMNS = 5

DEFAULT_BATCH_SIZE = 100
DEFAULT_NOMINATIM_BASE_URL = "https://nominatim.openstreetmap.org"


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing or invalid."""


@dataclass(frozen=True)
class Settings:
    db_host: str
    db_port: str
    db_name: str
    db_username: str = ""
    db_password: str = ""
    db_sslmode: str = ""
    batch_size: int = DEFAULT_BATCH_SIZE
    csv_file: Optional[str] = None
    import_timeout: float = 0.0
    log_level: str = "INFO"
    log_format: str = "text"
    nominatim_base_url: str = DEFAULT_NOMINATIM_BASE_URL
    nominatim_timeout: float = 10.0

    @property
    def dsn(self) -> str:
        """Render the libpq connection string for these settings."""
        parts = [f"host={self.db_host}", f"port={self.db_port}", f"dbname={self.db_name}"]
        if self.db_sslmode:
            parts.append(f"sslmode={self.db_sslmode}")
        if self.db_username:
            parts.append(f"user={self.db_username}")
        if self.db_password:
            parts.append(f"password={self.db_password}")
        return " ".join(parts)


def validate_batch_size(batch_size: int) -> int:
    """Reject batch sizes that the store could never execute in one statement."""
    if batch_size <= 0:
        raise ConfigError(f"batch size must be positive, got {batch_size}")
    if batch_size * SPOT_INSERT_COLUMNS > MAX_BIND_PARAMETERS:
        raise ConfigError(
            f"batch size {batch_size} exceeds the limit of "
            f"{MAX_BIND_PARAMETERS // SPOT_INSERT_COLUMNS} rows per insert statement"
        )
    return batch_size


def _get_required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigError(f"{name} must be set in the environment")
    return value


def _get_number_env(name: str, default: str, cast):
    raw = os.getenv(name) or default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be numeric, got {raw!r}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load, validate and cache settings from environment variables."""
    load_dotenv()

    db_host = _get_required_env("DB_HOST")
    db_port = _get_required_env("DB_PORT")
    db_name = _get_required_env("DB_NAME")
    batch_size = validate_batch_size(_get_number_env("BATCH_SIZE", str(DEFAULT_BATCH_SIZE), int))
    import_timeout = _get_number_env("IMPORT_TIMEOUT", "0", float)
    nominatim_timeout = _get_number_env("NOMINATIM_TIMEOUT", "10", float)

    log_format = (os.getenv("LOG_FORMAT") or "text").strip().lower()
    if log_format not in {"text", "json"}:
        raise ConfigError(f"LOG_FORMAT must be 'text' or 'json', got {log_format!r}")

    if not os.getenv("DB_PASSWORD"):
        logger.warning("DB_PASSWORD is not set; connecting without a password.")

    return Settings(
        db_host=db_host,
        db_port=db_port,
        db_name=db_name,
        db_username=os.getenv("DB_USERNAME", ""),
        db_password=os.getenv("DB_PASSWORD", ""),
        db_sslmode=os.getenv("DB_SSLMODE", ""),
        batch_size=batch_size,
        csv_file=os.getenv("CSV_FILE") or None,
        import_timeout=import_timeout,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
        log_format=log_format,
        nominatim_base_url=os.getenv("NOMINATIM_BASE_URL") or DEFAULT_NOMINATIM_BASE_URL,
        nominatim_timeout=nominatim_timeout,
    )
