"""Database helpers shared by the importer and spot storage."""

import logging
from contextlib import contextmanager
from typing import Optional

from psycopg2 import pool

from tolqin.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.SimpleConnectionPool] = None


def init_pool(settings: Optional[Settings] = None, minconn: int = 1, maxconn: int = 5) -> pool.SimpleConnectionPool:
    """Return the shared connection pool, creating it from ``settings`` on first use."""
    global _connection_pool
    if _connection_pool is not None:
        return _connection_pool

    settings = settings or get_settings()
    _connection_pool = pool.SimpleConnectionPool(minconn, maxconn, dsn=settings.dsn, connect_timeout=10)
    logger.info(
        "Opened database pool host=%s port=%s dbname=%s (max %d connections)",
        settings.db_host,
        settings.db_port,
        settings.db_name,
        maxconn,
    )
    return _connection_pool


def close_pool() -> None:
    global _connection_pool
    if _connection_pool is not None:
        _connection_pool.closeall()
        _connection_pool = None
        logger.info("Database connection pool closed")


@contextmanager
def get_connection():
    """Lend a pooled connection for the duration of the block.

    Connections the server has dropped are discarded instead of being reused.
    """
    pg_pool = init_pool()
    conn = pg_pool.getconn()
    try:
        yield conn
    finally:
        broken = bool(conn.closed)
        if broken:
            logger.warning("Discarding closed database connection")
        pg_pool.putconn(conn, close=broken)
