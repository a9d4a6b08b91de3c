"""PRAGMA setup for connections shared by concurrent doc-finder writers."""

from __future__ import annotations

import logging
import sqlite3


logger = logging.getLogger(__name__)

# Applied after busy_timeout, in this order.
_WRITER_PRAGMAS: tuple[tuple[str, str], ...] = (
    ("journal_mode", "WAL"),
    ("synchronous", "NORMAL"),
    ("temp_store", "MEMORY"),
    ("foreign_keys", "OFF"),
)


def apply_connection_pragmas(
    conn: sqlite3.Connection,
    *,
    busy_timeout_ms: int = 30000,
    cache_size_kb: int = 16 * 1024,
    mmap_size_bytes: int = 64 * 1024 * 1024,
) -> str:
    """Tune ``conn`` for many short write transactions; return the journal mode in effect.

    WAL lets readers proceed while one writer holds the lock, and the busy
    timeout makes competing writers wait instead of failing with
    ``database is locked``.
    """
    conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)}")
    for name, value in _WRITER_PRAGMAS:
        conn.execute(f"PRAGMA {name} = {value}")
    # Negative cache_size is in KiB rather than pages.
    conn.execute(f"PRAGMA cache_size = {-abs(int(cache_size_kb))}")
    conn.execute(f"PRAGMA mmap_size = {int(mmap_size_bytes)}")

    journal_mode = str(conn.execute("PRAGMA journal_mode").fetchone()[0]).lower()
    if journal_mode != "wal":
        logger.warning("SQLite journal mode is %s, concurrent writers may block readers", journal_mode)
    return journal_mode
