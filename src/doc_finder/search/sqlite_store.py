"""SQLite backend for the doc-finder store.

Every logical collection is its own table. Merges are expressed as single
SQL statements inside one ``BEGIN IMMEDIATE`` transaction per operation:

- contents: ``INSERT ... ON CONFLICT(name) DO UPDATE`` (replace)
- noise: ``INSERT OR IGNORE`` (set union)
- postings: delete the document's rows, then upsert the new ones
- completions: ``INSERT OR IGNORE`` on ``(initial, word)`` (set union)

so several processes or threads can share one database file without losing
updates.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
import logging
from pathlib import Path
import sqlite3
import threading

from doc_finder.errors import StorageError
from doc_finder.search.models import WordOccurrence
from doc_finder.search.sqlite_pragmas import apply_connection_pragmas


logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS contents (
    name TEXT PRIMARY KEY,
    content TEXT NOT NULL
) WITHOUT ROWID;

CREATE TABLE IF NOT EXISTS noise (
    word TEXT PRIMARY KEY
) WITHOUT ROWID;

CREATE TABLE IF NOT EXISTS postings (
    word TEXT NOT NULL,
    name TEXT NOT NULL,
    count INTEGER NOT NULL,
    first_offset INTEGER NOT NULL,
    PRIMARY KEY (word, name)
) WITHOUT ROWID;

CREATE INDEX IF NOT EXISTS idx_postings_name ON postings(name);

CREATE TABLE IF NOT EXISTS completions (
    initial TEXT NOT NULL,
    word TEXT NOT NULL,
    PRIMARY KEY (initial, word)
) WITHOUT ROWID;
"""

_TABLES = ("contents", "noise", "postings", "completions")


class SQLiteConnectionPool:
    """Thread-safe pool handing out one connection per thread."""

    def __init__(self, db_path: Path, *, busy_timeout_ms: int = 30000) -> None:
        self.db_path = db_path
        self.busy_timeout_ms = busy_timeout_ms
        self._local = threading.local()
        self._lock = threading.Lock()
        self._connections: list[sqlite3.Connection] = []
        self._closed = False

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get the calling thread's connection, opening it on first use."""
        conn = getattr(self._local, "connection", None)
        if conn is None:
            conn = self._create_connection()
            self._local.connection = conn
        yield conn

    def _create_connection(self) -> sqlite3.Connection:
        with self._lock:
            if self._closed:
                raise StorageError(f"SQLite store {self.db_path} is closed")
            # Autocommit mode; transactions are opened explicitly.
            conn = sqlite3.connect(self.db_path, check_same_thread=False, isolation_level=None)
            apply_connection_pragmas(conn, busy_timeout_ms=self.busy_timeout_ms)
            self._connections.append(conn)
        return conn

    def close_all(self) -> None:
        with self._lock:
            self._closed = True
            connections, self._connections = self._connections, []
        for conn in connections:
            try:
                conn.close()
            except sqlite3.Error as exc:
                logger.warning("Failed to close SQLite connection for %s: %s", self.db_path, exc)
        self._local = threading.local()


class SqliteDocStore:
    """Persistent store backed by a single SQLite database file."""

    def __init__(self, db_path: str | Path, *, busy_timeout_ms: int = 30000) -> None:
        if str(db_path) == ":memory:":
            raise ValueError("SqliteDocStore needs a database file; each thread would get its own :memory: database")
        self.db_path = Path(db_path)
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create directory for {self.db_path}: {exc}") from exc
        self._pool = SQLiteConnectionPool(self.db_path, busy_timeout_ms=busy_timeout_ms)
        with self._transaction("create schema") as conn:
            self._create_schema(conn)
        logger.debug("Opened SQLite store at %s", self.db_path)

    # ---- contents ----

    def put_content(self, name: str, text: str) -> None:
        with self._transaction("put content") as conn:
            conn.execute(
                "INSERT INTO contents (name, content) VALUES (?, ?) "
                "ON CONFLICT(name) DO UPDATE SET content = excluded.content",
                (name, text),
            )

    def get_content(self, name: str) -> str | None:
        with self._reading("get content") as conn:
            row = conn.execute("SELECT content FROM contents WHERE name = ?", (name,)).fetchone()
        return row[0] if row else None

    # ---- noise ----

    def load_noise_words(self) -> set[str]:
        with self._reading("load noise words") as conn:
            return {row[0] for row in conn.execute("SELECT word FROM noise")}

    def add_noise_words(self, words: Iterable[str]) -> None:
        rows = [(word,) for word in words]
        if not rows:
            return
        with self._transaction("add noise words") as conn:
            conn.executemany("INSERT OR IGNORE INTO noise (word) VALUES (?)", rows)

    # ---- postings ----

    def replace_postings(self, name: str, index: Mapping[str, WordOccurrence]) -> None:
        rows = [(word, name, occ.count, occ.first_offset) for word, occ in index.items()]
        with self._transaction("replace postings") as conn:
            conn.execute("DELETE FROM postings WHERE name = ?", (name,))
            if rows:
                conn.executemany(
                    "INSERT INTO postings (word, name, count, first_offset) VALUES (?, ?, ?, ?) "
                    "ON CONFLICT(word, name) DO UPDATE SET "
                    "count = excluded.count, first_offset = excluded.first_offset",
                    rows,
                )

    def get_postings(self, word: str) -> dict[str, WordOccurrence]:
        with self._reading("get postings") as conn:
            cursor = conn.execute("SELECT name, count, first_offset FROM postings WHERE word = ?", (word,))
            return {
                name: WordOccurrence(count=int(count), first_offset=int(first_offset))
                for name, count, first_offset in cursor
            }

    # ---- completions ----

    def merge_completions(self, groups: Mapping[str, Iterable[str]]) -> None:
        rows = [(initial, word) for initial, words in groups.items() for word in words]
        if not rows:
            return
        with self._transaction("merge completions") as conn:
            conn.executemany("INSERT OR IGNORE INTO completions (initial, word) VALUES (?, ?)", rows)

    def get_completions(self, initial: str) -> list[str]:
        with self._reading("get completions") as conn:
            cursor = conn.execute("SELECT word FROM completions WHERE initial = ? ORDER BY word", (initial,))
            return [row[0] for row in cursor]

    # ---- lifecycle ----

    @contextmanager
    def snapshot(self) -> Iterator[None]:
        """Serve every read in the block from one read transaction.

        Nested calls on the same thread join the outer snapshot.
        """
        with self._pool.get_connection() as conn:
            if conn.in_transaction:
                yield
                return
            try:
                conn.execute("BEGIN")
            except sqlite3.Error as exc:
                raise StorageError(f"SQLite snapshot failed on {self.db_path}: {exc}") from exc
            try:
                yield
            finally:
                if conn.in_transaction:
                    try:
                        conn.execute("COMMIT")
                    except sqlite3.Error as exc:
                        raise StorageError(f"SQLite snapshot failed on {self.db_path}: {exc}") from exc

    def clear(self) -> None:
        with self._transaction("clear") as conn:
            for table in _TABLES:
                conn.execute(f"DELETE FROM {table}")  # noqa: S608 - fixed table names
        logger.info("Cleared SQLite store at %s", self.db_path)

    def close(self) -> None:
        self._pool.close_all()

    # ---- internals ----

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        for statement in _SCHEMA.split(";"):
            if statement.strip():
                conn.execute(statement)

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Run the block in a write transaction, translating SQLite failures."""
        try:
            with self._pool.get_connection() as conn:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    yield conn
                    conn.execute("COMMIT")
                except BaseException:
                    if conn.in_transaction:
                        conn.execute("ROLLBACK")
                    raise
        except sqlite3.Error as exc:
            raise StorageError(f"SQLite {operation} failed on {self.db_path}: {exc}") from exc

    @contextmanager
    def _reading(self, operation: str) -> Iterator[sqlite3.Connection]:
        try:
            with self._pool.get_connection() as conn:
                yield conn
        except sqlite3.Error as exc:
            raise StorageError(f"SQLite {operation} failed on {self.db_path}: {exc}") from exc
