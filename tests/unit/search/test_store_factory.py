"""Unit tests for store URL resolution."""

import pytest

from doc_finder.search.memory_store import MemoryDocStore
from doc_finder.search.sqlite_store import SqliteDocStore
from doc_finder.search.store import create_store


pytestmark = pytest.mark.unit


def test_sqlite_url(tmp_path):
    store = create_store(f"sqlite:///{tmp_path / 'a.sqlite'}")
    try:
        assert isinstance(store, SqliteDocStore)
        assert store.db_path == tmp_path / "a.sqlite"
    finally:
        store.close()


def test_bare_path_is_sqlite(tmp_path):
    store = create_store(str(tmp_path / "b.sqlite"))
    try:
        assert isinstance(store, SqliteDocStore)
    finally:
        store.close()


def test_memory_url_gives_private_store():
    first = create_store("memory://")
    second = create_store("memory://")

    first.put_content("doc", "x\n")

    assert isinstance(first, MemoryDocStore)
    assert second.get_content("doc") is None


@pytest.mark.parametrize("url", ["mongodb://localhost/db", "redis://cache"])
def test_unknown_scheme_rejected(url):
    with pytest.raises(ValueError, match="Unsupported store URL"):
        create_store(url)


@pytest.mark.parametrize("url", ["sqlite:///:memory:", ":memory:", " :memory: ", "sqlite:///file::memory:?cache=shared"])
def test_sqlite_in_memory_database_rejected(url):
    # Each pooled per-thread connection would open its own empty database.
    with pytest.raises(ValueError, match="memory://"):
        create_store(url)


def test_sqlite_store_rejects_memory_path():
    with pytest.raises(ValueError, match=":memory:"):
        SqliteDocStore(":memory:")


def test_busy_timeout_reaches_connections(tmp_path):
    store = create_store(str(tmp_path / "c.sqlite"), busy_timeout_ms=1234)
    try:
        with store._pool.get_connection() as conn:
            assert conn.execute("PRAGMA busy_timeout").fetchone()[0] == 1234
    finally:
        store.close()
