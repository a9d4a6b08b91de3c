"""Storage protocol for documents, noise words, postings and completions.

Four independent logical collections back the engine:

* ``contents`` - document name -> full text
* ``noise`` - normalized noise words (presence only)
* ``postings`` - word -> {document name -> WordOccurrence}
* ``completions`` - first character -> set of words

Backends must make each merge (postings replacement for one document,
completion set union, noise insert) a single atomic update so concurrent
writers never lose each other's data. ``snapshot()`` groups several reads so
they all observe one consistent state.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Protocol

from doc_finder.search.models import WordOccurrence


SQLITE_SCHEME = "sqlite:///"
MEMORY_SCHEME = "memory://"
DEFAULT_BUSY_TIMEOUT_MS = 30000

# SQLite opens a private in-memory database per connection for these names,
# and the store keeps one connection per thread.
_SQLITE_MEMORY_NAMES = frozenset({":memory:", ""})


class DocStore(Protocol):
    # contents
    def put_content(self, name: str, text: str) -> None: ...
    def get_content(self, name: str) -> str | None: ...

    # noise
    def load_noise_words(self) -> set[str]: ...
    def add_noise_words(self, words: Iterable[str]) -> None: ...

    # postings
    def replace_postings(self, name: str, index: Mapping[str, WordOccurrence]) -> None: ...
    def get_postings(self, word: str) -> dict[str, WordOccurrence]: ...

    # completions
    def merge_completions(self, groups: Mapping[str, Iterable[str]]) -> None: ...
    def get_completions(self, initial: str) -> list[str]: ...

    # lifecycle
    def snapshot(self) -> AbstractContextManager[None]: ...
    def clear(self) -> None: ...
    def close(self) -> None: ...


def create_store(url: str, *, busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS) -> DocStore:
    """Open the store named by ``url``.

    Accepted forms:
      - ``sqlite:///path/to/db.sqlite`` -> SqliteDocStore
      - ``memory://``                   -> MemoryDocStore (private to the caller)
      - a bare filesystem path          -> SqliteDocStore

    SQLite in-memory databases (``:memory:``) are rejected; use ``memory://``.
    """
    if url.startswith(SQLITE_SCHEME):
        return _open_sqlite(url.removeprefix(SQLITE_SCHEME), url, busy_timeout_ms)

    if url.startswith(MEMORY_SCHEME):
        from doc_finder.search.memory_store import MemoryDocStore

        return MemoryDocStore()

    if "://" in url:
        raise ValueError(f"Unsupported store URL: {url}")

    return _open_sqlite(url, url, busy_timeout_ms)


def _open_sqlite(path: str, url: str, busy_timeout_ms: int) -> DocStore:
    if path.strip() in _SQLITE_MEMORY_NAMES or path.startswith("file:"):
        raise ValueError(f"Store URL {url!r} is not a database file; use {MEMORY_SCHEME!r} for an in-memory store")

    from doc_finder.search.sqlite_store import SqliteDocStore

    return SqliteDocStore(Path(path), busy_timeout_ms=busy_timeout_ms)
