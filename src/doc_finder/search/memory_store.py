"""In-memory store (useful for tests or ephemeral runs)."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
import threading

from doc_finder.search.models import WordOccurrence


class MemoryDocStore:
    """Dictionary-backed store; a single lock serializes every update."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._contents: dict[str, str] = {}
        self._noise: set[str] = set()
        self._postings: dict[str, dict[str, WordOccurrence]] = {}
        # name -> words it has postings under
        self._words_by_name: dict[str, set[str]] = {}
        self._completions: dict[str, set[str]] = {}

    # contents
    def put_content(self, name: str, text: str) -> None:
        with self._lock:
            self._contents[name] = text

    def get_content(self, name: str) -> str | None:
        with self._lock:
            return self._contents.get(name)

    # noise
    def load_noise_words(self) -> set[str]:
        with self._lock:
            return set(self._noise)

    def add_noise_words(self, words: Iterable[str]) -> None:
        with self._lock:
            self._noise.update(words)

    # postings
    def replace_postings(self, name: str, index: Mapping[str, WordOccurrence]) -> None:
        with self._lock:
            for word in self._words_by_name.pop(name, ()):
                docs = self._postings[word]
                del docs[name]
                if not docs:
                    del self._postings[word]
            for word, occurrence in index.items():
                self._postings.setdefault(word, {})[name] = occurrence
            if index:
                self._words_by_name[name] = set(index)

    def get_postings(self, word: str) -> dict[str, WordOccurrence]:
        with self._lock:
            return dict(self._postings.get(word, {}))

    # completions
    def merge_completions(self, groups: Mapping[str, Iterable[str]]) -> None:
        with self._lock:
            for initial, words in groups.items():
                self._completions.setdefault(initial, set()).update(words)

    def get_completions(self, initial: str) -> list[str]:
        with self._lock:
            return sorted(self._completions.get(initial, ()))

    # lifecycle
    @contextmanager
    def snapshot(self) -> Iterator[None]:
        """Hold the store lock so the reads in the block see no concurrent update."""
        with self._lock:
            yield

    def clear(self) -> None:
        with self._lock:
            self._contents.clear()
            self._noise.clear()
            self._postings.clear()
            self._words_by_name.clear()
            self._completions.clear()

    def close(self) -> None:
        self.clear()
