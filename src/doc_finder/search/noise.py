"""Engine-owned cache of noise words."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
import logging
import threading
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from doc_finder.search.store import DocStore

logger = logging.getLogger(__name__)


class NoiseFilter:
    """In-process copy of the persisted noise word set.

    The set is read from the store once (``load``) and afterwards kept in sync
    by ``add``, which writes through to the store before updating the cache.
    It is never re-read from storage, so noise words added by another process
    only become visible to a newly created engine.
    """

    def __init__(self, words: Iterable[str] = ()) -> None:
        self._words: set[str] = set(words)
        self._lock = threading.Lock()

    @classmethod
    def load(cls, store: DocStore) -> NoiseFilter:
        words = store.load_noise_words()
        logger.debug("Loaded %d noise words", len(words))
        return cls(words)

    def is_noise(self, word: str) -> bool:
        return word in self._words

    def __contains__(self, word: object) -> bool:
        return word in self._words

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[str]:
        return iter(frozenset(self._words))

    def add(self, words: Iterable[str], store: DocStore) -> set[str]:
        """Persist and cache any ``words`` not already known; return the new ones."""
        with self._lock:
            fresh = set(words) - self._words
            if not fresh:
                return set()
            store.add_noise_words(fresh)
            self._words |= fresh
        logger.info("Added %d noise words", len(fresh))
        return fresh

    def reset(self) -> None:
        with self._lock:
            self._words.clear()
