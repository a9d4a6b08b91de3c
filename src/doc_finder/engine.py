"""Document indexing and retrieval engine.

``DocFinder`` glues together:
  - a ``DocStore`` backend (SQLite or in-memory) holding contents, noise
    words, postings and completions,
  - the word analyzer (tokenize + normalize),
  - the engine-owned ``NoiseFilter`` cache,
  - search ranking and line excerpt extraction.

Public API (used by the CLI and by any service layer built on top):
  * create(store_url): open/attach persistent state and load noise words
  * add_noise_words(text), add_content(name, text)
  * doc_content(name), find(text), complete(text), words(text)
  * clear(), close()
"""

from __future__ import annotations

import logging
import re
from types import TracebackType

from doc_finder.config import Settings
from doc_finder.errors import NotFoundError
from doc_finder.observability.tracing import create_span
from doc_finder.search.analyzers import Stemmer, WordAnalyzer
from doc_finder.search.excerpt import extract_lines
from doc_finder.search.index import accumulate_matches, build_document_index, group_completions
from doc_finder.search.models import Result
from doc_finder.search.noise import NoiseFilter
from doc_finder.search.store import DEFAULT_BUSY_TIMEOUT_MS, DocStore, create_store


logger = logging.getLogger(__name__)

_ENDS_WITH_LETTER = re.compile(r"[a-zA-Z]\Z")


class DocFinder:
    """Full-text index over named documents with ranked search and completion.

    All state lives in the store, except for the noise word cache which is
    loaded once at construction and updated in place by ``add_noise_words``.
    """

    def __init__(self, store: DocStore, *, stemmer: Stemmer | None = None) -> None:
        self._store = store
        self._analyzer = WordAnalyzer(stemmer=stemmer)
        self._noise = NoiseFilter.load(store)

    @classmethod
    def create(
        cls,
        store_url: str | None = None,
        *,
        settings: Settings | None = None,
        busy_timeout_ms: int | None = None,
        stemmer: Stemmer | None = None,
    ) -> DocFinder:
        """Open the store at ``store_url`` (or ``settings.store_url``) and return a ready engine.

        The environment is only read when neither ``store_url`` nor ``settings``
        is given. An explicit ``busy_timeout_ms`` wins over ``settings``.
        """
        if settings is None and not store_url:
            settings = Settings()
        url = store_url or settings.store_url
        if busy_timeout_ms is None:
            busy_timeout_ms = settings.sqlite_busy_timeout_ms if settings is not None else DEFAULT_BUSY_TIMEOUT_MS
        with create_span("doc_finder.create", attributes={"store.url": url}):
            store = create_store(url, busy_timeout_ms=busy_timeout_ms)
            try:
                finder = cls(store, stemmer=stemmer)
            except Exception:
                store.close()
                raise
        logger.info("DocFinder ready on %s (%d noise words)", url, len(finder.noise_words))
        return finder

    @property
    def store(self) -> DocStore:
        return self._store

    @property
    def noise_words(self) -> frozenset[str]:
        return frozenset(self._noise)

    # ------------- lifecycle -------------

    def close(self) -> None:
        """Release the store's connections."""
        self._store.close()
        logger.debug("DocFinder closed")

    def clear(self) -> None:
        """Erase all contents, postings, noise words and completions."""
        with create_span("doc_finder.clear"):
            self._store.clear()
            self._noise.reset()

    def __enter__(self) -> DocFinder:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------- ingestion -------------

    def words(self, text: str) -> list[str]:
        """Non-noise normalized words of ``text``, in order, duplicates kept."""
        return [word for word, _ in self._analyzer.words(text, self._noise)]

    def add_noise_words(self, text: str) -> None:
        """Register every normalized word in ``text`` as noise. Idempotent."""
        with create_span("doc_finder.add_noise_words") as span:
            candidates = {word for word, _ in self._analyzer.words(text)}
            added = self._noise.add(candidates, self._store)
            span.set_attribute("noise.added", len(added))

    def add_content(self, name: str, text: str) -> None:
        """Store ``text`` under ``name`` and (re)index it. Idempotent.

        A document already present is superseded: its previous postings are
        removed before the new ones are written. Completions only grow.
        """
        if not name:
            raise ValueError("document name must be a non-empty string")
        if not text.endswith("\n"):
            text += "\n"

        with create_span("doc_finder.add_content", attributes={"doc.name": name}) as span:
            self._store.put_content(name, text)
            index = build_document_index(self._analyzer.words(text, self._noise))
            self._store.replace_postings(name, index)
            self._store.merge_completions(group_completions(index))
            span.set_attribute("doc.words", len(index))
        logger.info("Indexed document %s (%d distinct words)", name, len(index))

    # ------------- queries -------------

    def doc_content(self, name: str) -> str:
        """Return the stored text of ``name``; raise ``NotFoundError`` when absent."""
        content = self._store.get_content(name)
        if content is None:
            raise NotFoundError(name)
        return content

    def find(self, text: str) -> list[Result]:
        """Rank documents matching the non-noise words of ``text``.

        The score of a document is the total number of occurrences of the
        search terms in it. Results are ordered by descending score, then by
        ascending document name. All matches are returned; paging belongs to
        the caller.
        """
        terms = set(self.words(text))
        with create_span("doc_finder.find", attributes={"query.terms": len(terms)}) as span:
            if not terms:
                return []
            results = []
            with self._store.snapshot():
                matches = accumulate_matches(self._store.get_postings(term) for term in sorted(terms))
                for name, (score, offsets) in matches.items():
                    # A posting without content means the index and the store disagree.
                    content = self.doc_content(name)
                    results.append(Result(name=name, score=score, lines=extract_lines(content, offsets)))
            results.sort(key=lambda result: result.sort_key)
            span.set_attribute("query.results", len(results))
        logger.debug("find(%r): %d terms, %d results", text, len(terms), len(results))
        return results

    def complete(self, text: str) -> list[str]:
        """Sorted completions of the last word of ``text``.

        Returns ``[]`` when the last character of ``text`` is not a letter.
        The partial word is normalized but not noise-filtered.
        """
        if not _ENDS_WITH_LETTER.search(text):
            return []
        last_token = text.split()[-1]
        prefix = self._analyzer.normalize(last_token)
        if not prefix:
            return []
        with create_span("doc_finder.complete", attributes={"complete.prefix": prefix}):
            candidates = self._store.get_completions(prefix[0])
        return sorted(word for word in set(candidates) if word.startswith(prefix))
