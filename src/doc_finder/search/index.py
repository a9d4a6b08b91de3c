"""Pure helpers that shape per-document index data before it is stored."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from doc_finder.search.models import WordOccurrence


def build_document_index(words: Iterable[tuple[str, int]]) -> dict[str, WordOccurrence]:
    """Fold ``(word, offset)`` pairs into per-word counts and first offsets.

    ``words`` must be in document order so the first offset seen is the
    earliest one.
    """
    counts: dict[str, int] = {}
    first_offsets: dict[str, int] = {}
    for word, offset in words:
        if word not in counts:
            counts[word] = 0
            first_offsets[word] = offset
        counts[word] += 1
    return {word: WordOccurrence(count=counts[word], first_offset=first_offsets[word]) for word in counts}


def group_completions(words: Iterable[str]) -> dict[str, set[str]]:
    """Group words by their first character, skipping empty strings."""
    groups: dict[str, set[str]] = defaultdict(set)
    for word in words:
        if word:
            groups[word[0]].add(word)
    return dict(groups)


def accumulate_matches(
    postings_by_term: Iterable[dict[str, WordOccurrence]],
) -> dict[str, tuple[int, list[int]]]:
    """Merge term postings into ``name -> (score, first offsets)``."""
    matches: dict[str, tuple[int, list[int]]] = {}
    for postings in postings_by_term:
        for name, occurrence in postings.items():
            score, offsets = matches.get(name, (0, []))
            offsets.append(occurrence.first_offset)
            matches[name] = (score + occurrence.count, offsets)
    return matches
