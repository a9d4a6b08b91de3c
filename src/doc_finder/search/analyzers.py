"""Tokenizers and filters that turn raw text into normalized index words.

The design follows a composable tokenizer/filter pipeline: a tokenizer emits
``Token`` objects carrying the raw offset, and each filter transforms or drops
tokens. A normalized word is lowercase, has a trailing possessive ``'s``
removed, and keeps only ``[a-z]`` characters. Offsets always refer to where
the *raw* token began, even when normalization shrinks the text.
"""

from __future__ import annotations

from collections.abc import Callable, Container, Iterable, Iterator, Sequence
from dataclasses import dataclass
import re
from typing import Protocol


_WORD_PATTERN = re.compile(r"\S+")
_NON_ALPHA = re.compile(r"[^a-z]")
_POSSESSIVE = re.compile(r"'s$")

Stemmer = Callable[[str], str]


@dataclass
class Token:
    """Represents a token emitted by the tokenizer."""

    text: str
    position: int
    start_char: int
    end_char: int

    def copy_with(self, text: str) -> Token:
        return Token(text=text, position=self.position, start_char=self.start_char, end_char=self.end_char)


class Tokenizer(Protocol):
    """Turns raw text into a stream of tokens."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover
        ...


class TokenFilter(Protocol):
    """Transforms or drops tokens from a token stream."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover
        ...


def strip_possessive(word: str) -> str:
    """Placeholder stemmer: only removes a trailing ``'s``."""
    return _POSSESSIVE.sub("", word)


class WhitespaceTokenizer:
    """Yields maximal runs of non-whitespace characters."""

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(_WORD_PATTERN.finditer(text)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


class LowercaseFilter:
    """Lowercases token text, reusing tokens that are already lowercase."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            lowered = token.text.lower()
            yield token if lowered == token.text else token.copy_with(text=lowered)


class StemFilter:
    """Applies a pluggable stemmer; defaults to the possessive strip."""

    def __init__(self, stemmer: Stemmer | None = None) -> None:
        self.stem = stemmer or strip_possessive

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            yield token.copy_with(text=self.stem(token.text))


class AlphaOnlyFilter:
    """Removes every character outside ``[a-z]`` and drops tokens left empty."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            word = _NON_ALPHA.sub("", token.text)
            if word:
                yield token.copy_with(text=word)


class NoiseWordFilter:
    """Drops tokens whose (already normalized) text is a noise word."""

    def __init__(self, noise: Container[str]) -> None:
        self.noise = noise

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text not in self.noise:
                yield token


class AnalyzerPipeline:
    """Runs a tokenizer and then each filter over the lazy token stream."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] = ()) -> None:
        self.tokenizer = tokenizer
        self.filters = tuple(filters)

    def __call__(self, text: str) -> list[Token]:
        tokens: Iterable[Token] = self.tokenizer(text)
        for step in self.filters:
            tokens = step(tokens)
        return list(tokens)


class WordAnalyzer:
    """Tokenize + normalize, optionally excluding noise words."""

    def __init__(self, *, stemmer: Stemmer | None = None) -> None:
        self.stemmer = stemmer or strip_possessive
        self._normalizing_filters: list[TokenFilter] = [
            LowercaseFilter(),
            StemFilter(self.stemmer),
            AlphaOnlyFilter(),
        ]

    def __call__(self, text: str, noise: Container[str] | None = None) -> list[Token]:
        filters = list(self._normalizing_filters)
        if noise is not None:
            filters.append(NoiseWordFilter(noise))
        return AnalyzerPipeline(WhitespaceTokenizer(), filters)(text)

    def words(self, text: str, noise: Container[str] | None = None) -> list[tuple[str, int]]:
        """Return ``(word, raw_offset)`` pairs in document order."""
        return [(token.text, token.start_char) for token in self(text, noise)]

    def normalize(self, token: str) -> str:
        return normalize(token, stemmer=self.stemmer)


def tokenize(text: str) -> list[tuple[str, int]]:
    """Split ``text`` into ``(raw_token, offset)`` pairs."""
    return [(token.text, token.start_char) for token in WhitespaceTokenizer()(text)]


def normalize(token: str, *, stemmer: Stemmer | None = None) -> str:
    """Reduce one raw token to its index key; may return ``""``."""
    stem = stemmer or strip_possessive
    return _NON_ALPHA.sub("", stem(token.lower()))


def extract_words(text: str, noise: Container[str] | None = None) -> list[tuple[str, int]]:
    """Normalized, non-noise words of ``text`` with raw token offsets."""
    return WordAnalyzer().words(text, noise)
