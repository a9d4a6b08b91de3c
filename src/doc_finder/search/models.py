"""Search data models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class WordOccurrence:
    """How often a word occurs in one document and where it first appears."""

    count: int
    first_offset: int

    def to_dict(self) -> dict[str, int]:
        return {"count": self.count, "offset": self.first_offset}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WordOccurrence:
        return cls(count=int(data["count"]), first_offset=int(data["offset"]))


@dataclass(frozen=True, slots=True)
class Result:
    """One matching document for a search.

    ``lines`` are the distinct document lines holding the earliest occurrence
    of some matched term, in source order, each with its trailing newline.
    """

    name: str
    score: int
    lines: tuple[str, ...]

    @property
    def sort_key(self) -> tuple[int, str]:
        return (-self.score, self.name)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "score": self.score, "lines": list(self.lines)}

    def __str__(self) -> str:
        return f"{self.name}: {self.score}\n{''.join(self.lines)}"
