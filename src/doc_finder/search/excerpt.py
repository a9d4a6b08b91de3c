"""Line excerpt extraction for search results."""

from __future__ import annotations

from collections.abc import Iterable


def line_start(text: str, position: int) -> int:
    """Index just after the newline preceding ``position`` (0 on the first line)."""
    return text.rfind("\n", 0, position) + 1


def line_starts(text: str, offsets: Iterable[int]) -> list[int]:
    """Distinct start-of-line positions for ``offsets``, ascending."""
    return sorted({line_start(text, offset) for offset in offsets})


def line_at(text: str, start: int) -> str:
    """The line beginning at ``start``, including its trailing newline."""
    end = text.find("\n", start)
    if end == -1:
        return text[start:]
    return text[start : end + 1]


def extract_lines(text: str, offsets: Iterable[int]) -> tuple[str, ...]:
    """Lines containing ``offsets``, deduplicated and in document order.

    Args:
        text: Full document content.
        offsets: Character offsets of matched terms within ``text``.

    Returns:
        Tuple of lines, each ending with ``"\\n"`` when the document has one.
    """
    return tuple(line_at(text, start) for start in line_starts(text, offsets))
