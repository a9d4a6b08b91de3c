"""Unit tests for search data models."""

import pytest

from doc_finder.search.models import Result, WordOccurrence


pytestmark = pytest.mark.unit


def test_word_occurrence_dict_round_trip():
    occurrence = WordOccurrence(count=4, first_offset=12)
    assert occurrence.to_dict() == {"count": 4, "offset": 12}
    assert WordOccurrence.from_dict({"count": "4", "offset": 12}) == occurrence


def test_result_sort_key_orders_by_score_then_name():
    results = [
        Result(name="b", score=2, lines=()),
        Result(name="a", score=2, lines=()),
        Result(name="c", score=5, lines=()),
    ]
    assert [result.name for result in sorted(results, key=lambda r: r.sort_key)] == ["c", "a", "b"]


def test_result_to_dict_and_str():
    result = Result(name="doc", score=2, lines=("alpha beta\n", "gamma alpha\n"))

    assert result.to_dict() == {"name": "doc", "score": 2, "lines": ["alpha beta\n", "gamma alpha\n"]}
    assert str(result) == "doc: 2\nalpha beta\ngamma alpha\n"


def test_result_is_immutable():
    result = Result(name="doc", score=1, lines=())
    with pytest.raises(AttributeError):
        result.score = 3  # type: ignore[misc]
