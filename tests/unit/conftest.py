"""Unit-test fixtures; everything collected below tests/unit is marked ``unit``."""

from collections.abc import Iterator

import pytest

from doc_finder.engine import DocFinder


def pytest_collection_modifyitems(config, items):
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def memory_finder() -> Iterator[DocFinder]:
    """Engine over a private in-memory store."""
    with DocFinder.create("memory://") as engine:
        yield engine
