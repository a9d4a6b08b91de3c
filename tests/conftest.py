"""Shared test fixtures and configuration."""

from collections.abc import Iterator
import os
from pathlib import Path

import pytest

from doc_finder.engine import DocFinder


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep DOC_FINDER_* variables and any .env file out of every test."""
    for key in list(os.environ):
        if key.upper().startswith("DOC_FINDER_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'index' / 'doc_finder.sqlite'}"


@pytest.fixture(params=["memory", "sqlite"])
def store_url(request: pytest.FixtureRequest, sqlite_url: str) -> str:
    """Run the test once against each store backend."""
    if request.param == "memory":
        return "memory://"
    return sqlite_url


@pytest.fixture
def finder(store_url: str) -> Iterator[DocFinder]:
    with DocFinder.create(store_url) as engine:
        yield engine
