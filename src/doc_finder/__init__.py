"""doc-finder: a small full-text index over named text documents."""

from doc_finder.config import Settings
from doc_finder.engine import DocFinder
from doc_finder.errors import DocFinderError, NotFoundError, StorageError
from doc_finder.search.models import Result, WordOccurrence


__version__ = "0.1.0"

__all__ = [
    "DocFinder",
    "DocFinderError",
    "NotFoundError",
    "Result",
    "Settings",
    "StorageError",
    "WordOccurrence",
    "__version__",
]
