"""Exceptions raised by the doc-finder engine."""

from __future__ import annotations


class DocFinderError(Exception):
    """Base class for engine errors; ``code`` is a stable machine-readable tag."""

    code = "INTERNAL"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFoundError(DocFinderError, KeyError):
    """Raised when a document name is absent from the content store."""

    code = "NOT_FOUND"

    def __init__(self, name: str) -> None:
        super().__init__(f"doc {name} not found")
        self.name = name


class StorageError(DocFinderError, RuntimeError):
    """Raised when the persistent store is unreachable or an operation fails."""

    code = "STORAGE_FAILURE"
