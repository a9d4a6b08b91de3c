"""Logging and tracing support for doc-finder."""

from doc_finder.observability.context import (
    Correlation,
    bind_correlation,
    bind_span,
    clear_correlation,
    current_correlation,
)
from doc_finder.observability.logging import JsonFormatter, configure_logging
from doc_finder.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "Correlation",
    "JsonFormatter",
    "bind_correlation",
    "bind_span",
    "clear_correlation",
    "configure_logging",
    "create_span",
    "current_correlation",
    "get_tracer",
    "init_tracing",
]
