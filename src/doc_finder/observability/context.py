"""Correlation ids carried by log lines emitted inside engine operations."""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from typing import Any
from uuid import uuid4


@dataclass(frozen=True)
class Correlation:
    """Trace and span ids plus free-form fields (e.g. the document name)."""

    trace_id: str
    span_id: str
    fields: dict[str, Any] = field(default_factory=dict)

    def as_log_fields(self) -> dict[str, Any]:
        return {"trace_id": self.trace_id, "span_id": self.span_id, **self.fields}


_current: ContextVar[Correlation | None] = ContextVar("doc_finder_correlation", default=None)


def new_correlation() -> Correlation:
    return Correlation(trace_id=uuid4().hex, span_id=uuid4().hex[:16])


def current_correlation() -> Correlation:
    """Correlation of the running context, created on first use."""
    correlation = _current.get()
    if correlation is None:
        correlation = new_correlation()
        _current.set(correlation)
    return correlation


def bind_correlation(trace_id: str, span_id: str, **fields: Any) -> Correlation:
    correlation = Correlation(trace_id=trace_id, span_id=span_id, fields=fields)
    _current.set(correlation)
    return correlation


def bind_span(span_id: str, trace_id: str | None = None) -> Correlation:
    """Move the current correlation to another span, keeping its fields."""
    correlation = current_correlation()
    correlation = replace(correlation, span_id=span_id, trace_id=trace_id or correlation.trace_id)
    _current.set(correlation)
    return correlation


def clear_correlation() -> None:
    _current.set(None)
