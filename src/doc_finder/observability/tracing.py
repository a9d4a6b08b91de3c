"""OpenTelemetry spans around engine operations.

Without ``init_tracing`` the API hands out no-op spans, so instrumented code
costs next to nothing when tracing is disabled.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from functools import lru_cache
import logging
from typing import IO

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, Tracer
from opentelemetry.util.types import AttributeValue

from doc_finder.observability.context import bind_span


logger = logging.getLogger(__name__)

TRACER_NAME = "doc_finder"


def init_tracing(
    service_name: str = "doc-finder",
    resource_attributes: Mapping[str, str] | None = None,
    *,
    span_stream: IO[str] | None = None,
) -> TracerProvider:
    """Install a process-wide SDK tracer provider and return it.

    With ``span_stream`` every finished span is written to it as JSON.
    Otherwise spans are recorded but not exported until the caller adds a
    processor (``provider.add_span_processor(...)``).
    """
    resource = Resource.create({SERVICE_NAME: service_name, **(resource_attributes or {})})
    provider = TracerProvider(resource=resource)
    if span_stream is not None:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter(out=span_stream)))
    trace.set_tracer_provider(provider)
    get_tracer.cache_clear()
    logger.info("Tracing initialized for service %s", service_name)
    return provider


@lru_cache(maxsize=1)
def get_tracer() -> Tracer:
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Mapping[str, AttributeValue] | None = None,
) -> Iterator[Span]:
    """Run the block inside a span; failures are recorded on it and re-raised."""
    with get_tracer().start_as_current_span(
        name,
        kind=kind,
        attributes=dict(attributes or {}),
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        span_context = span.get_span_context()
        if span_context.is_valid:
            bind_span(format(span_context.span_id, "016x"), trace_id=format(span_context.trace_id, "032x"))
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, f"{type(exc).__name__}: {exc}"))
            raise
