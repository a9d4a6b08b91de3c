"""Unit tests for logging and tracing helpers."""

import io
import logging
import sys

import orjson
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode
import pytest

from doc_finder.engine import DocFinder
from doc_finder.errors import NotFoundError
from doc_finder.observability import (
    JsonFormatter,
    bind_correlation,
    bind_span,
    clear_correlation,
    configure_logging,
    create_span,
    current_correlation,
    init_tracing,
    tracing as tracing_module,
)
from doc_finder.observability.logging import _fallback


pytestmark = pytest.mark.unit


def _record(msg="test message", level=logging.INFO, name="doc_finder.engine", exc_info=None):
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="engine.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


@pytest.fixture(autouse=True)
def fresh_correlation():
    clear_correlation()
    yield
    clear_correlation()


@pytest.fixture
def span_exporter(monkeypatch):
    """Route create_span through a private SDK provider with an in-memory exporter."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    tracer = provider.get_tracer("test")
    monkeypatch.setattr(tracing_module, "get_tracer", lambda: tracer)
    return exporter


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJsonFormatter:
    def test_format_includes_correlation_and_component(self):
        bind_correlation("ab" * 16, "cd" * 8, doc="readme")

        data = orjson.loads(JsonFormatter().format(_record()))

        assert data["message"] == "test message"
        assert data["level"] == "INFO"
        assert data["logger"] == "doc_finder.engine"
        assert data["component"] == "engine"
        assert data["trace_id"] == "ab" * 16
        assert data["span_id"] == "cd" * 8
        assert data["doc"] == "readme"
        assert "timestamp" in data

    def test_extra_fields_are_clipped(self):
        record = _record()
        record.doc_name = "readme"
        record.body = "x" * 1000

        data = orjson.loads(JsonFormatter().format(record))

        assert data["doc_name"] == "readme"
        assert data["body"].endswith("...")
        assert len(data["body"]) == JsonFormatter.MAX_EXTRA_LEN + 3

    def test_long_message_truncated(self):
        data = orjson.loads(JsonFormatter().format(_record(msg="y" * 5000)))
        assert len(data["message"]) == JsonFormatter.MAX_MESSAGE_LEN + 3

    def test_exception_included(self):
        try:
            raise NotFoundError("nope")
        except NotFoundError:
            record = _record(level=logging.ERROR, exc_info=sys.exc_info())

        data = orjson.loads(JsonFormatter().format(record))

        assert "doc nope not found" in data["exception"]

    def test_unencodable_extras_fall_back(self):
        record = _record()
        record.words = {"b", "a"}

        assert orjson.loads(JsonFormatter().format(record))["words"] == ["a", "b"]
        assert _fallback(b"ok") == "ok"
        assert len(_fallback({1, "a"})) == 2
        assert _fallback(ValueError("bad")) == "bad"


class TestCorrelation:
    def test_generated_on_first_use(self):
        correlation = current_correlation()
        assert len(correlation.trace_id) == 32
        assert len(correlation.span_id) == 16
        assert current_correlation() is correlation

    def test_bind_span_keeps_trace_and_fields(self):
        bind_correlation("aa" * 16, "bb" * 8, doc="readme")

        bind_span("cc" * 8)

        assert current_correlation().as_log_fields() == {
            "trace_id": "aa" * 16,
            "span_id": "cc" * 8,
            "doc": "readme",
        }


class TestTracing:
    def test_create_span_records_attributes_and_binds_ids(self, span_exporter):
        with create_span("unit.op", attributes={"doc.name": "readme"}) as span:
            span_id = format(span.get_span_context().span_id, "016x")
            assert current_correlation().span_id == span_id

        [finished] = span_exporter.get_finished_spans()
        assert finished.name == "unit.op"
        assert finished.attributes["doc.name"] == "readme"

    def test_create_span_marks_errors_and_reraises(self, span_exporter):
        with pytest.raises(ValueError, match="bad"), create_span("unit.fail"):
            raise ValueError("bad")

        [span] = span_exporter.get_finished_spans()
        assert span.status.status_code == StatusCode.ERROR
        assert span.status.description == "ValueError: bad"
        assert any(event.name == "exception" for event in span.events)

    def test_engine_operations_emit_spans(self, span_exporter):
        with DocFinder.create("memory://") as finder:
            finder.add_content("doc", "hello world\n")
            finder.find("hello")

        names = [span.name for span in span_exporter.get_finished_spans()]
        assert "doc_finder.create" in names
        assert "doc_finder.add_content" in names
        assert "doc_finder.find" in names

    def test_spans_are_noops_without_provider(self):
        with create_span("unit.noop") as span:
            span.set_attribute("ignored", 1)


class TestConfigureLogging:
    def test_text_handler_and_level(self, restore_root_logger):
        stream = io.StringIO()
        handler = configure_logging(level="debug", stream=stream)

        logging.getLogger("doc_finder.test").debug("hello %s", "there")

        assert restore_root_logger.level == logging.DEBUG
        assert restore_root_logger.handlers == [handler]
        assert "DEBUG [doc_finder.test] hello there" in stream.getvalue()

    def test_json_output_and_overrides(self, restore_root_logger):
        stream = io.StringIO()
        configure_logging(level="INFO", json_output=True, stream=stream, logger_levels={"doc_finder.search": "error"})

        logging.getLogger("doc_finder.engine").info("indexed")

        assert orjson.loads(stream.getvalue().splitlines()[-1])["message"] == "indexed"
        assert logging.getLogger("doc_finder.search").level == logging.ERROR
        assert logging.getLogger("opentelemetry").level == logging.WARNING
        logging.getLogger("doc_finder.search").setLevel(logging.NOTSET)

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        configure_logging(level="chatty", stream=io.StringIO())
        assert restore_root_logger.level == logging.INFO


class TestInitTracing:
    @pytest.fixture
    def installed(self, monkeypatch):
        installed = []
        monkeypatch.setattr(tracing_module.trace, "set_tracer_provider", installed.append)
        return installed

    def test_span_stream_exports_finished_spans(self, installed):
        stream = io.StringIO()

        provider = init_tracing("unit-svc", span_stream=stream)
        with provider.get_tracer("test").start_as_current_span("unit.exported"):
            pass
        provider.shutdown()

        assert installed == [provider]
        assert provider.resource.attributes["service.name"] == "unit-svc"
        assert '"name": "unit.exported"' in stream.getvalue()

    def test_resource_attributes_are_merged(self, installed):
        provider = init_tracing("unit-svc", {"deployment.environment": "test"})

        assert installed == [provider]
        assert provider.resource.attributes["deployment.environment"] == "test"
