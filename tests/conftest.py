from collections.abc import Sequence

import pytest
from fastapi.testclient import TestClient

from textscope.adapters.span_sink.adapter_file import FileSpanSink
from textscope.api.app import fastapi_app
from textscope.config.dependencies import environment_variables as environment_variables_dependency
from textscope.config.dependencies import server_tracer as server_tracer_dependency
from textscope.config.environment_variables import EnvironmentVariables
from textscope.domain.entities.exports import ExportCallback, ExportResult
from textscope.domain.entities.spans import SpanEntity
from textscope.domain.services.client_tracer import ClientTracer, TraceSession
from textscope.domain.services.server_tracer import ServerTracer
from textscope.domain.services.span_exporter import FileSpanExporter

TEST_MAX_TEXT_LENGTH = 50


class RecordingSpanExporter(FileSpanExporter):
    """FileSpanExporter that also keeps every span and result it handled."""

    def __init__(self, sink):
        super().__init__(sink)
        self.exported: list[SpanEntity] = []
        self.results: list[ExportResult] = []

    def export(self, spans: Sequence[SpanEntity], callback: ExportCallback) -> None:
        self.exported.extend(spans)

        def record(result: ExportResult) -> None:
            self.results.append(result)
            callback(result)

        super().export(spans, record)


@pytest.fixture
def traces_file(tmp_path):
    """Trace file inside a directory that does not exist yet"""
    return tmp_path / "traces" / "traces.log"


@pytest.fixture
def span_sink(traces_file):
    sink = FileSpanSink(traces_file, service_name="test-service")
    yield sink
    sink.close()


@pytest.fixture
def span_exporter(span_sink):
    return RecordingSpanExporter(span_sink)


@pytest.fixture
def server_tracer(span_exporter):
    return ServerTracer(span_exporter)


@pytest.fixture
def client_spans():
    """Client spans in the order they ended"""
    return []


@pytest.fixture
def client_tracer(client_spans):
    return ClientTracer(session=TraceSession(), on_end=client_spans.append)


@pytest.fixture
def test_environment_variables():
    return EnvironmentVariables(MAX_TEXT_LENGTH=TEST_MAX_TEXT_LENGTH)


@pytest.fixture
def app_with_tracing(server_tracer, test_environment_variables):
    fastapi_app.dependency_overrides[server_tracer_dependency] = lambda: server_tracer
    fastapi_app.dependency_overrides[environment_variables_dependency] = (
        lambda: test_environment_variables
    )
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def api_client(app_with_tracing):
    return TestClient(app_with_tracing)
