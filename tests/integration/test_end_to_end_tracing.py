"""
Client and server wired together in-process: the client's httpx gateway talks to the
FastAPI app through httpx.ASGITransport, so both halves of every trace are visible.
"""

import httpx
import pytest
import pytest_asyncio
from opentelemetry.trace import SpanKind, StatusCode

from textscope.adapters.http.adapter_httpx import HttpxGateway
from textscope.client.text_analysis_client import TextAnalysisClient

BASE_URL = "http://testserver"


class FailingRouteTransport(httpx.AsyncBaseTransport):
    """Serves the app in-process but fails to connect for one path."""

    def __init__(self, app, failing_path: str):
        self._inner = httpx.ASGITransport(app=app)
        self.failing_path = failing_path

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == self.failing_path:
            raise httpx.ConnectError("connection refused", request=request)
        return await self._inner.handle_async_request(request)

    async def aclose(self) -> None:
        await self._inner.aclose()


@pytest_asyncio.fixture
async def gateway(app_with_tracing, test_environment_variables):
    gateway = HttpxGateway(
        test_environment_variables,
        transport=httpx.ASGITransport(app=app_with_tracing),
    )
    yield gateway
    await gateway.close()


@pytest_asyncio.fixture
async def gateway_without_vowels(app_with_tracing, test_environment_variables):
    gateway = HttpxGateway(
        test_environment_variables,
        transport=FailingRouteTransport(app_with_tracing, "/num_vowels"),
    )
    yield gateway
    await gateway.close()


@pytest.fixture
def analysis_client(gateway, client_tracer):
    return TextAnalysisClient(gateway=gateway, tracer=client_tracer, base_url=BASE_URL)


def spans_by_name(spans):
    return {span.name: span for span in spans}


@pytest.mark.integration
class TestEndToEndTracing:
    @pytest.mark.asyncio
    async def test_both_calls_succeed_in_one_trace(
        self, analysis_client, client_spans, span_exporter, traces_file
    ):
        result = await analysis_client.analyze("Hello")

        assert result.ok
        assert (result.length, result.vowel_count) == (5, 2)

        client = spans_by_name(client_spans)
        server = spans_by_name(span_exporter.exported)
        assert set(client) == {"form_submit", "fetch_length_api", "fetch_vowels_api"}
        assert set(server) == {"POST /length", "POST /num_vowels"}

        form_submit = client["form_submit"]
        trace_ids = {span.trace_id for span in client_spans + span_exporter.exported}
        assert trace_ids == {form_submit.trace_id}
        assert form_submit.status.code == StatusCode.OK
        assert form_submit.attributes["user_input_length"] == 5
        assert form_submit.attributes["result_length"] == 5
        assert form_submit.attributes["result_vowels"] == 2

        for fetch_name, server_name in [
            ("fetch_length_api", "POST /length"),
            ("fetch_vowels_api", "POST /num_vowels"),
        ]:
            fetch = client[fetch_name]
            assert fetch.kind == SpanKind.CLIENT
            assert fetch.parent_span_id == form_submit.span_id
            assert fetch.status.code == StatusCode.OK
            assert fetch.attributes["http.status_code"] == 200
            assert fetch.attributes["http.status_text"] == "OK"
            assert server[server_name].parent_span_id == fetch.span_id
            assert server[server_name].status.code == StatusCode.OK

        assert server["POST /length"].attributes["text.length"] == 5
        assert server["POST /num_vowels"].attributes["vowel.count"] == 2

        # the root span ends after both children
        assert client_spans[-1] is form_submit

        content = traces_file.read_text(encoding="utf-8")
        assert content.count("---\n") == 2
        assert content.count(f"traceId: {form_submit.trace_id}") == 2

    @pytest.mark.asyncio
    async def test_empty_text_is_traced_as_validation_error(
        self, analysis_client, client_spans, span_exporter
    ):
        result = await analysis_client.analyze("")

        expected_error = "Text is required and cannot be empty after trimming."
        assert result.length_error == expected_error
        assert result.vowel_error == expected_error
        assert not result.ok

        assert len(span_exporter.exported) == 2
        for span in span_exporter.exported:
            assert span.status.code == StatusCode.ERROR
            assert span.attributes["validation.error"] == expected_error
        assert all(result.succeeded for result in span_exporter.results)

        client = spans_by_name(client_spans)
        assert client["fetch_length_api"].attributes["http.status_code"] == 400
        assert client["fetch_length_api"].attributes["http.status_text"] == "Bad Request"
        assert client["fetch_length_api"].status.code == StatusCode.ERROR
        assert client["form_submit"].status.code == StatusCode.ERROR
        assert client["form_submit"].attributes["result_length"] == "error"

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_successful_value(
        self, gateway_without_vowels, client_tracer, client_spans, span_exporter
    ):
        analysis_client = TextAnalysisClient(
            gateway=gateway_without_vowels, tracer=client_tracer, base_url=BASE_URL
        )

        result = await analysis_client.analyze("Hello World")

        assert result.partial
        assert result.length == 11
        assert result.vowel_count is None
        assert result.vowel_error == "Request failed: connection refused"

        client = spans_by_name(client_spans)
        failed_fetch = client["fetch_vowels_api"]
        assert failed_fetch.status.code == StatusCode.ERROR
        assert failed_fetch.events[0].attributes["exception.type"] == "ConnectError"
        assert "http.status_code" not in failed_fetch.attributes
        assert client["fetch_length_api"].status.code == StatusCode.OK
        assert client["form_submit"].attributes["result_length"] == 11
        assert client["form_submit"].attributes["result_vowels"] == "error"
        assert client["form_submit"].status.message == "one or more requests failed"

        # only the reachable endpoint produced a server span
        assert [span.name for span in span_exporter.exported] == ["POST /length"]

    @pytest.mark.asyncio
    async def test_trace_directory_is_created_on_first_export(
        self, analysis_client, span_exporter, traces_file
    ):
        assert not traces_file.parent.exists()

        await analysis_client.analyze("Hello")
        await analysis_client.analyze("World")

        assert traces_file.exists()
        assert all(result.succeeded for result in span_exporter.results)
        assert len(span_exporter.results) == 4
        content = traces_file.read_text(encoding="utf-8")
        assert content.count("========== textscope traces:") == 1
        assert content.count("---\n") == 4

    @pytest.mark.asyncio
    async def test_session_keeps_one_trace_across_submissions(
        self, analysis_client, client_spans
    ):
        await analysis_client.analyze("first")
        await analysis_client.analyze("second")

        roots = [span for span in client_spans if span.name == "form_submit"]
        assert len(roots) == 2
        assert roots[0].trace_id == roots[1].trace_id
        assert roots[0].span_id != roots[1].span_id
