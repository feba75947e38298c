from collections.abc import Iterator, Mapping
from contextlib import contextmanager

from opentelemetry.trace import SpanKind, StatusCode

from textscope.domain.entities.exports import ExportResult
from textscope.domain.entities.spans import SpanEntity
from textscope.domain.exceptions import RequestHandlingError, TextValidationError
from textscope.domain.services.span_exporter import FileSpanExporter
from textscope.domain.services.trace_context_propagator import TraceContextPropagator
from textscope.domain.services.tracer import Tracer
from textscope.utils.logging import ctx_var_span_id, ctx_var_trace_id, make_logger

logger = make_logger(__name__)

SERVER_TRACER_NAME = "text-analysis-server"
SERVER_TRACER_VERSION = "1.0.0"


def log_export_result(result: ExportResult) -> None:
    if not result.succeeded:
        logger.warning(f"Server span export failed: {result.error}")


class ServerTracer(Tracer):
    def __init__(
        self,
        exporter: FileSpanExporter,
        propagator: TraceContextPropagator | None = None,
    ):
        super().__init__(
            SERVER_TRACER_NAME,
            SERVER_TRACER_VERSION,
            on_end=self._export,
            propagator=propagator,
        )
        self.exporter = exporter

    def _export(self, span: SpanEntity) -> None:
        self.exporter.export([span], log_export_result)

    @contextmanager
    def start_request_span(
        self,
        method: str,
        route: str,
        headers: Mapping[str, str],
    ) -> Iterator[SpanEntity]:
        """
        Trace one inbound request. The span joins the caller's trace when a valid
        traceparent header is present and starts a new trace otherwise. It ends on
        every exit path before the response is produced.
        """
        incoming_header = headers.get(self.propagator.header_name)
        parent = self.propagator.decode(incoming_header)

        span = self.start_span(
            f"{method} {route}",
            kind=SpanKind.SERVER,
            parent=parent,
        )
        if incoming_header:
            span.set_attribute("trace.parent", incoming_header)
        span.set_attribute("http.method", method)
        span.set_attribute("http.route", route)

        trace_token = ctx_var_trace_id.set(span.trace_id)
        span_token = ctx_var_span_id.set(span.span_id)
        try:
            yield span
        except TextValidationError as e:
            span.set_attribute("validation.error", e.message)
            span.set_status(StatusCode.ERROR)
            raise
        except Exception as e:
            logger.error(f"Unexpected error while handling {method} {route}: {e}")
            span.record_exception(e)
            span.set_status(StatusCode.ERROR)
            raise RequestHandlingError(detail=type(e).__name__) from e
        else:
            if span.status.code == StatusCode.UNSET:
                span.set_status(StatusCode.OK)
        finally:
            span.end()
            ctx_var_span_id.reset(span_token)
            ctx_var_trace_id.reset(trace_token)
