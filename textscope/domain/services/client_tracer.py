import json
from collections.abc import MutableMapping

from opentelemetry.trace import StatusCode

from textscope.domain.entities.exports import ExportResult
from textscope.domain.entities.spans import SpanEntity
from textscope.domain.services.span_exporter import FileSpanExporter
from textscope.domain.services.trace_context_propagator import TraceContextPropagator
from textscope.domain.services.tracer import SpanObserver, Tracer
from textscope.utils.ids import generate_trace_id
from textscope.utils.logging import make_logger
from textscope.utils.timestamp import ns_to_ms

logger = make_logger(__name__)

CLIENT_TRACER_NAME = "text-analysis-client"
CLIENT_TRACER_VERSION = "1.0.0"


class TraceSession:
    """
    Holds the trace ID of one client session. The ID is generated on first use and
    then reused by every root span started through the session.
    """

    def __init__(self, trace_id: str | None = None):
        self._trace_id = trace_id

    @property
    def trace_id(self) -> str:
        if self._trace_id is None:
            self._trace_id = generate_trace_id()
            logger.debug(f"Started client trace {self._trace_id}")
        return self._trace_id

    def has_trace(self) -> bool:
        return self._trace_id is not None


def log_client_span(span: SpanEntity) -> None:
    """Default client observer: one log line per completed span."""
    duration_ms = ns_to_ms(span.duration_ns or 0)
    logger.info(
        f"[client span] {span.name} trace={span.trace_id} id={span.span_id} "
        f"duration={duration_ms:.2f}ms status={span.status.code.name} "
        f"attributes={json.dumps(span.attributes, default=str)} "
        f"events={[event.name for event in span.events]}"
    )


def exporting_observer(exporter: FileSpanExporter) -> SpanObserver:
    """Log each client span and also append it to a trace file."""

    def _on_export(result: ExportResult) -> None:
        if not result.succeeded:
            logger.warning(f"Client span export failed: {result.error}")

    def observe(span: SpanEntity) -> None:
        log_client_span(span)
        exporter.export([span], _on_export)

    return observe


class ClientTracer(Tracer):
    def __init__(
        self,
        session: TraceSession | None = None,
        on_end: SpanObserver | None = log_client_span,
        propagator: TraceContextPropagator | None = None,
    ):
        super().__init__(
            CLIENT_TRACER_NAME,
            CLIENT_TRACER_VERSION,
            on_end=on_end,
            propagator=propagator,
        )
        self.session = session or TraceSession()

    def _root_trace_id(self) -> str:
        return self.session.trace_id

    def inject(
        self, span: SpanEntity, headers: MutableMapping[str, str] | None = None
    ) -> MutableMapping[str, str]:
        """Add the span's trace context to outgoing request headers."""
        if headers is None:
            headers = {}
        return self.propagator.inject(span.span_context(), headers)

    @staticmethod
    def mark_outcome(span: SpanEntity, ok: bool, message: str | None = None) -> None:
        if ok:
            span.set_status(StatusCode.OK)
        else:
            span.set_status(StatusCode.ERROR, message)
