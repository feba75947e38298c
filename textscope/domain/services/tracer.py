from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from opentelemetry.trace import SpanKind, StatusCode

from textscope.domain.entities.spans import SpanEntity
from textscope.domain.entities.trace_context import TraceContext
from textscope.domain.services.trace_context_propagator import TraceContextPropagator
from textscope.utils.ids import generate_span_id, generate_trace_id
from textscope.utils.logging import make_logger

logger = make_logger(__name__)

SpanObserver = Callable[[SpanEntity], None]
SpanParent = SpanEntity | TraceContext


class Tracer:
    """
    Creates spans relative to an explicitly passed parent. There is no ambient
    "current span": callers thread the parent through their own call chain.
    """

    def __init__(
        self,
        name: str,
        version: str,
        on_end: SpanObserver | None = None,
        propagator: TraceContextPropagator | None = None,
    ):
        self.name = name
        self.version = version
        self.on_end = on_end
        self.propagator = propagator or TraceContextPropagator()

    def _root_trace_id(self) -> str:
        return generate_trace_id()

    def start_span(
        self,
        name: str,
        kind: SpanKind = SpanKind.INTERNAL,
        parent: SpanParent | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> SpanEntity:
        if isinstance(parent, SpanEntity):
            parent = parent.span_context()

        if parent is not None:
            trace_id = parent.trace_id
            parent_span_id = parent.span_id
        else:
            trace_id = self._root_trace_id()
            parent_span_id = None

        span = SpanEntity(
            name=name,
            trace_id=trace_id,
            span_id=generate_span_id(),
            parent_span_id=parent_span_id,
            kind=kind,
            attributes=dict(attributes or {}),
        )
        span.bind_on_end(self.on_end)
        return span

    @contextmanager
    def start_as_current_span(
        self,
        name: str,
        kind: SpanKind = SpanKind.INTERNAL,
        parent: SpanParent | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> Iterator[SpanEntity]:
        """
        Yield a new span and end it on every exit path. Exceptions are recorded on the
        span, mark it as ERROR and are re-raised.
        """
        span = self.start_span(name, kind=kind, parent=parent, attributes=attributes)
        try:
            yield span
        except Exception as e:
            span.record_exception(e)
            span.set_status(StatusCode.ERROR, str(e) or type(e).__name__)
            raise
        finally:
            span.end()
