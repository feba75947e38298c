from __future__ import annotations

import traceback
from collections.abc import Callable, Mapping
from typing import Any

from opentelemetry.trace import SpanKind, StatusCode
from pydantic import Field, PrivateAttr

from textscope.domain.entities.trace_context import TraceContext
from textscope.utils.logging import make_logger
from textscope.utils.model_utils import BaseModel
from textscope.utils.timestamp import epoch_time_ns, monotonic_time_ns

logger = make_logger(__name__)

EXCEPTION_EVENT_NAME = "exception"


class SpanStatus(BaseModel):
    code: StatusCode = Field(
        StatusCode.UNSET,
        title="UNSET, OK or ERROR",
    )
    message: str | None = Field(
        None,
        title="Optional description, only meaningful for ERROR",
    )


class SpanEvent(BaseModel):
    name: str = Field(
        ...,
        title="The name of the event",
    )
    timestamp_ns: int = Field(
        default_factory=epoch_time_ns,
        title="When the event happened, in epoch nanoseconds",
    )
    attributes: dict[str, Any] = Field(
        default_factory=dict,
        title="Event attributes",
    )


class SpanEntity(BaseModel):
    name: str = Field(
        ...,
        title="The name of the span",
    )
    trace_id: str = Field(
        ...,
        title="The trace ID for this span",
    )
    span_id: str = Field(
        ...,
        title="Unique Span ID within the trace",
    )
    parent_span_id: str | None = Field(
        None,
        title="The parent span ID if this is a child span",
    )
    kind: SpanKind = Field(
        SpanKind.INTERNAL,
        title="The role of the span in the request chain",
    )
    start_time_ns: int = Field(
        default_factory=epoch_time_ns,
        title="The time the span started, in epoch nanoseconds",
    )
    end_time_ns: int | None = Field(
        None,
        title="The time the span ended, in epoch nanoseconds",
    )
    duration_ns: int | None = Field(
        None,
        title="Elapsed time measured on the monotonic clock",
    )
    status: SpanStatus = Field(
        default_factory=SpanStatus,
        title="The outcome of the operation",
    )
    attributes: dict[str, Any] = Field(
        default_factory=dict,
        title="Attributes set before the span ended",
    )
    events: list[SpanEvent] = Field(
        default_factory=list,
        title="Timestamped sub-records, in the order they were added",
    )

    _start_monotonic_ns: int = PrivateAttr(default_factory=monotonic_time_ns)
    _on_end: Callable[[SpanEntity], None] | None = PrivateAttr(default=None)

    def bind_on_end(self, on_end: Callable[[SpanEntity], None] | None) -> None:
        """Register the observer that receives this span once it ends."""
        self._on_end = on_end

    def is_ended(self) -> bool:
        return self.end_time_ns is not None

    def span_context(self) -> TraceContext:
        return TraceContext(trace_id=self.trace_id, span_id=self.span_id, sampled=True)

    def _is_writable(self, operation: str) -> bool:
        if self.is_ended():
            logger.warning(
                f"Ignoring {operation} on ended span '{self.name}' ({self.span_id})"
            )
            return False
        return True

    def set_attribute(self, key: str, value: Any) -> SpanEntity:
        if self._is_writable("set_attribute"):
            self.attributes[key] = value
        return self

    def set_attributes(self, attributes: Mapping[str, Any]) -> SpanEntity:
        if self._is_writable("set_attributes"):
            self.attributes.update(attributes)
        return self

    def set_status(self, code: StatusCode, message: str | None = None) -> SpanEntity:
        if self._is_writable("set_status"):
            self.status = SpanStatus(code=code, message=message)
        return self

    def add_event(
        self, name: str, attributes: Mapping[str, Any] | None = None
    ) -> SpanEntity:
        if self._is_writable("add_event"):
            self.events.append(SpanEvent(name=name, attributes=dict(attributes or {})))
        return self

    def record_exception(
        self,
        exception: BaseException,
        attributes: Mapping[str, Any] | None = None,
    ) -> SpanEntity:
        """
        Record an exception as an event, following the OpenTelemetry semantic conventions
        for exception attributes. The status is left to the caller.
        """
        event_attributes = {
            "exception.type": type(exception).__name__,
            "exception.message": str(exception),
            "exception.stacktrace": "".join(
                traceback.format_exception(
                    type(exception), exception, exception.__traceback__
                )
            ),
        }
        if attributes:
            event_attributes.update(attributes)
        return self.add_event(EXCEPTION_EVENT_NAME, event_attributes)

    def end(self) -> None:
        if self.is_ended():
            logger.warning(f"Span '{self.name}' ({self.span_id}) already ended")
            return

        self.duration_ns = max(0, monotonic_time_ns() - self._start_monotonic_ns)
        self.end_time_ns = self.start_time_ns + self.duration_ns

        if self._on_end is None:
            return
        try:
            self._on_end(self)
        except Exception as e:
            # Observers must never turn a finished operation into a failed one
            logger.error(
                f"Span observer failed for '{self.name}' ({self.span_id}): {e}",
                exc_info=True,
            )
