"""
Unit tests for the span lifecycle: mutation before end, read-only after end.
"""

from unittest.mock import MagicMock

import pytest
from opentelemetry.trace import SpanKind, StatusCode
from pydantic import ValidationError

from textscope.domain.entities.spans import EXCEPTION_EVENT_NAME, SpanEntity
from textscope.domain.entities.trace_context import TraceContext

TRACE_ID = "4bf92f3577b34da6a3ce929d0e0e4736"
SPAN_ID = "00f067aa0ba902b7"


@pytest.fixture
def span():
    return SpanEntity(name="POST /length", trace_id=TRACE_ID, span_id=SPAN_ID)


@pytest.mark.unit
class TestSpanEntity:
    def test_defaults(self, span):
        assert span.kind == SpanKind.INTERNAL
        assert span.status.code == StatusCode.UNSET
        assert span.parent_span_id is None
        assert span.attributes == {}
        assert span.events == []
        assert not span.is_ended()

    def test_end_sets_non_negative_duration(self, span):
        span.end()

        assert span.is_ended()
        assert span.duration_ns >= 0
        assert span.end_time_ns == span.start_time_ns + span.duration_ns

    def test_end_notifies_observer_once(self, span):
        observer = MagicMock()
        span.bind_on_end(observer)

        span.end()
        span.end()

        observer.assert_called_once_with(span)

    def test_second_end_keeps_first_timestamps(self, span):
        span.end()
        end_time_ns = span.end_time_ns

        span.end()

        assert span.end_time_ns == end_time_ns

    def test_mutations_before_end_are_applied(self, span):
        span.set_attribute("text.length", 5)
        span.set_attributes({"http.method": "POST", "http.route": "/length"})
        span.set_status(StatusCode.ERROR, "boom")
        span.add_event("checkpoint", {"step": 1})

        assert span.attributes == {
            "text.length": 5,
            "http.method": "POST",
            "http.route": "/length",
        }
        assert span.status.code == StatusCode.ERROR
        assert span.status.message == "boom"
        assert [event.name for event in span.events] == ["checkpoint"]

    def test_mutations_after_end_are_ignored(self, span):
        span.set_attribute("before", True)
        span.end()

        span.set_attribute("after", True)
        span.set_attributes({"also_after": True})
        span.set_status(StatusCode.ERROR)
        span.add_event("late")
        span.record_exception(RuntimeError("late"))

        assert span.attributes == {"before": True}
        assert span.status.code == StatusCode.UNSET
        assert span.events == []

    def test_record_exception_adds_exception_event(self, span):
        try:
            raise ValueError("bad input")
        except ValueError as e:
            span.record_exception(e)

        event = span.events[0]
        assert event.name == EXCEPTION_EVENT_NAME
        assert event.attributes["exception.type"] == "ValueError"
        assert event.attributes["exception.message"] == "bad input"
        assert "ValueError: bad input" in event.attributes["exception.stacktrace"]
        # status is the caller's decision
        assert span.status.code == StatusCode.UNSET

    def test_events_keep_insertion_order(self, span):
        for name in ["first", "second", "third"]:
            span.add_event(name)

        assert [event.name for event in span.events] == ["first", "second", "third"]

    def test_failing_observer_does_not_raise(self, span):
        span.bind_on_end(MagicMock(side_effect=OSError("disk full")))

        span.end()

        assert span.is_ended()

    def test_span_context(self, span):
        assert span.span_context() == TraceContext(
            trace_id=TRACE_ID, span_id=SPAN_ID, sampled=True
        )


@pytest.mark.unit
class TestTraceContext:
    @pytest.mark.parametrize(
        "trace_id,span_id",
        [
            ("0" * 32, SPAN_ID),
            (TRACE_ID, "0" * 16),
            (TRACE_ID.upper(), SPAN_ID),
            (TRACE_ID[:-1], SPAN_ID),
            (TRACE_ID, SPAN_ID + "a"),
        ],
    )
    def test_rejects_invalid_ids(self, trace_id, span_id):
        with pytest.raises(ValidationError):
            TraceContext(trace_id=trace_id, span_id=span_id)

    def test_is_immutable(self):
        context = TraceContext(trace_id=TRACE_ID, span_id=SPAN_ID)
        with pytest.raises(ValidationError):
            context.sampled = False
