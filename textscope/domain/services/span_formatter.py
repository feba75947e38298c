"""
Human-readable rendering of ended spans, one record per span:

    ---
    name: POST /length
    traceId: 4bf92f3577b34da6a3ce929d0e0e4736
    parentId: 00f067aa0ba902b7
    id: b7ad6b7169203331
    kind: 1 (SERVER)
    timestamp: 1718000000123456
    duration: 1234 (1.23 ms)
    status: { code: 1 (OK), message: None }
    attributes: {
      http.method: 'POST',
      text.length: 5,
    }
"""

import json
from typing import Any

from opentelemetry.trace import SpanKind, StatusCode

from textscope.domain.entities.spans import SpanEntity, SpanEvent
from textscope.utils.timestamp import ns_to_ms, ns_to_us

PLACEHOLDER = "-"
RECORD_SEPARATOR = "---"


def format_kind(kind: SpanKind | None) -> str:
    if kind is None:
        return f"{PLACEHOLDER} ({PLACEHOLDER})"
    return f"{kind.value} ({kind.name})"


def format_status(span: SpanEntity) -> str:
    code: StatusCode = span.status.code
    message = f"'{span.status.message}'" if span.status.message else "None"
    return f"{{ code: {code.value} ({code.name}), message: {message} }}"


def format_duration(duration_ns: int | None) -> str:
    if duration_ns is None:
        return f"{PLACEHOLDER} ({PLACEHOLDER} ms)"
    return f"{ns_to_us(duration_ns)} ({ns_to_ms(duration_ns):.2f} ms)"


def format_attribute_value(value: Any) -> str:
    if isinstance(value, str):
        return f"'{value}'"
    if isinstance(value, (dict, list, tuple, bool)) or value is None:
        return json.dumps(value, default=str)
    return str(value)


def format_event_message(event: SpanEvent) -> str:
    attributes = event.attributes
    return (
        attributes.get("exception.message")
        or attributes.get("exception.type")
        or json.dumps(attributes, default=str)
    )


def format_span(span: SpanEntity) -> str:
    lines = [
        RECORD_SEPARATOR,
        f"name: {span.name or 'unknown'}",
        f"traceId: {span.trace_id or PLACEHOLDER}",
        f"parentId: {span.parent_span_id or PLACEHOLDER}",
        f"id: {span.span_id or PLACEHOLDER}",
        f"kind: {format_kind(span.kind)}",
        f"timestamp: {ns_to_us(span.start_time_ns)}",
        f"duration: {format_duration(span.duration_ns)}",
        f"status: {format_status(span)}",
    ]

    if span.attributes:
        lines.append("attributes: {")
        for key, value in span.attributes.items():
            lines.append(f"  {key}: {format_attribute_value(value)},")
        lines.append("}")

    if span.events:
        lines.append("events: [")
        for event in span.events:
            lines.append(
                f"  {{ name: '{event.name}', attributes: {format_event_message(event)} }},"
            )
        lines.append("]")

    lines.append("")
    return "\n".join(lines)
