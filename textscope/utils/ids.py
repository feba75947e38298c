from opentelemetry.sdk.trace.id_generator import RandomIdGenerator
from opentelemetry.trace import format_span_id, format_trace_id

_id_generator = RandomIdGenerator()


def generate_trace_id() -> str:
    """32 lowercase hex characters, never all zeros."""
    return format_trace_id(_id_generator.generate_trace_id())


def generate_span_id() -> str:
    """16 lowercase hex characters, never all zeros."""
    return format_span_id(_id_generator.generate_span_id())
