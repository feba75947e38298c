from pydantic import ConfigDict, Field, field_validator

from textscope.utils.model_utils import BaseModel

TRACE_ID_PATTERN = r"^[0-9a-f]{32}$"
SPAN_ID_PATTERN = r"^[0-9a-f]{16}$"


class TraceContext(BaseModel):
    """
    The (trace_id, span_id, sampled) triple carried across a network hop.
    """

    model_config = ConfigDict(frozen=True)

    trace_id: str = Field(
        ...,
        title="The trace ID shared by every span of the request chain",
        pattern=TRACE_ID_PATTERN,
    )
    span_id: str = Field(
        ...,
        title="The ID of the span that issued the outbound call",
        pattern=SPAN_ID_PATTERN,
    )
    sampled: bool = Field(
        True,
        title="Whether the caller recorded this trace",
    )

    @field_validator("trace_id", "span_id")
    @classmethod
    def reject_all_zero_ids(cls, value: str) -> str:
        if set(value) == {"0"}:
            raise ValueError("Trace and span IDs must not be all zeros")
        return value
