"""
W3C trace-context propagation for a single `traceparent` header.

Header shape: ``{version}-{trace_id}-{span_id}-{flags}``, all lowercase hex,
e.g. ``00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01``.
"""

import re
from collections.abc import Mapping, MutableMapping

from pydantic import ValidationError

from textscope.domain.entities.trace_context import TraceContext
from textscope.utils.logging import make_logger

logger = make_logger(__name__)

TRACEPARENT_HEADER = "traceparent"
SUPPORTED_VERSION = "00"
INVALID_VERSION = "ff"
SAMPLED_FLAG = 0x01

_TRACEPARENT_RE = re.compile(
    r"^(?P<version>[0-9a-f]{2})-(?P<trace_id>[0-9a-f]{32})-"
    r"(?P<span_id>[0-9a-f]{16})-(?P<flags>[0-9a-f]{2})(?P<rest>-.*)?$"
)


class TraceContextPropagator:
    header_name: str = TRACEPARENT_HEADER

    def encode(self, context: TraceContext) -> str:
        flags = SAMPLED_FLAG if context.sampled else 0
        return f"{SUPPORTED_VERSION}-{context.trace_id}-{context.span_id}-{flags:02x}"

    def decode(self, header: str | None) -> TraceContext | None:
        """
        Parse a traceparent value. Returns None for anything that is not a valid
        header so callers can fall back to starting a new trace.
        """
        if not header or not isinstance(header, str):
            return None

        match = _TRACEPARENT_RE.match(header.strip())
        if match is None:
            logger.debug(f"Ignoring malformed traceparent header: {header!r}")
            return None

        version = match.group("version")
        if version == INVALID_VERSION:
            return None
        # Version 00 has exactly four fields, later versions may append more
        if version == SUPPORTED_VERSION and match.group("rest") is not None:
            return None

        try:
            return TraceContext(
                trace_id=match.group("trace_id"),
                span_id=match.group("span_id"),
                sampled=bool(int(match.group("flags"), 16) & SAMPLED_FLAG),
            )
        except ValidationError:
            logger.debug(f"Ignoring traceparent header with invalid IDs: {header!r}")
            return None

    def inject(
        self, context: TraceContext, headers: MutableMapping[str, str]
    ) -> MutableMapping[str, str]:
        headers[self.header_name] = self.encode(context)
        return headers

    def extract(self, headers: Mapping[str, str]) -> TraceContext | None:
        return self.decode(headers.get(self.header_name))
