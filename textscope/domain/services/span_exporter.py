from collections.abc import Sequence

from textscope.adapters.span_sink.exceptions import SinkClosedError
from textscope.adapters.span_sink.port import SinkState, SpanSink
from textscope.domain.entities.exports import ExportCallback, ExportResult
from textscope.domain.entities.spans import SpanEntity
from textscope.domain.services.span_formatter import format_span
from textscope.utils.logging import make_logger

logger = make_logger(__name__)


class FileSpanExporter:
    """
    Writes completed spans to a SpanSink in the readable record format.

    export() never raises: every call ends with exactly one invocation of the result
    callback, SUCCESS or FAILURE.
    """

    def __init__(self, sink: SpanSink):
        self.sink = sink

    def export(self, spans: Sequence[SpanEntity], callback: ExportCallback) -> None:
        if not spans:
            self._notify(callback, ExportResult.success())
            return

        try:
            records = "".join(format_span(span) for span in spans)
            self.sink.write(records + "\n")
            self.sink.flush()
        except SinkClosedError as e:
            logger.error(
                f"Span export after shutdown, dropping {len(spans)} span(s): {e}"
            )
            self._notify(callback, ExportResult.failure(str(e)))
            return
        except Exception as e:
            logger.error(
                f"Failed to export {len(spans)} span(s): {e}",
                exc_info=True,
            )
            self._notify(
                callback, ExportResult.failure(f"{type(e).__name__}: {e}")
            )
            return

        self._notify(callback, ExportResult.success())

    @staticmethod
    def _notify(callback: ExportCallback, result: ExportResult) -> None:
        try:
            callback(result)
        except Exception as e:
            logger.error(f"Span export callback raised: {e}", exc_info=True)

    def force_flush(self) -> bool:
        try:
            self.sink.flush()
            return True
        except Exception as e:
            logger.error(f"Failed to flush span sink: {e}")
            return False

    def shutdown(self) -> None:
        if self.sink.state == SinkState.OPEN:
            self.force_flush()
        try:
            self.sink.close()
        except Exception as e:
            logger.error(f"Failed to close span sink: {e}")
