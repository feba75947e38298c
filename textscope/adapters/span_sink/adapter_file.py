from pathlib import Path
from typing import TextIO

from textscope.adapters.span_sink.exceptions import SinkClosedError
from textscope.adapters.span_sink.port import SinkState, SpanSink
from textscope.utils.logging import make_logger
from textscope.utils.timestamp import timestamp_isoformat

logger = make_logger(__name__)


class FileSpanSink(SpanSink):
    """
    Append-only text file for formatted spans.

    The file and its parent directories are created lazily on the first write, so an
    idle process never leaves an empty trace file behind. A session header with the
    current time is written once, right after opening.
    """

    def __init__(self, file_path: str | Path, service_name: str = "textscope"):
        self.file_path = Path(file_path)
        self.service_name = service_name
        self._stream: TextIO | None = None
        self._state = SinkState.UNOPENED

    @property
    def state(self) -> SinkState:
        return self._state

    def _session_header(self) -> str:
        return (
            f"\n========== textscope traces: {self.service_name} "
            f"({timestamp_isoformat()}) ==========\n\n"
        )

    def _get_stream(self) -> TextIO:
        if self._state == SinkState.CLOSED:
            raise SinkClosedError(f"Span sink {self.file_path} is already closed")

        if self._stream is None:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            stream = open(self.file_path, "a", encoding="utf-8")
            try:
                stream.write(self._session_header())
            except Exception:
                # Stay UNOPENED so the next write retries with a header
                stream.close()
                raise
            self._stream = stream
            self._state = SinkState.OPEN
            logger.info(f"Opened span sink {self.file_path}")
        return self._stream

    def write(self, text: str) -> None:
        stream = self._get_stream()
        stream.write(text)

    def flush(self) -> None:
        if self._stream is not None:
            self._stream.flush()

    def close(self) -> None:
        if self._state == SinkState.CLOSED:
            return
        if self._stream is not None:
            try:
                self._stream.close()
            finally:
                self._stream = None
            logger.info(f"Closed span sink {self.file_path}")
        self._state = SinkState.CLOSED
