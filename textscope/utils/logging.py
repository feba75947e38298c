import contextvars
import logging
import os
import sys
from collections.abc import Sequence

import json_log_formatter

# JSON output is opt-in so local runs stay readable
_is_json_logging_enabled = os.environ.get("JSON_LOGS", "false").lower() == "true"

LOG_FORMAT: str = (
    "%(asctime)s %(levelname)s [%(name)s] [%(filename)s:%(lineno)d] - %(message)s"
)

__all__: Sequence[str] = (
    "make_logger",
    "LOG_FORMAT",
    "ctx_var_request_id",
    "ctx_var_trace_id",
    "ctx_var_span_id",
)

ctx_var_request_id = contextvars.ContextVar[str]("request_id")
ctx_var_trace_id = contextvars.ContextVar[str]("trace_id")
ctx_var_span_id = contextvars.ContextVar[str]("span_id")


class CustomJSONFormatter(json_log_formatter.JSONFormatter):
    def json_record(self, message: str, extra: dict, record: logging.LogRecord) -> dict:
        extra = super().json_record(message, extra, record)
        extra["level"] = record.levelname
        extra["name"] = record.name
        extra["lineno"] = record.lineno
        extra["pathname"] = record.pathname

        # add the http request id if it exists
        request_id = ctx_var_request_id.get(None)
        if request_id:
            extra["request_id"] = request_id

        # correlate with the server span handling the current request
        trace_id = ctx_var_trace_id.get(None)
        if trace_id:
            extra["trace_id"] = trace_id
        span_id = ctx_var_span_id.get(None)
        if span_id:
            extra["span_id"] = span_id

        service_name = os.getenv("SERVICE_NAME")
        if service_name:
            extra["service"] = service_name

        return extra


def make_logger(name: str) -> logging.Logger:
    log_level = logging.INFO

    if name is None or not isinstance(name, str) or len(name) == 0:
        raise ValueError("Name must be a non-empty string.")

    logger = logging.getLogger(name)
    if not logger.handlers:
        stream_handler = logging.StreamHandler()
        if _is_json_logging_enabled:
            stream_handler.setFormatter(CustomJSONFormatter())
        else:
            stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(stream_handler)
    logger.setLevel(log_level)

    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logger.error(
            "Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = handle_exception
    return logger
