from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from textscope.utils.logging import ctx_var_request_id, make_logger
from textscope.utils.timestamp import monotonic_time_ns, ns_to_ms

logger = make_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        # Set a request ID in every logging extra dict so that we can correlate logs for a
        # single request.
        request_id = str(uuid4().hex)
        ctx_var_request_id.set(request_id)
        started_ns = monotonic_time_ns()
        response = await call_next(request)
        logger.info(
            f"Response[{response.status_code}] [{request.method} {request.url.path}] "
            f"({request_id}) in {ns_to_ms(monotonic_time_ns() - started_ns):.2f}ms",
            extra={
                "status_code": response.status_code,
                "method": request.method,
                "path": request.url.path,
                "request_id": request_id,
            },
        )
        return response
