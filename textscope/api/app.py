from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from textscope.api.RequestLoggingMiddleware import RequestLoggingMiddleware
from textscope.api.routes import text_analysis
from textscope.config import dependencies
from textscope.config.dependencies import resolve_environment_variable_dependency
from textscope.config.environment_variables import EnvVarKeys
from textscope.domain.exceptions import GenericException
from textscope.utils.logging import make_logger

logger = make_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    dependencies.startup_global_dependencies()
    yield
    # The trace file is process-wide state, closed once on graceful shutdown
    dependencies.shutdown()


fastapi_app = FastAPI(
    title="Text Analysis API",
    openapi_url="/openapi.json",
    docs_url="/swagger",
    redoc_url="/api",
    lifespan=lifespan,
    separate_input_output_schemas=False,
)

# Add CORS middleware
allowed_origins = resolve_environment_variable_dependency(EnvVarKeys.ALLOWED_ORIGINS)
allowed_origins_list = (
    [origin.strip() for origin in allowed_origins.split(",")]
    if allowed_origins and isinstance(allowed_origins, str)
    else ["*"]
)
fastapi_app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins_list,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)
fastapi_app.add_middleware(RequestLoggingMiddleware)


def format_error_response(detail: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": detail},
    )


@fastapi_app.exception_handler(GenericException)
async def handle_generic(request: Request, exc: GenericException):
    if exc.detail:
        logger.info(
            f"{request.method} {request.url.path} rejected: {exc.message} ({exc.detail})"
        )
    return format_error_response(exc.message, exc.code)


@fastapi_app.exception_handler(HTTPException)
async def handle_http_exc(request: Request, exc: HTTPException):
    return format_error_response(exc.detail, exc.status_code)


@fastapi_app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled exception caught by exception handler", exc_info=exc)
    # Internals stay in the logs
    return format_error_response(
        "Internal Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR
    )


fastapi_app.include_router(text_analysis.router)

app = fastapi_app
