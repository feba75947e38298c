from __future__ import annotations

import os
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

from textscope.utils.logging import make_logger
from textscope.utils.model_utils import BaseModel

PROJECT_ROOT = Path(__file__).resolve().parents[2]
logger = make_logger(__name__)


class EnvVarKeys(str, Enum):
    ENVIRONMENT = "ENVIRONMENT"
    SERVICE_NAME = "SERVICE_NAME"
    OTEL_TRACES_FILE = "OTEL_TRACES_FILE"
    ALLOWED_ORIGINS = "ALLOWED_ORIGINS"
    MAX_TEXT_LENGTH = "MAX_TEXT_LENGTH"
    HOST = "HOST"
    PORT = "PORT"
    TEXTSCOPE_BASE_URL = "TEXTSCOPE_BASE_URL"
    HTTPX_CONNECT_TIMEOUT = "HTTPX_CONNECT_TIMEOUT"
    HTTPX_READ_TIMEOUT = "HTTPX_READ_TIMEOUT"
    HTTPX_WRITE_TIMEOUT = "HTTPX_WRITE_TIMEOUT"
    HTTPX_POOL_TIMEOUT = "HTTPX_POOL_TIMEOUT"


class Environment(str, Enum):
    DEV = "development"
    STAGING = "staging"
    PROD = "production"


DEFAULT_TRACES_FILE = str(PROJECT_ROOT / "traces.log")

refreshed_environment_variables = None


class EnvironmentVariables(BaseModel):
    ENVIRONMENT: str | None = Environment.DEV
    SERVICE_NAME: str = "text-analysis-server"
    OTEL_TRACES_FILE: str = DEFAULT_TRACES_FILE
    ALLOWED_ORIGINS: str | None = None
    MAX_TEXT_LENGTH: int = 100_000  # Guards against oversized payloads
    HOST: str = "127.0.0.1"
    PORT: int = 3000
    TEXTSCOPE_BASE_URL: str = "http://localhost:3000"
    HTTPX_CONNECT_TIMEOUT: float = 10.0  # HTTPX connection timeout in seconds
    HTTPX_READ_TIMEOUT: float = 30.0  # HTTPX read timeout in seconds
    HTTPX_WRITE_TIMEOUT: float = 30.0  # HTTPX write timeout in seconds
    HTTPX_POOL_TIMEOUT: float = 10.0  # HTTPX pool timeout in seconds

    @classmethod
    def refresh(cls, force_refresh: bool = False) -> EnvironmentVariables:
        global refreshed_environment_variables
        if refreshed_environment_variables is not None and not force_refresh:
            return refreshed_environment_variables

        if os.environ.get(EnvVarKeys.ENVIRONMENT) in (None, Environment.DEV):
            load_dotenv(dotenv_path=Path(PROJECT_ROOT / ".env"), override=False)
        environment_variables = EnvironmentVariables(
            ENVIRONMENT=os.environ.get(EnvVarKeys.ENVIRONMENT, Environment.DEV),
            SERVICE_NAME=os.environ.get(
                EnvVarKeys.SERVICE_NAME, "text-analysis-server"
            ),
            OTEL_TRACES_FILE=os.environ.get(
                EnvVarKeys.OTEL_TRACES_FILE, DEFAULT_TRACES_FILE
            ),
            ALLOWED_ORIGINS=os.environ.get(EnvVarKeys.ALLOWED_ORIGINS, "*"),
            MAX_TEXT_LENGTH=int(
                os.environ.get(EnvVarKeys.MAX_TEXT_LENGTH, "100000")
            ),
            HOST=os.environ.get(EnvVarKeys.HOST, "127.0.0.1"),
            PORT=int(os.environ.get(EnvVarKeys.PORT, "3000")),
            TEXTSCOPE_BASE_URL=os.environ.get(
                EnvVarKeys.TEXTSCOPE_BASE_URL, "http://localhost:3000"
            ),
            HTTPX_CONNECT_TIMEOUT=float(
                os.environ.get(EnvVarKeys.HTTPX_CONNECT_TIMEOUT, "10.0")
            ),
            HTTPX_READ_TIMEOUT=float(
                os.environ.get(EnvVarKeys.HTTPX_READ_TIMEOUT, "30.0")
            ),
            HTTPX_WRITE_TIMEOUT=float(
                os.environ.get(EnvVarKeys.HTTPX_WRITE_TIMEOUT, "30.0")
            ),
            HTTPX_POOL_TIMEOUT=float(
                os.environ.get(EnvVarKeys.HTTPX_POOL_TIMEOUT, "10.0")
            ),
        )
        logger.debug(f"Traces will be written to {environment_variables.OTEL_TRACES_FILE}")
        refreshed_environment_variables = environment_variables
        return refreshed_environment_variables

    @classmethod
    def clear_cache(cls):
        """Clear the cached environment variables to force refresh on next access"""
        global refreshed_environment_variables
        refreshed_environment_variables = None
