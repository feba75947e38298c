from typing import Literal

import httpx
from httpx import ConnectError, HTTPStatusError, Limits, Timeout, TimeoutException

from textscope.adapters.http.port import HttpPort
from textscope.config.environment_variables import EnvironmentVariables
from textscope.utils.logging import make_logger

logger = make_logger(__name__)

DEFAULT_LIMITS = Limits(
    max_keepalive_connections=20,
    max_connections=100,
    keepalive_expiry=30,  # Seconds to keep connections alive
)


class HttpxGateway(HttpPort):
    def __init__(
        self,
        environment_variables: EnvironmentVariables,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize with environment variables for configuration.

        `transport` replaces the network layer, e.g. httpx.ASGITransport to call an
        in-process app.
        """
        self._environment_variables = environment_variables
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None:
            env = self._environment_variables
            timeout = Timeout(
                connect=env.HTTPX_CONNECT_TIMEOUT,
                read=env.HTTPX_READ_TIMEOUT,
                write=env.HTTPX_WRITE_TIMEOUT,
                pool=env.HTTPX_POOL_TIMEOUT,
            )
            self._client = httpx.AsyncClient(
                limits=DEFAULT_LIMITS,
                timeout=timeout,
                transport=self._transport,
                follow_redirects=True,
            )
            logger.debug(f"Created httpx client (id: {id(self._client)})")
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug("Closed httpx client")

    async def async_call(
        self,
        method: Literal["GET", "POST"],
        url: str,
        payload: dict | None = None,
        default_headers: dict | None = None,
    ) -> httpx.Response:
        """Make an async HTTP call and return the successful response.

        Raises HTTPStatusError for 4xx/5xx responses; the response stays reachable
        through the exception.
        """
        client = self._get_client()

        try:
            logger.debug(f"Making {method} request to {url}")
            response = await client.request(
                method=method,
                url=url,
                json=payload,
                headers=default_headers,
            )
            response.raise_for_status()
            logger.debug(
                f"Successful {method} request to {url}, status: {response.status_code}"
            )
            return response

        except HTTPStatusError as e:
            logger.warning(f"HTTP error {e.response.status_code} for {method} {url}")
            raise
        except ConnectError as e:
            logger.error(f"Connection error for {method} {url}: {e}")
            raise
        except TimeoutException as e:
            logger.error(f"Timeout error for {method} {url}: {e}")
            raise
        except Exception as e:
            logger.error(
                f"Unexpected error during {method} request to {url}: {e}", exc_info=True
            )
            raise
