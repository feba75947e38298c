from abc import ABC, abstractmethod
from enum import Enum
from typing import Literal

import httpx


class Method(str, Enum):
    GET = "GET"
    POST = "POST"


class HttpPort(ABC):
    @abstractmethod
    async def async_call(
        self,
        method: Literal["GET", "POST"],
        url: str,
        payload: dict | None = None,
        default_headers: dict | None = None,
    ) -> httpx.Response:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass
