from abc import ABC, abstractmethod
from enum import Enum


class SinkState(str, Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


class SpanSink(ABC):
    @property
    @abstractmethod
    def state(self) -> SinkState:
        pass

    @abstractmethod
    def write(self, text: str) -> None:
        """
        Append text to the sink, opening it on first use.
        """
        pass

    @abstractmethod
    def flush(self) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Release the sink. Terminal: later writes raise SinkClosedError.
        """
        pass
