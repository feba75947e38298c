from textscope.domain.exceptions import ServiceError


class SinkClosedError(ServiceError):
    """
    Raised when a span sink is written to after it was closed. This means the host
    kept exporting after shutdown, which is a configuration error.
    """
