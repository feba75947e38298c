class GenericException(Exception):
    message: str
    code: int = 500  # Default code is 500
    detail: str = None

    def __init__(
        self, message: str, code: int = None, detail: str | list[str] | None = None
    ):
        self.message = message
        if code is not None:
            self.code = code
        if detail is not None:
            self.detail = detail

    def __str__(self):
        return self.message

    def __repr__(self):
        return f"{self.__class__.__name__}: {self.message}"


class ClientError(GenericException):
    """
    Raised when a client error occurs. Use this as an exception base class for all client
    exceptions.
    """

    code: int = 400


class ServiceError(GenericException):
    """
    Raised when an error that is not caused by bad user input occurs within the service
    """

    code: int = 500


class TextValidationError(ClientError):
    """
    Raised when the submitted text is empty after sanitization or exceeds the maximum length.
    The message is safe to return to the caller.
    """


class RequestHandlingError(ClientError):
    """
    Raised in place of an unexpected failure inside a traced request. Carries a generic
    message so no internal detail reaches the caller.
    """

    GENERIC_MESSAGE = "Invalid input"

    def __init__(self, detail: str | None = None):
        super().__init__(self.GENERIC_MESSAGE, detail=detail)
