import asyncio
from typing import Any

import httpx
from opentelemetry.trace import SpanKind
from pydantic import Field

from textscope.adapters.http.port import HttpPort, Method
from textscope.domain.entities.spans import SpanEntity
from textscope.domain.services.client_tracer import ClientTracer
from textscope.utils.logging import make_logger
from textscope.utils.model_utils import BaseModel

logger = make_logger(__name__)

GENERIC_REQUEST_ERROR = "Request failed"


class AnalysisRequestError(Exception):
    """The server answered with an error status; the message is the server's."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AnalysisResult(BaseModel):
    length: int | None = Field(None, title="Character count, when /length succeeded")
    vowel_count: int | None = Field(
        None, title="Vowel count, when /num_vowels succeeded"
    )
    length_error: str | None = Field(None, title="Why /length failed")
    vowel_error: str | None = Field(None, title="Why /num_vowels failed")

    @property
    def ok(self) -> bool:
        return self.length_error is None and self.vowel_error is None

    @property
    def partial(self) -> bool:
        return (self.length_error is None) != (self.vowel_error is None)


def error_message_from_response(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return GENERIC_REQUEST_ERROR
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return GENERIC_REQUEST_ERROR


def set_response_attributes(span: SpanEntity, response: httpx.Response) -> None:
    span.set_attribute("http.status_code", response.status_code)
    span.set_attribute("http.status_text", response.reason_phrase)


def describe_failure(failure: BaseException) -> str:
    if isinstance(failure, AnalysisRequestError):
        return failure.message
    message = str(failure)
    return f"{GENERIC_REQUEST_ERROR}: {message}" if message else GENERIC_REQUEST_ERROR


class TextAnalysisClient:
    """
    Sends one text to both analysis endpoints concurrently and combines the answers.
    Every call runs inside a CLIENT span whose context travels in the traceparent
    header, so the server spans join the same trace.
    """

    def __init__(self, gateway: HttpPort, tracer: ClientTracer, base_url: str):
        self.gateway = gateway
        self.tracer = tracer
        self.base_url = base_url.rstrip("/")

    async def _fetch(
        self,
        span_name: str,
        route: str,
        text: str,
        parent: SpanEntity,
        result_key: str,
    ) -> Any:
        url = f"{self.base_url}{route}"
        with self.tracer.start_as_current_span(
            span_name,
            kind=SpanKind.CLIENT,
            parent=parent,
            attributes={"http.method": Method.POST.value, "http.url": url},
        ) as span:
            headers = self.tracer.inject(span, {"Content-Type": "application/json"})
            try:
                response = await self.gateway.async_call(
                    Method.POST.value,
                    url,
                    payload={"text": text},
                    default_headers=headers,
                )
            except httpx.HTTPStatusError as e:
                set_response_attributes(span, e.response)
                raise AnalysisRequestError(
                    error_message_from_response(e.response), e.response.status_code
                ) from e
            set_response_attributes(span, response)
            ClientTracer.mark_outcome(span, ok=True)
            return response.json()[result_key]

    async def analyze(self, text: str) -> AnalysisResult:
        """
        Never raises for a failed call: each endpoint's error is reported in its own
        field of the result.
        """
        with self.tracer.start_as_current_span(
            "form_submit", attributes={"user_input_length": len(text)}
        ) as form_span:
            length_outcome, vowel_outcome = await asyncio.gather(
                self._fetch("fetch_length_api", "/length", text, form_span, "length"),
                self._fetch(
                    "fetch_vowels_api", "/num_vowels", text, form_span, "vowel_count"
                ),
                return_exceptions=True,
            )

            result = AnalysisResult()
            if isinstance(length_outcome, BaseException):
                result.length_error = describe_failure(length_outcome)
            else:
                result.length = length_outcome
            if isinstance(vowel_outcome, BaseException):
                result.vowel_error = describe_failure(vowel_outcome)
            else:
                result.vowel_count = vowel_outcome

            form_span.set_attribute(
                "result_length", "error" if result.length_error else result.length
            )
            form_span.set_attribute(
                "result_vowels", "error" if result.vowel_error else result.vowel_count
            )
            ClientTracer.mark_outcome(
                form_span,
                ok=result.ok,
                message=None if result.ok else "one or more requests failed",
            )

        if not result.ok:
            logger.warning(
                f"Analysis finished with errors: length={result.length_error!r} "
                f"vowels={result.vowel_error!r}"
            )
        return result
