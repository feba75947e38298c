from fastapi import APIRouter, Request

from textscope.api.schemas.text_analysis import (
    ErrorResponse,
    LengthResponse,
    VowelCountResponse,
)
from textscope.config.dependencies import DServerTracer
from textscope.domain.use_cases.text_analysis_use_case import DTextAnalysisUseCase
from textscope.utils.logging import make_logger

logger = make_logger(__name__)

router = APIRouter(tags=["Text Analysis"])

ERROR_RESPONSES = {400: {"model": ErrorResponse}}


def is_json_content_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    return content_type.split(";", 1)[0].strip().lower() == "application/json"


async def read_raw_text(request: Request) -> str:
    """
    Take `text` from the JSON body of a POST, falling back to the query string.
    Only application/json bodies are parsed; a malformed one raises and is treated
    as an unexpected failure.
    """
    if (
        request.method == "POST"
        and is_json_content_type(request.headers.get("content-type"))
        and await request.body()
    ):
        payload = await request.json()
        if isinstance(payload, dict) and isinstance(payload.get("text"), str):
            return payload["text"]
    text = request.query_params.get("text")
    return text if isinstance(text, str) else ""


@router.api_route(
    "/length",
    methods=["GET", "POST"],
    response_model=LengthResponse,
    responses=ERROR_RESPONSES,
)
async def get_length(
    request: Request,
    server_tracer: DServerTracer,
    text_analysis_use_case: DTextAnalysisUseCase,
) -> LengthResponse:
    """
    Count the characters of the submitted text
    """
    with server_tracer.start_request_span(
        request.method, "/length", request.headers
    ) as span:
        text = text_analysis_use_case.validate(await read_raw_text(request))
        length = text_analysis_use_case.length(text)
        span.set_attribute("text.length", length)
    return LengthResponse(length=length)


@router.api_route(
    "/num_vowels",
    methods=["GET", "POST"],
    response_model=VowelCountResponse,
    responses=ERROR_RESPONSES,
)
async def get_vowel_count(
    request: Request,
    server_tracer: DServerTracer,
    text_analysis_use_case: DTextAnalysisUseCase,
) -> VowelCountResponse:
    """
    Count the vowels of the submitted text
    """
    with server_tracer.start_request_span(
        request.method, "/num_vowels", request.headers
    ) as span:
        text = text_analysis_use_case.validate(await read_raw_text(request))
        vowel_count = text_analysis_use_case.vowel_count(text)
        span.set_attribute("text.length", len(text))
        span.set_attribute("vowel.count", vowel_count)
    return VowelCountResponse(vowel_count=vowel_count)
