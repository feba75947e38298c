from pydantic import Field

from textscope.utils.model_utils import BaseModel


class LengthResponse(BaseModel):
    length: int = Field(
        ...,
        title="Number of characters in the sanitized text",
    )


class VowelCountResponse(BaseModel):
    vowel_count: int = Field(
        ...,
        title="Number of a/e/i/o/u characters, case-insensitive",
    )


class ErrorResponse(BaseModel):
    error: str = Field(
        ...,
        title="Human-readable reason the request was rejected",
    )
