from collections.abc import Callable

from opentelemetry.sdk.trace.export import SpanExportResult
from pydantic import Field

from textscope.utils.model_utils import BaseModel


class ExportResult(BaseModel):
    code: SpanExportResult = Field(
        ...,
        title="SUCCESS or FAILURE",
    )
    error: str | None = Field(
        None,
        title="Why the export failed, when it did",
    )

    @property
    def succeeded(self) -> bool:
        return self.code == SpanExportResult.SUCCESS

    @classmethod
    def success(cls) -> "ExportResult":
        return cls(code=SpanExportResult.SUCCESS)

    @classmethod
    def failure(cls, error: str) -> "ExportResult":
        return cls(code=SpanExportResult.FAILURE, error=error)


ExportCallback = Callable[[ExportResult], None]
