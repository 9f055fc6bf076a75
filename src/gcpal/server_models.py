from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from .contracts import InlineCompletionItem


class PositionModel(BaseModel):
    line: int = Field(ge=0)
    character: int = Field(ge=0)


class RangeModel(BaseModel):
    start: PositionModel
    end: PositionModel


class InlineCompletionRequest(BaseModel):
    lines: list[str]
    line: int = Field(ge=0)
    character: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _validate_cursor_in_document(self) -> "InlineCompletionRequest":
        if self.line >= len(self.lines):
            raise ValueError("line must index into lines.")
        return self


class InlineCompletionItemModel(BaseModel):
    insert_text: str
    range: RangeModel

    @classmethod
    def from_item(cls, item: InlineCompletionItem) -> "InlineCompletionItemModel":
        return cls(
            insert_text=item.insert_text,
            range=RangeModel(
                start=PositionModel(line=item.range.start.line, character=item.range.start.character),
                end=PositionModel(line=item.range.end.line, character=item.range.end.character),
            ),
        )


class InlineCompletionResponse(BaseModel):
    items: list[InlineCompletionItemModel]


class AskRequest(BaseModel):
    question: str


class AskResponse(BaseModel):
    level: Literal["info", "error", "none"] = "none"
    message: str | None = None


class ErrorDetail(BaseModel):
    message: str
    type: str = "api_error"
    code: str | None = None


class ErrorResponse(BaseModel):
    error: ErrorDetail


def make_error_response(*, message: str, type: str = "api_error", code: str | None = None) -> ErrorResponse:
    return ErrorResponse(error=ErrorDetail(message=message, type=type, code=code))
