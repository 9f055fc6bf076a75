from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CompletionRequest:
    api_key: str
    provider_id: str
    model_id: str
    system_prompt: str
    user_prompt: str

    def __repr__(self) -> str:
        return (
            f"CompletionRequest(provider_id={self.provider_id!r}, model_id={self.model_id!r}, "
            f"system_prompt_chars={len(self.system_prompt)}, user_prompt_chars={len(self.user_prompt)})"
        )


@dataclass(frozen=True)
class Position:
    line: int
    character: int


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position

    @classmethod
    def empty_at(cls, position: Position) -> "Range":
        return cls(start=position, end=position)


@dataclass(frozen=True)
class InlineCompletionItem:
    insert_text: str
    range: Range
