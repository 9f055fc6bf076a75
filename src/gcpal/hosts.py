"""Capabilities an editor integration supplies to the entry points."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .config import ConfigProvider
from .contracts import Position


class CompletionHost(Protocol):
    def cursor_position(self) -> Position:
        ...

    def document_lines(self) -> Sequence[str]:
        ...


class CommandHost(Protocol):
    async def prompt_input(self, prompt: str) -> str | None:
        ...

    async def show_info(self, message: str) -> None:
        ...

    async def show_error(self, message: str) -> None:
        ...


__all__ = ["CommandHost", "CompletionHost", "ConfigProvider"]
