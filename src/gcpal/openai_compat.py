from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Literal

from pydantic import BaseModel

from .contracts import CompletionRequest
from .endpoints import ProviderEndpoint


class ChatMessage(BaseModel):
    role: Literal["system", "user"]
    content: str


class ChatCompletionRequest(BaseModel):
    model: str
    messages: list[ChatMessage]
    stream: Literal[False] = False


def build_chat_request(request: CompletionRequest) -> ChatCompletionRequest:
    return ChatCompletionRequest(
        model=request.model_id,
        messages=[
            ChatMessage(role="system", content=request.system_prompt),
            ChatMessage(role="user", content=request.user_prompt),
        ],
    )


def build_payload(request: CompletionRequest) -> dict[str, Any]:
    return build_chat_request(request).model_dump()


def build_headers(api_key: str, endpoint: ProviderEndpoint) -> dict[str, str]:
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }
    headers.update(endpoint.extra_headers)
    return headers


def extract_completion_text(data: Any) -> str:
    """Return the first choice's message content, or "" when the body carries none."""
    if not isinstance(data, Mapping):
        return ""
    choices = data.get("choices")
    if isinstance(choices, (str, bytes)) or not isinstance(choices, Sequence) or not choices:
        return ""
    choice = choices[0]
    if not isinstance(choice, Mapping):
        return ""
    message = choice.get("message")
    if not isinstance(message, Mapping):
        return ""
    content = message.get("content")
    return content if isinstance(content, str) else ""
