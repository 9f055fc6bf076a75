import json

import httpx
import pytest
import pytest_asyncio

from gcpal.chat_session import ChatCompletionSession
from gcpal.client import CompletionClient


class RecordingUpstream:
    """httpx mock handler that records requests and replies with a canned response."""

    def __init__(self, response: httpx.Response | None = None, content: str = "ok"):
        self.response = response
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.response is not None:
            return self.response
        return httpx.Response(200, json={"choices": [{"message": {"content": self.content}}]})

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def upstream() -> RecordingUpstream:
    return RecordingUpstream()


@pytest_asyncio.fixture
async def client(upstream):
    c = CompletionClient(
        ChatCompletionSession(client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)))
    )
    yield c
    await c.close()
