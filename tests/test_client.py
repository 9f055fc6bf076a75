import httpx
import pytest

from gcpal.contracts import CompletionRequest
from gcpal.errors import MissingCredentialError, RequestFailedError


def _request(**overrides) -> CompletionRequest:
    fields = dict(
        api_key="sk-test",
        provider_id="openrouter",
        model_id="m1",
        system_prompt="sys",
        user_prompt="hi",
    )
    fields.update(overrides)
    return CompletionRequest(**fields)


@pytest.mark.asyncio
async def test_complete_posts_to_resolved_endpoint_and_returns_text(client, upstream):
    upstream.content = "hello"
    out = await client.complete(_request())
    assert out == "hello"
    req = upstream.requests[0]
    assert str(req.url) == "https://openrouter.ai/api/v1/chat/completions"
    assert req.headers["authorization"] == "Bearer sk-test"
    assert req.headers["x-title"] == "GCpal"
    assert upstream.last_body["model"] == "m1"
    assert upstream.last_body["stream"] is False


@pytest.mark.asyncio
async def test_complete_with_literal_url_provider(client, upstream):
    url = "https://custom.example/v1/chat/completions"
    await client.complete(_request(provider_id=url))
    req = upstream.requests[0]
    assert str(req.url) == url
    assert "http-referer" not in req.headers
    assert "x-title" not in req.headers


@pytest.mark.asyncio
async def test_complete_without_api_key_makes_no_request(client, upstream):
    with pytest.raises(MissingCredentialError):
        await client.complete(_request(api_key=""))
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_complete_returns_empty_string_when_no_choices(client, upstream):
    upstream.response = httpx.Response(200, json={"choices": []})
    assert await client.complete(_request()) == ""


@pytest.mark.asyncio
async def test_complete_propagates_request_failed(client, upstream):
    upstream.response = httpx.Response(401, json={"error": "nope"})
    with pytest.raises(RequestFailedError) as exc:
        await client.complete(_request())
    assert exc.value.status_code == 401


def test_request_repr_hides_api_key():
    assert "sk-test" not in repr(_request())
