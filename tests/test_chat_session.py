import asyncio
import json

import httpx
import pytest

from gcpal.chat_session import ChatCompletionSession
from gcpal.errors import RequestCancelledError, RequestFailedError

URL = "https://example.test/v1/chat/completions"
HEADERS = {"Content-Type": "application/json", "Authorization": "Bearer k"}
PAYLOAD = {"model": "m", "messages": [{"role": "user", "content": "hi"}], "stream": False}


def _session(handler) -> ChatCompletionSession:
    return ChatCompletionSession(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
async def test_post_chat_sends_headers_and_json_body():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert str(request.url) == URL
        assert request.headers["authorization"] == "Bearer k"
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == PAYLOAD
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    s = _session(handler)
    try:
        data = await s.post_chat(URL, headers=HEADERS, payload=PAYLOAD)
        assert data == {"choices": [{"message": {"content": "ok"}}]}
    finally:
        await s.close()


@pytest.mark.asyncio
async def test_non_success_status_raises_request_failed_without_retry():
    calls = {"n": 0}

    def handler(_: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(401, json={"error": {"message": "bad key"}})

    s = _session(handler)
    try:
        with pytest.raises(RequestFailedError) as exc:
            await s.post_chat(URL, headers=HEADERS, payload=PAYLOAD)
        assert exc.value.status_code == 401
        assert exc.value.status_text == "Unauthorized"
        assert "401" in str(exc.value)
        assert calls["n"] == 1
    finally:
        await s.close()


@pytest.mark.asyncio
async def test_5xx_is_not_retried():
    calls = {"n": 0}

    def handler(_: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(503, text="overloaded")

    s = _session(handler)
    try:
        with pytest.raises(RequestFailedError) as exc:
            await s.post_chat(URL, headers=HEADERS, payload=PAYLOAD)
        assert exc.value.status_code == 503
        assert calls["n"] == 1
    finally:
        await s.close()


@pytest.mark.asyncio
async def test_non_json_success_body_raises_request_failed():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    s = _session(handler)
    try:
        with pytest.raises(RequestFailedError) as exc:
            await s.post_chat(URL, headers=HEADERS, payload=PAYLOAD)
        assert exc.value.status_code == 200
        assert "not valid JSON" in str(exc.value)
    finally:
        await s.close()


@pytest.mark.asyncio
async def test_transport_errors_propagate_unchanged():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    s = _session(handler)
    try:
        with pytest.raises(httpx.ConnectError):
            await s.post_chat(URL, headers=HEADERS, payload=PAYLOAD)
    finally:
        await s.close()


@pytest.mark.asyncio
async def test_cancel_event_aborts_in_flight_request():
    started = asyncio.Event()

    async def handler(_: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(30)
        return httpx.Response(200, json={})

    s = _session(handler)
    cancel = asyncio.Event()

    async def _cancel_once_started() -> None:
        await started.wait()
        cancel.set()

    try:
        canceller = asyncio.create_task(_cancel_once_started())
        with pytest.raises(RequestCancelledError):
            await asyncio.wait_for(s.post_chat(URL, headers=HEADERS, payload=PAYLOAD, cancel_event=cancel), 5)
        await canceller
    finally:
        await s.close()


@pytest.mark.asyncio
async def test_cancel_event_already_set_sends_nothing():
    calls = {"n": 0}

    def handler(_: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(200, json={})

    s = _session(handler)
    cancel = asyncio.Event()
    cancel.set()
    try:
        with pytest.raises(RequestCancelledError):
            await s.post_chat(URL, headers=HEADERS, payload=PAYLOAD, cancel_event=cancel)
        assert calls["n"] == 0
    finally:
        await s.close()


@pytest.mark.asyncio
async def test_unset_cancel_event_does_not_interfere():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": []})

    s = _session(handler)
    try:
        data = await s.post_chat(URL, headers=HEADERS, payload=PAYLOAD, cancel_event=asyncio.Event())
        assert data == {"choices": []}
    finally:
        await s.close()


def _pending_tasks() -> list[asyncio.Task]:
    current = asyncio.current_task()
    return [t for t in asyncio.all_tasks() if t is not current and not t.done()]


@pytest.mark.asyncio
async def test_cancellable_post_leaves_no_pending_tasks():
    started = asyncio.Event()

    async def slow(_: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(30)
        return httpx.Response(200, json={})

    def fast(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": []})

    s = _session(fast)
    try:
        await s.post_chat(URL, headers=HEADERS, payload=PAYLOAD, cancel_event=asyncio.Event())
        assert _pending_tasks() == []
    finally:
        await s.close()

    s = _session(slow)
    cancel = asyncio.Event()

    async def _cancel_once_started() -> None:
        await started.wait()
        cancel.set()

    try:
        canceller = asyncio.create_task(_cancel_once_started())
        with pytest.raises(RequestCancelledError):
            await s.post_chat(URL, headers=HEADERS, payload=PAYLOAD, cancel_event=cancel)
        await canceller
        assert _pending_tasks() == []
    finally:
        await s.close()
