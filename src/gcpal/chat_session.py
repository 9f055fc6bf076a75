from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from .errors import RequestCancelledError, RequestFailedError

log = structlog.get_logger()


class ChatCompletionSession:
    """
    One-shot POST transport for OpenAI-compatible chat-completion endpoints.

    No retries: a non-2xx status becomes RequestFailedError and httpx
    transport errors propagate untouched.
    """

    def __init__(self, *, client: httpx.AsyncClient | None = None, timeout_seconds: float = 60):
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    async def post_chat(
        self,
        url: str,
        *,
        headers: Mapping[str, str],
        payload: Mapping[str, Any],
        cancel_event: asyncio.Event | None = None,
    ) -> Any:
        if cancel_event is None:
            resp = await self._client.post(url, headers=dict(headers), json=dict(payload))
        else:
            resp = await self._post_cancellable(url, headers=headers, payload=payload, cancel_event=cancel_event)

        if not resp.is_success:
            log.warning("chat_upstream_error", url=url, status_code=resp.status_code, body=resp.text[:500])
            raise RequestFailedError(resp.status_code, resp.reason_phrase)

        try:
            return json.loads(resp.content)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RequestFailedError(
                resp.status_code,
                resp.reason_phrase,
                message=f"API response with status {resp.status_code} was not valid JSON.",
            ) from e

    async def _post_cancellable(
        self,
        url: str,
        *,
        headers: Mapping[str, str],
        payload: Mapping[str, Any],
        cancel_event: asyncio.Event,
    ) -> httpx.Response:
        if cancel_event.is_set():
            raise RequestCancelledError("Request cancelled before it was sent.")

        request_task = asyncio.ensure_future(self._client.post(url, headers=dict(headers), json=dict(payload)))
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({request_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            # Also reached when the awaiting task itself is cancelled.
            cancel_task.cancel()
            if not request_task.done():
                request_task.cancel()
            await asyncio.gather(request_task, cancel_task, return_exceptions=True)

        if request_task.cancelled():
            log.debug("chat_request_cancelled", url=url)
            raise RequestCancelledError("Request cancelled by caller.")
        return request_task.result()
