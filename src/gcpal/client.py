from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping

import structlog

from .chat_session import ChatCompletionSession
from .contracts import CompletionRequest
from .endpoints import ProviderSpec, resolve_endpoint
from .errors import MissingCredentialError
from .metrics import request_latency_seconds, requests_total
from .openai_compat import build_headers, build_payload, extract_completion_text

log = structlog.get_logger()


class CompletionClient:
    """The single request path shared by the inline and ask entry points."""

    def __init__(
        self,
        session: ChatCompletionSession | None = None,
        *,
        timeout_seconds: float = 60,
        providers: Mapping[str, ProviderSpec] | None = None,
    ):
        self.session = session or ChatCompletionSession(timeout_seconds=timeout_seconds)
        self._providers = providers

    async def close(self) -> None:
        await self.session.close()

    async def complete(self, request: CompletionRequest, *, cancel_event: asyncio.Event | None = None) -> str:
        if not request.api_key:
            raise MissingCredentialError("No API key configured.")

        endpoint = resolve_endpoint(request.provider_id, providers=self._providers)
        headers = build_headers(request.api_key, endpoint)
        payload = build_payload(request)

        start = time.time()
        try:
            with request_latency_seconds.labels(provider=endpoint.name).time():
                data = await self.session.post_chat(
                    endpoint.url,
                    headers=headers,
                    payload=payload,
                    cancel_event=cancel_event,
                )
        except Exception as e:
            requests_total.labels(provider=endpoint.name, status="error").inc()
            log.warning(
                "completion_failed",
                provider=endpoint.name,
                model=request.model_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        text = extract_completion_text(data)
        requests_total.labels(provider=endpoint.name, status="success" if text else "empty").inc()
        log.debug(
            "completion_ok",
            provider=endpoint.name,
            model=request.model_id,
            prompt_chars=len(request.system_prompt) + len(request.user_prompt),
            completion_chars=len(text),
            latency_seconds=round(time.time() - start, 3),
        )
        return text
