from __future__ import annotations

import asyncio

import httpx
import structlog

from .client import CompletionClient
from .config import ConfigProvider
from .context import build_completion_prompt, gather_context
from .contracts import CompletionRequest, InlineCompletionItem, Range
from .errors import GcpalError
from .hosts import CommandHost, CompletionHost

log = structlog.get_logger()

# InvalidURL is not an httpx.HTTPError; a bad literal provider URL raises it at send time.
_REQUEST_ERRORS = (GcpalError, httpx.HTTPError, httpx.InvalidURL)

INLINE_SYSTEM_PROMPT = (
    "You are an AI coding assistant. Complete the user's code based on the provided context. "
    "Only output the code continuation without explanations."
)
ASK_SYSTEM_PROMPT = "You are a helpful coding assistant."
ASK_INPUT_PROMPT = "Ask GCpal"
MISSING_KEY_MESSAGE = "Please set gcpal.apiKey in settings."


async def provide_inline_completions(
    host: CompletionHost,
    config_provider: ConfigProvider,
    client: CompletionClient,
    *,
    cancel_event: asyncio.Event | None = None,
) -> list[InlineCompletionItem]:
    try:
        cfg = config_provider.get_config()
    except ValueError as e:
        log.warning("inline_completion_config_invalid", error=str(e), error_type=type(e).__name__)
        return []
    if not cfg.has_api_key():
        return []

    position = host.cursor_position()
    snippet = gather_context(
        host.document_lines(),
        position.line,
        max_lines=cfg.context_max_lines,
        max_line_chars=cfg.context_max_line_chars,
        max_total_chars=cfg.context_max_total_chars,
        cursor_character=position.character,
    )
    request = CompletionRequest(
        api_key=cfg.api_key,
        provider_id=cfg.provider,
        model_id=cfg.model,
        system_prompt=INLINE_SYSTEM_PROMPT,
        user_prompt=build_completion_prompt(snippet),
    )

    # Never let a broken network disturb editing.
    try:
        completion = await client.complete(request, cancel_event=cancel_event)
    except _REQUEST_ERRORS as e:
        log.warning("inline_completion_failed", error=str(e), error_type=type(e).__name__)
        return []

    text = completion.strip()
    if not text:
        return []
    return [InlineCompletionItem(insert_text=text, range=Range.empty_at(position))]


async def ask_command(host: CommandHost, config_provider: ConfigProvider, client: CompletionClient) -> None:
    question = await host.prompt_input(ASK_INPUT_PROMPT)
    if not question:
        return

    try:
        cfg = config_provider.get_config()
    except ValueError as e:
        log.warning("ask_command_config_invalid", error=str(e), error_type=type(e).__name__)
        await host.show_error(f"Error: {e}")
        return
    if not cfg.has_api_key():
        await host.show_error(MISSING_KEY_MESSAGE)
        return

    request = CompletionRequest(
        api_key=cfg.api_key,
        provider_id=cfg.provider,
        model_id=cfg.model,
        system_prompt=ASK_SYSTEM_PROMPT,
        user_prompt=question,
    )
    try:
        answer = await client.complete(request)
    except _REQUEST_ERRORS as e:
        log.warning("ask_command_failed", error=str(e), error_type=type(e).__name__)
        await host.show_error(f"Error: {e}")
        return
    await host.show_info(answer)
