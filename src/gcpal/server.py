from __future__ import annotations

import os
from collections.abc import Sequence
from contextlib import asynccontextmanager

from .client import CompletionClient
from .config import AssistantConfig, ConfigProvider, EnvConfigProvider
from .contracts import Position
from .handlers import ask_command, provide_inline_completions
from .http_security import install_middlewares
from .logging import configure_logging
from .metrics import maybe_start_metrics, server_errors_total, server_requests_total
from .server_models import (
    AskRequest,
    AskResponse,
    InlineCompletionItemModel,
    InlineCompletionRequest,
    InlineCompletionResponse,
)


class _DocumentHost:
    def __init__(self, lines: Sequence[str], position: Position):
        self._lines = lines
        self._position = position

    def cursor_position(self) -> Position:
        return self._position

    def document_lines(self) -> Sequence[str]:
        return self._lines


class _QuestionHost:
    """Answers the input prompt with the posted question and records the message shown."""

    def __init__(self, question: str):
        self._question = question
        self.response = AskResponse()

    async def prompt_input(self, prompt: str) -> str | None:
        return self._question

    async def show_info(self, message: str) -> None:
        self.response = AskResponse(level="info", message=message)

    async def show_error(self, message: str) -> None:
        self.response = AskResponse(level="error", message=message)


def create_app(
    cfg: AssistantConfig | None = None,
    client: CompletionClient | None = None,
    config_provider: ConfigProvider | None = None,
):
    try:
        from fastapi import FastAPI
    except ImportError as e:  # pragma: no cover
        raise RuntimeError('Install the "server" extra: pip install -e ".[server]"') from e

    cfg = cfg or AssistantConfig()
    configure_logging(
        level=cfg.log_level,
        fmt=cfg.log_format,
        secrets=[s for s in (cfg.api_key, cfg.server_auth_token) if s],
    )
    # Settings are re-read per request unless a fixed config was supplied.
    config_provider = config_provider or EnvConfigProvider()
    client = client or CompletionClient(timeout_seconds=cfg.timeout_seconds)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        maybe_start_metrics(enable=cfg.enable_metrics, bind=cfg.metrics_bind, port=cfg.metrics_port)
        try:
            yield
        finally:
            await client.close()

    app = FastAPI(
        title="gcpal",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    install_middlewares(app, cfg=cfg)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/v1/inline-completions", response_model=InlineCompletionResponse)
    async def inline_completions(req: InlineCompletionRequest) -> InlineCompletionResponse:
        host = _DocumentHost(req.lines, Position(line=req.line, character=req.character))
        items = await provide_inline_completions(host, config_provider, client)
        server_requests_total.labels(path="/v1/inline-completions", status="200").inc()
        return InlineCompletionResponse(items=[InlineCompletionItemModel.from_item(i) for i in items])

    @app.post("/v1/ask", response_model=AskResponse)
    async def ask(req: AskRequest) -> AskResponse:
        host = _QuestionHost(req.question)
        await ask_command(host, config_provider, client)
        if host.response.level == "error":
            server_errors_total.labels(type="ask_error").inc()
        server_requests_total.labels(path="/v1/ask", status="200").inc()
        return host.response

    return app


app = create_app()


def main() -> None:  # pragma: no cover
    try:
        import uvicorn
    except ImportError as e:
        raise RuntimeError('Install the "server" extra: pip install -e ".[server]"') from e

    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8765"))
    uvicorn.run("gcpal.server:app", host=host, port=port)


if __name__ == "__main__":  # pragma: no cover
    main()
