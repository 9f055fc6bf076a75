from __future__ import annotations

import os
from typing import Protocol

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()

DEFAULT_PROVIDER = "openrouter"
DEFAULT_MODEL = "mistralai/mistral-7b-instruct"


def _env_number(name: str, default, parse):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        log.warning("config_value_invalid", name=name, value=raw, default=default)
        return default


def _env_int(name: str, default: int) -> int:
    return _env_number(name, default, int)


def _env_float(name: str, default: float) -> float:
    return _env_number(name, default, float)


def _optional_int(name: str, default: int | None) -> int | None:
    value = os.getenv(name)
    if value is not None and value.strip().lower() in ("", "none"):
        return None
    return _env_number(name, default, int)


class AssistantConfig(BaseModel):
    # Credentials and routing
    api_key: str | None = Field(default_factory=lambda: os.getenv("GCPAL_API_KEY"))
    provider: str = Field(default_factory=lambda: os.getenv("GCPAL_PROVIDER") or DEFAULT_PROVIDER)
    model: str = Field(default_factory=lambda: os.getenv("GCPAL_MODEL") or DEFAULT_MODEL)

    # HTTP behavior
    timeout_seconds: float = Field(default_factory=lambda: _env_float("GCPAL_TIMEOUT_SECONDS", 60.0))

    # Context window
    context_max_lines: int = Field(default_factory=lambda: _env_int("GCPAL_CONTEXT_MAX_LINES", 20))
    context_max_line_chars: int | None = Field(
        default_factory=lambda: _optional_int("GCPAL_CONTEXT_MAX_LINE_CHARS", 2000)
    )
    context_max_total_chars: int | None = Field(
        default_factory=lambda: _optional_int("GCPAL_CONTEXT_MAX_TOTAL_CHARS", 16000)
    )

    # Observability
    enable_metrics: bool = Field(
        default_factory=lambda: os.getenv("ENABLE_METRICS", "false").lower() == "true"
    )
    metrics_bind: str = Field(default_factory=lambda: os.getenv("METRICS_BIND", "127.0.0.1"))
    metrics_port: int = Field(default_factory=lambda: _env_int("METRICS_PORT", 9110))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = Field(default_factory=lambda: os.getenv("LOG_FORMAT", "json"))

    # Sidecar server
    server_auth_token: str | None = Field(default_factory=lambda: os.getenv("SERVER_AUTH_TOKEN"))
    max_request_body_bytes: int = Field(
        default_factory=lambda: _env_int("MAX_REQUEST_BODY_BYTES", 1024 * 1024)
    )

    def has_api_key(self) -> bool:
        return bool(self.api_key)


class ConfigProvider(Protocol):
    def get_config(self) -> AssistantConfig:
        ...


class EnvConfigProvider:
    """Reads the environment on every call so edits take effect without a restart."""

    def get_config(self) -> AssistantConfig:
        return AssistantConfig()


class StaticConfigProvider:
    def __init__(self, cfg: AssistantConfig):
        self._cfg = cfg

    def get_config(self) -> AssistantConfig:
        return self._cfg
