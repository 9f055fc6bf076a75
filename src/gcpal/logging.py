from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping, MutableMapping
from typing import Any, TypeAlias, cast

import structlog


_SENSITIVE_KEYS = {
    "authorization",
    "api_key",
    "apikey",
    "server_auth_token",
    "x-api-key",
}

_SENSITIVE_FRAGMENTS = ("key", "token", "secret")

_BEARER_RE = re.compile(r"(?i)\bBearer\s+([A-Za-z0-9._-]{6,})")

REDACTED = "[REDACTED]"

ProcessorReturn: TypeAlias = Mapping[str, Any] | str | bytes | bytearray | tuple[Any, ...]
Processor: TypeAlias = Callable[[Any, str, MutableMapping[str, Any]], ProcessorReturn]


def _is_sensitive_key(key: Any) -> bool:
    name = str(key).lower()
    return name in _SENSITIVE_KEYS or any(f in name for f in _SENSITIVE_FRAGMENTS)


def redact(value: Any, *, secrets: list[str]) -> Any:
    """Mask configured secrets, bearer tokens and secret-looking keys in a log value."""
    if isinstance(value, str):
        out = value
        for secret in secrets:
            if secret and secret in out:
                out = out.replace(secret, REDACTED)
        return _BEARER_RE.sub(f"Bearer {REDACTED}", out)
    if isinstance(value, list):
        return [redact(v, secrets=secrets) for v in value]
    if isinstance(value, tuple):
        return tuple(redact(v, secrets=secrets) for v in value)
    if isinstance(value, dict):
        return {
            k: REDACTED if _is_sensitive_key(k) else redact(v, secrets=secrets)
            for k, v in value.items()
        }
    return value


def make_redaction_processor(*, secrets: list[str]) -> Processor:
    secrets_norm = [s for s in secrets if isinstance(s, str) and s]

    def _processor(_logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]) -> ProcessorReturn:
        return cast(dict[str, Any], redact(dict(event_dict), secrets=secrets_norm))

    return _processor


def configure_logging(level: str = "INFO", fmt: str = "json", *, secrets: list[str] | None = None) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=log_level)

    processors: list[Processor] = [
        cast(Processor, structlog.contextvars.merge_contextvars),
        cast(Processor, structlog.processors.add_log_level),
        cast(Processor, structlog.processors.TimeStamper(fmt="iso")),
    ]

    if fmt == "json":
        # Tracebacks are rendered to text first so the redaction pass covers them.
        processors.append(cast(Processor, structlog.processors.format_exc_info))
    processors.append(make_redaction_processor(secrets=secrets or []))

    if fmt == "json":
        processors.append(cast(Processor, structlog.processors.JSONRenderer()))
    else:
        processors.append(cast(Processor, structlog.dev.ConsoleRenderer()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )
