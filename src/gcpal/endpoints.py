from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

CUSTOM_PROVIDER = "custom"


@dataclass(frozen=True)
class ProviderSpec:
    url: str
    extra_headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ProviderEndpoint:
    name: str
    url: str
    extra_headers: Mapping[str, str] = field(default_factory=dict)


KNOWN_PROVIDERS: Mapping[str, ProviderSpec] = {
    "openrouter": ProviderSpec(
        url="https://openrouter.ai/api/v1/chat/completions",
        extra_headers={
            "HTTP-Referer": "github.com/developer-mohanaditya/gcpal",
            "X-Title": "GCpal",
        },
    ),
    "together": ProviderSpec(url="https://api.together.xyz/v1/chat/completions"),
}


def resolve_endpoint(provider_id: str, *, providers: Mapping[str, ProviderSpec] | None = None) -> ProviderEndpoint:
    """
    Map a provider identifier to its chat-completions endpoint.

    Known short names match case-insensitively. Anything else is taken as a
    literal URL of an OpenAI-compatible endpoint and is never validated here;
    a bad URL fails at the transport instead.
    """
    table = KNOWN_PROVIDERS if providers is None else providers
    key = provider_id.strip().lower()
    spec = table.get(key)
    if spec is None:
        return ProviderEndpoint(name=CUSTOM_PROVIDER, url=provider_id)
    return ProviderEndpoint(name=key, url=spec.url, extra_headers=dict(spec.extra_headers))
