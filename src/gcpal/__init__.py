from .chat_session import ChatCompletionSession
from .client import CompletionClient
from .config import AssistantConfig, ConfigProvider, EnvConfigProvider, StaticConfigProvider
from .context import build_completion_prompt, gather_context
from .contracts import CompletionRequest, InlineCompletionItem, Position, Range
from .endpoints import KNOWN_PROVIDERS, ProviderEndpoint, ProviderSpec, resolve_endpoint
from .errors import GcpalError, MissingCredentialError, RequestCancelledError, RequestFailedError, TransportError
from .handlers import ask_command, provide_inline_completions
from .openai_compat import build_headers, build_payload, extract_completion_text

__all__ = [
    "AssistantConfig",
    "ChatCompletionSession",
    "CompletionClient",
    "CompletionRequest",
    "ConfigProvider",
    "EnvConfigProvider",
    "GcpalError",
    "InlineCompletionItem",
    "KNOWN_PROVIDERS",
    "MissingCredentialError",
    "Position",
    "ProviderEndpoint",
    "ProviderSpec",
    "Range",
    "RequestCancelledError",
    "RequestFailedError",
    "StaticConfigProvider",
    "TransportError",
    "ask_command",
    "build_completion_prompt",
    "build_headers",
    "build_payload",
    "extract_completion_text",
    "gather_context",
    "provide_inline_completions",
    "resolve_endpoint",
]
