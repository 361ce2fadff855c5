"""Judge model providers -- OpenAI, Anthropic, or a custom dotted path."""

from evalstudio.judge.providers.base import (
    BaseProvider,
    JudgeRequest,
    ProviderResponse,
    ToolCall,
)
from evalstudio.judge.providers.registry import BUILTIN_PROVIDERS, get_provider

__all__ = [
    "BUILTIN_PROVIDERS",
    "BaseProvider",
    "JudgeRequest",
    "ProviderResponse",
    "ToolCall",
    "get_provider",
]
