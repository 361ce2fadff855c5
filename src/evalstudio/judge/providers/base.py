"""BaseProvider ABC and the request/response dataclasses of a judge call.

These are plain dataclasses (not Pydantic); they never leave the
process.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ToolCall:
    """A tool invocation extracted from the model response."""

    name: str
    arguments: dict[str, Any]


@dataclass
class JudgeRequest:
    """One forced-tool judge call."""

    system: str
    user: str
    tool: dict[str, Any]
    model: str
    temperature: float | None = None
    max_tokens: int | None = None


@dataclass
class ProviderResponse:
    content: str | None
    tool_calls: list[ToolCall] = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0


class BaseProvider(ABC):
    """Abstract base class for judge model providers.

    Subclasses send a JudgeRequest that forces a call to ``request.tool``
    and normalize the answer into a ProviderResponse.
    """

    @abstractmethod
    async def complete(self, request: JudgeRequest) -> ProviderResponse:
        """Send one request and return the normalized response."""

    def provider_name(self) -> str:
        return type(self).__name__
